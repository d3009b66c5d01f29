"""
Table declarations and their binding to a database.

A table is declared once by subclassing :class:`AbstractDbTable`; binding
it to a :class:`~quarry.database.Database` (through
:meth:`quarry.schema.registry.Schema.bind`) yields a :class:`BoundDbTable`,
the object the ORM and the migration writer work with.

Examples:
    >>> class UsersTable(AbstractDbTable):
    ...     name = "users"
    ...     orm_class = User
    ...
    ...     def structure(self, cols, constraints):
    ...         cols.int("id").bytes(8).unsigned().auto_increment()
    ...         cols.string("email").length(128).unique()
    ...         cols.primary_key("id")
    ...
    >>> users = db.schema.bind(UsersTable)
    >>> users.col("email").data_type
    'string'

Tags:
    schema, table, orm, binding, quarry
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from quarry.core.errors import ORMError, ORMValidationError, SchemaError
from quarry.schema.columns import BINARY, DOUBLE, INTEGER, STRING, Columns, TableColumn
from quarry.schema.constraints import Constraints

if TYPE_CHECKING:
    from quarry.database import Database
    from quarry.orm.find_query import FindQuery
    from quarry.orm.model import OrmModel
    from quarry.schema.migration import Migration


class AbstractDbTable(ABC):
    """
    Declarative table definition.

    Subclasses set ``name`` (and optionally ``engine`` and ``orm_class``) and
    implement :meth:`structure`. :meth:`on_construct` runs before
    :meth:`structure`.
    """

    name: ClassVar[str] = ""
    engine: ClassVar[str] = "InnoDB"
    orm_class: ClassVar[type[OrmModel] | None] = None

    def __init__(self) -> None:
        from quarry.orm.model import OrmModel

        cls_name = type(self).__name__
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError(f'Invalid table name for table "{cls_name}"')
        if not isinstance(self.engine, str) or not self.engine:
            raise SchemaError(f'Invalid engine for table "{cls_name}"')
        if self.orm_class is not None and not (
            inspect.isclass(self.orm_class) and issubclass(self.orm_class, OrmModel)
        ):
            raise SchemaError(f'ORM class for table "{cls_name}" is not a subclass of OrmModel')

        self.columns = Columns()
        self.constraints = Constraints()
        self.on_construct()
        self.structure(self.columns, self.constraints)

    def on_construct(self) -> None:
        """Hook called before :meth:`structure`."""

    @abstractmethod
    def structure(self, cols: Columns, constraints: Constraints) -> None:
        """Declare columns, the primary key and constraints."""


class BoundDbTable:
    """A table declaration bound to the database it lives in."""

    def __init__(self, db: Database, table: AbstractDbTable):
        self.db = db
        self.table = table

    @property
    def name(self) -> str:
        return self.table.name

    def col(self, name: str) -> TableColumn:
        """Column ``name``.

        Raises:
            ORMError: If the table has no such column.
        """
        column = self.table.columns.get(name)
        if column is None:
            raise ORMError(f'Column "{name}" not found in "{self.name}" table').with_context(
                table=self.name, column=name
            )
        return column

    def validate_column_value_type(self, col: TableColumn, value: Any) -> None:
        """Check ``value`` against the column's nullability and data type.

        ``integer`` accepts ``int`` (not ``bool``), ``double`` accepts
        ``float``, ``string`` accepts ``str`` and ``binary`` accepts ``bytes``;
        nothing is coerced.

        Raises:
            ORMValidationError: On NULL for a non-nullable column or a type mismatch.
        """
        if value is None:
            if not col.is_nullable:
                raise ORMValidationError(
                    f'Column "{self.name}.{col.name}" cannot be NULL'
                ).with_context(table=self.name, column=col.name)
            return

        if not _matches_data_type(col.data_type, value):
            raise ORMValidationError(
                f'Column "{self.name}.{col.name}" expects value of type "{col.data_type}", '
                f'got "{type(value).__name__}"'
            ).with_context(table=self.name, column=col.name)

    def model(self, row: Mapping[str, Any] | None = None) -> OrmModel:
        """Instantiate the table's ORM class, populated from ``row`` if given."""
        orm_class = self.table.orm_class
        if orm_class is None:
            raise ORMError(f'No ORM class defined for "{self.name}" table').with_context(
                table=self.name
            )
        return orm_class(self, row)

    def find(self, match: Mapping[str, Any] | None = None) -> FindQuery:
        """Start a find query, optionally matching ``match`` columns."""
        from quarry.orm.find_query import FindQuery

        query = FindQuery(self)
        return query.match(match) if match else query

    def migration(self) -> Migration:
        from quarry.schema.migration import Migration

        return Migration(self)

    def __repr__(self) -> str:
        return (
            f"BoundDbTable(db={self.db.credentials.host}@{self.db.credentials.dbname}, "
            f"table={self.name})"
        )


def _matches_data_type(data_type: str, value: Any) -> bool:
    if data_type == INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if data_type == DOUBLE:
        return isinstance(value, float)
    if data_type == STRING:
        return isinstance(value, str)
    if data_type == BINARY:
        return isinstance(value, bytes)
    return False


__all__ = ["AbstractDbTable", "BoundDbTable"]
