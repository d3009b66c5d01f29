"""
ORM model base class with dirty tracking.

Manifesto:
    A model holds two maps keyed by column name: the current values and the
    originals (the snapshot taken when the row was loaded or last written).
    Persistence writes only the difference, and targets the row through its
    primary key, or its first unique column when there is no primary key.

    - **Explicit access:** ``get(col)`` / ``set(col, value)``, no attribute magic
    - **Strict types:** ``integer`` is ``int``, ``double`` is ``float``,
      ``string`` is ``str``, ``binary`` is ``bytes``; equality is value *and* type
    - **Lifecycle hooks:** ``on_construct``, ``on_load``, ``before_query``,
      ``after_query``

Architecture:
    ::

        OrmModel(table)           OrmModel(table, row)
              │                          │
        on_construct()             on_construct()
              │                    _populate(row)  ─► originals snapshot
              │                    on_load()
              ▼                          ▼
           set(col, value) ... changes() = {col: current != original}
                                         │
                               model.query().save()/insert()/update()/delete()
                                         │ success
                                         ▼
                              originals := written values, after_query()

Examples:
    >>> user = users.model()
    >>> user.set("email", "a@b.c").set("status", "active")
    >>> user.changes()
    {'email': 'a@b.c', 'status': 'active'}
    >>> user.query().insert()

Tags:
    orm, model, dirty-tracking, persistence, quarry
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from quarry.core.errors import ORMModelPopulateError
from quarry.schema.columns import TableColumn

if TYPE_CHECKING:
    from quarry.orm.model_query import ModelQuery
    from quarry.schema.table import BoundDbTable

ColumnValue = int | float | str | bytes | None


class OrmModel:
    """Row object bound to a table.

    Args:
        table: The bound table this model belongs to
        row: Row to populate from; every column of the table must be present
    """

    def __init__(self, table: BoundDbTable, row: Mapping[str, Any] | None = None):
        self._bound = table
        self._props: dict[str, ColumnValue] = {}
        self._originals: dict[str, ColumnValue] = {}

        self.on_construct()
        if row:
            self._populate(row)
            self.on_load()

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on_construct(self) -> None:
        """Called first thing in the constructor."""

    def on_load(self) -> None:
        """Called after the model was populated from a row."""

    def before_query(self) -> None:
        """Called before a save/insert/update/delete statement is built."""

    def after_query(self) -> None:
        """Called after a save/insert/update/delete succeeded."""

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------

    @property
    def bound(self) -> BoundDbTable:
        return self._bound

    @property
    def model_name(self) -> str:
        return type(self).__name__

    def get(self, col: str) -> ColumnValue:
        self._bound.col(col)
        return self._props.get(col)

    def set(self, col: str, value: ColumnValue) -> OrmModel:
        """Set a column value (validated on :meth:`changes`)."""
        self._bound.col(col)
        self._props[col] = value
        return self

    def has(self, col: str) -> bool:
        """True once ``col`` was set or loaded."""
        return col in self._props

    def original(self, col: str | None = None) -> Any:
        """Original value of ``col``, or a copy of every original."""
        if col is not None:
            return self._originals.get(col)
        return dict(self._originals)

    def to_dict(self) -> dict[str, ColumnValue]:
        return {name: self._props.get(name) for name in self._bound.table.columns.names()}

    # ------------------------------------------------------------------
    # Dirty tracking
    # ------------------------------------------------------------------

    def primary_col(self) -> TableColumn | None:
        """Declared primary key, else the first unique column, else ``None``."""
        columns = self._bound.table.columns
        if columns.primary:
            return columns.get(columns.primary)
        for column in columns:
            if "unique" in column.attrs:
                return column
        return None

    def changes(self) -> dict[str, ColumnValue]:
        """Columns whose current value differs from the original.

        Every set or loaded value is validated first. A column with no
        original is included once it holds a value; otherwise a column is
        included when its value or its type changed. Columns never set nor
        loaded are skipped.

        Raises:
            ORMValidationError: If a value breaks its column's contract.
        """
        changes: dict[str, ColumnValue] = {}
        for column in self._bound.table.columns:
            name = column.name
            if name not in self._props and name not in self._originals:
                continue

            current = self._props.get(name)
            original = self._originals.get(name)
            self._bound.validate_column_value_type(column, current)

            if original is None:
                if current is not None:
                    changes[name] = current
            elif not (type(current) is type(original) and current == original):
                changes[name] = current
        return changes

    def query(self) -> ModelQuery:
        """A one-shot persistence query for this model."""
        from quarry.orm.model_query import ModelQuery

        return ModelQuery(self)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _populate(self, row: Mapping[str, Any]) -> None:
        for column in self._bound.table.columns:
            name = column.name
            if name not in row:
                raise ORMModelPopulateError(
                    f'No value for column "{self._bound.name}.{name}" in input row'
                ).with_context(table=self._bound.name, column=name, model=self.model_name)

            value = column.load_value(row[name])
            self._props[name] = value
            self._originals[name] = value

    def _mark_persisted(self, values: Mapping[str, ColumnValue]) -> None:
        """Adopt ``values`` as both current and original after a write."""
        for name, value in values.items():
            self._props[name] = value
            self._originals[name] = value

    def __repr__(self) -> str:
        return f"{self.model_name}({self.to_dict()!r})"


__all__ = ["ColumnValue", "OrmModel"]
