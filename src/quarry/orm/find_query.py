"""Find ORM models by column match or a hand-written WHERE clause."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from quarry.core.errors import ORMError, ORMModelNotFoundError, QuarryError

if TYPE_CHECKING:
    from quarry.orm.model import OrmModel
    from quarry.schema.table import BoundDbTable

_WHERE_PREFIX = re.compile(r"^where\s", re.IGNORECASE)


class FindQuery:
    """
    SELECT on a bound table that returns ORM models.

    Either match columns by equality (``col``/``match``, ``None`` renders
    ``IS NULL``) or pass a WHERE clause with its parameters (``query``).

    Examples:
        >>> users.find().col("status", "active").desc("id").limit(10).all()
        >>> users.find().query("WHERE `email` LIKE ?", ["%@example.com"]).first()
    """

    def __init__(self, table: BoundDbTable):
        self.table = table
        self._match: dict[str, Any] = {}
        self._where: str | None = None
        self._data: Mapping[Any, Any] | Sequence[Any] = {}
        self._order: tuple[str, str] | None = None
        self._limit: int | None = None

    def col(self, col: str, value: Any) -> FindQuery:
        """Match one column."""
        return self.match({col: value})

    def match(self, cols: Mapping[Any, Any]) -> FindQuery:
        """Match every column in ``cols`` by equality (replaces any previous match)."""
        match: dict[str, Any] = {}
        for key, value in cols.items():
            if not isinstance(key, str):
                raise ORMError("All column names must be of type string").with_context(
                    table=self.table.name
                )
            self.table.validate_column_value_type(self.table.col(key), value)
            match[key] = value

        self._match = match
        self._where = None
        return self

    def query(
        self, where_query: str, data: Mapping[Any, Any] | Sequence[Any] | None = None
    ) -> FindQuery:
        """Use a WHERE clause of your own; it must start with ``WHERE``."""
        where_query = where_query.strip()
        if not _WHERE_PREFIX.match(where_query):
            raise ORMError('Query must start with "WHERE"').with_context(table=self.table.name)

        self._where = where_query[6:].strip()
        self._data = data if data is not None else {}
        self._match = {}
        return self

    def asc(self, col: str) -> FindQuery:
        self._order = (self.table.col(col).name, "ASC")
        return self

    def desc(self, col: str) -> FindQuery:
        self._order = (self.table.col(col).name, "DESC")
        return self

    def limit(self, limit: int) -> FindQuery:
        if limit < 1:
            raise ORMError("Invalid limit value").with_context(table=self.table.name)
        self._limit = limit
        return self

    def _where_clause(self) -> tuple[str, Mapping[Any, Any] | Sequence[Any]]:
        if self._where is not None:
            return self._where, self._data

        if not self._match:
            raise ORMError("Cannot build query; No columns to match").with_context(
                table=self.table.name
            )

        q = self.table.db.dialect.quote
        clauses: list[str] = []
        params: list[Any] = []
        for col, value in self._match.items():
            if value is None:
                clauses.append(f"{q(col)} IS NULL")
            else:
                clauses.append(f"{q(col)}=?")
                params.append(value)
        return " AND ".join(clauses), params

    def all(self) -> list[OrmModel]:
        """Every matching row as a model.

        Raises:
            ORMModelNotFoundError: If no row matches.
        """
        label = f"{self.table.db.credentials.dbname}.{self.table.name}"
        if self.table.table.orm_class is None:
            raise ORMError(f'ORM models class not defined for "{label}" table').with_context(
                table=self.table.name
            )

        where, data = self._where_clause()
        builder = self.table.db.query().table(self.table.name).where(where, data)
        if self._order is not None:
            col, direction = self._order
            builder = builder.asc(col) if direction == "ASC" else builder.desc(col)
        if self._limit is not None:
            builder = builder.limit(self._limit)

        try:
            rows = builder.fetch().all()
        except QuarryError as e:
            raise ORMError(e.message, cause=e).with_context(table=self.table.name) from e

        if not rows:
            raise ORMModelNotFoundError(f'No matching row found in "{label}"').with_context(
                table=self.table.name
            )
        return [self.table.model(row) for row in rows]

    def first(self) -> OrmModel:
        self._limit = 1
        return self.all()[0]


__all__ = ["FindQuery"]
