"""Fluent query builder.

A builder accumulates one logical query (table, WHERE clause and its
parameters, projection, order, window, lock) and hands the rendered SQL to
the database's executor. Identifiers are quoted by the driver dialect and
every value travels as a bound parameter; only LIMIT integers are inlined.

Examples:
    >>> rows = (
    ...     db.query()
    ...     .table("users")
    ...     .where("`status`=:status", {"status": "active"})
    ...     .desc("id")
    ...     .limit(10)
    ...     .fetch()
    ...     .all()
    ... )

    >>> db.query().table("users").find({"email": "a@b.c"}).update({"status": "banned"})
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from quarry.core.dialect import compile_placeholders
from quarry.core.errors import QueryBuilderError
from quarry.queries.paginated import Paginated

if TYPE_CHECKING:
    from quarry.database import Database
    from quarry.queries.executed import ExecutedQuery
    from quarry.queries.fetch import ResultCursor

NO_WHERE = "1"
UPDATE_WHERE_PREFIX = "__"


class QueryBuilder:
    """One query being assembled against a :class:`~quarry.database.Database`.

    Setters return the builder. ``throw_on_fail`` defaults to ``True`` and
    is changed through :meth:`options`.
    """

    def __init__(self, db: Database):
        self._db = db
        self._table = ""
        self._where = NO_WHERE
        self._data: Mapping[Any, Any] | Sequence[Any] = {}
        self._columns = "*"
        self._lock = False
        self._order = ""
        self._start: int | None = None
        self._limit: int | None = None
        self._throw_on_fail = True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def options(self, throw_on_fail: bool | None = None) -> QueryBuilder:
        if throw_on_fail is not None:
            self._throw_on_fail = throw_on_fail
        return self

    def table(self, name: str) -> QueryBuilder:
        self._table = name.strip()
        return self

    def where(
        self, clause: str, data: Mapping[Any, Any] | Sequence[Any] | None = None
    ) -> QueryBuilder:
        """Replace the WHERE clause and its parameters."""
        self._where = clause
        self._data = data if data is not None else {}
        return self

    def find(self, cols: Mapping[Any, Any]) -> QueryBuilder:
        """Match every string key by equality (``AND``); other keys are skipped."""
        q = self._db.dialect.quote
        data = {key: value for key, value in cols.items() if isinstance(key, str)}
        self._where = " AND ".join(f"{q(key)}=:{key}" for key in data) or NO_WHERE
        self._data = data
        return self

    def cols(self, *cols: str) -> QueryBuilder:
        """Projection; names with parentheses (``count(*)``) are used as written."""
        q = self._db.dialect.quote
        self._columns = ",".join(
            col.strip() if ("(" in col or ")" in col) else q(col.strip()) for col in cols
        )
        return self

    def lock(self) -> QueryBuilder:
        """Lock selected rows (``FOR UPDATE``)."""
        self._lock = True
        return self

    def asc(self, *cols: str) -> QueryBuilder:
        self._order = self._order_clause(cols, "ASC")
        return self

    def desc(self, *cols: str) -> QueryBuilder:
        self._order = self._order_clause(cols, "DESC")
        return self

    def _order_clause(self, cols: Sequence[str], direction: str) -> str:
        q = self._db.dialect.quote
        return " ORDER BY {} {}".format(",".join(q(col.strip()) for col in cols), direction)

    def start(self, offset: int) -> QueryBuilder:
        self._start = offset
        return self

    def limit(self, count: int) -> QueryBuilder:
        self._limit = count
        return self

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def insert(self, assoc: Mapping[Any, Any]) -> ExecutedQuery:
        """``INSERT INTO table (cols) VALUES (:cols)``.

        Raises:
            QueryBuilderError: If any key is not a column name.
        """
        if not all(isinstance(key, str) for key in assoc):
            raise QueryBuilderError("INSERT query cannot accept indexed array")

        q = self._db.dialect.quote
        cols = ",".join(q(key) for key in assoc)
        params = ",".join(f":{key}" for key in assoc)
        query = f"INSERT INTO {q(self._table)} ({cols}) VALUES ({params})"
        return self._db.exec(query, dict(assoc), self._throw_on_fail)

    def update(self, assoc: Mapping[Any, Any]) -> ExecutedQuery:
        """``UPDATE table SET col=:col ... WHERE clause``.

        WHERE parameters are renamed with a ``__`` prefix so they cannot
        collide with SET parameters; callers must not use ``__``-prefixed
        keys in ``assoc`` that would shadow them.

        Raises:
            QueryBuilderError: Without a WHERE clause, with indexed SET keys,
                with positional WHERE parameters or on a parameter collision.
        """
        if self._where == NO_WHERE:
            raise QueryBuilderError("UPDATE query requires WHERE clause")
        if not all(isinstance(key, str) for key in assoc):
            raise QueryBuilderError("UPDATE query cannot accept indexed array")

        where_data = self._data
        if not isinstance(where_data, Mapping) or not all(
            isinstance(key, str) for key in where_data
        ):
            raise QueryBuilderError("WHERE clause for UPDATE query requires named parameters")

        query_data: dict[str, Any] = dict(assoc)
        for key, value in where_data.items():
            prefixed = UPDATE_WHERE_PREFIX + key.lstrip(":")
            if prefixed in query_data:
                raise QueryBuilderError(
                    f'UPDATE query parameter "{prefixed}" collides with a WHERE parameter'
                )
            query_data[prefixed] = value

        where = compile_placeholders(
            self._where, positional=None, named=":" + UPDATE_WHERE_PREFIX + "{name}"
        ).sql

        q = self._db.dialect.quote
        set_clause = ", ".join(f"{q(key)}=:{key}" for key in assoc)
        query = f"UPDATE {q(self._table)} SET {set_clause} WHERE {where}"
        return self._db.exec(query, query_data, self._throw_on_fail)

    def delete(self) -> ExecutedQuery:
        """``DELETE FROM table WHERE clause``.

        Raises:
            QueryBuilderError: Without a WHERE clause.
        """
        if self._where == NO_WHERE:
            raise QueryBuilderError("DELETE query requires WHERE clause")

        query = f"DELETE FROM {self._db.dialect.quote(self._table)} WHERE {self._where}"
        return self._db.exec(query, self._data, self._throw_on_fail)

    def _where_sql(self) -> str:
        if self._where == NO_WHERE:
            return self._db.dialect.true_literal()
        return self._where

    def _select_sql(self) -> str:
        dialect = self._db.dialect
        return (
            f"SELECT {self._columns} FROM {dialect.quote(self._table)} WHERE {self._where_sql()}"
            f"{self._order}"
            f"{dialect.limit_clause(self._start or 0, self._limit or 0)}"
            f"{dialect.lock_clause() if self._lock else ''}"
        )

    def fetch(self) -> ResultCursor:
        """Run the SELECT and return its cursor."""
        return self._db.fetch(self._select_sql(), self._data, self._throw_on_fail)

    def paginate(self) -> Paginated:
        """Count matching rows, then fetch one page window.

        ``start`` defaults to 0 and the page size to the configured
        ``default_per_page`` (100). Zero matching rows still yield a
        :class:`Paginated` with no rows.

        The ``count(*)`` query always raises on failure; ``throw_on_fail``
        from :meth:`options` only applies to the page fetch.
        """
        from quarry.core.settings import get_settings

        settings = get_settings()
        start = self._start or 0
        per_page = self._limit or settings.default_per_page
        dialect = self._db.dialect
        table = dialect.quote(self._table)
        where = self._where_sql()

        count_rows = self._db.fetch(
            f"SELECT count(*) FROM {table} WHERE {where}", self._data
        ).all()
        total_rows = int(next(iter(count_rows[0].values()), 0) or 0) if count_rows else 0

        fetched = None
        if total_rows:
            rows_query = (
                f"SELECT {self._columns} FROM {table} WHERE {where}{self._order}"
                f"{dialect.limit_clause(start, per_page)}"
            )
            fetched = self._db.fetch(rows_query, self._data, self._throw_on_fail)

        return Paginated(
            fetched,
            total_rows,
            start,
            per_page,
            compact_nav_window=settings.compact_nav_window,
        )


__all__ = ["QueryBuilder"]
