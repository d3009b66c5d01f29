"""Row access over an executed SELECT."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from quarry.core.errors import QueryFetchError
from quarry.core.protocols import DBAPICursor
from quarry.queries.executed import ExecutedQuery

Row = dict[str, Any]


class ResultCursor:
    """
    Wraps an :class:`ExecutedQuery` and the live cursor that produced it.

    Rows come back as ``{column: value}`` dicts in the column order of the
    result set. ``count()`` is the driver's row count for the statement;
    several drivers report ``0`` for SELECTs, so use ``len(cursor.all())``
    when the number of fetched rows matters.

    Usage:
        for row in db.fetch("SELECT * FROM users"):
            print(row["email"])
    """

    def __init__(self, query: ExecutedQuery, cursor: DBAPICursor):
        self.query = query
        self._cursor = cursor
        self._rows = query.rows
        self._columns: list[str] | None = None

    def count(self) -> int:
        return self._rows

    def _column_names(self) -> list[str]:
        if self._columns is None:
            description = self._cursor.description or ()
            self._columns = [str(col[0]) for col in description]
        return self._columns

    def _to_row(self, values: Any) -> Row:
        return dict(zip(self._column_names(), values))

    def next(self) -> Row | None:
        """Next row, or ``None`` once the result set is exhausted."""
        try:
            values = self._cursor.fetchone()
        except Exception as e:
            raise QueryFetchError(self.query, cause=e) from e
        if values is None:
            return None
        return self._to_row(values)

    def row(self) -> Row | None:
        """Alias of :meth:`next`."""
        return self.next()

    def all(self) -> list[Row]:
        """Every remaining row.

        Raises:
            QueryFetchError: If the driver fails while fetching.
        """
        try:
            rows = self._cursor.fetchall()
        except Exception as e:
            raise QueryFetchError(self.query, cause=e) from e
        return [self._to_row(values) for values in rows]

    def __iter__(self) -> Iterator[Row]:
        while (row := self.next()) is not None:
            yield row

    def close(self) -> None:
        self._cursor.close()


__all__ = ["ResultCursor", "Row"]
