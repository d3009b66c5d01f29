"""Per-database log of executed statements."""

from __future__ import annotations

from collections.abc import Iterator

from quarry.queries.executed import ExecutedQuery


class QueryLog:
    """Append-only, ordered record of every :class:`ExecutedQuery`.

    Failed statements are logged too. The log grows until :meth:`flush`.
    """

    def __init__(self) -> None:
        self._queries: list[ExecutedQuery] = []

    def append(self, query: ExecutedQuery) -> int:
        """Add ``query``; returns the new count."""
        self._queries.append(query)
        return len(self._queries)

    def last(self) -> ExecutedQuery | None:
        return self._queries[-1] if self._queries else None

    def flush(self) -> None:
        self._queries.clear()

    def count(self) -> int:
        return len(self._queries)

    def __len__(self) -> int:
        return len(self._queries)

    def __iter__(self) -> Iterator[ExecutedQuery]:
        return iter(list(self._queries))

    def __getitem__(self, index: int) -> ExecutedQuery:
        return self._queries[index]


__all__ = ["QueryLog"]
