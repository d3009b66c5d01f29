"""Paginated SELECT results and compact page navigation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from quarry.queries.fetch import ResultCursor, Row


@dataclass(frozen=True)
class CompactNav:
    """
    A bounded window of page indices around the current page.

    Attributes:
        first: First page index (always 1)
        last: Last page index (``page_count``)
        current: Page that contains ``start``
        pages: Page indices from ``current - window`` to ``current + window``,
            clipped to ``[first, last]``
    """

    first: int
    last: int
    current: int
    pages: list[int] = field(default_factory=list)

    @classmethod
    def build(cls, start: int, per_page: int, page_count: int, window: int) -> CompactNav:
        current = start // per_page + 1 if per_page else 1
        if page_count:
            current = min(max(current, 1), page_count)
        low = max(1, current - window)
        high = min(page_count, current + window)
        return cls(first=1, last=page_count, current=current, pages=list(range(low, high + 1)))

    def to_dict(self) -> dict[str, Any]:
        return {"first": self.first, "last": self.last, "current": self.current, "pages": self.pages}


class Paginated:
    """
    One page of a paginated SELECT.

    ``page_count`` is ``ceil(total_rows / per_page)``. The 1-based ``pages``
    index (``{"index", "start"}`` per page) is built here, once, and only
    when there are rows and a cursor to read them from.

    Examples:
        >>> p = Paginated(None, total_rows=250, start=0, per_page=100)
        >>> p.page_count
        3
    """

    def __init__(
        self,
        fetched: ResultCursor | None,
        total_rows: int,
        start: int,
        per_page: int,
        *,
        compact_nav_window: int = 5,
    ):
        self.total_rows = total_rows
        self.start = start
        self.per_page = per_page
        self.page_count = int(math.ceil(total_rows / per_page))
        self.rows: list[Row] = []
        self.pages: list[dict[str, int]] = []
        self._compact_nav_window = compact_nav_window
        self._compact: CompactNav | None = None

        if fetched is not None and total_rows:
            self.rows = fetched.all()
            self.pages = [
                {"index": i + 1, "start": i * per_page} for i in range(self.page_count)
            ]

    @property
    def count(self) -> int:
        """Rows on this page."""
        return len(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def compact_nav(self, left_right_pages: int | None = None) -> CompactNav:
        """Navigation window around the current page.

        Computed on the first call and cached: later calls return the same
        object even when ``left_right_pages`` differs.
        """
        if self._compact is None:
            window = self._compact_nav_window if left_right_pages is None else left_right_pages
            self._compact = CompactNav.build(self.start, self.per_page, self.page_count, window)
        return self._compact

    def to_dict(self, include_pages: bool = False) -> dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "count": self.count,
            "rows": self.rows,
            "start": self.start,
            "per_page": self.per_page,
            "page_count": self.page_count,
            "compact_nav": self._compact.to_dict() if self._compact else None,
            "pages": self.pages if include_pages else None,
        }


__all__ = ["CompactNav", "Paginated"]
