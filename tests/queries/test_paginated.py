"""Tests for Paginated and CompactNav."""

from __future__ import annotations

from quarry.queries.executed import ExecutedQuery
from quarry.queries.fetch import ResultCursor
from quarry.queries.paginated import CompactNav, Paginated
from tests._support.fakes import FakeCursor


def _fetched(count: int) -> ResultCursor:
    return ResultCursor(
        ExecutedQuery("SELECT id FROM t"),
        FakeCursor(rows=[(i,) for i in range(count)], columns=["id"]),
    )


class TestPaginated:
    def test_page_count_rounds_up(self) -> None:
        assert Paginated(None, 250, 0, 100).page_count == 3
        assert Paginated(None, 200, 0, 100).page_count == 2
        assert Paginated(None, 0, 0, 100).page_count == 0

    def test_rows_and_pages(self) -> None:
        page = Paginated(_fetched(10), 25, 10, 10)
        assert page.count == len(page) == 10
        assert page.rows[0] == {"id": 0}
        assert page.pages == [
            {"index": 1, "start": 0},
            {"index": 2, "start": 10},
            {"index": 3, "start": 20},
        ]

    def test_no_rows_without_cursor_or_total(self) -> None:
        assert Paginated(None, 25, 0, 10).rows == []
        empty = Paginated(_fetched(3), 0, 0, 10)
        assert empty.rows == []
        assert empty.pages == []

    def test_compact_nav_is_cached(self) -> None:
        page = Paginated(None, 1000, 500, 10, compact_nav_window=2)
        nav = page.compact_nav()
        assert nav == CompactNav(first=1, last=100, current=51, pages=[49, 50, 51, 52, 53])
        assert page.compact_nav(left_right_pages=10) is nav

    def test_compact_nav_explicit_window(self) -> None:
        page = Paginated(None, 50, 0, 10)
        assert page.compact_nav(1).pages == [1, 2]

    def test_to_dict(self) -> None:
        page = Paginated(_fetched(2), 2, 0, 10)
        assert page.to_dict() == {
            "total_rows": 2,
            "count": 2,
            "rows": [{"id": 0}, {"id": 1}],
            "start": 0,
            "per_page": 10,
            "page_count": 1,
            "compact_nav": None,
            "pages": None,
        }
        page.compact_nav()
        data = page.to_dict(include_pages=True)
        assert data["pages"] == [{"index": 1, "start": 0}]
        assert data["compact_nav"] == {"first": 1, "last": 1, "current": 1, "pages": [1]}


class TestCompactNav:
    def test_window_is_clipped(self) -> None:
        nav = CompactNav.build(start=0, per_page=10, page_count=3, window=5)
        assert nav.current == 1
        assert nav.pages == [1, 2, 3]

    def test_current_beyond_last_page(self) -> None:
        nav = CompactNav.build(start=500, per_page=10, page_count=3, window=1)
        assert nav.current == 3
        assert nav.pages == [2, 3]
