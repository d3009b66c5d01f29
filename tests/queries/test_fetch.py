"""Tests for ResultCursor."""

from __future__ import annotations

import pytest

from quarry.core.errors import QueryFetchError
from quarry.queries.executed import ExecutedQuery
from quarry.queries.fetch import ResultCursor
from tests._support.fakes import FakeCursor, FakeDriverError


def _result(**kwargs) -> ResultCursor:
    return ResultCursor(ExecutedQuery("SELECT * FROM t", rows=2), FakeCursor(**kwargs))


class TestResultCursor:
    def test_rows_are_dicts_in_column_order(self) -> None:
        result = _result(rows=[(1, "a"), (2, "b")], columns=["id", "name"])
        row = result.next()
        assert row == {"id": 1, "name": "a"}
        assert list(row) == ["id", "name"]
        assert result.all() == [{"id": 2, "name": "b"}]

    def test_next_returns_none_when_exhausted(self) -> None:
        result = _result(rows=[], columns=["id"])
        assert result.next() is None
        assert result.row() is None

    def test_iteration(self) -> None:
        result = _result(rows=[(1,), (2,)], columns=["id"])
        assert [row["id"] for row in result] == [1, 2]

    def test_count_is_the_native_row_count(self) -> None:
        assert _result(rows=[(1,)], columns=["id"]).count() == 2

    def test_fetch_failure(self) -> None:
        result = _result(columns=["id"], fetch_error=FakeDriverError("lost connection"))
        with pytest.raises(QueryFetchError) as exc_info:
            result.all()
        assert exc_info.value.query is result.query
        assert isinstance(exc_info.value.__cause__, FakeDriverError)

        with pytest.raises(QueryFetchError):
            result.next()

    def test_close(self) -> None:
        cursor = FakeCursor()
        ResultCursor(ExecutedQuery("SELECT 1"), cursor).close()
        assert cursor.closed
