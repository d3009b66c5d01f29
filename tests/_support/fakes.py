"""In-memory DB-API doubles for driver error paths."""

from __future__ import annotations

from typing import Any

from quarry.database import Database
from quarry.server.credentials import DbCredentials


class FakeDriverError(Exception):
    """Shaped like a mysql-connector error."""

    def __init__(self, msg: str, errno: int = 1064, sqlstate: str = "42000"):
        super().__init__(msg)
        self.msg = msg
        self.errno = errno
        self.sqlstate = sqlstate


class FakeCursor:
    def __init__(
        self,
        rows: list[tuple[Any, ...]] | None = None,
        columns: list[str] | None = None,
        rowcount: int = 1,
        execute_error: Exception | None = None,
        fetch_error: Exception | None = None,
        lastrowid: Any = None,
    ):
        self._rows = list(rows or [])
        self.description = [(name,) for name in columns] if columns else None
        self.rowcount = rowcount
        self.execute_error = execute_error
        self.fetch_error = fetch_error
        self.lastrowid = lastrowid
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    def execute(self, operation: str, parameters: Any = None) -> Any:
        self.calls.append((operation, parameters))
        if self.execute_error is not None:
            raise self.execute_error
        return None

    def fetchone(self) -> tuple[Any, ...] | None:
        if self.fetch_error is not None:
            raise self.fetch_error
        return self._rows.pop(0) if self._rows else None

    def fetchall(self) -> list[tuple[Any, ...]]:
        if self.fetch_error is not None:
            raise self.fetch_error
        rows, self._rows = self._rows, []
        return rows

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Hands out the queued cursors in order, then default ones."""

    def __init__(self, *cursors: FakeCursor):
        self._queue = list(cursors)
        self.cursors: list[FakeCursor] = []
        self.closed = False

    def cursor(self) -> FakeCursor:
        cursor = self._queue.pop(0) if self._queue else FakeCursor()
        self.cursors.append(cursor)
        return cursor

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


def make_fake_db(driver: str = "mysql", *cursors: FakeCursor) -> tuple[Database, FakeConnection]:
    """A :class:`Database` on ``driver`` whose statements run on fake cursors."""
    connection = FakeConnection(*cursors)
    return Database(DbCredentials(driver, "app"), connection=connection), connection
