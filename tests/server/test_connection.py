"""Tests for engine creation and the live driver connection."""

from __future__ import annotations

import sqlite3

import pytest

from quarry.core.errors import DatabaseConnectionError
from quarry.database import Database
from quarry.server.connection import DbConnection, create_quarry_engine
from quarry.server.credentials import DbCredentials


class TestCreateEngine:
    def test_sqlite_engine(self) -> None:
        engine = create_quarry_engine(DbCredentials("sqlite", ":memory:"))
        assert engine.dialect.name == "sqlite"
        engine.dispose()


class TestDbConnection:
    def test_sqlite_connection_is_autocommit(self, tmp_path) -> None:
        path = tmp_path / "app.db"
        first = DbConnection(DbCredentials("sqlite", str(path)))
        cursor = first.dbapi.cursor()
        cursor.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
        cursor.execute("INSERT INTO t (id) VALUES (1)")
        cursor.close()

        # A second connection sees the row without an explicit commit
        second = DbConnection(DbCredentials("sqlite", str(path)))
        cursor = second.dbapi.cursor()
        cursor.execute("SELECT count(*) FROM t")
        assert cursor.fetchone()[0] == 1
        cursor.close()

        first.close()
        second.close()
        assert not first.is_open

    def test_foreign_keys_enabled_on_sqlite(self) -> None:
        connection = DbConnection(DbCredentials("sqlite", ":memory:"))
        cursor = connection.dbapi.cursor()
        cursor.execute("PRAGMA foreign_keys")
        assert cursor.fetchone()[0] == 1
        cursor.close()
        connection.close()

    def test_connect_failure_is_wrapped(self, tmp_path) -> None:
        missing = tmp_path / "missing-dir" / "app.db"
        with pytest.raises(DatabaseConnectionError, match="Failed to connect to sqlite") as exc_info:
            DbConnection(DbCredentials("sqlite", str(missing)))
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    def test_database_surfaces_connection_error(self, tmp_path) -> None:
        missing = tmp_path / "missing-dir" / "app.db"
        with pytest.raises(DatabaseConnectionError) as exc_info:
            Database(DbCredentials("sqlite", str(missing)))
        assert exc_info.value.context.driver == "sqlite"
