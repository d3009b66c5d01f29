"""
Shared pytest fixtures for quarry tests.

This module provides:
- An in-memory SQLite :class:`Database` (real driver, real SQL)
- The ``users`` and ``notes`` tables bound to it and created in it
- Settings isolation (``QUARRY_*`` variables and the settings cache)

Table declarations and fake DB-API doubles live in ``tests._support``.

Usage:
    def test_insert(users):
        users.model().set("email", "a@b.c").query().insert()
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from quarry.core.settings import clear_settings_cache
from quarry.database import Database
from quarry.schema.table import BoundDbTable
from quarry.server.credentials import DbCredentials
from tests._support.tables import NotesTable, UsersTable

_SETTINGS_ENV = (
    "QUARRY_DRIVER",
    "QUARRY_DBNAME",
    "QUARRY_HOST",
    "QUARRY_PORT",
    "QUARRY_USERNAME",
    "QUARRY_PASSWORD",
    "QUARRY_LOG_LEVEL",
    "QUARRY_LOG_FORMAT",
    "QUARRY_DEFAULT_PER_PAGE",
    "QUARRY_COMPACT_NAV_WINDOW",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep QUARRY_* variables and the settings cache from leaking between tests."""
    for key in _SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def db() -> Iterator[Database]:
    """In-memory SQLite database."""
    database = Database(DbCredentials("sqlite", ":memory:"))
    yield database
    database.close()


@pytest.fixture
def users(db: Database) -> BoundDbTable:
    """``users`` table bound to ``db`` and created in it."""
    bound = db.schema.bind(UsersTable)
    db.exec(bound.migration().create_table())
    return bound


@pytest.fixture
def notes(db: Database) -> BoundDbTable:
    """``notes`` table (no primary key, no unique column)."""
    bound = db.schema.bind(NotesTable)
    db.exec(bound.migration().create_table())
    return bound


@pytest.fixture
def seeded_users(users: BoundDbTable) -> BoundDbTable:
    """``users`` with three rows (ids 1..3); the query log starts empty."""
    db = users.db
    for email, status, score in (
        ("ann@example.com", "active", 10),
        ("bob@example.com", "banned", 20),
        ("cat@example.com", "active", 30),
    ):
        db.exec(
            "INSERT INTO `users` (`email`, `status`, `score`) VALUES (?, ?, ?)",
            [email, status, score],
        )
    db.queries.flush()
    return users
