"""
Protocol definitions for the DB-API 2.0 (PEP 249) driver boundary.

quarry never imports a database driver directly. Whatever SQLAlchemy's
``Engine.raw_connection()`` hands back (sqlite3, mysql-connector, psycopg)
is treated through these two shapes, and tests substitute any object that
matches them.

Architecture:
    ::

        DBAPIConnection                DBAPICursor
        ├── cursor()                   ├── execute(sql, params)
        ├── commit()                   ├── fetchone()
        ├── rollback()                 ├── fetchall()
        └── close()                    ├── rowcount
                                       ├── description
                                       └── close()

Tags:
    protocol, dbapi, pep-249, driver-boundary, quarry
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DBAPICursor(Protocol):
    """Minimal PEP 249 cursor used by the executor and the result cursor."""

    @property
    def description(self) -> Sequence[Sequence[Any]] | None:
        """Column metadata of the last SELECT; the first item of each entry is the name."""
        ...

    @property
    def rowcount(self) -> int:
        """Rows affected or produced by the last statement (``-1`` if unknown)."""
        ...

    def execute(self, sql: str, params: Sequence[Any] | Mapping[str, Any] | None = ...) -> Any:
        ...

    def fetchone(self) -> Sequence[Any] | None:
        ...

    def fetchall(self) -> Sequence[Sequence[Any]]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class DBAPIConnection(Protocol):
    """Minimal PEP 249 connection."""

    def cursor(self) -> DBAPICursor:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def close(self) -> None:
        ...


__all__ = ["DBAPIConnection", "DBAPICursor"]
