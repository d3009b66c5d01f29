"""Opening the single DB-API connection owned by a ``Database``.

SQLAlchemy is only used to resolve the driver and open the connection:
``create_engine`` with a ``NullPool`` (no pooling) and
``Engine.raw_connection()`` for the PEP 249 connection. Statements never go
through the SQLAlchemy Core layer.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from quarry.core.errors import DatabaseConnectionError
from quarry.core.logging import get_logger
from quarry.core.protocols import DBAPIConnection
from quarry.server.credentials import DbCredentials, DbDriver

logger = get_logger(__name__)


def create_quarry_engine(credentials: DbCredentials, *, echo: bool = False) -> Engine:
    """Create an engine that hands out one autocommit connection at a time."""
    kwargs: dict[str, Any] = {
        "poolclass": NullPool,
        "connect_args": credentials.dialect.connect_args(),
        "echo": echo,
    }

    engine = create_engine(credentials.sqlalchemy_url(), **kwargs)

    if credentials.driver == DbDriver.SQLITE.value:
        # Foreign keys are off by default in SQLite
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class DbConnection:
    """The live connection of one database plus the engine that opened it."""

    def __init__(self, credentials: DbCredentials, *, echo: bool = False):
        self.credentials = credentials
        try:
            self.engine = create_quarry_engine(credentials, echo=echo)
        except (SQLAlchemyError, ImportError) as e:
            raise self._connect_error(e) from e

        try:
            self._raw: Any = self.engine.raw_connection()
        except Exception as e:
            # raw_connection() lets the driver's own DB-API errors through
            self.engine.dispose()
            raise self._connect_error(e) from e

        logger.debug(
            "db_connected",
            driver=credentials.driver,
            host=credentials.host,
            dbname=credentials.dbname,
        )

    def _connect_error(self, exc: BaseException) -> DatabaseConnectionError:
        return DatabaseConnectionError(
            f"Failed to connect to {self.credentials.driver} database: {exc}",
            cause=exc,
        ).with_context(driver=self.credentials.driver)

    @property
    def dbapi(self) -> DBAPIConnection:
        """The PEP 249 connection statements run on."""
        return self._raw

    @property
    def is_open(self) -> bool:
        return self._raw is not None

    def close(self) -> None:
        if self._raw is not None:
            self._raw.close()
            self._raw = None
        self.engine.dispose()
        logger.debug("db_disconnected", driver=self.credentials.driver)


__all__ = ["DbConnection", "create_quarry_engine"]
