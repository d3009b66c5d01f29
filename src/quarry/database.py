"""
Database: one connection, the statement executor and its query log.

Manifesto:
    Every statement, hand written or built, goes through one pipeline so
    that binding, failure detection, logging and the query log behave the
    same everywhere:

    1. open a cursor and compile the template for the driver
    2. bind every parameter (type inference, 1-based positions)
    3. execute, capturing the driver error instead of raising it
    4. record the :class:`ExecutedQuery` in the :class:`QueryLog`
    5. raise only if the caller asked for it (``throw_on_fail``)

Architecture:
    ::

        db.exec(sql, data)  ─┐
        db.fetch(sql, data) ─┼─► _query_exec ─► ParamBinder.bind
        QueryBuilder ────────┘         │        Statement.prepare
                                       │        cursor.execute
                                       ▼
                              ExecutedQuery ──► QueryLog.append
                                       │
                       throw_on_fail and failed?
                          │ yes                 │ no
                          ▼                     ▼
              events.query_exec_fail     ExecutedQuery / ResultCursor
              raise QueryExecuteError

Examples:
    >>> db = Database(DbCredentials("sqlite", ":memory:"))
    >>> db.exec("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)").is_success(False)
    True
    >>> db.exec("INSERT INTO t (name) VALUES (?)", ["a"]).rows
    1
    >>> db.fetch("SELECT name FROM t").all()
    [{'name': 'a'}]

Tags:
    database, executor, dbapi, query-log, quarry
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from quarry.core.dialect import Dialect
from quarry.core.errors import BindTypeError, QueryExecuteError
from quarry.core.events import EventRegistry
from quarry.core.logging import get_logger
from quarry.core.protocols import DBAPIConnection, DBAPICursor
from quarry.queries.binder import BoundParams, ParamBinder
from quarry.queries.builder import QueryBuilder
from quarry.queries.executed import ExecutedQuery
from quarry.queries.fetch import ResultCursor
from quarry.queries.log import QueryLog
from quarry.queries.statement import Statement
from quarry.server.connection import DbConnection
from quarry.server.credentials import DbCredentials
from quarry.server.error import StatementError

if TYPE_CHECKING:
    from quarry.core.settings import QuarrySettings
    from quarry.schema.registry import Schema

logger = get_logger(__name__)

QueryData = Mapping[Any, Any] | Sequence[Any] | None


class Database:
    """
    A connected database.

    Args:
        credentials: Driver and connection details
        events: Event registry to notify on failures (a private one by default)
        connection: Use this DB-API connection instead of opening one
        echo: Let SQLAlchemy echo its own connection-level SQL
        connect: ``False`` skips opening a connection (DDL rendering only;
            executing raises :class:`QueryExecuteError`)
    """

    def __init__(
        self,
        credentials: DbCredentials,
        *,
        events: EventRegistry | None = None,
        connection: DBAPIConnection | None = None,
        echo: bool = False,
        connect: bool = True,
    ):
        self.credentials = credentials
        self.events = events or EventRegistry()
        self._binder = ParamBinder()
        self._queries = QueryLog()
        self._schema: Schema | None = None
        self._last_insert_id: Any = None

        if connection is not None or not connect:
            self._connection: DbConnection | None = None
            self._dbapi: DBAPIConnection | None = connection
        else:
            self._connection = DbConnection(credentials, echo=echo)
            self._dbapi = self._connection.dbapi

    @classmethod
    def from_settings(cls, settings: QuarrySettings | None = None, **kwargs: Any) -> Database:
        """Connect using :class:`~quarry.core.settings.QuarrySettings`."""
        from quarry.core.settings import get_settings

        settings = settings or get_settings()
        return cls(settings.credentials(), **kwargs)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def driver(self) -> str:
        return self.credentials.driver

    @property
    def dialect(self) -> Dialect:
        return self.credentials.dialect

    @property
    def queries(self) -> QueryLog:
        """Every statement executed on this database, failures included."""
        return self._queries

    @property
    def schema(self) -> Schema:
        """Table registry bound to this database."""
        if self._schema is None:
            from quarry.schema.registry import Schema

            self._schema = Schema(self)
        return self._schema

    def query(self) -> QueryBuilder:
        """Start a fluent query on this database."""
        return QueryBuilder(self)

    def last_insert_id(self) -> Any:
        """Row id generated by the last INSERT, as reported by the driver."""
        return self._last_insert_id

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def exec(
        self, query: str, data: QueryData = None, throw_on_fail: bool = True
    ) -> ExecutedQuery:
        """Execute a statement that returns no rows (INSERT/UPDATE/DELETE/DDL)."""
        return self._query_exec(query, data, throw_on_fail, fetch_query=False)

    def fetch(
        self, query: str, data: QueryData = None, throw_on_fail: bool = True
    ) -> ResultCursor:
        """Execute a statement and return a cursor over its rows."""
        return self._query_exec(query, data, throw_on_fail, fetch_query=True)

    def _cursor(self, query: str) -> DBAPICursor:
        if self._dbapi is None:
            raise QueryExecuteError.query(query, msg="Database connection is closed")
        try:
            return self._dbapi.cursor()
        except Exception as e:
            raise QueryExecuteError.query(
                query, error=StatementError.from_exception(e), exc=e
            ).with_context(driver=self.driver) from e

    def _query_exec(
        self, query: str, data: QueryData, throw_on_fail: bool, fetch_query: bool
    ) -> Any:
        cursor = self._cursor(query)

        bound = BoundParams()
        try:
            bound = self._binder.bind(data)
            statement = Statement.prepare(self.dialect, query, bound)
        except BindTypeError:
            cursor.close()
            raise
        except ValueError as e:
            cursor.close()
            raise QueryExecuteError.query(query, bound.data, exc=e).with_context(
                driver=self.driver
            ) from e

        error: StatementError | None = None
        exec_exc: Exception | None = None
        try:
            if statement.params is None:
                cursor.execute(statement.sql)
            else:
                cursor.execute(statement.sql, statement.params)
        except Exception as e:
            # DB-API drivers share no common base exception
            error = StatementError.from_exception(e)
            exec_exc = e

        rows = cursor.rowcount if isinstance(cursor.rowcount, int) else 0
        executed = ExecutedQuery(
            query_string=query,
            bound_data=dict(bound.data),
            rows=max(rows, 0),
            error=error,
        )
        self._queries.append(executed)

        if error is None:
            logger.debug("query_executed", sql=query, rows=executed.rows)
        else:
            logger.warning("query_failed", sql=query, error=str(error), driver=self.driver)

        if throw_on_fail and not executed.is_success(False):
            cursor.close()
            self.events.on_query_exec_fail().trigger(executed)
            raise QueryExecuteError.query(
                query,
                bound.data,
                error,
                exc=exec_exc,
                msg=error.info if error is not None else None,
            ).with_context(driver=self.driver) from exec_exc

        if error is None:
            self._last_insert_id = getattr(cursor, "lastrowid", None)

        if fetch_query:
            return ResultCursor(executed, cursor)

        cursor.close()
        return executed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
        elif self._dbapi is not None:
            self._dbapi.close()
        self._dbapi = None

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database(driver={self.driver!r}, dbname={self.credentials.dbname!r})"


__all__ = ["Database"]
