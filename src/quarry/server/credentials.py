"""Database credentials and DSN rendering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.engine import URL

from quarry.core.dialect import DRIVERS, Dialect, get_dialect
from quarry.core.errors import DatabaseConnectionError


class DbDriver(str, Enum):
    """Supported database drivers."""

    MYSQL = "mysql"
    SQLITE = "sqlite"
    PGSQL = "pgsql"


@dataclass
class DbCredentials:
    """
    Connection details for one database.

    ``dbname`` is a file path (or ``:memory:``) for SQLite and a schema name
    for MySQL/PostgreSQL.

    Examples:
        >>> DbCredentials("mysql", "app", port=3306).dsn()
        'mysql:host=localhost;port=3306;dbname=app;charset=utf8mb4'
        >>> DbCredentials(DbDriver.SQLITE, "/tmp/app.db").dsn()
        'sqlite:/tmp/app.db'
    """

    driver: str
    dbname: str = ""
    host: str = "localhost"
    port: int | None = None
    username: str | None = None
    password: str | None = None
    persistent: bool = False

    def __post_init__(self) -> None:
        driver = self.driver.value if isinstance(self.driver, DbDriver) else str(self.driver)
        self.driver = driver.lower()
        if self.driver not in DRIVERS:
            raise DatabaseConnectionError(
                "Invalid database driver or is not supported"
            ).with_context(driver=self.driver)
        self.host = self.host or "localhost"

    @property
    def dialect(self) -> Dialect:
        return get_dialect(self.driver)

    def login(self, username: str, password: str | None = None) -> DbCredentials:
        """Set authentication; returns ``self`` for chaining."""
        self.username = username
        self.password = password
        return self

    def dsn(self) -> str:
        """Render the PDO-style DSN string.

        Raises:
            DatabaseConnectionError: If no database name is set.
        """
        if not self.dbname:
            raise DatabaseConnectionError(
                "Cannot get DSN; Database name is not set"
            ).with_context(driver=self.driver)

        if self.driver == DbDriver.SQLITE.value:
            return f"sqlite:{self.dbname}"

        port = f"port={self.port};" if self.port else ""
        return f"{self.driver}:host={self.host};{port}dbname={self.dbname};charset=utf8mb4"

    def sqlalchemy_url(self) -> URL:
        """SQLAlchemy URL used to open the DB-API connection."""
        if not self.dbname:
            raise DatabaseConnectionError(
                "Cannot get DSN; Database name is not set"
            ).with_context(driver=self.driver)

        scheme = self.dialect.url_scheme
        if self.driver == DbDriver.SQLITE.value:
            return URL.create(scheme, database=self.dbname)

        query = {"charset": "utf8mb4"} if self.driver == DbDriver.MYSQL.value else {}
        return URL.create(
            scheme,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.dbname,
            query=query,
        )


__all__ = ["DbCredentials", "DbDriver"]
