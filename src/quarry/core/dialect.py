"""SQL dialect abstraction for the supported database drivers.

Provides a ``Dialect`` protocol and one implementation per driver
(``mysql``, ``sqlite``, ``pgsql``). The query builder, the executor, the ORM
and the migration writer ask the dialect for every driver-specific fragment:
identifier quoting, placeholder translation, LIMIT windows, upserts,
insert-ignore and the DDL differences between engines.

Manifesto:
    Callers write one SQL template with ``?`` or ``:name`` placeholders and
    quoted identifiers. The dialect turns that template into what the
    DB-API driver actually accepts, so nothing above this module needs to
    know that mysql-connector and psycopg speak ``%s``/``%(name)s`` while
    sqlite3 speaks ``?``/``:name``.

    - **One template:** ``?`` and ``:name`` everywhere above the driver
    - **Literal safe:** quoted strings, quoted identifiers and ``::`` casts
      are never rewritten
    - **Per-driver DDL:** unsigned, auto increment, inline UNIQUE, engine

Architecture::

    template: SELECT * FROM `users` WHERE `id`=:id AND `n` LIKE '50%'
                              │
              ┌───────────────┼───────────────────┐
              ▼               ▼                   ▼
        ┌──────────┐   ┌─────────────┐   ┌────────────────────┐
        │ sqlite   │   │ mysql       │   │ pgsql              │
        │ :id      │   │ %(id)s      │   │ %(id)s, '50%%'     │
        │ `users`  │   │ `users`     │   │ "users"            │
        │ LIMIT s,l│   │ LIMIT s,l   │   │ LIMIT l OFFSET s   │
        └──────────┘   └─────────────┘   └────────────────────┘

Examples:
    >>> from quarry.core.dialect import get_dialect
    >>> d = get_dialect("pgsql")
    >>> d.quote("users")
    '"users"'
    >>> d.compile("SELECT * FROM t WHERE a=? AND b=?").sql
    'SELECT * FROM t WHERE a=%s AND b=%s'
    >>> d.limit_clause(20, 10)
    ' LIMIT 10 OFFSET 20'

Tags:
    dialect, sql, placeholders, portability, mysql, sqlite, postgresql, quarry
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple, Protocol, runtime_checkable

POSITIONAL = "positional"
NAMED = "named"

# Literals and quoted identifiers are matched first so that placeholders
# inside them are left alone.
_TOKENS = re.compile(
    r"""
    (?P<literal>'(?:[^'\\]|\\.|'')*'|"(?:[^"\\]|\\.|"")*"|`[^`]*`)
    |(?P<cast>::)
    |(?P<named>:[A-Za-z_][A-Za-z0-9_]*)
    |(?P<positional>\?)
    |(?P<percent>%)
    """,
    re.VERBOSE,
)


class CompiledSql(NamedTuple):
    """A template translated for a driver, plus the placeholder style found."""

    sql: str
    style: str | None


def compile_placeholders(
    sql: str,
    *,
    positional: str | None,
    named: str | None,
    escape_percent: bool = False,
) -> CompiledSql:
    """Translate ``?`` / ``:name`` placeholders.

    ``positional`` and ``named`` are the driver's replacement formats
    (``None`` keeps the placeholder as written). ``named`` is formatted with
    ``name=<placeholder name>``.

    Raises:
        ValueError: If the template mixes named and positional placeholders.
    """
    styles: set[str] = set()

    def _replace(match: re.Match[str]) -> str:
        kind = match.lastgroup
        token = match.group(0)
        if kind == "literal":
            return token.replace("%", "%%") if escape_percent else token
        if kind == "cast":
            return token
        if kind == "named":
            styles.add(NAMED)
            return token if named is None else named.format(name=token[1:])
        if kind == "positional":
            styles.add(POSITIONAL)
            return token if positional is None else positional
        return "%%" if escape_percent else token

    compiled = _TOKENS.sub(_replace, sql)
    if len(styles) > 1:
        raise ValueError("Cannot mix named and positional parameters in one statement")
    return CompiledSql(compiled, styles.pop() if styles else None)


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment (or a full statement template with
    ``:name`` placeholders) valid for the target driver.
    """

    @property
    def name(self) -> str:
        """Driver name as used in credentials (``'mysql'``, ``'sqlite'``, ``'pgsql'``)."""
        ...

    @property
    def url_scheme(self) -> str:
        """SQLAlchemy URL scheme used to open the DB-API connection."""
        ...

    def connect_args(self) -> dict[str, Any]:
        """Driver ``connect()`` keyword arguments (autocommit mode)."""
        ...

    # -- Statements --------------------------------------------------------

    def quote(self, identifier: str) -> str:
        """Quote a table or column name."""
        ...

    def compile(self, sql: str, *, has_params: bool = True) -> CompiledSql:
        """Translate a ``?`` / ``:name`` template into the driver paramstyle."""
        ...

    def limit_clause(self, start: int, limit: int) -> str:
        """LIMIT window fragment (with leading space), empty when ``limit`` is 0."""
        ...

    def lock_clause(self) -> str:
        """Row-lock suffix for SELECT (with leading space)."""
        ...

    def true_literal(self) -> str:
        """Condition that matches every row (WHERE clause of an unfiltered query)."""
        ...

    # -- DML helpers -------------------------------------------------------

    def insert_or_ignore(self, table: str, columns: list[str]) -> str:
        """``INSERT`` that silently skips duplicate keys."""
        ...

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        """``INSERT`` that updates the non-key columns on a key conflict."""
        ...

    # -- DDL traits --------------------------------------------------------

    @property
    def supports_unsigned(self) -> bool:
        ...

    @property
    def supports_charset(self) -> bool:
        ...

    @property
    def inline_unique(self) -> bool:
        """True when UNIQUE is a column attribute, False for ``UNIQUE KEY (col)`` lines."""
        ...

    def auto_increment(self) -> str:
        """Column-level auto increment fragment (with leading space)."""
        ...

    def table_suffix(self, engine: str) -> str:
        """Text closing a ``CREATE TABLE`` statement."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class _BacktickQuoting:
    def quote(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"


class SQLiteDialect(_BacktickQuoting):
    """SQLite dialect: sqlite3 accepts ``?`` and ``:name`` natively."""

    paramstyle = "qmark"

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def url_scheme(self) -> str:
        return "sqlite"

    def connect_args(self) -> dict[str, Any]:
        return {"isolation_level": None}

    def compile(self, sql: str, *, has_params: bool = True) -> CompiledSql:  # noqa: ARG002
        return compile_placeholders(sql, positional=None, named=None)

    def limit_clause(self, start: int, limit: int) -> str:
        if not limit:
            return ""
        if start:
            return f" LIMIT {int(start)},{int(limit)}"
        return f" LIMIT {int(limit)}"

    def lock_clause(self) -> str:
        # SQLite has no row locks; writers lock the whole database file
        return ""

    def true_literal(self) -> str:
        return "1"

    def insert_or_ignore(self, table: str, columns: list[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = ", ".join(f":{c}" for c in columns)
        return f"INSERT OR IGNORE INTO {self.quote(table)} ({cols}) VALUES ({ph})"

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = ", ".join(f":{c}" for c in columns)
        keys = ", ".join(self.quote(k) for k in key_columns)
        update_cols = [c for c in columns if c not in key_columns]
        if not update_cols:
            return (
                f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph}) "
                f"ON CONFLICT ({keys}) DO NOTHING"
            )
        updates = ", ".join(f"{self.quote(c)}=excluded.{self.quote(c)}" for c in update_cols)
        return (
            f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph}) "
            f"ON CONFLICT ({keys}) DO UPDATE SET {updates}"
        )

    supports_unsigned = True
    supports_charset = False
    inline_unique = True

    def auto_increment(self) -> str:
        return " AUTOINCREMENT"

    def table_suffix(self, engine: str) -> str:  # noqa: ARG002
        return ");"


class MySQLDialect(_BacktickQuoting):
    """MySQL dialect: mysql-connector speaks ``%s`` / ``%(name)s``.

    mysql-connector does not unescape ``%%`` for positional statements, so
    percent signs are passed through untouched.
    """

    paramstyle = "pyformat"

    @property
    def name(self) -> str:
        return "mysql"

    @property
    def url_scheme(self) -> str:
        return "mysql+mysqlconnector"

    def connect_args(self) -> dict[str, Any]:
        return {"autocommit": True}

    def compile(self, sql: str, *, has_params: bool = True) -> CompiledSql:  # noqa: ARG002
        return compile_placeholders(sql, positional="%s", named="%({name})s")

    def limit_clause(self, start: int, limit: int) -> str:
        if not limit:
            return ""
        if start:
            return f" LIMIT {int(start)},{int(limit)}"
        return f" LIMIT {int(limit)}"

    def lock_clause(self) -> str:
        return " FOR UPDATE"

    def true_literal(self) -> str:
        return "1"

    def insert_or_ignore(self, table: str, columns: list[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = ", ".join(f":{c}" for c in columns)
        return f"INSERT IGNORE INTO {self.quote(table)} ({cols}) VALUES ({ph})"

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = ", ".join(f":{c}" for c in columns)
        update_cols = [c for c in columns if c not in key_columns] or key_columns
        updates = ", ".join(f"{self.quote(c)}=VALUES({self.quote(c)})" for c in update_cols)
        return (
            f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph}) "
            f"ON DUPLICATE KEY UPDATE {updates}"
        )

    supports_unsigned = True
    supports_charset = True
    inline_unique = False

    def auto_increment(self) -> str:
        return " auto_increment"

    def table_suffix(self, engine: str) -> str:
        return f") ENGINE={engine};"


class PostgreSQLDialect:
    """PostgreSQL dialect: psycopg speaks ``%s`` / ``%(name)s``.

    psycopg parses every ``%`` of a parametrized statement, literals
    included, so they are doubled whenever parameters are sent.
    """

    paramstyle = "pyformat"

    @property
    def name(self) -> str:
        return "pgsql"

    @property
    def url_scheme(self) -> str:
        return "postgresql+psycopg"

    def connect_args(self) -> dict[str, Any]:
        return {"autocommit": True}

    def quote(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def compile(self, sql: str, *, has_params: bool = True) -> CompiledSql:
        return compile_placeholders(
            sql, positional="%s", named="%({name})s", escape_percent=has_params
        )

    def limit_clause(self, start: int, limit: int) -> str:
        if not limit:
            return ""
        if start:
            return f" LIMIT {int(limit)} OFFSET {int(start)}"
        return f" LIMIT {int(limit)}"

    def lock_clause(self) -> str:
        return " FOR UPDATE"

    def true_literal(self) -> str:
        return "TRUE"

    def insert_or_ignore(self, table: str, columns: list[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = ", ".join(f":{c}" for c in columns)
        return f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph}) ON CONFLICT DO NOTHING"

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = ", ".join(f":{c}" for c in columns)
        keys = ", ".join(self.quote(k) for k in key_columns)
        update_cols = [c for c in columns if c not in key_columns]
        if not update_cols:
            return (
                f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph}) "
                f"ON CONFLICT ({keys}) DO NOTHING"
            )
        updates = ", ".join(f"{self.quote(c)}=EXCLUDED.{self.quote(c)}" for c in update_cols)
        return (
            f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph}) "
            f"ON CONFLICT ({keys}) DO UPDATE SET {updates}"
        )

    supports_unsigned = False
    supports_charset = False
    inline_unique = True

    def auto_increment(self) -> str:
        return " GENERATED BY DEFAULT AS IDENTITY"

    def table_suffix(self, engine: str) -> str:  # noqa: ARG002
        return ");"


# =========================================================================
# Registry / Factory
# =========================================================================

# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "pgsql": PostgreSQLDialect(),
    "postgresql": PostgreSQLDialect(),  # alias
    "postgres": PostgreSQLDialect(),  # alias
}

DRIVERS = ("mysql", "sqlite", "pgsql")


def get_dialect(driver: str) -> Dialect:
    """Get a dialect by driver name.

    Raises:
        ValueError: If ``driver`` is not recognised.

    Example:
        >>> get_dialect("mysql").quote("users")
        '`users`'
    """
    key = driver.lower()
    if key not in _DIALECTS:
        raise ValueError(f"Unknown dialect '{driver}'. Supported: {sorted(DRIVERS)}")
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "CompiledSql",
    "Dialect",
    "DRIVERS",
    "MySQLDialect",
    "NAMED",
    "POSITIONAL",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "compile_placeholders",
    "get_dialect",
    "register_dialect",
]
