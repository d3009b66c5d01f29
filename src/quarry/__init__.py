"""
quarry - relational database access for MySQL, SQLite and PostgreSQL.

Three layers, each usable on its own:

- :class:`Database` executes hand-written statements, binds parameters by
  type, and keeps a log of every executed query
- :class:`QueryBuilder` (``db.query()``) builds SELECT/INSERT/UPDATE/DELETE
  and paginated reads
- :mod:`quarry.orm` maps rows of declared tables onto models that write
  back only what changed

Examples:
    >>> from quarry import Database, DbCredentials
    >>> db = Database(DbCredentials("sqlite", ":memory:"))
    >>> db.exec("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    >>> db.query().table("t").insert({"name": "a"})
    >>> db.query().table("t").find({"name": "a"}).fetch().row()
    {'id': 1, 'name': 'a'}
"""

__version__ = "0.1.0"

from quarry.core.errors import (  # noqa: E402
    DatabaseError,
    ORMError,
    QuarryError,
    QueryExecuteError,
    SchemaError,
)
from quarry.database import Database  # noqa: E402
from quarry.orm import FindQuery, ModelQuery, OrmModel  # noqa: E402
from quarry.queries import ExecutedQuery, Paginated, QueryBuilder  # noqa: E402
from quarry.schema import AbstractDbTable, BoundDbTable, Columns, Constraints  # noqa: E402
from quarry.server.credentials import DbCredentials  # noqa: E402

__all__ = [
    "AbstractDbTable",
    "BoundDbTable",
    "Columns",
    "Constraints",
    "Database",
    "DatabaseError",
    "DbCredentials",
    "ExecutedQuery",
    "FindQuery",
    "ModelQuery",
    "ORMError",
    "OrmModel",
    "Paginated",
    "QuarryError",
    "QueryBuilder",
    "QueryExecuteError",
    "SchemaError",
    "__version__",
]
