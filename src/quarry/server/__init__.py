"""Connection credentials, the driver connection and statement errors."""

from quarry.server.connection import DbConnection, create_quarry_engine
from quarry.server.credentials import DbCredentials, DbDriver
from quarry.server.error import StatementError

__all__ = ["DbConnection", "DbCredentials", "DbDriver", "StatementError", "create_quarry_engine"]
