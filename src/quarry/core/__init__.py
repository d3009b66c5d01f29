"""Core primitives: errors, logging, dialects, events and settings.

``quarry.core.settings`` is imported on demand (it pulls in pydantic-settings
and the credential model).
"""

from quarry.core.dialect import DRIVERS, Dialect, compile_placeholders, get_dialect
from quarry.core.errors import (
    BindTypeError,
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    ORMError,
    ORMModelNotFoundError,
    ORMModelPopulateError,
    ORMModelQueryError,
    ORMValidationError,
    QuarryError,
    QueryBuilderError,
    QueryExecuteError,
    QueryFetchError,
    SchemaError,
    SchemaTableError,
    ValidationError,
)
from quarry.core.events import EventRegistry
from quarry.core.logging import configure_logging, get_logger

__all__ = [
    "DRIVERS",
    "BindTypeError",
    "ConfigError",
    "DatabaseConnectionError",
    "DatabaseError",
    "Dialect",
    "ErrorCategory",
    "ErrorContext",
    "EventRegistry",
    "ORMError",
    "ORMModelNotFoundError",
    "ORMModelPopulateError",
    "ORMModelQueryError",
    "ORMValidationError",
    "QuarryError",
    "QueryBuilderError",
    "QueryExecuteError",
    "QueryFetchError",
    "SchemaError",
    "SchemaTableError",
    "ValidationError",
    "compile_placeholders",
    "configure_logging",
    "get_dialect",
    "get_logger",
]
