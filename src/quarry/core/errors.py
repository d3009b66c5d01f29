"""
Structured error types for quarry.

Every failure raised by the query layer, the builder, the schema catalog and
the ORM is a :class:`QuarryError`. Errors carry a category, a structured
:class:`ErrorContext` (table, query, driver, model) and an optional chained
cause so that a caller can diagnose a failed statement without re-running it.

Manifesto:
    - **Typed hierarchy:** one class per failure domain
    - **Contract vs operational:** builder/binder/validation errors are
      programming errors and always raise; execution and persistence failures
      follow the caller's ``throw_on_fail`` / ``expect_positive_row_count``
    - **Rich context:** the failed SQL, its bound parameters and the native
      driver error travel with the exception
    - **Error chaining:** the original driver exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                         QuarryError                              │
        │                 (category, context, cause)                       │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  DatabaseError          ValidationError        ConfigError       │
        │  (DATABASE)             (VALIDATION)           (CONFIG)          │
        │      │                       │                                   │
        │  DatabaseConnectionError  BindTypeError                          │
        │  QueryExecuteError        QueryBuilderError                      │
        │  QueryFetchError                                                 │
        │                                                                  │
        │  SchemaError            ORMError                                 │
        │  (SCHEMA)               (ORM)                                    │
        │      │                       │                                   │
        │  SchemaTableError       ORMValidationError                       │
        │                         ORMModelPopulateError                    │
        │                         ORMModelNotFoundError                    │
        │                         ORMModelQueryError                       │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> err = QueryBuilderError("UPDATE query requires WHERE clause")
    >>> err.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>

    >>> err = ORMError("Column not found").with_context(table="users")
    >>> err.context.table
    'users'

Tags:
    error-handling, exception-hierarchy, error-context, quarry
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from quarry.queries.executed import ExecutedQuery
    from quarry.server.error import StatementError


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        DATABASE: Connection, statement execution, row fetching
        VALIDATION: Bad values, bad builder usage, unbindable parameters
        CONFIG: Missing or invalid settings
        SCHEMA: Table/column catalog errors
        ORM: Model binding and persistence errors
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    DATABASE = "DATABASE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    SCHEMA = "SCHEMA"
    ORM = "ORM"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        driver: Database driver name (``mysql``, ``sqlite``, ``pgsql``)
        table: Table the failing operation targeted
        column: Column involved, if any
        model: ORM model class name, if any
        query: SQL text of the failing statement
        metadata: Additional key-value pairs
    """

    driver: str | None = None
    table: str | None = None
    column: str | None = None
    model: str | None = None
    query: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["driver", "table", "column", "model", "query"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class QuarryError(Exception):
    """
    Base exception for all quarry errors.

    Subclasses set ``default_category``; instances carry a message, a
    category, an :class:`ErrorContext` and an optional ``cause`` which is
    also wired into ``__cause__`` for tracebacks.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> QuarryError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ORMError("Column not found").with_context(table="users")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(QuarryError):
    """Database connection, statement or fetch error."""

    default_category = ErrorCategory.DATABASE


class DatabaseConnectionError(DatabaseError):
    """Cannot establish a connection, or credentials are unusable."""

    pass


class QueryExecuteError(DatabaseError):
    """
    A statement could not be prepared or failed to execute.

    Carries the SQL text, the parameters exactly as they were bound and the
    native :class:`~quarry.server.error.StatementError`, if the driver
    reported one.
    """

    def __init__(
        self,
        message: str,
        *,
        query_string: str,
        bound_data: dict[str | int, Any] | None = None,
        error: StatementError | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.query_string = query_string
        self.bound_data = dict(bound_data or {})
        self.error = error
        self.context.query = query_string

    @classmethod
    def query(
        cls,
        query_string: str,
        bound_data: dict[str | int, Any] | None = None,
        error: StatementError | None = None,
        exc: BaseException | None = None,
        msg: str | None = None,
    ) -> QueryExecuteError:
        """Build the error, choosing the message by precedence.

        An explicit ``msg`` wins over the underlying exception's message,
        which wins over the generic fallback.
        """
        message = msg or (str(exc) if exc is not None and str(exc) else None)
        return cls(
            message or "Failed to execute DB query",
            query_string=query_string,
            bound_data=bound_data,
            error=error,
            cause=exc,
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["bound_data"] = {str(k): repr(v) for k, v in self.bound_data.items()}
        if self.error is not None:
            result["error"] = str(self.error)
        return result


class QueryFetchError(DatabaseError):
    """Row materialization failed after a successful execution."""

    def __init__(self, query: ExecutedQuery, message: str = "", **kwargs: Any):
        super().__init__(message or "Failed to fetch rows from executed query", **kwargs)
        self.query = query
        self.context.query = query.query_string


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(QuarryError):
    """
    Caller supplied something unusable.

    Never suppressed by ``throw_on_fail``; the caller must fix the call.
    """

    default_category = ErrorCategory.VALIDATION


class BindTypeError(ValidationError):
    """A parameter value has no representable wire type."""

    def __init__(self, value: Any, key: str | int | None = None, **kwargs: Any):
        self.value = value
        self.key = key
        super().__init__(f"Cannot bind value of type {type(value).__name__}", **kwargs)


class QueryBuilderError(ValidationError):
    """The fluent builder was misused (missing WHERE, indexed keys, ...)."""

    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(QuarryError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# SCHEMA ERRORS
# =============================================================================


class SchemaError(QuarryError):
    """Schema catalog error (bad table declaration, unknown event, ...)."""

    default_category = ErrorCategory.SCHEMA


class SchemaTableError(SchemaError):
    """Table is not bound in the schema registry."""

    pass


# =============================================================================
# ORM ERRORS
# =============================================================================


class ORMError(QuarryError):
    """Model binding error (unknown column, missing ORM class, ...)."""

    default_category = ErrorCategory.ORM


class ORMValidationError(ORMError):
    """A value breaks its column's nullable/type contract."""

    default_category = ErrorCategory.VALIDATION


class ORMModelPopulateError(ORMError):
    """Input row is missing a schema-declared column."""

    pass


class ORMModelNotFoundError(ORMError):
    """A find query matched no rows."""

    pass


class ORMModelQueryError(ORMError):
    """
    A save/insert/update/delete did not meet its contract.

    Raised for guard failures (no changes, no match column, already
    persisted) and for executions that missed the expected row count.
    """

    default_category = ErrorCategory.DATABASE

    def __init__(self, message: str, *, query: ExecutedQuery | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.query = query


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "QuarryError",
    "DatabaseError",
    "DatabaseConnectionError",
    "QueryExecuteError",
    "QueryFetchError",
    "ValidationError",
    "BindTypeError",
    "QueryBuilderError",
    "ConfigError",
    "SchemaError",
    "SchemaTableError",
    "ORMError",
    "ORMValidationError",
    "ORMModelPopulateError",
    "ORMModelNotFoundError",
    "ORMModelQueryError",
]
