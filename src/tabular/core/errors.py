"""
Structured error types for the Tabular toolkit.

Every failure the table-access layer can raise is a :class:`TabularError`
subclass carrying a category, a structured context (table, operation, key),
and an optional chained cause. Callers decide their own partial-failure
policy; nothing here is retried.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure kind a caller can act on
    - **Fatal by default:** No error in this layer is retryable
    - **Rich Context:** Errors carry table/operation/key for logging
    - **Error Chaining:** Driver exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       TabularError                               │
        │  (category, context, cause)                                      │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError          DatabaseError          ValidationError     │
        │  (CONFIG)             (DATABASE)             (VALIDATION)        │
        │       │                    │                      │              │
        │  ConnectionConfigError StatementError        MissingKeyError     │
        │  FilterConfigError    VanishedRowError       InvalidChangeType   │
        │                       IntegrityError         SchemaError         │
        │                            │                                     │
        │                       CardinalityError                           │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = MissingKeyError("id", table="alarms")
    >>> error.column
    'id'
    >>> error.to_dict()["category"]
    'VALIDATION'

Tags:
    error-handling, exception-hierarchy, error-context, tabular
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    DATABASE = "DATABASE"         # Statement failures, integrity problems
    VALIDATION = "VALIDATION"     # Bad caller input (keys, change types)
    CONFIG = "CONFIG"             # Connection parameters, filter definitions
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        table: Table the operation targeted
        operation: Operation name (``insert``, ``update``, ``delete`` ...)
        sql: Statement text, when one was built
        key: Resolved key values of the affected row
        metadata: Additional key-value pairs
    """

    table: str | None = None
    operation: str | None = None
    sql: str | None = None
    key: dict[str, Any] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for name in ("table", "operation", "sql", "key"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TabularError(Exception):
    """
    Base exception for all Tabular errors.

    Subclasses set ``default_category``. Context can be supplied at
    construction or added fluently with :meth:`with_context`.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    @property
    def retryable(self) -> bool:
        """Nothing in this layer is retried."""
        return False

    def with_context(self, **kwargs: Any) -> TabularError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StatementError("Insert failed", detail=msg).with_context(
                table="alarms", operation="insert"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
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
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TabularError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG


class ConnectionConfigError(ConfigError):
    """The connection provider could not open its connection.

    Fatal at construction: bad host, credentials, database name, or a
    missing driver.
    """


class FilterConfigError(ConfigError):
    """A column declares a filter kind that does not exist."""


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(TabularError):
    """Database statement or integrity error."""

    default_category = ErrorCategory.DATABASE


class StatementError(DatabaseError):
    """A prepare/execute failed in the backing store.

    ``detail`` holds the driver's native error message.
    """

    def __init__(self, message: str, *, detail: str = "", **kwargs: Any):
        super().__init__(message, **kwargs)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.detail:
            result["detail"] = self.detail
        return result


class IntegrityError(DatabaseError):
    """Persisted data violates an assumption the caller relies on."""


class CardinalityError(IntegrityError):
    """A lookup on a supposedly unique key matched more than one row."""

    def __init__(self, message: str, *, count: int, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.count = count


class VanishedRowError(DatabaseError):
    """A row expected to exist could not be re-read.

    Signals a concurrent modification between a read and a write.
    """


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(TabularError):
    """Caller supplied input the layer cannot act on."""

    default_category = ErrorCategory.VALIDATION


class MissingKeyError(ValidationError):
    """A key column is absent from both the key overrides and the row."""

    def __init__(self, column: str, *, table: str | None = None, message: str | None = None):
        super().__init__(
            message or f"Key column not found in record: {column}",
            context=ErrorContext(table=table, metadata={"column": column}),
        )
        self.column = column


class InvalidChangeTypeError(ValidationError):
    """The ledger was asked to record an unknown change type."""


class SchemaError(ValidationError):
    """Table schema does not match what the caller expects."""


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, TabularError):
        return error.category
    if isinstance(error, (KeyError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TabularError",
    "ConfigError",
    "ConnectionConfigError",
    "FilterConfigError",
    "DatabaseError",
    "StatementError",
    "IntegrityError",
    "CardinalityError",
    "VanishedRowError",
    "ValidationError",
    "MissingKeyError",
    "InvalidChangeTypeError",
    "SchemaError",
    "categorize_error",
]
