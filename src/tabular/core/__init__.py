"""Tabular Core -- connection, dialect, error, logging and settings primitives.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (TabularError)
        protocols.py       DB-API Connection / Cursor protocols

    Layer 2 -- Database
        dialect.py         SQL dialect abstraction (SQLite, MySQL)
        adapters/          Database adapters (one connection each)
        connection.py      TabularDb connection provider

    Ambient
        logging.py         structlog configuration
        settings.py        pydantic-settings TabularSettings
"""

from tabular.core.connection import TabularDb
from tabular.core.dialect import Dialect, MySQLDialect, SQLiteDialect, get_dialect
from tabular.core.errors import (
    CardinalityError,
    ConfigError,
    ConnectionConfigError,
    DatabaseError,
    FilterConfigError,
    InvalidChangeTypeError,
    MissingKeyError,
    SchemaError,
    StatementError,
    TabularError,
    ValidationError,
    VanishedRowError,
)

__all__ = [
    "TabularDb",
    "Dialect",
    "MySQLDialect",
    "SQLiteDialect",
    "get_dialect",
    "TabularError",
    "ConfigError",
    "ConnectionConfigError",
    "FilterConfigError",
    "DatabaseError",
    "StatementError",
    "CardinalityError",
    "VanishedRowError",
    "ValidationError",
    "MissingKeyError",
    "InvalidChangeTypeError",
    "SchemaError",
]
