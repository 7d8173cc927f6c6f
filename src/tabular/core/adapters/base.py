"""Database adapter base class.

All database adapters share a common lifecycle (connect/disconnect) and
dialect management. The abstract base class defines the interface contract
so the connection provider never depends on a specific database vendor.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``get_connection()``
    - ``driver_errors`` so callers can translate native exceptions
    - Property-based dialect and connection-state introspection
    - Context-manager protocol for connection lifecycle

Tags:
    tabular, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from tabular.core.dialect import Dialect, get_dialect
from tabular.core.protocols import Connection

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    An adapter owns at most one live DB-API connection. Statements run in
    autocommit mode; this layer never opens transactions of its own.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._conn: Any = None
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    @abstractmethod
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        """Exception classes the driver raises for failed statements."""
        ...

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    def disconnect(self) -> None:
        """Close connection to database."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._connected = False

    def get_connection(self) -> Connection:
        """Get the live connection, connecting on first use."""
        if self._conn is None:
            self.connect()
        return self._conn

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
