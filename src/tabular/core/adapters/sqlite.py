"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
from typing import Any

from tabular.core.errors import ConnectionConfigError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module. Suitable for:
    - Development and testing
    - Single-process tools
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            database=path,
            charset="utf8",
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error,)

    def connect(self) -> None:
        """Connect to SQLite database in autocommit mode."""
        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                isolation_level=None,
                uri=uri,
            )
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._connected = True
        except sqlite3.Error as e:
            raise ConnectionConfigError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e


__all__ = [
    "SQLiteAdapter",
]
