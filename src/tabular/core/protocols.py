"""
Canonical protocol definitions for Tabular.

The connection provider hands out plain DB-API 2.0 connections (sqlite3,
mysql.connector). These protocols describe the subset the table layer
relies on, so adapters and test doubles only need to match the shape.

Architecture:
    ::

        Connection Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ cursor()               → Cursor                        │
        │ commit()               → Commit transaction            │
        │ rollback()             → Rollback transaction          │
        │ close()                → Release the connection        │
        └────────────────────────────────────────────────────────┘

        Cursor Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ execute(sql, params)   → Execute single statement      │
        │ fetchall()             → All result rows               │
        │ description            → Column metadata               │
        │ rowcount / lastrowid   → DML outcome                   │
        └────────────────────────────────────────────────────────┘

Tags:
    protocol, connection, cursor, database, dbapi
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API 2.0 cursor."""

    description: Sequence[Sequence[Any]] | None
    rowcount: int
    lastrowid: Any

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute SQL statement with positional parameters."""
        ...

    def fetchall(self) -> list[Any]:
        """Fetch all rows from last query."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Minimal DB-API 2.0 connection."""

    def cursor(self) -> Cursor:
        """Open a cursor."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


__all__ = ["Connection", "Cursor"]
