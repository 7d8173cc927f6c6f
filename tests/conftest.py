"""
Shared pytest fixtures for Tabular tests.

This module provides:
- An in-memory SQLite ``TabularDb`` with ``items`` / ``items_change_log`` /
  ``items_del`` tables
- A recording fake MySQL connection for asserting generated SQL
- Settings isolation (no ``.env`` or ``TABULAR_*`` leakage)
"""

from __future__ import annotations

import os
from collections.abc import Generator
from datetime import datetime
from typing import Any

import pytest
import structlog

from tabular.core.adapters import DatabaseAdapter, DatabaseConfig, DatabaseType
from tabular.core.connection import TabularDb
from tabular.core.settings import get_settings
from tabular.data.context import OperationContext
from tabular.data.table import TabularTable

ITEMS_DDL = """
CREATE TABLE items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    qty INTEGER,
    Updated_By TEXT,
    Updated_On TEXT
)
"""

CHANGE_LOG_DDL = """
CREATE TABLE items_change_log (
    log_id INTEGER PRIMARY KEY AUTOINCREMENT,
    CRI TEXT,
    Change_Type TEXT,
    id INTEGER,
    Field_Name TEXT,
    Old_Value TEXT,
    New_Value TEXT,
    Updated_By TEXT,
    Updated_On TEXT
)
"""

DELETED_DDL = """
CREATE TABLE items_del (
    id INTEGER,
    name TEXT,
    qty INTEGER,
    Updated_By TEXT,
    Updated_On TEXT
)
"""

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 45)


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Run every test from an empty directory with no TABULAR_* variables."""
    for name in list(os.environ):
        if name.startswith("TABULAR_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Undo any structlog configuration or bound context a test leaves behind."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


# =============================================================================
# SQLite
# =============================================================================


@pytest.fixture
def db() -> Generator[TabularDb, None, None]:
    database = TabularDb.sqlite()
    database.execute(ITEMS_DDL)
    database.execute(CHANGE_LOG_DDL)
    database.execute(DELETED_DDL)
    yield database
    database.close()


@pytest.fixture
def ctx() -> OperationContext:
    return OperationContext(actor="tester", correlation_id="CR-1", clock=lambda: FIXED_NOW)


@pytest.fixture
def items(db: TabularDb) -> TabularTable:
    return TabularTable(db, "items", key="id")


def ledger_rows(db: TabularDb, table: str = "items_change_log") -> list[dict[str, Any]]:
    """All history rows in insertion order."""
    return db.query(f'SELECT * FROM "{table}" ORDER BY rowid')


@pytest.fixture
def history(db: TabularDb):
    return lambda: ledger_rows(db)


# =============================================================================
# Recording MySQL double
# =============================================================================


class RecordingCursor:
    """DB-API cursor that records statements and replays queued results."""

    def __init__(self, conn: RecordingConnection) -> None:
        self._conn = conn
        self.description: list[tuple[Any, ...]] | None = None
        self.rowcount = -1
        self.lastrowid: Any = None
        self._rows: list[tuple[Any, ...]] = []

    def execute(self, sql: str, params: Any = ()) -> None:
        self._conn.statements.append((sql, tuple(params)))
        if self._conn.fail_on and self._conn.fail_on in sql:
            raise RuntimeError(f"simulated failure: {self._conn.fail_on}")
        if sql.lstrip().upper().startswith("SELECT"):
            rows = self._conn.results.pop(0) if self._conn.results else []
            columns = list(rows[0]) if rows else ["COLUMN_NAME"]
            self.description = [(c, None, None, None, None, None, None) for c in columns]
            self._rows = [tuple(r[c] for c in columns) for r in rows]
            self.rowcount = len(rows)
        else:
            self.rowcount = self._conn.rowcount
            self.lastrowid = self._conn.lastrowid

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self._rows)

    def close(self) -> None:
        pass


class RecordingConnection:
    def __init__(self) -> None:
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.results: list[list[dict[str, Any]]] = []
        self.rowcount = 1
        self.lastrowid: Any = 42
        self.fail_on: str | None = None

    def queue(self, *results: list[dict[str, Any]]) -> None:
        """Rows returned by the next SELECT statements, in order."""
        self.results.extend(results)

    def sql(self) -> list[str]:
        return [s for s, _ in self.statements]

    def cursor(self) -> RecordingCursor:
        return RecordingCursor(self)

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    def close(self) -> None:
        pass


class RecordingAdapter(DatabaseAdapter):
    """MySQL-dialect adapter backed by :class:`RecordingConnection`."""

    def __init__(self, database: str = "syseng", charset: str = "utf8") -> None:
        super().__init__(DatabaseConfig(db_type=DatabaseType.MYSQL, database=database, charset=charset))
        self.recorder = RecordingConnection()

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        return (RuntimeError,)

    def connect(self) -> None:
        self._conn = self.recorder
        self._connected = True


@pytest.fixture
def mysql_adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def mysql_db(mysql_adapter: RecordingAdapter) -> TabularDb:
    return TabularDb.from_adapter(mysql_adapter)


@pytest.fixture
def recorder(mysql_adapter: RecordingAdapter) -> RecordingConnection:
    return mysql_adapter.recorder
