"""
Tabular: a table-access toolkit for spreadsheet-style CRUD applications.

Wraps single SQL tables with immutable query building, change auditing to a
history table, and diff/reconcile for bulk edits.

Example:
    >>> from tabular import TabularDb, TabularTable, Reconciler
    >>> db = TabularDb.sqlite()
    >>> items = TabularTable(db, "items", key="id")
"""

from tabular.core.connection import TabularDb
from tabular.core.errors import TabularError
from tabular.data import (
    ChangeLedger,
    ChangeType,
    DiffInput,
    DiffKind,
    DiffRecord,
    OperationContext,
    Query,
    Reconciler,
    TabularTable,
)

__version__ = "0.1.0"

__all__ = [
    "TabularDb",
    "TabularError",
    "TabularTable",
    "Query",
    "OperationContext",
    "ChangeLedger",
    "ChangeType",
    "Reconciler",
    "DiffInput",
    "DiffKind",
    "DiffRecord",
]
