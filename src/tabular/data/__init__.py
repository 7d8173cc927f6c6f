"""Tabular Data -- the table-access layer.

Architecture::

    context.py      OperationContext (actor, correlation id, logger)
    query.py        Immutable Query values
    columns.py      ColumnDef metadata
    filters.py      Filter variants (equals / contains / one_of)
    table.py        TabularTable, the row store
    ledger.py       ChangeLedger, the history-table writer
    reconcile.py    Reconciler, diff and bulk apply
"""

from tabular.data.columns import ColumnDef, column_set, key_columns
from tabular.data.context import OperationContext
from tabular.data.filters import (
    ContainsFilter,
    EqualsFilter,
    FilterKind,
    OneOfFilter,
    combine_filters,
    filter_set,
    make_filter,
)
from tabular.data.ledger import ChangeLedger, ChangeType, LedgerRecord
from tabular.data.query import Query
from tabular.data.reconcile import DiffInput, DiffKind, DiffRecord, Reconciler
from tabular.data.table import TabularTable, create_table_sql

__all__ = [
    "ColumnDef",
    "column_set",
    "key_columns",
    "OperationContext",
    "FilterKind",
    "EqualsFilter",
    "ContainsFilter",
    "OneOfFilter",
    "make_filter",
    "filter_set",
    "combine_filters",
    "ChangeLedger",
    "ChangeType",
    "LedgerRecord",
    "Query",
    "DiffInput",
    "DiffKind",
    "DiffRecord",
    "Reconciler",
    "TabularTable",
    "create_table_sql",
]
