"""Change Ledger: append-only audit rows in a table's history table.

Inserts and deletes produce one ledger row each; updates produce one row
per changed field with its old and new value. Rows are written with the
owning table's ``insert`` against its history table, so dry-run mode and
statement failures behave exactly as for ordinary inserts.

History table layout::

    id | CRI | Change_Type | <key columns> | Field_Name | Old_Value | New_Value | Updated_By | Updated_On
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from tabular.core.errors import InvalidChangeTypeError, MissingKeyError
from tabular.core.logging import get_logger
from tabular.data.columns import ColumnDef
from tabular.data.context import OperationContext

if TYPE_CHECKING:
    from tabular.data.table import TabularTable

logger = get_logger(__name__)


class ChangeType(str, Enum):
    INSERT = "Insert"
    UPDATE = "Update"
    DELETE = "Delete"

    @classmethod
    def parse(cls, value: ChangeType | str) -> ChangeType:
        """Case-insensitive lookup: ``"update"`` and ``"UPDATE"`` give :attr:`UPDATE`.

        Raises:
            InvalidChangeTypeError: Not one of Insert, Update, Delete.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).lower().capitalize()
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidChangeTypeError(f"Invalid change type: {value}") from None


@dataclass(frozen=True)
class LedgerRecord:
    """One row of the history table."""

    change_type: ChangeType
    correlation_id: str
    key_values: dict[str, Any] = field(default_factory=dict)
    field_name: str | None = None
    old_value: Any = None
    new_value: Any = None

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {"CRI": self.correlation_id, "Change_Type": self.change_type.value}
        row.update(self.key_values)
        if self.change_type is ChangeType.UPDATE:
            row["Field_Name"] = self.field_name
            row["Old_Value"] = self.old_value
            row["New_Value"] = self.new_value
        return row


class ChangeLedger:
    """Writes :class:`LedgerRecord` rows for one :class:`TabularTable`."""

    def __init__(self, table: TabularTable) -> None:
        self._table = table

    @property
    def table_name(self) -> str:
        return self._table.history_table

    def record(
        self,
        change_type: ChangeType | str,
        correlation_id: str,
        key_columns: str | Iterable[str],
        new_row: Mapping[str, Any],
        old_row: Mapping[str, Any] | None = None,
        changed_columns: Iterable[str] | None = None,
        *,
        ctx: OperationContext | None = None,
    ) -> list[LedgerRecord]:
        """Write the ledger rows for one change and return them.

        Key values are read from ``new_row``. For updates, one row is
        written per entry of ``changed_columns``. Nothing happens when the
        table's history is disabled.

        Raises:
            InvalidChangeTypeError: Unknown ``change_type``.
            MissingKeyError: A key column is absent from ``new_row``.
        """
        if not self._table.history:
            return []
        kind = ChangeType.parse(change_type)
        keys = [key_columns] if isinstance(key_columns, str) else list(key_columns)
        key_values: dict[str, Any] = {}
        for k in keys:
            if k not in new_row:
                raise MissingKeyError(k, table=self.table_name)
            key_values[k] = new_row[k]

        if kind is ChangeType.UPDATE:
            old_row = old_row or {}
            records = [
                LedgerRecord(kind, correlation_id, key_values, col, old_row.get(col), new_row.get(col))
                for col in changed_columns or ()
            ]
        else:
            records = [LedgerRecord(kind, correlation_id, key_values)]

        for rec in records:
            self._table.insert(rec.to_row(), target_table=self.table_name, ctx=ctx)
        log = ctx.bind_logger(logger) if ctx is not None else logger
        log.debug(
            "ledger_written",
            table=self.table_name,
            change_type=kind.value,
            rows=len(records),
            cri=correlation_id,
        )
        return records

    def create_statement(self, key_types: Mapping[str, str], engine: str = "InnoDB") -> str:
        """CREATE TABLE statement for the history table.

        The table gets its own auto-increment ``id`` unless ``id`` is itself
        a key column, in which case it has no primary key.

        Args:
            key_types: Key column name to SQL type, in key order.
        """
        columns = [
            ColumnDef("CRI", sql_type="varchar(32) default NULL"),
            ColumnDef("Change_Type", sql_type="varchar(10) default NULL"),
            *(ColumnDef(name, sql_type=sql_type) for name, sql_type in key_types.items()),
            ColumnDef("Field_Name", sql_type="varchar(64) default NULL"),
            ColumnDef("Old_Value", sql_type="text"),
            ColumnDef("New_Value", sql_type="text"),
        ]
        return self._table.generate_create_statement(
            {c.name: c for c in columns},
            key=() if "id" in key_types else "id",
            engine=engine,
            table_name=self.table_name,
        )


__all__ = ["ChangeType", "LedgerRecord", "ChangeLedger"]
