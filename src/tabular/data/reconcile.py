"""Diff/Reconcile Engine for spreadsheet-style bulk edits.

The front-end sends each edited row as a before/after pair::

    {"O": {"id": 7, "name": "A"}, "N": {"id": 7, "name": "B"}}

:meth:`Reconciler.reconcile_batch` compares the sides field by field
(trimmed, ``None`` read as ``""``), updates the row identified by the old
side's key, falls back to an insert when the row turns out not to exist,
and writes the matching ledger rows.

Zero affected rows from the UPDATE is ambiguous: the row may be absent, or
it may already hold the new values. Only that path pays for a second read
to tell the two apart. The read is not atomic with the UPDATE; a
concurrent writer can change the row in between.

Manifesto:
    - **Compare before writing:** unchanged pairs cost no statements
    - **Old side is the target:** key edits update the row they came from
    - **Skip malformed, abort on failure:** bad input is logged and skipped,
      database errors end the batch
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tabular.core.errors import MissingKeyError, VanishedRowError
from tabular.core.logging import LogContext, get_logger
from tabular.data.context import OperationContext
from tabular.data.ledger import ChangeType
from tabular.data.table import TabularTable, parse_key

logger = get_logger(__name__)


class DiffKind(str, Enum):
    INSERT = "Insert"
    UPDATE = "Update"
    NO_CHANGE = "NoChange"
    NOT_FOUND = "NotFound"


@dataclass(frozen=True)
class DiffInput:
    """A before/after pair of field maps."""

    old: dict[str, Any] = field(default_factory=dict)
    new: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, value: Any) -> DiffInput:
        """Accept ``{"O": ..., "N": ...}`` or ``{"old": ..., "new": ...}``.

        Raises:
            ValueError: ``value`` does not have that shape.
        """
        if isinstance(value, DiffInput):
            return value
        if not isinstance(value, Mapping):
            raise ValueError(f"Diff input must be a mapping, got {type(value).__name__}")
        for old_key, new_key in (("O", "N"), ("old", "new")):
            if old_key in value and new_key in value:
                old, new = value[old_key] or {}, value[new_key] or {}
                if not isinstance(old, Mapping) or not isinstance(new, Mapping):
                    raise ValueError("Diff input sides must be mappings")
                return cls(dict(old), dict(new))
        raise ValueError("Diff input needs 'O'/'N' or 'old'/'new' sides")

    def changed_columns(self, column_mask: Iterable[str] | None = None) -> list[str]:
        """Fields of the new side whose trimmed value differs from the old side."""
        new = _masked(self.new, column_mask)
        return [col for col, val in new.items() if _trimmed(self.old.get(col)) != _trimmed(val)]


@dataclass(frozen=True)
class DiffRecord:
    """Comparison of a candidate row against its persisted state.

    Attributes:
        kind: Classification of the candidate.
        key: WHERE body identifying the row.
        key_params: Values bound to ``key``.
        old: Persisted row (empty when none exists).
        new: Persisted row overlaid with the changed candidate values,
            or the candidate itself when nothing is persisted.
        changed_columns: Changed field names, in persisted column order.
    """

    kind: DiffKind
    key: str
    key_params: tuple[Any, ...]
    old: dict[str, Any]
    new: dict[str, Any]
    changed_columns: list[str] = field(default_factory=list)

    def to_input(self) -> DiffInput:
        return DiffInput(dict(self.old), dict(self.new))


def _trimmed(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _differs(persisted: Any, candidate: Any) -> bool:
    if persisted == candidate:
        return False
    return ("" if persisted is None else str(persisted)) != str(candidate)


def _masked(row: Mapping[str, Any], column_mask: Iterable[str] | None) -> dict[str, Any]:
    if not column_mask:
        return dict(row)
    mask = set(column_mask)
    return {k: v for k, v in row.items() if k in mask}


class Reconciler:
    """Diff and bulk-apply candidate rows against one table."""

    def __init__(self, table: TabularTable) -> None:
        self._table = table

    @property
    def table(self) -> TabularTable:
        return self._table

    # -- Diff --------------------------------------------------------------

    def diff(
        self,
        row: Mapping[str, Any],
        key_columns: str | Iterable[str] | None = None,
        key_values: Mapping[str, Any] | None = None,
        insert_if_missing: bool = True,
    ) -> DiffRecord:
        """Classify ``row`` against the persisted row with the same key.

        Fields absent from ``row`` (or ``None`` in it) count as unchanged.

        Raises:
            MissingKeyError: ``row`` has no value for a key column.
            CardinalityError: The key matched several rows.
        """
        keys = self._table.resolve_key(key_columns)
        where, params = self._table.key_predicate(row, keys, key_values)
        current = self._table.find_by_key(row, keys, key_values)
        if current is None:
            kind = DiffKind.INSERT if insert_if_missing else DiffKind.NOT_FOUND
            return DiffRecord(kind, where, params, {}, dict(row), [])

        new = dict(current)
        changed: list[str] = []
        for col, value in current.items():
            if row.get(col) is not None and _differs(value, row[col]):
                changed.append(col)
                new[col] = row[col]
        kind = DiffKind.UPDATE if changed else DiffKind.NO_CHANGE
        return DiffRecord(kind, where, params, current, new, changed)

    def diffs(
        self,
        rows: Iterable[Mapping[str, Any]],
        key_columns: str | Iterable[str] | None = None,
        key_values: Mapping[str, Any] | None = None,
        insert_if_missing: bool = True,
    ) -> list[DiffRecord]:
        """:meth:`diff` for each row; rows without a key are logged and skipped."""
        results: list[DiffRecord] = []
        for index, row in enumerate(rows):
            try:
                results.append(self.diff(row, key_columns, key_values, insert_if_missing))
            except MissingKeyError as e:
                logger.warning("diff_skipped", table=self._table.name, index=index, column=e.column)
        return results

    def has_changes(self, inputs: Iterable[DiffInput | Mapping[str, Any]]) -> bool:
        """True when any input has a field whose trimmed value changed."""
        return any(DiffInput.from_mapping(item).changed_columns() for item in inputs)

    # -- Apply -------------------------------------------------------------

    def reconcile_batch(
        self,
        inputs: Iterable[DiffInput | Mapping[str, Any]],
        key_columns: str | Sequence[str] = "id",
        column_mask: Iterable[str] | None = None,
        *,
        ctx: OperationContext | None = None,
    ) -> int:
        """Apply before/after pairs and ledger the changes.

        Returns the number of pairs with at least one changed field, not
        the number of rows written. Malformed pairs are logged and skipped;
        statement failures propagate and end the batch with earlier pairs
        already applied.
        """
        table = self._table
        keys = parse_key(key_columns) or table.resolve_key()
        mask = list(column_mask) if column_mask else None
        log = ctx.bind_logger(logger) if ctx is not None else logger
        cri = ctx.correlation_id if ctx is not None else ""
        with LogContext(correlation_id=cri):
            count = self._apply(inputs, keys, mask, cri, log, ctx)
        log.info("batch_reconciled", table=table.name, changed=count)
        return count

    def _apply(
        self,
        inputs: Iterable[DiffInput | Mapping[str, Any]],
        keys: list[str],
        mask: list[str] | None,
        cri: str,
        log: Any,
        ctx: OperationContext | None,
    ) -> int:
        table = self._table
        count = 0
        for index, raw in enumerate(inputs):
            try:
                item = DiffInput.from_mapping(raw)
            except ValueError as e:
                log.warning("diff_input_skipped", table=table.name, index=index, reason=str(e))
                continue

            new = _masked(item.new, mask)
            changed = item.changed_columns(mask)
            if not changed:
                log.debug("no_diff", table=table.name, index=index)
                continue

            target = {k: item.old.get(k) if item.old.get(k) is not None else new.get(k) for k in keys}
            missing = [k for k, v in target.items() if v is None]
            if missing:
                log.warning("diff_input_skipped", table=table.name, index=index, reason=f"missing key {missing[0]}")
                continue

            count += 1
            affected = table.update(new, keys, changed, True, target, ctx=ctx)
            if affected == 0:
                self._insert_if_absent(new, keys, target, cri, ctx)
            else:
                self._ledger_update(item.old, new, keys, target, changed, cri, ctx)
        return count

    def _insert_if_absent(
        self,
        new: dict[str, Any],
        keys: list[str],
        target: dict[str, Any],
        cri: str,
        ctx: OperationContext | None,
    ) -> None:
        table = self._table
        if table.find_by_key(target, keys) is not None:
            return
        insert_id = table.insert(new, ctx=ctx, ledger=False)
        ledger_row = {**target, **new}
        ledger_keys = keys
        if table.history_key:
            ledger_row[table.history_key] = insert_id
            ledger_keys = [table.history_key]
        table.ledger().record(ChangeType.INSERT, cri, ledger_keys, ledger_row, ctx=ctx)

    def _ledger_update(
        self,
        old: dict[str, Any],
        new: dict[str, Any],
        keys: list[str],
        target: dict[str, Any],
        changed: list[str],
        cri: str,
        ctx: OperationContext | None,
    ) -> None:
        table = self._table
        ledger_row = {**target, **new}
        ledger_keys = keys
        if table.history_key:
            current = table.find_by_key(ledger_row, keys)
            if current is None:
                raise VanishedRowError(
                    "Updated row could not be re-read for its history key",
                ).with_context(table=table.name, operation="reconcile_batch", key=target)
            ledger_row[table.history_key] = current.get(table.history_key)
            ledger_keys = [table.history_key]
        table.ledger().record(ChangeType.UPDATE, cri, ledger_keys, ledger_row, old, changed, ctx=ctx)


__all__ = ["DiffKind", "DiffInput", "DiffRecord", "Reconciler"]
