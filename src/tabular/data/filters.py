"""Column filters: a closed set of variants selected by :class:`FilterKind`.

Each variant turns a user-chosen value into a ``(predicate, params)`` pair
with bound parameters. The value ``"All"`` (any case) or an empty value
means "no restriction" and produces no predicate.

::

    filters = filter_set(columns)
    where, params = combine_filters(filters, {"Owner": "Bob", "Edition": "All"}, db.dialect)
    rows = alarms.where(where, params).execute()

Tags:
    filters, tagged-union, where-clause, tabular
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from tabular.core.dialect import Dialect
from tabular.core.errors import FilterConfigError

if TYPE_CHECKING:
    from tabular.data.columns import ColumnDef

ALL = "all"


class FilterKind(str, Enum):
    """Supported filter variants."""

    EQUALS = "equals"
    CONTAINS = "contains"
    ONE_OF = "one_of"

    @classmethod
    def parse(cls, value: FilterKind | str | None, *, column: str | None = None) -> FilterKind:
        """Resolve a filter kind name; ``None`` means :attr:`EQUALS`.

        Accepts ``"one_of"``, ``"OneOf"`` and ``"oneof"`` alike.

        Raises:
            FilterConfigError: The name is not a known filter kind.
        """
        if value is None or value == "":
            return cls.EQUALS
        if isinstance(value, cls):
            return value
        normalized = str(value).replace("_", "").replace("-", "").lower()
        for kind in cls:
            if kind.value.replace("_", "") == normalized:
                return kind
        raise FilterConfigError(f"Unknown filter kind: {value!r}").with_context(column=column)


def _inactive(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == "" or value.strip().lower() == ALL
    if isinstance(value, Sequence):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class EqualsFilter:
    """``column = value``."""

    column: str
    kind: FilterKind = FilterKind.EQUALS

    def predicate(self, value: Any, dialect: Dialect) -> tuple[str, tuple[Any, ...]] | None:
        if _inactive(value):
            return None
        return f"{dialect.quote(self.column)} = {dialect.placeholder(0)}", (value,)


@dataclass(frozen=True)
class ContainsFilter:
    """``column LIKE %value%``."""

    column: str
    kind: FilterKind = FilterKind.CONTAINS

    def predicate(self, value: Any, dialect: Dialect) -> tuple[str, tuple[Any, ...]] | None:
        if _inactive(value):
            return None
        return f"{dialect.quote(self.column)} LIKE {dialect.placeholder(0)}", (f"%{value}%",)


@dataclass(frozen=True)
class OneOfFilter:
    """``column IN (...)``; a string value is split on commas."""

    column: str
    kind: FilterKind = FilterKind.ONE_OF

    def predicate(self, value: Any, dialect: Dialect) -> tuple[str, tuple[Any, ...]] | None:
        if _inactive(value):
            return None
        if isinstance(value, str):
            value = [v.strip() for v in value.split(",") if v.strip()]
            if not value:
                return None
        choices = tuple(value)
        return f"{dialect.quote(self.column)} IN ({dialect.placeholders(len(choices))})", choices


Filter = EqualsFilter | ContainsFilter | OneOfFilter

_FILTERS: dict[FilterKind, type[EqualsFilter] | type[ContainsFilter] | type[OneOfFilter]] = {
    FilterKind.EQUALS: EqualsFilter,
    FilterKind.CONTAINS: ContainsFilter,
    FilterKind.ONE_OF: OneOfFilter,
}


def make_filter(column: ColumnDef) -> Filter:
    """Build the filter declared by ``column.filter_kind``."""
    kind = FilterKind.parse(column.filter_kind, column=column.name)
    return _FILTERS[kind](column.name)


def filter_set(columns: Mapping[str, ColumnDef], subset: Iterable[str] = ()) -> dict[str, Filter]:
    """Filters for every column, or only those named in ``subset``."""
    wanted = list(subset)
    if wanted:
        columns = {name: columns[name] for name in wanted if name in columns}
    return {name: make_filter(col) for name, col in columns.items()}


def combine_filters(
    filters: Mapping[str, Filter],
    values: Mapping[str, Any],
    dialect: Dialect,
) -> tuple[str, tuple[Any, ...]]:
    """AND together the active predicates; ``("", ())`` when none apply."""
    parts: list[str] = []
    params: list[Any] = []
    for name, flt in filters.items():
        result = flt.predicate(values.get(name), dialect)
        if result is None:
            continue
        sql, bound = result
        parts.append(sql)
        params.extend(bound)
    return " AND ".join(parts), tuple(params)


__all__ = [
    "FilterKind",
    "EqualsFilter",
    "ContainsFilter",
    "OneOfFilter",
    "Filter",
    "make_filter",
    "filter_set",
    "combine_filters",
]
