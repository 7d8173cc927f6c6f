"""Column metadata used for CREATE statements, filters and code generation.

A column definition is either a bare name (a text column) or a mapping
using the keys the spreadsheet front-end already writes::

    columns = column_set({
        "AD_alarmID": {"type": "text", "maxlen": 10, "key": True},
        "Owner": {"type": "autocomplete", "maxlen": 138, "filterType": "contains"},
        "Notes": "Notes",
    })
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tabular.core.errors import SchemaError
from tabular.data.filters import FilterKind

# Definition keys mapped onto ColumnDef fields; anything else goes to ``attrs``.
_KNOWN_KEYS = {
    "type": "kind",
    "kind": "kind",
    "maxlen": "max_length",
    "max_length": "max_length",
    "sqlType": "sql_type",
    "sql_type": "sql_type",
    "key": "key",
    "filterType": "filter_kind",
    "filter_kind": "filter_kind",
}


@dataclass(frozen=True)
class ColumnDef:
    """One column of a table definition."""

    name: str
    kind: str = "text"
    max_length: int | None = None
    sql_type: str | None = None
    key: bool = False
    filter_kind: FilterKind | None = None
    attrs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.filter_kind is not None:
            object.__setattr__(self, "filter_kind", FilterKind.parse(self.filter_kind, column=self.name))
        if self.max_length is not None:
            object.__setattr__(self, "max_length", int(self.max_length))

    @classmethod
    def from_definition(cls, name: str, definition: str | Mapping[str, Any]) -> ColumnDef:
        if isinstance(definition, str):
            return cls(name=definition)
        kwargs: dict[str, Any] = {}
        attrs: dict[str, Any] = {}
        for key, value in definition.items():
            if key in _KNOWN_KEYS:
                kwargs[_KNOWN_KEYS[key]] = value
            else:
                attrs[key] = value
        return cls(name=name, attrs=attrs, **kwargs)

    def column_sql_type(self) -> str:
        """SQL type used in CREATE TABLE."""
        if self.sql_type:
            return self.sql_type
        if self.max_length:
            return f"varchar({self.max_length}) default NULL"
        return "text"


def column_set(definitions: Mapping[str, Any] | Iterable[str]) -> dict[str, ColumnDef]:
    """Build ordered column definitions.

    Raises:
        SchemaError: The same column name is defined twice.
    """
    items = definitions.items() if isinstance(definitions, Mapping) else ((d, d) for d in definitions)
    result: dict[str, ColumnDef] = {}
    for name, definition in items:
        col = ColumnDef.from_definition(name, definition)
        if col.name in result:
            raise SchemaError(f"Attempt to create column that already exists: {col.name}")
        result[col.name] = col
    return result


def key_columns(columns: Mapping[str, ColumnDef]) -> list[str]:
    return [name for name, col in columns.items() if col.key]


__all__ = ["ColumnDef", "column_set", "key_columns"]
