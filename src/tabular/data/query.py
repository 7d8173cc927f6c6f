"""Immutable read queries for :class:`~tabular.data.table.TabularTable`.

A :class:`Query` is a value: every builder method returns a new ``Query``
and leaves the receiver untouched. The table never holds query state, so
nothing configured for one read can leak into the next.

::

    rows = (
        alarms.where("Edition = ?", ("TEST DATA Edition 2",))
        .order_by("AD_alarmID")
        .limit(0, 50)
        .execute()
    )
    alarms.execute()          # all rows; the filter above did not stick
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from tabular.core.dialect import Dialect

if TYPE_CHECKING:
    from tabular.data.table import TabularTable


@dataclass(frozen=True)
class Query:
    """One SELECT against a table, built fluently and consumed by ``execute``.

    Attributes:
        columns: Projection; ``None`` selects every column.
        predicate: WHERE body using the dialect's placeholders.
        params: Values bound to ``predicate``.
        order: ORDER BY body.
        offset / count: LIMIT window; ``count=None`` means no limit.
        sql / sql_params: Literal statement overriding everything else.
    """

    table: TabularTable | None = field(default=None, compare=False, repr=False)
    columns: str | tuple[str, ...] | None = None
    predicate: str = ""
    params: tuple[Any, ...] = ()
    order: str = ""
    offset: int = 0
    count: int | None = None
    sql: str = ""
    sql_params: tuple[Any, ...] = ()

    # -- Builders ----------------------------------------------------------

    def select(self, columns: str | Iterable[str]) -> Query:
        """Set the projection. A string is used verbatim, names are quoted."""
        if isinstance(columns, str):
            return replace(self, columns=columns)
        return replace(self, columns=tuple(columns))

    def where(self, predicate: str, params: Sequence[Any] = ()) -> Query:
        """Filter by a predicate with bound parameters. Empty predicates are ignored."""
        if not predicate:
            return self
        return replace(self, predicate=predicate, params=tuple(params))

    def where_map(self, conditions: Mapping[str, Any], dialect: Dialect | None = None) -> Query:
        """Filter by equality on each column of ``conditions``, joined with AND."""
        if not conditions:
            return self
        dialect = dialect or self._dialect()
        parts = [f"{dialect.quote(col)} = {dialect.placeholder(i)}" for i, col in enumerate(conditions)]
        return replace(self, predicate=" AND ".join(parts), params=tuple(conditions.values()))

    def order_by(self, clause: str) -> Query:
        return replace(self, order=clause)

    def limit(self, offset: int = 0, count: int = 10) -> Query:
        return replace(self, offset=offset, count=count)

    def raw_sql(self, sql: str, params: Sequence[Any] = ()) -> Query:
        """Run ``sql`` literally instead of a built SELECT."""
        return replace(self, sql=sql, sql_params=tuple(params))

    # -- Rendering ---------------------------------------------------------

    def where_sql(self) -> str:
        return f" WHERE {self.predicate}" if self.predicate else ""

    def order_sql(self) -> str:
        return f" ORDER BY {self.order}" if self.order else ""

    def build(self, table_name: str, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        """Render to ``(sql, params)`` for ``table_name``."""
        if self.sql:
            return self.sql, self.sql_params
        if self.columns is None:
            projection = "*"
        elif isinstance(self.columns, str):
            projection = self.columns
        else:
            projection = ", ".join(dialect.quote(c) for c in self.columns)
        sql = f"SELECT {projection} FROM {dialect.quote(table_name)}{self.where_sql()}{self.order_sql()}"
        if self.count:
            sql += " " + dialect.limit_clause(self.offset, self.count)
        return sql, self.params

    # -- Terminal operations -----------------------------------------------

    def execute(self) -> list[dict[str, Any]]:
        return self._bound().execute(self)

    def execute_first(self) -> dict[str, Any] | None:
        return self._bound().execute_first(self)

    def distinct_values(self, column: str, with_counts: bool = False, ignore_spaces: bool = True) -> list[Any]:
        return self._bound().distinct_values(column, with_counts, ignore_spaces, query=self)

    def _bound(self) -> TabularTable:
        if self.table is None:
            raise RuntimeError("Query is not bound to a table")
        return self.table

    def _dialect(self) -> Dialect:
        return self._bound().dialect


__all__ = ["Query"]
