"""Row Store: single-table reads and writes with auditing hooks.

``TabularTable`` wraps one SQL table. Reads are built as immutable
:class:`~tabular.data.query.Query` values; writes are parameterized
INSERT/UPDATE/DELETE statements with optional ``Updated_By``/``Updated_On``
stamping, a dry-run mode, and a change ledger written to a parallel
history table.

Manifesto:
    - **No hidden query state:** every read is its own ``Query`` value
    - **Bound parameters only:** identifiers are quoted, values are bound
    - **Explicit context:** actor, correlation id and logger arrive per call
    - **Fatal failures:** statement errors propagate, nothing is retried

Architecture:
    ::

        caller ──► TabularTable ──► TabularDb ──► DB-API connection
                      │   ▲
          insert/delete│   │ re-read (find_by_key)
                      ▼   │
                  ChangeLedger ──► <name>_change_log
                  shadow copy  ──► <name>_del

Examples:
    >>> db = TabularDb.sqlite()
    >>> alarms = TabularTable(db, "alarms", key="AD_alarmID")
    >>> alarms.where("Owner = ?", ("Bob",)).order_by("AD_alarmID").execute()
    []
    >>> alarms.execute_first() is None
    True

Tags:
    table, crud, query-builder, audit, tabular
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tabular.core.connection import TabularDb
from tabular.core.dialect import Dialect
from tabular.core.errors import (
    CardinalityError,
    ErrorContext,
    MissingKeyError,
    SchemaError,
    StatementError,
    VanishedRowError,
)
from tabular.core.logging import get_logger
from tabular.core.settings import TabularSettings, get_settings
from tabular.data.columns import ColumnDef, column_set, key_columns
from tabular.data.context import OperationContext
from tabular.data.ledger import ChangeLedger, ChangeType
from tabular.data.query import Query

logger = get_logger(__name__)

DEFAULT_KEY = "id"
SUBROWS = "subrows"
AUDIT_COLUMNS = ("Updated_By", "Updated_On")


def parse_key(key: str | Iterable[str] | None) -> list[str]:
    """Normalize a key spec: ``"a, b"`` and ``["a", "b"]`` both give ``["a", "b"]``."""
    if not key:
        return []
    if isinstance(key, str):
        return [k for k in key.replace(" ", "").split(",") if k]
    return [str(k).replace(" ", "") for k in key]


class TabularTable:
    """Query and update API for one table.

    Args:
        db: Connection provider the table lives in.
        name: Table name.
        key: Default key columns (list or comma-separated string).
        execute: ``False`` builds and logs SQL for writes but never runs it.
        history: Write changes to the history table.
        log_updated_by_on: Stamp ``Updated_By``/``Updated_On`` on writes.
        history_table: Override for ``name + "_change_log"``.
        history_key: Single column used to identify rows in the history
            table instead of the key columns.
        deleted_table: Override for ``name + "_del"``.
        settings: Source of suffixes and the default actor.
    """

    def __init__(
        self,
        db: TabularDb,
        name: str,
        *,
        key: str | Iterable[str] | None = None,
        execute: bool = True,
        history: bool = True,
        log_updated_by_on: bool = True,
        history_table: str | None = None,
        history_key: str | None = None,
        deleted_table: str | None = None,
        settings: TabularSettings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._db = db
        self._name = name
        self._key = parse_key(key)
        self.execute_writes = execute
        self.history = history
        self.log_updated_by_on = log_updated_by_on
        self._history_table = history_table or name + settings.history_suffix
        self._history_key = history_key or None
        self._deleted_table = deleted_table or name + settings.deleted_suffix
        self._default_ctx = OperationContext(actor=settings.actor)
        self._locked = False
        self._lock_mode: str | None = None
        self._many: tuple[TabularTable, list[str]] | None = None
        self.last_query = ""
        self.last_error = ""

    # -- Accessors ---------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def db(self) -> TabularDb:
        return self._db

    @property
    def dialect(self) -> Dialect:
        return self._db.dialect

    @property
    def key(self) -> list[str]:
        return list(self._key)

    @key.setter
    def key(self, value: str | Iterable[str] | None) -> None:
        self._key = parse_key(value)

    @property
    def history_table(self) -> str:
        return self._history_table

    @history_table.setter
    def history_table(self, value: str) -> None:
        self._history_table = value

    @property
    def history_key(self) -> str | None:
        return self._history_key

    @history_key.setter
    def history_key(self, value: str | None) -> None:
        self._history_key = value or None

    @property
    def deleted_table(self) -> str:
        return self._deleted_table

    @deleted_table.setter
    def deleted_table(self, value: str) -> None:
        self._deleted_table = value

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def lock_mode(self) -> str | None:
        """Mode passed to the active :meth:`lock`, or ``None`` when unlocked."""
        return self._lock_mode

    def table_names(self) -> list[str]:
        """The primary table, plus the history table when history is on."""
        names = [self._name]
        if self.history:
            names.append(self._history_table)
        return names

    def resolve_key(self, key_columns: str | Iterable[str] | None = None) -> list[str]:
        """Explicit key, else the configured key, else ``["id"]``."""
        return parse_key(key_columns) or list(self._key) or [DEFAULT_KEY]

    def ledger(self) -> ChangeLedger:
        return ChangeLedger(self)

    # -- Statement plumbing ------------------------------------------------

    def _context(self, ctx: OperationContext | None) -> OperationContext:
        return ctx or self._default_ctx

    def _logger(self, ctx: OperationContext | None) -> Any:
        return ctx.bind_logger(logger) if ctx is not None else logger

    def _fetch(self, sql: str, params: Sequence[Any], operation: str) -> list[dict[str, Any]]:
        self.last_query = sql
        self.last_error = ""
        try:
            return self._db.query(sql, params)
        except StatementError as e:
            self.last_error = e.detail
            e.with_context(table=self._name, operation=operation)
            raise

    def _run(self, sql: str, params: Sequence[Any], operation: str) -> tuple[int, Any]:
        """Run a write statement; returns ``(rowcount, lastrowid)``."""
        self.last_query = sql
        self.last_error = ""
        try:
            cursor = self._db.execute(sql, params)
        except StatementError as e:
            self.last_error = e.detail
            e.with_context(table=self._name, operation=operation)
            raise
        try:
            return cursor.rowcount, cursor.lastrowid
        finally:
            cursor.close()

    def _key_values(
        self,
        row: Mapping[str, Any],
        keys: Sequence[str],
        key_values: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for k in keys:
            if key_values and key_values.get(k) is not None:
                resolved[k] = key_values[k]
            elif row.get(k) is not None:
                resolved[k] = row[k]
            else:
                raise MissingKeyError(k, table=self._name)
        return resolved

    def key_predicate(
        self,
        row: Mapping[str, Any],
        key_columns: str | Iterable[str] | None = None,
        key_values: Mapping[str, Any] | None = None,
    ) -> tuple[str, tuple[Any, ...]]:
        """WHERE body and parameters identifying ``row`` by its key.

        Values come from ``key_values`` first, then from ``row``.

        Raises:
            MissingKeyError: A key column has no value in either source.
        """
        resolved = self._key_values(row, self.resolve_key(key_columns), key_values)
        d = self.dialect
        sql = " AND ".join(f"{d.quote(k)} = {d.placeholder(i)}" for i, k in enumerate(resolved))
        return sql, tuple(resolved.values())

    # -- Reads -------------------------------------------------------------

    def query(self) -> Query:
        """A fresh "all rows" query bound to this table."""
        return Query(table=self)

    def select(self, columns: str | Iterable[str]) -> Query:
        return self.query().select(columns)

    def where(self, predicate: str, params: Sequence[Any] = ()) -> Query:
        return self.query().where(predicate, params)

    def where_map(self, conditions: Mapping[str, Any]) -> Query:
        return self.query().where_map(conditions, self.dialect)

    def order_by(self, clause: str) -> Query:
        return self.query().order_by(clause)

    def limit(self, offset: int = 0, count: int = 10) -> Query:
        return self.query().limit(offset, count)

    def raw_sql(self, sql: str, params: Sequence[Any] = ()) -> Query:
        return self.query().raw_sql(sql, params)

    def execute(self, query: Query | None = None) -> list[dict[str, Any]]:
        """Run ``query`` (default: every row) and return rows as dicts.

        When a has-many relation is configured each row gets a ``"subrows"``
        entry holding the matching rows of the dependent table.
        """
        query = query or self.query()
        sql, params = query.build(self._name, self.dialect)
        rows = self._fetch(sql, params, "select")
        logger.debug("rows_returned", table=self._name, count=len(rows))
        if self._many is not None:
            other, join_keys = self._many
            for row in rows:
                row[SUBROWS] = other.where_map({k: row.get(k) for k in join_keys}).execute()
        return rows

    def execute_first(self, query: Query | None = None) -> dict[str, Any] | None:
        """First row of ``query``, or ``None`` when nothing matches."""
        rows = self.execute(query)
        return rows[0] if rows else None

    def find(
        self,
        row: Mapping[str, Any],
        key_columns: str | Iterable[str] | None = None,
        key_values: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Every row matching ``row``'s key values."""
        where, params = self.key_predicate(row, key_columns, key_values)
        return self.where(where, params).execute()

    def find_by_key(
        self,
        row: Mapping[str, Any],
        key_columns: str | Iterable[str] | None = None,
        key_values: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """The single row matching ``row``'s key, or ``None``.

        Raises:
            MissingKeyError: A key column has no value.
            CardinalityError: More than one row matched.
        """
        keys = self.resolve_key(key_columns)
        resolved = self._key_values(row, keys, key_values)
        rows = self.find(resolved, keys)
        if len(rows) > 1:
            raise CardinalityError(
                f"Multiple rows found ({len(rows)}) for key {resolved}. Zero or one expected.",
                count=len(rows),
                context=ErrorContext(table=self._name, operation="find_by_key", key=resolved),
            )
        return rows[0] if rows else None

    def distinct_values(
        self,
        column: str,
        with_counts: bool = False,
        ignore_spaces: bool = True,
        query: Query | None = None,
    ) -> list[Any]:
        """Distinct values of ``column`` under ``query``'s filter and order.

        With ``with_counts`` the result is a list of ``{column, "count"}``
        rows. Otherwise it is a list of values; with ``ignore_spaces``,
        values equal once spaces are removed collapse to the first seen.
        """
        query = query or self.query()
        d = self.dialect
        col = d.quote(column)
        table = d.quote(self._name)
        if with_counts:
            sql = (
                f"SELECT {col}, COUNT(*) AS {d.quote('count')} FROM {table}"
                f"{query.where_sql()} GROUP BY {col}{query.order_sql()}"
            )
            return self._fetch(sql, query.params, "distinct")

        sql = f"SELECT DISTINCT {col} FROM {table}{query.where_sql()}{query.order_sql()}"
        rows = self._fetch(sql, query.params, "distinct")
        values: list[Any] = []
        seen: set[Any] = set()
        for row in rows:
            value = row[column]
            if not ignore_spaces:
                values.append(value)
                continue
            marker = value.replace(" ", "") if isinstance(value, str) else value
            if marker not in seen:
                seen.add(marker)
                values.append(value)
        return values

    def one_to_many(self, other: TabularTable, key_columns: str | Iterable[str]) -> TabularTable:
        """Attach ``other``'s rows matching on ``key_columns`` to every row read."""
        self._many = (other, parse_key(key_columns))
        return self

    # -- Writes ------------------------------------------------------------

    def _stamp(self, record: dict[str, Any], ctx: OperationContext) -> None:
        if self.log_updated_by_on:
            record["Updated_By"] = ctx.actor
            record["Updated_On"] = ctx.timestamp()

    def insert(
        self,
        row: Mapping[str, Any],
        *,
        target_table: str | None = None,
        ctx: OperationContext | None = None,
        ledger: bool = True,
    ) -> int:
        """Insert one row; returns the generated id (``0`` in dry-run).

        When writing to the primary table with history enabled, an
        ``Insert`` ledger row is recorded unless ``ledger`` is ``False``.
        """
        ctx = self._context(ctx)
        log = self._logger(ctx)
        record = dict(row)
        self._stamp(record, ctx)
        table = target_table or self._name
        d = self.dialect
        columns = ", ".join(d.quote(c) for c in record)
        sql = f"INSERT INTO {d.quote(table)} ({columns}) VALUES ({d.placeholders(len(record))})"

        if not self.execute_writes:
            self.last_query = sql
            log.info("write_skipped", table=table, sql=sql, operation="insert")
            insert_id = 0
        else:
            _, lastrowid = self._run(sql, tuple(record.values()), "insert")
            insert_id = int(lastrowid or 0)
            log.debug("row_inserted", table=table, id=insert_id)

        if target_table is None and ledger and self.history:
            self._ledger_insert(record, insert_id, self.resolve_key(), ctx)
        return insert_id

    def _ledger_insert(
        self,
        record: dict[str, Any],
        insert_id: int,
        keys: Sequence[str],
        ctx: OperationContext,
    ) -> None:
        ledger_row = dict(record)
        if self._history_key:
            ledger_row[self._history_key] = insert_id
            keys = [self._history_key]
        else:
            for k in keys:
                if ledger_row.get(k) is None:
                    ledger_row[k] = insert_id
        self.ledger().record(ChangeType.INSERT, ctx.correlation_id, keys, ledger_row, ctx=ctx)

    def insert_many(self, rows: Sequence[Mapping[str, Any]], *, ctx: OperationContext | None = None) -> int:
        """Bulk load rows as given (no audit columns, no history).

        Every row is inserted with the first row's column list.

        Raises:
            StatementError: A row failed; the message names its 1-based number.
        """
        if not rows:
            return 0
        log = self._logger(ctx)
        d = self.dialect
        columns = list(rows[0])
        sql = (
            f"INSERT INTO {d.quote(self._name)} ({', '.join(d.quote(c) for c in columns)}) "
            f"VALUES ({d.placeholders(len(columns))})"
        )
        if not self.execute_writes:
            log.info("write_skipped", table=self._name, sql=sql, operation="insert_many", rows=len(rows))
            return 0
        for number, row in enumerate(rows, start=1):
            try:
                self._run(sql, tuple(row.get(c) for c in columns), "insert_many")
            except StatementError as e:
                raise StatementError(
                    f"Insert failed on row {number}: {e.detail}",
                    detail=e.detail,
                    context=ErrorContext(table=self._name, operation="insert_many", sql=sql),
                    cause=e,
                ) from e
        log.info("rows_loaded", table=self._name, count=len(rows))
        return len(rows)

    def update(
        self,
        row: Mapping[str, Any],
        key_columns: str | Iterable[str] | None = None,
        update_columns: Iterable[str] | None = None,
        limit_one: bool = True,
        key_values: Mapping[str, Any] | None = None,
        *,
        ctx: OperationContext | None = None,
    ) -> int:
        """Update ``update_columns`` (default: every field of ``row``).

        The WHERE clause is built from ``key_values`` first, then ``row``.
        Returns the affected row count (``0`` in dry-run). Direct updates
        are not written to the ledger; use
        :meth:`~tabular.data.reconcile.Reconciler.reconcile_batch` for
        audited updates.

        Raises:
            MissingKeyError: A key column has no value.
            StatementError: The UPDATE failed.
        """
        ctx = self._context(ctx)
        log = self._logger(ctx)
        keys = self.resolve_key(key_columns)
        record = dict(row)
        columns = list(update_columns) if update_columns else list(record)
        self._stamp(record, ctx)
        if self.log_updated_by_on:
            columns += [c for c in AUDIT_COLUMNS if c not in columns]

        where, where_params = self.key_predicate(row, keys, key_values)
        d = self.dialect
        assignments = ", ".join(f"{d.quote(c)} = {d.placeholder(i)}" for i, c in enumerate(columns))
        tail = d.restrict_one(self._name, where) if limit_one else f" WHERE {where}"
        sql = f"UPDATE {d.quote(self._name)} SET {assignments}{tail}"
        params = tuple(record.get(c) for c in columns) + where_params

        if not self.execute_writes:
            self.last_query = sql
            log.info("write_skipped", table=self._name, sql=sql, operation="update")
            return 0
        affected, _ = self._run(sql, params, "update")
        log.debug("rows_updated", table=self._name, affected=affected, columns=columns)
        return affected

    def delete(
        self,
        row: Mapping[str, Any],
        key_columns: str | Iterable[str] | None = None,
        *,
        ctx: OperationContext | None = None,
    ) -> int:
        """Delete at most one row, keeping a shadow copy and a ledger entry.

        The row is re-read and copied to the shadow table first, then
        deleted, then a ``Delete`` ledger row is written.

        Raises:
            VanishedRowError: The row could not be re-read before deletion.
        """
        ctx = self._context(ctx)
        log = self._logger(ctx)
        keys = self.resolve_key(key_columns)
        resolved = self._key_values(row, keys)
        where, params = self.key_predicate(resolved, keys)
        shadow = self._copy_to_deleted(where, params, resolved, ctx)

        d = self.dialect
        sql = f"DELETE FROM {d.quote(self._name)}{d.restrict_one(self._name, where)}"
        if not self.execute_writes:
            self.last_query = sql
            log.info("write_skipped", table=self._name, sql=sql, operation="delete")
            affected = 0
        else:
            affected, _ = self._run(sql, params, "delete")
            log.info("row_deleted", table=self._name, affected=affected)

        ledger_row = {k: shadow.get(k) for k in keys}
        ledger_keys: list[str] = keys
        if self._history_key:
            ledger_row[self._history_key] = shadow.get(self._history_key)
            ledger_keys = [self._history_key]
        self.ledger().record(ChangeType.DELETE, ctx.correlation_id, ledger_keys, ledger_row, ctx=ctx)
        return affected

    def _copy_to_deleted(
        self,
        where: str,
        params: tuple[Any, ...],
        key: dict[str, Any],
        ctx: OperationContext,
    ) -> dict[str, Any]:
        current = self.where(where, params).execute_first()
        if current is None:
            raise VanishedRowError(
                "Could not copy row being deleted",
                context=ErrorContext(table=self._name, operation="delete", key=key),
            )
        shadow = {k: v for k, v in current.items() if k != SUBROWS}
        self.insert(shadow, target_table=self._deleted_table, ctx=ctx)
        return current

    def save_row(
        self,
        row: Mapping[str, Any],
        key: str | Iterable[str] | None = None,
        *,
        ctx: OperationContext | None = None,
    ) -> int:
        """Insert or update ``row`` without writing history.

        A missing ``id`` under the default key means an auto-increment
        insert. Returns the number of rows written.
        """
        keys = self.resolve_key(key)
        if keys[0] == DEFAULT_KEY and row.get(DEFAULT_KEY) is None:
            existing = None
        else:
            existing = self.find_by_key(row, keys)
        if existing is not None:
            return self.update(row, keys, ctx=ctx)
        insert_id = self.insert(row, ctx=ctx, ledger=False)
        return 1 if insert_id >= 0 else 0

    def save_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        key: str | Iterable[str] | None = None,
        *,
        ctx: OperationContext | None = None,
    ) -> int:
        """:meth:`save_row` for each row; returns the number of rows processed."""
        keys = self.resolve_key(key)
        count = 0
        for row in rows:
            self.save_row(row, keys, ctx=ctx)
            count += 1
        return count

    def truncate(self) -> None:
        """Remove every row."""
        sql = self.dialect.truncate(self._name)
        if not self.execute_writes:
            self.last_query = sql
            logger.info("write_skipped", table=self._name, sql=sql, operation="truncate")
            return
        self._run(sql, (), "truncate")
        logger.info("table_truncated", table=self._name)

    # -- Locks -------------------------------------------------------------

    def lock(self, mode: str = "WRITE", extra_tables: str | Iterable[str] = ()) -> TabularTable:
        """Lock the primary table, extra tables and the history table."""
        tables = [self._name, *parse_key(extra_tables)]
        if self.history:
            tables.append(self._history_table)
        sql = self.dialect.lock_tables(tables, mode)
        if sql is not None:
            self._run(sql, (), "lock")
        self._locked = True
        self._lock_mode = mode
        logger.debug("tables_locked", tables=tables, mode=mode)
        return self

    def unlock(self) -> TabularTable:
        """Release locks; a no-op when not locked."""
        if not self._locked:
            return self
        sql = self.dialect.unlock_tables()
        if sql is not None:
            self._run(sql, (), "unlock")
        self._locked = False
        self._lock_mode = None
        logger.debug("tables_unlocked", table=self._name)
        return self

    # -- Schema ------------------------------------------------------------

    def generate_create_statement(
        self,
        columns: Mapping[str, Any] | Iterable[str],
        key: str | Iterable[str] = DEFAULT_KEY,
        engine: str = "InnoDB",
        *,
        table_name: str | None = None,
    ) -> str:
        """:func:`create_table_sql` for this table's dialect and charset."""
        return create_table_sql(
            table_name or self._name,
            columns,
            self.dialect,
            key=key,
            engine=engine,
            charset=self._db.charset,
        )

    def describe_columns(self) -> dict[str, dict[str, Any]]:
        """Live column metadata keyed by column name (empty if no table)."""
        sql, params = self.dialect.describe_columns_query(self._db.database, self._name)
        rows = self._fetch(sql, params, "describe")
        return {row["COLUMN_NAME"]: row for row in rows}

    def column_defs_source(self) -> str:
        """Python source for a column-definition mapping of the live table."""
        lines = ["column_defs = {"]
        for name, info in self.describe_columns().items():
            length = info.get("CHARACTER_MAXIMUM_LENGTH") or 5
            width = min(int(length), 25)
            lines.append(f"    {name!r}: {{")
            lines.append(f"        'maxlen': {int(length)},")
            lines.append("        'type': 'autocomplete',")
            lines.append(f"        'width': '{width}em',")
            lines.append("    },")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def check_columns(self, columns: Mapping[str, Any] | Iterable[str], auto_create: bool = False) -> list[str]:
        """Compare defined columns with the live table.

        Returns the defined column names missing from the database. No
        ALTER statements are generated.

        Raises:
            SchemaError: The table does not exist and ``auto_create`` is off.
        """
        defs = _as_column_defs(columns)
        existing = self.describe_columns()
        if not existing:
            if not auto_create:
                raise SchemaError(
                    f"Table does not exist in database: {self._name}",
                    context=ErrorContext(table=self._name, operation="check_columns"),
                )
            sql = self.generate_create_statement(defs, key_columns(defs) or DEFAULT_KEY)
            self._run(sql, (), "create")
            logger.info("table_created", table=self._name)
            return []
        present = {name.lower() for name in existing}
        return [name for name in defs if name.lower() not in present]

    def __repr__(self) -> str:
        return f"TabularTable(name={self._name!r}, key={self._key!r}, history={self.history})"


def _as_column_defs(columns: Mapping[str, Any] | Iterable[str]) -> dict[str, ColumnDef]:
    if isinstance(columns, Mapping) and all(isinstance(c, ColumnDef) for c in columns.values()):
        return dict(columns)
    return column_set(columns)


def create_table_sql(
    table_name: str,
    columns: Mapping[str, Any] | Iterable[str],
    dialect: Dialect,
    *,
    key: str | Iterable[str] = DEFAULT_KEY,
    engine: str = "InnoDB",
    charset: str = "latin1",
) -> str:
    """CREATE TABLE statement for ``columns``; needs no connection.

    ``key="id"`` adds an auto-increment integer ``id`` primary key;
    any other key becomes a (composite) primary key over those
    columns. ``Updated_By``/``Updated_On`` are always appended.
    """
    defs = _as_column_defs(columns)
    keys = parse_key(key)
    auto_id = keys == [DEFAULT_KEY]
    d = dialect

    parts: list[str] = []
    if auto_id:
        parts.append(d.auto_increment_column(DEFAULT_KEY))
    skip = set(AUDIT_COLUMNS) | ({DEFAULT_KEY} if auto_id else set())
    for col in defs.values():
        if col.name not in skip:
            parts.append(f"{d.quote(col.name)} {col.column_sql_type()}")
    parts.append(f"{d.quote('Updated_By')} char(32) default NULL")
    parts.append(f"{d.quote('Updated_On')} datetime default NULL")
    if auto_id and not d.inline_primary_key:
        parts.append(f"PRIMARY KEY ({d.quote(DEFAULT_KEY)})")
    elif keys and not auto_id:
        parts.append(f"PRIMARY KEY ({', '.join(d.quote(k) for k in keys)})")

    options = d.table_options(charset, engine)
    return f"CREATE TABLE IF NOT EXISTS {d.quote(table_name)} ({', '.join(parts)}){options}"


__all__ = ["TabularTable", "create_table_sql", "parse_key", "DEFAULT_KEY", "SUBROWS", "AUDIT_COLUMNS"]
