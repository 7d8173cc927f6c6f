"""SQL dialect abstraction for the table-access layer.

Provides a ``Dialect`` protocol and concrete implementations for the
supported backends. ``TabularTable`` builds every statement from dialect
fragments (placeholders, identifier quoting, LIMIT clauses, table locks,
catalog queries) so the same table code runs on SQLite in tests and MySQL
in production.

Architecture::

    ┌──────────────────────────────────────────────────────────────────┐
    │                     Dialect Abstraction Layer                     │
    └──────────────────────────────────────────────────────────────────┘

    Table code:
    ┌────────────────────────────────────────────────────────────────┐
    │  sql = f"UPDATE {d.quote(t)} SET {d.quote(c)} = {d.placeholder(0)}" │
    │  sql += d.restrict_one(t, where)                               │
    │  db.execute(sql, params)                                       │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
            ┌─────────────────────┐   ┌─────────────────────┐
            │ SQLite              │   │ MySQL               │
            │ ?, "name"           │   │ %s, `name`          │
            │ LIMIT n OFFSET m    │   │ LIMIT m,n           │
            │ rowid IN (… LIMIT 1)│   │ … LIMIT 1           │
            │ no table locks      │   │ LOCK TABLES …       │
            └─────────────────────┘   └─────────────────────┘

Identifiers are always quoted, with embedded quote characters doubled;
values are always bound parameters.

Examples:
    >>> from tabular.core.dialect import get_dialect
    >>> d = get_dialect("mysql")
    >>> d.quote("Updated_By")
    '`Updated_By`'
    >>> d.limit_clause(20, 10)
    'LIMIT 20,10'

Tags:
    dialect, sql, abstraction, portability, database, tabular
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a **SQL fragment** (string) valid for the target
    database, or ``None`` where the backend has no equivalent statement.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    # -- Placeholders / identifiers ----------------------------------------

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def quote(self, identifier: str) -> str:
        """Quote a table or column name."""
        ...

    # -- Clauses -----------------------------------------------------------

    def limit_clause(self, offset: int, count: int) -> str:
        """``LIMIT`` clause selecting ``count`` rows after ``offset``."""
        ...

    def restrict_one(self, table: str, where: str) -> str:
        """``WHERE`` tail restricting an UPDATE/DELETE to at most one row."""
        ...

    # -- Locks -------------------------------------------------------------

    def lock_tables(self, tables: Sequence[str], mode: str) -> str | None:
        """Statement locking ``tables`` in ``mode`` (``None`` if unsupported)."""
        ...

    def unlock_tables(self) -> str | None:
        """Statement releasing table locks (``None`` if unsupported)."""
        ...

    # -- DDL / DML ---------------------------------------------------------

    def truncate(self, table: str) -> str:
        """Statement removing every row of ``table``."""
        ...

    def auto_increment_column(self, column: str) -> str:
        """Column definition for an auto-increment integer key."""
        ...

    @property
    def inline_primary_key(self) -> bool:
        """Whether :meth:`auto_increment_column` already declares the key."""
        ...

    def table_options(self, charset: str, engine: str) -> str:
        """Trailing ``CREATE TABLE`` options (charset, engine)."""
        ...

    # -- Introspection -----------------------------------------------------

    def describe_columns_query(self, database: str, table: str) -> tuple[str, tuple[Any, ...]]:
        """Catalog query returning one row per column of ``table``.

        Rows expose ``COLUMN_NAME``, ``ORDINAL_POSITION``, ``COLUMN_DEFAULT``,
        ``IS_NULLABLE``, ``DATA_TYPE`` and ``CHARACTER_MAXIMUM_LENGTH``.
        """
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, double-quoted identifiers."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def quote(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'

    def limit_clause(self, offset: int, count: int) -> str:
        return f"LIMIT {int(count)} OFFSET {int(offset)}"

    def restrict_one(self, table: str, where: str) -> str:
        # UPDATE/DELETE ... LIMIT needs SQLITE_ENABLE_UPDATE_DELETE_LIMIT
        return f" WHERE rowid IN (SELECT rowid FROM {self.quote(table)} WHERE {where} LIMIT 1)"

    def lock_tables(self, tables: Sequence[str], mode: str) -> str | None:  # noqa: ARG002
        return None

    def unlock_tables(self) -> str | None:
        return None

    def truncate(self, table: str) -> str:
        return f"DELETE FROM {self.quote(table)}"

    def auto_increment_column(self, column: str) -> str:
        return f"{self.quote(column)} INTEGER PRIMARY KEY AUTOINCREMENT"

    @property
    def inline_primary_key(self) -> bool:
        return True

    def table_options(self, charset: str, engine: str) -> str:  # noqa: ARG002
        return ""

    def describe_columns_query(self, database: str, table: str) -> tuple[str, tuple[Any, ...]]:  # noqa: ARG002
        sql = (
            "SELECT name AS COLUMN_NAME, cid + 1 AS ORDINAL_POSITION, "
            "dflt_value AS COLUMN_DEFAULT, "
            "CASE WHEN \"notnull\" THEN 'NO' ELSE 'YES' END AS IS_NULLABLE, "
            "type AS DATA_TYPE, NULL AS CHARACTER_MAXIMUM_LENGTH "
            "FROM pragma_table_info(?) ORDER BY cid"
        )
        return sql, (table,)


class MySQLDialect:
    """MySQL dialect: ``%s`` placeholders, backtick identifiers.

    Compatible with ``mysql.connector`` and ``PyMySQL`` (both use
    ``%s`` format paramstyle).
    """

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def quote(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"

    def limit_clause(self, offset: int, count: int) -> str:
        return f"LIMIT {int(offset)},{int(count)}"

    def restrict_one(self, table: str, where: str) -> str:  # noqa: ARG002
        return f" WHERE {where} LIMIT 1"

    def lock_tables(self, tables: Sequence[str], mode: str) -> str | None:
        mode = mode.upper()
        if mode not in ("READ", "WRITE", "READ LOCAL", "LOW_PRIORITY WRITE"):
            raise ValueError(f"Unknown lock mode: {mode!r}")
        return "LOCK TABLES " + ", ".join(f"{self.quote(t)} {mode}" for t in tables)

    def unlock_tables(self) -> str | None:
        return "UNLOCK TABLES"

    def truncate(self, table: str) -> str:
        return f"TRUNCATE TABLE {self.quote(table)}"

    def auto_increment_column(self, column: str) -> str:
        return f"{self.quote(column)} int(10) unsigned NOT NULL auto_increment"

    @property
    def inline_primary_key(self) -> bool:
        return False

    def table_options(self, charset: str, engine: str) -> str:
        if charset == "utf8":
            return f" CHARACTER SET utf8 COLLATE utf8_general_ci ENGINE={engine}"
        return f" CHARACTER SET {charset} ENGINE={engine}"

    def describe_columns_query(self, database: str, table: str) -> tuple[str, tuple[Any, ...]]:
        sql = (
            "SELECT * FROM `INFORMATION_SCHEMA`.`COLUMNS` "
            "WHERE `TABLE_SCHEMA` = %s AND `TABLE_NAME` = %s "
            "ORDER BY `ORDINAL_POSITION`"
        )
        return sql, (database, table)


# =========================================================================
# Registry / Factory
# =========================================================================

# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'mariadb'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
]
