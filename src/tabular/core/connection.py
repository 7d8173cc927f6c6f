"""Connection provider: one live database connection per ``TabularDb``.

``TabularDb`` is the single entry point tables use to run statements. It
is constructed with the classic host/database/user/password/charset
quintuple, opens its connection immediately (failing fast with
:class:`~tabular.core.errors.ConnectionConfigError`), and owns that one
connection until it is closed or discarded. Several tables may share a
provider; they then share its connection.

Usage
-----
::

    from tabular.core.connection import TabularDb

    # MySQL (production)
    db = TabularDb("db.internal", "syseng", "app", "secret", charset="UTF-8")
    db.charset            # 'utf8'

    # SQLite (development / tests)
    db = TabularDb.sqlite(":memory:")

    # From TABULAR_* settings
    db = TabularDb.from_settings()

Design
------
``execute(sql, params)`` returns the DB-API cursor after running the
statement; ``query(sql, params)`` returns rows as dicts built from
``cursor.description`` so results look the same on every driver. Driver
exceptions are translated into
:class:`~tabular.core.errors.StatementError` carrying the native message.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tabular.core.adapters import DatabaseAdapter, SQLiteAdapter, get_adapter, normalize_charset
from tabular.core.dialect import Dialect
from tabular.core.errors import ConnectionConfigError, ErrorContext, StatementError
from tabular.core.logging import get_logger
from tabular.core.protocols import Connection, Cursor
from tabular.core.settings import TabularSettings, get_settings

logger = get_logger(__name__)


class TabularDb:
    """A connection to one database.

    You can have several of these if an application needs connections to
    more than one database.
    """

    def __init__(
        self,
        host: str,
        database: str,
        user: str,
        password: str,
        charset: str = "latin1",
        *,
        backend: str = "mysql",
        port: int = 3306,
        path: str | None = None,
    ) -> None:
        self._charset = normalize_charset(charset)
        self._database = database
        if backend.lower() == "sqlite":
            adapter = get_adapter("sqlite", path=path or database or ":memory:")
        else:
            adapter = get_adapter(
                backend,
                host=host,
                port=port,
                database=database,
                username=user,
                password=password,
                charset=self._charset,
            )
        self._adapter: DatabaseAdapter | None = None
        self._open(adapter)

    def _open(self, adapter: DatabaseAdapter) -> None:
        try:
            adapter.connect()
        except ConnectionConfigError:
            raise
        except Exception as e:
            raise ConnectionConfigError(f"Failed to connect: {e}", cause=e) from e
        self._adapter = adapter
        logger.debug(
            "db_connected",
            backend=adapter.db_type.value,
            url=adapter.config.to_connection_string(),
            charset=self._charset,
        )

    # -- Alternate constructors --------------------------------------------

    @classmethod
    def from_adapter(cls, adapter: DatabaseAdapter) -> TabularDb:
        """Wrap an adapter built elsewhere (custom drivers, test doubles)."""
        instance = cls.__new__(cls)
        instance._charset = adapter.config.charset
        instance._database = adapter.config.database
        instance._adapter = None
        instance._open(adapter)
        return instance

    @classmethod
    def sqlite(cls, path: str = ":memory:") -> TabularDb:
        """Open a SQLite database (``:memory:`` by default)."""
        return cls.from_adapter(SQLiteAdapter(path=path))

    @classmethod
    def from_settings(cls, settings: TabularSettings | None = None) -> TabularDb:
        """Open the database described by ``TABULAR_*`` settings."""
        settings = settings or get_settings()
        if settings.db_backend == "sqlite":
            return cls.sqlite(settings.db_path)
        return cls(
            settings.db_host,
            settings.db_name,
            settings.db_user,
            settings.db_password,
            settings.db_charset,
            backend=settings.db_backend,
            port=settings.db_port,
        )

    # -- Accessors ---------------------------------------------------------

    @property
    def adapter(self) -> DatabaseAdapter:
        if self._adapter is None:
            raise ConnectionConfigError("Database connection is closed")
        return self._adapter

    @property
    def connection(self) -> Connection:
        """The live DB-API connection."""
        return self.adapter.get_connection()

    @property
    def database(self) -> str:
        return self._database

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def dialect(self) -> Dialect:
        return self.adapter.dialect

    @property
    def is_open(self) -> bool:
        return self._adapter is not None and self._adapter.is_connected

    # -- Execution ---------------------------------------------------------

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Cursor:
        """Run one statement and return its cursor.

        Raises:
            StatementError: The driver rejected the statement.
        """
        adapter = self.adapter
        cursor = adapter.get_connection().cursor()
        logger.debug("sql_executed", sql=sql, params=tuple(params))
        try:
            cursor.execute(sql, tuple(params))
        except adapter.driver_errors as e:
            cursor.close()
            raise StatementError(
                f"Statement failed: {e}",
                detail=str(e),
                context=ErrorContext(sql=sql),
                cause=e,
            ) from e
        return cursor

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return rows as dicts, in result order."""
        cursor = self.execute(sql, params)
        try:
            if not cursor.description:
                return []
            columns = [desc[0] for desc in cursor.description]
            return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    # -- Lifecycle ---------------------------------------------------------

    def close(self) -> None:
        """Release the connection."""
        if self._adapter is not None:
            self._adapter.disconnect()
            self._adapter = None

    def __enter__(self) -> TabularDb:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        adapter = getattr(self, "_adapter", None)
        if adapter is not None:
            adapter.disconnect()

    def __repr__(self) -> str:
        backend = self._adapter.db_type.value if self._adapter is not None else "closed"
        return f"TabularDb(backend={backend!r}, database={self._database!r}, charset={self._charset!r})"


__all__ = ["TabularDb"]
