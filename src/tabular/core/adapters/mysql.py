"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.
MySQL uses **format** (``%s``) placeholder style.

Install the driver::

    pip install tabular-toolkit[mysql]

The driver import is deferred to ``connect()``; a missing driver raises
:class:`~tabular.core.errors.ConnectionConfigError` there.
"""

from __future__ import annotations

from typing import Any

from tabular.core.errors import ConnectionConfigError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter.

    Opens exactly one connection, in autocommit mode, with the configured
    character set. No pooling and no reconnection.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "latin1",
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            charset=charset,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        import mysql.connector

        return (mysql.connector.Error,)

    def connect(self) -> None:
        """Connect to MySQL database."""
        try:
            import mysql.connector
        except ImportError:
            raise ConnectionConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install tabular-toolkit[mysql]"
            ) from None

        params: dict[str, Any] = {
            "host": self._config.host,
            "port": self._config.port,
            "database": self._config.database,
            "user": self._config.username,
            "password": self._config.password,
            "charset": self._config.charset,
            "connect_timeout": self._config.connect_timeout,
            "autocommit": True,
            **self._config.options,
        }
        if self._config.charset == "utf8":
            params["init_command"] = "SET NAMES utf8"

        try:
            self._conn = mysql.connector.connect(**params)
            self._connected = True
        except mysql.connector.Error as e:
            raise ConnectionConfigError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ).with_context(url=self._config.to_connection_string()) from e


__all__ = [
    "MySQLAdapter",
]
