"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tabular.core.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


def normalize_charset(charset: str) -> str:
    """Lower-case a charset label; ``utf-8`` becomes MySQL's ``utf8``."""
    charset = charset.strip().lower()
    if charset == "utf-8":
        charset = "utf8"
    return charset


@dataclass
class DatabaseConfig:
    """
    Configuration for a database connection.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.MYSQL

    # SQLite
    path: str | None = None

    # MySQL
    host: str = "localhost"
    port: int = 3306
    database: str = ""
    username: str | None = None
    password: str | None = None
    charset: str = "latin1"

    # Options
    connect_timeout: int = 10

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.charset = normalize_charset(self.charset)

    def to_connection_string(self) -> str:
        """Connection string for logging (never includes the password)."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return self.path or ":memory:"
            case DatabaseType.MYSQL:
                return f"mysql://{self.username}@{self.host}:{self.port}/{self.database}?charset={self.charset}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "normalize_charset",
]
