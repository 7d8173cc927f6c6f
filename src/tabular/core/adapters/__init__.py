"""Database adapters: one live connection per provider, vendor-neutral."""

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType, normalize_charset

__all__ = [
    "AdapterRegistry",
    "DatabaseAdapter",
    "DatabaseConfig",
    "DatabaseType",
    "MySQLAdapter",
    "SQLiteAdapter",
    "adapter_registry",
    "get_adapter",
    "normalize_charset",
]
