"""Centralized settings for Tabular.

All fields can be set through ``TABULAR_*`` environment variables (e.g.
``TABULAR_DB_HOST=db.internal``) or a ``.env`` file.

Examples:
    >>> from tabular.core.settings import TabularSettings
    >>> settings = TabularSettings(db_backend="sqlite", db_path=":memory:")
    >>> settings.history_suffix
    '_change_log'

Tags:
    settings, configuration, pydantic, environment, tabular
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TabularSettings(BaseSettings):
    """Tabular configuration.

    Fields
    ──────
    db_*           : Connection provider parameters
    actor          : Default actor written to ``Updated_By``
    history_suffix : Appended to a table name to form its change log
    deleted_suffix : Appended to a table name to form its shadow-delete table
    log_level      : Structlog log level
    log_format     : ``json`` or ``console``
    """

    model_config = SettingsConfigDict(
        env_prefix="TABULAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    db_backend: str = Field(default="mysql", description="mysql or sqlite")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=3306)
    db_name: str = Field(default="")
    db_user: str = Field(default="")
    db_password: str = Field(default="")
    db_charset: str = Field(default="latin1")
    db_path: str = Field(default=":memory:", description="SQLite file path")

    # ── Table defaults ───────────────────────────────────────────
    actor: str = Field(default="TABULARadmin")
    history_suffix: str = Field(default="_change_log")
    deleted_suffix: str = Field(default="_del")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("db_backend")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("mysql", "sqlite"):
            raise ValueError(f"Unsupported db_backend: {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported log_level: {value!r}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> TabularSettings:
    """Return the process-wide settings (cached)."""
    return TabularSettings()


__all__ = ["TabularSettings", "get_settings"]
