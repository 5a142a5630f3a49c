"""
Database configuration.

``DatabaseConfig`` is the record a ``Database`` handle is built from.
``Settings`` loads the same values from ``DB_*`` environment variables (or a
``.env`` file) for callers that don't assemble the record themselves.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Marker prefix used in table names throughout the code base; replaced by the
# configured ``table_prefix`` when statements are built.
TABLE_PREFIX_MARKER = "tbl_"

# Queries slower than this (seconds) are reported by Database.get_statistics().
SLOW_QUERY_THRESHOLD = 0.0999


class DriverEnum(str, Enum):
    """Supported database drivers."""

    MYSQL = "mysql"
    SQLITE = "sqlite"


def _coerce_toggle(value: Any) -> Any:
    """Accept legacy 'on'/'off' style toggles next to real booleans."""
    if isinstance(value, str):
        s = value.strip().lower()
        if s in ("on", "yes", "true", "1"):
            return True
        if s in ("off", "no", "false", "0", ""):
            return False
    return value


class DatabaseConfig(BaseModel):
    """Connection and behaviour settings for one Database handle."""

    driver: DriverEnum = DriverEnum.MYSQL
    host: str | None = None
    port: int | None = Field(default=None, gt=0)
    user: str | None = None
    password: str | None = None
    database: str | None = None
    charset: str | None = None
    collate: str | None = None
    engine: str | None = None
    table_prefix: str = TABLE_PREFIX_MARKER
    query_caching: bool = False
    query_logging: bool = False
    connect_timeout: int = Field(default=10, gt=0)
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("query_caching", "query_logging", mode="before")
    @classmethod
    def toggle(cls, v: Any) -> Any:
        return _coerce_toggle(v)

    @field_validator("table_prefix")
    @classmethod
    def prefix_is_identifier(cls, v: str) -> str:
        if not v.replace("_", "").isalnum():
            raise ValueError("table_prefix may only contain letters, digits and underscores")
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    DB_DRIVER: DriverEnum = DriverEnum.MYSQL
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_DATABASE: str = "symnext"
    DB_CHARSET: str | None = "utf8mb4"
    DB_COLLATE: str | None = "utf8mb4_unicode_ci"
    DB_ENGINE: str | None = "InnoDB"
    DB_TABLE_PREFIX: str = "sym_"
    DB_QUERY_CACHING: bool = False
    DB_QUERY_LOGGING: bool = False
    DB_CONNECT_TIMEOUT: int = 10

    @field_validator("DB_QUERY_CACHING", "DB_QUERY_LOGGING", mode="before")
    @classmethod
    def toggle(cls, v: Any) -> Any:
        return _coerce_toggle(v)

    def database_config(self) -> DatabaseConfig:
        """Build the DatabaseConfig record from these settings."""
        return DatabaseConfig(
            driver=self.DB_DRIVER,
            host=self.DB_HOST,
            port=self.DB_PORT,
            user=self.DB_USER,
            password=self.DB_PASSWORD,
            database=self.DB_DATABASE,
            charset=self.DB_CHARSET,
            collate=self.DB_COLLATE,
            engine=self.DB_ENGINE,
            table_prefix=self.DB_TABLE_PREFIX,
            query_caching=self.DB_QUERY_CACHING,
            query_logging=self.DB_QUERY_LOGGING,
            connect_timeout=self.DB_CONNECT_TIMEOUT,
        )
