"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates backend selection and provides typed access to settings.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_table_name(name: str) -> bool:
    """Return True if name can be interpolated into SQL as a bare identifier."""
    return bool(IDENTIFIER_RE.match(name))


class Settings(BaseSettings):
    """Store settings loaded from environment variables.

    Backend selection:
        KEYV_BACKEND: sqlite (default), postgres or memory
        KEYV_TABLE: Table holding the (key, value) rows

    SQLite:
        SQLITE_PATH: Database file path

    PostgreSQL (PG_USER and PG_DATABASE required when KEYV_BACKEND=postgres):
        PG_USER, PG_PASSWORD, PG_DATABASE, PG_HOST, PG_PORT, PG_POOL_SIZE

    Logging:
        LOG_LEVEL: Logging level
        LOG_FILE: Optional JSON lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    KEYV_BACKEND: Literal["sqlite", "postgres", "memory"] = Field(
        default="sqlite", description="Backend store implementation"
    )
    KEYV_TABLE: str = Field(default="keyv", description="Table name for rows")

    SQLITE_PATH: Path = Field(
        default=Path("keyv.sqlite"), description="SQLite database file"
    )

    PG_USER: str | None = Field(default=None, description="PostgreSQL user")
    PG_PASSWORD: str | None = Field(default=None, description="PostgreSQL password")
    PG_DATABASE: str | None = Field(default=None, description="PostgreSQL database")
    PG_HOST: str = Field(default="localhost", description="PostgreSQL host")
    PG_PORT: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    PG_POOL_SIZE: int = Field(
        default=20, ge=1, le=100, description="Maximum pooled connections"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(
        default=None, description="JSON lines log file (all levels)"
    )

    @field_validator("KEYV_TABLE")
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        """Table names are interpolated into SQL, so only identifiers pass."""
        if not is_valid_table_name(v):
            raise ValueError(
                "KEYV_TABLE must be a plain SQL identifier (letters, digits, underscore)"
            )
        return v

    @model_validator(mode="after")
    def validate_postgres_credentials(self) -> Settings:
        """Ensure user and database are configured for the postgres backend."""
        if self.KEYV_BACKEND == "postgres" and not (self.PG_USER and self.PG_DATABASE):
            raise ValueError(
                "PG_USER and PG_DATABASE must be configured when KEYV_BACKEND=postgres"
            )
        return self

    @property
    def backend(self) -> str:
        """Get backend name (lowercase alias)."""
        return self.KEYV_BACKEND

    @property
    def table(self) -> str:
        """Get table name (lowercase alias)."""
        return self.KEYV_TABLE

    def redacted_display(self) -> dict[str, str | int | None]:
        """Return settings with the database password redacted for display."""
        password = self.PG_PASSWORD
        if password is not None:
            password = "***"

        return {
            "KEYV_BACKEND": self.KEYV_BACKEND,
            "KEYV_TABLE": self.KEYV_TABLE,
            "SQLITE_PATH": str(self.SQLITE_PATH),
            "PG_USER": self.PG_USER,
            "PG_PASSWORD": password,
            "PG_DATABASE": self.PG_DATABASE,
            "PG_HOST": self.PG_HOST,
            "PG_PORT": self.PG_PORT,
            "PG_POOL_SIZE": self.PG_POOL_SIZE,
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
