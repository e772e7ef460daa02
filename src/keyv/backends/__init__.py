"""
Backend stores for the (key, value) table.

- SQLiteBackend: aiosqlite, one database file
- PostgresBackend: asyncpg connection pool
- MemoryBackend: dict-backed, for tests
"""

from __future__ import annotations

from keyv.backends.base import BackendStore
from keyv.backends.memory import MemoryBackend
from keyv.backends.postgres import PostgresBackend
from keyv.backends.sqlite import SQLiteBackend
from keyv.config import Settings
from keyv.exceptions import ConfigurationError


def create_backend(settings: Settings) -> BackendStore:
    """Build the backend selected by KEYV_BACKEND.

    Raises:
        ConfigurationError: If required connection settings are missing.
    """
    if settings.KEYV_BACKEND == "sqlite":
        return SQLiteBackend(settings.SQLITE_PATH)

    if settings.KEYV_BACKEND == "postgres":
        if not settings.PG_USER or not settings.PG_DATABASE:
            raise ConfigurationError(
                "PostgreSQL backend requires PG_USER and PG_DATABASE",
                context={"backend": "postgres"},
            )
        return PostgresBackend(
            user=settings.PG_USER,
            database=settings.PG_DATABASE,
            host=settings.PG_HOST,
            password=settings.PG_PASSWORD,
            port=settings.PG_PORT,
            pool_size=settings.PG_POOL_SIZE,
        )

    if settings.KEYV_BACKEND == "memory":
        return MemoryBackend()

    raise ConfigurationError(
        "Unknown backend", context={"backend": settings.KEYV_BACKEND}
    )


__all__ = [
    "BackendStore",
    "MemoryBackend",
    "PostgresBackend",
    "SQLiteBackend",
    "create_backend",
]
