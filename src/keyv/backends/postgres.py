"""
PostgreSQL backend using an asyncpg connection pool.

Each statement acquires a pooled connection, runs, and releases it.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from keyv.backends.base import BackendStore
from keyv.exceptions import BackendUnavailableError, QueryError
from keyv.logging import get_logger
from keyv.types import Row

logger = get_logger(__name__)

DEFAULT_PORT = 5432
DEFAULT_POOL_SIZE = 20


def _affected_rows(status: str) -> int:
    """Parse the row count from a command status such as ``'DELETE 3'``."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError):
        return 0


class PostgresBackend(BackendStore):
    """Backend store over a PostgreSQL database."""

    name = "postgres"

    def __init__(
        self,
        user: str,
        database: str,
        host: str = "localhost",
        password: str | None = None,
        port: int = DEFAULT_PORT,
        pool_size: int = DEFAULT_POOL_SIZE,
    ) -> None:
        """Initialize the backend.

        Args:
            user: Database user.
            database: Database name.
            host: Server hostname.
            password: Password for user.
            port: Server port.
            pool_size: Maximum number of pooled connections.
        """
        self.user = user
        self.database = database
        self.host = host
        self.password = password
        self.port = port
        self.pool_size = pool_size
        self._pool: asyncpg.Pool | None = None

    @property
    def target(self) -> str:
        return f"{self.host}:{self.port}/{self.database}"

    async def connect(self) -> None:
        if self._pool is not None:
            return

        try:
            self._pool = await asyncpg.create_pool(
                user=self.user,
                password=self.password,
                database=self.database,
                host=self.host,
                port=self.port,
                min_size=1,
                max_size=self.pool_size,
            )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise BackendUnavailableError(
                f"Cannot connect to PostgreSQL: {e}",
                context={"backend": self.name, "target": self.target},
            ) from e

        logger.info("PostgreSQL pool created", target=self.target, max_size=self.pool_size)

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None

    async def _run(
        self, operation: str, table: str, sql: str, *args: Any, fetch: bool = False
    ) -> Any:
        if self._pool is None:
            await self.connect()
        assert self._pool is not None

        logger.debug("PostgreSQL query", operation=operation)
        context = {"backend": self.name, "table": table, "operation": operation}
        try:
            async with self._pool.acquire() as conn:
                if fetch:
                    return await conn.fetch(sql, *args)
                return await conn.execute(sql, *args)
        except asyncpg.PostgresConnectionError as e:
            raise BackendUnavailableError(
                f"PostgreSQL connection lost during {operation}: {e}", context=context
            ) from e
        except (asyncpg.InterfaceError, OSError) as e:
            raise BackendUnavailableError(
                f"PostgreSQL unavailable during {operation}: {e}", context=context
            ) from e
        except asyncpg.PostgresError as e:
            raise QueryError(f"PostgreSQL {operation} failed: {e}", context=context) from e

    async def _fetch_rows(self, operation: str, table: str, sql: str, *args: Any) -> list[Row]:
        records = await self._run(operation, table, sql, *args, fetch=True)
        return [Row(key=record["key"], value=record["value"]) for record in records]

    async def ensure_table(self, table: str) -> None:
        table = self.check_table(table)
        await self._run(
            "ensure_table",
            table,
            f"CREATE TABLE IF NOT EXISTS {table} (key TEXT PRIMARY KEY, value TEXT NOT NULL)",
        )

    async def query_all(self, table: str) -> list[Row]:
        table = self.check_table(table)
        return await self._fetch_rows(
            "query_all", table, f"SELECT key, value FROM {table} ORDER BY key"
        )

    async def query_by_key(self, table: str, key: str) -> list[Row]:
        table = self.check_table(table)
        return await self._fetch_rows(
            "query_by_key", table, f"SELECT key, value FROM {table} WHERE key = $1", key
        )

    async def insert_row(self, table: str, key: str, value: str) -> None:
        table = self.check_table(table)
        await self._run(
            "insert", table, f"INSERT INTO {table} (key, value) VALUES ($1, $2)", key, value
        )

    async def update_row_by_key(self, table: str, key: str, value: str) -> int:
        table = self.check_table(table)
        status = await self._run(
            "update", table, f"UPDATE {table} SET value = $1 WHERE key = $2", value, key
        )
        return _affected_rows(status)

    async def upsert_row(self, table: str, key: str, value: str) -> None:
        table = self.check_table(table)
        await self._run(
            "upsert",
            table,
            f"INSERT INTO {table} (key, value) VALUES ($1, $2) "
            "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value",
            key,
            value,
        )

    async def delete_row_by_key(self, table: str, key: str) -> int:
        table = self.check_table(table)
        status = await self._run("delete", table, f"DELETE FROM {table} WHERE key = $1", key)
        return _affected_rows(status)
