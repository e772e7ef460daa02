"""
SQLite backend using aiosqlite.

The database file is opened lazily on first use and every write is
committed before the call returns.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiosqlite

from keyv.backends.base import BackendStore
from keyv.exceptions import BackendUnavailableError, QueryError
from keyv.logging import get_logger
from keyv.types import Row

logger = get_logger(__name__)

MEMORY_PATH = ":memory:"


class SQLiteBackend(BackendStore):
    """Backend store over a single SQLite database file."""

    name = "sqlite"

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the backend.

        Args:
            db_path: Path to the ``.sqlite`` file, or ``":memory:"``.
        """
        self.db_path = db_path if str(db_path) == MEMORY_PATH else Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        if self._db is not None:
            return

        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self.db_path)
        except (aiosqlite.Error, OSError) as e:
            raise BackendUnavailableError(
                f"Cannot open SQLite database: {e}",
                context={"backend": self.name, "target": str(self.db_path)},
            ) from e

        self._db.row_factory = aiosqlite.Row
        logger.info("SQLite backend connected", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is None:
            await self.connect()
        assert self._db is not None
        return self._db

    async def _fetch(
        self, operation: str, table: str, sql: str, params: tuple[Any, ...] = ()
    ) -> list[Row]:
        db = await self._connection()
        logger.debug("SQLite query", operation=operation)
        try:
            async with db.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise QueryError(
                f"SQLite {operation} failed: {e}",
                context={"backend": self.name, "table": table, "operation": operation},
            ) from e
        return [Row(key=row["key"], value=row["value"]) for row in rows]

    async def _write(
        self, operation: str, table: str, sql: str, params: tuple[Any, ...] = ()
    ) -> int:
        db = await self._connection()
        logger.debug("SQLite write", operation=operation)
        try:
            cursor = await db.execute(sql, params)
            rowcount = cursor.rowcount
            await cursor.close()
            await db.commit()
        except aiosqlite.Error as e:
            raise QueryError(
                f"SQLite {operation} failed: {e}",
                context={"backend": self.name, "table": table, "operation": operation},
            ) from e
        return rowcount

    async def ensure_table(self, table: str) -> None:
        table = self.check_table(table)
        await self._write(
            "ensure_table",
            table,
            f"CREATE TABLE IF NOT EXISTS {table} ("
            "key TEXT PRIMARY KEY, value TEXT NOT NULL)",
        )

    async def query_all(self, table: str) -> list[Row]:
        table = self.check_table(table)
        return await self._fetch(
            "query_all", table, f"SELECT key, value FROM {table} ORDER BY key"
        )

    async def query_by_key(self, table: str, key: str) -> list[Row]:
        table = self.check_table(table)
        return await self._fetch(
            "query_by_key", table, f"SELECT key, value FROM {table} WHERE key = ?", (key,)
        )

    async def insert_row(self, table: str, key: str, value: str) -> None:
        table = self.check_table(table)
        await self._write(
            "insert",
            table,
            f"INSERT INTO {table} (key, value) VALUES (?, ?)",
            (key, value),
        )

    async def update_row_by_key(self, table: str, key: str, value: str) -> int:
        table = self.check_table(table)
        return await self._write(
            "update",
            table,
            f"UPDATE {table} SET value = ? WHERE key = ?",
            (value, key),
        )

    async def upsert_row(self, table: str, key: str, value: str) -> None:
        table = self.check_table(table)
        await self._write(
            "upsert",
            table,
            f"INSERT INTO {table} (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )

    async def delete_row_by_key(self, table: str, key: str) -> int:
        table = self.check_table(table)
        return await self._write(
            "delete", table, f"DELETE FROM {table} WHERE key = ?", (key,)
        )
