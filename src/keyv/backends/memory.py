"""
In-memory backend for tests and throwaway stores.

Mirrors the SQL backends' behavior, including failing queries against a
table that was never created.
"""

from __future__ import annotations

from keyv.backends.base import BackendStore
from keyv.exceptions import QueryError
from keyv.types import Row


class MemoryBackend(BackendStore):
    """Dict-of-dicts backend: table -> key -> serialized value."""

    name = "memory"

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, str]] = {}

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None

    def _table(self, table: str, operation: str) -> dict[str, str]:
        table = self.check_table(table)
        if table not in self._tables:
            raise QueryError(
                f"no such table: {table}",
                context={"backend": self.name, "table": table, "operation": operation},
            )
        return self._tables[table]

    async def ensure_table(self, table: str) -> None:
        self._tables.setdefault(self.check_table(table), {})

    async def query_all(self, table: str) -> list[Row]:
        rows = self._table(table, "query_all")
        return [Row(key=key, value=rows[key]) for key in sorted(rows)]

    async def query_by_key(self, table: str, key: str) -> list[Row]:
        rows = self._table(table, "query_by_key")
        if key not in rows:
            return []
        return [Row(key=key, value=rows[key])]

    async def insert_row(self, table: str, key: str, value: str) -> None:
        rows = self._table(table, "insert")
        if key in rows:
            raise QueryError(
                f"UNIQUE constraint failed: {table}.key",
                context={"backend": self.name, "table": table, "operation": "insert"},
            )
        rows[key] = value

    async def update_row_by_key(self, table: str, key: str, value: str) -> int:
        rows = self._table(table, "update")
        if key not in rows:
            return 0
        rows[key] = value
        return 1

    async def upsert_row(self, table: str, key: str, value: str) -> None:
        self._table(table, "upsert")[key] = value

    async def delete_row_by_key(self, table: str, key: str) -> int:
        rows = self._table(table, "delete")
        if key not in rows:
            return 0
        del rows[key]
        return 1
