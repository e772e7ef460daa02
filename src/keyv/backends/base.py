"""
Base class for backend stores.

A backend owns one connection (or pool) to a relational engine and exposes
row-level operations on a two-column ``(key, value)`` table. It knows
nothing about dotted paths or documents; values arrive already serialized.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from keyv.config import is_valid_table_name
from keyv.exceptions import ConfigurationError
from keyv.types import Row


class BackendStore(ABC):
    """Abstract interface for backend store implementations."""

    name: str = "backend"

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection or pool. Safe to call more than once."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the connection or pool."""
        ...

    @abstractmethod
    async def ensure_table(self, table: str) -> None:
        """Create the (key, value) table if it does not exist."""
        ...

    @abstractmethod
    async def query_all(self, table: str) -> list[Row]:
        """Return every row in the table."""
        ...

    @abstractmethod
    async def query_by_key(self, table: str, key: str) -> list[Row]:
        """Return rows whose key equals key."""
        ...

    @abstractmethod
    async def insert_row(self, table: str, key: str, value: str) -> None:
        """Insert a new row."""
        ...

    @abstractmethod
    async def update_row_by_key(self, table: str, key: str, value: str) -> int:
        """Overwrite the value of the row for key. Returns rows affected."""
        ...

    @abstractmethod
    async def upsert_row(self, table: str, key: str, value: str) -> None:
        """Insert the row, or replace its value if key already exists, atomically."""
        ...

    @abstractmethod
    async def delete_row_by_key(self, table: str, key: str) -> int:
        """Delete the row for key. Returns rows affected."""
        ...

    async def __aenter__(self) -> BackendStore:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @staticmethod
    def check_table(table: str) -> str:
        """Validate a table name before it is interpolated into SQL."""
        if not is_valid_table_name(table):
            raise ConfigurationError("Invalid table name", context={"table": table})
        return table
