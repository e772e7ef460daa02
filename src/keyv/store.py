"""
Dot-path key-value store.

KeyValueStore gives callers a nested-property interface over a flat
``(key, value)`` table::

    async with KeyValueStore(SQLiteBackend("db.sqlite"), "userinfo") as db:
        await db.set("john.gender", "male")
        await db.push("john.children", "Suzy")
        gender = await db.get("john.gender")

The first segment of a key names a row; the rest is a path inside that
row's JSON document. Reads are served from an in-process cache that is
written through on every mutation.
"""

from __future__ import annotations

from typing import Any

from keyv.backends import BackendStore, create_backend
from keyv.cache import DocumentCache
from keyv.config import Settings, get_settings
from keyv.exceptions import DeserializationError, QueryError, UnsupportedOperationError
from keyv.logging import get_logger, log_context
from keyv.paths import MISSING, resolve_get, resolve_has, resolve_set, split_key
from keyv.serialization import dumps_document
from keyv.types import Document, Row

logger = get_logger(__name__)

DEFAULT_TABLE = "keyv"


def _is_unset(value: Any) -> bool:
    """None and the empty-string default both mean "nothing stored yet"."""
    return value is None or (isinstance(value, str) and value == "")


class KeyValueStore:
    """Cache-backed facade over a BackendStore.

    One instance owns one cache. Two instances over the same table do not
    see each other's writes until init() is called again.
    """

    def __init__(self, backend: BackendStore, table: str = DEFAULT_TABLE) -> None:
        """Initialize the store.

        Args:
            backend: Backend holding the rows.
            table: Name of the table for storing data.
        """
        self.backend = backend
        self.table = BackendStore.check_table(table)
        self.cache = DocumentCache()
        self._table_ready = False

    async def __aenter__(self) -> KeyValueStore:
        await self.init()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def init(self) -> None:
        """Create the table if needed and load every row into the cache.

        Raises:
            DeserializationError: If a stored value is not valid JSON.
        """
        with log_context(backend=self.backend.name, table=self.table):
            await self.backend.connect()
            await self.backend.ensure_table(self.table)
            self._table_ready = True

            rows = await self.backend.query_all(self.table)
            self.cache.load({row.key: row.document() for row in rows})

            logger.info("Store initialized", rows=len(rows))

    async def close(self) -> None:
        """Release backend resources."""
        await self.backend.close()

    async def _ensure_table(self) -> None:
        # Operations before init() work against an empty cache.
        if not self._table_ready:
            await self.backend.ensure_table(self.table)
            self._table_ready = True

    async def get_or_insert_default(self, key: str, default: Any = "") -> Any:
        """Read a value, persisting default first if the root key is unknown.

        Args:
            key: Dotted key, e.g. ``"john.gender"``.
            default: Value written at key when its root key has no row. None
                is stored as the empty string.

        Returns:
            The value at key, or None when the root exists but the path
            does not.
        """
        root, path = split_key(key)
        if not self.cache.has(root):
            await self.set(key, "" if default is None else default)

        value = resolve_get(self.cache.get(root), path)
        return None if value is MISSING else value

    async def get(self, key: str, default: Any = "") -> Any:
        """Get a value from the store.

        Same as get_or_insert_default(): a miss on the root key writes
        default to the backend before reading.
        """
        return await self.get_or_insert_default(key, default)

    async def fetch(self, key: str, default: Any = "") -> Any:
        """Alias to get()."""
        return await self.get(key, default)

    async def set(self, key: str, value: Any) -> Row:
        """Set a value and write the whole root document through.

        Args:
            key: Dotted key. Intermediate mappings are created as needed.
            value: JSON-compatible value.

        Returns:
            The row as read back from the backend.

        Raises:
            SerializationError: If value cannot be encoded as JSON.
            QueryError: If the row cannot be read back after the write.
        """
        root, path = split_key(key)
        current = self.cache.get(root) if self.cache.has(root) else {}
        document = resolve_set(current, path, value)
        raw = dumps_document(document, key=root)

        await self._ensure_table()
        await self.backend.upsert_row(self.table, root, raw)
        self.cache.set(root, document)

        rows = await self.backend.query_by_key(self.table, root)
        if not rows:
            raise QueryError("Row missing after write", context={"key": root})
        logger.debug("Set key", key=key)
        return rows[0]

    async def delete(self, key: str) -> bool:
        """Delete a root key from the backend and the cache.

        Returns:
            True if a row was removed.

        Raises:
            UnsupportedOperationError: If key has a nested path.
        """
        root, path = split_key(key)
        if path:
            raise UnsupportedOperationError(
                "Only root keys can be deleted", context={"key": key}
            )

        await self._ensure_table()
        removed = await self.backend.delete_row_by_key(self.table, root)
        self.cache.delete(root)

        logger.info("Deleted key", key=root, rows=removed)
        return removed > 0

    async def has(self, key: str) -> bool:
        """Check whether key exists. Never writes to the backend."""
        root, path = split_key(key)
        if not self.cache.has(root):
            return False
        if not path:
            return True
        return resolve_has(self.cache.get(root), path)

    async def push(self, key: str, *values: Any) -> Any:
        """Append values to the array at key, creating or coercing it.

        A missing value becomes a one-element array and a scalar becomes
        ``[scalar, value]``. Each value is persisted with its own set().

        Returns:
            The updated value of key.
        """
        current = await self.get(key)
        for value in values:
            if _is_unset(current):
                updated = [value]
            elif not isinstance(current, list):
                updated = [current, value]
            else:
                updated = [*current, value]
            await self.set(key, updated)
            current = updated

        return await self.get(key)

    async def all(self, strict: bool = False) -> dict[str, Document]:
        """Read every row from the backend, bypassing the cache.

        Args:
            strict: Raise on a row whose value is not valid JSON instead of
                skipping it.

        Returns:
            Mapping of root key to document.
        """
        await self._ensure_table()
        rows = await self.backend.query_all(self.table)

        data: dict[str, Document] = {}
        for row in rows:
            try:
                data[row.key] = row.document()
            except DeserializationError as e:
                if strict:
                    raise
                logger.warning("Skipping row with invalid value", key=row.key, error=str(e))
        return data


def create_store(settings: Settings | None = None) -> KeyValueStore:
    """Build an uninitialized store from settings.

    Args:
        settings: Settings to use; defaults to get_settings().
    """
    settings = settings or get_settings()
    return KeyValueStore(create_backend(settings), settings.KEYV_TABLE)
