"""
keyv - dot-path key-value store over SQLite or PostgreSQL.
"""

from __future__ import annotations

from keyv.backends import MemoryBackend, PostgresBackend, SQLiteBackend
from keyv.store import KeyValueStore, create_store

__version__ = "0.1.0"

__all__ = [
    "KeyValueStore",
    "MemoryBackend",
    "PostgresBackend",
    "SQLiteBackend",
    "__version__",
    "create_store",
]
