"""
Tests for the SQLite and in-memory backends.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from keyv.backends import BackendStore, MemoryBackend, SQLiteBackend, create_backend
from keyv.config import Settings
from keyv.exceptions import BackendUnavailableError, ConfigurationError, QueryError
from keyv.types import Row


@pytest.fixture
async def ready_backend(backend: BackendStore) -> BackendStore:
    """Backend with the test table created."""
    await backend.connect()
    await backend.ensure_table("rows")
    yield backend
    await backend.close()


class TestRowOperations:
    """Test the row-level contract shared by all backends."""

    @pytest.mark.asyncio
    async def test_empty_table(self, ready_backend: BackendStore) -> None:
        assert await ready_backend.query_all("rows") == []
        assert await ready_backend.query_by_key("rows", "john") == []

    @pytest.mark.asyncio
    async def test_ensure_table_is_idempotent(self, ready_backend: BackendStore) -> None:
        await ready_backend.insert_row("rows", "john", "1")
        await ready_backend.ensure_table("rows")

        assert await ready_backend.query_all("rows") == [Row("john", "1")]

    @pytest.mark.asyncio
    async def test_insert_and_query(self, ready_backend: BackendStore) -> None:
        await ready_backend.insert_row("rows", "q", '"b"')
        await ready_backend.insert_row("rows", "p", '"a"')

        assert await ready_backend.query_all("rows") == [Row("p", '"a"'), Row("q", '"b"')]
        assert await ready_backend.query_by_key("rows", "q") == [Row("q", '"b"')]

    @pytest.mark.asyncio
    async def test_duplicate_insert_fails(self, ready_backend: BackendStore) -> None:
        await ready_backend.insert_row("rows", "john", "1")

        with pytest.raises(QueryError):
            await ready_backend.insert_row("rows", "john", "2")

    @pytest.mark.asyncio
    async def test_update(self, ready_backend: BackendStore) -> None:
        await ready_backend.insert_row("rows", "john", "1")

        assert await ready_backend.update_row_by_key("rows", "john", "2") == 1
        assert await ready_backend.update_row_by_key("rows", "jane", "2") == 0
        assert await ready_backend.query_all("rows") == [Row("john", "2")]

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_replaces(self, ready_backend: BackendStore) -> None:
        await ready_backend.upsert_row("rows", "john", "1")
        await ready_backend.upsert_row("rows", "john", "2")

        assert await ready_backend.query_by_key("rows", "john") == [Row("john", "2")]

    @pytest.mark.asyncio
    async def test_delete(self, ready_backend: BackendStore) -> None:
        await ready_backend.insert_row("rows", "john", "1")

        assert await ready_backend.delete_row_by_key("rows", "john") == 1
        assert await ready_backend.delete_row_by_key("rows", "john") == 0
        assert await ready_backend.query_all("rows") == []

    @pytest.mark.asyncio
    async def test_missing_table(self, ready_backend: BackendStore) -> None:
        with pytest.raises(QueryError) as exc_info:
            await ready_backend.query_all("other")

        assert exc_info.value.context["table"] == "other"

    @pytest.mark.asyncio
    async def test_table_name_validated(self, ready_backend: BackendStore) -> None:
        with pytest.raises(ConfigurationError):
            await ready_backend.query_all("rows; DROP TABLE rows")


class TestSQLiteBackend:
    """Test SQLite-specific behavior."""

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, temp_dir: Path) -> None:
        path = temp_dir / "nested" / "dir" / "db.sqlite"
        async with SQLiteBackend(path) as backend:
            await backend.ensure_table("rows")

        assert path.exists()

    @pytest.mark.asyncio
    async def test_data_survives_reopen(self, temp_dir: Path) -> None:
        path = temp_dir / "db.sqlite"
        async with SQLiteBackend(path) as backend:
            await backend.ensure_table("rows")
            await backend.upsert_row("rows", "john", "1")

        async with SQLiteBackend(path) as backend:
            assert await backend.query_all("rows") == [Row("john", "1")]

    @pytest.mark.asyncio
    async def test_in_memory_database(self) -> None:
        async with SQLiteBackend(":memory:") as backend:
            await backend.ensure_table("rows")
            await backend.upsert_row("rows", "john", "1")
            assert await backend.query_all("rows") == [Row("john", "1")]

    @pytest.mark.asyncio
    async def test_unopenable_path(self, temp_dir: Path) -> None:
        # A directory cannot be opened as a database file.
        backend = SQLiteBackend(temp_dir)

        with pytest.raises(BackendUnavailableError):
            await backend.connect()


class TestCreateBackend:
    """Test backend selection from settings."""

    def test_sqlite(self, temp_dir: Path) -> None:
        settings = Settings(_env_file=None, SQLITE_PATH=temp_dir / "x.sqlite")
        backend = create_backend(settings)

        assert isinstance(backend, SQLiteBackend)
        assert backend.db_path == temp_dir / "x.sqlite"

    def test_memory(self) -> None:
        settings = Settings(_env_file=None, KEYV_BACKEND="memory")
        assert isinstance(create_backend(settings), MemoryBackend)
