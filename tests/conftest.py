"""
Pytest configuration and fixtures for keyv tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Generator
from unittest.mock import patch

import pytest

from keyv.backends import BackendStore, MemoryBackend, SQLiteBackend
from keyv.config import Settings, clear_settings_cache
from keyv.store import KeyValueStore


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide environment variables selecting a SQLite store in temp_dir."""
    env_vars = {
        "KEYV_BACKEND": "sqlite",
        "KEYV_TABLE": "userinfo",
        "SQLITE_PATH": str(temp_dir / "db" / "keyv.sqlite"),
        "LOG_LEVEL": "WARNING",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str]) -> Generator[Settings, None, None]:
    """Provide a Settings instance loaded from the mock environment."""
    from keyv.config import get_settings

    clear_settings_cache()
    yield get_settings()
    clear_settings_cache()


@pytest.fixture(params=["sqlite", "memory"])
def backend(request: pytest.FixtureRequest, temp_dir: Path) -> BackendStore:
    """Provide each backend that can run without a server."""
    if request.param == "sqlite":
        return SQLiteBackend(temp_dir / "keyv.sqlite")
    return MemoryBackend()


@pytest.fixture
async def store(backend: BackendStore) -> AsyncGenerator[KeyValueStore, None]:
    """Create an initialized store over an empty table."""
    db = KeyValueStore(backend, "userinfo")
    await db.init()
    yield db
    await db.close()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
