"""
Test Configuration Module
"""

import pytest
import pytest_asyncio
from typing import AsyncGenerator

from sqlkv.backends.sqlalchemy import SQLAlchemyBackend
from sqlkv.config import get_settings
from sqlkv.db.session import create_engine
from sqlkv.store import KVStore


@pytest.fixture
def database_url(tmp_path) -> str:
    """File-backed SQLite database so concurrent connections share data"""
    return f"sqlite+aiosqlite:///{tmp_path / 'kv-store.db'}"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload configuration from the environment for every test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def backend(database_url) -> AsyncGenerator[SQLAlchemyBackend, None]:
    """Create storage backend for testing"""
    engine = create_engine(database_url)

    yield SQLAlchemyBackend(engine)

    await engine.dispose()


@pytest_asyncio.fixture
async def kv_store(backend) -> AsyncGenerator[KVStore, None]:
    """Create an initialized KV store for testing"""
    store = KVStore(backend)
    await store.initialize()

    yield store

    await store.close()
