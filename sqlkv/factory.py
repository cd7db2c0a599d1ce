"""
KV Store Factory Module

Creates engine-backed KV stores from explicit options, falling back to the
environment configuration for every option that is not given.
"""

from typing import Optional

from sqlkv.backends.sqlalchemy import SQLAlchemyBackend
from sqlkv.config import get_settings
from sqlkv.db.session import create_engine
from sqlkv.store import KVStore


def create_kv_store(
    url: Optional[str] = None,
    auth_token: Optional[str] = None,
    table_name: Optional[str] = None,
    debug: Optional[bool] = None,
    allow_stale: Optional[bool] = None,
) -> KVStore:
    """
    Create a KV store backed by a SQLAlchemy async engine

    The returned store is not initialized yet; call `await store.initialize()`.

    Args:
        url: SQLAlchemy async database URL (default: KV_STORE_URL)
        auth_token: Credential for remote backends (default: KV_STORE_AUTH_TOKEN)
        table_name: Backing table name (default: KV_STORE_TABLE_NAME)
        debug: Log statements and parameters (default: KV_STORE_DEBUG)
        allow_stale: Default stale-read policy (default: KV_STORE_ALLOW_STALE)

    Returns:
        KVStore: Uninitialized store instance

    Example:
        store = create_kv_store(url="sqlite+aiosqlite:///./cache.db")
        await store.initialize()
        await store.set("greeting", {"hello": "world"}, ttl=60_000)
    """
    settings = get_settings()

    url = url or settings.KV_STORE_URL
    auth_token = auth_token or settings.KV_STORE_AUTH_TOKEN
    debug = settings.KV_STORE_DEBUG if debug is None else debug
    allow_stale = settings.KV_STORE_ALLOW_STALE if allow_stale is None else allow_stale

    engine = create_engine(url, auth_token=auth_token, echo=debug)
    return KVStore(
        SQLAlchemyBackend(engine),
        table_name=table_name or settings.KV_STORE_TABLE_NAME,
        debug=debug,
        allow_stale=allow_stale,
    )
