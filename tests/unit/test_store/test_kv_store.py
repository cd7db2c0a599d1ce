"""
Test Key-Value Store
"""

import asyncio
import json

import pytest

from sqlkv.common.errors import AlreadyInitializedError, InvalidTTLError
from sqlkv.store import KVStore


@pytest.mark.asyncio
async def test_initialize(backend):
    """Test initialize flips the instance flag"""
    store = KVStore(backend)

    assert store.is_initialized() is False

    await store.initialize()

    assert store.is_initialized() is True


@pytest.mark.asyncio
async def test_initialize_twice_raises(kv_store):
    """Test initializing the same instance twice"""
    with pytest.raises(AlreadyInitializedError) as exc_info:
        await kv_store.initialize()

    assert exc_info.value.message == "KV store already initialized"
    assert kv_store.is_initialized() is True


@pytest.mark.asyncio
async def test_initialize_existing_table(kv_store, backend):
    """Test a second instance can initialize against an existing table"""
    await kv_store.set("shared_key", "shared_value")

    other = KVStore(backend)
    await other.initialize()

    assert other.is_initialized() is True
    assert await other.get("shared_key") == "shared_value"


@pytest.mark.asyncio
async def test_set_and_get(kv_store):
    """Test setting and getting a key-value pair"""
    await kv_store.set("test_key", {"foo": "bar"})

    assert await kv_store.get("test_key") == {"foo": "bar"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "value",
    [
        "test",
        123,
        1.5,
        True,
        False,
        None,
        [1, 2, 3],
        {"a": 1, "b": {"c": [1, "two", None]}},
    ],
)
async def test_value_types(kv_store, value):
    """Test JSON value types are returned unchanged"""
    await kv_store.set("typed_key", value)

    assert await kv_store.get("typed_key") == value


@pytest.mark.asyncio
async def test_update_existing_key(kv_store):
    """Test a second set fully replaces the value"""
    await kv_store.set("update_key", {"foo": "bar", "extra": 1})
    await kv_store.set("update_key", {"foo": "baz"})

    assert await kv_store.get("update_key") == {"foo": "baz"}


@pytest.mark.asyncio
async def test_update_replaces_ttl(kv_store, backend):
    """Test a set without TTL clears a previous expiration"""
    await kv_store.set("ttl_key", "v1", ttl=60_000)
    await kv_store.set("ttl_key", "v2")

    result = await backend.execute(
        "SELECT expires_at FROM kv_store WHERE key = :key", {"key": "ttl_key"}
    )

    assert result.rows == [{"expires_at": None}]


@pytest.mark.asyncio
async def test_get_nonexistent_key(kv_store):
    """Test getting a non-existent key"""
    assert await kv_store.get("nonexistent_key") is None


@pytest.mark.asyncio
async def test_ttl_expiry(kv_store):
    """Test a value expires after its TTL"""
    await kv_store.set("ttl_key", {"foo": "bar"}, ttl=100)

    assert await kv_store.get("ttl_key") == {"foo": "bar"}

    await asyncio.sleep(0.15)

    assert await kv_store.get("ttl_key") is None
    assert await kv_store.get("ttl_key", allow_stale=True) == {"foo": "bar"}


@pytest.mark.asyncio
async def test_zero_ttl_is_immediately_stale(kv_store):
    """Test TTL of 0 expires on the next read"""
    await kv_store.set("zero_ttl", "value", ttl=0)

    assert await kv_store.get("zero_ttl") is None
    assert await kv_store.get("zero_ttl", allow_stale=True) == "value"


@pytest.mark.asyncio
async def test_stale_read_does_not_delete(kv_store, backend):
    """Test reading a stale value leaves the row in place"""
    await kv_store.set("stale_key", "value", ttl=0)

    assert await kv_store.get("stale_key") is None

    result = await backend.execute(
        "SELECT key FROM kv_store WHERE key = :key", {"key": "stale_key"}
    )
    assert len(result.rows) == 1


@pytest.mark.asyncio
async def test_store_default_allow_stale(backend):
    """Test the store-level stale policy and its per-call override"""
    store = KVStore(backend, allow_stale=True)
    await store.initialize()

    await store.set("stale_key", "value", ttl=0)

    assert await store.get("stale_key") == "value"
    assert await store.get("stale_key", allow_stale=False) is None


@pytest.mark.asyncio
async def test_expiry_boundary(kv_store, monkeypatch):
    """Test a value is stale exactly at its expiration time"""
    monkeypatch.setattr("sqlkv.store.now_ms", lambda: 1_000)
    await kv_store.set("boundary_key", "value", ttl=100)

    monkeypatch.setattr("sqlkv.store.now_ms", lambda: 1_099)
    assert await kv_store.get("boundary_key") == "value"

    monkeypatch.setattr("sqlkv.store.now_ms", lambda: 1_100)
    assert await kv_store.get("boundary_key") is None


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", [-1, 1.5, 100.0, "100", True])
async def test_invalid_ttl(kv_store, ttl):
    """Test invalid TTL values are rejected without touching the stored value"""
    await kv_store.set("test_key", "original")

    with pytest.raises(InvalidTTLError):
        await kv_store.set("test_key", "replacement", ttl=ttl)

    assert await kv_store.get("test_key") == "original"


@pytest.mark.asyncio
async def test_delete_key(kv_store):
    """Test deleting a key"""
    await kv_store.set("delete_key", {"foo": "bar"})

    deleted = await kv_store.delete("delete_key")

    assert deleted is True
    assert await kv_store.get("delete_key") is None


@pytest.mark.asyncio
async def test_delete_nonexistent_key(kv_store):
    """Test deleting a non-existent key is not an error"""
    await kv_store.set("other_key", "value")

    deleted = await kv_store.delete("nonexistent_key")

    assert deleted is False
    assert await kv_store.get("other_key") == "value"


@pytest.mark.asyncio
async def test_clear_expired(kv_store):
    """Test cleaning up expired keys"""
    await kv_store.set("expire1", "value1", ttl=100)
    await kv_store.set("expire2", "value2", ttl=100)
    await kv_store.set("no_expire", "value3")

    await asyncio.sleep(0.15)

    cleared = await kv_store.clear_expired()

    assert cleared == 2
    assert await kv_store.get("expire1", allow_stale=True) is None
    assert await kv_store.get("expire2", allow_stale=True) is None
    assert await kv_store.get("no_expire") == "value3"


@pytest.mark.asyncio
async def test_clear_expired_uses_single_snapshot(kv_store, monkeypatch):
    """Test only rows stale at call time are removed"""
    monkeypatch.setattr("sqlkv.store.now_ms", lambda: 1_000)
    await kv_store.set("expired", "a", ttl=100)
    await kv_store.set("valid", "b", ttl=500)
    await kv_store.set("forever", "c")

    monkeypatch.setattr("sqlkv.store.now_ms", lambda: 1_100)
    cleared = await kv_store.clear_expired()

    assert cleared == 1
    assert await kv_store.get("expired", allow_stale=True) is None
    assert await kv_store.get("valid") == "b"
    assert await kv_store.get("forever") == "c"


@pytest.mark.asyncio
async def test_clear_expired_nothing_to_remove(kv_store):
    """Test cleanup on a store without expired entries"""
    await kv_store.set("valid_key", "value", ttl=3_600_000)

    assert await kv_store.clear_expired() == 0
    assert await kv_store.get("valid_key") == "value"


@pytest.mark.asyncio
async def test_concurrent_sets_distinct_keys(kv_store):
    """Test concurrent writes to distinct keys are all visible"""
    keys = [f"key_{i}" for i in range(10)]

    await asyncio.gather(*(kv_store.set(key, {"index": i}) for i, key in enumerate(keys)))

    for i, key in enumerate(keys):
        assert await kv_store.get(key) == {"index": i}


@pytest.mark.asyncio
async def test_concurrent_sets_same_key(kv_store):
    """Test concurrent writes to one key leave exactly one complete value"""
    await asyncio.gather(*(kv_store.set("race_key", {"writer": i}) for i in range(5)))

    value = await kv_store.get("race_key")

    assert value in [{"writer": i} for i in range(5)]


@pytest.mark.asyncio
async def test_custom_table_name(backend):
    """Test stores with different table names are isolated"""
    first = KVStore(backend, table_name="first_store")
    second = KVStore(backend, table_name="second_store")
    await first.initialize()
    await second.initialize()

    await first.set("key", "first")

    assert await first.get("key") == "first"
    assert await second.get("key") is None


def test_invalid_table_name(backend):
    """Test table names must be plain identifiers"""
    with pytest.raises(ValueError):
        KVStore(backend, table_name="kv; DROP TABLE users")


@pytest.mark.asyncio
async def test_corrupted_value_propagates(kv_store, backend):
    """Test stored text that is not JSON fails the read"""
    await backend.execute(
        "INSERT INTO kv_store (key, value, expires_at) VALUES (:key, :value, NULL)",
        {"key": "bad_key", "value": "{not json"},
    )

    with pytest.raises(json.JSONDecodeError):
        await kv_store.get("bad_key")


@pytest.mark.asyncio
async def test_unserializable_value(kv_store):
    """Test values that are not JSON-serializable are rejected before writing"""
    with pytest.raises(TypeError):
        await kv_store.set("bad_value", object())

    assert await kv_store.get("bad_value") is None


@pytest.mark.asyncio
async def test_async_context_manager(backend):
    """Test the store closes its backend on exit"""
    closed = []

    async def fake_close():
        closed.append(True)

    backend.close = fake_close

    async with KVStore(backend) as store:
        await store.initialize()
        await store.set("key", "value")

    assert closed == [True]


@pytest.mark.asyncio
async def test_ttl_overflowing_timestamp(kv_store):
    """Test a TTL pushing expiration past a 64-bit timestamp is rejected"""
    await kv_store.set("big_ttl", "original")

    with pytest.raises(InvalidTTLError) as exc_info:
        await kv_store.set("big_ttl", "replacement", ttl=2**63)

    assert "too large" in exc_info.value.message
    assert await kv_store.get("big_ttl") == "original"
