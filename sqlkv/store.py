"""
Key-Value Store

TTL-aware key-value store on top of a SQL storage backend. Values are stored
as JSON text; expiration is an absolute epoch-millisecond timestamp evaluated
lazily on every read.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlkv.backends.base import StorageBackend, Transaction
from sqlkv.common.errors import (
    AlreadyInitializedError,
    BackendOperationError,
    CleanupFailedError,
    DeleteFailedError,
    InitializationFailedError,
    InvalidTTLError,
    ReadFailedError,
    WriteFailedError,
)
from sqlkv.common.time import now_ms
from sqlkv.config import DEFAULT_TABLE_NAME, validate_table_name
from sqlkv.domain.kv_store import KeyValueEntry

logger = logging.getLogger(__name__)

# Largest value a BIGINT expires_at column can hold
MAX_EXPIRES_AT = 2**63 - 1


class KVStore:
    """
    Key-Value Store

    Each instance owns its backend reference, table name, initialization flag
    and default stale-read policy. Call initialize() once before any data
    operation so the backing table exists.
    """

    def __init__(
        self,
        backend: StorageBackend,
        table_name: str = DEFAULT_TABLE_NAME,
        debug: bool = False,
        allow_stale: bool = False,
    ):
        """
        Initialize Store

        Args:
            backend: Storage backend executing the statements
            table_name: Backing table name
            debug: Log every statement and its parameters before execution
            allow_stale: Default policy for returning expired values from get()
        """
        self.backend = backend
        self.table_name = validate_table_name(table_name)
        self.debug = debug
        self.allow_stale = allow_stale
        self._initialized = False

    async def __aenter__(self) -> "KVStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _log(self, label: str, sql: str, params: Optional[dict[str, Any]] = None) -> None:
        if not self.debug:
            return
        logger.info(f"{label} SQL: {sql}")
        if params is not None:
            logger.info(f"{label} args: {params}")

    @asynccontextmanager
    async def _write_transaction(
        self, error_cls: type[BackendOperationError]
    ) -> AsyncIterator[Transaction]:
        """
        Scoped write transaction

        Commits when the block exits cleanly. On any failure the transaction is
        rolled back and released before `error_cls` is raised. The transaction
        resource is released on every exit path.
        """
        transaction: Optional[Transaction] = None
        try:
            transaction = await self.backend.transaction()
            yield transaction
            await transaction.commit()
        except Exception as e:
            if transaction is not None:
                await self._rollback(transaction)
            raise error_cls(e) from e
        finally:
            if transaction is not None:
                await self._release(transaction)

    async def _rollback(self, transaction: Transaction) -> None:
        try:
            await transaction.rollback()
        except Exception as e:
            # Keep the original failure as the surfaced error
            logger.warning(f"Transaction rollback failed: {str(e)}", exc_info=True)

    async def _release(self, transaction: Transaction) -> None:
        try:
            await transaction.close()
        except Exception as e:
            logger.warning(f"Transaction release failed: {str(e)}", exc_info=True)

    async def initialize(self) -> None:
        """
        Create the backing table if it does not exist

        Raises:
            AlreadyInitializedError: initialize() already succeeded on this instance
            InitializationFailedError: Table creation failed
        """
        if self._initialized:
            raise AlreadyInitializedError()

        sql = (
            f"CREATE TABLE IF NOT EXISTS {self.table_name} "
            "(key TEXT PRIMARY KEY, value TEXT, expires_at BIGINT)"
        )
        self._log("Initialize", sql)
        try:
            await self.backend.execute(sql)
        except Exception as e:
            raise InitializationFailedError(e) from e

        self._initialized = True
        logger.info(f"KV store initialized (table: {self.table_name})")

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Store a value, replacing any existing value and TTL for the key

        Args:
            key: The key to set
            value: Any JSON-serializable value, including None
            ttl: Milliseconds until expiration (None means never expires).
                0 is valid and expires the value immediately.

        Raises:
            InvalidTTLError: ttl is not a non-negative integer, or the
                resulting expiration overflows a 64-bit timestamp
            WriteFailedError: The write transaction failed
        """
        if ttl is not None and (
            isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 0
        ):
            raise InvalidTTLError(details={"ttl": repr(ttl)})

        expires_at = now_ms() + ttl if ttl is not None else None
        if expires_at is not None and expires_at > MAX_EXPIRES_AT:
            raise InvalidTTLError(
                message="TTL is too large: expiration does not fit a 64-bit timestamp",
                details={"ttl": repr(ttl)},
            )

        serialized = json.dumps(value)

        sql = (
            f"INSERT INTO {self.table_name} (key, value, expires_at) "
            "VALUES (:key, :value, :expires_at) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, expires_at = excluded.expires_at"
        )
        params = {"key": key, "value": serialized, "expires_at": expires_at}
        self._log("Set", sql, params)

        async with self._write_transaction(WriteFailedError) as transaction:
            await transaction.execute(sql, params)

    async def get(self, key: str, allow_stale: Optional[bool] = None) -> Any:
        """
        Get value by key

        Returns None if the key doesn't exist, or if it is stale and stale
        reads are not allowed. Stale rows are left in place.

        Args:
            key: The key to look up
            allow_stale: Override the store default for this read

        Raises:
            ReadFailedError: The query failed
        """
        sql = f"SELECT value, expires_at FROM {self.table_name} WHERE key = :key"
        params = {"key": key}
        self._log("Get", sql, params)

        try:
            result = await self.backend.execute(sql, params)
        except Exception as e:
            raise ReadFailedError(e) from e

        if not result.rows:
            return None

        entry = KeyValueEntry(key=key, **result.rows[0])
        should_allow_stale = self.allow_stale if allow_stale is None else allow_stale
        if entry.is_stale(now_ms()) and not should_allow_stale:
            return None

        return json.loads(entry.value)

    async def delete(self, key: str) -> bool:
        """
        Delete a key

        Deleting a key that doesn't exist is not an error.

        Returns:
            True if a row was deleted, False if key didn't exist

        Raises:
            DeleteFailedError: The delete transaction failed
        """
        sql = f"DELETE FROM {self.table_name} WHERE key = :key"
        params = {"key": key}
        self._log("Delete", sql, params)

        async with self._write_transaction(DeleteFailedError) as transaction:
            result = await transaction.execute(sql, params)
        return result.rows_affected > 0

    async def clear_expired(self) -> int:
        """
        Delete all entries that are stale right now

        All rows are compared against a single timestamp taken before the
        statement runs.

        Returns:
            Number of deleted entries

        Raises:
            CleanupFailedError: The cleanup transaction failed
        """
        sql = (
            f"DELETE FROM {self.table_name} "
            "WHERE expires_at IS NOT NULL AND expires_at <= :now"
        )
        params = {"now": now_ms()}
        self._log("Clear expired", sql, params)

        async with self._write_transaction(CleanupFailedError) as transaction:
            result = await transaction.execute(sql, params)

        if result.rows_affected:
            logger.info(f"KV store cleanup: {result.rows_affected} expired keys deleted")
        return result.rows_affected

    async def close(self) -> None:
        """Release the backend connection"""
        await self.backend.close()

    def is_initialized(self) -> bool:
        return self._initialized
