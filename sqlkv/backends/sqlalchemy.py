"""
SQLAlchemy Storage Backend

Implements the storage backend interface on top of a SQLAlchemy AsyncEngine.
Statements are plain SQL text with named bind parameters.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncTransaction
from sqlalchemy.pool import SingletonThreadPool, StaticPool

from sqlkv.backends.base import StatementResult, StorageBackend, Transaction


def _to_statement_result(result: Result) -> StatementResult:
    """Materialize a cursor result before its connection is released"""
    if result.returns_rows:
        return StatementResult(rows=[dict(row) for row in result.mappings().all()])
    return StatementResult(rows_affected=max(result.rowcount, 0))


class SQLAlchemyTransaction(Transaction):
    """
    Write transaction bound to a single pooled connection

    The connection is checked out when the transaction is opened and returned
    to the pool by close(). When the engine shares one DBAPI connection, the
    backend lock held for this transaction is released by close() as well.
    """

    def __init__(
        self,
        connection: AsyncConnection,
        transaction: AsyncTransaction,
        lock: Optional[asyncio.Lock] = None,
    ):
        self.connection = connection
        self._transaction = transaction
        self._lock = lock

    async def execute(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> StatementResult:
        result = await self.connection.execute(text(statement), params or {})
        return _to_statement_result(result)

    async def commit(self) -> None:
        await self._transaction.commit()

    async def rollback(self) -> None:
        if self._transaction.is_active:
            await self._transaction.rollback()

    async def close(self) -> None:
        try:
            await self.connection.close()
        finally:
            if self._lock is not None:
                lock, self._lock = self._lock, None
                lock.release()


class SQLAlchemyBackend(StorageBackend):
    """
    Storage Backend SQLAlchemy Implementation

    Wraps an AsyncEngine; every statement or transaction checks out its own
    connection from the engine pool.

    Pools that hand the same DBAPI connection to every checkout (in-memory
    SQLite uses StaticPool) would let concurrent transactions share one
    database transaction, so access is serialized with a lock for them.
    """

    def __init__(self, engine: AsyncEngine):
        """
        Initialize Backend

        Args:
            engine: Async database engine
        """
        self.engine = engine
        self._lock: Optional[asyncio.Lock] = None
        if isinstance(engine.sync_engine.pool, (StaticPool, SingletonThreadPool)):
            self._lock = asyncio.Lock()

    @property
    def is_serialized(self) -> bool:
        """Whether statements and transactions are serialized on a shared connection"""
        return self._lock is not None

    @asynccontextmanager
    async def _exclusive(self) -> AsyncIterator[None]:
        if self._lock is None:
            yield
            return
        async with self._lock:
            yield

    async def execute(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> StatementResult:
        async with self._exclusive():
            async with self.engine.begin() as conn:
                result = await conn.execute(text(statement), params or {})
                return _to_statement_result(result)

    async def transaction(self) -> SQLAlchemyTransaction:
        if self._lock is not None:
            await self._lock.acquire()
        try:
            connection = await self.engine.connect()
            try:
                transaction = await connection.begin()
            except Exception:
                await connection.close()
                raise
        except BaseException:
            if self._lock is not None:
                self._lock.release()
            raise
        return SQLAlchemyTransaction(connection, transaction, self._lock)

    async def close(self) -> None:
        await self.engine.dispose()
