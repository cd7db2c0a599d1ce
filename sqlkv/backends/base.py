"""
Storage Backend Interface

Defines the capabilities the KV store requires from a SQL storage engine:
single statement execution, write transactions, and shutdown.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class StatementResult:
    """Materialized result of a single statement"""

    rows: list[dict[str, Any]] = field(default_factory=list)
    rows_affected: int = 0


class Transaction(ABC):
    """Write Transaction Interface"""

    @abstractmethod
    async def execute(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> StatementResult:
        """
        Execute a parameterized statement inside the transaction

        Args:
            statement: SQL text using named bind parameters (`:name`)
            params: Bind parameter values

        Returns:
            StatementResult: Fetched rows and affected row count
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the transaction"""
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Roll back the transaction"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Release the transaction resource

        Must be safe to call after commit() or rollback().
        """
        pass


class StorageBackend(ABC):
    """Storage Backend Interface"""

    @abstractmethod
    async def execute(
        self, statement: str, params: Optional[dict[str, Any]] = None
    ) -> StatementResult:
        """
        Execute a single parameterized statement outside an explicit transaction

        Args:
            statement: SQL text using named bind parameters (`:name`)
            params: Bind parameter values

        Returns:
            StatementResult: Fetched rows and affected row count
        """
        pass

    @abstractmethod
    async def transaction(self) -> Transaction:
        """
        Open a write transaction

        The caller owns the returned transaction and must close() it.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the backend connection entirely"""
        pass
