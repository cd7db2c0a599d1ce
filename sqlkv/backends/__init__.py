"""
Storage Backend Module Initialization
"""

from sqlkv.backends.base import StatementResult, StorageBackend, Transaction
from sqlkv.backends.sqlalchemy import SQLAlchemyBackend, SQLAlchemyTransaction

__all__ = [
    "StatementResult",
    "StorageBackend",
    "Transaction",
    "SQLAlchemyBackend",
    "SQLAlchemyTransaction",
]
