"""
sql-kv: TTL-aware key-value store on top of a SQL database
"""

from sqlalchemy.exc import SQLAlchemyError as BackendError

from sqlkv.common.errors import (
    AlreadyInitializedError,
    BackendOperationError,
    CleanupFailedError,
    DeleteFailedError,
    InitializationFailedError,
    InvalidTTLError,
    KVStoreError,
    ReadFailedError,
    WriteFailedError,
)
from sqlkv.config import Settings, get_settings
from sqlkv.factory import create_kv_store
from sqlkv.logging_config import setup_logging
from sqlkv.store import KVStore

__all__ = [
    "KVStore",
    "create_kv_store",
    "setup_logging",
    "Settings",
    "get_settings",
    "BackendError",
    "KVStoreError",
    "AlreadyInitializedError",
    "InvalidTTLError",
    "BackendOperationError",
    "InitializationFailedError",
    "WriteFailedError",
    "ReadFailedError",
    "DeleteFailedError",
    "CleanupFailedError",
]
