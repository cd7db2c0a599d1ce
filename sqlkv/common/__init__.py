"""
Common Utilities Module Initialization
"""

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

__all__ = [
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
