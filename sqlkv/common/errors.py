"""
Error Definitions

Defines the exception classes raised by the KV store for unified error handling.
Backend-facing errors wrap the original backend message in `details["cause"]`.
"""

from typing import Any, Optional


class KVStoreError(Exception):
    """
    KV Store Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "kv_store_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary format

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class AlreadyInitializedError(KVStoreError):
    """
    Already Initialized Error

    Raised when initialize() is called a second time on the same store instance.
    """

    def __init__(
        self,
        message: str = "KV store already initialized",
        code: str = "already_initialized",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="lifecycle_error",
            code=code,
            details=details,
        )


class InvalidTTLError(KVStoreError):
    """
    TTL Validation Error

    Raised when a TTL is given that is not a non-negative integer.
    """

    def __init__(
        self,
        message: str = "TTL must be a non-negative integer or None",
        code: str = "invalid_ttl",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="validation_error",
            code=code,
            details=details,
        )


class BackendOperationError(KVStoreError):
    """
    Storage Backend Error

    Base class for failures surfaced by the storage backend. The backend's
    original message is kept in `details["cause"]`.
    """

    default_message = "Storage backend error"
    default_code = "backend_error"

    def __init__(
        self,
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if cause is not None:
            details.setdefault("cause", str(cause))
        if message is None:
            message = self.default_message
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(
            message=message,
            error_type="backend_error",
            code=code or self.default_code,
            details=details,
        )


class InitializationFailedError(BackendOperationError):
    """Raised when the backing table cannot be created."""

    default_message = "Failed to initialize KV store"
    default_code = "initialization_failed"


class WriteFailedError(BackendOperationError):
    """Raised when a set() transaction fails."""

    default_message = "Failed to set value"
    default_code = "write_failed"


class ReadFailedError(BackendOperationError):
    """Raised when a get() query fails."""

    default_message = "Failed to get value"
    default_code = "read_failed"


class DeleteFailedError(BackendOperationError):
    """Raised when a delete() transaction fails."""

    default_message = "Failed to delete value"
    default_code = "delete_failed"


class CleanupFailedError(BackendOperationError):
    """Raised when a clear_expired() transaction fails."""

    default_message = "Failed to clear expired entries"
    default_code = "cleanup_failed"
