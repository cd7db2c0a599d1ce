"""
Domain Model Module Initialization
"""

from sqlkv.domain.kv_store import KeyValueEntry

__all__ = ["KeyValueEntry"]
