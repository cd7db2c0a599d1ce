"""
Database Module Initialization
"""

from sqlkv.db.session import create_engine

__all__ = ["create_engine"]
