"""
Database Engine Management Module

Builds the asynchronous SQLAlchemy engine used by the storage backend.
"""

import logging
from typing import Any, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

logger = logging.getLogger(__name__)

# Drivers that accept an `auth_token` connect argument
AUTH_TOKEN_DRIVERS = {"libsql"}


def build_connect_args(url: str, auth_token: Optional[str] = None) -> dict[str, Any]:
    """
    Build driver connect arguments for a database URL

    The auth token is only forwarded to drivers that accept it; local
    databases ignore it, like file URLs do for libsql clients.

    Args:
        url: SQLAlchemy async database URL
        auth_token: Credential for remote backends

    Returns:
        dict: Keyword arguments passed to the DBAPI connect()
    """
    parsed = make_url(url)
    connect_args: dict[str, Any] = {}
    # SQLite specific configuration
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    if auth_token:
        if parsed.get_driver_name() in AUTH_TOKEN_DRIVERS:
            connect_args["auth_token"] = auth_token
        else:
            logger.warning(
                f"Auth token ignored: driver '{parsed.get_driver_name()}' does not accept one"
            )
    return connect_args


def create_engine(
    url: str,
    auth_token: Optional[str] = None,
    echo: bool = False,
) -> AsyncEngine:
    """
    Create the async database engine

    Args:
        url: SQLAlchemy async database URL
        auth_token: Credential for remote backends, passed to libsql drivers as `auth_token`
        echo: Print SQL statements through the `sqlalchemy.engine` logger

    Returns:
        AsyncEngine: Async database engine
    """
    return create_async_engine(
        url,
        echo=echo,
        connect_args=build_connect_args(url, auth_token),
    )
