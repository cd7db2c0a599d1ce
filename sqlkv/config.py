"""
Configuration Management Module

Configures KV store defaults via environment variables or .env file.
Supports SQLite (default) and any other SQLAlchemy async-capable database.
"""

import re
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TABLE_NAME = "kv_store"

_TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_table_name(name: str) -> str:
    """
    Validate a backing table name

    The table name is interpolated into SQL, so only plain identifiers are accepted.

    Raises:
        ValueError: Name is not a plain SQL identifier
    """
    if not _TABLE_NAME_PATTERN.match(name):
        raise ValueError(f"Invalid table name: {name!r}")
    return name


class Settings(BaseSettings):
    """
    KV Store Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Database Config
    # SQLAlchemy async URL; SQLite file next to the working directory by default
    KV_STORE_URL: str = "sqlite+aiosqlite:///./kv-store.db"
    # Credential for remote backends, forwarded to the driver as `auth_token`
    KV_STORE_AUTH_TOKEN: Optional[str] = None

    # Store Config
    KV_STORE_TABLE_NAME: str = DEFAULT_TABLE_NAME
    # Log every statement and its parameters before execution
    KV_STORE_DEBUG: bool = False
    # Return stale values from get() unless overridden per call
    KV_STORE_ALLOW_STALE: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("KV_STORE_TABLE_NAME")
    @classmethod
    def _check_table_name(cls, value: str) -> str:
        return validate_table_name(value)


@lru_cache()
def get_settings() -> Settings:
    """
    Get KV store configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Configuration instance
    """
    return Settings()
