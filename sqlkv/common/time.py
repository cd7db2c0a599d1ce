"""
Time Utilities

Storage policy:
- Expiration timestamps are stored as integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

from datetime import datetime, timezone

UTC = timezone.utc


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def now_ms() -> int:
    """Return current time as milliseconds since the epoch."""
    return int(utc_now().timestamp() * 1000)
