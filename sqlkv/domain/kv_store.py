"""
Key-Value Store Domain Model

Defines the row-level representation of a stored entry.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class KeyValueEntry(BaseModel):
    """Key-Value Entry Model"""

    key: str = Field(..., description="Key")
    value: str = Field(..., description="Serialized JSON value")
    expires_at: Optional[int] = Field(
        None, description="Expiration time in epoch milliseconds"
    )

    model_config = ConfigDict(from_attributes=True)

    def is_stale(self, now: int) -> bool:
        """
        Check whether the entry is stale at `now`

        An entry without expiration is never stale; otherwise it is stale once
        `expires_at <= now`.

        Args:
            now: Current time in epoch milliseconds
        """
        return self.expires_at is not None and self.expires_at <= now
