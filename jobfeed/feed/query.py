"""
Feed query parameters
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from config import settings
from jobfeed.core.clock import as_utc
from jobfeed.discovery.listing import ApplicationStatus


class FeedQuery(BaseModel):
    """
    Filters and pagination for one feed request.

    ``limit`` is clamped to the configured maximum rather than rejected.
    A ``tier`` outside 1-3 is ignored.
    """

    limit: int = Field(default_factory=lambda: settings.feed.default_limit, ge=1)
    offset: int = Field(default=0, ge=0)
    since: Optional[datetime] = None
    search: str = ""
    location: str = ""
    company: str = ""
    status: Optional[ApplicationStatus] = None
    tier: Optional[int] = None
    owner_id: str = ""

    @field_validator("limit", mode="after")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return min(v, settings.feed.max_limit)

    @field_validator("since", mode="after")
    @classmethod
    def normalize_since(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @field_validator("search", "location", "company", "owner_id", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return str(v).strip() if v is not None else ""

    @field_validator("status", mode="before")
    @classmethod
    def blank_status(cls, v: Any) -> Any:
        return v or None

    @field_validator("tier", mode="before")
    @classmethod
    def ignore_bad_tier(cls, v: Any) -> Optional[int]:
        if v in (None, ""):
            return None
        try:
            tier = int(v)
        except (TypeError, ValueError):
            return None
        return tier if tier in (1, 2, 3) else None

    def cache_key(self) -> str:
        return self.model_dump_json()
