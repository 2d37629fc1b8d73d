"""
Canonical job listing record and derived read models
"""

import enum
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobfeed.core.clock import as_utc

MAX_REQUIREMENTS = 8


class ApplicationStatus(str, enum.Enum):
    """Where the owner is with a listing"""

    PENDING = "pending"
    APPLIED = "applied"
    INTERVIEW = "interview"
    OFFER = "offer"
    REJECTED = "rejected"


class JobListing(BaseModel):
    """
    One job posting, normalized from any source.

    ``company_tier`` is fixed at creation. ``match_score`` is rewritten by
    the scorer on every aggregation pass.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    title: str
    company: str
    company_tier: int = Field(default=3, ge=1, le=3, frozen=True)
    location: str
    salary_range: Optional[str] = None
    url: str = Field(min_length=1)
    posted_at: datetime
    snippet: str = ""
    requirements: list[str] = Field(default_factory=list, max_length=MAX_REQUIREMENTS)
    source: str
    match_score: int = Field(default=0, ge=0, le=100)
    status: ApplicationStatus = ApplicationStatus.PENDING

    @field_validator("posted_at")
    @classmethod
    def normalize_posted_at(cls, v: datetime) -> datetime:
        return as_utc(v)

    def to_public_dict(self, now: Optional[datetime] = None) -> dict[str, Any]:
        """Serialize with ``posted_delta`` computed at read time"""
        from .normalizer import posted_delta

        data = self.model_dump(mode="json")
        data["posted_delta"] = posted_delta(self.posted_at, now)
        return data


class TierStats(BaseModel):
    """Per-tier counts over a listing collection"""

    tier1: int = 0
    tier2: int = 0
    tier3: int = 0
    total: int = 0

    @classmethod
    def from_tiers(cls, tiers: Iterable[int]) -> "TierStats":
        stats = cls()
        for tier in tiers:
            if tier == 1:
                stats.tier1 += 1
            elif tier == 2:
                stats.tier2 += 1
            else:
                stats.tier3 += 1
            stats.total += 1
        return stats

    @classmethod
    def from_listings(cls, listings: Iterable[JobListing]) -> "TierStats":
        return cls.from_tiers(listing.company_tier for listing in listings)
