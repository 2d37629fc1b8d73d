"""
Job Discovery Models
SQLAlchemy models for persisted listings
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from jobfeed.core.models import Record
from .listing import ApplicationStatus, JobListing


class StoredJob(Record):
    """
    A listing persisted for one owner.

    Rows are keyed by (owner_id, url) so a pass never re-inserts a posting
    the owner already has. The public feed reads across all owners.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        UniqueConstraint("owner_id", "url", name="uq_jobs_owner_url"),
    )

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    listing_id: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    company_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=3, index=True)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    salary_range: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    requirements: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    posted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    match_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, native_enum=False, length=20),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )

    @classmethod
    def from_listing(cls, listing: JobListing, owner_id: str) -> "StoredJob":
        return cls(
            owner_id=owner_id,
            listing_id=listing.id,
            title=listing.title,
            company=listing.company,
            company_tier=listing.company_tier,
            location=listing.location,
            salary_range=listing.salary_range,
            description=listing.snippet,
            requirements=list(listing.requirements),
            platform=listing.source,
            url=listing.url,
            posted_at=listing.posted_at,
            match_score=round(listing.match_score),
            status=listing.status,
        )

    def to_listing(self) -> JobListing:
        return JobListing(
            id=self.listing_id,
            title=self.title,
            company=self.company,
            company_tier=self.company_tier,
            location=self.location,
            salary_range=self.salary_range,
            url=self.url,
            posted_at=self.posted_at,
            snippet=self.description or "",
            requirements=list(self.requirements or [])[:8],
            source=self.platform,
            match_score=max(0, min(100, self.match_score or 0)),
            status=self.status or ApplicationStatus.PENDING,
        )
