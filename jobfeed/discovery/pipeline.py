"""
Scrape Service - one aggregation pass from fetch to persisted page

aggregate -> score -> tier mix -> paginate -> persist (owner only)
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field, field_validator
import structlog

from config import settings
from jobfeed.core.clock import utcnow
from jobfeed.core.exceptions import AggregationError, PersistenceError
from .aggregator import JobAggregator
from .listing import JobListing, TierStats
from .mixer import TierMixer
from .scorer import DEFAULT_KEYWORDS, DEFAULT_LOCATIONS, ListingScorer
from .tiers import TierRegistry, get_registry

logger = structlog.get_logger(__name__)


def split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class ScrapeRequest(BaseModel):
    """
    Trigger parameters for an aggregation pass.

    ``keywords`` and ``locations`` are comma-separated overrides; blank
    values fall back to the defaults. Unparseable or zero ``limit`` uses the
    default, and ``limit`` is clamped to the configured maximum.
    """

    keywords: Optional[str] = None
    locations: Optional[str] = None
    limit: int = Field(default_factory=lambda: settings.scrape.default_limit)
    offset: int = 0
    owner_id: Optional[str] = None

    @field_validator("keywords", "locations", mode="before")
    @classmethod
    def join_lists(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            return ",".join(str(item) for item in v)
        return str(v)

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, v: Any) -> int:
        try:
            limit = int(v)
        except (TypeError, ValueError):
            limit = 0
        if limit <= 0:
            limit = settings.scrape.default_limit
        return min(limit, settings.scrape.max_limit)

    @field_validator("offset", mode="before")
    @classmethod
    def parse_offset(cls, v: Any) -> int:
        try:
            return max(0, int(v))
        except (TypeError, ValueError):
            return 0

    @field_validator("owner_id", mode="before")
    @classmethod
    def blank_owner(cls, v: Any) -> Optional[str]:
        return str(v).strip() or None if v is not None else None

    @property
    def keyword_list(self) -> list[str]:
        return split_csv(self.keywords) or list(DEFAULT_KEYWORDS)

    @property
    def location_list(self) -> list[str]:
        return split_csv(self.locations) or list(DEFAULT_LOCATIONS)


@dataclass
class ScrapeResult:
    """Page of mixed listings produced by one pass"""

    listings: list[JobListing]
    total: int
    offset: int
    limit: int
    elapsed_ms: int
    timestamp: datetime
    persisted: bool = False
    inserted: int = 0
    persist_error: Optional[str] = None
    stats: TierStats = field(default_factory=TierStats)

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "listings": [l.to_public_dict(self.timestamp) for l in self.listings],
            "stats": self.stats.model_dump(),
            "total": self.total,
            "hasMore": self.has_more,
            "nextOffset": self.offset + self.limit,
            "elapsedMs": self.elapsed_ms,
            "timestamp": self.timestamp.isoformat(),
            "persisted": self.persisted,
            "inserted": self.inserted,
            "persistError": self.persist_error,
        }


class ScrapeService:
    """Runs aggregation passes against the configured sources"""

    def __init__(
        self,
        registry: Optional[TierRegistry] = None,
        store: Optional[Any] = None,
        aggregator: Optional[JobAggregator] = None,
        mixer: Optional[TierMixer] = None,
    ):
        self._registry = registry
        self.store = store
        self.aggregator = aggregator
        self.mixer = mixer or TierMixer()

    @property
    def registry(self) -> TierRegistry:
        if self._registry is None:
            self._registry = get_registry()
        return self._registry

    async def _aggregate(self) -> list[JobListing]:
        if self.aggregator is not None:
            return await self.aggregator.aggregate()

        batch_size = settings.sources.batch_size
        async with httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "User-Agent": settings.sources.user_agent,
            },
            limits=httpx.Limits(max_connections=batch_size),
        ) as http:
            aggregator = JobAggregator.from_descriptors(
                self.registry.pollable_sources(),
                http_client=http,
                batch_size=batch_size,
            )
            return await aggregator.aggregate()

    async def run(self, request: ScrapeRequest, now: Optional[datetime] = None) -> ScrapeResult:
        started = time.monotonic()
        now = now or utcnow()

        logger.info(
            "Starting scrape pass",
            keywords=len(request.keyword_list),
            locations=len(request.location_list),
            owner_id=request.owner_id,
        )

        try:
            unique = await self._aggregate()
        except Exception as e:
            logger.error("Aggregation pass failed", error=str(e), exc_info=True)
            raise AggregationError("Aggregation pass failed") from e

        ListingScorer(request.keyword_list, request.location_list).score_all(unique, now)
        mixed = self.mixer.mix(unique, now)
        page = mixed[request.offset:request.offset + request.limit]

        result = ScrapeResult(
            listings=page,
            total=len(mixed),
            offset=request.offset,
            limit=request.limit,
            elapsed_ms=0,
            timestamp=now,
            stats=TierStats.from_listings(page),
        )

        if request.owner_id and page and self.store is not None:
            try:
                result.inserted = await self.store.insert_if_absent(
                    page,
                    request.owner_id,
                    limit=settings.scrape.max_inserts,
                )
                result.persisted = True
            except PersistenceError as e:
                # The computed page is still returned
                logger.error(
                    "Persisting scrape results failed",
                    owner_id=request.owner_id,
                    error=e.details.get("error"),
                )
                result.persist_error = e.message

        result.elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Scrape pass complete",
            unique=len(unique),
            mixed=len(mixed),
            returned=len(page),
            inserted=result.inserted,
            elapsed_ms=result.elapsed_ms,
        )
        return result
