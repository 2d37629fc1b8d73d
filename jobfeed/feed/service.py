"""
Feed Service - filtered, paginated listings with conditional fetch

Each response carries a freshness token derived from the newest stored
listing and the filtered total. A caller that presents the token it last
saw gets a not-modified result with no body until either value changes.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any, Optional

import structlog

from config import settings
from jobfeed.core.cache import SnapshotCache
from jobfeed.core.clock import as_utc, parse_timestamp, utcnow
from jobfeed.core.exceptions import FeedQueryError, PersistenceError
from jobfeed.discovery.listing import TierStats
from jobfeed.discovery.models import StoredJob
from .query import FeedQuery
from .store import JobStore, QueryResult

logger = structlog.get_logger(__name__)

CACHE_NAMESPACE = "feed"


def freshness_token(latest: Optional[datetime], total: int) -> str:
    """Quoted opaque token for ETag / If-None-Match"""
    stamp = as_utc(latest).isoformat() if latest else ""
    encoded = base64.b64encode(f"{stamp}-{total}".encode("utf-8")).decode("ascii")
    return f'"{encoded}"'


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an If-Modified-Since value (HTTP-date or ISO 8601)"""
    if not value:
        return None
    try:
        return as_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError):
        return parse_timestamp(value)


@dataclass
class FeedResult:
    """Outcome of one feed request"""

    etag: str
    last_modified: datetime
    not_modified: bool = False
    body: Optional[dict[str, Any]] = None
    total: int = 0
    headers: dict[str, str] = field(default_factory=dict)


class FeedService:
    """
    Serves the stored listing collection.

    Listings come back tier ascending, newest first within a tier, each
    annotated with ``posted_delta`` and ``is_new``. ``stats`` counts tiers
    on the returned page.
    """

    def __init__(
        self,
        store: Optional[JobStore] = None,
        cache: Optional[SnapshotCache] = None,
        max_age: Optional[int] = None,
        new_window: Optional[timedelta] = None,
    ):
        self.store = store or JobStore()
        self.cache = cache
        self.max_age = settings.feed.cache_max_age if max_age is None else max_age
        self.new_window = new_window or timedelta(minutes=settings.feed.new_window_minutes)

    def _serialize_row(self, row: StoredJob, now: datetime) -> dict[str, Any]:
        data = row.to_listing().to_public_dict(now)
        stored_at = row.stored_at
        data["job_id"] = str(row.id)
        data["created_at"] = stored_at.isoformat()
        data["is_new"] = now - stored_at < self.new_window
        return data

    def build_body(
        self,
        query: FeedQuery,
        result: QueryResult,
        last_modified: datetime,
        now: datetime,
    ) -> dict[str, Any]:
        listings = [self._serialize_row(row, now) for row in result.rows]
        stats = TierStats.from_tiers(item["company_tier"] for item in listings)
        return {
            "listings": listings,
            "total": result.total,
            "hasMore": query.offset + query.limit < result.total,
            "lastUpdated": last_modified.isoformat(),
            "stats": stats.model_dump(),
        }

    async def _load(self, query: FeedQuery, now: datetime) -> dict[str, Any]:
        """Snapshot of token, timestamp and body, memoized for ``max_age``"""
        key = query.cache_key()
        if self.cache is not None and self.max_age:
            cached = await self.cache.get(key, namespace=CACHE_NAMESPACE)
            if cached is not None:
                return cached

        try:
            result = await self.store.query(query)
        except PersistenceError as e:
            logger.error("Feed query failed", error=e.details.get("error"))
            raise FeedQueryError(
                "Feed is temporarily unavailable",
                code="FEED_STORE_ERROR",
                details={"operation": e.operation},
            ) from e

        last_modified = result.latest or now
        snapshot = {
            "etag": freshness_token(result.latest, result.total),
            "last_modified": last_modified,
            "total": result.total,
            "body": self.build_body(query, result, last_modified, now),
        }

        if self.cache is not None and self.max_age:
            await self.cache.set(key, snapshot, ttl=self.max_age, namespace=CACHE_NAMESPACE)
        return snapshot

    def _headers(self, etag: str, last_modified: datetime, total: Optional[int] = None) -> dict[str, str]:
        headers = {
            "ETag": etag,
            "Last-Modified": format_datetime(last_modified, usegmt=True),
        }
        if total is not None:
            headers["X-Total-Count"] = str(total)
            headers["Cache-Control"] = f"private, max-age={self.max_age}"
        return headers

    async def fetch(
        self,
        query: FeedQuery,
        if_none_match: Optional[str] = None,
        if_modified_since: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> FeedResult:
        now = as_utc(now or utcnow())
        snapshot = await self._load(query, now)
        etag = snapshot["etag"]
        last_modified = as_utc(snapshot["last_modified"])

        if if_none_match and if_none_match.strip() == etag:
            return FeedResult(
                etag=etag,
                last_modified=last_modified,
                not_modified=True,
                headers=self._headers(etag, last_modified),
            )

        # HTTP-dates carry whole seconds only
        modified_since = parse_http_date(if_modified_since)
        if modified_since is not None and query.since is None:
            if last_modified.replace(microsecond=0) <= modified_since:
                return FeedResult(
                    etag=etag,
                    last_modified=last_modified,
                    not_modified=True,
                    headers=self._headers(etag, last_modified),
                )

        return FeedResult(
            etag=etag,
            last_modified=last_modified,
            body=snapshot["body"],
            total=snapshot["total"],
            headers=self._headers(etag, last_modified, snapshot["total"]),
        )
