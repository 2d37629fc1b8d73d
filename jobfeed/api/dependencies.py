"""Request-scoped service construction"""

from typing import Optional

from fastapi import Header

from jobfeed.core.cache import snapshot_cache
from jobfeed.discovery.pipeline import ScrapeService
from jobfeed.feed.service import FeedService
from jobfeed.feed.store import JobStore


def get_job_store() -> JobStore:
    return JobStore()


def get_feed_service() -> FeedService:
    cache = snapshot_cache if snapshot_cache.is_available else None
    return FeedService(store=JobStore(), cache=cache)


def get_scrape_service() -> ScrapeService:
    return ScrapeService(store=JobStore())


def get_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Caller identity from the ``X-Owner-Id`` header, blank as absent"""
    if x_owner_id is None:
        return None
    return x_owner_id.strip() or None
