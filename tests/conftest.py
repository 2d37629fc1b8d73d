"""
Pytest configuration and fixtures for Tiered Job Feed tests
"""

import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio

# Set test environment before importing app modules
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["SCRAPE_SCHEDULE_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time"""
    return NOW


@pytest.fixture
def make_listing() -> Callable:
    """Factory for JobListing objects with sensible defaults"""
    from jobfeed.discovery.listing import JobListing

    counter = {"n": 0}

    def _make(**overrides) -> JobListing:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "id": f"gh_test_{n}",
            "title": f"Engineer {n}",
            "company": "Acme",
            "company_tier": 3,
            "location": "Berlin",
            "url": f"https://example.com/jobs/{n}",
            "posted_at": NOW - timedelta(days=3),
            "snippet": "",
            "source": "greenhouse",
        }
        data.update(overrides)
        return JobListing(**data)

    return _make


@pytest_asyncio.fixture
async def db() -> AsyncGenerator:
    """Fresh in-memory database with the schema created"""
    from jobfeed.core.database import DatabaseManager

    manager = DatabaseManager()
    await manager.initialize("sqlite+aiosqlite:///:memory:")
    await manager.create_all()

    yield manager

    await manager.close()


@pytest.fixture
def store(db):
    """Job store bound to the test database"""
    from jobfeed.feed.store import JobStore

    return JobStore(db)


@pytest.fixture
def mock_snapshot_cache():
    """In-process stand-in for the Redis snapshot cache"""
    from unittest.mock import AsyncMock, MagicMock

    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    return cache


class StaticSource:
    """Source client double returning fixed listings or raising"""

    def __init__(self, name: str, listings=None, error: Exception = None):
        self.name = name
        self.listings = list(listings or [])
        self.error = error
        self.calls = 0

    async def fetch_listings(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.listings)


@pytest.fixture
def static_source() -> Callable:
    return StaticSource


@pytest_asyncio.fixture
async def test_client(store, static_source, make_listing):
    """API client with services bound to the test database"""
    from httpx import AsyncClient, ASGITransport

    from jobfeed.api.dependencies import get_feed_service, get_job_store, get_scrape_service
    from jobfeed.api.main import app
    from jobfeed.discovery.aggregator import JobAggregator
    from jobfeed.discovery.pipeline import ScrapeService
    from jobfeed.feed.service import FeedService

    sources = [
        static_source("Stripe", [
            make_listing(company="Stripe", company_tier=1, url="https://example.com/stripe/1",
                         title="Senior Python Engineer", location="Dublin, Ireland"),
            make_listing(company="Stripe", company_tier=1, url="https://example.com/stripe/2"),
        ]),
        static_source("Canva", [
            make_listing(company="Canva", company_tier=2, url="https://example.com/canva/1"),
        ]),
        static_source("Broken", error=RuntimeError("boom")),
    ]

    app.dependency_overrides[get_job_store] = lambda: store
    app.dependency_overrides[get_feed_service] = lambda: FeedService(store=store)
    app.dependency_overrides[get_scrape_service] = lambda: ScrapeService(
        store=store,
        aggregator=JobAggregator(sources),
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
