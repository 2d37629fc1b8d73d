"""Unit tests for the feed scheduler"""

from unittest.mock import AsyncMock

import pytest

from jobfeed.core.exceptions import AggregationError
from jobfeed.discovery.aggregator import JobAggregator
from jobfeed.discovery.pipeline import ScrapeService
from jobfeed.orchestration.scheduler import REFRESH_JOB_ID, FeedScheduler


@pytest.mark.unit
class TestFeedScheduler:
    """Tests for scheduled refresh passes"""

    @pytest.mark.asyncio
    async def test_refresh_persists_under_public_owner(self, static_source, make_listing, store):
        service = ScrapeService(
            store=store,
            aggregator=JobAggregator([static_source("s", [make_listing(company_tier=1) for _ in range(2)])]),
        )
        scheduler = FeedScheduler(service=service)

        result = await scheduler.refresh_feed()

        # Two tier 1 listings -> quota floor(1.4) = 1
        assert result.inserted == 1
        assert await store.existing_urls("public")
        assert scheduler.last_inserted == 1
        assert scheduler.last_run is not None

    @pytest.mark.asyncio
    async def test_refresh_failure_is_logged_not_raised(self):
        service = AsyncMock()
        service.run.side_effect = AggregationError("Aggregation pass failed")
        scheduler = FeedScheduler(service=service)

        assert await scheduler.refresh_feed() is None
        assert scheduler.last_run is None

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        scheduler = FeedScheduler(service=AsyncMock(), interval_minutes=15)

        await scheduler.start()
        try:
            status = await scheduler.get_status()
            assert status["is_running"] is True
            assert status["interval_minutes"] == 15
            assert [job["id"] for job in status["scheduled_jobs"]] == [REFRESH_JOB_ID]
        finally:
            await scheduler.stop()

        assert scheduler.is_running is False
