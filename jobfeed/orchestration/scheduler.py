"""
Feed Scheduler - periodic aggregation into the public feed
"""

from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import structlog

from config import settings
from jobfeed.core.exceptions import FeedException
from jobfeed.discovery.pipeline import ScrapeRequest, ScrapeResult, ScrapeService
from jobfeed.feed.store import JobStore

logger = structlog.get_logger(__name__)

REFRESH_JOB_ID = "refresh_feed"


class FeedScheduler:
    """
    Runs an aggregation pass on an interval and persists the page under
    the configured owner id.
    """

    def __init__(
        self,
        service: Optional[ScrapeService] = None,
        interval_minutes: Optional[int] = None,
        owner_id: Optional[str] = None,
    ):
        self.scheduler = AsyncIOScheduler()
        self.is_running = False
        self.service = service or ScrapeService(store=JobStore())
        self.interval_minutes = interval_minutes or settings.scrape.schedule_minutes
        self.owner_id = owner_id or settings.scrape.schedule_owner_id
        self.last_run: Optional[datetime] = None
        self.last_inserted = 0

    def setup_schedules(self) -> None:
        """Configure the refresh job"""
        self.scheduler.add_job(
            self.refresh_feed,
            IntervalTrigger(minutes=self.interval_minutes),
            id=REFRESH_JOB_ID,
            name="Feed Refresh",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.info("Schedules configured", interval_minutes=self.interval_minutes)

    async def start(self) -> None:
        """Start the scheduler"""
        if self.is_running:
            logger.warning("Scheduler already running")
            return

        self.setup_schedules()
        self.scheduler.start()
        self.is_running = True
        logger.info("Feed scheduler started")

    async def stop(self) -> None:
        """Stop the scheduler"""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Feed scheduler stopped")

    async def refresh_feed(self) -> Optional[ScrapeResult]:
        """One scheduled pass; failures are logged and the next run retries"""
        try:
            result = await self.service.run(ScrapeRequest(owner_id=self.owner_id))
        except FeedException as e:
            logger.error("Scheduled refresh failed", error=e.message, code=e.code)
            return None

        self.last_run = result.timestamp
        self.last_inserted = result.inserted
        return result

    async def get_status(self) -> dict:
        """Get scheduler status"""
        return {
            "is_running": self.is_running,
            "owner_id": self.owner_id,
            "interval_minutes": self.interval_minutes,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_inserted": self.last_inserted,
            "scheduled_jobs": [
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                }
                for job in self.scheduler.get_jobs()
            ],
        }


# Shared instance
feed_scheduler = FeedScheduler()
