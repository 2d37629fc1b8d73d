"""
Job Store - persistence collaborator for listings

The existing-URL read and the insert are separate statements, not one
transaction. Two concurrent passes for the same owner can both insert a
URL; the (owner_id, url) unique constraint rejects the loser's batch.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
import structlog

from jobfeed.core.clock import as_utc
from jobfeed.core.database import DatabaseManager, db_manager
from jobfeed.core.exceptions import PersistenceError
from jobfeed.discovery.listing import ApplicationStatus, JobListing
from jobfeed.discovery.models import StoredJob
from .query import FeedQuery

logger = structlog.get_logger(__name__)


@dataclass
class QueryResult:
    """One page of stored jobs plus totals over the filtered set"""

    rows: list[StoredJob]
    total: int
    latest: Optional[datetime]


class JobStore:
    """SQLAlchemy-backed listing store, scoped by owner id"""

    def __init__(self, db: Optional[DatabaseManager] = None):
        self.db = db or db_manager

    async def existing_urls(self, owner_id: str) -> set[str]:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(StoredJob.url).where(StoredJob.owner_id == owner_id)
                )
                return set(result.scalars().all())
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceError("existing_urls", str(e)) from e

    async def insert_if_absent(
        self,
        listings: Iterable[JobListing],
        owner_id: str,
        limit: Optional[int] = None,
    ) -> int:
        """
        Insert listings whose URL the owner does not already have.

        Returns the number of rows inserted.
        """
        existing = await self.existing_urls(owner_id)

        fresh = []
        for listing in listings:
            if listing.url in existing:
                continue
            existing.add(listing.url)
            fresh.append(listing)
        if limit is not None:
            fresh = fresh[:limit]

        if not fresh:
            return 0

        try:
            async with self.db.session() as session:
                session.add_all(StoredJob.from_listing(l, owner_id) for l in fresh)
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceError("insert", str(e)) from e

        logger.info("Listings persisted", owner_id=owner_id or None, count=len(fresh))
        return len(fresh)

    def _filtered(self, query: FeedQuery):
        stmt = select(StoredJob)

        if query.owner_id:
            stmt = stmt.where(StoredJob.owner_id == query.owner_id)

        if query.since:
            stmt = stmt.where(StoredJob.created_at > query.since)
        if query.search:
            stmt = stmt.where(or_(
                StoredJob.title.icontains(query.search, autoescape=True),
                StoredJob.company.icontains(query.search, autoescape=True),
                StoredJob.description.icontains(query.search, autoescape=True),
            ))
        if query.location:
            stmt = stmt.where(StoredJob.location.icontains(query.location, autoescape=True))
        if query.company:
            stmt = stmt.where(StoredJob.company.icontains(query.company, autoescape=True))
        if query.status:
            stmt = stmt.where(StoredJob.status == query.status)
        if query.tier:
            stmt = stmt.where(StoredJob.company_tier == query.tier)
        return stmt

    async def query(self, query: FeedQuery) -> QueryResult:
        """Tier ascending, newest first within a tier"""
        filtered = self._filtered(query).subquery()
        try:
            async with self.db.session() as session:
                total, latest = (await session.execute(
                    select(func.count(), func.max(filtered.c.created_at))
                )).one()

                page = await session.execute(
                    self._filtered(query)
                    .order_by(StoredJob.company_tier.asc(), StoredJob.created_at.desc())
                    .offset(query.offset)
                    .limit(query.limit)
                )
                rows = list(page.scalars().all())
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceError("query", str(e)) from e

        return QueryResult(
            rows=rows,
            total=int(total or 0),
            latest=as_utc(latest) if latest else None,
        )

    async def set_status(
        self,
        job_id: UUID,
        status: ApplicationStatus,
        owner_id: str,
    ) -> Optional[StoredJob]:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(StoredJob).where(
                        StoredJob.id == job_id,
                        StoredJob.owner_id == owner_id,
                    )
                )
                job = result.scalar_one_or_none()
                if job is not None:
                    job.status = status
                return job
        except (SQLAlchemyError, RuntimeError) as e:
            raise PersistenceError("set_status", str(e)) from e
