"""
Job Aggregator - batched multi-source fetch with URL deduplication
"""

import asyncio
from typing import Iterable, Optional, Sequence

import httpx
import structlog

from config import settings
from .listing import JobListing
from .sources import BaseSourceClient, SourceDescriptor, build_client

logger = structlog.get_logger(__name__)


def dedupe_by_url(listings: Iterable[JobListing]) -> list[JobListing]:
    """Keep the first listing seen for each URL, preserving order"""
    seen: set[str] = set()
    unique = []
    for listing in listings:
        if listing.url in seen:
            continue
        seen.add(listing.url)
        unique.append(listing)
    return unique


class JobAggregator:
    """
    Fans out source clients in fixed-size concurrent batches.

    Within a batch every call runs concurrently and the aggregator waits
    for all of them to settle before starting the next batch, which caps
    in-flight requests at ``batch_size``. A client that raises is logged
    and skipped; its siblings are unaffected. Results are concatenated in
    submission order, so first-seen wins during deduplication.
    """

    def __init__(
        self,
        clients: Optional[Sequence[BaseSourceClient]] = None,
        batch_size: Optional[int] = None,
    ):
        self.clients = list(clients or [])
        self.batch_size = batch_size or settings.sources.batch_size

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[SourceDescriptor],
        http_client: httpx.AsyncClient,
        batch_size: Optional[int] = None,
    ) -> "JobAggregator":
        """Build clients for every descriptor that has an API"""
        clients = []
        for descriptor in descriptors:
            client = build_client(descriptor, http_client=http_client)
            if client is None:
                logger.debug(
                    "Source has no client, skipping",
                    source=descriptor.name,
                    kind=descriptor.kind,
                )
                continue
            clients.append(client)
        return cls(clients, batch_size=batch_size)

    async def collect(self) -> list[JobListing]:
        """Run every client and return the concatenated raw results"""
        if not self.clients:
            logger.warning("No sources configured for aggregation")
            return []

        logger.info(
            "Starting aggregation",
            source_count=len(self.clients),
            batch_size=self.batch_size,
        )

        collected: list[JobListing] = []
        failures = 0
        for start in range(0, len(self.clients), self.batch_size):
            batch = self.clients[start:start + self.batch_size]
            results = await asyncio.gather(
                *(client.fetch_listings() for client in batch),
                return_exceptions=True,
            )

            for client, result in zip(batch, results):
                if isinstance(result, BaseException):
                    if not isinstance(result, Exception):
                        raise result
                    failures += 1
                    logger.error(
                        "Source rejected",
                        source=client.name,
                        error=str(result) or type(result).__name__,
                    )
                    continue
                collected.extend(result)

        logger.info(
            "Aggregation fetch complete",
            total_listings=len(collected),
            failed_sources=failures,
        )
        return collected

    async def aggregate(self) -> list[JobListing]:
        """Collect from all sources and deduplicate by URL"""
        collected = await self.collect()
        unique = dedupe_by_url(collected)
        logger.info(
            "Deduplicated listings",
            before=len(collected),
            after=len(unique),
        )
        return unique
