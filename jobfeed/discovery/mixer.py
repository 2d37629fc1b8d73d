"""
Tier Mixer - proportional tier quotas with recency-first ordering
"""

import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

import structlog

from config import settings
from jobfeed.core.clock import as_utc, utcnow
from .listing import JobListing

logger = structlog.get_logger(__name__)


class TierMixer:
    """
    Orders a scored collection for display.

    1. Partition by tier and sort each group by score, highest first.
    2. Take floor(ratio * N) from each tier, where N is the input size.
       A short tier is not backfilled from the others, so the output may
       hold fewer than N listings.
    3. Concatenate tier 1, tier 2, tier 3.
    4. Move listings posted inside the recent window to the front, newest
       first. Older listings keep their tier order.
    """

    def __init__(
        self,
        ratios: Optional[tuple[float, float, float]] = None,
        recent_window: Optional[timedelta] = None,
    ):
        self.ratios = ratios or (
            settings.mixer.tier1_ratio,
            settings.mixer.tier2_ratio,
            settings.mixer.tier3_ratio,
        )
        self.recent_window = recent_window or timedelta(hours=settings.mixer.recent_window_hours)

    def quotas(self, total: int) -> tuple[int, int, int]:
        # Round before flooring so float error cannot drop a whole slot
        # (0.7 * 70 == 48.99999999999999)
        return tuple(math.floor(round(ratio * total, 9)) for ratio in self.ratios)

    def partition(self, listings: Sequence[JobListing]) -> dict[int, list[JobListing]]:
        groups: dict[int, list[JobListing]] = {1: [], 2: [], 3: []}
        for listing in listings:
            groups[listing.company_tier].append(listing)
        for group in groups.values():
            group.sort(key=lambda j: j.match_score, reverse=True)
        return groups

    def select(self, listings: Sequence[JobListing]) -> list[JobListing]:
        """Apply tier quotas; the result is grouped tier 1, 2, 3"""
        groups = self.partition(listings)
        quotas = self.quotas(len(listings))

        mixed: list[JobListing] = []
        for tier, quota in zip((1, 2, 3), quotas):
            mixed.extend(groups[tier][:quota])

        logger.debug(
            "Tier quotas applied",
            total=len(listings),
            quotas=quotas,
            available=[len(groups[t]) for t in (1, 2, 3)],
            selected=len(mixed),
        )
        return mixed

    def order_by_recency(
        self,
        mixed: Sequence[JobListing],
        now: Optional[datetime] = None,
    ) -> list[JobListing]:
        cutoff = as_utc(now or utcnow()) - self.recent_window
        recent = [j for j in mixed if j.posted_at > cutoff]
        older = [j for j in mixed if j.posted_at <= cutoff]
        recent.sort(key=lambda j: j.posted_at, reverse=True)
        return recent + older

    def mix(self, listings: Sequence[JobListing], now: Optional[datetime] = None) -> list[JobListing]:
        return self.order_by_recency(self.select(listings), now)
