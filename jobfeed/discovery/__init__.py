"""Job Discovery Module"""

from .listing import ApplicationStatus, JobListing, TierStats
from .aggregator import JobAggregator, dedupe_by_url
from .scorer import ListingScorer, ScoreBreakdown, score_listing
from .mixer import TierMixer
from .tiers import TierRegistry, get_registry
from .pipeline import ScrapeRequest, ScrapeResult, ScrapeService

__all__ = [
    "ApplicationStatus",
    "JobListing",
    "TierStats",
    "JobAggregator",
    "dedupe_by_url",
    "ListingScorer",
    "ScoreBreakdown",
    "score_listing",
    "TierMixer",
    "TierRegistry",
    "get_registry",
    "ScrapeRequest",
    "ScrapeResult",
    "ScrapeService",
]
