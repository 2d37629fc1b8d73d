"""
Listing Scorer - tier, keyword, location and recency match score
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from jobfeed.core.clock import as_utc, utcnow
from .listing import JobListing

DEFAULT_KEYWORDS: tuple[str, ...] = (
    "AI", "ML", "Machine Learning", "Deep Learning", "NLP", "LLM", "GenAI",
    "Cloud Engineer", "Cloud Architect", "AWS", "Azure", "GCP",
    "Python", "DevOps", "SRE", "Site Reliability",
    "Data Scientist", "Data Engineer", "Data Analytics",
    "Software Engineer", "Backend", "Full Stack", "Frontend",
    "Kubernetes", "Docker", "Terraform", "Infrastructure",
)

DEFAULT_LOCATIONS: tuple[str, ...] = (
    "Dublin", "Ireland", "Remote", "EMEA", "Europe",
    "United Kingdom", "London", "Germany", "Netherlands",
    "United States", "New York", "San Francisco", "Seattle",
)

PRIORITY_LOCATIONS: tuple[str, ...] = ("dublin", "ireland", "remote")


@dataclass
class ScoreBreakdown:
    """Individual score components"""

    base: int
    tier: int
    keywords: int
    location: int
    recency: int

    @property
    def total(self) -> int:
        raw = self.base + self.tier + self.keywords + self.location + self.recency
        return max(0, min(100, raw))

    def to_dict(self) -> dict[str, Any]:
        return {
            "base": self.base,
            "tier": self.tier,
            "keywords": self.keywords,
            "location": self.location,
            "recency": self.recency,
            "total": self.total,
        }


class ListingScorer:
    """
    Computes the 0-100 match score.

    - Base 50
    - Tier bonus: +20 (tier 1), +10 (tier 2), +5 (tier 3)
    - +5 per keyword found in title, snippet and requirements, max +30
    - +15 for Dublin/Ireland/Remote, else +5 for any preferred location
    - +10 if posted within the hour, +5 within a day

    Scoring is pure: pass ``now`` for reproducible results.
    """

    BASE_SCORE = 50
    TIER_BONUS = {1: 20, 2: 10, 3: 5}
    KEYWORD_POINTS = 5
    KEYWORD_CAP = 30
    PRIORITY_LOCATION_BONUS = 15
    PREFERRED_LOCATION_BONUS = 5
    LAST_HOUR_BONUS = 10
    LAST_DAY_BONUS = 5

    def __init__(
        self,
        keywords: Optional[Sequence[str]] = None,
        locations: Optional[Sequence[str]] = None,
    ):
        self.keywords = list(DEFAULT_KEYWORDS if keywords is None else keywords)
        self.locations = list(DEFAULT_LOCATIONS if locations is None else locations)

    def breakdown(self, listing: JobListing, now: Optional[datetime] = None) -> ScoreBreakdown:
        now = as_utc(now or utcnow())
        text = " ".join(
            [listing.title, listing.snippet, " ".join(listing.requirements)]
        ).lower()
        location = listing.location.lower()

        keyword_points = sum(
            self.KEYWORD_POINTS
            for kw in self.keywords
            if kw and kw.strip() and kw.strip().lower() in text
        )

        if any(loc in location for loc in PRIORITY_LOCATIONS):
            location_points = self.PRIORITY_LOCATION_BONUS
        elif any(loc and loc.strip() and loc.strip().lower() in location for loc in self.locations):
            location_points = self.PREFERRED_LOCATION_BONUS
        else:
            location_points = 0

        age = now - listing.posted_at
        if age < timedelta(hours=1):
            recency_points = self.LAST_HOUR_BONUS
        elif age < timedelta(hours=24):
            recency_points = self.LAST_DAY_BONUS
        else:
            recency_points = 0

        return ScoreBreakdown(
            base=self.BASE_SCORE,
            tier=self.TIER_BONUS.get(listing.company_tier, self.TIER_BONUS[3]),
            keywords=min(self.KEYWORD_CAP, keyword_points),
            location=location_points,
            recency=recency_points,
        )

    def score(self, listing: JobListing, now: Optional[datetime] = None) -> int:
        return self.breakdown(listing, now).total

    def score_all(self, listings: Sequence[JobListing], now: Optional[datetime] = None) -> list[JobListing]:
        """Write ``match_score`` on every listing in place"""
        now = now or utcnow()
        for listing in listings:
            listing.match_score = self.score(listing, now)
        return list(listings)


def score_listing(
    listing: JobListing,
    keywords: Sequence[str],
    locations: Sequence[str],
    now: Optional[datetime] = None,
) -> int:
    """Functional form of ``ListingScorer.score``"""
    return ListingScorer(keywords, locations).score(listing, now)
