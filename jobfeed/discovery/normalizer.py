"""
Listing Normalizer
Converts raw source records into canonical JobListing objects
"""

import html
from datetime import datetime
from typing import Any, Optional

from bs4 import BeautifulSoup, Comment

from jobfeed.core.clock import as_utc, parse_timestamp, utcnow
from .listing import JobListing
from .requirements import extract_requirements

DEFAULT_TITLE = "Unknown Position"
DEFAULT_LOCATION = "Remote"
SNIPPET_LENGTH = 300

# Elements whose text is never part of the posting
HIDDEN_TAGS = ["script", "style", "noscript", "template"]


def strip_html(markup: Optional[str]) -> str:
    """Visible text of a posting body, whitespace collapsed"""
    if not markup or not isinstance(markup, str):
        return ""
    # Greenhouse double-encodes its content field
    soup = BeautifulSoup(html.unescape(markup), "lxml")
    for element in soup(HIDDEN_TAGS):
        element.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return " ".join(soup.get_text(" ").split())


def posted_delta(posted_at: Optional[datetime], now: Optional[datetime] = None) -> str:
    """
    Human-readable age of a posting.

    Buckets: under an hour in minutes, under a day in hours, under a week
    in days, otherwise whole weeks. Each unit is floored.
    """
    if posted_at is None:
        return "Recently"

    now = now or utcnow()
    elapsed = as_utc(now) - as_utc(posted_at)
    minutes = max(0, int(elapsed.total_seconds() // 60))

    if minutes < 60:
        return f"{minutes} min ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    return f"{days // 7}w ago"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_greenhouse(
    raw: dict[str, Any],
    company: str,
    token: str,
    tier: int,
    now: Optional[datetime] = None,
    snippet_length: int = SNIPPET_LENGTH,
) -> JobListing:
    """Map one entry of a Greenhouse ``jobs`` array"""
    native_id = raw.get("id")
    location = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    content = strip_html(raw.get("content"))

    return JobListing(
        id=f"gh_{token}_{native_id}",
        title=_text(raw.get("title")) or DEFAULT_TITLE,
        company=company,
        company_tier=tier,
        location=_text(location.get("name")) or DEFAULT_LOCATION,
        url=raw.get("absolute_url") or f"https://boards.greenhouse.io/{token}/jobs/{native_id}",
        posted_at=parse_timestamp(raw.get("updated_at"), default=now or utcnow()),
        snippet=content[:snippet_length],
        requirements=extract_requirements(content),
        source="greenhouse",
    )


def normalize_workable(
    raw: dict[str, Any],
    company: str,
    subdomain: str,
    tier: int,
    now: Optional[datetime] = None,
    snippet_length: int = SNIPPET_LENGTH,
) -> JobListing:
    """Map one entry of a Workable ``results`` array"""
    shortcode = raw.get("shortcode")
    location = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    description = strip_html(raw.get("description"))

    return JobListing(
        id=f"wk_{subdomain}_{shortcode}",
        title=_text(raw.get("title")) or DEFAULT_TITLE,
        company=company,
        company_tier=tier,
        location=(
            _text(location.get("city"))
            or _text(location.get("country"))
            or DEFAULT_LOCATION
        ),
        url=f"https://apply.workable.com/{subdomain}/j/{shortcode}/",
        posted_at=parse_timestamp(raw.get("published"), default=now or utcnow()),
        snippet=description[:snippet_length],
        requirements=extract_requirements(description),
        source="workable",
    )
