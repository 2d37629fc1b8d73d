"""
Base Source Client - Abstract interface for all job-board integrations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import ValidationError
import structlog

from config import settings
from jobfeed.core.clock import utcnow
from jobfeed.core.exceptions import MalformedPayloadError, SourceException, SourceFetchError
from ..listing import JobListing

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SourceDescriptor:
    """
    One configured job board.

    ``token`` is the board token (Greenhouse), account subdomain
    (Workable) or career-site domain (direct).
    """

    name: str
    kind: str
    tier: int
    token: str

    def __post_init__(self) -> None:
        if self.tier not in (1, 2, 3):
            raise ValueError(f"Source {self.name!r} has invalid tier {self.tier!r}")
        if not self.token:
            raise ValueError(f"Source {self.name!r} has no token")


class BaseSourceClient(ABC):
    """
    Abstract base class for job-board integrations.

    Each source must implement:
    - endpoint: URL of the listing endpoint for this descriptor
    - parse(): map the decoded payload into JobListing objects

    ``fetch_listings()`` never raises. Any failure is logged with the
    source name and reported as an empty result so one dead board cannot
    abort an aggregation pass.
    """

    #: Default cap on raw entries mapped per response
    default_cap: int = 50

    def __init__(
        self,
        descriptor: SourceDescriptor,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        cap: Optional[int] = None,
        snippet_length: Optional[int] = None,
    ):
        self.descriptor = descriptor
        self.timeout = timeout or settings.sources.timeout_seconds
        self.cap = cap or self.default_cap
        self.snippet_length = snippet_length or settings.sources.snippet_length
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Absolute URL of the job-listing endpoint"""
        pass

    @abstractmethod
    def parse(self, payload: Any, now: datetime) -> list[JobListing]:
        """
        Map a decoded response body into listings.

        Raises:
            MalformedPayloadError: payload does not have the expected shape
        """
        pass

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "Accept": "application/json",
                    "User-Agent": settings.sources.user_agent,
                },
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self) -> Any:
        """Issue the listing request and decode JSON"""
        client = await self._get_client()
        try:
            response = await client.get(
                self.endpoint,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as e:
            raise SourceFetchError(self.name, f"timeout after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(self.name, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise SourceFetchError(
                self.name,
                f"HTTP {response.status_code}",
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayloadError(self.name, "response body is not JSON") from e

    async def fetch_listings(self) -> list[JobListing]:
        """Fetch and normalize this source's listings"""
        try:
            payload = await self._request()
            listings = self.parse(payload, utcnow())
        except SourceException as e:
            logger.warning(
                "Source fetch failed",
                source=self.name,
                kind=self.descriptor.kind,
                code=e.code,
                error=e.message,
            )
            return []
        except (ValidationError, TypeError, AttributeError, KeyError) as e:
            logger.warning(
                "Source payload rejected",
                source=self.name,
                kind=self.descriptor.kind,
                error=str(e),
            )
            return []

        logger.info(
            "Source fetch complete",
            source=self.name,
            tier=self.descriptor.tier,
            listings=len(listings),
        )
        return listings

    def _entries(self, payload: Any, key: str) -> list[dict[str, Any]]:
        """Pull the entry array out of a payload, capped"""
        if not isinstance(payload, dict):
            raise MalformedPayloadError(self.name, "expected a JSON object")
        entries = payload.get(key) or []
        if not isinstance(entries, list):
            raise MalformedPayloadError(self.name, f"'{key}' is not a list")
        return [entry for entry in entries[: self.cap] if isinstance(entry, dict)]

    def describe(self) -> dict[str, Any]:
        """Describe this source"""
        return {
            "source": self.name,
            "kind": self.descriptor.kind,
            "tier": self.descriptor.tier,
            "endpoint": self.endpoint,
        }
