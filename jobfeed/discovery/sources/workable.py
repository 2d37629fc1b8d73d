"""
Workable Source Client
Public careers-page API, no authentication required
"""

from datetime import datetime
from typing import Any

from config import settings
from ..listing import JobListing
from ..normalizer import normalize_workable
from .base import BaseSourceClient


class WorkableClient(BaseSourceClient):
    """
    Workable careers API.

    ``GET /api/v3/accounts/{subdomain}/jobs`` returns
    ``{"results": [{shortcode, title, location: {city, country}, published, description}]}``.
    """

    BASE_URL = "https://apply.workable.com/api/v3"

    @property
    def default_cap(self) -> int:
        return settings.sources.workable_cap

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/accounts/{self.descriptor.token}/jobs"

    def parse(self, payload: Any, now: datetime) -> list[JobListing]:
        return [
            normalize_workable(
                entry,
                company=self.descriptor.name,
                subdomain=self.descriptor.token,
                tier=self.descriptor.tier,
                now=now,
                snippet_length=self.snippet_length,
            )
            for entry in self._entries(payload, "results")
        ]
