"""
Greenhouse Source Client
Public job-board API, no authentication required
"""

from datetime import datetime
from typing import Any

from config import settings
from ..listing import JobListing
from ..normalizer import normalize_greenhouse
from .base import BaseSourceClient


class GreenhouseClient(BaseSourceClient):
    """
    Greenhouse boards API.

    ``GET /v1/boards/{token}/jobs?content=true`` returns
    ``{"jobs": [{id, title, location: {name}, absolute_url, updated_at, content}]}``.
    """

    BASE_URL = "https://boards-api.greenhouse.io/v1"

    @property
    def default_cap(self) -> int:
        return settings.sources.greenhouse_cap

    @property
    def endpoint(self) -> str:
        return f"{self.BASE_URL}/boards/{self.descriptor.token}/jobs?content=true"

    def parse(self, payload: Any, now: datetime) -> list[JobListing]:
        return [
            normalize_greenhouse(
                entry,
                company=self.descriptor.name,
                token=self.descriptor.token,
                tier=self.descriptor.tier,
                now=now,
                snippet_length=self.snippet_length,
            )
            for entry in self._entries(payload, "jobs")
        ]
