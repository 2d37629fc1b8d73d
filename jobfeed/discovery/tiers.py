"""
Tier Registry - company tier membership and configured sources

Loaded at startup from a YAML file so tier membership and the polled
board list can change without a code release.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional

import structlog
import yaml

from config import settings
from jobfeed.core.exceptions import ConfigurationError
from .sources import CLIENT_TYPES, SourceDescriptor

logger = structlog.get_logger(__name__)

DEFAULT_TIER = 3


class TierRegistry:
    """
    Company name -> tier lookup plus the ordered source list.

    Lookups are case-insensitive on the trimmed company name. Companies
    not listed under tier 1 or 2 are tier 3.
    """

    def __init__(
        self,
        tiers: Optional[dict[int, Iterable[str]]] = None,
        sources: Optional[Iterable[SourceDescriptor]] = None,
    ):
        self._tiers: dict[str, int] = {}
        for tier in sorted((tiers or {}).keys(), reverse=True):
            for company in tiers[tier]:
                self._tiers[self._normalize(company)] = tier
        # Tier 1 sources first, then 2, then 3; file order within a tier
        self._sources = sorted(sources or [], key=lambda s: s.tier)

    @staticmethod
    def _normalize(company: str) -> str:
        return company.strip().lower()

    def tier_for(self, company: str) -> int:
        return self._tiers.get(self._normalize(company), DEFAULT_TIER)

    @property
    def sources(self) -> list[SourceDescriptor]:
        return list(self._sources)

    def pollable_sources(self) -> list[SourceDescriptor]:
        """Sources that have a client implementation"""
        return [s for s in self._sources if s.kind in CLIENT_TYPES]

    def companies(self, tier: int) -> list[str]:
        return sorted(name for name, t in self._tiers.items() if t == tier)

    @classmethod
    def from_mapping(cls, data: Any) -> "TierRegistry":
        """Build a registry from the decoded YAML document"""
        if not isinstance(data, dict):
            raise ConfigurationError("Tier file must contain a mapping", config_key="tiers_file")

        raw_tiers = data.get("tiers") or {}
        if not isinstance(raw_tiers, dict):
            raise ConfigurationError("'tiers' must be a mapping of tier -> companies", config_key="tiers")

        tiers: dict[int, list[str]] = {}
        for key, companies in raw_tiers.items():
            try:
                tier = int(key)
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid tier key: {key!r}", config_key="tiers")
            if tier not in (1, 2, 3):
                raise ConfigurationError(f"Tier must be 1, 2 or 3, got {tier}", config_key="tiers")
            if not isinstance(companies, list):
                raise ConfigurationError(f"Tier {tier} must list company names", config_key="tiers")
            tiers[tier] = [str(c) for c in companies]

        lookup = cls(tiers=tiers)

        descriptors = []
        for index, entry in enumerate(data.get("sources") or []):
            if not isinstance(entry, dict) or "name" not in entry or "kind" not in entry:
                raise ConfigurationError(
                    f"Source #{index} needs at least 'name' and 'kind'",
                    config_key="sources",
                )
            name = str(entry["name"])
            try:
                descriptors.append(SourceDescriptor(
                    name=name,
                    kind=str(entry["kind"]),
                    tier=int(entry.get("tier") or lookup.tier_for(name)),
                    token=str(entry.get("token") or ""),
                ))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(str(e), config_key="sources") from e

        return cls(tiers=tiers, sources=descriptors)

    @classmethod
    def from_file(cls, path: Path) -> "TierRegistry":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read tier file {path}: {e}", config_key="tiers_file") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_key="tiers_file") from e

        registry = cls.from_mapping(data)
        logger.info(
            "Tier registry loaded",
            path=str(path),
            tier1=len(registry.companies(1)),
            tier2=len(registry.companies(2)),
            sources=len(registry.sources),
            pollable=len(registry.pollable_sources()),
        )
        return registry


@lru_cache
def get_registry() -> TierRegistry:
    """Registry loaded from ``settings.tiers_file``"""
    return TierRegistry.from_file(settings.tiers_file)
