"""Unit tests for the tier registry"""

import pytest

from config import settings
from jobfeed.core.exceptions import ConfigurationError
from jobfeed.discovery.tiers import TierRegistry


@pytest.mark.unit
class TestTierRegistry:
    """Tests for company tier lookup"""

    def test_lookup_is_case_insensitive(self):
        registry = TierRegistry(tiers={1: ["Stripe"], 2: ["Accenture"]})

        assert registry.tier_for("stripe") == 1
        assert registry.tier_for("  STRIPE ") == 1
        assert registry.tier_for("Accenture") == 2

    def test_unknown_company_is_tier3(self):
        assert TierRegistry(tiers={1: ["Stripe"]}).tier_for("Tiny Startup") == 3

    def test_tier1_wins_on_overlap(self):
        registry = TierRegistry(tiers={1: ["Stripe"], 2: ["stripe"]})
        assert registry.tier_for("Stripe") == 1

    def test_from_mapping(self):
        registry = TierRegistry.from_mapping({
            "tiers": {1: ["Stripe"], 2: ["Canva"]},
            "sources": [
                {"name": "Canva", "kind": "greenhouse", "token": "canva"},
                {"name": "Stripe", "kind": "greenhouse", "tier": 1, "token": "stripe"},
                {"name": "Google", "kind": "direct", "tier": 1, "token": "careers.google.com"},
                {"name": "Tines", "kind": "workable", "tier": 3, "token": "tines"},
            ],
        })

        # Missing tier is derived from membership; tier 1 first
        assert [(s.name, s.tier) for s in registry.sources] == [
            ("Stripe", 1), ("Google", 1), ("Canva", 2), ("Tines", 3),
        ]
        assert [s.name for s in registry.pollable_sources()] == ["Stripe", "Canva", "Tines"]
        assert registry.companies(1) == ["stripe"]

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"tiers": ["Stripe"]},
        {"tiers": {"one": ["Stripe"]}},
        {"tiers": {5: ["Stripe"]}},
        {"tiers": {1: "Stripe"}},
        {"tiers": {}, "sources": [{"name": "Stripe"}]},
        {"tiers": {}, "sources": [{"name": "Stripe", "kind": "greenhouse", "tier": 1}]},
    ])
    def test_invalid_mapping_raises(self, data):
        with pytest.raises(ConfigurationError):
            TierRegistry.from_mapping(data)

    def test_from_file_invalid_yaml(self, tmp_path):
        path = tmp_path / "companies.yaml"
        path.write_text("tiers: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            TierRegistry.from_file(path)

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            TierRegistry.from_file(tmp_path / "missing.yaml")

    def test_bundled_file_loads(self):
        """The shipped company list is valid"""
        registry = TierRegistry.from_file(settings.tiers_file)

        assert registry.tier_for("Stripe") == 1
        assert registry.tier_for("Revolut") == 3
        assert registry.pollable_sources()
        assert all(s.kind != "direct" for s in registry.pollable_sources())
        tiers = [s.tier for s in registry.sources]
        assert tiers == sorted(tiers)
