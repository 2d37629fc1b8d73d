"""Unit tests for listing normalization"""

from datetime import timedelta

import pytest

from jobfeed.discovery.normalizer import (
    DEFAULT_LOCATION,
    DEFAULT_TITLE,
    normalize_greenhouse,
    normalize_workable,
    posted_delta,
    strip_html,
)


@pytest.mark.unit
class TestStripHtml:
    """Tests for HTML stripping"""

    def test_removes_tags_and_collapses_whitespace(self):
        assert strip_html("<p>Hello   <b>world</b></p>\n\n<ul><li>x</li></ul>") == "Hello world x"

    def test_handles_double_encoded_markup(self):
        """Entity-encoded tags are decoded then removed"""
        markup = "&lt;p&gt;Build &amp;amp; ship&lt;/p&gt;"
        assert strip_html(markup) == "Build & ship"

    def test_attribute_values_are_not_text(self):
        """A '>' inside an attribute does not end the tag"""
        assert strip_html('<a title="x > y" href="/apply">Python role</a>') == "Python role"

    def test_comments_are_dropped(self):
        assert strip_html("<p>Build APIs</p><!-- <b>internal note</b> -->") == "Build APIs"

    def test_style_and_script_blocks_are_dropped(self):
        markup = "<style>.go-btn{color:red}</style><p>Backend</p><script>track()</script><p>work</p>"
        assert strip_html(markup) == "Backend work"

    def test_empty_and_non_string(self):
        assert strip_html(None) == ""
        assert strip_html("") == ""
        assert strip_html(42) == ""


@pytest.mark.unit
class TestPostedDelta:
    """Tests for human-readable recency"""

    def test_minutes(self, now):
        assert posted_delta(now - timedelta(minutes=5), now) == "5 min ago"

    def test_just_posted(self, now):
        assert posted_delta(now, now) == "0 min ago"

    def test_hours(self, now):
        assert posted_delta(now - timedelta(hours=3, minutes=59), now) == "3h ago"

    def test_days(self, now):
        assert posted_delta(now - timedelta(hours=25), now) == "1d ago"

    def test_weeks(self, now):
        assert posted_delta(now - timedelta(days=10), now) == "1w ago"
        assert posted_delta(now - timedelta(days=21), now) == "3w ago"

    def test_missing_timestamp(self, now):
        assert posted_delta(None, now) == "Recently"

    def test_future_timestamp_clamps_to_zero(self, now):
        assert posted_delta(now + timedelta(minutes=10), now) == "0 min ago"


@pytest.mark.unit
class TestNormalizeGreenhouse:
    """Tests for Greenhouse record mapping"""

    def test_full_record(self, now):
        raw = {
            "id": 4012345,
            "title": "  Senior Python Engineer ",
            "location": {"name": "Dublin, Ireland"},
            "absolute_url": "https://boards.greenhouse.io/stripe/jobs/4012345",
            "updated_at": "2024-05-31T09:30:00-04:00",
            "content": "&lt;p&gt;We use Python, AWS and Kubernetes.&lt;/p&gt;",
        }

        listing = normalize_greenhouse(raw, company="Stripe", token="stripe", tier=1, now=now)

        assert listing.id == "gh_stripe_4012345"
        assert listing.title == "Senior Python Engineer"
        assert listing.company_tier == 1
        assert listing.location == "Dublin, Ireland"
        assert listing.url == raw["absolute_url"]
        assert listing.posted_at.isoformat() == "2024-05-31T13:30:00+00:00"
        assert listing.snippet == "We use Python, AWS and Kubernetes."
        assert listing.requirements == ["Python", "AWS", "Kubernetes"]
        assert listing.source == "greenhouse"
        assert listing.match_score == 0

    def test_defaults_for_missing_fields(self, now):
        listing = normalize_greenhouse({"id": 7}, company="Stripe", token="stripe", tier=1, now=now)

        assert listing.title == DEFAULT_TITLE
        assert listing.location == DEFAULT_LOCATION
        assert listing.url == "https://boards.greenhouse.io/stripe/jobs/7"
        assert listing.posted_at == now
        assert listing.snippet == ""
        assert listing.requirements == []

    def test_snippet_truncated(self, now):
        raw = {"id": 1, "content": "x" * 1000}
        listing = normalize_greenhouse(raw, company="Stripe", token="stripe", tier=1, now=now)
        assert len(listing.snippet) == 300

    def test_requirements_scan_full_text(self, now):
        """Tags past the snippet cut-off are still found"""
        raw = {"id": 1, "content": "x " * 400 + "Terraform"}
        listing = normalize_greenhouse(raw, company="Stripe", token="stripe", tier=1, now=now)
        assert "Terraform" in listing.requirements

    def test_embedded_stylesheet_is_not_content(self, now):
        """CSS class names neither leak into the snippet nor become tags"""
        raw = {
            "id": 1,
            "content": "&lt;style&gt;.go-btn{color:red}&lt;/style&gt;&lt;p&gt;Backend work&lt;/p&gt;",
        }
        listing = normalize_greenhouse(raw, company="Stripe", token="stripe", tier=1, now=now)

        assert listing.snippet == "Backend work"
        assert listing.requirements == []


@pytest.mark.unit
class TestNormalizeWorkable:
    """Tests for Workable record mapping"""

    def test_full_record(self, now):
        raw = {
            "shortcode": "AB12CD",
            "title": "Data Engineer",
            "location": {"city": "Cork", "country": "Ireland"},
            "published": "2024-06-01T10:00:00Z",
            "description": "<p>Spark and Airflow</p>",
        }

        listing = normalize_workable(raw, company="Tines", subdomain="tines", tier=3, now=now)

        assert listing.id == "wk_tines_AB12CD"
        assert listing.url == "https://apply.workable.com/tines/j/AB12CD/"
        assert listing.location == "Cork"
        assert listing.requirements == ["Spark", "Airflow"]
        assert listing.source == "workable"

    def test_location_falls_back_to_country_then_remote(self, now):
        country_only = normalize_workable(
            {"shortcode": "X", "location": {"country": "Ireland"}},
            company="Tines", subdomain="tines", tier=3, now=now,
        )
        no_location = normalize_workable(
            {"shortcode": "Y"},
            company="Tines", subdomain="tines", tier=3, now=now,
        )

        assert country_only.location == "Ireland"
        assert no_location.location == "Remote"

    def test_unparseable_published_uses_now(self, now):
        listing = normalize_workable(
            {"shortcode": "Z", "published": "not a date"},
            company="Tines", subdomain="tines", tier=3, now=now,
        )
        assert listing.posted_at == now
