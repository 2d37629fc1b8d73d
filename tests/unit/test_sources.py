"""Unit tests for job-board source clients"""

import httpx
import pytest
from structlog.testing import capture_logs

from jobfeed.discovery.sources import (
    GreenhouseClient,
    SourceDescriptor,
    WorkableClient,
    build_client,
)

GREENHOUSE = SourceDescriptor(name="Stripe", kind="greenhouse", tier=1, token="stripe")
WORKABLE = SourceDescriptor(name="Tines", kind="workable", tier=3, token="tines")


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def greenhouse_job(n: int) -> dict:
    return {
        "id": n,
        "title": f"Engineer {n}",
        "location": {"name": "Dublin"},
        "absolute_url": f"https://boards.greenhouse.io/stripe/jobs/{n}",
        "updated_at": "2024-06-01T10:00:00Z",
        "content": "Python",
    }


@pytest.mark.unit
class TestSourceDescriptor:
    """Tests for descriptor validation"""

    def test_rejects_bad_tier(self):
        with pytest.raises(ValueError):
            SourceDescriptor(name="X", kind="greenhouse", tier=4, token="x")

    def test_rejects_missing_token(self):
        with pytest.raises(ValueError):
            SourceDescriptor(name="X", kind="greenhouse", tier=1, token="")

    def test_build_client(self):
        assert isinstance(build_client(GREENHOUSE), GreenhouseClient)
        assert isinstance(build_client(WORKABLE), WorkableClient)
        direct = SourceDescriptor(name="Google", kind="direct", tier=1, token="careers.google.com")
        assert build_client(direct) is None


@pytest.mark.unit
class TestGreenhouseClient:
    """Tests for the Greenhouse client"""

    def test_endpoint(self):
        client = GreenhouseClient(GREENHOUSE)
        assert client.endpoint == "https://boards-api.greenhouse.io/v1/boards/stripe/jobs?content=true"

    @pytest.mark.asyncio
    async def test_fetch_listings(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url)
            return httpx.Response(200, json={"jobs": [greenhouse_job(1), greenhouse_job(2)]})

        async with mock_client(handler) as http:
            listings = await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings()

        assert [l.id for l in listings] == ["gh_stripe_1", "gh_stripe_2"]
        assert all(l.company == "Stripe" and l.company_tier == 1 for l in listings)
        assert requested[0].params["content"] == "true"

    @pytest.mark.asyncio
    async def test_caps_entries(self):
        def handler(request):
            return httpx.Response(200, json={"jobs": [greenhouse_job(n) for n in range(80)]})

        async with mock_client(handler) as http:
            listings = await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings()

        assert len(listings) == 50

    @pytest.mark.asyncio
    async def test_non_2xx_returns_empty(self):
        async with mock_client(lambda request: httpx.Response(503)) as http:
            with capture_logs() as logs:
                assert await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings() == []

        failed = [log for log in logs if log["event"] == "Source fetch failed"]
        assert len(failed) == 1
        assert failed[0]["source"] == "Stripe"
        assert failed[0]["code"] == "SOURCE_FETCH_ERROR"
        assert failed[0]["error"].endswith("HTTP 503")

    @pytest.mark.asyncio
    async def test_timeout_returns_empty(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with mock_client(handler) as http:
            with capture_logs() as logs:
                assert await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings() == []

        failed = [log for log in logs if log["event"] == "Source fetch failed"]
        assert [log["source"] for log in failed] == ["Stripe"]
        assert "timeout after" in failed[0]["error"]

    @pytest.mark.asyncio
    async def test_connection_error_returns_empty(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with mock_client(handler) as http:
            assert await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings() == []

    @pytest.mark.asyncio
    async def test_non_json_returns_empty(self):
        async with mock_client(lambda request: httpx.Response(200, text="<html>")) as http:
            assert await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings() == []

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_empty(self):
        """Wrong shapes are rejected, not raised"""
        payloads = [[1, 2], {"jobs": "nope"}, {"jobs": [{"id": 1, "absolute_url": 123}]}]
        for payload in payloads:
            async with mock_client(lambda request, p=payload: httpx.Response(200, json=p)) as http:
                assert await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings() == []

    @pytest.mark.asyncio
    async def test_missing_jobs_key_is_empty(self):
        async with mock_client(lambda request: httpx.Response(200, json={})) as http:
            assert await GreenhouseClient(GREENHOUSE, http_client=http).fetch_listings() == []


@pytest.mark.unit
class TestWorkableClient:
    """Tests for the Workable client"""

    def test_endpoint(self):
        client = WorkableClient(WORKABLE)
        assert client.endpoint == "https://apply.workable.com/api/v3/accounts/tines/jobs"

    @pytest.mark.asyncio
    async def test_fetch_listings_capped(self):
        results = [
            {"shortcode": f"S{n}", "title": "SRE", "location": {"country": "Ireland"}}
            for n in range(40)
        ]

        async with mock_client(lambda request: httpx.Response(200, json={"results": results})) as http:
            listings = await WorkableClient(WORKABLE, http_client=http).fetch_listings()

        assert len(listings) == 30
        assert listings[0].url == "https://apply.workable.com/tines/j/S0/"
        assert listings[0].location == "Ireland"
        assert listings[0].company_tier == 3
