"""Tests for PageSpeed parsing and the public audit."""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from seo_monitor.audit import public_audit
from seo_monitor.audit.pagespeed import fetch_pagespeed_metrics, parse_pagespeed
from seo_monitor.audit.public_audit import run_public_audit
from seo_monitor.exceptions import SiteUnreachableError
from seo_monitor.models import PageSpeedMetrics, Severity

GOOD_HTML = """<html><head>
<title>Maple Street Bakery and Cafe in Springfield</title>
<meta name="viewport" content="width=device-width">
<meta name="description" content="{desc}">
<link rel="canonical" href="https://example.com/">
<script type="application/ld+json">{{}}</script>
</head><body><h1>Bakery</h1></body></html>
""".format(desc="d" * 100)

BARE_HTML = """<html><head>
<meta name="viewport" content="width=device-width">
<link rel="canonical" href="http://example.com/">
<script type="application/ld+json">{}</script>
</head><body><p>Hello</p></body></html>
"""


def pagespeed_payload(lcp=1800, cls=5, fid=40, score=0.92):
    return {
        "loadingExperience": {
            "metrics": {
                "LARGEST_CONTENTFUL_PAINT_MS": {"percentile": lcp},
                "CUMULATIVE_LAYOUT_SHIFT_SCORE": {"percentile": cls},
                "FIRST_INPUT_DELAY_MS": {"percentile": fid},
            }
        },
        "lighthouseResult": {"categories": {"performance": {"score": score}}},
    }


def mock_client(html, payload=None, pagespeed_status=200, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(request)
        if request.url.host == "www.googleapis.com":
            return httpx.Response(pagespeed_status, json=payload or {})
        return httpx.Response(200, text=html)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPageSpeed:
    """Tests for the PageSpeed client."""

    def test_parse(self):
        """Test field data and score are scaled."""
        metrics = parse_pagespeed(pagespeed_payload(lcp=3100, cls=12, fid=150, score=0.55))
        assert metrics == PageSpeedMetrics(lcp=3100, cls=0.12, fid=150, performance_score=55.0)

    def test_parse_empty(self):
        """Test a response without field data."""
        assert parse_pagespeed({}) == PageSpeedMetrics()

    @pytest.mark.asyncio
    async def test_fetch_sends_params(self):
        """Test the request carries url, strategy, category and key."""
        calls = []
        async with mock_client("", pagespeed_payload(), calls=calls) as client:
            metrics = await fetch_pagespeed_metrics(
                "https://example.com", client=client, api_key="k-123"
            )

        params = calls[0].url.params
        assert params["url"] == "https://example.com"
        assert params["strategy"] == "mobile"
        assert params["category"] == "performance"
        assert params["key"] == "k-123"
        assert metrics.performance_score == 92.0

    @pytest.mark.asyncio
    async def test_api_error_gives_empty_metrics(self):
        """Test a non-2xx answer is not fatal."""
        async with mock_client("", {"error": "quota"}, pagespeed_status=429) as client:
            metrics = await fetch_pagespeed_metrics("https://example.com", client=client)
        assert metrics == PageSpeedMetrics()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        """Test an unreachable API is an error."""
        def refuse(request):
            raise httpx.ConnectError("no route", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(SiteUnreachableError):
                await fetch_pagespeed_metrics("https://example.com", client=client)


class TestRunPublicAudit:
    """Tests for run_public_audit."""

    @pytest.mark.asyncio
    async def test_clean_site(self):
        """Test a fast, well-formed HTTPS page."""
        now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
        async with mock_client(GOOD_HTML, pagespeed_payload()) as client:
            result = await run_public_audit("https://example.com/", client=client, now=now)

        assert result.issues == []
        assert result.recommendations == []
        assert result.on_page_score == 100
        # (100 + 92) / 2
        assert result.performance_score == 96
        assert result.score == 98
        assert result.audited_at == now
        assert result.to_dict()["performanceMetrics"]["lighthouseScore"] == 92.0

    @pytest.mark.asyncio
    async def test_bare_page(self):
        """Test the four critical on-page issues."""
        async with mock_client(BARE_HTML, {}) as client:
            result = await run_public_audit("http://example.com/", client=client)

        assert [i.rule_id for i in result.issues] == [
            "missing-title", "missing-meta-description", "missing-h1", "not-https",
        ]
        assert all(i.severity is Severity.CRITICAL for i in result.issues)
        assert result.on_page_score == 40
        assert result.performance_score == 100
        assert result.score == 70

    @pytest.mark.asyncio
    async def test_only_performance_rules_from_pagespeed(self):
        """Test placeholder metrics trip no traffic or search rule."""
        payload = pagespeed_payload(lcp=4000, cls=30, fid=250, score=0.4)
        async with mock_client(GOOD_HTML, payload) as client:
            result = await run_public_audit("https://example.com/", client=client)

        assert [i.rule_id for i in result.issues] == ["slow-lcp", "poor-cls", "slow-fid"]
        # 100 - 30 - 15 - 15 = 40, blended with 40
        assert result.performance_score == 40
        assert result.score == 70

    @pytest.mark.asyncio
    async def test_recommendations_merge_and_renumber(self):
        """Test performance recommendations come first and priorities restart at 1."""
        payload = pagespeed_payload(lcp=4000, score=0.5)
        async with mock_client(BARE_HTML, payload) as client:
            result = await run_public_audit("http://example.com/", client=client)

        recs = result.recommendations
        assert [r.priority for r in recs] == list(range(1, len(recs) + 1))
        assert recs[0].related_issues == ("slow-lcp",)
        assert [r.related_issues[0] for r in recs[1:]] == [
            "missing-title", "missing-meta-description", "missing-h1", "not-https",
        ]

    @pytest.mark.asyncio
    async def test_unreachable_site_fails_whole_audit(self):
        """Test a failing page fetch aborts the audit."""
        def handler(request):
            if request.url.host == "www.googleapis.com":
                return httpx.Response(200, json=pagespeed_payload())
            return httpx.Response(503)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(SiteUnreachableError):
                await run_public_audit("https://example.com/", client=client)

    @pytest.mark.asyncio
    async def test_failed_fetch_cancels_pagespeed(self, monkeypatch):
        """Test a slow PageSpeed call is cancelled once the page fetch fails."""
        state = {"finished": False, "cancelled": False}

        async def slow_pagespeed(url, client=None):
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                state["cancelled"] = True
                raise
            state["finished"] = True
            return PageSpeedMetrics()

        async def failing_scrape(url, client=None):
            raise SiteUnreachableError(url, "HTTP 503", status_code=503)

        monkeypatch.setattr(public_audit, "fetch_pagespeed_metrics", slow_pagespeed)
        monkeypatch.setattr(public_audit, "scrape_meta_tags", failing_scrape)

        with pytest.raises(SiteUnreachableError):
            await run_public_audit("https://example.com/")

        assert state == {"finished": False, "cancelled": True}
