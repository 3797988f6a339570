"""Tests for the snapshot sync job."""

import asyncio
from dataclasses import replace
from datetime import date

import httpx
import pytest
from tenacity import wait_none

from seo_monitor.models import MetricsSnapshot, PageSpeedMetrics, TopQuery
from seo_monitor.sync import ERROR, SKIPPED, SYNCED, sync_all, sync_site

NO_WAIT = wait_none()

# Matches FakeSource with 1000 sessions.
BASELINE = MetricsSnapshot(
    sessions=1000, mobile_percent=70, bounce_rate=35,
    clicks=120, impressions=2400, ctr=5.0, avg_position=8.2,
)


class FakeSource:
    """Canned upstream data with optional failures."""

    def __init__(self, sessions=1000, failures=None):
        self.sessions = sessions
        self.failures = dict(failures or {})
        self.calls = {"analytics": 0, "search": 0, "queries": 0, "pagespeed": 0}

    def _maybe_fail(self, name):
        self.calls[name] += 1
        remaining = self.failures.get(name, 0)
        if remaining:
            self.failures[name] = remaining - 1
            raise httpx.ConnectError(f"{name} unavailable")

    async def fetch_analytics(self, site):
        self._maybe_fail("analytics")
        return {"sessions": self.sessions, "mobilePercent": 70, "bounceRate": 35}

    async def fetch_search(self, site):
        self._maybe_fail("search")
        return {"clicks": 120, "impressions": 2400, "ctr": 5.0, "avgPosition": 8.2}

    async def fetch_top_queries(self, site):
        self._maybe_fail("queries")
        return [TopQuery("bakery near me", 40, 400, 10.0, 3.1)]

    async def fetch_pagespeed(self, site):
        self._maybe_fail("pagespeed")
        return PageSpeedMetrics(lcp=2100, cls=0.04, fid=60, performance_score=88)


class TestSyncSite:
    """Tests for sync_site."""

    @pytest.mark.asyncio
    async def test_stores_snapshot(self, site, store):
        """Test all sources are merged into one snapshot."""
        snapshot = await sync_site(site, FakeSource(), store, today=date(2026, 5, 14), wait=NO_WAIT)

        assert store.get_latest_snapshot(site.id) == snapshot
        assert snapshot.sessions == 1000
        assert snapshot.avg_position == 8.2
        assert snapshot.lcp == 2100
        assert snapshot.indexed_pages is None
        assert snapshot.top_queries[0].query == "bakery near me"
        assert snapshot.snapshot_date == date(2026, 5, 14)

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self, site, store):
        """Test a flaky source succeeds on a later attempt."""
        source = FakeSource(failures={"search": 2})
        await sync_site(site, source, store, today=date(2026, 5, 14), wait=NO_WAIT)

        assert source.calls["search"] == 3
        assert store.snapshot_count(site.id) == 1

    @pytest.mark.asyncio
    async def test_gives_up_and_stores_nothing(self, site, store):
        """Test a persistent failure aborts the sync without a partial snapshot."""
        source = FakeSource(failures={"pagespeed": 10})
        with pytest.raises(httpx.ConnectError):
            await sync_site(site, source, store, today=date(2026, 5, 14), wait=NO_WAIT)

        assert source.calls["pagespeed"] == 3
        assert store.snapshot_count(site.id) == 0

    @pytest.mark.asyncio
    async def test_failure_cancels_pending_fetches(self, site, store):
        """Test the other upstream calls stop once one fails for good."""
        state = {"cancelled": False}

        class StuckSource(FakeSource):
            async def fetch_analytics(self, s):
                raise ValueError("bad property id")

            async def fetch_pagespeed(self, s):
                try:
                    await asyncio.sleep(5)
                except asyncio.CancelledError:
                    state["cancelled"] = True
                    raise
                return await super().fetch_pagespeed(s)

        with pytest.raises(ValueError):
            await sync_site(site, StuckSource(), store, today=date(2026, 5, 14), wait=NO_WAIT)

        assert state["cancelled"]
        assert store.snapshot_count(site.id) == 0

    @pytest.mark.asyncio
    async def test_monthly_alert_on_first(self, site, store, notifier):
        """Test the alert runs on the first of the month."""
        for _ in range(28):
            store.save_snapshot(site.id, BASELINE)
        source = FakeSource(sessions=300)

        await sync_site(site, source, store, notifier=notifier, today=date(2026, 6, 1), wait=NO_WAIT)

        [sent] = notifier.sent
        assert [r.metric for r in sent["regressions"]] == ["sessions"]

    @pytest.mark.asyncio
    async def test_no_alert_mid_month(self, site, store, notifier, healthy_metrics):
        """Test the alert does not run on other days."""
        for _ in range(28):
            store.save_snapshot(site.id, healthy_metrics)
        await sync_site(site, FakeSource(sessions=300), store, notifier=notifier,
                        today=date(2026, 6, 2), wait=NO_WAIT)
        assert notifier.sent == []


class TestSyncAll:
    """Tests for sync_all."""

    @pytest.mark.asyncio
    async def test_statuses(self, site, store):
        """Test synced, skipped and error outcomes side by side."""
        unconnected = replace(site, id="site-2", search_console_url=None)
        broken = replace(site, id="site-3")

        class PartlyBrokenSource(FakeSource):
            async def fetch_analytics(self, s):
                if s.id == "site-3":
                    raise ValueError("bad property id")
                return await super().fetch_analytics(s)

        results = await sync_all(
            [site, unconnected, broken], PartlyBrokenSource(), store,
            today=date(2026, 5, 14), wait=NO_WAIT,
        )

        assert [(r.site_id, r.status) for r in results] == [
            ("site-1", SYNCED), ("site-2", SKIPPED), ("site-3", ERROR),
        ]
        assert results[2].error == "bad property id"
        assert results[1].to_dict() == {"siteId": "site-2", "status": "skipped", "error": "incomplete setup"}
        assert store.snapshot_count("site-1") == 1
        assert store.snapshot_count("site-3") == 0
