"""Shared fixtures."""

import pytest

from seo_monitor.collaborators import InMemoryStore, LoggingNotifier, Site
from seo_monitor.config import get_settings
from seo_monitor.models import HtmlMetadata, MetricsSnapshot, TopQuery


@pytest.fixture(autouse=True)
def quiet_settings(monkeypatch):
    """Fresh settings per test with stderr logging kept to warnings."""
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.delenv("PAGESPEED_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_queries(count: int) -> tuple[TopQuery, ...]:
    return tuple(
        TopQuery(query=f"query-{i}", clicks=10, impressions=100, ctr=10, position=5)
        for i in range(count)
    )


@pytest.fixture
def healthy_metrics():
    """A snapshot that trips no rule."""
    return MetricsSnapshot(
        sessions=1000,
        mobile_percent=80,
        bounce_rate=20,
        clicks=100,
        impressions=1000,
        ctr=5.0,
        avg_position=5,
        indexed_pages=50,
        lcp=1800,
        cls=0.05,
        fid=50,
        top_queries=make_queries(10),
    )


@pytest.fixture
def good_page():
    """Page metadata that trips no on-page rule."""
    return HtmlMetadata(
        title="Fresh Bread and Pastries | Maple Street Bakery",
        title_length=len("Fresh Bread and Pastries | Maple Street Bakery"),
        meta_description="x" * 120,
        meta_description_length=120,
        h1_count=1,
        first_h1="Fresh Bread",
        img_count=3,
        imgs_missing_alt=0,
        has_viewport=True,
        has_canonical=True,
        has_structured_data=True,
        is_https=True,
        has_robots_meta=True,
    )


@pytest.fixture
def site():
    return Site(
        id="site-1",
        name="Maple Street Bakery",
        url="https://example.com",
        owner_email="owner@example.com",
        analytics_property_id="properties/123",
        search_console_url="sc-domain:example.com",
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def notifier():
    return LoggingNotifier()
