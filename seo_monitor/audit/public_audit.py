"""
Public Audit Orchestrator
=========================

Audits any live URL without account data: PageSpeed field metrics for the
performance half, the page's own HTML for the on-page half.
"""

from datetime import datetime, timezone
from typing import Optional

import httpx
from loguru import logger

from ..analysis.onpage_rules import ONPAGE_RECOMMENDATION_TEMPLATES, evaluate_onpage_rules
from ..analysis.recommendations import generate_recommendations, reprioritize
from ..analysis.rules import PERFORMANCE_RULE_IDS, RULES, evaluate_rules
from ..analysis.scoring import compute_public_scores
from ..models import MetricsSnapshot, PageSpeedMetrics, PublicAuditResult, TopQuery
from ..utils.helpers import gather_or_cancel
from .extractor import scrape_meta_tags
from .pagespeed import fetch_pagespeed_metrics

PERFORMANCE_RULES = tuple(rule for rule in RULES if rule.id in PERFORMANCE_RULE_IDS)

# Ten healthy queries so the query-count rule stays quiet.
_PLACEHOLDER_QUERIES = tuple(
    TopQuery(query=f"query-{i}", clicks=10, impressions=100, ctr=10, position=5)
    for i in range(10)
)


def performance_snapshot(pagespeed: PageSpeedMetrics) -> MetricsSnapshot:
    """Snapshot carrying the PageSpeed vitals and values no other rule flags."""
    return MetricsSnapshot(
        sessions=1000,
        mobile_percent=60,
        bounce_rate=30,
        clicks=100,
        impressions=1000,
        ctr=5,
        avg_position=5,
        indexed_pages=50,
        lcp=pagespeed.lcp,
        cls=pagespeed.cls,
        fid=pagespeed.fid,
        top_queries=_PLACEHOLDER_QUERIES,
    )


async def run_public_audit(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> PublicAuditResult:
    """
    Run a public audit of *url*.

    PageSpeed and the HTML fetch run concurrently; if either one raises,
    the other is cancelled and the whole audit raises with no partial result.

    Args:
        url: Absolute http(s) URL.
        client: Shared HTTP client for both calls.
        now: Timestamp recorded as ``audited_at``; defaults to the
            current UTC time.

    Returns:
        The combined result.

    Raises:
        SiteUnreachableError: If the page or PageSpeed cannot be reached.
    """
    logger.info("Running public audit for {}", url)
    pagespeed, html_metadata = await gather_or_cancel(
        fetch_pagespeed_metrics(url, client=client),
        scrape_meta_tags(url, client=client),
    )

    performance_issues = evaluate_rules(performance_snapshot(pagespeed), PERFORMANCE_RULES)
    onpage_issues = evaluate_onpage_rules(html_metadata)

    recommendations = reprioritize(
        generate_recommendations(performance_issues)
        + generate_recommendations(onpage_issues, ONPAGE_RECOMMENDATION_TEMPLATES)
    )

    performance_score, on_page_score, score = compute_public_scores(
        performance_issues, onpage_issues, pagespeed.performance_score
    )
    logger.info(
        "Public audit for {}: score {} (performance {}, on-page {})",
        url, score, performance_score, on_page_score,
    )

    return PublicAuditResult(
        url=url,
        score=score,
        performance_score=performance_score,
        on_page_score=on_page_score,
        performance_metrics=pagespeed,
        html_metadata=html_metadata,
        issues=performance_issues + onpage_issues,
        recommendations=recommendations,
        audited_at=now or datetime.now(timezone.utc),
    )
