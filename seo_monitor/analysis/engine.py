"""
Snapshot Audit Orchestrator
===========================

Runs the rule catalog over a site's latest metrics snapshot and records
the outcome as an :class:`AuditResult` (``pending -> running ->
completed | failed``).
"""

from datetime import datetime, timezone
from typing import Callable, NamedTuple, Optional

from loguru import logger

from ..collaborators import Store
from ..config import get_settings
from ..models import (
    AuditResult,
    Category,
    CategoryScores,
    ChecklistItem,
    Issue,
    MetricsSnapshot,
    Recommendation,
)
from .recommendations import generate_recommendations
from .rules import evaluate_rules
from .scoring import compute_scores

# Static onboarding checklist. Items are never marked completed by the
# audit; they are not derived from findings.
DEFAULT_CHECKLIST: tuple[ChecklistItem, ...] = (
    ChecklistItem("gsc-verified", "Google Search Console verified", Category.TECHNICAL),
    ChecklistItem("sitemap-submitted", "XML Sitemap submitted to GSC", Category.TECHNICAL),
    ChecklistItem("robots-txt", "robots.txt allows Googlebot", Category.TECHNICAL),
    ChecklistItem("ssl-https", "Site uses HTTPS", Category.TECHNICAL),
    ChecklistItem("mobile-friendly", "Mobile-friendly design", Category.PERFORMANCE),
    ChecklistItem("page-speed", "Page loads under 3 seconds", Category.PERFORMANCE),
    ChecklistItem("title-tags", "Unique title tags on all pages", Category.CONTENT),
    ChecklistItem("meta-descriptions", "Meta descriptions on all pages", Category.CONTENT),
    ChecklistItem("heading-structure", "Proper H1-H6 heading structure", Category.CONTENT),
    ChecklistItem("gbp-claimed", "Google Business Profile claimed and optimized", Category.LOCAL),
    ChecklistItem("nap-consistent", "NAP (Name, Address, Phone) consistent everywhere", Category.LOCAL),
    ChecklistItem("local-schema", "LocalBusiness schema markup added", Category.LOCAL),
)


class SnapshotAudit(NamedTuple):
    """Pure audit output for one snapshot."""
    issues: list[Issue]
    recommendations: list[Recommendation]
    scores: CategoryScores


def audit_snapshot(metrics: MetricsSnapshot, top_n: Optional[int] = None) -> SnapshotAudit:
    """Evaluate, recommend and score one snapshot.

    Same input, same output: nothing here reads the clock or any state.

    Args:
        metrics: Snapshot to audit.
        top_n: Keep only the first *top_n* recommendations when set.
    """
    issues = evaluate_rules(metrics)
    recommendations = generate_recommendations(issues)
    if top_n is not None:
        recommendations = recommendations[:top_n]
    return SnapshotAudit(issues, recommendations, compute_scores(issues))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def run_snapshot_audit(
    site_id: str,
    store: Store,
    top_n: Optional[int] = None,
    clock: Callable[[], datetime] = _utcnow,
) -> AuditResult:
    """Audit a site's most recent metrics snapshot.

    With no snapshot available the result ends ``failed`` with empty
    fields; that is a normal outcome ("not enough data yet"), not an
    error. An unexpected error also marks the result ``failed``, persists
    it and is re-raised. Retrying is left to the caller.

    Args:
        site_id: Site to audit.
        store: Snapshot source and result sink.
        top_n: Recommendations to keep; defaults to
            ``settings.audit_top_recommendations``.
        clock: Source of the completion timestamp.

    Returns:
        The terminal :class:`AuditResult`.
    """
    if top_n is None:
        top_n = get_settings().audit_top_recommendations

    result = AuditResult(site_id=site_id)
    result.start()
    logger.info("Running audit for site {}", site_id)

    try:
        snapshot = store.get_latest_snapshot(site_id)
        if snapshot is None:
            logger.warning("No metrics snapshot for site {}; audit failed", site_id)
            result.fail()
        else:
            outcome = audit_snapshot(snapshot, top_n=top_n)
            result.complete(
                scores=outcome.scores,
                issues=outcome.issues,
                recommendations=outcome.recommendations,
                checklist=list(DEFAULT_CHECKLIST),
                completed_at=clock(),
            )
            logger.info(
                "Audit for site {} completed: overall {} ({} issue(s))",
                site_id,
                result.overall_score,
                len(result.issues),
            )
    except Exception:
        logger.exception("Audit for site {} failed", site_id)
        if not result.is_terminal:
            result.fail()
        store.save_audit_result(result)
        raise

    store.save_audit_result(result)
    return result
