"""
Rule Catalog
============

Independent, pure rules that turn a metrics snapshot into issues.

Each rule reads one metric, compares it against a fixed threshold and
yields at most one :class:`Issue`. Optional metrics that are ``None``
never fire. The category a rule belongs to is kept in the static
:data:`RULE_CATEGORIES` lookup, which the score aggregator reads.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from loguru import logger

from ..models import Category, Issue, MetricsSnapshot, Severity
from ..utils.helpers import format_number, is_number


@dataclass(frozen=True)
class Rule:
    """A single threshold rule over one metric."""
    id: str
    name: str
    title: str
    category: Category
    severity: Severity
    metric: str
    threshold: float
    fires: Callable[[float], bool]
    describe: Callable[[float], str]
    read: Optional[Callable[[MetricsSnapshot], Optional[float]]] = None
    reported_value: Optional[float] = None

    def value_of(self, metrics: MetricsSnapshot) -> Optional[float]:
        if self.read is not None:
            return self.read(metrics)
        return getattr(metrics, self.metric, None)

    def evaluate(self, metrics: MetricsSnapshot) -> Optional[Issue]:
        """Return an issue when the rule fires, otherwise ``None``."""
        value = self.value_of(metrics)
        if not is_number(value):
            return None
        if not self.fires(value):
            return None
        return Issue(
            rule_id=self.id,
            severity=self.severity,
            title=self.title,
            description=self.describe(value),
            metric=self.metric,
            current_value=value if self.reported_value is None else self.reported_value,
            threshold=self.threshold,
        )


RULES: tuple[Rule, ...] = (
    Rule(
        id="mobile-traffic-low",
        name="Low Mobile Traffic",
        title="Low Mobile Traffic",
        category=Category.PERFORMANCE,
        severity=Severity.CRITICAL,
        metric="mobile_percent",
        threshold=50,
        fires=lambda v: v < 50,
        describe=lambda v: (
            "Less than 50% of your traffic comes from mobile devices. "
            "Google prioritizes mobile-first indexing."
        ),
    ),
    Rule(
        id="slow-lcp",
        name="Slow Largest Contentful Paint",
        title="Slow Page Load (LCP)",
        category=Category.PERFORMANCE,
        severity=Severity.CRITICAL,
        metric="lcp",
        threshold=2500,
        fires=lambda v: v > 2500,
        describe=lambda v: (
            f"Your LCP is {v / 1000:.1f}s. "
            "Google recommends under 2.5s for good user experience."
        ),
    ),
    Rule(
        id="poor-cls",
        name="High Layout Shift",
        title="High Cumulative Layout Shift",
        category=Category.PERFORMANCE,
        severity=Severity.WARNING,
        metric="cls",
        threshold=0.1,
        fires=lambda v: v > 0.1,
        describe=lambda v: (
            f"Your CLS is {v:.2f}. "
            "Google recommends under 0.1 for a stable visual experience."
        ),
    ),
    Rule(
        id="slow-fid",
        name="Slow First Input Delay",
        title="Slow Interactivity (FID)",
        category=Category.PERFORMANCE,
        severity=Severity.WARNING,
        metric="fid",
        threshold=100,
        fires=lambda v: v > 100,
        describe=lambda v: (
            f"Your FID is {format_number(v)}ms. "
            "Google recommends under 100ms for responsive interactions."
        ),
    ),
    Rule(
        id="low-ctr",
        name="Low Click-Through Rate",
        title="Low Click-Through Rate",
        category=Category.CONTENT,
        severity=Severity.CRITICAL,
        metric="ctr",
        threshold=2,
        fires=lambda v: v < 2,
        describe=lambda v: (
            f"Your average CTR is {v:.1f}%. "
            "Aim for at least 2% to maximize search visibility."
        ),
    ),
    Rule(
        id="high-bounce-rate",
        name="High Bounce Rate",
        title="High Bounce Rate",
        category=Category.CONTENT,
        severity=Severity.WARNING,
        metric="bounce_rate",
        threshold=70,
        fires=lambda v: v > 70,
        describe=lambda v: (
            f"Your bounce rate is {v:.0f}%. "
            "This suggests visitors aren't finding what they need."
        ),
    ),
    Rule(
        id="poor-position",
        name="Low Average Position",
        title="Low Average Search Position",
        category=Category.CONTENT,
        severity=Severity.WARNING,
        metric="avg_position",
        threshold=20,
        fires=lambda v: v > 20,
        describe=lambda v: (
            f"Your average position is {v:.1f}. "
            "Most clicks go to top 10 results."
        ),
    ),
    # low-sessions and low-impressions count against "local" even though
    # they carry no location signal.
    Rule(
        id="low-sessions",
        name="Low Traffic Volume",
        title="Low Traffic Volume",
        category=Category.LOCAL,
        severity=Severity.INFO,
        metric="sessions",
        threshold=100,
        fires=lambda v: v < 100,
        describe=lambda v: (
            f"Only {format_number(v)} sessions in the last 28 days. "
            "Local businesses typically need 500+ monthly sessions."
        ),
    ),
    Rule(
        id="low-impressions",
        name="Low Search Impressions",
        title="Low Search Impressions",
        category=Category.LOCAL,
        severity=Severity.WARNING,
        metric="impressions",
        threshold=500,
        fires=lambda v: v < 500,
        describe=lambda v: (
            f"Your site appeared only {format_number(v)} times in search. "
            "You may need more local content."
        ),
    ),
    Rule(
        id="indexing-low",
        name="Low Indexed Pages",
        title="Few Indexed Pages",
        category=Category.TECHNICAL,
        severity=Severity.INFO,
        metric="indexed_pages",
        threshold=10,
        fires=lambda v: v < 10,
        describe=lambda v: (
            f"Only {format_number(v)} pages are being indexed. "
            "Consider adding more content pages."
        ),
    ),
    Rule(
        id="no-clicks",
        name="Zero Clicks",
        title="No Search Clicks",
        category=Category.TECHNICAL,
        severity=Severity.CRITICAL,
        metric="clicks",
        threshold=1,
        fires=lambda v: v == 0,
        describe=lambda v: (
            "Your site received zero clicks from search in the last 28 days. "
            "This is a critical issue."
        ),
        reported_value=0,
    ),
    Rule(
        id="few-queries",
        name="Few Ranking Queries",
        title="Few Ranking Keywords",
        category=Category.CONTENT,
        severity=Severity.INFO,
        metric="top_queries",
        threshold=5,
        fires=lambda v: v < 5,
        describe=lambda v: (
            f"Your site ranks for only {format_number(v)} queries. "
            "Expanding content can improve visibility."
        ),
        read=lambda m: len(m.top_queries) if m.top_queries is not None else None,
    ),
)

RULE_CATEGORIES: dict[str, Category] = {rule.id: rule.category for rule in RULES}

# Rules the public audit can evaluate from PageSpeed data alone.
PERFORMANCE_RULE_IDS = frozenset({"slow-lcp", "poor-cls", "slow-fid"})

_RULES_BY_ID = {rule.id: rule for rule in RULES}


def get_rule(rule_id: str) -> Optional[Rule]:
    """Look up a rule by its identifier."""
    return _RULES_BY_ID.get(rule_id)


def evaluate_rules(
    metrics: MetricsSnapshot,
    rules: Iterable[Rule] = RULES,
) -> list[Issue]:
    """Run every rule against *metrics*, in catalog order.

    Args:
        metrics: The snapshot to evaluate.
        rules: Rules to run; defaults to the full catalog.

    Returns:
        One issue per rule that fired.
    """
    issues: list[Issue] = []
    for rule in rules:
        issue = rule.evaluate(metrics)
        if issue is not None:
            issues.append(issue)
    logger.debug("Evaluated rules: {} issue(s) found", len(issues))
    return issues
