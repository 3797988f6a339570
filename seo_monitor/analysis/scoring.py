"""
Score Aggregator
================

Penalty-based scoring. Each category starts at 100 and loses a fixed
amount per issue, floored at 0. Two penalty scales exist: the full scale
used by snapshot audits (and by the performance half of the public
audit) and a lighter scale for on-page issues in the public audit.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..models import Category, CategoryScores, Issue, Severity
from ..utils.helpers import round_half_up
from .rules import RULE_CATEGORIES

MAX_SCORE = 100

AUTHENTICATED_PENALTIES: Mapping[Severity, int] = MappingProxyType({
    Severity.CRITICAL: 30,
    Severity.WARNING: 15,
    Severity.INFO: 5,
})

ONPAGE_PENALTIES: Mapping[Severity, int] = MappingProxyType({
    Severity.CRITICAL: 15,
    Severity.WARNING: 8,
    Severity.INFO: 3,
})


def penalty_score(
    issues: Iterable[Issue],
    penalties: Mapping[Severity, int] = AUTHENTICATED_PENALTIES,
) -> int:
    """100 minus the summed penalties of *issues*, floored at 0."""
    total = sum(penalties.get(issue.severity, 0) for issue in issues)
    return max(0, MAX_SCORE - total)


def mean_score(scores: Iterable[float]) -> int:
    """Arithmetic mean, rounded half up to an integer."""
    values = list(scores)
    if not values:
        return 0
    return int(round_half_up(sum(values) / len(values)))


def compute_scores(
    issues: Iterable[Issue],
    categories: Mapping[str, Category] = RULE_CATEGORIES,
) -> CategoryScores:
    """Score a snapshot audit.

    Issues are bucketed through the static rule -> category lookup; an
    issue whose rule has no category counts against none of them.

    Returns:
        The four category scores and their rounded mean.
    """
    buckets: dict[Category, list[Issue]] = {category: [] for category in Category}
    for issue in issues:
        category = categories.get(issue.rule_id)
        if category is not None:
            buckets[category].append(issue)

    per_category = {
        category: penalty_score(bucket, AUTHENTICATED_PENALTIES)
        for category, bucket in buckets.items()
    }
    return CategoryScores(
        performance=per_category[Category.PERFORMANCE],
        content=per_category[Category.CONTENT],
        technical=per_category[Category.TECHNICAL],
        local=per_category[Category.LOCAL],
        overall=mean_score(per_category.values()),
    )


def compute_public_scores(
    performance_issues: Iterable[Issue],
    onpage_issues: Iterable[Issue],
    lighthouse_score: Optional[float] = None,
) -> tuple[int, int, int]:
    """Score a public audit.

    The performance score is blended 50/50 with the Lighthouse score
    when PageSpeed supplied one.

    Returns:
        ``(performance_score, on_page_score, overall)``.
    """
    raw_performance = penalty_score(performance_issues, AUTHENTICATED_PENALTIES)
    if lighthouse_score is not None:
        performance = mean_score((raw_performance, lighthouse_score))
    else:
        performance = raw_performance

    on_page = penalty_score(onpage_issues, ONPAGE_PENALTIES)
    return performance, on_page, mean_score((performance, on_page))
