"""
Regression Detector
===================

Compares two metrics snapshots (current vs. prior period) metric by
metric and reports notable moves as regressions or improvements.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from loguru import logger

from ..models import Direction, MetricsSnapshot, Regression, RegressionType, Severity
from ..utils.helpers import format_number, is_number, round_half_up

# Any move larger than this (in percent) is reported at least as info.
INFO_CHANGE_FLOOR = 10.0


@dataclass(frozen=True)
class MetricConfig:
    """How one tracked metric is judged.

    Thresholds are signed percent changes: negative for metrics where
    higher is better, positive for metrics where lower is better.
    """
    key: str
    label: str
    direction: Direction
    warning: float
    critical: float

    def is_regression(self, change: float) -> bool:
        if self.direction is Direction.HIGHER_BETTER:
            return change < 0
        return change > 0

    def severity_for(self, change: float) -> Optional[Severity]:
        if self.direction is Direction.HIGHER_BETTER:
            if change <= self.critical:
                return Severity.CRITICAL
            if change <= self.warning:
                return Severity.WARNING
        else:
            if change >= self.critical:
                return Severity.CRITICAL
            if change >= self.warning:
                return Severity.WARNING
        if abs(change) > INFO_CHANGE_FLOOR:
            return Severity.INFO
        return None


TRACKED_METRICS: tuple[MetricConfig, ...] = (
    MetricConfig("sessions", "Sessions", Direction.HIGHER_BETTER, -15, -30),
    MetricConfig("clicks", "Search Clicks", Direction.HIGHER_BETTER, -15, -30),
    MetricConfig("impressions", "Search Impressions", Direction.HIGHER_BETTER, -20, -40),
    MetricConfig("ctr", "Click-Through Rate", Direction.HIGHER_BETTER, -15, -30),
    MetricConfig("avg_position", "Average Position", Direction.LOWER_BETTER, 15, 30),
    MetricConfig("mobile_percent", "Mobile Traffic", Direction.HIGHER_BETTER, -10, -25),
    MetricConfig("bounce_rate", "Bounce Rate", Direction.LOWER_BETTER, 15, 30),
)


def percent_change(current: float, previous: float) -> float:
    """Signed change relative to |previous|, in percent (unrounded)."""
    return (current - previous) / abs(previous) * 100


def _sort_key(regression: Regression) -> tuple[int, int]:
    type_rank = 0 if regression.type is RegressionType.REGRESSION else 1
    return type_rank, regression.severity.rank


def detect_regressions(
    current: MetricsSnapshot,
    previous: MetricsSnapshot,
    metrics: Iterable[MetricConfig] = TRACKED_METRICS,
) -> list[Regression]:
    """
    Compare two snapshots across the tracked metrics.

    A metric is skipped when either value is missing or non-numeric, or
    when the previous value is 0 (the percentage is undefined, so a move
    up from 0 is never reported). Moves that cross no threshold and stay
    within 10% produce nothing.

    Args:
        current: Snapshot for the current period.
        previous: Snapshot for the prior period.
        metrics: Metric configurations to evaluate.

    Returns:
        Regressions before improvements; within each group critical,
        then warning, then info.
    """
    results: list[Regression] = []

    for config in metrics:
        current_value = getattr(current, config.key, None)
        previous_value = getattr(previous, config.key, None)

        if not is_number(current_value) or not is_number(previous_value):
            logger.debug("Skipping {}: missing or non-numeric value", config.key)
            continue
        if previous_value == 0:
            logger.debug("Skipping {}: previous value is 0", config.key)
            continue

        change = percent_change(current_value, previous_value)
        severity = config.severity_for(change)
        if severity is None:
            continue

        regression_type = (
            RegressionType.REGRESSION if config.is_regression(change)
            else RegressionType.IMPROVEMENT
        )
        verb = "decreased" if change < 0 else "increased"
        results.append(Regression(
            metric=config.key,
            metric_label=config.label,
            previous_value=previous_value,
            current_value=current_value,
            change_percent=round_half_up(change, 1),
            type=regression_type,
            severity=severity,
            message=(
                f"{config.label} {verb} by {abs(change):.1f}% "
                f"({format_number(previous_value)} → {format_number(current_value)})"
            ),
        ))

    results.sort(key=_sort_key)
    return results


def significant_regressions(regressions: Iterable[Regression]) -> list[Regression]:
    """Regressions that warrant an alert: type regression, critical or warning."""
    return [r for r in regressions if r.is_significant]
