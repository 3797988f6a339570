"""Regression detector output."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .audit import Severity


class RegressionType(str, Enum):
    """Whether a metric moved the wrong way or the right way."""
    REGRESSION = "regression"
    IMPROVEMENT = "improvement"


class Direction(str, Enum):
    """Which way a tracked metric should move."""
    HIGHER_BETTER = "higher_better"
    LOWER_BETTER = "lower_better"


@dataclass(frozen=True)
class Regression:
    """A notable change of one tracked metric between two snapshots."""
    metric: str
    metric_label: str
    previous_value: float
    current_value: float
    change_percent: float
    type: RegressionType
    severity: Severity
    message: str

    @property
    def is_significant(self) -> bool:
        """True when this change should raise an alert."""
        return self.type is RegressionType.REGRESSION and self.severity in (
            Severity.CRITICAL,
            Severity.WARNING,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "metricLabel": self.metric_label,
            "previousValue": self.previous_value,
            "currentValue": self.current_value,
            "changePercent": self.change_percent,
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
        }
