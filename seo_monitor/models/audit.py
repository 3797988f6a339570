"""Audit findings, recommendations, scores and results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidTransitionError


class Severity(str, Enum):
    """Severity of an audit issue."""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank: critical first."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


class Category(str, Enum):
    """Score bucket an issue counts against."""
    PERFORMANCE = "performance"
    CONTENT = "content"
    TECHNICAL = "technical"
    LOCAL = "local"


class AuditStatus(str, Enum):
    """Lifecycle of a snapshot audit."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Issue:
    """A single rule violation."""
    rule_id: str
    severity: Severity
    title: str
    description: str
    metric: str
    current_value: float
    threshold: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "metric": self.metric,
            "currentValue": self.current_value,
            "threshold": self.threshold,
        }


@dataclass(frozen=True)
class Recommendation:
    """A prioritised, actionable fix for one rule."""
    priority: int
    title: str
    description: str
    action_items: tuple[str, ...] = ()
    related_issues: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "actionItems": list(self.action_items),
            "relatedIssues": list(self.related_issues),
        }


@dataclass(frozen=True)
class CategoryScores:
    """Per-category scores (0-100) and their rounded mean."""
    performance: int
    content: int
    technical: int
    local: int
    overall: int

    def for_category(self, category: Category) -> int:
        return getattr(self, category.value)

    def to_dict(self) -> dict[str, int]:
        return {
            "performance": self.performance,
            "content": self.content,
            "technical": self.technical,
            "local": self.local,
            "overall": self.overall,
        }


@dataclass(frozen=True)
class ChecklistItem:
    """One line of the onboarding checklist."""
    id: str
    label: str
    category: Category
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "completed": self.completed,
            "category": self.category.value,
        }


@dataclass
class AuditResult:
    """Outcome of an authenticated (snapshot-based) audit.

    Moves ``pending -> running -> completed | failed``. ``failed`` can
    also be reached straight from ``pending``. Both end states are
    terminal; a failed result carries no scores, issues or
    recommendations.
    """
    site_id: str
    status: AuditStatus = AuditStatus.PENDING
    overall_score: Optional[int] = None
    scores: Optional[CategoryScores] = None
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    checklist: list[ChecklistItem] = field(default_factory=list)
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (AuditStatus.COMPLETED, AuditStatus.FAILED)

    def start(self) -> None:
        if self.status is not AuditStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot start audit in status {self.status.value}"
            )
        self.status = AuditStatus.RUNNING

    def complete(
        self,
        scores: CategoryScores,
        issues: list[Issue],
        recommendations: list[Recommendation],
        checklist: list[ChecklistItem],
        completed_at: Optional[datetime] = None,
    ) -> None:
        if self.status is not AuditStatus.RUNNING:
            raise InvalidTransitionError(
                f"Cannot complete audit in status {self.status.value}"
            )
        self.status = AuditStatus.COMPLETED
        self.scores = scores
        self.overall_score = scores.overall
        self.issues = list(issues)
        self.recommendations = list(recommendations)
        self.checklist = list(checklist)
        self.completed_at = completed_at

    def fail(self) -> None:
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Cannot fail audit in status {self.status.value}"
            )
        self.status = AuditStatus.FAILED
        self.overall_score = None
        self.scores = None
        self.issues = []
        self.recommendations = []
        self.checklist = []

    def to_dict(self) -> dict[str, Any]:
        return {
            "siteId": self.site_id,
            "status": self.status.value,
            "overallScore": self.overall_score,
            "scores": self.scores.to_dict() if self.scores else None,
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "checklist": [c.to_dict() for c in self.checklist],
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
        }
