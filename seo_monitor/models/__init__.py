"""Data models for SEO Monitor."""

from .audit import (
    AuditResult,
    AuditStatus,
    Category,
    CategoryScores,
    ChecklistItem,
    Issue,
    Recommendation,
    Severity,
)
from .metrics import MetricsSnapshot, TopQuery
from .public import HtmlMetadata, PageSpeedMetrics, PublicAuditResult
from .regression import Direction, Regression, RegressionType

__all__ = [
    "AuditResult",
    "AuditStatus",
    "Category",
    "CategoryScores",
    "ChecklistItem",
    "Direction",
    "HtmlMetadata",
    "Issue",
    "MetricsSnapshot",
    "PageSpeedMetrics",
    "PublicAuditResult",
    "Recommendation",
    "Regression",
    "RegressionType",
    "Severity",
    "TopQuery",
]
