"""Models for the public (instant) audit."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .audit import Issue, Recommendation


@dataclass(frozen=True)
class HtmlMetadata:
    """On-page signals pulled out of a page's HTML.

    Absent tags are data: missing strings are ``None``, counts are 0 and
    flags are ``False``.
    """
    title: Optional[str] = None
    title_length: int = 0
    meta_description: Optional[str] = None
    meta_description_length: int = 0
    h1_count: int = 0
    first_h1: Optional[str] = None
    img_count: int = 0
    imgs_missing_alt: int = 0
    has_viewport: bool = False
    has_canonical: bool = False
    has_structured_data: bool = False
    is_https: bool = False
    has_robots_meta: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "titleLength": self.title_length,
            "metaDescription": self.meta_description,
            "metaDescriptionLength": self.meta_description_length,
            "h1Count": self.h1_count,
            "firstH1": self.first_h1,
            "imgCount": self.img_count,
            "imgsMissingAlt": self.imgs_missing_alt,
            "hasViewport": self.has_viewport,
            "hasCanonical": self.has_canonical,
            "hasStructuredData": self.has_structured_data,
            "isHttps": self.is_https,
            "hasRobotsMeta": self.has_robots_meta,
        }


@dataclass(frozen=True)
class PageSpeedMetrics:
    """Core Web Vitals field data and the Lighthouse performance score."""
    lcp: Optional[float] = None
    cls: Optional[float] = None
    fid: Optional[float] = None
    performance_score: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "lcp": self.lcp,
            "cls": self.cls,
            "fid": self.fid,
            "lighthouseScore": self.performance_score,
        }


@dataclass
class PublicAuditResult:
    """Combined performance + on-page audit of a live URL."""
    url: str
    score: int
    performance_score: int
    on_page_score: int
    performance_metrics: PageSpeedMetrics
    html_metadata: HtmlMetadata
    issues: list[Issue] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    audited_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "score": self.score,
            "performanceScore": self.performance_score,
            "onPageScore": self.on_page_score,
            "performanceMetrics": self.performance_metrics.to_dict(),
            "htmlMetadata": self.html_metadata.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "auditedAt": self.audited_at.isoformat() if self.audited_at else None,
        }
