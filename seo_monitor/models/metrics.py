"""Metrics snapshot value objects."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional


@dataclass(frozen=True)
class TopQuery:
    """A single search query row from Search Console."""
    query: str
    clicks: float = 0
    impressions: float = 0
    ctr: float = 0.0
    position: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopQuery":
        return cls(
            query=str(data.get("query", "")),
            clicks=data.get("clicks") or 0,
            impressions=data.get("impressions") or 0,
            ctr=data.get("ctr") or 0.0,
            position=data.get("position") or 0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "ctr": self.ctr,
            "position": self.position,
        }


# Payload key -> attribute name. Stored rows and the metrics source
# use camelCase; snake_case keys are accepted as well.
_FIELD_ALIASES = {
    "sessions": "sessions",
    "mobilePercent": "mobile_percent",
    "bounceRate": "bounce_rate",
    "clicks": "clicks",
    "impressions": "impressions",
    "ctr": "ctr",
    "avgPosition": "avg_position",
    "indexedPages": "indexed_pages",
    "lcp": "lcp",
    "cls": "cls",
    "fid": "fid",
}

_REQUIRED_NUMERIC = (
    "sessions",
    "mobile_percent",
    "bounce_rate",
    "clicks",
    "impressions",
    "ctr",
    "avg_position",
)


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time bundle of a site's analytics and search metrics.

    ``ctr``, ``mobile_percent`` and ``bounce_rate`` are percentages
    (0-100). ``lcp`` and ``fid`` are milliseconds. The optional Core Web
    Vitals and ``indexed_pages`` are ``None`` when the source had no data.
    """
    sessions: float = 0
    mobile_percent: float = 0.0
    bounce_rate: float = 0.0
    clicks: float = 0
    impressions: float = 0
    ctr: float = 0.0
    avg_position: float = 0.0
    indexed_pages: Optional[float] = None
    lcp: Optional[float] = None
    cls: Optional[float] = None
    fid: Optional[float] = None
    top_queries: tuple[TopQuery, ...] = field(default_factory=tuple)
    snapshot_date: Optional[date] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetricsSnapshot":
        """Build a snapshot from a camelCase (or snake_case) payload.

        Missing required metrics are read as 0, the same way stored
        snapshot rows with NULL columns are read back.
        """
        values: dict[str, Any] = {}
        for key, attr in _FIELD_ALIASES.items():
            if key in data:
                values[attr] = data[key]
            elif attr in data:
                values[attr] = data[attr]

        for attr in _REQUIRED_NUMERIC:
            if values.get(attr) is None:
                values[attr] = 0

        queries = data.get("topQueries", data.get("top_queries")) or []
        values["top_queries"] = tuple(
            q if isinstance(q, TopQuery) else TopQuery.from_dict(q)
            for q in queries
        )

        raw_date = data.get("snapshotDate", data.get("snapshot_date"))
        if isinstance(raw_date, str):
            values["snapshot_date"] = date.fromisoformat(raw_date[:10])
        elif isinstance(raw_date, date):
            values["snapshot_date"] = raw_date

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            key: getattr(self, attr) for key, attr in _FIELD_ALIASES.items()
        }
        data["topQueries"] = [q.to_dict() for q in self.top_queries]
        if self.snapshot_date is not None:
            data["snapshotDate"] = self.snapshot_date.isoformat()
        return data
