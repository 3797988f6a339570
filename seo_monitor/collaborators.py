"""
External collaborators consumed by the audit engine.

The engine depends on these Protocols only. ``InMemoryStore`` and
``LoggingNotifier`` are process-local implementations for the CLI and
for tests; production deployments supply their own.
"""

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from loguru import logger

from .models import AuditResult, MetricsSnapshot, PageSpeedMetrics, Regression, TopQuery


@dataclass(frozen=True)
class Site:
    """A monitored website."""
    id: str
    name: str
    url: str
    owner_email: Optional[str] = None
    alerts_enabled: bool = True
    analytics_property_id: Optional[str] = None
    search_console_url: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        """True when both Google data sources are configured."""
        return bool(self.analytics_property_id and self.search_console_url)


@runtime_checkable
class Store(Protocol):
    """Persistence for snapshots, audit results and alerts."""

    def get_latest_snapshot(self, site_id: str) -> Optional[MetricsSnapshot]: ...

    def get_snapshot_offset(self, site_id: str, offset: int) -> Optional[MetricsSnapshot]:
        """Snapshot *offset* entries back from the newest (0 = newest)."""
        ...

    def save_snapshot(self, site_id: str, snapshot: MetricsSnapshot) -> None: ...

    def save_audit_result(self, result: AuditResult) -> None: ...

    def save_alerts(self, site_id: str, regressions: Sequence[Regression]) -> None: ...


@runtime_checkable
class Notifier(Protocol):
    """Delivers regression alerts (email in production)."""

    def send_regression_alert(
        self,
        recipient: str,
        site_name: str,
        site_url: str,
        site_id: str,
        regressions: Sequence[Regression],
    ) -> None: ...


class MetricsSource(Protocol):
    """Upstream analytics, search and PageSpeed data for one site."""

    async def fetch_analytics(self, site: Site) -> dict[str, Any]:
        """Return ``sessions``, ``mobilePercent`` and ``bounceRate``."""
        ...

    async def fetch_search(self, site: Site) -> dict[str, Any]:
        """Return ``clicks``, ``impressions``, ``ctr`` and ``avgPosition``."""
        ...

    async def fetch_top_queries(self, site: Site) -> list[TopQuery]: ...

    async def fetch_pagespeed(self, site: Site) -> PageSpeedMetrics: ...


class InMemoryStore:
    """Thread-safe, process-local :class:`Store`."""

    def __init__(self) -> None:
        self._snapshots: dict[str, list[MetricsSnapshot]] = defaultdict(list)
        self.audit_results: list[AuditResult] = []
        self.alerts: dict[str, list[Regression]] = defaultdict(list)
        self._lock = Lock()

    def get_latest_snapshot(self, site_id: str) -> Optional[MetricsSnapshot]:
        return self.get_snapshot_offset(site_id, 0)

    def get_snapshot_offset(self, site_id: str, offset: int) -> Optional[MetricsSnapshot]:
        with self._lock:
            history = self._snapshots.get(site_id, [])
            if offset < 0 or offset >= len(history):
                return None
            return history[-1 - offset]

    def save_snapshot(self, site_id: str, snapshot: MetricsSnapshot) -> None:
        with self._lock:
            self._snapshots[site_id].append(snapshot)

    def save_audit_result(self, result: AuditResult) -> None:
        with self._lock:
            self.audit_results.append(result)

    def save_alerts(self, site_id: str, regressions: Sequence[Regression]) -> None:
        with self._lock:
            self.alerts[site_id].extend(regressions)

    def snapshot_count(self, site_id: str) -> int:
        with self._lock:
            return len(self._snapshots.get(site_id, []))


class LoggingNotifier:
    """:class:`Notifier` that writes alerts to the log instead of sending email."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    def send_regression_alert(
        self,
        recipient: str,
        site_name: str,
        site_url: str,
        site_id: str,
        regressions: Sequence[Regression],
    ) -> None:
        logger.warning(
            "Regression alert for {} ({}) to {}: {}",
            site_name,
            site_url,
            recipient,
            "; ".join(r.message for r in regressions),
        )
        self.sent.append({
            "recipient": recipient,
            "site_name": site_name,
            "site_url": site_url,
            "site_id": site_id,
            "regressions": list(regressions),
        })
