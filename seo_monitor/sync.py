"""
Snapshot Sync
=============

Daily job: pull each connected site's analytics, search and PageSpeed
data, store it as a metrics snapshot and, on the first of the month, run
the regression alert.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from .alerts import run_monthly_alert
from .collaborators import MetricsSource, Notifier, Site, Store
from .config import get_settings
from .exceptions import SiteUnreachableError
from .models import MetricsSnapshot
from .utils.helpers import gather_or_cancel

T = TypeVar("T")

SYNCED = "synced"
SKIPPED = "skipped"
ERROR = "error"

# Upstream failures worth another attempt.
TRANSIENT_ERRORS = (httpx.TransportError, SiteUnreachableError, ConnectionError, TimeoutError)

DEFAULT_WAIT = wait_exponential(multiplier=1, min=2, max=10)


@dataclass(frozen=True)
class SyncStatus:
    """Outcome of syncing one site."""
    site_id: str
    status: str
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"siteId": self.site_id, "status": self.status}
        if self.error is not None:
            data["error"] = self.error
        return data


async def _with_retry(
    fetch: Callable[[Site], Awaitable[T]],
    site: Site,
    name: str,
    max_attempts: int,
    wait: wait_base,
) -> T:
    def log_retry(retry_state: RetryCallState) -> None:
        logger.warning(
            "{} failed (attempt {}/{}): {}",
            name,
            retry_state.attempt_number,
            max_attempts,
            retry_state.outcome.exception(),
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait,
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=log_retry,
        reraise=True,
    )
    return await retrying(fetch, site)


async def sync_site(
    site: Site,
    source: MetricsSource,
    store: Store,
    notifier: Optional[Notifier] = None,
    today: Optional[date] = None,
    wait: wait_base = DEFAULT_WAIT,
) -> MetricsSnapshot:
    """
    Fetch and store one site's daily snapshot.

    The four upstream calls run concurrently and all must succeed;
    nothing is stored when any of them fails.

    Args:
        site: A connected site.
        source: Upstream data.
        store: Snapshot sink.
        notifier: Alert delivery; the monthly alert is skipped without one.
        today: Snapshot date; the monthly alert runs when it is the 1st.
        wait: Backoff between retries.

    Returns:
        The stored snapshot.
    """
    today = today or date.today()
    max_attempts = get_settings().sync_max_attempts

    analytics, search, top_queries, pagespeed = await gather_or_cancel(
        _with_retry(source.fetch_analytics, site, "analytics", max_attempts, wait),
        _with_retry(source.fetch_search, site, "search", max_attempts, wait),
        _with_retry(source.fetch_top_queries, site, "top queries", max_attempts, wait),
        _with_retry(source.fetch_pagespeed, site, "pagespeed", max_attempts, wait),
    )

    snapshot = MetricsSnapshot.from_dict({
        **analytics,
        **search,
        "lcp": pagespeed.lcp,
        "cls": pagespeed.cls,
        "fid": pagespeed.fid,
        "topQueries": list(top_queries),
        "snapshotDate": today,
    })
    store.save_snapshot(site.id, snapshot)
    logger.info("Stored snapshot for site {} ({})", site.id, today.isoformat())

    if today.day == 1 and notifier is not None:
        run_monthly_alert(site, snapshot, store, notifier)

    return snapshot


async def sync_all(
    sites: Iterable[Site],
    source: MetricsSource,
    store: Store,
    notifier: Optional[Notifier] = None,
    today: Optional[date] = None,
    wait: wait_base = DEFAULT_WAIT,
) -> list[SyncStatus]:
    """Sync every site in turn; one site's failure never stops the rest."""
    results: list[SyncStatus] = []

    for site in sites:
        if not site.is_connected:
            logger.info("Skipping site {}: incomplete setup", site.id)
            results.append(SyncStatus(site.id, SKIPPED, "incomplete setup"))
            continue

        try:
            await sync_site(site, source, store, notifier=notifier, today=today, wait=wait)
        except Exception as exc:
            logger.exception("Sync failed for site {}", site.id)
            results.append(SyncStatus(site.id, ERROR, str(exc)))
        else:
            results.append(SyncStatus(site.id, SYNCED))

    synced = sum(1 for r in results if r.status == SYNCED)
    logger.info("Sync finished: {}/{} site(s) synced", synced, len(results))
    return results
