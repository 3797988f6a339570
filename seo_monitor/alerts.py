"""Monthly regression alerts."""

from typing import Optional

from loguru import logger

from .analysis.regression_detector import detect_regressions, significant_regressions
from .collaborators import Notifier, Site, Store
from .config import get_settings
from .models import MetricsSnapshot, Regression


def run_monthly_alert(
    site: Site,
    current: MetricsSnapshot,
    store: Store,
    notifier: Notifier,
    offset: Optional[int] = None,
) -> list[Regression]:
    """
    Compare *current* against the snapshot about a month back and alert.

    Snapshots are daily, so the comparison point is the one ``offset``
    entries back from the newest (28 by default). Only significant
    regressions (critical or warning) are stored and mailed.

    Args:
        site: The site being checked.
        current: Freshly synced metrics.
        store: Snapshot history and alert sink.
        notifier: Alert delivery.
        offset: Snapshots to step back; defaults to
            ``settings.alert_snapshot_offset``.

    Returns:
        The significant regressions; empty when alerts are disabled, no
        earlier snapshot exists or nothing regressed.
    """
    if not site.alerts_enabled:
        logger.debug("Alerts disabled for site {}", site.id)
        return []

    if offset is None:
        offset = get_settings().alert_snapshot_offset

    previous = store.get_snapshot_offset(site.id, offset)
    if previous is None:
        logger.info("No snapshot {} entries back for site {}; skipping alert", offset, site.id)
        return []

    significant = significant_regressions(detect_regressions(current, previous))
    if not significant:
        logger.info("No significant regressions for site {}", site.id)
        return []

    store.save_alerts(site.id, significant)
    logger.warning("{} significant regression(s) for site {}", len(significant), site.id)

    if site.owner_email:
        notifier.send_regression_alert(
            site.owner_email, site.name, site.url, site.id, significant
        )
    return significant
