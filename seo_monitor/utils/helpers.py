"""
Utility helpers for SEO Monitor.
"""

import asyncio
import math
from decimal import Decimal, ROUND_HALF_DOWN, ROUND_HALF_UP
from typing import Any, Awaitable


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up towards +inf (``round(92.5) == 93``,
    ``-50.125`` to one digit is ``-50.1``).

    Python's built-in ``round`` uses banker's rounding, which would turn
    92.5 into 92.
    """
    quantum = Decimal(1).scaleb(-digits)
    rounding = ROUND_HALF_UP if value >= 0 else ROUND_HALF_DOWN
    return float(Decimal(repr(value)).quantize(quantum, rounding=rounding))


def is_number(value: Any) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def format_number(value: float) -> str:
    """Render a metric value without a trailing ``.0`` for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_url(url: str) -> str:
    """Ensure a URL has a scheme."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    return url



async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Await all of *aws* concurrently; the first failure cancels the rest.

    The siblings are cancelled and awaited before the error propagates,
    so nothing keeps running after the caller has given up.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
