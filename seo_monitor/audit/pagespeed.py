"""Google PageSpeed Insights client."""

from typing import Any, Optional

import httpx
from loguru import logger

from ..config import get_settings
from ..exceptions import SiteUnreachableError
from ..models import PageSpeedMetrics
from ..utils.helpers import round_half_up

# PageSpeed Insights API endpoint
PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"


def parse_pagespeed(data: dict[str, Any]) -> PageSpeedMetrics:
    """Parse a PageSpeed Insights API response.

    Core Web Vitals come from the field data (``loadingExperience``).
    CLS is reported by the API as percentile x 100. The Lighthouse
    performance score (0-1, two decimals) is scaled to 0-100.
    """
    metrics = (data.get("loadingExperience") or {}).get("metrics") or {}

    def percentile(key: str) -> Optional[float]:
        return (metrics.get(key) or {}).get("percentile")

    cls_raw = percentile("CUMULATIVE_LAYOUT_SHIFT_SCORE")
    categories = (data.get("lighthouseResult") or {}).get("categories") or {}
    raw_score = (categories.get("performance") or {}).get("score")

    return PageSpeedMetrics(
        lcp=percentile("LARGEST_CONTENTFUL_PAINT_MS"),
        cls=cls_raw / 100 if cls_raw is not None else None,
        fid=percentile("FIRST_INPUT_DELAY_MS"),
        performance_score=round_half_up(raw_score * 100, 2) if raw_score is not None else None,
    )


async def fetch_pagespeed_metrics(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
    strategy: str = "mobile",
    timeout: Optional[float] = None,
) -> PageSpeedMetrics:
    """Query PageSpeed Insights for *url*.

    An error answer from the API (quota, invalid URL, ...) is logged and
    yields empty metrics, so the audit still runs on on-page data. Not
    being able to reach the API at all is an error.

    Args:
        url: Page to test.
        client: Shared client; a short-lived one is created when omitted.
        api_key: API key; falls back to ``settings.pagespeed_api_key``.
        strategy: ``"mobile"`` or ``"desktop"``.
        timeout: Request timeout in seconds.

    Raises:
        SiteUnreachableError: On network errors and timeouts.
    """
    settings = get_settings()
    api_key = api_key or settings.pagespeed_api_key
    timeout = timeout if timeout is not None else settings.pagespeed_timeout_seconds

    params: dict[str, str] = {
        "url": url,
        "category": "performance",
        "strategy": strategy,
    }
    if api_key:
        params["key"] = api_key

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)

    try:
        response = await client.get(PAGESPEED_API_URL, params=params, timeout=timeout)
    except httpx.TimeoutException as exc:
        raise SiteUnreachableError(url, f"PageSpeed timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        raise SiteUnreachableError(url, f"PageSpeed request failed: {exc}") from exc
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        logger.error("PageSpeed API error for {}: HTTP {}", url, response.status_code)
        return PageSpeedMetrics()

    try:
        data = response.json()
    except ValueError:
        logger.error("PageSpeed API returned invalid JSON for {}", url)
        return PageSpeedMetrics()

    result = parse_pagespeed(data)
    logger.info(
        "PageSpeed for {}: LCP={} CLS={} FID={} score={}",
        url, result.lcp, result.cls, result.fid, result.performance_score,
    )
    return result
