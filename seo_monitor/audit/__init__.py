"""Public (instant) audit of live URLs."""

from .extractor import extract_metadata, fetch_html, scrape_meta_tags
from .pagespeed import fetch_pagespeed_metrics, parse_pagespeed
from .public_audit import run_public_audit
from .rate_limiter import FixedWindowRateLimiter, RateLimitDecision, get_rate_limiter

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitDecision",
    "extract_metadata",
    "fetch_html",
    "fetch_pagespeed_metrics",
    "get_rate_limiter",
    "parse_pagespeed",
    "run_public_audit",
    "scrape_meta_tags",
]
