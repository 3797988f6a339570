"""Exception types raised by SEO Monitor."""

from typing import Optional


class SEOMonitorError(Exception):
    """Base class for all SEO Monitor errors."""


class SiteUnreachableError(SEOMonitorError):
    """A site (or an upstream API) could not be fetched.

    Raised for network failures, timeouts and non-2xx responses when
    fetching a page or calling PageSpeed. Callers map it to a
    user-facing "could not reach the website" message.
    """

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Could not reach {url}: {reason}")


class InvalidTransitionError(SEOMonitorError):
    """An audit result was moved to a state its lifecycle does not allow."""
