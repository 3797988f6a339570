"""
HTML Metadata Extractor
=======================

Fetches a page with a hard time and size cap and pulls a small set of
on-page SEO signals out of it with regular expressions. This is not an
HTML parser: malformed markup never raises, a missing tag just reads as
absent.
"""

import asyncio
import re
from html import unescape
from typing import Optional

import httpx
from loguru import logger

from ..config import get_settings
from ..exceptions import SiteUnreachableError
from ..models import HtmlMetadata

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

_TITLE_RE = re.compile(r"<title[^>]*>([\s\S]*?)</title>", re.I)
_META_DESC_NAME_FIRST_RE = re.compile(
    r"""<meta[^>]+name=["']description["'][^>]+content=["']([\s\S]*?)["'][^>]*>""", re.I
)
_META_DESC_CONTENT_FIRST_RE = re.compile(
    r"""<meta[^>]+content=["']([\s\S]*?)["'][^>]+name=["']description["'][^>]*>""", re.I
)
_H1_RE = re.compile(r"<h1[^>]*>([\s\S]*?)</h1>", re.I)
_TAG_RE = re.compile(r"<[^>]*>")
_IMG_RE = re.compile(r"<img[^>]*>", re.I)
_IMG_ALT_RE = re.compile(r"""alt=["'][^"']+["']""", re.I)
_VIEWPORT_RE = re.compile(r"""<meta[^>]+name=["']viewport["'][^>]*>""", re.I)
_CANONICAL_RE = re.compile(r"""<link[^>]+rel=["']canonical["'][^>]*>""", re.I)
_JSON_LD_RE = re.compile(r"""<script[^>]+type=["']application/ld\+json["'][^>]*>""", re.I)
_ROBOTS_RE = re.compile(r"""<meta[^>]+name=["']robots["'][^>]*>""", re.I)


def _clean_text(raw: str) -> Optional[str]:
    text = unescape(_TAG_RE.sub("", raw)).strip()
    return text or None


def extract_metadata(html: str, url: str) -> HtmlMetadata:
    """Extract on-page signals from raw HTML.

    Args:
        html: Page markup (possibly truncated).
        url: The URL the page was requested from; decides ``is_https``.

    Returns:
        Extracted metadata. Never raises for any string input.
    """
    title_match = _TITLE_RE.search(html)
    title = _clean_text(title_match.group(1)) if title_match else None

    desc_match = (
        _META_DESC_NAME_FIRST_RE.search(html)
        or _META_DESC_CONTENT_FIRST_RE.search(html)
    )
    meta_description = _clean_text(desc_match.group(1)) if desc_match else None

    h1_matches = _H1_RE.findall(html)
    first_h1 = _clean_text(h1_matches[0]) if h1_matches else None

    images = _IMG_RE.findall(html)
    imgs_missing_alt = sum(1 for img in images if not _IMG_ALT_RE.search(img))

    return HtmlMetadata(
        title=title,
        title_length=len(title) if title else 0,
        meta_description=meta_description,
        meta_description_length=len(meta_description) if meta_description else 0,
        h1_count=len(h1_matches),
        first_h1=first_h1,
        img_count=len(images),
        imgs_missing_alt=imgs_missing_alt,
        has_viewport=bool(_VIEWPORT_RE.search(html)),
        has_canonical=bool(_CANONICAL_RE.search(html)),
        has_structured_data=bool(_JSON_LD_RE.search(html)),
        is_https=url.lower().startswith("https://"),
        has_robots_meta=bool(_ROBOTS_RE.search(html)),
    )


async def _read_capped(client: httpx.AsyncClient, url: str, max_bytes: int) -> str:
    async with client.stream("GET", url, follow_redirects=True) as response:
        if not response.is_success:
            raise SiteUnreachableError(
                url, f"HTTP {response.status_code}", status_code=response.status_code
            )

        chunks: list[bytes] = []
        total = 0
        async for chunk in response.aiter_bytes():
            chunks.append(chunk)
            total += len(chunk)
            if total >= max_bytes:
                logger.debug("Stopped reading {} at {} bytes", url, total)
                break
        encoding = response.encoding or "utf-8"

    # Leaving the stream context closes the response and frees the connection.
    body = b"".join(chunks)[:max_bytes]
    return body.decode(encoding, errors="replace")


async def fetch_html(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> str:
    """Fetch at most *max_bytes* of a page within *timeout* seconds.

    Args:
        url: Page to fetch. Redirects are followed.
        client: Shared client; a short-lived one is created when omitted.
        timeout: Wall-clock cap for the whole fetch.
        max_bytes: Body size cap.

    Raises:
        SiteUnreachableError: On network errors, timeouts and non-2xx
            responses.
    """
    settings = get_settings()
    timeout = timeout if timeout is not None else settings.html_fetch_timeout_seconds
    max_bytes = max_bytes if max_bytes is not None else settings.html_max_bytes

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            headers={**DEFAULT_HEADERS, "User-Agent": settings.user_agent},
            follow_redirects=True,
            timeout=timeout,
        )

    try:
        return await asyncio.wait_for(_read_capped(client, url, max_bytes), timeout)
    except asyncio.TimeoutError as exc:
        raise SiteUnreachableError(url, f"timed out after {timeout}s") from exc
    except httpx.TimeoutException as exc:
        raise SiteUnreachableError(url, f"timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        raise SiteUnreachableError(url, f"{type(exc).__name__}: {exc}") from exc
    finally:
        if owns_client:
            await client.aclose()


async def scrape_meta_tags(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> HtmlMetadata:
    """Fetch *url* and extract its on-page metadata."""
    html = await fetch_html(url, client=client, timeout=timeout, max_bytes=max_bytes)
    logger.info("Fetched {} ({} chars)", url, len(html))
    return extract_metadata(html, url)
