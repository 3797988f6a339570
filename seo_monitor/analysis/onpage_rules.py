"""
On-Page Rule Catalog
====================

Rules over :class:`HtmlMetadata` used by the public (instant) audit,
together with the recommendation templates for the issues they raise.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Optional

from loguru import logger

from ..models import HtmlMetadata, Issue, Severity

# Title and meta description length bounds, in characters.
TITLE_MIN_LENGTH = 20
TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MIN_LENGTH = 70
META_DESCRIPTION_MAX_LENGTH = 160


@dataclass(frozen=True)
class OnPageRule:
    """A rule evaluated against parsed page metadata."""
    id: str
    severity: Severity
    evaluate: Callable[[HtmlMetadata], Optional[Issue]]


def _issue(
    rule_id: str,
    severity: Severity,
    title: str,
    description: str,
    metric: str,
    current_value: float,
    threshold: float,
) -> Issue:
    return Issue(
        rule_id=rule_id,
        severity=severity,
        title=title,
        description=description,
        metric=metric,
        current_value=current_value,
        threshold=threshold,
    )


def _missing_title(m: HtmlMetadata) -> Optional[Issue]:
    if m.title:
        return None
    return _issue(
        "missing-title", Severity.CRITICAL, "Missing Page Title",
        "Your page has no <title> tag. This is critical for SEO and user experience.",
        "title_length", 0, 1,
    )


def _title_too_long(m: HtmlMetadata) -> Optional[Issue]:
    if not m.title or m.title_length <= TITLE_MAX_LENGTH:
        return None
    return _issue(
        "title-too-long", Severity.WARNING, "Title Tag Too Long",
        f"Your title is {m.title_length} characters. "
        "Google typically displays 50-60 characters.",
        "title_length", m.title_length, TITLE_MAX_LENGTH,
    )


def _title_too_short(m: HtmlMetadata) -> Optional[Issue]:
    if not m.title or m.title_length >= TITLE_MIN_LENGTH:
        return None
    return _issue(
        "title-too-short", Severity.WARNING, "Title Tag Too Short",
        f"Your title is only {m.title_length} characters. "
        "Aim for 20-60 characters for best results.",
        "title_length", m.title_length, TITLE_MIN_LENGTH,
    )


def _missing_meta_description(m: HtmlMetadata) -> Optional[Issue]:
    if m.meta_description:
        return None
    return _issue(
        "missing-meta-description", Severity.CRITICAL, "Missing Meta Description",
        "Your page has no meta description. This tag helps Google understand "
        "your page and improves CTR.",
        "meta_description_length", 0, 1,
    )


def _meta_description_too_long(m: HtmlMetadata) -> Optional[Issue]:
    if not m.meta_description or m.meta_description_length <= META_DESCRIPTION_MAX_LENGTH:
        return None
    return _issue(
        "meta-description-too-long", Severity.WARNING, "Meta Description Too Long",
        f"Your meta description is {m.meta_description_length} characters. "
        "Google truncates at ~160 characters.",
        "meta_description_length", m.meta_description_length, META_DESCRIPTION_MAX_LENGTH,
    )


def _meta_description_too_short(m: HtmlMetadata) -> Optional[Issue]:
    if not m.meta_description or m.meta_description_length >= META_DESCRIPTION_MIN_LENGTH:
        return None
    return _issue(
        "meta-description-too-short", Severity.WARNING, "Meta Description Too Short",
        f"Your meta description is only {m.meta_description_length} characters. "
        "Aim for 70-160 characters.",
        "meta_description_length", m.meta_description_length, META_DESCRIPTION_MIN_LENGTH,
    )


def _missing_h1(m: HtmlMetadata) -> Optional[Issue]:
    if m.h1_count != 0:
        return None
    return _issue(
        "missing-h1", Severity.CRITICAL, "Missing H1 Heading",
        "Your page has no H1 heading. Every page should have exactly one H1 for SEO.",
        "h1_count", 0, 1,
    )


def _multiple_h1(m: HtmlMetadata) -> Optional[Issue]:
    if m.h1_count <= 1:
        return None
    return _issue(
        "multiple-h1", Severity.WARNING, "Multiple H1 Headings",
        f"Your page has {m.h1_count} H1 tags. Best practice is to have exactly one H1.",
        "h1_count", m.h1_count, 1,
    )


def _images_without_alt(m: HtmlMetadata) -> Optional[Issue]:
    if m.imgs_missing_alt <= 0:
        return None
    return _issue(
        "images-without-alt", Severity.WARNING, "Images Missing Alt Text",
        f"{m.imgs_missing_alt} of {m.img_count} images are missing alt text. "
        "Alt text helps SEO and accessibility.",
        "imgs_missing_alt", m.imgs_missing_alt, 0,
    )


def _no_viewport(m: HtmlMetadata) -> Optional[Issue]:
    if m.has_viewport:
        return None
    return _issue(
        "no-viewport-meta", Severity.CRITICAL, "Missing Viewport Meta Tag",
        "Your page has no viewport meta tag. This is essential for mobile-friendly design.",
        "has_viewport", 0, 1,
    )


def _no_canonical(m: HtmlMetadata) -> Optional[Issue]:
    if m.has_canonical:
        return None
    return _issue(
        "no-canonical", Severity.WARNING, "Missing Canonical Link",
        "Your page has no canonical tag. This can lead to duplicate content issues.",
        "has_canonical", 0, 1,
    )


def _no_structured_data(m: HtmlMetadata) -> Optional[Issue]:
    if m.has_structured_data:
        return None
    return _issue(
        "no-structured-data", Severity.INFO, "No Structured Data Found",
        "No JSON-LD structured data detected. Adding schema markup can improve "
        "rich snippets.",
        "has_structured_data", 0, 1,
    )


def _not_https(m: HtmlMetadata) -> Optional[Issue]:
    if m.is_https:
        return None
    return _issue(
        "not-https", Severity.CRITICAL, "Not Using HTTPS",
        "Your site is not using HTTPS. This is a Google ranking signal and "
        "essential for security.",
        "is_https", 0, 1,
    )


ONPAGE_RULES: tuple[OnPageRule, ...] = (
    OnPageRule("missing-title", Severity.CRITICAL, _missing_title),
    OnPageRule("title-too-long", Severity.WARNING, _title_too_long),
    OnPageRule("title-too-short", Severity.WARNING, _title_too_short),
    OnPageRule("missing-meta-description", Severity.CRITICAL, _missing_meta_description),
    OnPageRule("meta-description-too-long", Severity.WARNING, _meta_description_too_long),
    OnPageRule("meta-description-too-short", Severity.WARNING, _meta_description_too_short),
    OnPageRule("missing-h1", Severity.CRITICAL, _missing_h1),
    OnPageRule("multiple-h1", Severity.WARNING, _multiple_h1),
    OnPageRule("images-without-alt", Severity.WARNING, _images_without_alt),
    OnPageRule("no-viewport-meta", Severity.CRITICAL, _no_viewport),
    OnPageRule("no-canonical", Severity.WARNING, _no_canonical),
    OnPageRule("no-structured-data", Severity.INFO, _no_structured_data),
    OnPageRule("not-https", Severity.CRITICAL, _not_https),
)


def evaluate_onpage_rules(
    meta: HtmlMetadata,
    rules: Iterable[OnPageRule] = ONPAGE_RULES,
) -> list[Issue]:
    """Run the on-page rules against extracted page metadata."""
    issues = [issue for issue in (rule.evaluate(meta) for rule in rules) if issue]
    logger.debug("Evaluated on-page rules: {} issue(s) found", len(issues))
    return issues


# ---------------------------------------------------------------------------
# Recommendation templates for on-page issues
# ---------------------------------------------------------------------------

ONPAGE_RECOMMENDATION_TEMPLATES = MappingProxyType({
    "missing-title": {
        "title": "Add a Page Title",
        "description": "Every page needs a unique, descriptive title tag. "
                       "It's the most important on-page SEO element.",
        "action_items": (
            "Add a <title> tag in your page's <head> section",
            "Include your primary keyword near the beginning",
            "Keep it between 20-60 characters",
            "Make it compelling to encourage clicks from search results",
        ),
    },
    "title-too-long": {
        "title": "Shorten Your Title Tag",
        "description": "Your title is too long and will be truncated in search "
                       "results, reducing its effectiveness.",
        "action_items": (
            "Trim your title to 60 characters or fewer",
            "Keep the most important keywords at the beginning",
            "Remove filler words and unnecessary branding",
            "Test how it appears with a SERP preview tool",
        ),
    },
    "title-too-short": {
        "title": "Expand Your Title Tag",
        "description": "Your title is too short to be effective. You're missing "
                       "an opportunity to include relevant keywords.",
        "action_items": (
            "Expand your title to at least 20 characters",
            "Include your primary keyword and location",
            "Add a compelling value proposition",
            "Consider the format: Primary Keyword - Brand Name",
        ),
    },
    "missing-meta-description": {
        "title": "Add a Meta Description",
        "description": "Without a meta description, Google generates one "
                       "automatically, which may not represent your page well.",
        "action_items": (
            "Add a <meta name='description'> tag in your <head>",
            "Write 70-160 characters summarizing the page",
            "Include your target keyword naturally",
            "Add a call to action (e.g., 'Learn more', 'Get a quote')",
            "Make it unique for every page",
        ),
    },
    "meta-description-too-long": {
        "title": "Shorten Your Meta Description",
        "description": "Your meta description is too long and will be cut off "
                       "in search results.",
        "action_items": (
            "Trim it to 160 characters or fewer",
            "Put the most important information first",
            "Include your primary keyword early on",
            "End with a clear call to action",
        ),
    },
    "meta-description-too-short": {
        "title": "Expand Your Meta Description",
        "description": "Your meta description is too short to be compelling in "
                       "search results.",
        "action_items": (
            "Expand it to at least 70 characters",
            "Describe what the user will find on the page",
            "Include relevant keywords naturally",
            "Add a compelling reason to click",
        ),
    },
    "missing-h1": {
        "title": "Add an H1 Heading",
        "description": "Your page is missing an H1 heading, which tells search "
                       "engines the main topic of the page.",
        "action_items": (
            "Add exactly one <h1> tag to your page",
            "Include your primary keyword in the H1",
            "Make it descriptive and match user search intent",
            "Ensure it's visible and prominent on the page",
        ),
    },
    "multiple-h1": {
        "title": "Use Only One H1 Heading",
        "description": "Multiple H1 tags can confuse search engines about the "
                       "page's main topic.",
        "action_items": (
            "Keep only the most relevant H1 tag",
            "Change other H1 tags to H2 or H3",
            "Ensure heading hierarchy is logical (H1 > H2 > H3)",
            "Each H1 should clearly describe the page topic",
        ),
    },
    "images-without-alt": {
        "title": "Add Alt Text to Images",
        "description": "Images without alt text miss SEO opportunities and hurt "
                       "accessibility.",
        "action_items": (
            "Add descriptive alt text to every image",
            "Include relevant keywords where natural",
            "Describe what the image shows, not just 'image of...'",
            "Keep alt text under 125 characters",
            "Use empty alt='' only for decorative images",
        ),
    },
    "no-viewport-meta": {
        "title": "Add Viewport Meta Tag",
        "description": "Without a viewport tag, your page won't display correctly "
                       "on mobile devices.",
        "action_items": (
            "Add <meta name='viewport' content='width=device-width, initial-scale=1'>",
            "Place it in the <head> section of every page",
            "Test your pages on mobile devices after adding it",
            "Ensure your CSS is responsive",
        ),
    },
    "no-canonical": {
        "title": "Add a Canonical Tag",
        "description": "A canonical tag prevents duplicate content issues and tells "
                       "Google which URL is the preferred version.",
        "action_items": (
            "Add <link rel='canonical' href='...'> in the <head>",
            "Point it to the preferred URL for each page",
            "Use absolute URLs (not relative)",
            "Ensure it's consistent with your sitemap",
        ),
    },
    "no-structured-data": {
        "title": "Add Structured Data",
        "description": "Structured data (JSON-LD) helps Google understand your "
                       "content and can enable rich search results.",
        "action_items": (
            "Add LocalBusiness schema for local businesses",
            "Include name, address, phone, opening hours",
            "Add FAQ schema if you have a FAQ section",
            "Test with Google's Rich Results Test tool",
            "Use JSON-LD format (recommended by Google)",
        ),
    },
    "not-https": {
        "title": "Switch to HTTPS",
        "description": "HTTPS is a confirmed Google ranking factor. Without it, "
                       "browsers also show 'Not Secure' warnings.",
        "action_items": (
            "Obtain an SSL certificate (free via Let's Encrypt)",
            "Install the certificate on your server",
            "Redirect all HTTP URLs to HTTPS",
            "Update internal links and canonical tags to HTTPS",
            "Update your sitemap and Google Search Console",
        ),
    },
})
