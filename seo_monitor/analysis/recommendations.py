"""
Recommendation Generator
========================

Turns an unordered list of issues into a deduplicated, prioritised list
of actionable recommendations, using a static rule id -> template table.
"""

from dataclasses import replace
from types import MappingProxyType
from typing import Iterable, Mapping

from loguru import logger

from ..models import Issue, Recommendation

# Knowledge base of recommendations, keyed by rule id.
RECOMMENDATION_TEMPLATES = MappingProxyType({
    "mobile-traffic-low": {
        "title": "Optimize for Mobile",
        "description": "Your mobile traffic is below average. Google uses mobile-first "
                       "indexing, meaning mobile performance directly impacts rankings.",
        "action_items": (
            "Test your site with Google's Mobile-Friendly Test tool",
            "Ensure all pages use responsive design",
            "Optimize tap targets (buttons, links) for mobile screens",
            "Reduce page weight for faster mobile loading",
            "Submit a mobile sitemap to Google Search Console",
        ),
    },
    "slow-lcp": {
        "title": "Improve Page Load Speed",
        "description": "Your page takes too long to display its main content. "
                       "This hurts both rankings and user experience.",
        "action_items": (
            "Compress and serve images in WebP/AVIF format",
            "Enable server-side caching and CDN",
            "Minimize render-blocking CSS and JavaScript",
            "Preload critical resources (fonts, hero images)",
            "Consider lazy loading for below-the-fold images",
        ),
    },
    "poor-cls": {
        "title": "Fix Layout Shifts",
        "description": "Your page layout moves while loading, which frustrates users "
                       "and hurts Core Web Vitals scores.",
        "action_items": (
            "Set explicit width/height on all images and videos",
            "Avoid dynamically injected content above the fold",
            "Use CSS font-display: swap for web fonts",
            "Reserve space for ads and embeds with CSS aspect-ratio",
        ),
    },
    "slow-fid": {
        "title": "Improve Interactivity",
        "description": "Your page is slow to respond to user input. "
                       "This can increase bounce rates.",
        "action_items": (
            "Break up long JavaScript tasks into smaller chunks",
            "Defer non-critical third-party scripts",
            "Use web workers for heavy computations",
            "Minimize main thread work during page load",
        ),
    },
    "low-ctr": {
        "title": "Improve Click-Through Rate",
        "description": "Users see your site in search results but don't click. "
                       "Better titles and descriptions can fix this.",
        "action_items": (
            "Rewrite page titles to include local keywords (city, neighborhood)",
            "Write compelling meta descriptions with calls to action",
            "Add structured data (LocalBusiness schema) for rich snippets",
            "Use numbers and power words in titles (e.g., 'Top 5', 'Best')",
            "Ensure your Google Business Profile is complete and up-to-date",
        ),
    },
    "high-bounce-rate": {
        "title": "Reduce Bounce Rate",
        "description": "Visitors are leaving your site quickly. "
                       "Improve content relevance and user experience.",
        "action_items": (
            "Ensure page content matches the search query intent",
            "Add clear calls to action above the fold",
            "Improve internal linking to guide users to related content",
            "Speed up page loading (high load time increases bounces)",
            "Add contact information prominently on every page",
        ),
    },
    "poor-position": {
        "title": "Improve Search Rankings",
        "description": "Your average search position is too low for meaningful traffic. "
                       "Focus on local SEO signals.",
        "action_items": (
            "Create location-specific landing pages",
            "Build local citations (directories, chamber of commerce)",
            "Get reviews on Google Business Profile",
            "Add internal links between related content",
            "Update and expand existing content regularly",
        ),
    },
    "low-sessions": {
        "title": "Increase Website Traffic",
        "description": "Your site has very few visitors. "
                       "A combination of SEO and local marketing can help.",
        "action_items": (
            "Claim and optimize your Google Business Profile",
            "Create a blog with locally relevant content",
            "Add your business to local directories",
            "Share content on social media consistently",
            "Consider Google Ads for immediate local visibility",
        ),
    },
    "low-impressions": {
        "title": "Increase Search Visibility",
        "description": "Your site appears in very few searches. "
                       "You need to target more keywords.",
        "action_items": (
            "Research local keywords with Google Keyword Planner",
            "Create content targeting local service queries",
            "Submit a complete XML sitemap to Search Console",
            "Ensure all pages have unique, descriptive title tags",
            "Add location-specific content to your main pages",
        ),
    },
    "indexing-low": {
        "title": "Get More Pages Indexed",
        "description": "Google has indexed very few of your pages. "
                       "More indexed pages means more potential search traffic.",
        "action_items": (
            "Submit an XML sitemap via Google Search Console",
            "Check robots.txt for accidental blocking",
            "Ensure all important pages are linked from your main navigation",
            "Add a blog or resource section with regular content",
            "Fix any crawl errors shown in Search Console",
        ),
    },
    "no-clicks": {
        "title": "Fix Zero-Click Issue",
        "description": "Your site is getting no clicks from Google Search. "
                       "This needs immediate attention.",
        "action_items": (
            "Verify your site is properly indexed in Google Search Console",
            "Check for manual actions or penalties in Search Console",
            "Ensure your robots.txt isn't blocking Googlebot",
            "Submit your sitemap and request indexing for key pages",
            "Review and fix any critical crawl errors",
        ),
    },
    "few-queries": {
        "title": "Expand Keyword Coverage",
        "description": "Your site ranks for very few search queries. "
                       "Broader keyword coverage drives more traffic.",
        "action_items": (
            "Research competitor keywords with free tools (Ubersuggest, AnswerThePublic)",
            "Create FAQ pages targeting common customer questions",
            "Add service-specific pages for each offering",
            "Write blog posts targeting long-tail local keywords",
            "Use variations and synonyms of your main keywords",
        ),
    },
})


def sort_by_severity(issues: Iterable[Issue]) -> list[Issue]:
    """Stable sort: critical, then warning, then info."""
    return sorted(issues, key=lambda issue: issue.severity.rank)


def generate_recommendations(
    issues: Iterable[Issue],
    templates: Mapping[str, Mapping] = RECOMMENDATION_TEMPLATES,
) -> list[Recommendation]:
    """
    Build prioritised recommendations from audit issues.

    Issues are walked in severity order; the first issue seen for a rule
    id wins and later ones are ignored. Rule ids without a template are
    skipped, which is not an error.

    Args:
        issues: Issues from one or more rule catalogs.
        templates: Rule id -> {title, description, action_items}.

    Returns:
        Recommendations with contiguous priorities starting at 1.
    """
    recommendations: list[Recommendation] = []
    seen: set[str] = set()

    for issue in sort_by_severity(issues):
        if issue.rule_id in seen:
            continue
        seen.add(issue.rule_id)

        template = templates.get(issue.rule_id)
        if template is None:
            logger.debug("No recommendation template for rule {}, skipping", issue.rule_id)
            continue

        recommendations.append(Recommendation(
            priority=len(recommendations) + 1,
            title=template["title"],
            description=template["description"],
            action_items=tuple(template["action_items"]),
            related_issues=(issue.rule_id,),
        ))

    return recommendations


def reprioritize(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    """Renumber a (merged) list of recommendations from 1 in list order."""
    return [
        replace(rec, priority=index)
        for index, rec in enumerate(recommendations, start=1)
    ]
