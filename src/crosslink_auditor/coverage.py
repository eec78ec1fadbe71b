"""
Internal link coverage and gap analysis.

Three independent same-site analyses:
- Pillar coverage: which blogs link to each pillar, and which relevant ones
  don't ("orphaned" blogs).
- Content gaps: pairs of blogs sharing 2+ tags that don't link either way.
- Orphans: non-homepage items with no inbound same-site links.
"""

import logging
import math
from collections import defaultdict
from typing import Sequence

from .models import ContentGap, ContentItem, PillarCoverage
from .similarity import has_theme_or_topic_overlap, shared_tags

logger = logging.getLogger(__name__)

MIN_SHARED_TAGS = 2


def _round_percent(value: float) -> int:
    """Round a percentage half up to a whole number."""
    return int(math.floor(value + 0.5))


def analyze_pillar_coverage(items: Sequence[ContentItem]) -> list[PillarCoverage]:
    """
    Measure how well each pillar page is linked from its site's blog posts.

    Args:
        items: Enriched content items for the whole portfolio.

    Returns:
        One PillarCoverage per pillar, in input order.
    """
    pillars = [item for item in items if item.is_pillar]
    blogs = [item for item in items if item.is_blog]

    results = []
    for pillar in pillars:
        same_site_blogs = [b for b in blogs if b.site == pillar.site]

        linking = [b for b in same_site_blogs if b.links_to(pillar.url)]
        linking_ids = {b.id for b in linking}
        orphaned = [
            b for b in same_site_blogs
            if b.id not in linking_ids and has_theme_or_topic_overlap(b, pillar)
        ]

        if same_site_blogs:
            percent = _round_percent(len(linking) / len(same_site_blogs) * 100)
        else:
            percent = 0

        results.append(PillarCoverage(
            pillar=pillar,
            linking_blogs=tuple(linking),
            orphaned_blogs=tuple(orphaned),
            coverage_percent=percent,
        ))

    logger.debug(f"Analyzed coverage for {len(results)} pillars")
    return results


def find_content_gaps(items: Sequence[ContentItem]) -> list[ContentGap]:
    """
    Find same-site blog pairs that share 2+ tags but don't cross-link.

    Args:
        items: Enriched content items for the whole portfolio.

    Returns:
        ContentGap records, grouped by site in first-appearance order.
    """
    by_site: dict[str, list[ContentItem]] = defaultdict(list)
    for item in items:
        if item.is_blog:
            by_site[item.site].append(item)

    gaps = []
    for site_blogs in by_site.values():
        for i, blog_a in enumerate(site_blogs):
            for blog_b in site_blogs[i + 1:]:
                tags = shared_tags(blog_a, blog_b)
                if len(tags) < MIN_SHARED_TAGS:
                    continue
                if blog_a.links_to(blog_b.url) or blog_b.links_to(blog_a.url):
                    continue
                gaps.append(ContentGap(
                    item_a=blog_a,
                    item_b=blog_b,
                    shared_tags=tuple(tags),
                    reason=f"Share {len(tags)} tags: {', '.join(tags)}",
                ))

    return gaps


def count_inbound_links(item: ContentItem, items: Sequence[ContentItem]) -> int:
    """Count other same-site items whose internal links point at this item."""
    return sum(
        1 for other in items
        if other.site == item.site
        and other.id != item.id
        and other.links_to(item.url)
    )


def find_orphans(items: Sequence[ContentItem]) -> list[ContentItem]:
    """
    Find items with zero inbound same-site links.

    The homepage is never reported as an orphan.

    Args:
        items: Content items for the whole portfolio.

    Returns:
        Orphaned items in input order.
    """
    return [
        item for item in items
        if not item.is_homepage and count_inbound_links(item, items) == 0
    ]
