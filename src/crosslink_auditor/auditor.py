"""
Audit pipeline orchestration.

Enriches scanned content once (topics, then themes) and runs the internal
and cross-site analyses over the enriched, read-only set.
"""

import logging
from collections import Counter
from typing import Optional, Sequence

from .config import AuditConfig
from .coverage import analyze_pillar_coverage, find_content_gaps, find_orphans
from .cross_site import CrossSiteRanker
from .models import AuditResult, ContentItem
from .similarity import SimilarityScorer
from .themes import ThemeClassifier
from .topics import extract_topics

logger = logging.getLogger(__name__)


class DuplicateContentIdError(ValueError):
    """Raised when two content items share an id."""
    pass


class CrossLinkAuditor:
    """
    Runs the full cross-link audit over a portfolio of content items.

    Example:
        auditor = CrossLinkAuditor(AuditConfig())
        result = auditor.run(scan_sites("sites/"))
    """

    def __init__(self, config: Optional[AuditConfig] = None):
        self.config = config or AuditConfig()
        self.classifier = ThemeClassifier(self.config)
        self.scorer = SimilarityScorer()
        self.ranker = CrossSiteRanker(self.config, self.scorer)

    def enrich_item(self, item: ContentItem) -> ContentItem:
        """
        Return a copy of an item with topics and themes computed.

        Raises:
            ValueError: If the item was already enriched.
        """
        if item.topics or item.themes:
            raise ValueError(f"Content item {item.id} is already enriched")

        topics = tuple(extract_topics(item.body_text, self.config.topic_top_n))
        with_topics = item.enriched(topics=topics, themes=())
        return with_topics.enriched(topics=topics, themes=self.classifier.classify(with_topics))

    def enrich(self, items: Sequence[ContentItem]) -> list[ContentItem]:
        """Enrich every item independently, preserving order."""
        return [self.enrich_item(item) for item in items]

    @staticmethod
    def check_unique_ids(items: Sequence[ContentItem]) -> None:
        """
        Raises:
            DuplicateContentIdError: If any id appears more than once.
        """
        duplicates = sorted(i for i, n in Counter(item.id for item in items).items() if n > 1)
        if duplicates:
            raise DuplicateContentIdError(f"Duplicate content ids: {', '.join(duplicates)}")

    def run(self, items: Sequence[ContentItem]) -> AuditResult:
        """
        Run the audit: enrich, then coverage, gaps, orphans, cross-site.

        Args:
            items: Content items from the scanner, not yet enriched.

        Returns:
            AuditResult with every analysis populated.
        """
        self.check_unique_ids(items)

        logger.info(f"Extracting topics and themes for {len(items)} items")
        enriched = self.enrich(items)

        logger.info("Analyzing internal links")
        pillar_coverage = analyze_pillar_coverage(enriched)
        content_gaps = find_content_gaps(enriched)
        orphans = find_orphans(enriched)
        logger.info(f"Found {len(content_gaps)} content gaps and {len(orphans)} orphans")

        logger.info("Finding cross-site link opportunities")
        opportunities = self.ranker.find_opportunities(enriched)
        logger.info(f"Found {len(opportunities)} cross-site opportunities")

        return AuditResult(
            items=enriched,
            pillar_coverage=pillar_coverage,
            content_gaps=content_gaps,
            orphans=orphans,
            cross_site_opportunities=opportunities,
        )
