"""
Cross-site link opportunity ranking.

Scores every blog-to-blog pair across different sites, keeps the pairs
above the confidence threshold, derives anchor text and a context snippet,
then de-duplicates reciprocal pairs, caps fan-out per source and sorts.
"""

import logging
import re
from typing import Optional, Sequence

from .config import AuditConfig
from .models import GENERAL_THEME, ContentItem, LinkOpportunity
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)

ANCHOR_TOPIC_LIMIT = 5
SNIPPET_TOPIC_LIMIT = 3
SNIPPET_LENGTH = 150
SNIPPET_ELLIPSIS = "..."
EMPTY_SNIPPET = "N/A"
FALLBACK_TOPIC = "guide"

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


class CrossSiteRanker:
    """
    Finds and ranks links between posts on different sites.

    Pillars and homepages are never considered; only blog-to-blog links
    read naturally across sites.
    """

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        scorer: Optional[SimilarityScorer] = None,
    ):
        """
        Initialize the ranker.

        Args:
            config: Audit configuration (threshold, fan-out cap, industry
                keywords). Defaults to AuditConfig().
            scorer: Similarity scorer. Defaults to SimilarityScorer().
        """
        self.config = config or AuditConfig()
        self.scorer = scorer or SimilarityScorer()

    def find_best_anchor_text(self, source: ContentItem, target: ContentItem) -> str:
        """
        Pick anchor text for a link from source to target.

        Order of preference: the target title verbatim in the source body,
        then the first of the target's top 5 topics appearing as a whole
        word in the source body, then "<industry keyword> <top topic>".
        """
        if target.title and target.title.lower() in source.body_text.lower():
            return target.title

        for topic in target.topics[:ANCHOR_TOPIC_LIMIT]:
            pattern = rf"\b{re.escape(topic.phrase)}\b"
            if re.search(pattern, source.body_text, re.IGNORECASE):
                return topic.phrase

        industry = self.config.industry_keyword_for(target.site)
        top_topic = target.topics[0].phrase if target.topics else FALLBACK_TOPIC
        return f"{industry} {top_topic}"

    def find_context_snippet(self, source: ContentItem, target: ContentItem) -> str:
        """
        Find the sentence in the source that best frames the link.

        Returns the first sentence containing one of the target's top 3
        topic phrases, else the source's first sentence, cut to 150
        characters with an ellipsis.
        """
        sentences = _SENTENCE_SPLIT_RE.split(source.body_text)
        keywords = [t.phrase for t in target.topics[:SNIPPET_TOPIC_LIMIT]]

        for sentence in sentences:
            sentence_lower = sentence.lower()
            if any(keyword in sentence_lower for keyword in keywords):
                return sentence.strip()[:SNIPPET_LENGTH] + SNIPPET_ELLIPSIS

        first = sentences[0].strip() if sentences else ""
        if not first:
            return EMPTY_SNIPPET
        return first[:SNIPPET_LENGTH] + SNIPPET_ELLIPSIS

    def find_candidates(self, items: Sequence[ContentItem]) -> list[LinkOpportunity]:
        """
        Score every ordered cross-site blog pair and keep those above threshold.

        Args:
            items: Enriched content items for the whole portfolio.

        Returns:
            Unfiltered opportunities in (source, target) scan order.
        """
        blogs = [item for item in items if item.is_blog]
        threshold = self.config.cross_site_threshold

        candidates = []
        for source in blogs:
            for target in blogs:
                if target.site == source.site:
                    continue
                similarity = self.scorer.score(source, target)
                if similarity.score < threshold:
                    continue
                candidates.append(LinkOpportunity(
                    source=source,
                    target=target,
                    confidence=similarity.score,
                    anchor_text=self.find_best_anchor_text(source, target),
                    context_snippet=self.find_context_snippet(source, target),
                    theme=similarity.primary_theme or GENERAL_THEME,
                    reason=similarity.reason,
                ))

        logger.debug(f"{len(candidates)} cross-site candidates above {threshold}")
        return candidates

    def filter_and_rank(self, opportunities: Sequence[LinkOpportunity]) -> list[LinkOpportunity]:
        """
        Post-process candidates: reciprocal dedup, fan-out cap, then sort.

        1. When both A->B and B->A exist, keep only the higher-confidence
           direction (the first seen on a tie).
        2. Walk the survivors in order, keeping at most max_links_per_source
           per source.
        3. Sort by confidence, descending (stable).
        """
        by_direction = {(o.source.id, o.target.id): o for o in opportunities}
        kept_pairs: set[tuple[str, ...]] = set()

        deduped = []
        for opp in opportunities:
            pair_key = tuple(sorted((opp.source.id, opp.target.id)))
            if pair_key in kept_pairs:
                continue
            reciprocal = by_direction.get((opp.target.id, opp.source.id))
            if reciprocal is not None:
                if opp.confidence < reciprocal.confidence:
                    continue
                kept_pairs.add(pair_key)
            deduped.append(opp)

        per_source: dict[str, int] = {}
        capped = []
        for opp in deduped:
            count = per_source.get(opp.source.id, 0)
            if count < self.config.max_links_per_source:
                capped.append(opp)
                per_source[opp.source.id] = count + 1

        capped.sort(key=lambda o: o.confidence, reverse=True)
        return capped

    def find_opportunities(self, items: Sequence[ContentItem]) -> list[LinkOpportunity]:
        """
        Find ranked cross-site link opportunities.

        Args:
            items: Enriched content items for the whole portfolio.

        Returns:
            Opportunities sorted by descending confidence.
        """
        return self.filter_and_rank(self.find_candidates(items))
