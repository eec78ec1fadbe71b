"""
Theme classification.

Maps a content item onto the fixed business-theme taxonomy using keyword
overlap with its extracted topics and keyword frequency in its body.
Multi-label: an item may belong to zero, one, or many themes.
"""

import logging
import re
from typing import Iterable, Optional

from .config import AuditConfig
from .models import ContentItem, Topic

logger = logging.getLogger(__name__)

TOPIC_MATCH_POINTS = 2


class ThemeClassifier:
    """
    Scores every theme in the taxonomy against a content item.

    A theme scores +2 for every (topic phrase, keyword) pair where the phrase
    contains the keyword, plus +1 for every whole-word occurrence of each
    keyword in the body. Themes at or above the threshold qualify.
    """

    def __init__(self, config: Optional[AuditConfig] = None):
        """
        Initialize the classifier.

        Args:
            config: Audit configuration providing taxonomy, stop words and
                the qualifying threshold. Defaults to AuditConfig().
        """
        self.config = config or AuditConfig()
        self._patterns = {
            keyword: re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
            for keywords in self.config.theme_taxonomy.values()
            for keyword in keywords
        }

    def _scoring_phrases(self, topics: Iterable[Topic]) -> list[str]:
        """Topic phrases that carry at least one non-stop word."""
        stop_words = self.config.stop_words
        return [
            t.phrase for t in topics
            if not all(word in stop_words for word in t.phrase.split())
        ]

    def score_themes(self, item: ContentItem) -> dict[str, int]:
        """
        Compute the raw score of every theme for an item.

        Args:
            item: Content item with topics already extracted.

        Returns:
            Mapping of theme name to score, in taxonomy order.
        """
        phrases = self._scoring_phrases(item.topics)
        body = item.body_text.lower()

        scores: dict[str, int] = {}
        for theme, keywords in self.config.theme_taxonomy.items():
            score = 0
            for phrase in phrases:
                for keyword in keywords:
                    if keyword in phrase:
                        score += TOPIC_MATCH_POINTS
            for keyword in keywords:
                score += len(self._patterns[keyword].findall(body))
            scores[theme] = score
        return scores

    def classify(self, item: ContentItem) -> tuple[str, ...]:
        """
        Classify an item into the themes that reach the threshold.

        Args:
            item: Content item with topics already extracted.

        Returns:
            Qualifying theme names in taxonomy order.
        """
        scores = self.score_themes(item)
        themes = tuple(
            theme for theme, score in scores.items()
            if score >= self.config.theme_score_threshold
        )
        logger.debug(f"Themes for {item.id}: {themes} (scores={scores})")
        return themes
