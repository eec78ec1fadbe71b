"""
Similarity scoring between content items.

The score is an additive union of three separately capped signals (shared
themes, shared topics, shared tags), globally capped at 1.0. All three
signals are symmetric, so score(a, b) == score(b, a).
"""

from .models import ContentItem, SimilarityResult

THEME_WEIGHT = 0.3
THEME_CAP = 0.4
TOPIC_WEIGHT = 0.3
TOPIC_CAP = 0.3
TAG_WEIGHT = 0.15
TAG_CAP = 0.3
MAX_SCORE = 1.0


def shared_themes(a: ContentItem, b: ContentItem) -> list[str]:
    """Themes of a that b also has, in a's order."""
    return [t for t in a.themes if t in b.themes]


def shared_topics(a: ContentItem, b: ContentItem) -> list[str]:
    """Topic phrases present in both items, in a's rank order."""
    phrases_b = set(b.topic_phrases)
    return [p for p in dict.fromkeys(a.topic_phrases) if p in phrases_b]


def shared_tags(a: ContentItem, b: ContentItem) -> list[str]:
    """Tags of a that b also has, in a's order."""
    return [t for t in a.tags if t in b.tags]


def has_theme_or_topic_overlap(a: ContentItem, b: ContentItem, min_topics: int = 2) -> bool:
    """
    Check whether two items are topically related.

    Args:
        a: First item.
        b: Second item.
        min_topics: Shared topic phrases needed when no theme is shared.

    Returns:
        True if they share a theme or at least min_topics topic phrases.
    """
    if shared_themes(a, b):
        return True
    return len(shared_topics(a, b)) >= min_topics


class SimilarityScorer:
    """Computes a bounded relevance score between two content items."""

    def score(self, a: ContentItem, b: ContentItem) -> SimilarityResult:
        """
        Score the relevance of two items.

        Args:
            a: First item (its theme order decides primary_theme).
            b: Second item.

        Returns:
            SimilarityResult with score in [0, 1], a reason string listing
            the signals that fired (themes, topics, tags), and the first
            shared theme if any.
        """
        score = 0.0
        reasons = []
        primary_theme = None

        themes = shared_themes(a, b)
        if themes:
            score += min(len(themes) * THEME_WEIGHT, THEME_CAP)
            primary_theme = themes[0]
            reasons.append(f"{len(themes)} shared themes")

        topics = shared_topics(a, b)
        if topics:
            denominator = max(len(set(a.topic_phrases)), len(set(b.topic_phrases)))
            score += min((len(topics) / denominator) * TOPIC_WEIGHT, TOPIC_CAP)
            reasons.append(f"{len(topics)} shared topics")

        # Tag overlap only applies when both sides carry tags (blogs)
        if a.tags and b.tags:
            tags = shared_tags(a, b)
            if tags:
                score += min(len(tags) * TAG_WEIGHT, TAG_CAP)
                reasons.append(f"{len(tags)} shared tags")

        return SimilarityResult(
            score=min(score, MAX_SCORE),
            reason=" | ".join(reasons),
            primary_theme=primary_theme,
        )
