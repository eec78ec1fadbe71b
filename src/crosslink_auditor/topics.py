"""
Topic extraction.

Turns raw text into ranked candidate phrases (bigrams and trigrams) by
frequency, with a mild length bonus so trigrams can compete with bigrams.
"""

import math
import re
from collections import Counter

from .models import Topic

DEFAULT_TOP_N = 10

# Tokens of this length or shorter never make it into a phrase
MIN_TOKEN_LENGTH = 4

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """
    Lower-case text, replace punctuation with spaces and drop short tokens.

    Args:
        text: Raw text.

    Returns:
        Tokens in document order.
    """
    cleaned = _PUNCTUATION_RE.sub(" ", text.lower())
    return [w for w in cleaned.split() if len(w) >= MIN_TOKEN_LENGTH]


def generate_phrases(tokens: list[str]) -> list[str]:
    """
    Generate every adjacent 2-gram and 3-gram, in sliding-window order.

    At each position the bigram comes before the trigram starting there.
    """
    phrases = []
    for i in range(len(tokens) - 1):
        phrases.append(f"{tokens[i]} {tokens[i + 1]}")
        if i < len(tokens) - 2:
            phrases.append(f"{tokens[i]} {tokens[i + 1]} {tokens[i + 2]}")
    return phrases


def score_phrase(phrase: str, frequency: int) -> float:
    """Score = frequency * ln(words in phrase + 1)."""
    return frequency * math.log(len(phrase.split()) + 1)


def extract_topics(text: str, top_n: int = DEFAULT_TOP_N) -> list[Topic]:
    """
    Extract the top phrases from text by frequency-weighted score.

    Ties keep first-occurrence order. Fewer than top_n distinct phrases
    returns all of them.

    Args:
        text: Plain text to analyze.
        top_n: Maximum number of topics to return.

    Returns:
        Topics sorted by descending score.
    """
    if top_n <= 0:
        return []

    # Counter keeps first-insertion order, which the stable sort preserves.
    frequencies = Counter(generate_phrases(tokenize(text)))
    topics = [
        Topic(phrase=phrase, score=score_phrase(phrase, count))
        for phrase, count in frequencies.items()
    ]
    topics.sort(key=lambda t: t.score, reverse=True)
    return topics[:top_n]
