"""
Data models for the cross-link auditor.

This module defines the core data structures shared by the scanning,
scoring, reporting, and insertion layers.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union


class ContentType(Enum):
    """Kinds of content the auditor understands."""
    PILLAR = "pillar"
    BLOG = "blog"
    HOMEPAGE = "homepage"


class Priority(Enum):
    """Priority tier of a link opportunity."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


HIGH_PRIORITY_THRESHOLD = 0.8
MEDIUM_PRIORITY_THRESHOLD = 0.7

GENERAL_THEME = "General"


def priority_for(confidence: float) -> Priority:
    """Map a confidence score to its priority tier."""
    if confidence > HIGH_PRIORITY_THRESHOLD:
        return Priority.HIGH
    if confidence > MEDIUM_PRIORITY_THRESHOLD:
        return Priority.MEDIUM
    return Priority.LOW


@dataclass(frozen=True)
class InternalLink:
    """A same-site link found in a content body."""
    anchor_text: str
    url: str


@dataclass(frozen=True)
class Topic:
    """A ranked 2- or 3-word phrase extracted from content."""
    phrase: str
    score: float

    @property
    def word_count(self) -> int:
        """Number of words in the phrase."""
        return len(self.phrase.split())


@dataclass(frozen=True)
class ContentItem:
    """
    One page or post in the portfolio.

    Created by the scanning layer with empty topics/themes, then enriched
    exactly once by the auditor. Enrichment returns a new instance.
    """
    id: str
    site: str
    type: ContentType
    url: str
    title: str
    description: str = ""
    body_text: str = ""
    word_count: int = 0
    tags: tuple[str, ...] = ()
    internal_links: tuple[InternalLink, ...] = ()
    topics: tuple[Topic, ...] = ()
    themes: tuple[str, ...] = ()
    slug: str = ""
    date: str = ""
    file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Normalize containers and validate derived fields."""
        if self.word_count < 0:
            raise ValueError(f"word_count must be >= 0, got {self.word_count}")
        # Tags behave as an ordered set: first occurrence wins.
        object.__setattr__(self, "tags", tuple(dict.fromkeys(self.tags)))
        object.__setattr__(self, "internal_links", tuple(self.internal_links))
        object.__setattr__(self, "topics", tuple(self.topics))
        object.__setattr__(self, "themes", tuple(self.themes))

    @property
    def is_blog(self) -> bool:
        return self.type is ContentType.BLOG

    @property
    def is_pillar(self) -> bool:
        return self.type is ContentType.PILLAR

    @property
    def is_homepage(self) -> bool:
        return self.type is ContentType.HOMEPAGE

    @property
    def topic_phrases(self) -> tuple[str, ...]:
        """Topic phrases in rank order."""
        return tuple(t.phrase for t in self.topics)

    def links_to(self, url: str) -> bool:
        """Check whether the body contains an internal link to exactly this URL."""
        return any(link.url == url for link in self.internal_links)

    def enriched(self, topics: tuple[Topic, ...], themes: tuple[str, ...]) -> "ContentItem":
        """Return a copy with topics and themes populated."""
        return replace(self, topics=tuple(topics), themes=tuple(themes))


@dataclass(frozen=True)
class SimilarityResult:
    """Relevance between two content items."""
    score: float
    reason: str = ""
    primary_theme: Optional[str] = None


@dataclass(frozen=True)
class LinkOpportunity:
    """A candidate directed link from source to target."""
    source: ContentItem
    target: ContentItem
    confidence: float
    anchor_text: str
    context_snippet: str
    theme: str = GENERAL_THEME
    reason: str = ""
    kind: str = "cross-site"

    @property
    def priority(self) -> Priority:
        """Priority tier derived from confidence."""
        return priority_for(self.confidence)


@dataclass(frozen=True)
class PillarCoverage:
    """Which same-site blogs link to a pillar, and which relevant ones don't."""
    pillar: ContentItem
    linking_blogs: tuple[ContentItem, ...] = ()
    orphaned_blogs: tuple[ContentItem, ...] = ()
    coverage_percent: int = 0

    @property
    def coverage(self) -> str:
        """Coverage as a whole-number percentage string."""
        return str(self.coverage_percent)


@dataclass(frozen=True)
class ContentGap:
    """Two same-site posts sharing tags that don't link to each other."""
    item_a: ContentItem
    item_b: ContentItem
    shared_tags: tuple[str, ...]
    reason: str


@dataclass
class AuditResult:
    """Everything a single audit run produces."""
    items: list[ContentItem] = field(default_factory=list)
    pillar_coverage: list[PillarCoverage] = field(default_factory=list)
    content_gaps: list[ContentGap] = field(default_factory=list)
    orphans: list[ContentItem] = field(default_factory=list)
    cross_site_opportunities: list[LinkOpportunity] = field(default_factory=list)

    @property
    def total_orphaned_blogs(self) -> int:
        """Sum of orphaned blogs across all pillars."""
        return sum(len(p.orphaned_blogs) for p in self.pillar_coverage)

    @property
    def internal_opportunity_count(self) -> int:
        """Content gaps plus missing pillar links."""
        return len(self.content_gaps) + self.total_orphaned_blogs

    def items_for_site(self, site: str) -> list[ContentItem]:
        """Get all items belonging to a site."""
        return [item for item in self.items if item.site == site]

    def opportunities_by_priority(self, priority: Priority) -> list[LinkOpportunity]:
        """Get cross-site opportunities in a given priority tier."""
        return [o for o in self.cross_site_opportunities if o.priority is priority]


@dataclass(frozen=True)
class Paragraph:
    """A block of markdown body text with its offset in the body."""
    index: int
    text: str
    start: int

    @property
    def end(self) -> int:
        """Offset just past the last character of the paragraph."""
        return self.start + len(self.text)


@dataclass(frozen=True)
class InsertionDecision:
    """Where and how to append a pillar link to a post."""
    file_position: int
    paragraph_text: str
    anchor_text: str
    link_sentence: str
    score: int = 0
    matched_keywords: tuple[str, ...] = ()

    @property
    def preview(self) -> str:
        """One-line description of the change."""
        return f'Added at end of paragraph: "{self.link_sentence.strip()}"'


@dataclass(frozen=True)
class SkippedInsertion:
    """An insertion that was deliberately not made."""
    reason: str

    def __str__(self) -> str:
        return f"skipped: {self.reason}"


InsertionOutcome = Union[InsertionDecision, SkippedInsertion]
