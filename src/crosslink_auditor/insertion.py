"""
Insertion point selection for pillar links.

Given a post's markdown body and a pillar page, scores each paragraph for
how naturally a link to the pillar would sit at its end, picks the best
one, and builds the anchor text and lead-in sentence to append.
"""

import logging
import random
import re
from typing import Iterable, Optional, Sequence

from .config import AuditConfig
from .models import InsertionDecision, InsertionOutcome, Paragraph, SkippedInsertion

logger = logging.getLogger(__name__)

PILLAR_KEYWORD_POINTS = 10
INSERTION_KEYWORD_POINTS = 3
MIDDLE_POSITION_BONUS = 5
EDGE_POSITION_PENALTY = -5
SHARED_THEME_POINTS = 3
PRODUCT_MENTION_BONUS = 5

MIDDLE_RANGE = (0.15, 0.85)
EDGE_RANGE = (0.1, 0.9)

SKIP_LINK_EXISTS = "Link already exists"
SKIP_NO_INSERTION_POINT = "No suitable insertion point found"

_PARAGRAPH_BREAK_RE = re.compile(r"\n\n+")
_HEADING_RE = re.compile(r"#+\s")
_LIST_ITEM_RE = re.compile(r"([-*+]|\d+[.)])\s")
_CODE_FENCE_RE = re.compile(r"^ {0,3}```", re.MULTILINE)
_PRODUCT_MENTION_RE = re.compile(r"\b(software|platform|tool|system|solution)\b")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_LEADING_SUPERLATIVE_RE = re.compile(r"^(Best|Top|Free)\s+", re.IGNORECASE)
_TRAILING_SUFFIX_RE = re.compile(r"\s+(Guide|20\d\d)$", re.IGNORECASE)

PRODUCT_TEMPLATES = (
    "Learn more about [{anchor}]({url})",
    "See how [{anchor}]({url}) can help",
    "Explore [{anchor}]({url}) solutions",
    "Check out [{anchor}]({url})",
)
MANAGEMENT_TEMPLATE = "Learn more about [{anchor}]({url})"
SCHEDULING_TEMPLATE = "Discover [{anchor}]({url}) options"
GENERIC_TEMPLATE = "Read more about [{anchor}]({url})"


def split_paragraphs(markdown: str) -> list[Paragraph]:
    """
    Split a markdown body on blank-line runs, keeping each block's offset.

    Blank lines inside a fenced code block do not split it, so the whole
    fence stays one block.

    Args:
        markdown: Markdown body (front matter already removed).

    Returns:
        Paragraphs in document order.
    """
    paragraphs = []
    start = 0
    for match in _PARAGRAPH_BREAK_RE.finditer(markdown):
        if _has_open_fence(markdown[start:match.start()]):
            continue
        paragraphs.append(Paragraph(index=len(paragraphs), text=markdown[start:match.start()], start=start))
        start = match.end()
    paragraphs.append(Paragraph(index=len(paragraphs), text=markdown[start:], start=start))
    return paragraphs


def _has_open_fence(text: str) -> bool:
    return len(_CODE_FENCE_RE.findall(text)) % 2 == 1


def is_excluded_paragraph(text: str, min_length: int = 100) -> bool:
    """Check whether a block can never host a link (short, heading, list, code)."""
    return (
        len(text) < min_length
        or _HEADING_RE.match(text) is not None
        or _LIST_ITEM_RE.match(text) is not None
        or _CODE_FENCE_RE.search(text) is not None
    )


def extract_pillar_keywords(title: str, stop_set: Iterable[str] = ()) -> list[str]:
    """
    Distinct meaningful words from a pillar title.

    Words of 3 characters or fewer and generic title words are dropped.
    """
    stop = set(stop_set)
    words = _NON_WORD_RE.sub(" ", title.lower()).split()
    return list(dict.fromkeys(w for w in words if len(w) > 3 and w not in stop))


def link_already_exists(markdown: str, pillar_url: str, site: str) -> bool:
    """Check for the pillar URL in absolute or site-relative form."""
    if pillar_url in markdown:
        return True
    relative = to_relative_url(pillar_url, site)
    return bool(relative) and relative != pillar_url and relative in markdown


def to_relative_url(url: str, site: str) -> str:
    """Strip the https://<site> prefix from an absolute URL."""
    return url.replace(f"https://{site}", "", 1)


def generate_anchor_text(pillar_title: str) -> str:
    """Clean a pillar title into anchor text (no superlative, no Guide/year suffix)."""
    anchor = _LEADING_SUPERLATIVE_RE.sub("", pillar_title)
    return _TRAILING_SUFFIX_RE.sub("", anchor)


def apply_insertion(file_content: str, markdown: str, decision: InsertionDecision) -> str:
    """
    Append the link sentence at the end of the chosen paragraph.

    Args:
        file_content: Full file text, front matter included.
        markdown: The body the decision was computed on, which must be the
            tail of file_content.
        decision: Insertion decision for that body.

    Returns:
        New file content, or the original if the body is not its tail.
    """
    if not file_content.endswith(markdown):
        logger.warning("Markdown body is not the tail of the file content; leaving file unchanged")
        return file_content

    position = len(file_content) - len(markdown) + decision.file_position
    return file_content[:position] + decision.link_sentence + file_content[position:]


class InsertionPointSelector:
    """
    Chooses where to append a pillar link inside a post.

    The lead-in sentence for software/platform/app pillars is picked at
    random among several templates; pass a seeded random.Random for
    repeatable output.
    """

    def __init__(self, config: Optional[AuditConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or AuditConfig()
        self.rng = rng or random.Random()

    def score_paragraph(
        self,
        paragraph: Paragraph,
        total: int,
        pillar_keywords: Sequence[str],
        target_themes: Sequence[str] = (),
    ) -> tuple[int, list[str]]:
        """
        Score one paragraph as a link host.

        Args:
            paragraph: Paragraph to score.
            total: Number of paragraphs in the document.
            pillar_keywords: Distinct keywords from the pillar title.
            target_themes: Themes of the post being edited.

        Returns:
            Tuple of (score, matched pillar keywords).
        """
        text_lower = paragraph.text.lower()
        score = 0

        matched = [kw for kw in pillar_keywords if kw in text_lower]
        score += PILLAR_KEYWORD_POINTS * len(matched)

        for keyword in self.config.insertion_keywords:
            if keyword in text_lower:
                score += INSERTION_KEYWORD_POINTS

        position = paragraph.index / total if total else 0.0
        if MIDDLE_RANGE[0] < position < MIDDLE_RANGE[1]:
            score += MIDDLE_POSITION_BONUS
        elif position < EDGE_RANGE[0] or position > EDGE_RANGE[1]:
            score += EDGE_POSITION_PENALTY

        shared = [
            theme for theme in target_themes
            if any(kw in theme.lower() for kw in pillar_keywords)
        ]
        score += SHARED_THEME_POINTS * len(shared)

        if _PRODUCT_MENTION_RE.search(text_lower):
            score += PRODUCT_MENTION_BONUS

        return score, matched

    def select(
        self,
        paragraphs: Sequence[Paragraph],
        pillar_title: str,
        target_themes: Sequence[str] = (),
    ) -> Optional[tuple[Paragraph, int, list[str]]]:
        """
        Pick the best paragraph for a pillar link.

        Excluded paragraphs are never scored. Scores at or below the
        threshold are discarded; ties go to the earliest paragraph.

        Returns:
            (paragraph, score, matched keywords), or None if nothing qualifies.
        """
        pillar_keywords = extract_pillar_keywords(pillar_title, self.config.pillar_keyword_stop_set)
        total = len(paragraphs)

        best = None
        for paragraph in paragraphs:
            if is_excluded_paragraph(paragraph.text, self.config.min_paragraph_length):
                continue
            score, matched = self.score_paragraph(paragraph, total, pillar_keywords, target_themes)
            if score <= self.config.insertion_score_threshold:
                continue
            if best is None or score > best[1]:
                best = (paragraph, score, matched)

        return best

    def generate_link_phrase(self, url: str, anchor_text: str, pillar_title: str) -> str:
        """
        Build the sentence appended after the paragraph, leading space included.
        """
        title = pillar_title.lower()
        if "software" in title or "platform" in title or "app" in title:
            template = self.rng.choice(PRODUCT_TEMPLATES)
        elif "crm" in title or "management" in title:
            template = MANAGEMENT_TEMPLATE
        elif "scheduling" in title or "booking" in title:
            template = SCHEDULING_TEMPLATE
        else:
            template = GENERIC_TEMPLATE

        return f" {template.format(anchor=anchor_text, url=url)}."

    def plan(
        self,
        markdown: str,
        pillar_title: str,
        pillar_url: str,
        site: str,
        target_themes: Sequence[str] = (),
    ) -> InsertionOutcome:
        """
        Decide how to add a pillar link to a post body.

        The existing-link guard runs before any scoring.

        Args:
            markdown: Post body without front matter.
            pillar_title: Title of the pillar page.
            pillar_url: Absolute URL of the pillar page.
            site: Host of the site both belong to.
            target_themes: Themes of the post.

        Returns:
            InsertionDecision, or SkippedInsertion with the reason.
        """
        if link_already_exists(markdown, pillar_url, site):
            return SkippedInsertion(SKIP_LINK_EXISTS)

        best = self.select(split_paragraphs(markdown), pillar_title, target_themes)
        if best is None:
            return SkippedInsertion(SKIP_NO_INSERTION_POINT)

        paragraph, score, matched = best
        anchor_text = generate_anchor_text(pillar_title)
        link_sentence = self.generate_link_phrase(to_relative_url(pillar_url, site), anchor_text, pillar_title)

        return InsertionDecision(
            file_position=paragraph.end,
            paragraph_text=paragraph.text,
            anchor_text=anchor_text,
            link_sentence=link_sentence,
            score=score,
            matched_keywords=tuple(matched),
        )
