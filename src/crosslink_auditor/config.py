# -*- coding: utf-8 -*-
"""
Centralized configuration for the cross-link auditor.

This module provides a frozen configuration dataclass holding the static data
the scoring engine depends on: the site portfolio, the theme taxonomy, stop
words, industry keywords per site, insertion keywords, and numeric thresholds.
A single instance is built once per run and injected into every component.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union

import yaml


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""
    pass


DEFAULT_SITES = (
    "mydojo.software",
    "petcare.software",
    "mydriveschool.software",
    "mytattoo.software",
)

# Order matters: theme sets are reported in taxonomy order.
DEFAULT_THEME_TAXONOMY = {
    "Business operations": (
        "scheduling", "booking", "appointments", "calendar", "availability",
        "reservation", "online booking", "appointment management", "capacity",
    ),
    "Client management": (
        "customer", "client", "crm", "communication", "retention",
        "relationship", "engagement", "customer service", "loyalty",
    ),
    "Billing & payments": (
        "billing", "payment", "invoicing", "subscription", "pricing",
        "revenue", "deposits", "payment processing", "financial",
    ),
    "Marketing & growth": (
        "marketing", "seo", "social media", "advertising", "lead generation",
        "referrals", "promotion", "growth", "content marketing",
    ),
    "Staff management": (
        "staff", "employee", "instructor", "team", "scheduling",
        "payroll", "training", "workforce", "hiring",
    ),
    "Software & technology": (
        "software", "saas", "platform", "integration", "automation",
        "digital", "technology", "app", "system", "migration",
    ),
    "Compliance & admin": (
        "compliance", "insurance", "licensing", "records", "documentation",
        "legal", "regulation", "certification", "liability",
    ),
    "Small business general": (
        "business plan", "starting", "startup", "entrepreneur", "scaling",
        "profitability", "operations", "management", "business owner",
    ),
}

DEFAULT_STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "about", "as", "into", "through", "during",
    "before", "after", "above", "below", "between", "under", "again",
    "this", "that", "these", "those", "can", "will", "just", "should",
    "your", "have", "has", "had", "been", "being", "more", "most", "some",
    "also", "they", "them", "their", "there", "when", "where", "which",
    "while", "who", "what", "software", "business", "help", "make", "need",
})

DEFAULT_INDUSTRY_KEYWORDS = {
    "mydojo.software": "martial arts",
    "petcare.software": "pet care",
    "mydriveschool.software": "driving school",
    "mytattoo.software": "tattoo studio",
}

# Words that suggest a paragraph is a natural place for a product link
DEFAULT_INSERTION_KEYWORDS = (
    "manage", "managing", "management",
    "schedule", "scheduling",
    "booking", "book",
    "software", "platform", "tool", "system",
    "automate", "automation",
    "organize", "organization",
    "track", "tracking",
    "streamline",
    "efficient", "efficiency",
    "solution",
)

DEFAULT_PILLAR_KEYWORD_STOP_SET = frozenset({
    "software", "guide", "complete", "best", "free",
})

DEFAULT_EXCLUDED_PAGES = (
    "404.astro", "terms.astro", "privacy-policy.astro",
    "about.astro", "contact.astro", "pricing.astro",
)

FALLBACK_INDUSTRY_KEYWORD = "business"


def _frozen_taxonomy(taxonomy: Mapping[str, object]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({
        name: tuple(str(k).lower() for k in keywords)
        for name, keywords in taxonomy.items()
    })


@dataclass(frozen=True)
class AuditConfig:
    """
    Static configuration for a cross-link audit run.

    Attributes:
        sites: Site hosts in the portfolio, in report order.
        theme_taxonomy: Ordered mapping of theme name to its keywords.
        stop_words: Words ignored when topic phrases are matched to themes.
        industry_keywords: Short industry phrase per site, used for fallback
            anchor text on cross-site links.
        insertion_keywords: Action/management words that make a paragraph a
            good host for a pillar link.
        pillar_keyword_stop_set: Generic title words never used as pillar
            keywords.
        excluded_pages: Astro page filenames that are never analyzed.

        topic_top_n: Number of topics kept per content item.
        theme_score_threshold: Minimum score for a theme to qualify.
        cross_site_threshold: Minimum similarity for a cross-site opportunity.
        max_links_per_source: Maximum cross-site opportunities per source post.
        max_pillar_links_per_post: Link budget per post; the inserter looks at
            up to five times this many orphaned blogs per pillar.
        min_paragraph_length: Paragraphs shorter than this never host a link.
        insertion_score_threshold: Paragraph scores at or below this are
            discarded.
    """

    sites: tuple[str, ...] = DEFAULT_SITES
    theme_taxonomy: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: _frozen_taxonomy(DEFAULT_THEME_TAXONOMY)
    )
    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
    industry_keywords: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_INDUSTRY_KEYWORDS))
    )
    insertion_keywords: tuple[str, ...] = DEFAULT_INSERTION_KEYWORDS
    pillar_keyword_stop_set: frozenset[str] = DEFAULT_PILLAR_KEYWORD_STOP_SET
    excluded_pages: tuple[str, ...] = DEFAULT_EXCLUDED_PAGES

    topic_top_n: int = 10
    theme_score_threshold: int = 5
    cross_site_threshold: float = 0.6
    max_links_per_source: int = 3
    max_pillar_links_per_post: int = 3
    min_paragraph_length: int = 100
    insertion_score_threshold: int = 10

    def __post_init__(self):
        """Validate configuration values."""
        if not self.sites:
            raise ValueError("sites must not be empty")
        if not self.theme_taxonomy:
            raise ValueError("theme_taxonomy must not be empty")
        for theme, keywords in self.theme_taxonomy.items():
            if not keywords:
                raise ValueError(f"theme '{theme}' has no keywords")
        if self.topic_top_n < 1:
            raise ValueError(f"topic_top_n must be >= 1, got {self.topic_top_n}")
        if self.theme_score_threshold < 1:
            raise ValueError(
                f"theme_score_threshold must be >= 1, got {self.theme_score_threshold}"
            )
        if not 0.0 <= self.cross_site_threshold <= 1.0:
            raise ValueError(
                f"cross_site_threshold must be between 0 and 1, "
                f"got {self.cross_site_threshold}"
            )
        if self.max_links_per_source < 1:
            raise ValueError(
                f"max_links_per_source must be >= 1, got {self.max_links_per_source}"
            )
        if self.max_pillar_links_per_post < 1:
            raise ValueError(
                f"max_pillar_links_per_post must be >= 1, "
                f"got {self.max_pillar_links_per_post}"
            )
        if self.min_paragraph_length < 0:
            raise ValueError(
                f"min_paragraph_length must be >= 0, got {self.min_paragraph_length}"
            )

    def industry_keyword_for(self, site: str) -> str:
        """Get the industry phrase for a site, falling back to 'business'."""
        return self.industry_keywords.get(site, FALLBACK_INDUSTRY_KEYWORD)

    @property
    def theme_names(self) -> tuple[str, ...]:
        """Theme names in taxonomy order."""
        return tuple(self.theme_taxonomy)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "AuditConfig":
        """Create config from a plain mapping of overrides.

        Args:
            data: Mapping of field name to value. Lists are converted to the
                immutable container the field expects.

        Returns:
            AuditConfig with the overrides applied.

        Raises:
            ConfigError: If a key is not a configuration field or a value
                fails validation.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        overrides: dict[str, object] = {}
        for key, value in data.items():
            if key == "theme_taxonomy":
                if not isinstance(value, Mapping):
                    raise ConfigError("theme_taxonomy must be a mapping of theme to keywords")
                for theme, keywords in value.items():
                    if isinstance(keywords, str) or not isinstance(keywords, (list, tuple)):
                        raise ConfigError(f"Keywords for theme {theme!r} must be a list")
                overrides[key] = _frozen_taxonomy(value)
            elif key == "industry_keywords":
                if not isinstance(value, Mapping):
                    raise ConfigError("industry_keywords must be a mapping of site to phrase")
                overrides[key] = MappingProxyType({str(k): str(v) for k, v in value.items()})
            elif key in ("stop_words", "pillar_keyword_stop_set"):
                overrides[key] = frozenset(str(v).lower() for v in value)
            elif key in ("sites", "insertion_keywords", "excluded_pages"):
                overrides[key] = tuple(str(v) for v in value)
            else:
                overrides[key] = value

        try:
            return cls(**overrides)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}")

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "AuditConfig":
        """Load configuration overrides from a YAML file.

        Args:
            file_path: Path to the YAML file.

        Returns:
            AuditConfig with the file's values applied over the defaults.

        Raises:
            ConfigError: If the file is missing, unreadable, or invalid.
        """
        path = Path(file_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read config file: {e}")

        if not isinstance(data, Mapping):
            raise ConfigError("Config file must contain a mapping at the top level")

        return cls.from_mapping(data)
