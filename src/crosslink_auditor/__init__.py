"""
Cross-Link Auditor

A deterministic link-opportunity engine for a portfolio of content sites that:
- Extracts topics and classifies content into business themes
- Finds orphaned pillar links, content gaps and orphan pages
- Ranks cross-site link opportunities between blog posts
- Picks natural insertion points for missing pillar links
"""

__version__ = "1.0.0"
__author__ = "Cross-Link Auditor Team"

from .config import AuditConfig, ConfigError

from .models import (
    AuditResult,
    ContentGap,
    ContentItem,
    ContentType,
    InsertionDecision,
    InternalLink,
    LinkOpportunity,
    Paragraph,
    PillarCoverage,
    Priority,
    SimilarityResult,
    SkippedInsertion,
    Topic,
    priority_for,
)

from .topics import extract_topics
from .themes import ThemeClassifier
from .similarity import SimilarityScorer

from .coverage import (
    analyze_pillar_coverage,
    find_content_gaps,
    find_orphans,
)

from .cross_site import CrossSiteRanker

from .insertion import (
    InsertionPointSelector,
    apply_insertion,
    split_paragraphs,
)

from .auditor import CrossLinkAuditor, DuplicateContentIdError

from .content_sources import ContentScanError, scan_sites

from .reporting import (
    AuditDataError,
    AuditDataNotFoundError,
    export_opportunities,
    generate_audit_data,
    generate_markdown_report,
    load_audit_data,
    write_reports,
)

from .link_inserter import PillarLinkInserter

__all__ = [
    # Configuration
    "AuditConfig",
    "ConfigError",
    # Models
    "AuditResult",
    "ContentGap",
    "ContentItem",
    "ContentType",
    "InsertionDecision",
    "InternalLink",
    "LinkOpportunity",
    "Paragraph",
    "PillarCoverage",
    "Priority",
    "SimilarityResult",
    "SkippedInsertion",
    "Topic",
    "priority_for",
    # Scoring engine
    "extract_topics",
    "ThemeClassifier",
    "SimilarityScorer",
    "analyze_pillar_coverage",
    "find_content_gaps",
    "find_orphans",
    "CrossSiteRanker",
    "InsertionPointSelector",
    "apply_insertion",
    "split_paragraphs",
    # Pipeline
    "CrossLinkAuditor",
    "DuplicateContentIdError",
    # Scanning
    "ContentScanError",
    "scan_sites",
    # Reporting
    "AuditDataError",
    "AuditDataNotFoundError",
    "export_opportunities",
    "generate_audit_data",
    "generate_markdown_report",
    "load_audit_data",
    "write_reports",
    # Insertion
    "PillarLinkInserter",
]
