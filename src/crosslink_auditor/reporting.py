"""
Report generation for audit results.

Produces:
- A markdown report for humans (cross-link-audit-report.md)
- A JSON data file consumed by the link inserter (cross-link-audit-data.json)
- An optional spreadsheet of cross-site opportunities (.xlsx or .csv)
"""

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from .models import GENERAL_THEME, AuditResult, ContentItem, Priority

logger = logging.getLogger(__name__)


class AuditDataError(Exception):
    """Raised when audit data cannot be used by a later stage."""
    pass


class AuditDataNotFoundError(AuditDataError):
    """Raised when the audit data file does not exist."""
    pass


REPORT_FILENAME = "cross-link-audit-report.md"
DATA_FILENAME = "cross-link-audit-data.json"

LIST_PREVIEW_LIMIT = 5
HIGH_PRIORITY_DETAIL_LIMIT = 20
MEDIUM_PRIORITY_LIST_LIMIT = 10
INVENTORY_TOPIC_LIMIT = 5

REQUIRED_SECTIONS = ("inventory", "internalAnalysis")

SPREADSHEET_COLUMNS = [
    "Priority", "Confidence", "Source Site", "Source Title", "Source URL",
    "Target Site", "Target Title", "Target URL", "Anchor Text", "Theme",
    "Reason", "Context",
]


def _item_ref(item: ContentItem) -> dict:
    return {"id": item.id, "title": item.title, "url": item.url}


def _item_ref_with_site(item: ContentItem) -> dict:
    return {"id": item.id, "title": item.title, "url": item.url, "site": item.site}


def generate_markdown_report(
    result: AuditResult,
    sites: Sequence[str],
    generated_on: Optional[date] = None,
) -> str:
    """
    Render the cross-link audit as markdown.

    Args:
        result: Completed audit.
        sites: Sites in report order.
        generated_on: Report date. Defaults to today.

    Returns:
        Markdown text.
    """
    generated_on = generated_on or date.today()
    lines = ["# Cross-Link Audit Report", "", f"Generated: {generated_on.isoformat()}", ""]

    lines += [
        "## Executive Summary",
        "",
        f"- Total content items analyzed: {len(result.items)}",
        f"- Internal link opportunities: {result.internal_opportunity_count}",
        f"- Cross-site link opportunities: {len(result.cross_site_opportunities)}",
        f"- Orphan pages found: {len(result.orphans)}",
        "",
    ]

    lines += ["## 1. Content Inventory by Site", ""]
    for site in sites:
        site_items = result.items_for_site(site)
        pages = sum(1 for c in site_items if c.is_pillar or c.is_homepage)
        blogs = sum(1 for c in site_items if c.is_blog)
        lines += [
            f"### {site}",
            f"- {pages} pillar pages",
            f"- {blogs} blog posts",
            f"- Total: {len(site_items)} items",
            "",
        ]

    lines += ["## 2. Internal Link Analysis", ""]
    for site in sites:
        lines += [f"### {site}", "", "#### Pillar-to-Blog Coverage", ""]
        for coverage in (p for p in result.pillar_coverage if p.pillar.site == site):
            lines.append(
                f"**{coverage.pillar.title}** ({len(coverage.linking_blogs)} linking, "
                f"{len(coverage.orphaned_blogs)} missing)"
            )
            lines.append("")
            if coverage.orphaned_blogs:
                lines.append("Missing pillar links in:")
                for blog in coverage.orphaned_blogs[:LIST_PREVIEW_LIMIT]:
                    lines.append(f"- [{blog.title}]({blog.url})")
                remaining = len(coverage.orphaned_blogs) - LIST_PREVIEW_LIMIT
                if remaining > 0:
                    lines.append(f"- ...and {remaining} more")
                lines.append("")

        site_gaps = [g for g in result.content_gaps if g.item_a.site == site]
        if site_gaps:
            lines += [f"#### Related Content Gaps ({len(site_gaps)} pairs)", ""]
            for gap in site_gaps[:LIST_PREVIEW_LIMIT]:
                lines.append(
                    f"- [{gap.item_a.title}]({gap.item_a.url}) ↔ "
                    f"[{gap.item_b.title}]({gap.item_b.url})"
                )
                lines.append(f"  - {gap.reason}")
            remaining = len(site_gaps) - LIST_PREVIEW_LIMIT
            if remaining > 0:
                lines.append(f"- ...and {remaining} more pairs")
            lines.append("")

    high = result.opportunities_by_priority(Priority.HIGH)
    medium = result.opportunities_by_priority(Priority.MEDIUM)
    low = result.opportunities_by_priority(Priority.LOW)

    lines += ["## 3. Cross-Site Link Opportunities", ""]
    lines += [f"### High Priority ({len(high)} opportunities)", ""]
    for idx, opp in enumerate(high[:HIGH_PRIORITY_DETAIL_LIMIT], start=1):
        lines += [
            f"{idx}. **{opp.source.site}** → **{opp.target.site}**",
            f"   - Source: [{opp.source.title}]({opp.source.url})",
            f"   - Target: [{opp.target.title}]({opp.target.url})",
            f'   - Anchor: "{opp.anchor_text}"',
            f"   - Theme: {opp.theme}",
            f"   - Confidence: {opp.confidence * 100:.0f}%",
            f"   - Context: {opp.context_snippet}",
            "",
        ]

    if medium:
        lines += [f"### Medium Priority ({len(medium)} opportunities)", "", "[Showing first 10]", ""]
        for idx, opp in enumerate(medium[:MEDIUM_PRIORITY_LIST_LIMIT], start=1):
            lines.append(
                f'{idx}. {opp.source.site} → {opp.target.site}: "{opp.anchor_text}" ({opp.theme})'
            )
        lines.append("")

    if low:
        lines += [f"### Low Priority ({len(low)} opportunities)", "", "See JSON data file for full list.", ""]

    if result.orphans:
        lines += [f"## 4. Orphan Pages ({len(result.orphans)} pages with 0 inbound links)", ""]
        for orphan in result.orphans:
            lines.append(f"- [{orphan.title}]({orphan.url}) ({orphan.site})")
        lines.append("")

    lines += [
        "## 5. Implementation Recommendations",
        "",
        "### Phase 1: Critical Internal Links (Week 1)",
        f"- Add {result.total_orphaned_blogs} missing pillar links in blog posts",
        f"- Connect {len(result.content_gaps)} related blog post pairs",
        "",
        "### Phase 2: High-Value Cross-Links (Week 2-3)",
        f"- Implement top {min(HIGH_PRIORITY_DETAIL_LIMIT, len(high))} cross-site "
        f"opportunities (confidence > 80%)",
    ]
    themes = [t for t in dict.fromkeys(o.theme for o in high) if t != GENERAL_THEME]
    if themes:
        lines.append(f"- Focus on {', '.join(themes)} themes")
    lines += [
        "",
        "### Phase 3: Orphan Resolution (Week 4)",
        f"- Add inbound links to {len(result.orphans)} orphan pages",
        "",
    ]

    return "\n".join(lines) + "\n"


def generate_audit_data(
    result: AuditResult,
    sites: Sequence[str],
    generated_at: Optional[datetime] = None,
) -> dict:
    """
    Build the JSON-ready audit data.

    Args:
        result: Completed audit.
        sites: Sites to count in the metadata.
        generated_at: Timestamp for the metadata. Defaults to now (UTC).

    Returns:
        Dict with metadata, inventory, internalAnalysis and
        crossSiteOpportunities sections.
    """
    generated_at = generated_at or datetime.now(timezone.utc)

    return {
        "metadata": {
            "generatedAt": generated_at.isoformat(),
            "totalItems": len(result.items),
            "sites": {site: len(result.items_for_site(site)) for site in sites},
        },
        "inventory": [
            {
                "id": c.id,
                "site": c.site,
                "type": c.type.value,
                "url": c.url,
                "title": c.title,
                "wordCount": c.word_count,
                "tags": list(c.tags),
                "themes": list(c.themes),
                "internalLinksCount": len(c.internal_links),
                "topics": [
                    {"phrase": t.phrase, "score": t.score}
                    for t in c.topics[:INVENTORY_TOPIC_LIMIT]
                ],
                "filePath": c.file_path,
            }
            for c in result.items
        ],
        "internalAnalysis": {
            "pillarCoverage": [
                {
                    "pillar": _item_ref(p.pillar),
                    "linkingCount": len(p.linking_blogs),
                    "orphanedCount": len(p.orphaned_blogs),
                    "orphanedBlogs": [_item_ref(b) for b in p.orphaned_blogs],
                    "coverage": p.coverage,
                }
                for p in result.pillar_coverage
            ],
            "contentGaps": [
                {
                    "blogA": _item_ref(g.item_a),
                    "blogB": _item_ref(g.item_b),
                    "sharedTags": list(g.shared_tags),
                    "reason": g.reason,
                }
                for g in result.content_gaps
            ],
            "orphans": [_item_ref_with_site(o) for o in result.orphans],
        },
        "crossSiteOpportunities": [
            {
                "source": _item_ref_with_site(o.source),
                "target": _item_ref_with_site(o.target),
                "anchorText": o.anchor_text,
                "contextSnippet": o.context_snippet,
                "theme": o.theme,
                "confidence": o.confidence,
                "priority": o.priority.value,
                "reason": o.reason,
            }
            for o in result.cross_site_opportunities
        ],
    }


def write_reports(
    result: AuditResult,
    output_dir: Union[str, Path],
    sites: Sequence[str],
) -> tuple[Path, Path]:
    """
    Write the markdown report and JSON data file.

    Args:
        result: Completed audit.
        output_dir: Directory to write into (created if missing).
        sites: Sites in report order.

    Returns:
        Tuple of (report path, data path).
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    report_path = out / REPORT_FILENAME
    data_path = out / DATA_FILENAME

    report_path.write_text(generate_markdown_report(result, sites), encoding="utf-8")
    data_path.write_text(json.dumps(generate_audit_data(result, sites), indent=2), encoding="utf-8")

    logger.info(f"Wrote {report_path} and {data_path}")
    return report_path, data_path


def opportunities_dataframe(result: AuditResult) -> pd.DataFrame:
    """Tabulate cross-site opportunities, one row per link, in rank order."""
    rows = [
        {
            "Priority": o.priority.value,
            "Confidence": round(o.confidence, 3),
            "Source Site": o.source.site,
            "Source Title": o.source.title,
            "Source URL": o.source.url,
            "Target Site": o.target.site,
            "Target Title": o.target.title,
            "Target URL": o.target.url,
            "Anchor Text": o.anchor_text,
            "Theme": o.theme,
            "Reason": o.reason,
            "Context": o.context_snippet,
        }
        for o in result.cross_site_opportunities
    ]
    return pd.DataFrame(rows, columns=SPREADSHEET_COLUMNS)


def export_opportunities(result: AuditResult, file_path: Union[str, Path]) -> Path:
    """
    Export cross-site opportunities to a spreadsheet.

    Args:
        result: Completed audit.
        file_path: Destination ending in .xlsx or .csv.

    Returns:
        The written path.

    Raises:
        ValueError: If the extension is not supported.
    """
    path = Path(file_path)
    suffix = path.suffix.lower()
    df = opportunities_dataframe(result)

    if suffix == ".xlsx":
        df.to_excel(path, index=False, sheet_name="Cross-Site Opportunities")
    elif suffix == ".csv":
        df.to_csv(path, index=False)
    else:
        raise ValueError(f"Unsupported spreadsheet format: {path.suffix} (use .xlsx or .csv)")

    logger.info(f"Exported {len(df)} opportunities to {path}")
    return path


def load_audit_data(file_path: Union[str, Path]) -> dict:
    """
    Load audit data written by a previous audit run.

    Args:
        file_path: Path to cross-link-audit-data.json.

    Returns:
        The parsed audit data.

    Raises:
        AuditDataNotFoundError: If the file does not exist.
        AuditDataError: If the file is not valid audit data.
    """
    path = Path(file_path)
    if not path.exists():
        raise AuditDataNotFoundError(f"Audit data not found: {file_path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise AuditDataError(f"Failed to read audit data: {e}")

    if not isinstance(data, dict):
        raise AuditDataError("Audit data must be a JSON object")
    missing = [s for s in REQUIRED_SECTIONS if s not in data]
    if missing:
        raise AuditDataError(f"Audit data is missing sections: {', '.join(missing)}")
    if "pillarCoverage" not in data["internalAnalysis"]:
        raise AuditDataError("Audit data is missing internalAnalysis.pillarCoverage")

    return data
