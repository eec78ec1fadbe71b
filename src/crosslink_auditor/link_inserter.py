"""
Automatic pillar link insertion.

Reads the audit data, and for every pillar with orphaned blogs, appends a
link sentence to the best paragraph of each blog. Dry-run by default; in
execute mode every file is backed up before it is rewritten.
"""

import logging
import random
import shutil
import time
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional, Union

import yaml

from .config import AuditConfig
from .content_sources import BLOG_DIR, split_front_matter
from .insertion import InsertionPointSelector, apply_insertion
from .models import InsertionDecision, SkippedInsertion

logger = logging.getLogger(__name__)

REPORT_FILENAME = "pillar-links-report.md"


@dataclass
class PillarLinkModification:
    """A pillar link added (or planned, in dry-run) to one blog post."""
    file_path: Path
    site: str
    blog_title: str
    pillar_title: str
    pillar_url: str
    decision: InsertionDecision
    new_content: str

    @property
    def anchor_text(self) -> str:
        return self.decision.anchor_text

    @property
    def preview(self) -> str:
        return self.decision.preview


@dataclass
class InsertionRunSummary:
    """Outcome of one inserter run."""
    dry_run: bool
    modifications: list[PillarLinkModification] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)
    files_written: int = 0
    backup_dir: Optional[Path] = None

    @property
    def links_added(self) -> int:
        return len(self.modifications)


class PillarLinkInserter:
    """
    Applies insertion decisions for orphaned blogs to files on disk.

    Example:
        inserter = PillarLinkInserter("sites/", dry_run=False)
        summary = inserter.run(load_audit_data("cross-link-audit-data.json"))
    """

    def __init__(
        self,
        content_root: Union[str, Path],
        config: Optional[AuditConfig] = None,
        dry_run: bool = True,
        backup_dir: Optional[Union[str, Path]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the inserter.

        Args:
            content_root: Directory containing one subdirectory per site.
            config: Audit configuration.
            dry_run: When True, nothing is written.
            backup_dir: Where originals are copied before rewriting.
                Defaults to <content_root>/backups/pillar-links-<timestamp>.
            rng: Random source for lead-in sentence templates.
        """
        self.content_root = Path(content_root)
        self.config = config or AuditConfig()
        self.dry_run = dry_run
        self.backup_dir = (
            Path(backup_dir) if backup_dir
            else self.content_root / "backups" / f"pillar-links-{int(time.time() * 1000)}"
        )
        self.selector = InsertionPointSelector(self.config, rng)

    def resolve_blog_path(self, blog: dict) -> Path:
        """
        Locate a blog's markdown file from its inventory entry.

        A recorded filePath is used when it exists; otherwise the path is
        derived from the URL slug under the content root.
        """
        if blog.get("filePath"):
            recorded = Path(blog["filePath"])
            if recorded.exists():
                return recorded
            logger.debug(f"Recorded path {recorded} not found; deriving from URL")
        slug = blog["url"].split("/blog/", 1)[-1].strip("/") or "unknown"
        return self.content_root / blog["site"] / BLOG_DIR / f"{slug}.md"

    def add_pillar_link(self, blog: dict, pillar: dict) -> Union[PillarLinkModification, SkippedInsertion]:
        """
        Plan a pillar link for one blog post.

        Args:
            blog: Inventory entry of the blog (site, url, themes, filePath).
            pillar: Pillar reference (title, url).

        Returns:
            PillarLinkModification, or SkippedInsertion.

        Raises:
            FileNotFoundError: If the blog's file does not exist.
            OSError: If the blog's file cannot be read.
            yaml.YAMLError: If its front matter is invalid.
        """
        file_path = self.resolve_blog_path(blog)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_content = file_path.read_text(encoding="utf-8")
        _, markdown = split_front_matter(file_content)

        outcome = self.selector.plan(
            markdown,
            pillar_title=pillar["title"],
            pillar_url=pillar["url"],
            site=blog["site"],
            target_themes=blog.get("themes") or (),
        )
        if isinstance(outcome, SkippedInsertion):
            return outcome

        return PillarLinkModification(
            file_path=file_path,
            site=blog["site"],
            blog_title=blog.get("title", ""),
            pillar_title=pillar["title"],
            pillar_url=pillar["url"],
            decision=outcome,
            new_content=apply_insertion(file_content, markdown, outcome),
        )

    def _write(self, modification: PillarLinkModification) -> None:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = self.backup_dir / f"{modification.site}-{modification.file_path.name}"
        if not backup_path.exists():
            shutil.copy2(modification.file_path, backup_path)
        modification.file_path.write_text(modification.new_content, encoding="utf-8")

    def run(self, audit_data: dict) -> InsertionRunSummary:
        """
        Add missing pillar links for every pillar in the audit data.

        Args:
            audit_data: Data loaded with reporting.load_audit_data().

        Returns:
            InsertionRunSummary listing modifications, skips and errors.
        """
        summary = InsertionRunSummary(
            dry_run=self.dry_run,
            backup_dir=None if self.dry_run else self.backup_dir,
        )
        inventory = {entry["id"]: entry for entry in audit_data.get("inventory", [])}
        limit = self.config.max_pillar_links_per_post * 5

        for coverage in audit_data["internalAnalysis"]["pillarCoverage"]:
            pillar = coverage["pillar"]
            orphaned = coverage.get("orphanedBlogs", [])[:limit]
            if not orphaned:
                continue

            logger.info(f"{pillar['title']} ({pillar['url']}): {len(orphaned)} blog posts need this link")

            for blog_ref in orphaned:
                title = blog_ref.get("title", blog_ref.get("id", ""))
                blog = inventory.get(blog_ref["id"])
                if not blog or not blog.get("url"):
                    summary.errors.append((title, "Blog not found in inventory"))
                    logger.warning(f"{title}: Blog not found in inventory")
                    continue

                try:
                    outcome = self.add_pillar_link(blog, pillar)
                except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                    summary.errors.append((title, str(e)))
                    logger.warning(f"{title}: {e}")
                    continue

                if isinstance(outcome, SkippedInsertion):
                    summary.skipped.append((title, outcome.reason))
                    logger.info(f"{title}: {outcome}")
                    continue

                summary.modifications.append(outcome)
                logger.info(f"{title}: {outcome.preview}")
                if not self.dry_run:
                    self._write(outcome)
                    summary.files_written += 1

        return summary


def generate_modifications_report(
    modifications: list[PillarLinkModification],
    generated_on: Optional[date] = None,
) -> str:
    """
    Render the pillar-link additions as markdown, grouped by site.

    Args:
        modifications: Modifications from an inserter run.
        generated_on: Report date. Defaults to today.

    Returns:
        Markdown text.
    """
    generated_on = generated_on or date.today()
    lines = [
        "# Pillar Links Addition Report",
        "",
        f"Generated: {generated_on.isoformat()}",
        "",
        f"Total links added: {len(modifications)}",
        "",
    ]

    by_site: dict[str, list[PillarLinkModification]] = {}
    for mod in modifications:
        by_site.setdefault(mod.site, []).append(mod)

    for site, mods in by_site.items():
        lines += [f"## {site}", "", f"Links added: {len(mods)}", ""]
        for mod in mods:
            lines += [
                f"### {mod.blog_title}",
                "",
                f"- **Pillar**: [{mod.pillar_title}]({mod.pillar_url})",
                f'- **Anchor Text**: "{mod.anchor_text}"',
                f"- **Context**: {mod.preview}",
                "",
            ]

    return "\n".join(lines) + "\n"
