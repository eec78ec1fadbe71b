"""
Command-line interface for the cross-link auditor.

Provides two commands:
- audit: scan the sites, score link opportunities, write reports
- add-pillar-links: insert missing pillar links found by a previous audit
"""

import logging
import random
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .auditor import CrossLinkAuditor, DuplicateContentIdError
from .config import AuditConfig, ConfigError
from .content_sources import ContentScanError, scan_sites
from .link_inserter import REPORT_FILENAME, InsertionRunSummary, PillarLinkInserter, generate_modifications_report
from .models import AuditResult
from .reporting import DATA_FILENAME, AuditDataError, AuditDataNotFoundError, export_opportunities, load_audit_data, write_reports

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_path: Optional[Path]) -> AuditConfig:
    return AuditConfig.from_file(config_path) if config_path else AuditConfig()


@click.group()
def main() -> None:
    """Cross-Link Auditor - find and add internal and cross-site links."""


@main.command()
@click.option(
    "--content-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory containing one subdirectory per site.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Where to write the report and data files.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file overriding the default configuration.",
)
@click.option(
    "--spreadsheet",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also export cross-site opportunities to this .xlsx or .csv file.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output.")
def audit(
    content_root: Path,
    output_dir: Path,
    config_path: Optional[Path],
    spreadsheet: Optional[Path],
    verbose: bool,
) -> None:
    """
    Scan all sites and write the cross-link audit report.

    Examples:

        crosslink-audit audit --content-root sites/ -o reports/

        crosslink-audit audit --content-root sites/ --spreadsheet opportunities.xlsx
    """
    _configure_logging(verbose)

    console.print(Panel.fit(
        "[bold blue]Cross-Link Auditor[/bold blue]\n"
        "Finding internal and cross-site linking opportunities",
        border_style="blue",
    ))

    try:
        config = _load_config(config_path)

        with console.status("[bold green]Scanning sites..."):
            items = scan_sites(content_root, config)
        console.print(f"Found {len(items)} content items")

        result = CrossLinkAuditor(config).run(items)

        report_path, data_path = write_reports(result, output_dir, config.sites)
        if spreadsheet:
            export_opportunities(result, spreadsheet)

        _display_audit_summary(result)
        console.print(f"\n[bold green]Success![/bold green] Reports saved to: {report_path}, {data_path}")

    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except ContentScanError as e:
        console.print(f"[red]Content scan error:[/red] {e}")
        sys.exit(1)
    except DuplicateContentIdError as e:
        console.print(f"[red]Content error:[/red] {e}")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)


@main.command("add-pillar-links")
@click.option(
    "--content-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory containing one subdirectory per site.",
)
@click.option(
    "--audit-data",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(DATA_FILENAME),
    show_default=True,
    help="Audit data written by the audit command.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file overriding the default configuration.",
)
@click.option(
    "--execute",
    is_flag=True,
    default=False,
    help="Modify files. Without this flag nothing is written (dry run).",
)
@click.option(
    "--backup-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Where to copy original files before modifying them.",
)
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(REPORT_FILENAME),
    show_default=True,
    help="Where to write the pillar links report.",
)
@click.option("--seed", type=int, help="Seed for link sentence templates.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output.")
def add_pillar_links(
    content_root: Path,
    audit_data: Path,
    config_path: Optional[Path],
    execute: bool,
    backup_dir: Optional[Path],
    report_path: Path,
    seed: Optional[int],
    verbose: bool,
) -> None:
    """
    Add missing pillar links to orphaned blog posts.

    Examples:

        crosslink-audit add-pillar-links --content-root sites/

        crosslink-audit add-pillar-links --content-root sites/ --execute
    """
    _configure_logging(verbose)

    mode = "[yellow]DRY RUN[/yellow] (no changes will be made)" if not execute else "[red]EXECUTE[/red] (files will be modified)"
    console.print(Panel.fit(f"[bold blue]Adding Missing Pillar Links[/bold blue]\nMode: {mode}", border_style="blue"))

    try:
        config = _load_config(config_path)
        data = load_audit_data(audit_data)

        inserter = PillarLinkInserter(
            content_root,
            config=config,
            dry_run=not execute,
            backup_dir=backup_dir,
            rng=random.Random(seed) if seed is not None else None,
        )
        summary = inserter.run(data)

        _display_insertion_summary(summary)

        if summary.modifications:
            report_path.write_text(generate_modifications_report(summary.modifications), encoding="utf-8")
            console.print(f"Detailed report: {report_path}")

    except AuditDataNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("   Run: crosslink-audit audit first")
        sys.exit(1)
    except AuditDataError as e:
        console.print(f"[red]Audit data error:[/red] {e}")
        sys.exit(1)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)


def _display_audit_summary(result: AuditResult) -> None:
    """Display audit summary."""
    table = Table(title="Audit Summary", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")

    table.add_row("Total content items", str(len(result.items)))
    table.add_row("Internal link opportunities", str(result.internal_opportunity_count))
    table.add_row("Cross-site opportunities", str(len(result.cross_site_opportunities)))
    table.add_row("Orphan pages", str(len(result.orphans)))

    console.print(table)


def _display_insertion_summary(summary: InsertionRunSummary) -> None:
    """Display pillar link insertion summary."""
    table = Table(title="Pillar Links", show_header=True)
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", style="green", justify="right")

    table.add_row("Links to add", str(summary.links_added))
    table.add_row("Skipped", str(len(summary.skipped)))
    table.add_row("Errors", str(len(summary.errors)))
    console.print(table)

    if summary.dry_run:
        console.print("\nTo apply these changes, run again with [bold]--execute[/bold]")
    else:
        console.print(f"\n[bold green]Successfully modified {summary.files_written} files[/bold green]")
        if summary.files_written:
            console.print(f"Backups saved to: {summary.backup_dir}")


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
