"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from crosslink_auditor.cli import main
from crosslink_auditor.reporting import DATA_FILENAME, REPORT_FILENAME


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "audit.yaml"
    path.write_text("sites:\n  - mydojo.software\n  - petcare.software\n", encoding="utf-8")
    return path


def _audit(runner, sample_sites, out, config_file, *extra):
    return runner.invoke(main, [
        "audit",
        "--content-root", str(sample_sites),
        "-o", str(out),
        "--config", str(config_file),
        *extra,
    ])


class TestAuditCommand:
    """Tests for the audit command."""

    def test_writes_reports(self, runner, sample_sites, config_file, tmp_path):
        """Test a successful audit run."""
        out = tmp_path / "out"

        result = _audit(runner, sample_sites, out, config_file)

        assert result.exit_code == 0, result.output
        assert (out / REPORT_FILENAME).exists()
        data = json.loads((out / DATA_FILENAME).read_text(encoding="utf-8"))
        assert data["metadata"]["totalItems"] == 4
        assert len(data["crossSiteOpportunities"]) == 1
        assert "Audit Summary" in result.output

    def test_spreadsheet_export(self, runner, sample_sites, config_file, tmp_path):
        """Test the --spreadsheet option."""
        out = tmp_path / "out"

        result = _audit(runner, sample_sites, out, config_file, "--spreadsheet", str(out / "opps.csv"))

        assert result.exit_code == 0, result.output
        assert (out / "opps.csv").exists()

    def test_bad_spreadsheet_extension(self, runner, sample_sites, config_file, tmp_path):
        """Test that an unsupported export format fails cleanly."""
        out = tmp_path / "out"

        result = _audit(runner, sample_sites, out, config_file, "--spreadsheet", str(out / "opps.txt"))

        assert result.exit_code == 1
        assert "Unsupported spreadsheet format" in result.output

    def test_invalid_config(self, runner, sample_sites, tmp_path):
        """Test that config errors exit with status 1."""
        bad = tmp_path / "bad.yaml"
        bad.write_text("treshold: 1\n", encoding="utf-8")

        result = _audit(runner, sample_sites, tmp_path / "out", bad)

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_missing_content_root(self, runner, tmp_path):
        """Test that click rejects a missing content root."""
        result = runner.invoke(main, ["audit", "--content-root", str(tmp_path / "nope")])

        assert result.exit_code == 2


class TestAddPillarLinksCommand:
    """Tests for the add-pillar-links command."""

    def test_missing_audit_data(self, runner, sample_sites, tmp_path):
        """Test the hint when no audit has been run."""
        result = runner.invoke(main, [
            "add-pillar-links",
            "--content-root", str(sample_sites),
            "--audit-data", str(tmp_path / "missing.json"),
        ])

        assert result.exit_code == 1
        assert "Run: crosslink-audit audit first" in result.output

    def test_dry_run(self, runner, sample_sites, config_file, tmp_path):
        """Test that the default mode leaves files untouched."""
        out = tmp_path / "out"
        _audit(runner, sample_sites, out, config_file)
        blog = sample_sites / "mydojo.software/src/content/blog/dojo-billing.md"
        original = blog.read_text(encoding="utf-8")

        result = runner.invoke(main, [
            "add-pillar-links",
            "--content-root", str(sample_sites),
            "--audit-data", str(out / DATA_FILENAME),
            "--report", str(out / "pillar-links-report.md"),
        ])

        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert blog.read_text(encoding="utf-8") == original

    def test_execute(self, runner, sample_sites, config_file, tmp_path):
        """Test that --execute modifies files and writes a report."""
        out = tmp_path / "out"
        _audit(runner, sample_sites, out, config_file)
        blog = sample_sites / "mydojo.software/src/content/blog/dojo-billing.md"

        result = runner.invoke(main, [
            "add-pillar-links",
            "--content-root", str(sample_sites),
            "--audit-data", str(out / DATA_FILENAME),
            "--report", str(out / "pillar-links-report.md"),
            "--backup-dir", str(tmp_path / "backups"),
            "--execute",
            "--seed", "1",
        ])

        assert result.exit_code == 0, result.output
        assert "/dojo-scheduling-software/" in blog.read_text(encoding="utf-8")
        assert (tmp_path / "backups" / "mydojo.software-dojo-billing.md").exists()
        assert (out / "pillar-links-report.md").read_text(encoding="utf-8").startswith(
            "# Pillar Links Addition Report"
        )
