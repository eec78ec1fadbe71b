"""Tests for scanning site sources into content items."""

import logging

import pytest
import yaml
from bs4 import BeautifulSoup

from crosslink_auditor.config import AuditConfig
from crosslink_auditor.content_sources import (
    ContentScanError,
    extract_links_from_html,
    extract_links_from_markdown,
    markdown_to_text,
    normalize_url,
    parse_astro_file,
    parse_markdown_file,
    repair_text,
    scan_site,
    scan_sites,
    site_prefix,
    split_front_matter,
)
from crosslink_auditor.models import ContentType

SITE = "mydojo.software"


class TestHelpers:
    """Tests for small text and URL helpers."""

    def test_site_prefix(self):
        """Test the short site id."""
        assert site_prefix("mydojo.software") == "mydojo"

    @pytest.mark.parametrize("url,expected", [
        ("/pricing", "https://mydojo.software/pricing/"),
        ("/blog/post/", "https://mydojo.software/blog/post/"),
        ("https://mydojo.software/x", "https://mydojo.software/x/"),
        ("/page#section", "https://mydojo.software/page#section"),
        ("/search?q=dojo", "https://mydojo.software/search?q=dojo"),
    ])
    def test_normalize_url(self, url, expected):
        """Test absolute conversion and trailing slashes."""
        assert normalize_url(url, SITE) == expected

    def test_split_front_matter(self):
        """Test separating YAML from the markdown body."""
        data, body = split_front_matter("---\ntitle: Hello\ntags: [a, b]\n---\nBody here")

        assert data == {"title": "Hello", "tags": ["a", "b"]}
        assert body == "Body here"

    def test_no_front_matter(self):
        """Test a document without front matter."""
        assert split_front_matter("Just body") == ({}, "Just body")

    def test_invalid_front_matter(self):
        """Test that broken YAML raises."""
        with pytest.raises(yaml.YAMLError):
            split_front_matter("---\ntitle: [unclosed\n---\nBody")

    def test_front_matter_must_be_mapping(self):
        """Test that a YAML list is rejected."""
        with pytest.raises(yaml.YAMLError):
            split_front_matter("---\n- a\n- b\n---\nBody")

    def test_markdown_to_text(self):
        """Test stripping markdown syntax."""
        text = markdown_to_text("# Title\n\nSome **bold** [link text](/x/) and ![alt](/img.png)\n- item")

        assert text == "Title\n\nSome bold link text and alt\nitem"

    def test_repair_text(self):
        """Test mojibake repair."""
        assert repair_text("cafÃ©") == "café"

    def test_markdown_links_internal_only(self):
        """Test that external links are dropped and relative ones normalized."""
        links = extract_links_from_markdown(
            "[pillar](/dojo-software/) [ext](https://other.com/x) [post](/blog/post-two)",
            SITE,
        )

        assert [(l.anchor_text, l.url) for l in links] == [
            ("pillar", "https://mydojo.software/dojo-software/"),
            ("post", "https://mydojo.software/blog/post-two/"),
        ]

    def test_html_links_skip_empty_anchors(self):
        """Test that anchors without text are ignored."""
        soup = BeautifulSoup('<a href="/a/">A</a><a href="/b/"></a><a href="https://x.com/">X</a>', "html.parser")

        links = extract_links_from_html(soup, SITE)

        assert [l.url for l in links] == ["https://mydojo.software/a/"]


class TestParseMarkdownFile:
    """Tests for blog post parsing."""

    def test_blog_item(self, sample_sites):
        """Test the fields of a parsed blog post."""
        path = sample_sites / SITE / "src/content/blog/dojo-billing.md"

        item = parse_markdown_file(path, SITE)

        assert item.id == "mydojo-blog-dojo-billing"
        assert item.type is ContentType.BLOG
        assert item.url == "https://mydojo.software/blog/dojo-billing/"
        assert item.title == "Dojo Billing Basics"
        assert item.description == "Billing for dojos"
        assert item.tags == ("billing", "scheduling")
        assert item.date == "2024-05-01"
        assert item.slug == "dojo-billing"
        assert item.file_path == str(path.resolve())

    def test_relative_path_recorded_absolute(self, sample_sites, monkeypatch):
        """Test that a post scanned by relative path records an absolute path."""
        monkeypatch.chdir(sample_sites)

        item = parse_markdown_file(f"{SITE}/src/content/blog/dojo-billing.md", SITE)

        assert item.file_path == str((sample_sites / SITE / "src/content/blog/dojo-billing.md").resolve())
        assert item.word_count == len(item.body_text.split())
        assert "Online booking" in item.body_text
        assert item.topics == ()
        assert item.themes == ()

    def test_links_and_body(self, tmp_path):
        """Test that markdown links become internal links and plain text."""
        path = tmp_path / "post.md"
        path.write_text(
            "---\ntitle: Post\n---\nSee [our pillar](/dojo-software/) and [ext](https://other.com/).",
            encoding="utf-8",
        )

        item = parse_markdown_file(path, SITE)

        assert [l.url for l in item.internal_links] == ["https://mydojo.software/dojo-software/"]
        assert item.body_text == "See our pillar and ext."

    def test_missing_title(self, tmp_path):
        """Test the Untitled default."""
        path = tmp_path / "post.md"
        path.write_text("No front matter here.", encoding="utf-8")

        assert parse_markdown_file(path, SITE).title == "Untitled"

    def test_single_tag_string(self, tmp_path):
        """Test a tags field written as a single string."""
        path = tmp_path / "post.md"
        path.write_text("---\ntags: billing\n---\nBody", encoding="utf-8")

        assert parse_markdown_file(path, SITE).tags == ("billing",)

    def test_invalid_front_matter_is_skipped(self, sample_sites, caplog):
        """Test that a parse failure returns None with a warning."""
        path = sample_sites / SITE / "src/content/blog/broken.md"

        with caplog.at_level(logging.WARNING):
            assert parse_markdown_file(path, SITE) is None

        assert "Failed to parse" in caplog.text

    def test_missing_file_is_skipped(self, tmp_path):
        """Test that an unreadable file returns None."""
        assert parse_markdown_file(tmp_path / "nope.md", SITE) is None


class TestParseAstroFile:
    """Tests for Astro page parsing."""

    def test_pillar_page(self, sample_sites):
        """Test the fields of a parsed pillar page."""
        path = sample_sites / SITE / "src/pages/dojo-scheduling-software.astro"

        item = parse_astro_file(path, SITE)

        assert item.id == "mydojo-page-dojo-scheduling-software"
        assert item.type is ContentType.PILLAR
        assert item.url == "https://mydojo.software/dojo-scheduling-software/"
        assert item.title == "Dojo Scheduling Software"
        assert item.description == "Class scheduling for martial arts schools."
        assert item.tags == ()

    def test_script_nav_footer_removed(self, sample_sites):
        """Test that non-content elements don't reach the body or links."""
        item = parse_astro_file(sample_sites / SITE / "src/pages/dojo-scheduling-software.astro", SITE)

        assert "analytics" not in item.body_text
        assert "Footer text" not in item.body_text
        assert "import Layout" not in item.body_text
        assert "Online booking and scheduling" in item.body_text
        assert [l.url for l in item.internal_links] == ["https://mydojo.software/blog/dojo-billing/"]

    def test_homepage(self, sample_sites):
        """Test that index.astro becomes the homepage."""
        item = parse_astro_file(sample_sites / SITE / "src/pages/index.astro", SITE)

        assert item.type is ContentType.HOMEPAGE
        assert item.url == "https://mydojo.software/"
        assert item.title == "MyDojo"

    def test_h1_title_fallback(self, tmp_path):
        """Test using the h1 when there is no title element."""
        path = tmp_path / "features.astro"
        path.write_text("<h1>Features</h1><p>Body</p>", encoding="utf-8")

        assert parse_astro_file(path, SITE).title == "Features"

    def test_untitled(self, tmp_path):
        """Test the Untitled default."""
        path = tmp_path / "blank.astro"
        path.write_text("<p>Body</p>", encoding="utf-8")

        assert parse_astro_file(path, SITE).title == "Untitled"


class TestScanSites:
    """Tests for scanning a whole portfolio."""

    def test_scan_all_sites(self, sample_sites, two_site_config):
        """Test that pages come before posts and broken files are skipped."""
        items = scan_sites(sample_sites, two_site_config)

        assert [i.id for i in items] == [
            "mydojo-page-dojo-scheduling-software",
            "mydojo-page-index",
            "mydojo-blog-dojo-billing",
            "petcare-blog-pet-billing",
        ]

    def test_excluded_pages(self, sample_sites, two_site_config):
        """Test that excluded page names are not scanned."""
        items = scan_site(sample_sites / SITE, SITE, two_site_config)

        assert all(i.slug != "about" for i in items)

    def test_custom_excluded_pages(self, sample_sites):
        """Test that the exclusion list comes from config."""
        config = AuditConfig(sites=(SITE,), excluded_pages=("index.astro",))

        items = scan_site(sample_sites / SITE, SITE, config)

        assert "about" in [i.slug for i in items]
        assert "index" not in [i.slug for i in items]

    def test_missing_site_directory(self, sample_sites, caplog):
        """Test that a configured site without a directory is skipped."""
        config = AuditConfig(sites=(SITE, "mytattoo.software"))

        with caplog.at_level(logging.WARNING):
            items = scan_sites(sample_sites, config)

        assert {i.site for i in items} == {SITE}
        assert "Site directory missing" in caplog.text

    def test_missing_content_root(self, tmp_path):
        """Test that a missing root raises ContentScanError."""
        with pytest.raises(ContentScanError, match="Content root not found"):
            scan_sites(tmp_path / "nope")
