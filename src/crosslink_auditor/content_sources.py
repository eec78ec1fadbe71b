"""
Content scanning for the site portfolio.

This module turns a directory of site sources into ContentItem records:
- Astro pages (src/pages/*.astro) become pillar pages or the homepage
- Markdown posts with YAML front matter (src/content/blog/*.md) become blogs

Files that cannot be parsed are logged and skipped; they never reach the
scoring engine.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

import ftfy
import yaml
from bs4 import BeautifulSoup

from .config import AuditConfig
from .models import ContentItem, ContentType, InternalLink

logger = logging.getLogger(__name__)


class ContentScanError(Exception):
    """Raised when the content root itself cannot be scanned."""
    pass


PAGES_DIR = Path("src") / "pages"
BLOG_DIR = Path("src") / "content" / "blog"

_FRONT_MATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_MARKDOWN_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_MARKDOWN_SYNTAX_RE = re.compile(r"^\s{0,3}(#{1,6}|>|[-*+]|\d+\.)\s+", re.MULTILINE)
_EMPHASIS_RE = re.compile(r"(\*\*|__|\*|`)")
_WHITESPACE_RE = re.compile(r"\s+")

# Non-HTML elements that never carry readable page content
_STRIPPED_TAGS = ("script", "style", "nav", "footer")


def repair_text(text: str) -> str:
    """Fix mojibake and odd unicode in extracted text."""
    return ftfy.fix_text(text) if text else text


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(text.split())


def site_prefix(site: str) -> str:
    """Short site identifier used in content ids (host up to the first dot)."""
    return site.split(".")[0]


def normalize_url(url: str, site: str) -> str:
    """
    Normalize a link URL found on a site.

    Relative paths become absolute on the site; a trailing slash is added
    when the URL has no fragment or query string.

    Args:
        url: URL as written in the source.
        site: Host of the site the link was found on.

    Returns:
        Absolute, normalized URL.
    """
    url = url.strip()
    if url.startswith("/"):
        url = f"https://{site}{url}"
    if not url.endswith("/") and "#" not in url and "?" not in url:
        url = url + "/"
    return url


def split_front_matter(text: str) -> tuple[dict, str]:
    """
    Separate YAML front matter from a markdown document.

    Args:
        text: Full file content.

    Returns:
        Tuple of (front matter mapping, markdown body).

    Raises:
        yaml.YAMLError: If the front matter is not valid YAML.
    """
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text

    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        raise yaml.YAMLError("Front matter must be a mapping")
    return data, text[match.end():]


def markdown_to_text(markdown: str) -> str:
    """Strip markdown syntax, keeping link and image text."""
    text = _MARKDOWN_IMAGE_RE.sub(r"\1", markdown)
    text = _MARKDOWN_LINK_RE.sub(r"\1", text)
    text = _MARKDOWN_SYNTAX_RE.sub("", text)
    text = _EMPHASIS_RE.sub("", text)
    return text.strip()


def extract_links_from_markdown(markdown: str, site: str) -> list[InternalLink]:
    """Internal links written as [text](url) that resolve to the site."""
    links = []
    for match in _MARKDOWN_LINK_RE.finditer(markdown):
        url = normalize_url(match.group(2), site)
        if site in url:
            links.append(InternalLink(anchor_text=match.group(1), url=url))
    return links


def extract_links_from_html(soup: BeautifulSoup, site: str) -> list[InternalLink]:
    """Internal <a href> links that resolve to the site."""
    links = []
    for anchor in soup.find_all("a", href=True):
        text = anchor.get_text(" ", strip=True)
        if not text:
            continue
        url = normalize_url(anchor["href"], site)
        if site in url:
            links.append(InternalLink(anchor_text=text, url=url))
    return links


def _tags_from_front_matter(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(tag) for tag in value)


def parse_markdown_file(file_path: Union[str, Path], site: str) -> Optional[ContentItem]:
    """
    Parse a blog post written in markdown with YAML front matter.

    Args:
        file_path: Path to the .md file.
        site: Host of the site the post belongs to.

    Returns:
        A blog ContentItem, or None if the file could not be parsed.
    """
    path = Path(file_path)
    try:
        raw = path.read_text(encoding="utf-8")
        front_matter, markdown = split_front_matter(raw)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return None

    slug = path.stem
    body_text = repair_text(markdown_to_text(markdown))

    return ContentItem(
        id=f"{site_prefix(site)}-blog-{slug}",
        site=site,
        type=ContentType.BLOG,
        url=f"https://{site}/blog/{slug}/",
        title=repair_text(str(front_matter.get("title") or "Untitled")),
        description=repair_text(str(front_matter.get("description") or "")),
        body_text=body_text,
        word_count=count_words(body_text),
        tags=_tags_from_front_matter(front_matter.get("tags")),
        internal_links=tuple(extract_links_from_markdown(markdown, site)),
        slug=slug,
        date=str(front_matter.get("date") or ""),
        file_path=str(path.resolve()),
    )


def _strip_astro_front_matter(content: str) -> str:
    match = _FRONT_MATTER_RE.match(content)
    return content[match.end():] if match else content


def parse_astro_file(file_path: Union[str, Path], site: str) -> Optional[ContentItem]:
    """
    Parse an Astro page into a pillar page or the homepage.

    Args:
        file_path: Path to the .astro file.
        site: Host of the site the page belongs to.

    Returns:
        A pillar/homepage ContentItem, or None if the file could not be read.
    """
    path = Path(file_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return None

    soup = BeautifulSoup(_strip_astro_front_matter(raw), "html.parser")

    title = None
    for tag_name in ("title", "h1"):
        tag = soup.find(tag_name)
        if tag and tag.get_text(strip=True):
            title = tag.get_text(" ", strip=True)
            break

    meta = soup.find("meta", attrs={"name": "description"})
    description = meta.get("content", "") if meta else ""

    for tag in soup.find_all(_STRIPPED_TAGS):
        tag.decompose()

    body_text = repair_text(_WHITESPACE_RE.sub(" ", soup.get_text(" ")).strip())
    slug = path.stem
    is_homepage = slug == "index"

    return ContentItem(
        id=f"{site_prefix(site)}-page-{slug}",
        site=site,
        type=ContentType.HOMEPAGE if is_homepage else ContentType.PILLAR,
        url=f"https://{site}/" if is_homepage else f"https://{site}/{slug}/",
        title=repair_text(title or "Untitled"),
        description=repair_text(description),
        body_text=body_text,
        word_count=count_words(body_text),
        internal_links=tuple(extract_links_from_html(soup, site)),
        slug=slug,
        file_path=str(path.resolve()),
    )


def scan_site(site_root: Union[str, Path], site: str, config: Optional[AuditConfig] = None) -> list[ContentItem]:
    """
    Scan one site's pages and blog posts.

    Args:
        site_root: Directory holding the site's source tree.
        site: Host of the site.
        config: Audit configuration (excluded pages).

    Returns:
        Pages first, then blog posts, each in filename order.
    """
    config = config or AuditConfig()
    root = Path(site_root)
    items: list[ContentItem] = []

    pages_dir = root / PAGES_DIR
    if pages_dir.is_dir():
        for page in sorted(pages_dir.glob("*.astro")):
            if page.name in config.excluded_pages:
                continue
            item = parse_astro_file(page, site)
            if item:
                items.append(item)

    blog_dir = root / BLOG_DIR
    if blog_dir.is_dir():
        for post in sorted(blog_dir.glob("*.md")):
            item = parse_markdown_file(post, site)
            if item:
                items.append(item)

    return items


def scan_sites(content_root: Union[str, Path], config: Optional[AuditConfig] = None) -> list[ContentItem]:
    """
    Scan every configured site under a content root.

    Args:
        content_root: Directory containing one subdirectory per site host.
        config: Audit configuration (sites, excluded pages).

    Returns:
        Content items for all sites, in configured site order.

    Raises:
        ContentScanError: If the content root does not exist.
    """
    config = config or AuditConfig()
    root = Path(content_root)
    if not root.is_dir():
        raise ContentScanError(f"Content root not found: {content_root}")

    items: list[ContentItem] = []
    for site in config.sites:
        site_root = root / site
        if not site_root.is_dir():
            logger.warning(f"Site directory missing, skipping: {site_root}")
            continue
        site_items = scan_site(site_root, site, config)
        logger.info(f"Scanned {site}: {len(site_items)} items")
        items.extend(site_items)

    return items
