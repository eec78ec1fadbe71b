"""
Pytest fixtures and configuration for cross-link auditor tests.
"""

from pathlib import Path

import pytest

from crosslink_auditor.config import AuditConfig
from crosslink_auditor.models import ContentItem, ContentType, InternalLink, Topic


@pytest.fixture
def config() -> AuditConfig:
    """Default audit configuration."""
    return AuditConfig()


@pytest.fixture
def make_item():
    """Factory for ContentItem records with sensible defaults."""
    def _make(
        item_id: str,
        site: str = "site.x",
        type: ContentType = ContentType.BLOG,
        url: str = None,
        title: str = "",
        body_text: str = "",
        tags=(),
        links=(),
        topics=(),
        themes=(),
    ) -> ContentItem:
        if url is None:
            if type is ContentType.BLOG:
                url = f"https://{site}/blog/{item_id}/"
            elif type is ContentType.HOMEPAGE:
                url = f"https://{site}/"
            else:
                url = f"https://{site}/{item_id}/"
        return ContentItem(
            id=item_id,
            site=site,
            type=type,
            url=url,
            title=title or item_id,
            body_text=body_text,
            word_count=len(body_text.split()),
            tags=tuple(tags),
            internal_links=tuple(InternalLink(anchor_text="link", url=u) for u in links),
            topics=tuple(Topic(phrase=p, score=1.0) for p in topics),
            themes=tuple(themes),
        )
    return _make


DOJO_BLOG_BODY = """Online booking and scheduling keep a dojo running. Students use online booking
to reserve classes, and scheduling software sends appointments reminders.

Billing and payment processing happen automatically, so invoicing takes minutes.
Every payment is tracked for billing."""

PET_BLOG_BODY = """Online booking and scheduling keep a grooming salon running. Owners use online booking
to reserve slots, and scheduling software sends appointments reminders.

Billing and payment processing happen automatically, so invoicing takes minutes.
Every payment is tracked for billing."""

DOJO_PILLAR = """---
import Layout from '../layouts/Layout.astro';
---
<Layout>
<title>Dojo Scheduling Software</title>
<meta name="description" content="Class scheduling for martial arts schools.">
<nav><a href="/">Home</a></nav>
<h1>Dojo Scheduling Software</h1>
<p>Online booking and scheduling for every dojo. Appointments, calendar sync and
availability in one place, with online booking for every class.</p>
<p>Read <a href="/blog/dojo-billing/">our billing guide</a>.</p>
<script>console.log("analytics")</script>
<footer>Footer text</footer>
</Layout>
"""

HOMEPAGE = """<title>MyDojo</title>
<h1>MyDojo</h1>
<p>Welcome. See <a href="/dojo-scheduling-software/">scheduling</a>.</p>
"""


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def sample_sites(tmp_path: Path) -> Path:
    """Create a two-site content tree on disk and return its root."""
    root = tmp_path / "sites"

    dojo = root / "mydojo.software"
    _write(dojo / "src/pages/index.astro", HOMEPAGE)
    _write(dojo / "src/pages/dojo-scheduling-software.astro", DOJO_PILLAR)
    _write(dojo / "src/pages/about.astro", "<h1>About us</h1>")
    _write(
        dojo / "src/content/blog/dojo-billing.md",
        "---\ntitle: Dojo Billing Basics\ndescription: Billing for dojos\n"
        "date: 2024-05-01\ntags:\n  - billing\n  - scheduling\n---\n" + DOJO_BLOG_BODY,
    )
    _write(
        dojo / "src/content/blog/broken.md",
        "---\ntitle: [unclosed\n---\nBody text",
    )

    pet = root / "petcare.software"
    _write(
        pet / "src/content/blog/pet-billing.md",
        "---\ntitle: Pet Salon Billing\ntags: [billing, scheduling]\n---\n" + PET_BLOG_BODY,
    )

    return root


@pytest.fixture
def two_site_config() -> AuditConfig:
    """Config limited to the two sites in sample_sites."""
    return AuditConfig(sites=("mydojo.software", "petcare.software"))
