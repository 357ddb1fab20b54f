"""
Page metadata for the optional frontmatter block.
"""

from __future__ import annotations

from typing import Optional

import structlog
import trafilatura
from bs4 import BeautifulSoup

from pagesift.protocols import PageMetadata

logger = structlog.get_logger(__name__)


def extract_page_metadata(html: str, soup: BeautifulSoup, url: str | None = None) -> PageMetadata:
    """
    Title, publication date and language of a page.

    trafilatura supplies the fields it can find; ``<title>`` and
    ``<html lang>`` fill the gaps.
    """
    title: Optional[str] = None
    published: Optional[str] = None
    language: Optional[str] = None

    try:
        meta = trafilatura.extract_metadata(html, default_url=url)
    except Exception as e:
        logger.warning("Metadata extraction failed", url=url, error=str(e))
        meta = None

    if meta is not None:
        title = getattr(meta, "title", None) or None
        published = getattr(meta, "date", None) or None
        language = getattr(meta, "language", None) or None

    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    if not language and soup.html is not None:
        lang = soup.html.get("lang")
        if isinstance(lang, str) and lang.strip():
            language = lang.strip()

    return PageMetadata(title=title, published=published, language=language)


def _quote(value: Optional[str]) -> str:
    escaped = " ".join((value or "").split()).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_frontmatter(body: str, url: str, metadata: PageMetadata) -> str:
    """Prefix ``body`` with a YAML frontmatter block."""
    return (
        "---\n"
        f"source_url: {url}\n"
        f"title: {_quote(metadata.title)}\n"
        f"published: {_quote(metadata.published)}\n"
        f"lang: {_quote(metadata.language)}\n"
        "---\n\n"
        f"{body}"
    )
