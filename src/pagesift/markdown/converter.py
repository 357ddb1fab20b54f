"""
Rule-driven HTML to Markdown conversion on top of markdownify.

Custom rules cover headings (preceded by a horizontal rule, short ones
dropped), tables (GFM table or a one-line summary) and links (validity
filtering, length cap, hostname labels).
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

from pagesift.config.config import MarkdownSettings
from pagesift.extractor.structured_data import TableData, extract_table_data

logger = structlog.get_logger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

BARE_DOMAIN_PATTERN = re.compile(r"^https?://[^\s/]+$")
RELATIVE_PREFIXES = ("/", "./", "../")
REJECTED_SCHEMES = ("javascript:", "mailto:")


def is_valid_href(href: Optional[str]) -> bool:
    """Whether ``href`` is worth keeping as a link target."""
    if not href:
        return False
    lowered = href.lower()
    if lowered.startswith(REJECTED_SCHEMES) or href == "#":
        return False
    if any(ch in href for ch in ("\n", " ", "\t")):
        return False
    if BARE_DOMAIN_PATTERN.match(href):
        return False
    if href.startswith(RELATIVE_PREFIXES):
        return len(href) > 3
    parsed = urlparse(href)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def link_label(href: str, title: Optional[str]) -> str:
    """Title attribute, or the bare hostname without a leading ``www.``. Relative hrefs keep the href."""
    if title and title.strip():
        return title.strip()
    host = urlparse(href).hostname
    if not host:
        return href
    return host[4:] if host.startswith("www.") else host


def render_table(data: TableData, settings: MarkdownSettings) -> str:
    """GFM table for small tables, the ``**Table Data**`` summary line otherwise."""
    if data.is_empty:
        return ""

    simple = (
        0 < len(data.headers) <= settings.max_table_columns
        and len(data.rows) <= settings.max_table_rows
        and all(len(h) < settings.max_table_header_length for h in data.headers)
    )
    if not simple:
        return f"\n\n**Table Data**: {data.summary(settings.max_sample_cell_length)}\n\n"

    width = len(data.headers)

    def row_line(cells: list[str]) -> str:
        padded = (cells + [""] * width)[:width]
        return "| " + " | ".join(cell.replace("|", "\\|") for cell in padded) + " |"

    lines = [row_line(data.headers), "| " + " | ".join("---" for _ in data.headers) + " |"]
    lines.extend(row_line(row) for row in data.rows)
    return "\n\n" + "\n".join(lines) + "\n\n"


def prepare_headings(root: BeautifulSoup | Tag, min_length: int = 3) -> None:
    """Drop headings shorter than ``min_length`` and put a horizontal rule before the rest."""
    factory = root if isinstance(root, BeautifulSoup) else BeautifulSoup("", "html.parser")
    for heading in root.find_all(HEADING_TAGS):
        if heading.decomposed:
            continue
        if len(heading.get_text().strip()) < min_length:
            heading.decompose()
            continue
        heading.insert_before(factory.new_tag("hr"))


class PageMarkdownConverter(MarkdownConverter):
    """markdownify converter with the table and link rules."""

    def __init__(self, settings: MarkdownSettings, preserve_links: bool = True, **options: Any):
        self.settings = settings
        self.preserve_links = preserve_links
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        super().__init__(**options)

    def convert_table(self, el, text, *args, **kwargs):
        data = extract_table_data(el)
        if data is None:
            return ""
        return render_table(data, self.settings)

    def convert_a(self, el, text, *args, **kwargs):
        text = (text or "").strip()
        if not text:
            return ""
        href = el.get("href")
        if not self.preserve_links or not is_valid_href(href):
            return text
        if len(href) > self.settings.max_link_url_length:
            return text

        visible = el.get_text().strip()
        if visible == href or href in visible:
            return f"[{link_label(href, el.get('title'))}]({href})"
        return f"[{text}]({href})"


def html_to_markdown(html: str | Tag, settings: MarkdownSettings, preserve_links: bool = True) -> str:
    """Convert an HTML fragment (or a parsed tag) to Markdown."""
    soup = BeautifulSoup(html, "lxml") if isinstance(html, str) else html
    prepare_headings(soup, settings.min_heading_length)
    converter = PageMarkdownConverter(settings, preserve_links=preserve_links)
    markdown = converter.convert_soup(soup)
    logger.debug("Converted HTML to Markdown", chars=len(markdown))
    return markdown
