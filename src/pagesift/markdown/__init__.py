"""
HTML to Markdown conversion and Markdown cleanup.
"""

from .artifact_cleaner import MarkdownArtifactCleaner
from .converter import PageMarkdownConverter, html_to_markdown, is_valid_href, render_table
from .normalizer import dedupe_content, pretty_whitespace

__all__ = [
    "MarkdownArtifactCleaner",
    "PageMarkdownConverter",
    "dedupe_content",
    "html_to_markdown",
    "is_valid_href",
    "pretty_whitespace",
    "render_table",
]
