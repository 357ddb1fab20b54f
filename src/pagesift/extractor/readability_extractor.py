"""
Readability-based main content extractor.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog
from lxml import etree
from lxml import html as lxml_html
from readability import Document

from pagesift.config.config import ExtractionSettings

from .models import ExtractResult

logger = structlog.get_logger(__name__)

NO_TITLE = "[no-title]"


class ReadabilityExtractor:
    """Extractor using readability-lxml's paragraph density heuristic."""

    name = "readability"

    def __init__(self, settings: ExtractionSettings) -> None:
        self.settings = settings
        self.logger = logger.bind(component=self.name)

    async def extract(self, html: str, *, url: str | None = None) -> Optional[ExtractResult]:
        """
        Run readability in a worker thread.

        Returns None when readability fails or its text is shorter than the
        configured minimum.
        """
        if not html.strip():
            return None
        try:
            return await asyncio.to_thread(self._extract_sync, html, url)
        except Exception as e:
            self.logger.warning("Readability extraction failed", url=url, error=str(e))
            return None

    def _extract_sync(self, html: str, url: str | None) -> Optional[ExtractResult]:
        doc = Document(html, url=url, retry_length=self.settings.readability_retry_length)
        content_html = doc.summary(html_partial=True)
        text = self._html_to_text(content_html)
        if len(text) < self.settings.readability_min_text_length:
            self.logger.debug("Readability found no content", url=url, text_length=len(text))
            return None

        title = doc.short_title()
        return ExtractResult(
            url=url,
            title=title if title and title != NO_TITLE else None,
            content_html=content_html,
            text=text,
            source=self.name,
            score=1.0,
        )

    @staticmethod
    def _html_to_text(html: str) -> str:
        if not html or not html.strip():
            return ""
        doc = lxml_html.fromstring(html)
        text = etree.tostring(doc, method="text", encoding="unicode")
        return " ".join(text.split())
