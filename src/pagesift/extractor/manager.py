"""
MainContentExtractor: readability first, content region scoring as fallback.
"""

from __future__ import annotations

import time
from typing import Dict, Optional

import structlog
from bs4 import BeautifulSoup

from pagesift.config.config import ExtractionSettings
from pagesift.errors import NoReadableContentError

from .models import ExtractResult
from .readability_extractor import ReadabilityExtractor
from .region_scorer import ContentRegionScorer

logger = structlog.get_logger(__name__)


class MainContentExtractor:
    """
    Finds the main content block of a sanitized, boilerplate-free document.

    Features:
    - readability-lxml as the primary strategy
    - Region scoring fallback with a text quality pre-check
    - Per-strategy attempt and success counters
    """

    def __init__(
        self,
        settings: ExtractionSettings,
        readability: Optional[ReadabilityExtractor] = None,
        region_scorer: Optional[ContentRegionScorer] = None,
    ) -> None:
        self.settings = settings
        self.readability = readability or ReadabilityExtractor(settings)
        self.region_scorer = region_scorer or ContentRegionScorer(settings)
        self.logger = logger.bind(component="MainContentExtractor")

        self._metrics: Dict[str, Dict[str, float]] = {
            name: {"attempts": 0, "successes": 0, "total_time": 0.0} for name in ("readability", "region")
        }

    async def extract(self, soup: BeautifulSoup, url: str | None = None) -> ExtractResult:
        """
        Extract the main content of ``soup``.

        Raises:
            NoReadableContentError: neither strategy found a content block.
        """
        start = time.perf_counter()
        self._metrics["readability"]["attempts"] += 1
        result = await self.readability.extract(str(soup), url=url)
        self._metrics["readability"]["total_time"] += time.perf_counter() - start
        if result is not None:
            self._metrics["readability"]["successes"] += 1
            self.logger.info("Extraction completed", extractor="readability", url=url, text_length=len(result.text))
            return result

        start = time.perf_counter()
        self._metrics["region"]["attempts"] += 1
        regions = self.region_scorer.analyze(soup)
        best = self.region_scorer.select(regions)
        self._metrics["region"]["total_time"] += time.perf_counter() - start

        if best is None:
            self.logger.warning("No readable content", url=url, regions=len(regions))
            raise NoReadableContentError(url)

        self._metrics["region"]["successes"] += 1
        text = " ".join(best.element.get_text().split())
        title = soup.title.string.strip() if soup.title and soup.title.string else None
        self.logger.info(
            "Readability failed, using content region",
            url=url,
            region_type=best.type.value,
            score=round(best.score, 3),
            text_length=len(text),
        )
        return ExtractResult(
            url=url,
            title=title or None,
            content_html=best.element.decode_contents(),
            text=text,
            source="region",
            score=best.score,
        )

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """Attempts, successes and timings per strategy."""
        metrics = {}
        for name, raw in self._metrics.items():
            attempts = raw["attempts"]
            metrics[name] = {
                "attempts": attempts,
                "successes": raw["successes"],
                "success_rate": raw["successes"] / attempts if attempts > 0 else 0.0,
                "total_time": raw["total_time"],
            }
        return metrics
