"""
Content region scoring: the fallback used when readability finds nothing.

Every candidate container is scored from its text length, text density,
link density, structured content and role, then the best one is picked.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from pagesift.config.config import ExtractionSettings, RegionScoringWeights
from pagesift.protocols import ContentRegion, RegionType
from pagesift.quality.text_signals import analyze_text_quality

logger = structlog.get_logger(__name__)

CANDIDATE_TAGS = ["div", "section", "article", "main", "aside", "nav", "header", "footer"]

AD_PATTERN = re.compile(r"\b(ad|ads|advertisement|banner|promo|sponsor)\b")
NAV_PATTERN = re.compile(r"\b(nav|menu|breadcrumb|pagination)\b")
SIDEBAR_PATTERN = re.compile(r"\b(sidebar|aside|widget)\b")
MAIN_PATTERN = re.compile(r"\b(main|content|article|post|entry)\b")

SEMANTIC_TYPES = {
    "main": RegionType.MAIN,
    "article": RegionType.MAIN,
    "nav": RegionType.NAVIGATION,
    "aside": RegionType.SIDEBAR,
    "header": RegionType.HEADER,
    "footer": RegionType.FOOTER,
}


@dataclass(slots=True, frozen=True)
class RegionSignals:
    """Inputs of the region score, separated from the DOM so the formula stays pure."""

    text_length: int
    text_density: float
    link_density: float
    has_structured_data: bool
    region_type: RegionType
    explicit_main: bool


def score_region(signals: RegionSignals, weights: RegionScoringWeights) -> float:
    """Saturating weighted sum of the region signals, clamped to [0, 1]."""
    score = 0.0

    if weights.optimal_min_chars <= signals.text_length <= weights.optimal_max_chars:
        score += weights.optimal_length_bonus
    elif signals.text_length > weights.min_chars:
        score += weights.length_bonus

    score += signals.text_density * weights.text_density_weight

    if signals.link_density < weights.low_link_density:
        score += weights.low_link_density_bonus
    elif signals.link_density > weights.high_link_density:
        score -= weights.high_link_density_penalty

    if signals.has_structured_data:
        score += weights.structured_data_bonus

    if signals.region_type is RegionType.MAIN and signals.explicit_main:
        score += weights.main_bonus
    elif signals.region_type in (RegionType.ADVERTISEMENT, RegionType.NAVIGATION):
        score -= weights.ad_or_navigation_penalty
    elif signals.region_type is RegionType.SIDEBAR:
        score -= weights.sidebar_penalty

    return max(0.0, min(1.0, score))


def classify_region(element: Tag) -> tuple[RegionType, bool]:
    """
    Role of an element and whether the role was asserted explicitly.

    Elements matching no pattern count as main content, but only ``main``,
    ``article`` and main-like class or id names earn the main bonus.
    """
    semantic = SEMANTIC_TYPES.get(element.name)
    if semantic is not None:
        return semantic, semantic is RegionType.MAIN

    classes = element.get("class") or []
    class_name = " ".join(classes).lower() if isinstance(classes, list) else str(classes).lower()
    element_id = str(element.get("id") or "").lower()

    for pattern, region_type in (
        (AD_PATTERN, RegionType.ADVERTISEMENT),
        (NAV_PATTERN, RegionType.NAVIGATION),
        (SIDEBAR_PATTERN, RegionType.SIDEBAR),
    ):
        if pattern.search(class_name) or pattern.search(element_id):
            return region_type, False

    if MAIN_PATTERN.search(class_name) or MAIN_PATTERN.search(element_id):
        return RegionType.MAIN, True
    return RegionType.MAIN, False


def has_structured_content(element: Tag) -> bool:
    return (
        element.find(["table", "ul", "ol", "dl"]) is not None
        or element.find(attrs={"itemscope": True}) is not None
        or element.find("script", attrs={"type": "application/ld+json"}) is not None
    )


def measure_region(element: Tag) -> RegionSignals:
    text_length = len(element.get_text().strip())
    inner_html_length = len(element.decode_contents())
    link_text = sum(len(a.get_text()) for a in element.find_all("a"))
    region_type, explicit_main = classify_region(element)
    return RegionSignals(
        text_length=text_length,
        text_density=text_length / max(inner_html_length, 1),
        link_density=link_text / max(text_length, 1),
        has_structured_data=has_structured_content(element),
        region_type=region_type,
        explicit_main=explicit_main,
    )


class ContentRegionScorer:
    """Ranks candidate containers of one document and picks the main content block."""

    def __init__(self, settings: ExtractionSettings):
        self.settings = settings
        self.weights = settings.region_weights
        self.logger = logger.bind(component="region_scorer")

    def analyze(self, soup: BeautifulSoup | Tag) -> List[ContentRegion]:
        """Score every candidate and keep those above the floor, best first."""
        regions: List[ContentRegion] = []
        for element in soup.find_all(CANDIDATE_TAGS):
            signals = measure_region(element)
            score = score_region(signals, self.weights)
            if score > self.weights.keep_above:
                regions.append(
                    ContentRegion(
                        element=element,
                        score=score,
                        type=signals.region_type,
                        text_density=signals.text_density,
                        link_density=signals.link_density,
                        has_structured_data=signals.has_structured_data,
                        text_length=signals.text_length,
                    )
                )
        # sorted() is stable, so equal scores keep document order
        regions = sorted(regions, key=lambda r: r.score, reverse=True)
        self.logger.debug(
            "Content regions analyzed",
            regions=len(regions),
            top_score=round(regions[0].score, 3) if regions else None,
        )
        return regions

    def _passes_precheck(self, region: ContentRegion) -> bool:
        text = region.element.get_text()
        if len(text) < self.settings.region_min_chars:
            return False
        signals = analyze_text_quality(text)
        return (
            signals.overall > self.settings.region_quality_floor
            and signals.sentiment > self.settings.region_sentiment_floor
        )

    def select(self, regions: List[ContentRegion]) -> Optional[ContentRegion]:
        """
        Pick the best region.

        Regions that fail the text quality pre-check are set aside unless
        that would leave nothing. Then the best ``main`` region above the
        main floor wins, else the overall best above the general floor.
        """
        if not regions:
            return None

        candidates = [r for r in regions if self._passes_precheck(r)] or regions

        best = next(
            (r for r in candidates if r.type is RegionType.MAIN and r.score > self.settings.min_main_region_score),
            candidates[0],
        )
        if best.score > self.settings.min_region_score:
            return best
        return None
