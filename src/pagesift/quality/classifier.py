"""
Content classification: shape, domain, information density and key entities.

The classification parameterizes the summarization strategy of a chunk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import structlog

from pagesift.config.config import ClassifierConfig, DensityWeights
from pagesift.protocols import ContentClassification, ContentDomain, ContentType, InformationDensity

from .entities import EntityExtractor, EntitySet
from .text_signals import analyze_text_quality, extract_key_terms, stem, tokenize

logger = structlog.get_logger(__name__)

LIST_LINE_PATTERN = re.compile(r"^[-*+]\s", re.M)
TABLE_ROW_PATTERN = re.compile(r"^\|.*\|\s*$", re.M)
TABLE_MARKER = "**Table Data**"

# Checked in this order, so earlier domains win ties
DOMAIN_KEYWORDS: Dict[ContentDomain, Tuple[str, ...]] = {
    ContentDomain.SPORTS: (
        "game", "team", "player", "score", "season", "coach", "league", "match", "win", "points",
        "playoff", "championship", "tournament", "defeated", "odds", "betting", "quarter", "goal",
    ),
    ContentDomain.FINANCIAL: (
        "market", "stock", "price", "investor", "revenue", "earnings", "shares", "trading", "profit",
        "economy", "inflation", "interest", "dividend", "fund", "bank", "currency",
    ),
    ContentDomain.NEWS: (
        "government", "official", "president", "election", "minister", "announced", "police",
        "report", "statement", "policy", "country", "city", "court", "law",
    ),
    ContentDomain.TECHNICAL: (
        "software", "code", "function", "install", "api", "server", "database", "python", "version",
        "configuration", "library", "framework", "algorithm", "data", "system", "compile",
    ),
}

SUBTYPE_KEYWORDS: Dict[ContentDomain, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    ContentDomain.SPORTS: (
        ("betting", ("odds", "spread", "bet", "betting", "wager", "moneyline")),
        ("statistics", ("stats", "statistics", "average", "percentage", "rebounds", "assists")),
        ("game_recap", ("defeated", "beat", "final", "scored", "won", "lost")),
    ),
    ContentDomain.FINANCIAL: (
        ("earnings", ("earnings", "quarterly", "revenue", "profit")),
        ("markets", ("index", "stocks", "shares", "trading", "rally")),
    ),
    ContentDomain.NEWS: (
        ("politics", ("election", "president", "minister", "parliament", "senate")),
        ("breaking", ("breaking", "developing", "update")),
    ),
    ContentDomain.TECHNICAL: (
        ("tutorial", ("install", "step", "tutorial", "guide", "example")),
        ("reference", ("parameter", "returns", "argument", "api", "method")),
    ),
}

_DOMAIN_STEMS = {domain: frozenset(stem(word) for word in words) for domain, words in DOMAIN_KEYWORDS.items()}


@dataclass(slots=True, frozen=True)
class DensitySignals:
    """Inputs of the information density score."""

    informativeness: float
    entity_count: int
    number_count: int
    vocabulary_ratio: float
    has_structure: bool
    keyword_density: float


def information_density_score(signals: DensitySignals, weights: DensityWeights) -> float:
    """Non-negative weighted sum, non-decreasing in every signal."""
    score = signals.informativeness * weights.informativeness
    score += signals.entity_count * weights.per_entity
    score += signals.number_count * weights.per_number
    if signals.vocabulary_ratio > weights.vocabulary_ratio:
        score += weights.vocabulary_bonus
    if signals.has_structure:
        score += weights.structure_bonus
    if signals.keyword_density > weights.keyword_density:
        score += weights.keyword_density_bonus
    return score


def density_level(score: float, weights: DensityWeights) -> InformationDensity:
    if score >= weights.high_threshold:
        return InformationDensity.HIGH
    if score >= weights.medium_threshold:
        return InformationDensity.MEDIUM
    return InformationDensity.LOW


def classify_domain(text: str, floor: int = 1) -> ContentDomain:
    """Domain with the most stemmed keyword matches, if above ``floor``."""
    stems = [stem(token) for token in tokenize(text)]
    best, best_count = ContentDomain.GENERAL, 0
    for domain, keywords in _DOMAIN_STEMS.items():
        count = sum(1 for s in stems if s in keywords)
        if count > best_count:
            best, best_count = domain, count
    return best if best_count > floor else ContentDomain.GENERAL


def classify_subtype(text: str, domain: ContentDomain) -> Optional[str]:
    words = set(tokenize(text))
    for subtype, keywords in SUBTYPE_KEYWORDS.get(domain, ()):
        if words.intersection(keywords):
            return subtype
    return None


class ContentClassifier:
    """Classifies a chunk from its entities, structure and lexical signals."""

    def __init__(self, extractor: EntityExtractor, config: ClassifierConfig):
        self.extractor = extractor
        self.config = config

    def classify(self, text: str, entities: EntitySet | None = None) -> ContentClassification:
        entities = entities if entities is not None else self.extractor.extract(text)
        signals = analyze_text_quality(text)
        key_terms = extract_key_terms(text, self.config.max_key_terms)

        has_numbers = bool(entities.numbers)
        has_list_structure = len(LIST_LINE_PATTERN.findall(text)) > self.config.list_line_threshold
        has_table = TABLE_MARKER in text or bool(TABLE_ROW_PATTERN.search(text))

        if has_numbers and (has_list_structure or has_table):
            content_type = ContentType.STRUCTURED
        elif has_numbers or has_list_structure:
            content_type = ContentType.MIXED
        else:
            content_type = ContentType.NARRATIVE

        words = text.lower().split()
        vocabulary_ratio = len(set(words)) / len(words) if words else 0.0
        density_score = information_density_score(
            DensitySignals(
                informativeness=signals.informativeness,
                entity_count=len(entities.named),
                number_count=len(entities.numbers),
                vocabulary_ratio=vocabulary_ratio,
                has_structure=has_table or has_list_structure,
                keyword_density=signals.keyword_density,
            ),
            self.config.density,
        )

        key_entities = self._key_entities(entities.named + key_terms)
        domain = classify_domain(text, self.config.domain_match_floor)

        classification = ContentClassification(
            content_type=content_type,
            domain=domain,
            information_density=density_level(density_score, self.config.density),
            key_entities=key_entities,
            has_numeric_data=has_numbers,
            has_list_structure=has_list_structure,
            has_table=has_table,
            readability_score=signals.readability,
            subtype=classify_subtype(text, domain),
            density_score=density_score,
        )
        logger.debug(
            "Classified content",
            content_type=content_type.value,
            domain=domain.value,
            density=classification.information_density.value,
            entities=len(key_entities),
        )
        return classification

    def _key_entities(self, candidates: List[str]) -> List[str]:
        seen = set()
        ordered = []
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                ordered.append(candidate)
        return ordered[: self.config.max_key_entities]
