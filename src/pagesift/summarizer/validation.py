"""
Quality gate applied to every summarizer output.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import List

from pagesift.quality.entities import EntityExtractor

SENTENCE_PIECES = re.compile(r"[.!?]+")

MIN_SUMMARY_CHARS = 10
REPETITION_PENALTY = 20
NO_SENTENCE_PENALTY = 30
ENTITY_LOSS_PENALTY = 25
TOP_ENTITIES = 5
MIN_PRESERVED_RATIO = 0.3


@dataclass(slots=True)
class SummaryValidation:
    is_valid: bool
    score: int
    issues: List[str] = field(default_factory=list)


def validate_summary(
    original: str,
    summary: str,
    extractor: EntityExtractor,
    min_score: int = 60,
) -> SummaryValidation:
    """
    Score a summary out of 100.

    Under ten characters is an outright rejection. Repeated words, no
    complete sentence and lost entities each cost points; the summary is
    accepted when the score stays at or above ``min_score``.
    """
    if not summary or len(summary.strip()) < MIN_SUMMARY_CHARS:
        return SummaryValidation(is_valid=False, score=0, issues=["Summary too short"])

    issues: List[str] = []
    score = 100

    words = summary.lower().split()
    limit = max(2, len(words) * 0.15)
    if any(len(w) > 3 and count > limit for w, count in Counter(words).items()):
        score -= REPETITION_PENALTY
        issues.append("Contains repetitive content")

    if not any(len(piece.strip()) > 5 for piece in SENTENCE_PIECES.split(summary)):
        score -= NO_SENTENCE_PENALTY
        issues.append("No complete sentences")

    original_entities = extractor.extract(original).named[:TOP_ENTITIES]
    if len(original_entities) > 2:
        lowered = summary.lower()
        preserved = sum(1 for entity in original_entities if entity.lower() in lowered)
        if preserved / len(original_entities) < MIN_PRESERVED_RATIO:
            score -= ENTITY_LOSS_PENALTY
            issues.append("Lost important entities")

    return SummaryValidation(is_valid=score >= min_score, score=score, issues=issues)
