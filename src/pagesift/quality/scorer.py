"""
Heuristic 0-100 quality score for a chunk of text.

Chunks scoring below the configured minimum are dropped from the output
entirely rather than summarized or kept.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import replace

import structlog

from pagesift.config.config import QualityConfig, QualityWeights
from pagesift.protocols import QualityAssessment

logger = structlog.get_logger(__name__)

PROMOTIONAL_PATTERN = re.compile(
    r"\b(subscribe|follow|buy now|click here|sign up|download|register|join now)\b", re.I
)
NAVIGATION_PATTERN = re.compile(r"\b(home|about|contact|menu|search|login|profile|settings)\b", re.I)
METADATA_PATTERN = re.compile(r"\b(posted|updated|published|tags|categories|share|tweet|like)\b", re.I)
LOADING_PATTERN = re.compile(r"\b(loading|please wait|error|404|not found|unavailable)\b", re.I)
INFORMATIONAL_PATTERN = re.compile(
    r"\b(analysis|data|study|research|report|statistics|findings|results)\b", re.I
)
FACTUAL_PATTERN = re.compile(
    r"\b(according to|based on|study shows|data indicates|research suggests)\b", re.I
)

DIGIT_PATTERN = re.compile(r"\d")
PROPER_NOUN_PATTERN = re.compile(r"\b[A-Z][a-z]+\b")
TERMINATOR_RUN = re.compile(r"[.!?]+")

MIN_REPEATED_WORD_LENGTH = 4


def quality_score(text: str, weights: QualityWeights) -> QualityAssessment:
    """Score ``text``; ``passes_threshold`` is left False for the caller to decide."""
    trimmed = text.strip()
    if not trimmed:
        return QualityAssessment(score=0, word_count=0, passes_threshold=False)

    words = trimmed.split()
    word_count = len(words)
    score = weights.base

    if weights.sweet_spot_min_words <= word_count <= weights.sweet_spot_max_words:
        score += weights.sweet_spot_bonus
    elif weights.short_min_words <= word_count < weights.sweet_spot_min_words:
        score += weights.short_bonus
    elif word_count < weights.short_min_words:
        score -= weights.very_short_penalty
    elif word_count > weights.long_words:
        score -= weights.very_long_penalty

    has_numbers = bool(DIGIT_PATTERN.search(trimmed))
    has_proper_nouns = bool(PROPER_NOUN_PATTERN.search(trimmed))
    has_complete_structure = len(TERMINATOR_RUN.findall(trimmed)) >= weights.min_sentence_terminators

    if has_numbers:
        score += weights.digit_bonus
    if has_proper_nouns:
        score += weights.proper_noun_bonus
    if has_complete_structure:
        score += weights.structure_bonus

    lowered = [w.lower() for w in words]
    vocabulary_ratio = len(set(lowered)) / word_count
    if vocabulary_ratio > weights.rich_vocabulary_ratio:
        score += weights.rich_vocabulary_bonus
    elif vocabulary_ratio < weights.poor_vocabulary_ratio:
        score -= weights.poor_vocabulary_penalty

    promotional = len(PROMOTIONAL_PATTERN.findall(trimmed))
    score -= promotional * weights.promotional_penalty
    score -= len(NAVIGATION_PATTERN.findall(trimmed)) * weights.navigation_penalty
    score -= len(METADATA_PATTERN.findall(trimmed)) * weights.metadata_penalty
    score -= len(LOADING_PATTERN.findall(trimmed)) * weights.loading_penalty

    frequencies = Counter(w for w in lowered if len(w) >= MIN_REPEATED_WORD_LENGTH)
    repeat_floor = max(weights.repetition_min_count, word_count * weights.repetition_word_ratio)
    repeated = sum(count for count in frequencies.values() if count > repeat_floor)
    is_repetitive = repeated > word_count * weights.repetition_share
    if is_repetitive:
        score -= weights.repetition_penalty

    if INFORMATIONAL_PATTERN.search(trimmed):
        score += weights.informational_bonus
    if FACTUAL_PATTERN.search(trimmed):
        score += weights.factual_bonus

    return QualityAssessment(
        score=max(0, min(100, score)),
        word_count=word_count,
        passes_threshold=False,
        has_numbers=has_numbers,
        has_proper_nouns=has_proper_nouns,
        has_complete_structure=has_complete_structure,
        vocabulary_ratio=vocabulary_ratio,
        is_repetitive=is_repetitive,
        promotional_matches=promotional,
    )


class QualityScorer:
    """Applies the quality heuristic and the minimum score gate."""

    def __init__(self, config: QualityConfig):
        self.config = config

    def score(self, text: str) -> int:
        return quality_score(text, self.config.weights).score

    def assess(self, text: str, min_score: int | None = None) -> QualityAssessment:
        threshold = self.config.min_score if min_score is None else min_score
        result = quality_score(text, self.config.weights)
        assessment = replace(result, passes_threshold=result.score >= threshold)
        if not assessment.passes_threshold:
            logger.debug("Chunk below quality threshold", score=assessment.score, threshold=threshold)
        return assessment
