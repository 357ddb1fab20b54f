"""
Multi-stage summarization of a single chunk.

The state machine runs up to three abstractive passes, validating each one,
and falls back to extractive selection, then key facts, then the original
text. Backend failures never reach the caller.
"""

from __future__ import annotations

import math
from typing import Optional

import structlog

from pagesift.config.config import SummarizationConfig
from pagesift.protocols import (
    ContentClassification,
    SummarizationBackend,
    SummarizationStrategy,
    SummaryResult,
    SummaryStage,
)
from pagesift.quality.entities import EntityExtractor
from pagesift.utils.text import word_count

from .fallbacks import extractive_summary, key_facts_summary
from .postprocess import post_process_summary
from .strategy import first_pass_params, second_pass_params, select_strategy, third_pass_params
from .validation import validate_summary

logger = structlog.get_logger(__name__)

THIRD_PASS_TRIGGER = 1.2
MIN_THIRD_PASS_CHARS = 30
MIN_EXTRACTIVE_CHARS = 30
WORDS_PER_EXTRACTED_SENTENCE = 20


class MultiStageSummarizer:
    """Summarizes one chunk toward a target word count."""

    def __init__(
        self,
        backend: SummarizationBackend,
        extractor: EntityExtractor,
        config: SummarizationConfig,
    ):
        self.backend = backend
        self.extractor = extractor
        self.config = config
        self.logger = logger.bind(component="multi_stage_summarizer")

    async def summarize(
        self, text: str, target_words: int, classification: ContentClassification
    ) -> SummaryResult:
        if len(text.strip()) < self.config.min_input_chars:
            return SummaryResult(text=text, stage=SummaryStage.ORIGINAL)

        strategy = select_strategy(classification)
        self.logger.debug(
            "Summarizing chunk",
            words=word_count(text),
            target=target_words,
            compression=strategy.compression_level.value,
            iterations=strategy.max_iterations,
        )

        try:
            result = await self._abstractive(text, target_words, strategy, classification)
        except Exception as e:
            self.logger.warning("Summarization backend failed, using fallback", error=str(e))
            result = None

        if result is not None:
            return result
        return self._fallback(text, target_words, classification)

    async def _abstractive(
        self,
        text: str,
        target: int,
        strategy: SummarizationStrategy,
        classification: ContentClassification,
    ) -> Optional[SummaryResult]:
        first = await self.backend.summarize(
            text, first_pass_params(target, strategy, classification)
        )
        if not self._is_valid(text, first):
            self.logger.info("First pass rejected by validation")
            return None
        result = SummaryResult(post_process_summary(first, strategy.preserve_structure), SummaryStage.FIRST_PASS)

        if strategy.max_iterations < 2 or word_count(result.text) <= target:
            return result

        second = await self.backend.summarize(result.text, second_pass_params(target, strategy))
        if not self._is_valid(text, second):
            self.logger.info("Second pass rejected, keeping first pass")
            return result
        result = SummaryResult(post_process_summary(second, strategy.preserve_structure), SummaryStage.SECOND_PASS)

        if strategy.max_iterations < 3 or word_count(result.text) <= target * THIRD_PASS_TRIGGER:
            return result

        third = await self.backend.summarize(result.text, third_pass_params(target))
        if len(third.strip()) > MIN_THIRD_PASS_CHARS and self._is_valid(text, third):
            return SummaryResult(post_process_summary(third, strategy.preserve_structure), SummaryStage.THIRD_PASS)
        self.logger.info("Third pass rejected, keeping second pass")
        return result

    def _is_valid(self, original: str, summary: str) -> bool:
        validation = validate_summary(
            original, summary, self.extractor, self.config.min_validation_score
        )
        if not validation.is_valid:
            self.logger.debug("Summary validation failed", score=validation.score, issues=validation.issues)
        return validation.is_valid

    def _fallback(
        self, text: str, target: int, classification: ContentClassification
    ) -> SummaryResult:
        try:
            max_sentences = max(1, math.ceil(target / WORDS_PER_EXTRACTED_SENTENCE))
            extracted = extractive_summary(text, max_sentences, self.extractor)
            if len(extracted.strip()) > MIN_EXTRACTIVE_CHARS:
                return SummaryResult(extracted, SummaryStage.EXTRACTIVE)
        except Exception as e:
            self.logger.warning("Extractive fallback failed", error=str(e))

        try:
            facts = key_facts_summary(self.extractor.extract_key_information(text), classification)
            if facts:
                return SummaryResult(facts, SummaryStage.KEY_FACTS)
        except Exception as e:
            self.logger.warning("Key facts fallback failed", error=str(e))

        return SummaryResult(text, SummaryStage.ORIGINAL)
