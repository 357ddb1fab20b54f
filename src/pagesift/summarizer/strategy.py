"""
Compression strategy and generation parameters per summarization pass.
"""

from __future__ import annotations

from pagesift.protocols import (
    CompressionLevel,
    ContentClassification,
    ContentType,
    InformationDensity,
    SummarizationStrategy,
    SummarizeParams,
)

DEFAULT_STRATEGY = SummarizationStrategy(
    first_pass_ratio=1.8,
    compression_level=CompressionLevel.MODERATE,
    preserve_structure=False,
    max_iterations=2,
)


def select_strategy(classification: ContentClassification) -> SummarizationStrategy:
    """Derive the strategy from content shape and information density."""
    structured = classification.content_type is ContentType.STRUCTURED
    density = classification.information_density

    if structured and density is InformationDensity.HIGH:
        return SummarizationStrategy(1.6, CompressionLevel.GENTLE, True, 2)
    if structured:
        # Dense tables and lists get an extra pass to reach the target
        return SummarizationStrategy(1.5, CompressionLevel.MODERATE, True, 3)
    if density is InformationDensity.LOW:
        return SummarizationStrategy(1.2, CompressionLevel.AGGRESSIVE, False, 1)
    if density is InformationDensity.HIGH:
        return SummarizationStrategy(1.9, CompressionLevel.GENTLE, False, 2)
    return DEFAULT_STRATEGY


def first_pass_params(
    target: int, strategy: SummarizationStrategy, classification: ContentClassification
) -> SummarizeParams:
    aggressive = strategy.compression_level is CompressionLevel.AGGRESSIVE
    return SummarizeParams(
        max_length=int(target * strategy.first_pass_ratio),
        min_length=int(target * 1.1),
        no_repeat_ngram_size=4 if aggressive else 3,
        do_sample=classification.content_type is ContentType.NARRATIVE,
        early_stopping=True,
    )


def second_pass_params(target: int, strategy: SummarizationStrategy) -> SummarizeParams:
    aggressive = strategy.compression_level is CompressionLevel.AGGRESSIVE
    return SummarizeParams(
        max_length=target,
        min_length=int(target * (0.5 if aggressive else 0.7)),
        no_repeat_ngram_size=4,
        do_sample=False,
        early_stopping=True,
    )


def third_pass_params(target: int) -> SummarizeParams:
    return SummarizeParams(
        max_length=int(target * 0.9),
        min_length=int(target * 0.5),
        no_repeat_ngram_size=5,
        do_sample=False,
        early_stopping=True,
    )
