"""
Splits Markdown into semantically bounded chunks within a word budget.
"""

from __future__ import annotations

import re
from typing import Callable, List, Protocol, Tuple

import structlog
from rapidfuzz import fuzz

from pagesift.config.config import ChunkingConfig
from pagesift.utils.text import SENTENCE_BOUNDARY_PATTERN, normalize_for_compare, word_count

logger = structlog.get_logger(__name__)

SEPARATOR_LINE = re.compile(r"^---[ \t]*$", re.M)
BEFORE_HEADING = re.compile(r"\n(?=#{1,6}\s)")
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class _Scorer(Protocol):
    def score(self, text: str) -> int:
        ...


def _split_headings(text: str) -> List[str]:
    # Each part is a heading together with the body that follows it
    return BEFORE_HEADING.split(text)


def _split_paragraphs(text: str) -> List[str]:
    return PARAGRAPH_BREAK.split(text)


def _split_sentences(text: str) -> List[str]:
    return SENTENCE_BOUNDARY_PATTERN.split(text)


# Tried in order, each with the joiner used to pack its parts back together
SPLITTERS: Tuple[Tuple[Callable[[str], List[str]], str], ...] = (
    (_split_headings, "\n\n"),
    (_split_paragraphs, "\n\n"),
    (_split_sentences, " "),
)


class Chunker:
    """
    Word-budget chunker.

    Sections delimited by ``---`` lines are kept whole when they fit. Larger
    sections are split at headings, then paragraphs, then sentences, and the
    parts are packed greedily. A unit that cannot be split further is
    emitted on its own even if it exceeds the budget, so no content is lost.
    """

    def __init__(self, config: ChunkingConfig):
        self.config = config

    def adaptive_chunk_size(self, base: int, quality: int) -> int:
        """Scale the budget by document quality: larger for good prose, smaller for poor."""
        if quality >= self.config.high_quality_score:
            factor = self.config.high_quality_multiplier
        elif quality >= self.config.medium_quality_score:
            factor = self.config.medium_quality_multiplier
        elif quality < self.config.low_quality_score:
            factor = self.config.low_quality_multiplier
        else:
            factor = 1.0
        return max(1, round(base * factor))

    def chunk(self, markdown: str, max_words: int | None = None) -> List[str]:
        budget = max_words or self.config.max_chunk_words
        chunks: List[str] = []
        for section in SEPARATOR_LINE.split(markdown):
            section = section.strip()
            if section:
                chunks.extend(self._chunk_section(section, budget, 0))
        logger.debug("Chunked markdown", chunks=len(chunks), budget=budget)
        return chunks

    def _chunk_section(self, text: str, budget: int, level: int) -> List[str]:
        if word_count(text) <= budget:
            return [text]
        for depth in range(level, len(SPLITTERS)):
            splitter, joiner = SPLITTERS[depth]
            parts = [p.strip() for p in splitter(text) if p.strip()]
            if len(parts) >= 2:
                return self._pack(parts, budget, depth, joiner)
        return [text]

    def _pack(self, parts: List[str], budget: int, depth: int, joiner: str) -> List[str]:
        chunks: List[str] = []
        current: List[str] = []
        current_words = 0

        def flush() -> None:
            nonlocal current, current_words
            if current:
                chunks.append(joiner.join(current))
            current, current_words = [], 0

        for part in parts:
            words = word_count(part)
            if words > budget:
                flush()
                chunks.extend(self._chunk_section(part, budget, depth + 1))
                continue
            if current and current_words + words > budget:
                flush()
            current.append(part)
            current_words += words
        flush()
        return chunks

    def drop_near_duplicates(self, sections: List[str], scorer: _Scorer) -> List[str]:
        """
        Remove sections nearly identical to an earlier one.

        Of two near-duplicates the higher-quality one (then the longer one)
        is kept, in the slot of the earlier section.
        """
        threshold = self.config.near_duplicate_threshold * 100
        kept: List[str] = []
        normalized: List[str] = []
        for section in sections:
            norm = normalize_for_compare(section)
            match = next(
                (i for i, other in enumerate(normalized) if fuzz.ratio(norm, other) > threshold),
                None,
            )
            if match is None:
                kept.append(section)
                normalized.append(norm)
                continue
            existing = kept[match]
            if (scorer.score(section), len(section)) > (scorer.score(existing), len(existing)):
                kept[match] = section
                normalized[match] = norm
        if len(kept) < len(sections):
            logger.debug("Dropped near-duplicate sections", dropped=len(sections) - len(kept))
        return kept
