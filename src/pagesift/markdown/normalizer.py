"""
Textual normalization of converted Markdown: whitespace and punctuation
folding, then global paragraph and sentence deduplication.
"""

from __future__ import annotations

import re
from typing import List, Set

import structlog

from pagesift.utils.text import SENTENCE_BOUNDARY_PATTERN, normalize_for_compare

logger = structlog.get_logger(__name__)

# Paragraphs starting with these are structure, kept verbatim and never deduplicated
STRUCTURAL_PREFIXES = ("#", "**", "```", "---", "|")

PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
LIST_LINE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")

MIN_RAW_SENTENCE = 10
MIN_NORMALIZED_SENTENCE = 20

_WHITESPACE_RULES = (
    (re.compile(r"[ \t]+\n"), "\n"),
    (re.compile(r"\n{3,}"), "\n\n"),
    (re.compile(r"^\*{3,}(?=\s|$)", re.M), "*"),
    (re.compile("^[·•]", re.M), "*"),
    (re.compile("[“”]"), '"'),
    (re.compile("[‘’]"), "'"),
    (re.compile("[—–]"), "-"),
    (re.compile("[  ]"), " "),
    (re.compile(r"\.{3,}"), "…"),
)


def pretty_whitespace(markdown: str) -> str:
    """Fold whitespace, bullet glyphs, curly punctuation and long ellipses."""
    for pattern, replacement in _WHITESPACE_RULES:
        markdown = pattern.sub(replacement, markdown)
    return markdown


def _is_list_block(paragraph: str) -> bool:
    lines = [line for line in paragraph.splitlines() if line.strip()]
    return bool(lines) and all(LIST_LINE.match(line) for line in lines)


def dedupe_content(markdown: str) -> str:
    """
    Drop repeated paragraphs and sentences across the whole document.

    A paragraph whose normalized form was already emitted is skipped. Inside
    a surviving paragraph, each sentence (each line for list blocks) long
    enough to be a candidate is kept only the first time it appears. Shorter
    sentences stay in place. A paragraph whose candidates were all seen
    before is dropped.
    """
    seen_paragraphs: Set[str] = set()
    seen_sentences: Set[str] = set()
    output: List[str] = []
    dropped = 0

    for paragraph in PARAGRAPH_SPLIT.split(markdown):
        trimmed = paragraph.strip()
        if not trimmed:
            continue

        if trimmed.startswith(STRUCTURAL_PREFIXES):
            output.append(trimmed)
            continue

        normalized = normalize_for_compare(trimmed)
        if normalized in seen_paragraphs:
            dropped += 1
            continue

        list_block = _is_list_block(trimmed)
        units = trimmed.splitlines() if list_block else SENTENCE_BOUNDARY_PATTERN.split(trimmed)

        kept: List[str] = []
        candidates = 0
        fresh = 0
        for unit in units:
            raw = unit.strip()
            if not raw:
                continue
            key = normalize_for_compare(raw)
            if len(raw) > MIN_RAW_SENTENCE and len(key) > MIN_NORMALIZED_SENTENCE:
                candidates += 1
                if key in seen_sentences:
                    continue
                seen_sentences.add(key)
                fresh += 1
            kept.append(unit.rstrip() if list_block else raw)

        if candidates and not fresh:
            dropped += 1
            continue

        seen_paragraphs.add(normalized)
        output.append("\n".join(kept) if list_block else " ".join(kept))

    if dropped:
        logger.debug("Deduplicated content", dropped_paragraphs=dropped)
    return "\n\n".join(output)
