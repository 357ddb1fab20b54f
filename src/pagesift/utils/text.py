"""
Small text helpers shared by the normalizer, the scorers and the summarizer.
"""

import re
from typing import List

# Split after terminal punctuation followed by whitespace, so "1.5" stays whole
SENTENCE_BOUNDARY_PATTERN = re.compile(r"(?<=[.!?])\s+")

WHITESPACE_PATTERN = re.compile(r"\s+")

# Anything that is not a word character or whitespace
PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")


def word_count(text: str) -> int:
    """Number of whitespace-separated words."""
    return len(text.split())


def split_sentences(text: str) -> List[str]:
    """Split text into sentences on terminal punctuation, dropping blanks."""
    return [s.strip() for s in SENTENCE_BOUNDARY_PATTERN.split(text.strip()) if s.strip()]


def normalize_for_compare(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    lowered = PUNCTUATION_PATTERN.sub(" ", text.lower())
    return WHITESPACE_PATTERN.sub(" ", lowered).strip()
