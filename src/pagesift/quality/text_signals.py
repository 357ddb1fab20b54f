"""
Lightweight lexical signals: readability, keyword focus, sentiment and
informativeness, each normalized to [0, 1].

Used both by the content region pre-check and by the classifier.
"""

from __future__ import annotations

import re
from collections import Counter
from functools import lru_cache
from typing import List

import structlog
import textstat
from nltk.stem import PorterStemmer

from pagesift.protocols import TextQualitySignals

logger = structlog.get_logger(__name__)

_TOKEN = re.compile(r"[a-z0-9]+")
_NUMERIC = re.compile(r"^\d+$")

POSITIVE_WORDS = frozenset(
    {"good", "great", "excellent", "amazing", "wonderful", "fantastic", "best", "love", "perfect", "outstanding"}
)
NEGATIVE_WORDS = frozenset(
    {"bad", "terrible", "awful", "horrible", "worst", "hate", "disappointing", "poor", "failed", "broken"}
)
INFORMATIVE_WORDS = (
    "research",
    "study",
    "analysis",
    "data",
    "findings",
    "results",
    "according",
    "evidence",
    "statistics",
    "report",
    "survey",
)

_stemmer = PorterStemmer()


@lru_cache(maxsize=8192)
def stem(word: str) -> str:
    """Porter stem of a lowercase token."""
    return _stemmer.stem(word)


INFORMATIVE_STEMS = frozenset(stem(w) for w in INFORMATIVE_WORDS)


def tokenize(text: str) -> List[str]:
    """Lowercase alphanumeric tokens."""
    return _TOKEN.findall(text.lower())


def analyze_text_quality(text: str) -> TextQualitySignals:
    """
    Compute the normalized signals for ``text``.

    overall = 0.3 * readability + 0.2 * keyword density
              + 0.2 * sentiment + 0.3 * informativeness
    """
    tokens = tokenize(text)
    if not tokens:
        return TextQualitySignals()

    readability = min(1.0, max(0.0, textstat.flesch_reading_ease(text) / 100.0))

    stems = [stem(t) for t in tokens]
    meaningful = [s for s in stems if len(s) > 3]
    frequencies = Counter(meaningful)
    top = frequencies.most_common(10)
    keyword_density = sum(count for _, count in top) / len(meaningful) if meaningful else 0.0

    positive = sum(1 for t in tokens if t in POSITIVE_WORDS)
    negative = sum(1 for t in tokens if t in NEGATIVE_WORDS)
    polarity = max(-1.0, min(1.0, (positive - negative) / len(tokens)))
    sentiment = (polarity + 1.0) / 2.0

    informative = sum(1 for s in stems if s in INFORMATIVE_STEMS)
    informativeness = min(1.0, informative / max(len(tokens) * 0.1, 1.0))

    overall = readability * 0.3 + keyword_density * 0.2 + sentiment * 0.2 + informativeness * 0.3
    return TextQualitySignals(
        readability=readability,
        keyword_density=keyword_density,
        sentiment=sentiment,
        informativeness=informativeness,
        overall=overall,
    )


def extract_key_terms(text: str, max_terms: int = 10) -> List[str]:
    """Most frequent Porter stems of words longer than three letters, numbers excluded."""
    tokens = [t for t in tokenize(text) if len(t) > 3 and not _NUMERIC.match(t)]
    if not tokens:
        return []
    frequencies = Counter(stem(t) for t in tokens)
    # Counter.most_common keeps first-seen order among equal counts
    return [term for term, _ in frequencies.most_common(max_terms)]
