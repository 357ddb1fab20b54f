"""
Fallbacks used when abstractive summarization fails or is rejected.
"""

from __future__ import annotations

from typing import List

from pagesift.protocols import ContentClassification
from pagesift.quality.entities import EntityExtractor

NUMERIC_WEIGHT = 2.0
NAMED_WEIGHT = 1.0
VERB_WEIGHT = 0.5
SHORT_SENTENCE_WORDS = 5
SHORT_SENTENCE_PENALTY = 2.0

KEY_TOPIC_COUNT = 3
MAX_FACTS = 6


def score_sentence(sentence: str, extractor: EntityExtractor) -> float:
    entities = extractor.extract(sentence)
    score = NUMERIC_WEIGHT * (len(entities.numbers) + len(entities.percentages) + len(entities.money))
    score += NAMED_WEIGHT * (len(entities.people) + len(entities.organizations))
    score += VERB_WEIGHT * len(entities.verbs)
    if len(sentence.split()) < SHORT_SENTENCE_WORDS:
        score -= SHORT_SENTENCE_PENALTY
    return score


def extractive_summary(text: str, max_sentences: int, extractor: EntityExtractor) -> str:
    """
    Pick the most informative sentences and keep them in document order.

    Sentences are ranked by entity content, the top ``max_sentences`` are
    selected and then re-sorted by position so the result reads as prose.
    """
    sentences = extractor.sentences(text)
    if len(sentences) <= max_sentences:
        return " ".join(sentences)

    scored = [(score_sentence(s, extractor), index) for index, s in enumerate(sentences)]
    # sorted() is stable, so ties keep the earlier sentence
    ranked = sorted(scored, key=lambda item: item[0], reverse=True)[:max_sentences]
    chosen = sorted(index for _, index in ranked)
    return " ".join(sentences[i] for i in chosen)


def key_facts_summary(facts: List[str], classification: ContentClassification) -> str:
    """Key topics from the classification followed by up to six atomic facts."""
    topics = classification.key_entities[:KEY_TOPIC_COUNT]
    topic_set = set(topics)
    others = [fact for fact in facts if fact not in topic_set][:MAX_FACTS]

    parts: List[str] = []
    if topics:
        parts.append(f"Key topics: {', '.join(topics)}.")
    if others:
        parts.append(f"Summary: {'; '.join(others)}.")
    return " ".join(parts)
