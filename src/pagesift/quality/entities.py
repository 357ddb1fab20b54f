"""
Entity and fact extraction with spaCy.

Works with any pipeline: named entities need an ``ner`` or ``entity_ruler``
component, noun phrases need a parser, verbs need a tagger. Missing
components simply yield empty categories.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List

import structlog

from pagesift.utils.text import split_sentences

if TYPE_CHECKING:
    from spacy.language import Language
    from spacy.tokens import Doc

logger = structlog.get_logger(__name__)

QUOTATION_PATTERN = re.compile(r"\"([^\"]{3,})\"|“([^”]{3,})”")

PLACE_LABELS = ("GPE", "LOC")
NUMBER_LABELS = ("CARDINAL", "QUANTITY")

# Per-category caps for atomic facts
FACT_CAPS = {
    "numbers": 6,
    "people": 5,
    "places": 5,
    "organizations": 5,
    "dates": 3,
    "money": 4,
    "percentages": 4,
    "quotations": 2,
    "noun_phrases": 5,
}
MIN_FACT_LENGTH = 2


def _ordered_unique(values: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


@dataclass(slots=True)
class EntitySet:
    """Entities found in a text, each list in order of first appearance."""

    people: List[str] = field(default_factory=list)
    places: List[str] = field(default_factory=list)
    organizations: List[str] = field(default_factory=list)
    numbers: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    money: List[str] = field(default_factory=list)
    percentages: List[str] = field(default_factory=list)
    quotations: List[str] = field(default_factory=list)
    noun_phrases: List[str] = field(default_factory=list)
    verbs: List[str] = field(default_factory=list)

    @property
    def named(self) -> List[str]:
        """People, places and organizations."""
        return self.people + self.places + self.organizations

    def facts(self) -> List[str]:
        """Atomic facts, capped per category, each longer than two characters."""
        extracted: List[str] = []
        for category, cap in FACT_CAPS.items():
            extracted.extend(getattr(self, category)[:cap])
        return [item for item in extracted if len(item) > MIN_FACT_LENGTH]


class EntityExtractor:
    """Thin wrapper over a spaCy pipeline."""

    def __init__(self, nlp: "Language"):
        self.nlp = nlp

    def doc(self, text: str) -> "Doc":
        return self.nlp(text)

    def extract(self, text: str) -> EntitySet:
        return self.from_doc(self.doc(text), text)

    def from_doc(self, doc: "Doc", text: str | None = None) -> EntitySet:
        text = doc.text if text is None else text
        by_label: dict[str, List[str]] = {}
        for ent in doc.ents:
            by_label.setdefault(ent.label_, []).append(ent.text)

        numbers = [t for label in NUMBER_LABELS for t in by_label.get(label, [])]
        numbers += [token.text for token in doc if token.like_num]

        noun_phrases: List[str] = []
        if doc.has_annotation("DEP"):
            noun_phrases = [chunk.text for chunk in doc.noun_chunks if len(chunk) > 1]

        verbs: List[str] = []
        if doc.has_annotation("POS"):
            verbs = [token.text for token in doc if token.pos_ == "VERB"]

        quotations = [a or b for a, b in QUOTATION_PATTERN.findall(text)]

        return EntitySet(
            people=_ordered_unique(by_label.get("PERSON", [])),
            places=_ordered_unique(t for label in PLACE_LABELS for t in by_label.get(label, [])),
            organizations=_ordered_unique(by_label.get("ORG", [])),
            numbers=_ordered_unique(numbers),
            dates=_ordered_unique(by_label.get("DATE", [])),
            money=_ordered_unique(by_label.get("MONEY", [])),
            percentages=_ordered_unique(by_label.get("PERCENT", [])),
            quotations=_ordered_unique(quotations),
            noun_phrases=_ordered_unique(noun_phrases),
            verbs=verbs,
        )

    def sentences(self, text: str) -> List[str]:
        """Sentences from the pipeline's segmenter, or a punctuation split without one."""
        doc = self.doc(text)
        if doc.has_annotation("SENT_START"):
            return [s.text.strip() for s in doc.sents if s.text.strip()]
        return split_sentences(text)

    def extract_key_information(self, text: str) -> List[str]:
        """Atomic facts of ``text``."""
        return self.extract(text).facts()
