"""
Protocols and dataclasses shared across the PageSift pipeline.

Data flows leaves-first: the extractor produces ContentRegion and
StructuredDataItem values, the classifier produces ContentClassification,
the quality scorer produces QualityAssessment, and the summarizer derives a
SummarizationStrategy from the classification. Nothing here outlives a single
clean_html call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, runtime_checkable

# ============================================================================
# Enums
# ============================================================================


class RegionType(Enum):
    """Role of a candidate DOM subtree."""

    MAIN = "main"
    SIDEBAR = "sidebar"
    NAVIGATION = "navigation"
    FOOTER = "footer"
    HEADER = "header"
    ADVERTISEMENT = "advertisement"


class StructuredDataType(Enum):
    TABLE = "table"
    LIST = "list"
    SCHEMA = "schema"
    MICRODATA = "microdata"


class ContentType(Enum):
    """Shape of a chunk of text."""

    STRUCTURED = "structured"
    MIXED = "mixed"
    NARRATIVE = "narrative"


class ContentDomain(Enum):
    """Topical domain decided by stemmed keyword counts."""

    SPORTS = "sports"
    FINANCIAL = "financial"
    NEWS = "news"
    TECHNICAL = "technical"
    GENERAL = "general"


class InformationDensity(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CompressionLevel(Enum):
    AGGRESSIVE = "aggressive"
    MODERATE = "moderate"
    GENTLE = "gentle"


class SummaryStage(Enum):
    """Terminal state of the multi-stage summarizer for one chunk."""

    FIRST_PASS = "first_pass"
    SECOND_PASS = "second_pass"
    THIRD_PASS = "third_pass"
    EXTRACTIVE = "extractive"
    KEY_FACTS = "key_facts"
    ORIGINAL = "original"


# ============================================================================
# Data structures
# ============================================================================


@dataclass(slots=True)
class ContentRegion:
    """A scored candidate for the main content block of a page."""

    element: Any
    score: float
    type: RegionType
    text_density: float
    link_density: float
    has_structured_data: bool
    text_length: int = 0


@dataclass(slots=True, frozen=True)
class StructuredDataItem:
    type: StructuredDataType
    payload: Any
    confidence: float


@dataclass(slots=True, frozen=True)
class TextQualitySignals:
    """Lightweight text statistics, every field in [0, 1]."""

    readability: float = 0.0
    keyword_density: float = 0.0
    sentiment: float = 0.5
    informativeness: float = 0.0
    overall: float = 0.0


@dataclass(slots=True, frozen=True)
class ContentClassification:
    content_type: ContentType
    domain: ContentDomain
    information_density: InformationDensity
    key_entities: List[str]
    has_numeric_data: bool
    has_list_structure: bool
    has_table: bool
    readability_score: float
    subtype: Optional[str] = None
    density_score: float = 0.0


@dataclass(slots=True, frozen=True)
class QualityAssessment:
    """Outcome of the chunk quality heuristic."""

    score: int
    word_count: int
    passes_threshold: bool
    has_numbers: bool = False
    has_proper_nouns: bool = False
    has_complete_structure: bool = False
    vocabulary_ratio: float = 0.0
    is_repetitive: bool = False
    promotional_matches: int = 0


@dataclass(slots=True, frozen=True)
class SummarizationStrategy:
    first_pass_ratio: float
    compression_level: CompressionLevel
    preserve_structure: bool
    max_iterations: int


@dataclass(slots=True, frozen=True)
class SummarizeParams:
    """Generation parameters handed to a summarization backend."""

    max_length: int
    min_length: int
    no_repeat_ngram_size: int = 3
    do_sample: bool = False
    early_stopping: bool = True

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "max_length": self.max_length,
            "min_length": self.min_length,
            "no_repeat_ngram_size": self.no_repeat_ngram_size,
            "do_sample": self.do_sample,
            "early_stopping": self.early_stopping,
        }


@dataclass(slots=True, frozen=True)
class SummaryResult:
    text: str
    stage: SummaryStage


@dataclass(slots=True, frozen=True)
class PageMetadata:
    """Fields rendered into the optional frontmatter block."""

    title: Optional[str] = None
    published: Optional[str] = None
    language: Optional[str] = None


@dataclass(slots=True)
class PageResult:
    """One entry of a batch run."""

    url: str
    content: str
    error: Optional[str] = None
    elapsed_seconds: float = 0.0
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


# ============================================================================
# Protocols
# ============================================================================


@runtime_checkable
class SummarizationBackend(Protocol):
    """An abstractive summarizer. Model identity is not part of the contract."""

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        """Return the summary text or raise."""
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """Side channel for messages about pages that produced no content."""

    async def notify(self, message: str) -> None:
        ...
