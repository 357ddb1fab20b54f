"""
Shared test configuration for PageSift.

Tests run against a blank spaCy English pipeline with a sentencizer and an
entity ruler, so no model download is needed, and against in-process fake
summarization backends.
"""

# Standard library imports
import asyncio
from typing import List

# Third-party imports
import pytest
import spacy

# Local imports
from pagesift.config.config import Config, SummarizationConfig
from pagesift.notifications import InMemoryNotificationSink
from pagesift.pipeline import CleanPipeline
from pagesift.protocols import SummarizeParams
from pagesift.quality.entities import EntityExtractor
from pagesift.summarizer import BackendDescriptor, SummarizationService

ENTITY_PATTERNS = [
    {"label": "PERSON", "pattern": "LeBron James"},
    {"label": "PERSON", "pattern": "Jayson Tatum"},
    {"label": "PERSON", "pattern": "Ada Lovelace"},
    {"label": "ORG", "pattern": "Lakers"},
    {"label": "ORG", "pattern": "Celtics"},
    {"label": "ORG", "pattern": "Acme Corp"},
    {"label": "GPE", "pattern": "Boston"},
    {"label": "GPE", "pattern": [{"LOWER": "los"}, {"LOWER": "angeles"}]},
    {"label": "MONEY", "pattern": [{"ORTH": "$"}, {"LIKE_NUM": True}]},
    {"label": "PERCENT", "pattern": [{"LIKE_NUM": True}, {"ORTH": "%"}]},
    {
        "label": "DATE",
        "pattern": [{"LOWER": {"IN": ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]}}],
    },
]

LAKERS_HTML = (
    "<html><body><nav>Home About</nav><article><h1>Lakers Win</h1>"
    "<p>LeBron James scored 35 points as the Lakers defeated the Celtics 112-108.</p>"
    "</article><footer>© 2025</footer></body></html>"
)


# ============================================================================
# Fake collaborators
# ============================================================================


class FakeBackend:
    """Deterministic backend: returns a fixed summary or the first ``max_length`` words."""

    def __init__(self, response: str | None = None):
        self.response = response
        self.calls: List[SummarizeParams] = []

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        self.calls.append(params)
        if self.response is not None:
            return self.response
        return " ".join(text.split()[: params.max_length])


class FailingBackend:
    """Backend that always raises."""

    def __init__(self) -> None:
        self.calls = 0

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        self.calls += 1
        raise RuntimeError("model exploded")


class SlowBackend:
    """Backend that never answers within a test timeout."""

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        await asyncio.sleep(10)
        return text


def descriptor_for(backend, name: str = "fake") -> BackendDescriptor:
    async def load():
        return backend

    return BackendDescriptor(name=name, load=load)


# ============================================================================
# Core fixtures
# ============================================================================


@pytest.fixture(scope="session")
def nlp():
    """Blank English pipeline with sentence boundaries and rule-based entities."""
    pipeline = spacy.blank("en")
    pipeline.add_pipe("sentencizer")
    ruler = pipeline.add_pipe("entity_ruler")
    ruler.add_patterns(ENTITY_PATTERNS)
    return pipeline


@pytest.fixture
def entity_extractor(nlp) -> EntityExtractor:
    return EntityExtractor(nlp)


@pytest.fixture
def test_config() -> Config:
    """Default configuration with fast retries and short timeouts."""
    return Config(
        summarization=SummarizationConfig(
            retry_wait_seconds=0,
            init_timeout=1.0,
            pass_timeout=1.0,
            document_timeout=5.0,
        )
    )


@pytest.fixture
def notification_sink() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def make_service(test_config):
    def factory(backend) -> SummarizationService:
        return SummarizationService([descriptor_for(backend)], test_config.summarization)

    return factory


@pytest.fixture
def make_pipeline(test_config, nlp, notification_sink, make_service):
    def factory(backend=None, config: Config | None = None) -> CleanPipeline:
        cfg = config or test_config
        service = make_service(backend or FakeBackend())
        return CleanPipeline(cfg, nlp=nlp, summarization_service=service, notification_sink=notification_sink)

    return factory


@pytest.fixture
def lakers_html() -> str:
    return LAKERS_HTML
