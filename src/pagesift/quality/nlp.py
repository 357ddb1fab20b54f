"""
spaCy pipeline loading for entity extraction and sentence splitting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

logger = structlog.get_logger(__name__)

if TYPE_CHECKING:
    from spacy.language import Language


def load_spacy_model(name: str = "en_core_web_sm") -> "Language":
    """Load a spaCy pipeline, downloading it on first use."""
    import spacy

    try:
        return spacy.load(name)
    except OSError:
        logger.info("Downloading spacy model", model=name)
        spacy.cli.download(name)
        return spacy.load(name)
