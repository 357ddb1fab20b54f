"""
Hugging Face transformers summarization backend.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from pagesift.protocols import SummarizeParams

from .service import BackendDescriptor

logger = structlog.get_logger(__name__)


class TransformersSummarizationBackend:
    """Runs a ``summarization`` pipeline in a worker thread."""

    def __init__(self, pipe: Any, name: str):
        self.pipe = pipe
        self.name = name

    async def summarize(self, text: str, params: SummarizeParams) -> str:
        output = await asyncio.to_thread(self.pipe, text, truncation=True, **params.as_kwargs())
        return output[0]["summary_text"].strip()


def transformers_descriptor(model_name: str) -> BackendDescriptor:
    """Descriptor loading ``model_name`` lazily, off the event loop."""

    async def load() -> TransformersSummarizationBackend:
        # Heavy import deferred until a model is actually needed
        from transformers import pipeline

        logger.info("Loading summarization model", model=model_name)
        pipe = await asyncio.to_thread(pipeline, "summarization", model=model_name)
        return TransformersSummarizationBackend(pipe, model_name)

    return BackendDescriptor(name=model_name, load=load)
