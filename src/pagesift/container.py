"""
Dependency injection container for PageSift.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import structlog

from pagesift.config import Config
from pagesift.notifications import LoggingNotificationSink
from pagesift.protocols import NotificationSink

if TYPE_CHECKING:
    from spacy.language import Language

    from pagesift.pipeline import CleanPipeline
    from pagesift.summarizer import SummarizationService


class DependencyContainer:
    """
    Builds and caches the configuration, the spaCy pipeline, the shared
    summarization service and the clean pipeline.

    Any of them can be supplied up front, which is how tests swap in a
    blank spaCy pipeline or a fake backend.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        *,
        config: Optional[Config] = None,
        nlp: Optional["Language"] = None,
        summarization_service: Optional["SummarizationService"] = None,
        notification_sink: Optional[NotificationSink] = None,
    ) -> None:
        self.config_path = config_path
        self._config = config
        self._nlp = nlp
        self._service = summarization_service
        self._sink = notification_sink
        self._pipeline: Optional["CleanPipeline"] = None
        self._lock = asyncio.Lock()
        self.logger = structlog.get_logger(self.__class__.__name__)

    @property
    def config(self) -> Config:
        if self._config is None:
            if self.config_path and self.config_path.exists():
                self._config = Config.from_yaml(self.config_path)
            else:
                self._config = Config()
            self.logger.info(
                "Configuration loaded",
                config_path=str(self.config_path) if self.config_path else "default",
            )
        return self._config

    async def get_nlp(self) -> "Language":
        """Load the configured spaCy pipeline in a worker thread, once."""
        if self._nlp is None:
            from pagesift.quality.nlp import load_spacy_model

            self._nlp = await asyncio.to_thread(load_spacy_model, self.config.classifier.spacy_model)
        return self._nlp

    def get_summarization_service(self) -> "SummarizationService":
        if self._service is None:
            from pagesift.summarizer import SummarizationService, transformers_descriptor

            descriptors = [transformers_descriptor(name) for name in self.config.summarization.models]
            self._service = SummarizationService(descriptors, self.config.summarization)
        return self._service

    async def get_pipeline(self) -> "CleanPipeline":
        async with self._lock:
            if self._pipeline is None:
                from pagesift.pipeline import CleanPipeline

                self._pipeline = CleanPipeline(
                    self.config,
                    nlp=await self.get_nlp(),
                    summarization_service=self.get_summarization_service(),
                    notification_sink=self._sink or LoggingNotificationSink(),
                )
                self.logger.info("Clean pipeline ready")
            return self._pipeline

    def get_health_status(self) -> dict[str, Any]:
        """What has been built so far and which backend is active."""
        return {
            "config_loaded": self._config is not None,
            "nlp_loaded": self._nlp is not None,
            "pipeline_ready": self._pipeline is not None,
            "summarization_backend": self._service.active_backend_name if self._service else None,
        }
