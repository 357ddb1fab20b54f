"""
Pipeline orchestration for PageSift.

One ``clean_html`` call runs its phases strictly in sequence: sanitize,
extract, convert, normalize, clean, chunk and summarize. The only waits are
on the summarization backend and the notification sink.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Iterable, List, Optional, Set, Tuple

import structlog
from structlog.contextvars import bound_contextvars
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from pagesift.chunking import Chunker
from pagesift.config.config import Config
from pagesift.errors import ExtractionError, HtmlTooLargeError, NoReadableContentError, SummarizationError
from pagesift.extractor import (
    MainContentExtractor,
    extract_page_metadata,
    extract_structured_data,
    pre_sanitize,
    remove_boilerplate,
    render_frontmatter,
    structured_context_line,
)
from pagesift.markdown import MarkdownArtifactCleaner, dedupe_content, html_to_markdown, pretty_whitespace
from pagesift.notifications import LoggingNotificationSink
from pagesift.protocols import NotificationSink, PageResult, QualityAssessment
from pagesift.quality import ContentClassifier, EntityExtractor, QualityScorer
from pagesift.summarizer import MultiStageSummarizer, SummarizationService

if TYPE_CHECKING:
    from spacy.language import Language

logger = structlog.get_logger(__name__)

CHUNK_SEPARATOR = "\n\n---\n\n"
TOO_SHORT_MARKER = "Content too short after cleaning."
BATCH_ERROR_CONTENT = "Error fetching content"


class CleanOptions(BaseModel):
    """Per-call options of ``clean_html``."""

    min_quality_score: Optional[int] = Field(default=None, ge=0, le=100, description="Overrides the configured gate.")
    max_chunk_words: Optional[int] = Field(default=None, gt=0, description="Overrides the configured chunk budget.")
    include_frontmatter: bool = False
    preserve_links: bool = True
    summarize: bool = True
    extra_selectors: List[str] = Field(default_factory=list, description="Additional boilerplate selectors.")


class CleanPipeline:
    """
    Turns raw HTML into a clean, deduplicated, quality-gated Markdown document.

    Several pipelines may share one ``SummarizationService``. Without a
    service, chunks pass the quality gate unsummarized.
    """

    def __init__(
        self,
        config: Config,
        *,
        nlp: "Language",
        summarization_service: Optional[SummarizationService] = None,
        notification_sink: Optional[NotificationSink] = None,
        extractor: Optional[MainContentExtractor] = None,
    ):
        self.config = config
        self.summarization_service = summarization_service
        self.notification_sink = notification_sink or LoggingNotificationSink()
        self.extractor = extractor or MainContentExtractor(config.extraction)

        self.entities = EntityExtractor(nlp)
        self.classifier = ContentClassifier(self.entities, config.classifier)
        self.scorer = QualityScorer(config.quality)
        self.chunker = Chunker(config.chunking)
        self.cleaner = MarkdownArtifactCleaner(config.markdown)
        self.summarizer = (
            MultiStageSummarizer(summarization_service, self.entities, config.summarization)
            if summarization_service is not None
            else None
        )

        self._background_tasks: Set[asyncio.Task] = set()
        self.logger = logger.bind(component="clean_pipeline")

    async def clean_html(self, raw_html: str, url: str, options: Optional[CleanOptions] = None) -> str:
        """
        Clean one page.

        Returns ``""`` for empty input or a page without readable content and
        a short marker when too little survives cleaning.

        Raises:
            HtmlTooLargeError: the input exceeds the size ceiling. Raised
                before any parsing.
            ExtractionError: an unexpected failure, carrying the URL and cause.
        """
        options = options or CleanOptions()
        settings = self.config.extraction

        if raw_html and len(raw_html) > settings.max_html_length:
            raise HtmlTooLargeError(len(raw_html), settings.max_html_length)
        if not raw_html or len(raw_html) < settings.min_html_length:
            self.logger.info("HTML content too short, skipping", url=url, length=len(raw_html or ""))
            return ""

        with bound_contextvars(source_url=url):
            start = time.perf_counter()
            try:
                result = await self._clean(raw_html, url, options)
            except Exception as e:
                self.logger.error("Error cleaning HTML", error=str(e), exc_info=True)
                raise ExtractionError(url, e) from e
            self.logger.info(
                "Cleaned HTML",
                input_chars=len(raw_html),
                output_chars=len(result),
                duration=round(time.perf_counter() - start, 3),
            )
            return result

    async def _clean(self, raw_html: str, url: str, options: CleanOptions) -> str:
        soup = BeautifulSoup(raw_html, "lxml")
        structured = extract_structured_data(soup)
        metadata = extract_page_metadata(raw_html, soup, url) if options.include_frontmatter else None

        selectors = [*self.config.extraction.extra_boilerplate_selectors, *options.extra_selectors]
        pre_sanitize(soup)
        removed = remove_boilerplate(soup, selectors)
        self.logger.debug("Removed boilerplate", elements=removed, structured_items=len(structured))

        try:
            extracted = await self.extractor.extract(soup, url)
        except NoReadableContentError as e:
            self._notify(str(e))
            return ""

        body = BeautifulSoup(extracted.content_html, "lxml")
        pre_sanitize(body, keep_json_ld=False)
        remove_boilerplate(body, selectors)

        markdown = html_to_markdown(body, self.config.markdown, preserve_links=options.preserve_links)
        context = structured_context_line(structured)
        if context:
            markdown = context + CHUNK_SEPARATOR + markdown

        markdown = dedupe_content(pretty_whitespace(markdown))
        if len(markdown.strip()) < self.config.extraction.min_markdown_length:
            self.logger.info("Content too short after cleaning", chars=len(markdown.strip()))
            return TOO_SHORT_MARKER

        markdown = self.cleaner.clean(markdown)

        try:
            result = await asyncio.wait_for(
                self.summarize_markdown(markdown, options, summarize=options.summarize),
                timeout=self.config.summarization.document_timeout,
            )
        except asyncio.TimeoutError:
            self.logger.warning(
                "Document summarization timed out, keeping unsummarized chunks",
                timeout=self.config.summarization.document_timeout,
            )
            result = await self.summarize_markdown(markdown, options, summarize=False)

        if metadata is not None:
            result = render_frontmatter(result, url, metadata)
        return result

    async def summarize_markdown(
        self, markdown: str, options: Optional[CleanOptions] = None, summarize: bool = True
    ) -> str:
        """Chunk, gate by quality, summarize where warranted and reassemble."""
        options = options or CleanOptions()
        base = options.max_chunk_words or self.config.chunking.max_chunk_words
        chunk_size = self.chunker.adaptive_chunk_size(base, self.scorer.score(markdown))

        chunks = self.chunker.drop_near_duplicates(self.chunker.chunk(markdown, chunk_size), self.scorer)

        kept: List[str] = []
        for chunk in chunks:
            assessment = self.scorer.assess(chunk, options.min_quality_score)
            if not assessment.passes_threshold:
                continue
            if summarize and self.summarizer is not None:
                kept.append(await self._summarize_chunk(chunk, assessment, chunk_size))
            else:
                kept.append(chunk)

        self.logger.debug("Processed chunks", total=len(chunks), kept=len(kept), chunk_size=chunk_size)
        return CHUNK_SEPARATOR.join(kept)

    async def _summarize_chunk(self, chunk: str, assessment: QualityAssessment, chunk_size: int) -> str:
        if self.summarizer is None:
            raise SummarizationError("no summarization service configured")
        settings = self.config.summarization

        if assessment.score >= settings.high_quality_score:
            threshold = settings.high_quality_min_words
        elif assessment.score >= settings.medium_quality_score:
            threshold = settings.medium_quality_min_words
        else:
            threshold = chunk_size
        if assessment.word_count <= threshold:
            return chunk

        classification = self.classifier.classify(chunk)
        if assessment.score >= settings.high_quality_score:
            has_data = classification.has_table or classification.has_numeric_data
            target = settings.high_quality_data_target if has_data else settings.high_quality_target
        elif assessment.score >= settings.medium_quality_score:
            target = (
                settings.medium_quality_list_target
                if classification.has_list_structure
                else settings.medium_quality_target
            )
        else:
            target = settings.low_quality_target

        result = await self.summarizer.summarize(chunk, target, classification)
        self.logger.debug(
            "Summarized chunk",
            stage=result.stage.value,
            words_in=assessment.word_count,
            target=target,
        )
        if len(result.text.strip()) > settings.min_output_chars:
            return result.text
        return chunk

    def _notify(self, message: str) -> None:
        task = asyncio.create_task(self._send_notification(message))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _send_notification(self, message: str) -> None:
        try:
            await self.notification_sink.notify(message)
        except Exception as e:
            self.logger.warning("Notification sink failed", error=str(e))

    async def flush_notifications(self) -> None:
        """Wait for pending notifications."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks))

    async def clean_many(
        self,
        pages: Iterable[Tuple[str, str]],
        concurrency: int = 4,
        options: Optional[CleanOptions] = None,
    ) -> List[PageResult]:
        """
        Clean ``(url, html)`` pairs concurrently.

        A failing page becomes a placeholder result; the batch always
        completes and keeps input order.
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def run(url: str, html: str) -> PageResult:
            async with semaphore:
                start = time.perf_counter()
                try:
                    content = await self.clean_html(html, url, options)
                except Exception as e:
                    self.logger.error("Page failed", url=url, error=str(e))
                    return PageResult(
                        url=url,
                        content=BATCH_ERROR_CONTENT,
                        error=str(e),
                        elapsed_seconds=time.perf_counter() - start,
                    )
                warnings: List[str] = []
                if not content:
                    warnings.append("no readable content")
                elif content == TOO_SHORT_MARKER:
                    warnings.append("content too short after cleaning")
                return PageResult(
                    url=url,
                    content=content,
                    elapsed_seconds=time.perf_counter() - start,
                    warnings=warnings,
                )

        results = await asyncio.gather(*(run(url, html) for url, html in pages))
        await self.flush_notifications()
        return list(results)
