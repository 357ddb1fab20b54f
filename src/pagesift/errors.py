"""
Exception hierarchy for PageSift.
"""

from __future__ import annotations


class PageSiftError(Exception):
    """Base class for all PageSift errors."""


class InputValidationError(PageSiftError):
    """Raw input rejected before any DOM work."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class HtmlTooLargeError(InputValidationError):
    """HTML exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"HTML content too large for processing ({size} > {limit} characters)")
        self.size = size
        self.limit = limit


class NoReadableContentError(PageSiftError):
    """Neither readability nor region scoring found a content block."""

    def __init__(self, url: str | None) -> None:
        super().__init__(f"No readable content found at {url}.")
        self.url = url


class SummarizationError(PageSiftError):
    """A summarization backend call failed."""


class BackendUnavailableError(SummarizationError):
    """No candidate summarization backend could be loaded."""


class CircuitOpenError(SummarizationError):
    """The circuit breaker is open and refuses calls."""

    def __init__(self, name: str, retry_in: float) -> None:
        super().__init__(f"Circuit '{name}' is open, retry in {retry_in:.1f}s")
        self.name = name
        self.retry_in = retry_in


class ExtractionError(PageSiftError):
    """Unexpected failure while cleaning a page, wrapped with its source URL."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"Error cleaning HTML from {url}: {cause}")
        self.url = url
        self.cause = cause
