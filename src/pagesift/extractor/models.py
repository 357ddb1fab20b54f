"""
Data models for extraction results.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ExtractResult:
    """Main content block found in a page."""

    url: str | None
    title: str | None
    content_html: str
    text: str
    source: str  # "readability" or "region"
    score: float

    def __post_init__(self) -> None:
        """Validate the result."""
        if not (0.0 <= self.score <= 1.0):
            raise ValueError("Score must be between 0.0 and 1.0")
