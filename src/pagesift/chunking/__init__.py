"""Word-budget chunking of Markdown."""

from .chunker import Chunker

__all__ = ["Chunker"]
