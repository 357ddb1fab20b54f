"""
PageSift - turns raw web pages into clean, summarized Markdown.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .container import DependencyContainer
from .pipeline import CleanOptions, CleanPipeline

__all__ = ["__version__", "CleanOptions", "CleanPipeline", "Config", "DependencyContainer"]
