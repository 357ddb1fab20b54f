"""
Boilerplate removal and main-content extraction.
"""

from .boilerplate import BOILERPLATE_SELECTORS, pre_sanitize, remove_boilerplate
from .manager import MainContentExtractor
from .metadata import extract_page_metadata, render_frontmatter
from .models import ExtractResult
from .readability_extractor import ReadabilityExtractor
from .region_scorer import ContentRegionScorer, RegionSignals, score_region
from .structured_data import TableData, extract_structured_data, extract_table_data, structured_context_line

__all__ = [
    "BOILERPLATE_SELECTORS",
    "ContentRegionScorer",
    "ExtractResult",
    "MainContentExtractor",
    "ReadabilityExtractor",
    "RegionSignals",
    "TableData",
    "extract_page_metadata",
    "extract_structured_data",
    "extract_table_data",
    "pre_sanitize",
    "remove_boilerplate",
    "render_frontmatter",
    "score_region",
    "structured_context_line",
]
