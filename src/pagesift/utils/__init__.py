"""Utility modules for PageSift."""

from .text import normalize_for_compare, split_sentences, word_count

__all__ = ["normalize_for_compare", "split_sentences", "word_count"]
