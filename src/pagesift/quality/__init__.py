"""
Entity extraction, content classification and chunk quality scoring.
"""

from .classifier import ContentClassifier, DensitySignals, classify_domain, information_density_score
from .entities import EntityExtractor, EntitySet
from .nlp import load_spacy_model
from .scorer import QualityScorer, quality_score
from .text_signals import analyze_text_quality, extract_key_terms

__all__ = [
    "ContentClassifier",
    "DensitySignals",
    "EntityExtractor",
    "EntitySet",
    "QualityScorer",
    "analyze_text_quality",
    "classify_domain",
    "extract_key_terms",
    "information_density_score",
    "load_spacy_model",
    "quality_score",
]
