"""
Multi-stage summarization with validation, fallbacks and a shared backend service.
"""

from .backends import TransformersSummarizationBackend, transformers_descriptor
from .fallbacks import extractive_summary, key_facts_summary
from .multi_stage import MultiStageSummarizer
from .postprocess import post_process_summary
from .service import BackendAttempt, BackendDescriptor, SummarizationService
from .strategy import first_pass_params, second_pass_params, select_strategy, third_pass_params
from .validation import SummaryValidation, validate_summary

__all__ = [
    "BackendAttempt",
    "BackendDescriptor",
    "MultiStageSummarizer",
    "SummarizationService",
    "SummaryValidation",
    "TransformersSummarizationBackend",
    "extractive_summary",
    "first_pass_params",
    "key_facts_summary",
    "post_process_summary",
    "second_pass_params",
    "select_strategy",
    "third_pass_params",
    "transformers_descriptor",
    "validate_summary",
]
