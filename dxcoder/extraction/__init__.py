"""Context extraction: structured fields, narrative phrases, synchronization."""

from dxcoder.extraction.context import ClinicalContext
from dxcoder.extraction.extractor import ContextExtractor, ExtractionResult, extract_context

__all__ = ["ClinicalContext", "ContextExtractor", "ExtractionResult", "extract_context"]
