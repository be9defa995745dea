"""Tax document field extraction: text cleanup, amounts, heuristics and vision fallback."""

from .amounts import parse_amount, safe_float
from .heuristics import extract_heuristics
from .models import (
    DocumentType,
    ExtractedField,
    ExtractionResult,
    ExtractionSummary,
    Quality,
    canonical_name,
    field_key,
    parse_document_type,
)
from .pipeline import extract_document
from .text_cleaning import normalize_text
from .vision import VisionExtractor

__all__ = [
    "DocumentType",
    "ExtractedField",
    "ExtractionResult",
    "ExtractionSummary",
    "Quality",
    "VisionExtractor",
    "canonical_name",
    "extract_document",
    "extract_heuristics",
    "field_key",
    "normalize_text",
    "parse_amount",
    "parse_document_type",
    "safe_float",
]
