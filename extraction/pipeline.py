"""Route an uploaded file to the right text source and run field extraction."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from extraction.heuristics import extract_heuristics
from extraction.models import DocumentType, ExtractionResult
from extraction.pdf_text import extract_pdf_text
from extraction.text_cleaning import normalize_text
from extraction.vision import VisionExtractor

logger = logging.getLogger(__name__)

PdfTextFn = Callable[[bytes], str]


def decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def extract_document(
    content: bytes,
    mime_type: str,
    declared_type: Optional[DocumentType],
    *,
    pdf_text: PdfTextFn = extract_pdf_text,
    vision: Optional[VisionExtractor] = None,
) -> ExtractionResult:
    """Produce an ExtractionResult for raw upload bytes.

    Unreadable inputs never raise here: an unparseable PDF, an image without a
    vision backend, or an unsupported mime type all end up as heuristics over
    empty text, i.e. an ``unreadable`` result with an advisory message.
    """
    mime = (mime_type or "").split(";")[0].strip().lower()

    if mime == "application/pdf":
        text = normalize_text(pdf_text(content))
    elif mime.startswith("image/"):
        result = vision.extract(content, mime, declared_type) if vision is not None else None
        if result is not None:
            return result
        logger.info("No vision result for %s upload; falling back to empty-text heuristics", mime)
        text = ""
    elif mime == "text/html":
        text = normalize_text(decode_text(content), is_html=True)
    elif mime == "text/plain":
        text = normalize_text(decode_text(content))
    else:
        logger.info("Unsupported mime type %r; nothing to extract", mime_type)
        text = ""

    return extract_heuristics(text, declared_type)


__all__ = ["decode_text", "extract_document"]
