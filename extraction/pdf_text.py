"""PDF text extraction with pdfplumber, falling back to PyPDF2."""

from __future__ import annotations

import io
import logging

import pdfplumber
from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)


def _text_with_pdfplumber(content: bytes) -> str:
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def _text_with_pypdf2(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def extract_pdf_text(content: bytes) -> str:
    """Return the text layer of a PDF, or "" when it cannot be read."""
    if not content:
        return ""
    text = ""
    try:
        text = _text_with_pdfplumber(content)
    except Exception as exc:
        logger.warning("pdfplumber extraction failed: %s", exc)
        text = ""

    if not text.strip():
        try:
            text = _text_with_pypdf2(content)
        except Exception as exc:
            logger.warning("PyPDF2 extraction failed: %s", exc)
            text = ""
    return text


__all__ = ["extract_pdf_text"]
