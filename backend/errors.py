"""Error taxonomy for the filing service; the HTTP layer maps these to status codes."""

from __future__ import annotations

from typing import Dict


class FilingError(Exception):
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class IngestError(FilingError):
    """Upload rejected before anything was stored."""


class UploadTooLarge(IngestError):
    status_code = 413


class ExtractionFailure(FilingError):
    """The extraction pipeline raised; recorded on the document, never surfaced to callers."""

    status_code = 500


class CorrectionRejected(FilingError):
    status_code = 422

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__("One or more corrections were rejected.")
        self.errors = dict(errors)


class NoExtractedData(FilingError):
    pass


class DocumentNotFound(FilingError):
    status_code = 404

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Document not found: {doc_id}")
        self.doc_id = doc_id


class FormNotFound(FilingError):
    status_code = 404

    def __init__(self, form_id: str) -> None:
        super().__init__(f"ITR form not found: {form_id}")
        self.form_id = form_id


__all__ = [
    "CorrectionRejected",
    "DocumentNotFound",
    "ExtractionFailure",
    "FilingError",
    "FormNotFound",
    "IngestError",
    "NoExtractedData",
    "UploadTooLarge",
]
