from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Header

from backend.document_store import (
    InMemoryDocumentRepository,
    InMemoryItrFormRepository,
    SqlDocumentRepository,
    SqlItrFormRepository,
)
from backend.filing_service import FilingService
from backend.settings import get_settings
from extraction.vision import VisionExtractor
from rule_engine import get_context_for_year

logger = logging.getLogger(__name__)


def build_filing_service(settings: Optional[dict] = None) -> FilingService:
    settings = settings or get_settings()
    if settings["storage_backend"] == "memory":
        documents, forms = InMemoryDocumentRepository(), InMemoryItrFormRepository()
    else:
        from backend.db import build_engine, build_session_factory, init_db

        engine = build_engine(settings["database_url"])
        init_db(bind=engine)
        session_factory = build_session_factory(engine)
        documents, forms = SqlDocumentRepository(session_factory), SqlItrFormRepository(session_factory)

    vision = VisionExtractor.from_settings(settings)
    if not vision.enabled:
        logger.info("OPENROUTER_API_KEY not set; image uploads fall back to heuristics")
    return FilingService(
        documents,
        forms,
        vision=vision,
        tax_context=get_context_for_year(settings["tax_year"]),
        max_upload_bytes=settings["max_upload_bytes"],
    )


@lru_cache(maxsize=1)
def get_filing_service() -> FilingService:
    return build_filing_service()


def get_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> str:
    """Filer identity; authentication is handled in front of this service."""
    if x_owner_id and x_owner_id.strip():
        return x_owner_id.strip()
    return get_settings()["default_owner_id"]


__all__ = ["build_filing_service", "get_filing_service", "get_owner_id"]
