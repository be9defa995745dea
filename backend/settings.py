from __future__ import annotations

import os
from typing import Any, Dict

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def get_settings() -> Dict[str, Any]:
    allowed_raw = os.getenv("ALLOWED_ORIGINS", "*")
    allowed_list = [o.strip() for o in allowed_raw.split(",") if o.strip()]
    return {
        "storage_backend": os.getenv("STORAGE_BACKEND", "sql").lower(),
        "database_url": os.getenv("DATABASE_URL", "sqlite:///./itr_filing.db"),
        "default_owner_id": os.getenv("DEFAULT_OWNER_ID", "dev-user"),
        "tax_year": int(os.getenv("TAX_YEAR", "2024")),
        "openrouter_api_key": os.getenv("OPENROUTER_API_KEY") or None,
        "vision_endpoint": os.getenv("VISION_ENDPOINT", "https://openrouter.ai/api/v1/chat/completions"),
        "vision_model": os.getenv("VISION_MODEL", "openai/gpt-4o-mini"),
        "vision_timeout": float(os.getenv("VISION_TIMEOUT", "30")),
        "allowed_origins": allowed_list,
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "max_upload_bytes": int(os.getenv("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES))),
    }


__all__ = ["MAX_UPLOAD_BYTES", "get_settings"]
