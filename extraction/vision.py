"""Optional vision-model extraction for image uploads.

The adapter talks to an OpenRouter-compatible chat completions endpoint and
returns None ("unavailable") whenever it cannot produce a result: no API key,
a non-image upload, a transport or HTTP error, a timeout, or a reply without a
usable JSON object. Callers treat None as "fall back to heuristics".
"""

from __future__ import annotations

import base64
import json
import logging
import math
from typing import Any, Dict, List, Optional

import requests

from extraction.amounts import safe_float
from extraction.models import (
    LOW_QUALITY_MESSAGE,
    SOURCE_VISION,
    DocumentType,
    ExtractedField,
    ExtractionResult,
    ExtractionSummary,
    Quality,
)

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_CONFIDENCE = 0.7

SYSTEM_PROMPT = (
    "You are an OCR+NLP extractor for Indian tax documents. Return ONLY compact JSON with fields: "
    "fields:[{name,value,confidence,source}], summary:{income,deductions,taxableIncome}, "
    "quality: 'good'|'low'|'unreadable', messages: string[]. "
    "Focus on PAN, Salary/Income, TDS, Deductions, Employer."
)


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Cut the outermost {...} block out of a model reply and parse it."""
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _non_negative(value: Any) -> float:
    number = safe_float(value, 0.0)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def _normalize_fields(raw_fields: Any) -> List[ExtractedField]:
    if not isinstance(raw_fields, list):
        return []
    fields: List[ExtractedField] = []
    for raw in raw_fields:
        if not isinstance(raw, dict) or raw.get("name") in (None, ""):
            continue
        value = raw.get("value")
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            value = "" if value is None else str(value)
        confidence = safe_float(raw.get("confidence"), DEFAULT_CONFIDENCE) or DEFAULT_CONFIDENCE
        fields.append(
            ExtractedField(
                name=str(raw["name"]),
                value=value,
                confidence=max(0.0, min(1.0, confidence)),
                source=SOURCE_VISION,
            )
        )
    return fields


def normalize_vision_payload(parsed: Dict[str, Any], declared_type: Optional[DocumentType]) -> ExtractionResult:
    """Coerce a loosely shaped model reply into an ExtractionResult."""
    summary_raw = parsed.get("summary") if isinstance(parsed.get("summary"), dict) else {}
    income = _non_negative(summary_raw.get("income"))
    deductions = _non_negative(summary_raw.get("deductions"))
    taxable_raw = summary_raw.get("taxableIncome", summary_raw.get("taxable_income"))
    taxable = max(0.0, income - deductions) if taxable_raw is None else _non_negative(taxable_raw)

    try:
        quality = Quality(str(parsed.get("quality", "good")).lower())
    except ValueError:
        quality = Quality.GOOD

    raw_messages = parsed.get("messages")
    messages = [str(m) for m in raw_messages if m is not None] if isinstance(raw_messages, list) else []
    if quality != Quality.GOOD and not messages:
        messages = [LOW_QUALITY_MESSAGE]

    return ExtractionResult(
        declared_type=declared_type,
        quality=quality,
        fields=_normalize_fields(parsed.get("fields")),
        summary=ExtractionSummary(income=income, deductions=deductions, taxable_income=taxable),
        messages=messages,
    )


class VisionExtractor:
    """Image-to-fields adapter around a remote multimodal chat model."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        timeout: float = 30,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint or DEFAULT_ENDPOINT
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "VisionExtractor":
        return cls(
            api_key=settings.get("openrouter_api_key"),
            endpoint=settings.get("vision_endpoint") or DEFAULT_ENDPOINT,
            model=settings.get("vision_model") or DEFAULT_MODEL,
            timeout=settings.get("vision_timeout", 30),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, content: bytes, mime_type: str, declared_type: Optional[DocumentType]) -> Dict[str, Any]:
        data_url = f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"
        label = declared_type.value if declared_type else "tax document"
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": data_url}},
                        {"type": "text", "text": f"Extract key fields from this {label}. Return JSON only."},
                    ],
                },
            ],
        }

    def extract(
        self,
        content: bytes,
        mime_type: str,
        declared_type: Optional[DocumentType],
    ) -> Optional[ExtractionResult]:
        if not self.enabled:
            return None
        if not (mime_type or "").lower().startswith("image/"):
            return None

        payload = self.build_payload(content, mime_type, declared_type)
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}
        try:
            resp = requests.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
            reply = body["choices"][0]["message"]["content"] or ""
        except Exception as exc:
            logger.warning("Vision extraction unavailable: %s", exc)
            return None

        parsed = extract_json_object(reply if isinstance(reply, str) else json.dumps(reply))
        if parsed is None:
            logger.warning("Vision reply did not contain a JSON object")
            return None
        try:
            return normalize_vision_payload(parsed, declared_type)
        except (TypeError, ValueError) as exc:
            logger.warning("Vision reply could not be normalized: %s", exc)
            return None


__all__ = ["VisionExtractor", "extract_json_object", "normalize_vision_payload"]
