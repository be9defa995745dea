"""Turn raw PDF text or HTML markup into clean, line-oriented plain text."""

from __future__ import annotations

import html
import re

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_BLOCK_TAG_RE = re.compile(
    r"</?(br|p|div|tr|li|ul|ol|table|thead|tbody|h[1-6]|section|article|header|footer)\b[^>]*>",
    re.IGNORECASE,
)
_CELL_TAG_RE = re.compile(r"</?(td|th)\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INLINE_SPACE_RE = re.compile(r"[ \t\u00a0\u2007\u202f]+")


def strip_markup(raw: str) -> str:
    """Drop script/style blocks and tags; block-level tags become line breaks."""
    text = _SCRIPT_STYLE_RE.sub(" ", raw)
    text = _COMMENT_RE.sub(" ", text)
    text = _BLOCK_TAG_RE.sub("\n", text)
    text = _CELL_TAG_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    return html.unescape(text)


def normalize_text(raw: str | None, *, is_html: bool = False) -> str:
    if not raw:
        return ""
    text = strip_markup(raw) if is_html else raw
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_RE.sub("", text)

    lines = []
    blank_run = False
    for line in text.split("\n"):
        line = _INLINE_SPACE_RE.sub(" ", line).strip()
        if not line:
            # keep at most one blank line between content lines
            if lines and not blank_run:
                lines.append("")
            blank_run = True
            continue
        blank_run = False
        lines.append(line)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


__all__ = ["normalize_text", "strip_markup"]
