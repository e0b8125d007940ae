from __future__ import annotations

import re

from extractor.core.prompt import NO_TABLE_MARKER


_FENCE_RE = re.compile(r"```csv|```")


def strip_code_fences(text: str) -> str:
    """Drop every ```csv / ``` marker, wherever the model put it."""
    return _FENCE_RE.sub("", text or "").strip()


def is_no_table_marker(text: str) -> bool:
    cleaned = (text or "").strip().strip('"').strip()
    return cleaned.upper() == NO_TABLE_MARKER
