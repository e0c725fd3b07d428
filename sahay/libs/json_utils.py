from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any


def json_safe(obj: Any) -> Any:
    """Recursively convert store values (timestamps, tuples) into JSON-serializable structures."""

    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [json_safe(item) for item in obj]
    return obj


def extract_json_block(blob: str) -> str:
    """
    Strip markdown fences and trailing commas from LLM responses,
    returning a best-effort JSON string.
    """

    text = (blob or "").strip()
    if text.startswith("```"):
        newline_idx = text.find("\n")
        if newline_idx != -1:
            text = text[newline_idx + 1 :]
        if text.endswith("```"):
            text = text[:-3]
    text = text.strip()
    if text:
        opening_idx = _first_opening(text)
        if opening_idx > 0:
            text = text[opening_idx:]
        closing_idx = max(text.rfind("]"), text.rfind("}"))
        if closing_idx != -1:
            text = text[: closing_idx + 1]
    text = _strip_trailing_commas(text)
    return text.strip()


def _first_opening(text: str) -> int:
    positions = [idx for idx in (text.find("{"), text.find("[")) if idx != -1]
    return min(positions) if positions else -1


def _strip_trailing_commas(text: str) -> str:
    return re.sub(r",(\s*[}\]])", r"\1", text)


__all__ = ["json_safe", "extract_json_block"]
