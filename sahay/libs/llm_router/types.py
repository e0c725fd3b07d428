"""Shared type utilities for the LLM router."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Task(str, Enum):
    """Supported LLM task types."""

    CHAT = "chat"
    # Short structured calls (emotion tagging, journal analysis) that may use a smaller model.
    ANALYSIS = "analysis"


class LLMError(RuntimeError):
    """Raised when a provider fails or returns no usable text."""


@dataclass(slots=True)
class GenerationOptions:
    """Per-call sampling options forwarded to the provider."""

    temperature: float = 0.7
    max_tokens: int = 1024
    response_mime_type: str | None = None


@dataclass(slots=True)
class LLMResponse:
    """Normalised LLM response payload returned by providers."""

    model: str
    task: Task
    text: str
    finish_reason: str | None = None
    usage: Mapping[str, Any] | None = None
    provider: str | None = None
    raw: Mapping[str, Any] | None = None


__all__ = ["GenerationOptions", "LLMError", "LLMResponse", "Task"]
