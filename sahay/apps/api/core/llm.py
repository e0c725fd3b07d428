from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from sahay.libs.llm_router import (
    Fallback,
    GenerationOptions,
    LLMError,
    LLMRouter,
    Parsed,
    Task,
    parse_or_default,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

JSON_MIME_TYPE = "application/json"


async def generate_text(
    router: LLMRouter,
    prompt: str,
    *,
    task: Task = Task.CHAT,
    temperature: float = 0.7,
    max_tokens: int = 1024,
    response_mime_type: str | None = None,
) -> str:
    """Return the model's text for ``prompt``; raises :class:`LLMError`."""

    response = await router.generate(
        prompt,
        task=task,
        options=GenerationOptions(
            temperature=temperature,
            max_tokens=max_tokens,
            response_mime_type=response_mime_type,
        ),
    )
    return response.text


async def generate_structured(
    router: LLMRouter,
    prompt: str,
    schema: type[T] | Any,
    default: T | Callable[[], T],
    *,
    task: Task = Task.ANALYSIS,
    temperature: float = 0.3,
    max_tokens: int = 600,
    json_mode: bool = True,
) -> Parsed[T]:
    """Generate and validate JSON output. Never raises."""

    try:
        text = await generate_text(
            router,
            prompt,
            task=task,
            temperature=temperature,
            max_tokens=max_tokens,
            response_mime_type=JSON_MIME_TYPE if json_mode else None,
        )
    except LLMError as exc:
        LOGGER.warning("[LLM] %s generation failed: %s", task.value, exc)
        value = default() if callable(default) else default
        return Fallback(value, f"generation failed: {exc}")

    result = parse_or_default(text, schema, default)
    if isinstance(result, Fallback):
        LOGGER.warning("[LLM] %s output rejected: %s", task.value, result.reason)
    return result


__all__ = ["JSON_MIME_TYPE", "generate_structured", "generate_text"]
