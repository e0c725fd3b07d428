"""Single-call Mitra reply without emotion tagging or memory."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Sequence

from sahay.apps.api.core.llm import generate_text
from sahay.apps.api.services.conversation.prompt_config import (
    LANGUAGE_REGISTRY,
    coerce_language,
    coerce_mode,
    format_history,
    persona_for,
)
from sahay.libs.llm_router import LLMError, LLMRouter

LOGGER = logging.getLogger(__name__)

CHAT_FAILED_TEXT = "AI chat failed. Please try again later."


async def chat_with_gemini(
    router: LLMRouter,
    message: str,
    *,
    mode: str | None = None,
    language: str | None = None,
    history: Sequence[Mapping[str, Any]] | None = None,
    temperature: float = 0.7,
    max_tokens: int = 1024,
) -> Dict[str, Any]:
    safe_mode = coerce_mode(mode)
    safe_language = coerce_language(language)
    history_text = format_history(history) or "none"
    prompt = (
        f"{persona_for(safe_mode, safe_language)} "
        f"{LANGUAGE_REGISTRY[safe_language]['translator_directive']}\n\n"
        f"Conversation History:\n{history_text}\n\n"
        f"User: {message}\n\nMitra:"
    )
    try:
        text = await generate_text(router, prompt, temperature=temperature, max_tokens=max_tokens)
    except LLMError as exc:
        LOGGER.warning("[responder] chat failed: %s", exc)
        return {"text": CHAT_FAILED_TEXT, "error": str(exc), "language": safe_language, "mode": safe_mode}
    return {"text": text, "language": safe_language, "mode": safe_mode}


__all__ = ["CHAT_FAILED_TEXT", "chat_with_gemini"]
