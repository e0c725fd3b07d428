from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Sequence

from sahay.apps.api.core.llm import generate_text
from sahay.apps.api.services.conversation.emotion_analyzer import analyze_emotion
from sahay.apps.api.services.conversation.memory_adapter import (
    fetch_user_context,
    record_conversation_turn,
)
from sahay.apps.api.services.conversation.prompt_config import (
    MAX_HISTORY_TURNS,
    build_prompt,
    coerce_language,
    coerce_mode,
)
from sahay.libs.llm_router import LLMError, LLMRouter, Task
from sahay.libs.store import DocumentStore

LOGGER = logging.getLogger(__name__)

SAFE_DEFAULT_RESPONSE = "I am here with you. Would you like to tell me more?"
GENERATION_WARNING = "Gemini generation threw an exception. Falling back to default response."


def sanitize_history(history: Sequence[Mapping[str, Any]] | None) -> List[Dict[str, str]]:
    """Normalise roles, drop empty turns and keep the most recent window."""

    cleaned: List[Dict[str, str]] = []
    for turn in history or []:
        if not isinstance(turn, Mapping):
            continue
        text = turn.get("text")
        if text is None:
            text = turn.get("content")
        if not isinstance(text, str) or not text.strip():
            continue
        role = "assistant" if turn.get("role") in {"assistant", "mitra", "model", "ai"} else "user"
        cleaned.append({"role": role, "text": text.strip()})
    return cleaned[-MAX_HISTORY_TURNS:]


async def run_conversation_turn(
    *,
    router: LLMRouter,
    store: DocumentStore,
    message: str,
    user_id: str,
    history: Sequence[Mapping[str, Any]] | None = None,
    mode: str | None = None,
    language: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    context_note: str | None = None,
    memory_enabled: bool = True,
) -> Dict[str, Any]:
    """
    Run one Mitra turn: memory fetch, emotion tagging, generation, memory write.

    Downstream failures only add to ``meta.warnings``; an empty message raises
    ``ValueError``.
    """

    text = (message or "").strip()
    if not text:
        raise ValueError("Message is required")

    safe_mode = coerce_mode(mode)
    safe_language = coerce_language(language)
    turns = sanitize_history(history)
    metadata = dict(metadata or {})
    warnings: List[str] = []

    memory_context, memory_warnings = await fetch_user_context(
        store, user_id, enabled=memory_enabled
    )
    warnings.extend(memory_warnings)

    emotion, emotion_warnings = await analyze_emotion(router, text, history=turns)
    warnings.extend(emotion_warnings)

    prompt_message = f"{context_note}\n\n{text}" if context_note else text
    prompt = build_prompt(
        prompt_message,
        mode=safe_mode,
        language=safe_language,
        history=turns,
        memory_facts=memory_context.get("facts"),
        emotion=emotion,
    )

    generation: Dict[str, Any] = {"fallback": False}
    reply = SAFE_DEFAULT_RESPONSE
    try:
        reply = await generate_text(
            router, prompt, task=Task.CHAT, temperature=0.7, max_tokens=1024
        )
    except LLMError as exc:
        LOGGER.warning("[orchestrator] generation failed for %s: %s", user_id, exc)
        warnings.append(GENERATION_WARNING)
        generation = {"fallback": True, "error": str(exc)}

    facts, write_warnings = await record_conversation_turn(
        store,
        user_id,
        user_message=text,
        assistant_message=reply,
        emotion=emotion,
        mode=safe_mode,
        language=safe_language,
        conversation_id=metadata.get("conversationId"),
        enabled=memory_enabled,
    )
    warnings.extend(write_warnings)

    LOGGER.info(
        "[orchestrator] turn user=%s mode=%s language=%s warnings=%d",
        user_id,
        safe_mode,
        safe_language,
        len(warnings),
    )
    return {
        "response": {"text": reply, "language": safe_language},
        "emotion": emotion,
        "memory": {
            "retrieved": list(memory_context.get("facts") or []),
            "updates": [fact.to_dict() for fact in facts],
        },
        "meta": {
            "userId": user_id,
            "mode": safe_mode,
            "language": safe_language,
            "warnings": warnings,
            "generation": generation,
            "emotionAnalysis": {"fallback": bool(emotion_warnings)},
            "metadata": metadata,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


__all__ = ["GENERATION_WARNING", "SAFE_DEFAULT_RESPONSE", "run_conversation_turn", "sanitize_history"]
