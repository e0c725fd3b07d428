"""Breathing coach and mindfulness micro-sessions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal

from pydantic import BaseModel

from sahay.apps.api.core.llm import generate_structured, generate_text
from sahay.libs.llm_router import LLMError, LLMRouter, Ok, Task
from sahay.libs.store import DocumentStore, utcnow_iso

LOGGER = logging.getLogger(__name__)

BREATHING = "breathing_sessions"
PREFERENCES = "user_preferences"
COMPLETED = "completed_sessions"
PROGRESS = "wellness_progress"

SESSION_PROMPTS = {
    "calm-2min": "Generate a 2-minute calming session with 4 phases: breathe (30s), reflect on peace (30s), affirm calmness (30s), close (30s)",
    "focus-reset": "Generate a 3-minute focus session: breathe deeply (45s), reflect on clarity (45s), affirm concentration (45s), close (45s)",
    "gratitude-pulse": "Generate a 4-minute gratitude session: breathe (60s), reflect on blessings (60s), affirm appreciation (60s), close (60s)",
    "letting-go": "Generate a 5-minute release session: breathe (75s), reflect on tension (75s), affirm release (75s), close (75s)",
}

FALLBACK_STEPS: List[Dict[str, Any]] = [
    {"phase": "breathe", "title": "Breathe Deeply", "instruction": "Take slow, deep breaths", "duration": 30},
    {"phase": "reflect", "title": "Notice Yourself", "instruction": "Observe how you feel without judgment", "duration": 30},
    {"phase": "affirm", "title": "Affirm Peace", "instruction": "I am calm and centered", "duration": 30},
    {"phase": "close", "title": "Return Gently", "instruction": "Gently bring your awareness back to the present", "duration": 30},
]


class SessionStep(BaseModel):
    phase: Literal["breathe", "reflect", "affirm", "close"]
    title: str
    instruction: str
    duration: int


def fallback_narration(inhale: int, hold: int, exhale: int) -> str:
    return f"Breathe in for {inhale}, hold gently for {hold}, and let it all go for {exhale}. You are doing well."


async def breathing_narration(
    router: LLMRouter, *, pattern: str, inhale: int, hold: int, exhale: int
) -> str:
    prompt = f"""Generate a brief, calming narration (1-2 sentences) for a breathing exercise with this pattern:
- Inhale for {inhale} seconds
- Hold for {hold} seconds
- Exhale for {exhale} seconds

Pattern type: {pattern}

The narration should be encouraging, gentle, and guide the user through the rhythm. Keep it under 30 words."""
    try:
        return await generate_text(router, prompt, temperature=0.7, max_tokens=100)
    except LLMError as exc:
        LOGGER.warning("[wellness] narration unavailable: %s", exc)
        return fallback_narration(inhale, hold, exhale)


async def record_breathing(
    store: DocumentStore, user_id: str, *, pattern: str, cycles: int, duration: int, timestamp: Any = None
) -> str:
    session_id = await store.add(
        BREATHING,
        {
            "userId": user_id,
            "pattern": pattern,
            "cycles": cycles,
            "duration": duration,
            "completedAt": timestamp or utcnow_iso(),
            "createdAt": utcnow_iso(),
        },
    )
    existing = await store.get(PREFERENCES, user_id)
    prefs = existing.data if existing else {}
    await store.set(
        PREFERENCES,
        user_id,
        {
            "lastBreathingPattern": pattern,
            "totalBreathingSessions": int(prefs.get("totalBreathingSessions") or 0) + 1,
            "totalBreathingMinutes": int(prefs.get("totalBreathingMinutes") or 0) + round(duration / 60),
        },
        merge=True,
    )
    return session_id


async def session_steps(router: LLMRouter, session_type: str | None) -> List[Dict[str, Any]]:
    prompt = f"""{SESSION_PROMPTS.get(session_type or "", SESSION_PROMPTS["calm-2min"])}

For each phase, provide:
1. Phase name (breathe/reflect/affirm/close)
2. Title (2-3 words)
3. Instruction (one calming, directive sentence)
4. Duration in seconds

Return as JSON array of objects with keys "phase", "title", "instruction" and "duration"."""
    result = await generate_structured(
        router, prompt, List[SessionStep], None, task=Task.CHAT, temperature=0.7, max_tokens=800
    )
    if isinstance(result, Ok) and result.value:
        return [step.model_dump() for step in result.value]
    return [dict(step) for step in FALLBACK_STEPS]


async def complete_session(
    store: DocumentStore,
    user_id: str,
    *,
    session_type: str,
    duration: int,
    xp_earned: int,
    completed_at: Any = None,
) -> Dict[str, Any]:
    finished = completed_at or utcnow_iso()
    await store.add(
        COMPLETED,
        {
            "userId": user_id,
            "sessionType": session_type,
            "duration": duration,
            "xpEarned": xp_earned,
            "completedAt": finished,
            "createdAt": utcnow_iso(),
        },
    )
    existing = await store.get(PROGRESS, user_id)
    current = existing.data if existing else {}
    total_xp = int(current.get("xp") or 0) + xp_earned
    level = total_xp // 100 + 1
    await store.set(
        PROGRESS,
        user_id,
        {
            "xp": total_xp,
            "level": level,
            "totalSessions": int(current.get("totalSessions") or 0) + 1,
            "lastSessionAt": finished,
            "updatedAt": utcnow_iso(),
        },
        merge=True,
    )
    return {"success": True, "totalXP": total_xp, "level": level, "xpEarned": xp_earned}


async def wellness_progress(store: DocumentStore, user_id: str) -> Dict[str, Any]:
    doc = await store.get(PROGRESS, user_id)
    if doc is None:
        return {"level": 1, "xp": 0, "totalSessions": 0}
    return doc.data


__all__ = [
    "FALLBACK_STEPS",
    "SESSION_PROMPTS",
    "breathing_narration",
    "complete_session",
    "fallback_narration",
    "record_breathing",
    "session_steps",
    "wellness_progress",
]
