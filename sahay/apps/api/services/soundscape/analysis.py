"""Collect a user's recent signals and analyse them for sound therapy."""

import logging
import re
from collections import Counter
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field, field_validator

from sahay.apps.api.core.llm import generate_text
from sahay.apps.api.services.health.metrics import daily_path
from sahay.libs.llm_router import LLMError, LLMRouter, Ok, Task, parse_or_default
from sahay.libs.store import DocumentStore, StoreError

LOGGER = logging.getLogger(__name__)

WELCOME_SUMMARY = (
    "Welcome to Dhwani! Start by writing in your journal or using Manthan to help our AI "
    "understand your needs better."
)
UNAVAILABLE_SUMMARY = "Analysis temporarily unavailable. Using general recommendations."

MOOD_KEYWORDS = ("anxious", "stressed", "calm", "focused", "tired", "energetic", "sad", "happy", "neutral")
THEME_KEYWORDS: Dict[str, tuple[str, ...]] = {
    "stress": ("stress", "anxiety", "overwhelm", "tension"),
    "focus": ("focus", "concentration", "attention", "productivity"),
    "sleep": ("sleep", "insomnia", "rest", "fatigue"),
    "energy": ("energy", "motivation", "tired", "low-energy"),
    "creativity": ("creative", "inspiration", "artistic", "imagination"),
    "depression": ("sad", "depressed", "low-mood", "hopeless"),
}

# (key, collection, order field, limit)
_SOURCES = (
    ("journals", "journals", "createdAt", 20),
    ("mood", "mood_tracking", "createdAt", 30),
    ("reflections", "reflection_sessions", "createdAt", 10),
    ("activity", "user_activity", "timestamp", 20),
)


class SoundAnalysis(BaseModel):
    moodState: str = "neutral"
    confidence: float = 0.5
    keyThemes: List[str] = Field(default_factory=lambda: ["general_wellness"])
    soundNeeds: List[str] = Field(default_factory=lambda: ["relaxation"])
    timeOfDay: str = "anytime"
    intensity: str = "medium"
    duration: int = 20
    summary: str = ""

    @field_validator("moodState", mode="before")
    @classmethod
    def _mood(cls, value: Any) -> str:
        return str(value or "neutral").strip().lower()

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value: Any) -> float:
        try:
            return max(0.0, min(1.0, float(value)))
        except (TypeError, ValueError):
            return 0.5

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, value: Any) -> int:
        match = re.search(r"\d+", str(value))
        return int(match.group()) if match else 20


def unavailable_analysis() -> Dict[str, Any]:
    return SoundAnalysis(summary=UNAVAILABLE_SUMMARY).model_dump()


def extract_mood_state(text: str) -> str:
    lowered = (text or "").lower()
    return next((mood for mood in MOOD_KEYWORDS if mood in lowered), "neutral")


def extract_themes(text: str) -> List[str]:
    lowered = (text or "").lower()
    themes = [theme for theme, words in THEME_KEYWORDS.items() if any(word in lowered for word in words)]
    return themes or ["general_wellness"]


async def collect_user_data(store: DocumentStore, user_id: str) -> Dict[str, List[Dict[str, Any]]]:
    """Gather recent activity from every source; unreadable sources stay empty."""

    data: Dict[str, List[Dict[str, Any]]] = {"journals": [], "health": [], "mood": [], "reflections": [], "activity": []}
    for key, collection, order_by, limit in _SOURCES:
        try:
            docs = await store.query(
                collection, where=[("userId", "==", user_id)], order_by=order_by, limit=limit
            )
        except StoreError as exc:
            LOGGER.warning("[soundscape] could not read %s: %s", collection, exc)
            continue
        data[key] = [doc.data for doc in docs]
    try:
        health = await store.query(daily_path(user_id), order_by="date", limit=10)
    except StoreError as exc:
        LOGGER.warning("[soundscape] could not read health entries: %s", exc)
    else:
        data["health"] = [doc.data for doc in health]

    LOGGER.info(
        "[soundscape] collected %s for %s",
        {key: len(value) for key, value in data.items()},
        user_id,
    )
    return data


def has_signal(data: Mapping[str, List[Any]]) -> bool:
    return any(data.get(key) for key in ("journals", "health", "mood", "reflections"))


def build_context(data: Mapping[str, List[Mapping[str, Any]]]) -> str:
    lines = ["USER DATA ANALYSIS:", ""]
    if data.get("journals"):
        lines.append("RECENT JOURNAL ENTRIES:")
        for i, entry in enumerate(data["journals"][:5], start=1):
            lines.append(f"{i}. {str(entry.get('content') or '')[:200]}...")
            if entry.get("mood"):
                lines.append(f"   Mood: {entry['mood']}")
            lines.append(f"   Date: {str(entry.get('createdAt') or '')[:10]}")
        lines.append("")
    if data.get("mood"):
        counts = Counter(str(item.get("mood")) for item in data["mood"][:10])
        common = ", ".join(f"{mood}({count})" for mood, count in counts.most_common(3))
        lines.extend(["MOOD TRACKING DATA:", f"Most common moods: {common}", ""])
    if data.get("health"):
        lines.append("HEALTH METRICS:")
        for entry in data["health"][:5]:
            metrics = ", ".join(
                f"{key}={entry[key]}" for key in ("sleep", "steps", "stressLevel", "heartRate") if key in entry
            )
            lines.append(f"- {entry.get('date', '')}: {metrics}")
        lines.append("")
    if data.get("reflections"):
        lines.append("MANTHAN REFLECTION SESSIONS:")
        for i, session in enumerate(data["reflections"][:3], start=1):
            lines.append(f"{i}. Type: {session.get('type')}")
            if session.get("emotionalState"):
                lines.append(f"   Emotional State: {session['emotionalState']}")
            responses = session.get("responses") or []
            if responses:
                lines.append(f"   Key Response: {str(responses[0])[:100]}...")
        lines.append("")
    if data.get("activity"):
        counts = Counter(str(item.get("type")) for item in data["activity"][:10])
        lines.extend(
            ["RECENT ACTIVITY PATTERNS:", "Activity patterns: " + ", ".join(f"{k}({v})" for k, v in counts.items()), ""]
        )
    return "\n".join(lines)


async def analyze(router: LLMRouter, data: Mapping[str, List[Mapping[str, Any]]]) -> Dict[str, Any]:
    """AI analysis of the user's data; keyword extraction when the reply is not JSON."""

    prompt = f"""You are an expert in sound therapy and emotional wellness. Analyze the following comprehensive user data and provide detailed insights for personalized sound therapy recommendations.

{build_context(data)}

Based on this data, provide a JSON response with:
{{
  "moodState": "current emotional state (anxious, stressed, calm, focused, tired, energetic, etc.)",
  "confidence": "confidence level 0-1",
  "keyThemes": ["array of main emotional themes"],
  "soundNeeds": ["array of specific sound therapy needs"],
  "timeOfDay": "best time for sound therapy based on patterns",
  "intensity": "recommended intensity level (low, medium, high)",
  "duration": "recommended session duration in minutes",
  "summary": "brief summary of analysis"
}}"""
    try:
        text = await generate_text(router, prompt, task=Task.ANALYSIS, temperature=0.3, max_tokens=600)
    except LLMError as exc:
        LOGGER.warning("[soundscape] analysis unavailable: %s", exc)
        return unavailable_analysis()

    parsed = parse_or_default(text, SoundAnalysis, None)
    if isinstance(parsed, Ok):
        return parsed.value.model_dump()

    LOGGER.info("[soundscape] analysis not JSON (%s); extracting keywords", parsed.reason)
    return SoundAnalysis(
        moodState=extract_mood_state(text),
        confidence=0.7,
        keyThemes=extract_themes(text),
        soundNeeds=["relaxation", "focus"],
        duration=30,
        summary=text[:200],
    ).model_dump()


__all__ = [
    "SoundAnalysis",
    "UNAVAILABLE_SUMMARY",
    "WELCOME_SUMMARY",
    "analyze",
    "build_context",
    "collect_user_data",
    "extract_mood_state",
    "extract_themes",
    "has_signal",
    "unavailable_analysis",
]
