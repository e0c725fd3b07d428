from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Literal, Mapping, Sequence

from pydantic import BaseModel, Field, field_validator

from sahay.apps.api.core.llm import generate_text
from sahay.libs.llm_router import LLMError, LLMRouter, Ok, Task, parse_or_default
from sahay.libs.safety import anonymize_text

LOGGER = logging.getLogger(__name__)

UNAVAILABLE_REFRAMING = "AI analysis is currently unavailable. Your thoughts are valid and important."

POSITIVE_KEYWORDS = ("grateful", "happy")
NEGATIVE_KEYWORDS = ("anxious", "stressed")

THEME_KEYWORDS: Dict[str, Sequence[str]] = {
    "academic pressure": ("exam", "exams", "study", "studies", "grades", "assignment", "college", "school"),
    "relationships": ("friend", "friends", "family", "parents", "partner", "mother", "father"),
    "rest and energy": ("sleep", "tired", "exhausted", "rest", "fatigue"),
    "anxiety": ("anxious", "worried", "nervous", "panic", "fear"),
    "gratitude": ("grateful", "thankful", "appreciate", "blessed"),
    "self-worth": ("failure", "worthless", "not good enough", "confidence"),
}

REFLECTION_PROMPTS: Dict[str, List[str]] = {
    "daily": [
        "What was the most meaningful moment of your day and why?",
        "What challenged you today, and how did you respond?",
        "What are you grateful for from today?",
        "What did you learn about yourself today?",
        "How did you take care of yourself today?",
    ],
    "emotional": [
        "What emotions are you feeling right now?",
        "Can you identify what triggered these emotions?",
        "How is your body responding to these emotions?",
        "What thoughts are accompanying these emotions?",
        "What would you like to do with these emotions?",
    ],
    "mindfulness": [
        "What are you noticing about your breath right now?",
        "What sensations are present in your body?",
        "What thoughts are passing through your mind?",
        "How are you feeling in this present moment?",
        "What are you grateful for in this moment?",
    ],
    "gratitude": [
        "Who or what brought joy to your day?",
        "What small thing are you thankful for?",
        "How have others supported you recently?",
        "What aspect of yourself are you grateful for?",
        "What opportunity are you thankful to have?",
    ],
    "growth": [
        "What skill or quality would you like to develop?",
        "What limiting belief are you ready to release?",
        "How have you grown in the past month?",
        "What action can you take toward your goals?",
        "What does your ideal self look like?",
    ],
}

FALLBACK_INSIGHTS = [
    "Taking time to reflect is itself an act of self-care.",
    "Noticing your feelings without judging them builds emotional awareness.",
    "Consider one small, kind step you can take for yourself tomorrow.",
]

_SENTIMENT_IN_TEXT = re.compile(r"sentiment[\"'\s:]+(positive|negative|neutral)", re.IGNORECASE)


class JournalAnalysis(BaseModel):
    sentiment: Literal["positive", "neutral", "negative"] = "neutral"
    reframing: str
    themes: List[str] = Field(default_factory=list)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _sentiment(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in {"positive", "neutral", "negative"} else "neutral"

    @field_validator("themes", mode="before")
    @classmethod
    def _themes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


def _count(text: str, words: Sequence[str]) -> int:
    return sum(len(re.findall(rf"\b{re.escape(word)}\b", text)) for word in words)


def keyword_sentiment(text: str) -> str:
    """Count positive vs negative keywords; ties resolve to neutral."""

    lowered = (text or "").lower()
    positive = _count(lowered, POSITIVE_KEYWORDS)
    negative = _count(lowered, NEGATIVE_KEYWORDS)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def keyword_themes(text: str) -> List[str]:
    lowered = (text or "").lower()
    themes = [theme for theme, words in THEME_KEYWORDS.items() if _count(lowered, words)]
    return themes[:3] or ["self-reflection"]


def fallback_analysis(text: str) -> Dict[str, Any]:
    return {
        "sentiment": keyword_sentiment(text),
        "reframing": UNAVAILABLE_REFRAMING,
        "themes": keyword_themes(text),
        "aiGenerated": False,
    }


def _analysis_prompt(entry: str) -> str:
    return f"""You are a compassionate AI therapist trained in CBT and DBT. Analyze the following journal entry and provide:

1. Sentiment analysis (positive, negative, or neutral)
2. A gentle, supportive reframing of the entry using evidence-based techniques
3. Key emotional themes or patterns

Journal Entry:
{entry}

Respond with a JSON object with keys: sentiment, reframing, themes.

Guidelines:
- Sentiment should be one of: "positive", "negative", "neutral"
- Reframing should be supportive, non-judgmental, and use CBT/DBT techniques
- Themes should be an array of 2-3 key emotional patterns
- Keep reframing to 2-3 sentences
- Be empathetic and validating"""


async def analyze_entry(router: LLMRouter, entry: str) -> Dict[str, Any]:
    """Sentiment, reframing and themes for a journal entry. Never raises."""

    redacted = anonymize_text(entry)
    try:
        raw = await generate_text(
            router,
            _analysis_prompt(redacted),
            task=Task.ANALYSIS,
            temperature=0.7,
            max_tokens=600,
            response_mime_type="application/json",
        )
    except LLMError as exc:
        LOGGER.warning("[journal] analysis unavailable: %s", exc)
        return fallback_analysis(entry)

    parsed = parse_or_default(raw, JournalAnalysis, None)
    if isinstance(parsed, Ok):
        payload = parsed.value.model_dump()
        payload["themes"] = payload["themes"][:3] or keyword_themes(entry)
        payload["aiGenerated"] = True
        return payload

    LOGGER.info("[journal] analysis output rejected: %s", parsed.reason)
    match = _SENTIMENT_IN_TEXT.search(raw)
    result = fallback_analysis(entry)
    if match:
        result["sentiment"] = match.group(1).lower()
    return result


def reflection_prompts(kind: str | None) -> List[str]:
    return list(REFLECTION_PROMPTS.get((kind or "").lower(), REFLECTION_PROMPTS["daily"]))


def _parse_insight_lines(text: str) -> List[str]:
    lines = []
    for line in (text or "").splitlines():
        cleaned = re.sub(r"^\s*(?:\d+[.)]|[-*•])\s*", "", line).strip()
        if len(cleaned) > 10:
            lines.append(cleaned)
    return lines[:5]


async def generate_insights(
    router: LLMRouter,
    *,
    kind: str,
    responses: Sequence[str],
    emotional_state: Mapping[str, Any] | None = None,
) -> Dict[str, Any]:
    state = emotional_state or {}
    numbered = "\n".join(f"{i}. {anonymize_text(str(r))}" for i, r in enumerate(responses, start=1))
    emotions = ", ".join(state.get("emotions") or []) or "none specified"
    prompt = f"""You are a compassionate AI therapist helping someone with self-reflection. They just completed a {kind} reflection session.

Their responses were:
{numbered}

Their emotional state before: {state.get('before', 'unknown')}/10
Emotions they identified: {emotions}

Please provide 3-5 insightful, compassionate observations about their reflections. Focus on:
1. Patterns or themes in their responses
2. Emotional insights or awareness
3. Potential growth opportunities
4. Positive affirmations or encouragement
5. Gentle suggestions for further reflection

Keep each insight to 1-2 sentences. Be supportive, non-judgmental, and insightful."""

    try:
        text = await generate_text(router, prompt, temperature=0.7, max_tokens=800)
    except LLMError as exc:
        LOGGER.warning("[journal] insights unavailable: %s", exc)
        return {"insights": list(FALLBACK_INSIGHTS), "aiGenerated": False}

    insights = _parse_insight_lines(text)
    if not insights:
        return {"insights": list(FALLBACK_INSIGHTS), "aiGenerated": False}
    return {"insights": insights, "aiGenerated": True}


__all__ = [
    "FALLBACK_INSIGHTS",
    "REFLECTION_PROMPTS",
    "UNAVAILABLE_REFRAMING",
    "analyze_entry",
    "fallback_analysis",
    "generate_insights",
    "keyword_sentiment",
    "keyword_themes",
    "reflection_prompts",
]
