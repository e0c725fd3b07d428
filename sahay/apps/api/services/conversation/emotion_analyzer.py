"""Secondary model call that tags the user's emotion and a response strategy."""

from __future__ import annotations

import copy
import logging
from typing import Any, Literal, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sahay.apps.api.core.llm import generate_structured
from sahay.libs.llm_router import LLMRouter, Ok, Task

LOGGER = logging.getLogger(__name__)

SENTIMENTS = ("positive", "neutral", "negative")
STRATEGY_TYPES = ("validate", "normalize", "reframe", "encourage", "coach")
MAX_TONE_KEYWORDS = 4

DEFAULT_ANALYSIS: dict[str, Any] = {
    "emotion": {"label": "calm", "intensity": 0.2, "confidence": 0.5},
    "sentiment": "neutral",
    "needs": [],
    "strategy": {
        "type": "validate",
        "rationale": "Offer gentle acknowledgement and invite sharing.",
        "followUpQuestion": "Would you like to tell me more about how you are feeling right now?",
    },
    "tone": {"style": "warm", "keywords": ["gentle", "supportive"]},
}

FALLBACK_WARNING = "Emotion analysis failed; reverting to default compassionate strategy."

_PROMPT_TEMPLATE = (
    'Analyze emotion in: "{message}"\n'
    "{history}\n\n"
    "Output JSON:\n"
    '{{"emotion":{{"label":"anxious","intensity":0.7,"confidence":0.8}},"sentiment":"negative",'
    '"needs":["support"],"strategy":{{"type":"validate","rationale":"Acknowledge feelings",'
    '"followUpQuestion":"What worries you most?"}},"tone":{{"style":"warm","keywords":["gentle","supportive"]}}}}'
)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def ensure_sentence(text: str) -> str:
    cleaned = (text or "").strip()
    if cleaned and cleaned[-1] not in ".!?।":
        cleaned += "."
    return cleaned


class EmotionTag(BaseModel):
    label: str = "calm"
    intensity: float = 0.2
    confidence: float = 0.5

    @field_validator("label", mode="before")
    @classmethod
    def _label(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text or "calm"

    @field_validator("intensity", "confidence")
    @classmethod
    def _bounded(cls, value: float) -> float:
        return _clamp(value)


class Strategy(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["validate", "normalize", "reframe", "encourage", "coach"] = "validate"
    rationale: str = DEFAULT_ANALYSIS["strategy"]["rationale"]
    follow_up_question: str = Field(
        default=DEFAULT_ANALYSIS["strategy"]["followUpQuestion"], alias="followUpQuestion"
    )

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in STRATEGY_TYPES else "validate"

    @field_validator("rationale", "follow_up_question")
    @classmethod
    def _sentence(cls, value: str) -> str:
        return ensure_sentence(value)


class Tone(BaseModel):
    style: str = "warm"
    keywords: list[str] = Field(default_factory=lambda: ["gentle", "supportive"])

    @field_validator("keywords")
    @classmethod
    def _cap(cls, value: list[str]) -> list[str]:
        return [kw.strip() for kw in value if kw and kw.strip()][:MAX_TONE_KEYWORDS]


class EmotionAnalysis(BaseModel):
    emotion: EmotionTag
    sentiment: Literal["positive", "neutral", "negative"] = "neutral"
    needs: list[str] = Field(default_factory=list)
    strategy: Strategy = Field(default_factory=Strategy)
    tone: Tone = Field(default_factory=Tone)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _sentiment(cls, value: Any) -> str:
        text = str(value or "").strip().lower()
        return text if text in SENTIMENTS else "neutral"

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def default_analysis() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_ANALYSIS)


def _history_snippet(history: Sequence[Mapping[str, Any]] | None) -> str:
    lines = []
    for turn in list(history or [])[-2:]:
        text = str(turn.get("text") or "").strip()[:100]
        if text:
            role = "Mitra" if turn.get("role") == "assistant" else "Learner"
            lines.append(f"{role}: {text}")
    return "\n".join(lines) if lines else "No prior context."


async def analyze_emotion(
    router: LLMRouter,
    message: str,
    *,
    history: Sequence[Mapping[str, Any]] | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """Return ``(analysis, warnings)``. Any failure yields the default analysis."""

    prompt = _PROMPT_TEMPLATE.format(
        message=(message or "")[:100].replace('"', "'"),
        history=_history_snippet(history),
    )
    result = await generate_structured(
        router,
        prompt,
        EmotionAnalysis,
        None,
        task=Task.ANALYSIS,
        temperature=0.2,
        max_tokens=500,
    )
    if isinstance(result, Ok):
        return result.value.to_payload(), []

    LOGGER.info("[emotion] Using default analysis: %s", result.reason)
    return default_analysis(), [FALLBACK_WARNING]


__all__ = [
    "DEFAULT_ANALYSIS",
    "EmotionAnalysis",
    "FALLBACK_WARNING",
    "analyze_emotion",
    "default_analysis",
    "ensure_sentence",
]
