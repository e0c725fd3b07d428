from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, Field, field_validator

from sahay.apps.api.core.llm import generate_structured, generate_text
from sahay.libs.llm_router import LLMError, LLMRouter, Ok, Task

LOGGER = logging.getLogger(__name__)

MAX_INSIGHTS = 4
CHAT_FALLBACK = (
    "I'm having trouble connecting right now. Meanwhile, try to keep a regular sleep "
    "schedule, drink water through the day and take short movement breaks between study sessions."
)


class HealthInsight(BaseModel):
    type: str
    title: str
    message: str
    priority: str = "medium"

    @field_validator("type")
    @classmethod
    def _type(cls, value: str) -> str:
        return value.strip().lower()


class MealSuggestion(BaseModel):
    name: str
    description: str = ""
    benefits: List[str] = Field(default_factory=list)


STATIC_MEALS: Dict[str, List[Dict[str, Any]]] = {
    "breakfast": [
        {"name": "Poha with peanuts", "description": "Light flattened rice with vegetables.", "benefits": ["steady energy", "iron"]},
        {"name": "Oats with banana", "description": "Warm oats topped with fruit and seeds.", "benefits": ["fibre", "focus"]},
    ],
    "lunch": [
        {"name": "Dal, rice and sabzi", "description": "A balanced plate with lentils and greens.", "benefits": ["protein", "sustained energy"]},
        {"name": "Rajma with brown rice", "description": "Kidney beans with whole grains.", "benefits": ["protein", "fibre"]},
    ],
    "dinner": [
        {"name": "Khichdi with curd", "description": "Easy to digest lentil rice.", "benefits": ["gut health", "better sleep"]},
        {"name": "Roti with paneer bhurji", "description": "Whole wheat roti with scrambled paneer.", "benefits": ["protein", "calcium"]},
    ],
    "snack": [
        {"name": "Roasted chana", "description": "Crunchy roasted chickpeas.", "benefits": ["protein", "low sugar"]},
        {"name": "Fruit and nuts", "description": "A seasonal fruit with a handful of nuts.", "benefits": ["vitamins", "healthy fats"]},
    ],
}


def rule_insights(avg: Mapping[str, float]) -> List[Dict[str, Any]]:
    """Deterministic insights from recent averages."""

    insights: List[Dict[str, Any]] = []
    if "sleep" in avg and avg["sleep"] < 7:
        insights.append(
            {
                "type": "sleep",
                "title": "Prioritise sleep",
                "message": f"You averaged {avg['sleep']} hours of sleep. Aim for 7-9 hours to support focus and mood.",
                "priority": "high",
            }
        )
    if "stressLevel" in avg and avg["stressLevel"] > 6:
        insights.append(
            {
                "type": "stress",
                "title": "Stress is running high",
                "message": f"Your average stress level is {avg['stressLevel']}/10. Short breathing breaks can help.",
                "priority": "high",
            }
        )
    if "steps" in avg and avg["steps"] < 5000:
        insights.append(
            {
                "type": "activity",
                "title": "Move a little more",
                "message": f"You averaged {int(avg['steps'])} steps. A 15 minute walk adds about 2,000.",
                "priority": "medium",
            }
        )
    if "waterIntake" in avg and avg["waterIntake"] < 6:
        insights.append(
            {
                "type": "hydration",
                "title": "Drink more water",
                "message": f"You averaged {avg['waterIntake']} glasses a day. Try keeping a bottle at your desk.",
                "priority": "medium",
            }
        )
    if "screenTime" in avg and avg["screenTime"] > 360:
        insights.append(
            {
                "type": "screen",
                "title": "Screen time is high",
                "message": f"You averaged {round(avg['screenTime'] / 60, 1)} hours on screens. Take a 5 minute break every hour.",
                "priority": "low",
            }
        )
    return insights


def merge_insights(*groups: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    seen: set[str] = set()
    merged: List[Dict[str, Any]] = []
    for group in groups:
        for insight in group:
            kind = insight.get("type")
            if not kind or kind in seen:
                continue
            seen.add(kind)
            merged.append(insight)
    return merged[:MAX_INSIGHTS]


async def build_insights(router: LLMRouter, avg: Mapping[str, float]) -> Dict[str, Any]:
    rules = rule_insights(avg)
    if not avg or not router.configured:
        return {"insights": merge_insights(rules), "averages": dict(avg), "aiGenerated": False}

    prompt = (
        "You are a wellness coach for Indian students. Based on these recent health averages "
        f"{dict(avg)}, return a JSON array of at most 3 insights, each an object with keys "
        '"type", "title", "message" and "priority" (high, medium or low). Be specific and kind.'
    )
    result = await generate_structured(router, prompt, List[HealthInsight], list, temperature=0.5)
    extra = [item.model_dump() for item in result.value] if isinstance(result, Ok) else []
    return {
        "insights": merge_insights(rules, extra),
        "averages": dict(avg),
        "aiGenerated": bool(extra),
    }


def static_meals(meal_type: str | None) -> List[Dict[str, Any]]:
    return [dict(item) for item in STATIC_MEALS.get((meal_type or "").lower(), STATIC_MEALS["snack"])]


async def suggest_meals(
    router: LLMRouter,
    *,
    meal_type: str,
    activity_level: str | None = None,
    study_intensity: str | None = None,
) -> Dict[str, Any]:
    prompt = (
        f"Suggest 3 healthy Indian {meal_type} options for a student with {activity_level or 'moderate'} "
        f"activity and {study_intensity or 'moderate'} study intensity. Respond as a JSON array of objects "
        'with keys "name", "description" and "benefits" (array of short strings).'
    )
    result = await generate_structured(router, prompt, List[MealSuggestion], None, temperature=0.7)
    if isinstance(result, Ok) and result.value:
        return {"suggestions": [item.model_dump() for item in result.value], "aiGenerated": True}
    return {"suggestions": static_meals(meal_type), "aiGenerated": False}


async def health_chat(router: LLMRouter, message: str, snapshot: Mapping[str, Any] | None = None) -> str:
    context = f"Their latest metrics: {dict(snapshot)}.\n" if snapshot else ""
    prompt = (
        "You are a friendly health and wellness assistant for students. Give practical, safe advice "
        "and suggest seeing a doctor for anything medical.\n"
        f"{context}User: {message}\nAssistant:"
    )
    try:
        return await generate_text(router, prompt, task=Task.CHAT, temperature=0.7, max_tokens=500)
    except LLMError as exc:
        LOGGER.warning("[health] chat unavailable: %s", exc)
        return CHAT_FALLBACK


__all__ = [
    "CHAT_FALLBACK",
    "MAX_INSIGHTS",
    "build_insights",
    "health_chat",
    "merge_insights",
    "rule_insights",
    "static_meals",
    "suggest_meals",
]
