"""Role-play scenarios for practising difficult conversations."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Sequence

from pydantic import BaseModel, Field, field_validator

from sahay.apps.api.core.llm import generate_structured
from sahay.apps.api.services.conversation.responder import chat_with_gemini
from sahay.libs.llm_router import LLMRouter, Ok

LOGGER = logging.getLogger(__name__)

PRACTICE_TYPES: List[Dict[str, str]] = [
    {
        "id": "mindfulness",
        "name": "Mindfulness Meditation",
        "description": "Focus on being present in the moment",
        "duration": "10 minutes",
        "category": "meditation",
    },
    {
        "id": "breathing",
        "name": "Breathing Exercises",
        "description": "Simple breathing techniques for stress relief",
        "duration": "5 minutes",
        "category": "breathing",
    },
    {
        "id": "gratitude",
        "name": "Gratitude Practice",
        "description": "Reflect on things you are grateful for",
        "duration": "5 minutes",
        "category": "reflection",
    },
]

SCENARIOS: Dict[str, Dict[str, str]] = {
    "assertive": {
        "title": "Asking for alone time",
        "partner": "friend",
        "interviewer": "You are a supportive friend. Respond to the user's attempt to express their need for alone time. Ask a gentle follow-up question.",
        "feedback": "You are a mental wellness coach. Give specific, actionable feedback on how assertively and kindly the user expressed their needs. Suggest one way to improve.",
    },
    "boundaries": {
        "title": "Setting a boundary about notes",
        "partner": "classmate",
        "interviewer": "You are a classmate. Respond to the user's attempt to set a boundary about sharing notes. Ask a follow-up or express your feelings.",
        "feedback": "You are a mental wellness coach. Give feedback on how clearly and respectfully the user set a boundary. Suggest one way to improve.",
    },
    "help": {
        "title": "Asking for an extension",
        "partner": "teacher",
        "interviewer": "You are a teacher. Respond to the user's request for an extension due to overwhelm. Ask a clarifying or supportive question.",
        "feedback": "You are a mental wellness coach. Give feedback on how effectively the user asked for help. Suggest one way to make the request even more effective or self-compassionate.",
    },
    "feedback": {
        "title": "Receiving criticism",
        "partner": "mentor",
        "interviewer": "You are a mentor. Respond to the user's reaction to constructive criticism. Ask a follow-up or offer support.",
        "feedback": "You are a mental wellness coach. Give feedback on how calmly and constructively the user received feedback. Suggest one way to improve their response.",
    },
}
DEFAULT_SCENARIO = {
    "title": "Open conversation",
    "partner": "conversation partner",
    "interviewer": "You are a supportive conversation partner. Respond empathetically to the user's message.",
    "feedback": "You are a mental wellness coach. Give feedback on the user's communication and suggest one way to improve.",
}

FALLBACK_REPLY = "Thank you for sharing that with me. Could you tell me a little more about what you need?"
FALLBACK_FEEDBACK = (
    "You expressed yourself clearly. Try starting with an \"I\" statement, such as "
    "\"I feel...\" or \"I need...\", to keep the focus on your experience."
)

_I_STATEMENT = re.compile(r"\bi (?:feel|need|would|think|want|am)\b")
EMPATHY_WORDS = ("understand", "appreciate", "sorry", "hear you", "feel", "thank")
POLITE_WORDS = ("please", "thank", "could you", "would you", "would it be", "if possible")


def scenario_for(name: str | None) -> Dict[str, str]:
    return SCENARIOS.get((name or "").strip().lower(), DEFAULT_SCENARIO)


def catalogue() -> Dict[str, Any]:
    return {
        "practices": PRACTICE_TYPES,
        "scenarios": [
            {"id": key, "title": value["title"], "partner": value["partner"]} for key, value in SCENARIOS.items()
        ],
    }


async def simulate(
    router: LLMRouter,
    *,
    scenario: str,
    user_input: str,
    history: Sequence[Mapping[str, Any]] | None = None,
) -> Dict[str, str]:
    """Partner reply in listener mode plus coaching feedback in coach mode."""

    config = scenario_for(scenario)
    reply = await chat_with_gemini(
        router, f"{config['interviewer']}\n\nUser: {user_input}", mode="listener", history=history
    )
    feedback = await chat_with_gemini(
        router, f"{config['feedback']}\n\nUser: {user_input}", mode="coach", history=history
    )
    return {
        "ai": FALLBACK_REPLY if "error" in reply else reply["text"],
        "feedback": FALLBACK_FEEDBACK if "error" in feedback else feedback["text"],
    }


class DetailedFeedback(BaseModel):
    overall: str
    empathyScore: int = 50
    toneScore: int = 50
    clarityScore: int = 50
    strengthsFound: List[str] = Field(default_factory=list)
    areasToImprove: List[str] = Field(default_factory=list)
    specificSuggestions: List[str] = Field(default_factory=list)
    skillsImproved: List[str] = Field(default_factory=list)
    xpEarned: int = 10

    @field_validator("empathyScore", "toneScore", "clarityScore")
    @classmethod
    def _score(cls, value: int) -> int:
        return max(0, min(100, value))

    @field_validator("xpEarned")
    @classmethod
    def _xp(cls, value: int) -> int:
        return max(0, min(50, value))


def heuristic_feedback(user_input: str) -> Dict[str, Any]:
    """Score a reply from its length, "I" statements and courtesy words."""

    text = (user_input or "").lower()
    words = len(text.split())
    i_statements = len(_I_STATEMENT.findall(text))
    empathy = sum(1 for word in EMPATHY_WORDS if word in text)
    polite = sum(1 for word in POLITE_WORDS if word in text)

    clarity = 40 if words < 5 else min(100, 50 + min(words, 50))
    tone = min(100, 50 + 10 * polite + 10 * i_statements)
    empathy_score = min(100, 40 + 15 * empathy)

    strengths: List[str] = []
    improve: List[str] = []
    suggestions: List[str] = []
    skills: List[str] = []
    if i_statements:
        strengths.append("You used \"I\" statements to own your feelings.")
        skills.append("assertiveness")
    else:
        improve.append("Centre the message on your own experience.")
        suggestions.append("Try opening with \"I feel...\" or \"I need...\".")
    if empathy:
        strengths.append("You acknowledged the other person's perspective.")
        skills.append("empathy")
    else:
        improve.append("Acknowledge how the other person might feel.")
        suggestions.append("Add a line such as \"I understand this matters to you\".")
    if polite:
        strengths.append("Your tone was courteous.")
    if words >= 15:
        skills.append("clarity")
    else:
        improve.append("Give a little more detail so your request is clear.")
        suggestions.append("Say what you need and why in one or two sentences.")

    average = round((clarity + tone + empathy_score) / 3)
    if average >= 75:
        overall = "Strong response. You were clear and considerate."
    elif average >= 55:
        overall = "Good start. A few tweaks will make your message land better."
    else:
        overall = "Keep practising. Focus on being clear about what you need."

    return DetailedFeedback(
        overall=overall,
        empathyScore=empathy_score,
        toneScore=tone,
        clarityScore=clarity,
        strengthsFound=strengths,
        areasToImprove=improve,
        specificSuggestions=suggestions,
        skillsImproved=skills,
        xpEarned=10 + average // 10,
    ).model_dump()


async def detailed_feedback(router: LLMRouter, *, scenario: str, user_input: str) -> Dict[str, Any]:
    config = scenario_for(scenario)
    prompt = (
        f"{config['feedback']}\n\nThe user is practising: {config['title']}.\n"
        f'User said: "{user_input}"\n\n'
        "Respond with a JSON object with keys overall (string), empathyScore, toneScore, clarityScore "
        "(integers 0-100), strengthsFound, areasToImprove, specificSuggestions, skillsImproved "
        "(arrays of short strings) and xpEarned (integer 0-50)."
    )
    result = await generate_structured(router, prompt, DetailedFeedback, None, temperature=0.4)
    if isinstance(result, Ok):
        return {**result.value.model_dump(), "aiGenerated": True}
    LOGGER.info("[practice] using heuristic feedback for scenario=%s", scenario)
    return {**heuristic_feedback(user_input), "aiGenerated": False}


__all__ = [
    "DetailedFeedback",
    "FALLBACK_FEEDBACK",
    "FALLBACK_REPLY",
    "SCENARIOS",
    "catalogue",
    "detailed_feedback",
    "heuristic_feedback",
    "scenario_for",
    "simulate",
]
