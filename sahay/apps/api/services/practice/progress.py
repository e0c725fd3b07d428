"""XP, levels, skill scores, badges and streaks for practice sessions."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Sequence

from sahay.libs.store import DocumentStore, utcnow_iso

LOGGER = logging.getLogger(__name__)

COLLECTION = "practice_progress"
XP_PER_LEVEL = 100

BADGES: Dict[str, Callable[[Mapping[str, Any]], bool]] = {
    "first-practice": lambda p: p["totalPractices"] >= 1,
    "conversationalist": lambda p: p["totalPractices"] >= 10,
    "confident-speaker": lambda p: p["skillScores"].get("assertiveness", 0) >= 80,
    "empathy-master": lambda p: p["skillScores"].get("empathy", 0) >= 80,
    "week-warrior": lambda p: p["streak"] >= 7,
    "communication-guru": lambda p: p["level"] >= 5,
}


def level_for(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def default_progress() -> Dict[str, Any]:
    return {
        "xp": 0,
        "level": 1,
        "skillScores": {},
        "badges": [],
        "completedScenarios": [],
        "totalPractices": 0,
        "streak": 0,
        "lastPracticeDate": None,
    }


async def get_progress(store: DocumentStore, user_id: str) -> Dict[str, Any]:
    doc = await store.get(COLLECTION, user_id)
    return {**default_progress(), **(doc.data if doc else {})}


def next_streak(last: str | None, today: date) -> tuple[int, bool]:
    """Same day keeps the streak, yesterday extends it, anything older restarts it."""

    if not last:
        return 1, False
    try:
        previous = date.fromisoformat(last[:10])
    except ValueError:
        return 1, False
    if previous == today:
        return 0, True
    if previous == today - timedelta(days=1):
        return 1, True
    return 1, False


def apply_practice(
    progress: Mapping[str, Any],
    *,
    scenario: str | None,
    xp_earned: int,
    skills_improved: Sequence[str] = (),
    scores: Mapping[str, float] | None = None,
    today: date | None = None,
) -> tuple[Dict[str, Any], List[str]]:
    """Fold one practice result into ``progress``; returns ``(progress, new_badges)``."""

    today = today or datetime.now(timezone.utc).date()
    updated = {**default_progress(), **dict(progress)}
    updated["xp"] = int(updated["xp"]) + max(0, int(xp_earned))
    updated["level"] = level_for(updated["xp"])
    updated["totalPractices"] = int(updated["totalPractices"]) + 1

    skill_scores = dict(updated["skillScores"])
    for skill, score in (scores or {}).items():
        previous = skill_scores.get(skill)
        value = float(score) if previous is None else previous * 0.7 + float(score) * 0.3
        skill_scores[skill] = round(max(0.0, min(100.0, value)), 1)
    for skill in skills_improved:
        if skill not in (scores or {}):
            skill_scores[skill] = min(100.0, skill_scores.get(skill, 50.0) + 5)
    updated["skillScores"] = skill_scores

    if scenario and scenario not in updated["completedScenarios"]:
        updated["completedScenarios"] = [*updated["completedScenarios"], scenario]

    step, continues = next_streak(updated.get("lastPracticeDate"), today)
    updated["streak"] = int(updated["streak"]) + step if continues else step
    updated["lastPracticeDate"] = today.isoformat()

    new_badges = [name for name, earned in BADGES.items() if name not in updated["badges"] and earned(updated)]
    updated["badges"] = [*updated["badges"], *new_badges]
    return updated, new_badges


async def record_practice(
    store: DocumentStore,
    user_id: str,
    *,
    scenario: str | None,
    xp_earned: int,
    skills_improved: Sequence[str] = (),
    scores: Mapping[str, float] | None = None,
) -> Dict[str, Any]:
    current = await get_progress(store, user_id)
    updated, new_badges = apply_practice(
        current, scenario=scenario, xp_earned=xp_earned, skills_improved=skills_improved, scores=scores
    )
    updated["updatedAt"] = utcnow_iso()
    await store.set(COLLECTION, user_id, updated)
    if new_badges:
        LOGGER.info("[practice] %s earned %s", user_id, ", ".join(new_badges))
    return {
        "progress": updated,
        "newBadges": new_badges,
        "leveledUp": updated["level"] > current["level"],
    }


__all__ = [
    "BADGES",
    "COLLECTION",
    "apply_practice",
    "default_progress",
    "get_progress",
    "level_for",
    "next_streak",
    "record_practice",
]
