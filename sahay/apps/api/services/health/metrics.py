"""Daily self-reported health metrics, streaks and threshold nudges."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping

from sahay.libs.store import DocumentStore, utcnow_iso

LOGGER = logging.getLogger(__name__)

LATEST = "health"
METRIC_FIELDS = (
    "sleep",
    "sleepQuality",
    "steps",
    "heartRate",
    "stressLevel",
    "mood",
    "waterIntake",
    "screenTime",
    "activityLevel",
    "nutrition",
    "notes",
)
AVERAGED_FIELDS = ("sleep", "stressLevel", "steps", "waterIntake", "screenTime", "heartRate", "mood")

DEFAULT_NUDGE = "Take a mindful moment today!"


def daily_path(user_id: str) -> str:
    return f"health/{user_id}/daily"


def today() -> date:
    return datetime.now(timezone.utc).date()


def parse_day(value: str | None) -> date:
    if not value:
        return today()
    return date.fromisoformat(value[:10])


async def record_day(store: DocumentStore, user_id: str, payload: Mapping[str, Any]) -> str:
    """Merge the day's metrics and refresh the latest snapshot; returns the date key."""

    day = parse_day(payload.get("date")).isoformat()
    metrics = {key: payload[key] for key in METRIC_FIELDS if payload.get(key) is not None}
    now = utcnow_iso()
    await store.set(daily_path(user_id), day, {**metrics, "date": day, "updatedAt": now}, merge=True)
    await store.set(
        LATEST, user_id, {**metrics, "date": day, "timestamp": payload.get("timestamp") or now}, merge=True
    )
    LOGGER.info("[health] recorded %s for %s (%d metrics)", day, user_id, len(metrics))
    return day


async def latest(store: DocumentStore, user_id: str) -> Dict[str, Any] | None:
    doc = await store.get(LATEST, user_id)
    return doc.data if doc else None


async def history(store: DocumentStore, user_id: str, *, days: int = 7) -> List[Dict[str, Any]]:
    """Entries of the last ``days`` days, newest first."""

    since = (today() - timedelta(days=max(days, 1) - 1)).isoformat()
    docs = await store.query(
        daily_path(user_id), where=[("date", ">=", since)], order_by="date", descending=True
    )
    return [doc.to_dict() for doc in docs]


def streak_from(days: Iterable[str], *, reference: date | None = None) -> int:
    """Consecutive logged days ending today, or yesterday when today is not logged yet."""

    logged = set()
    for value in days:
        try:
            logged.add(date.fromisoformat(str(value)[:10]))
        except ValueError:
            continue
    cursor = reference or today()
    if cursor not in logged:
        cursor -= timedelta(days=1)
    count = 0
    while cursor in logged:
        count += 1
        cursor -= timedelta(days=1)
    return count


async def streak(store: DocumentStore, user_id: str) -> int:
    return streak_from(await store.list_ids(daily_path(user_id)))


def averages(entries: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    totals: Dict[str, List[float]] = {}
    for entry in entries:
        for key in AVERAGED_FIELDS:
            value = entry.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                totals.setdefault(key, []).append(float(value))
    return {key: round(sum(values) / len(values), 1) for key, values in totals.items()}


def pick_nudge(snapshot: Mapping[str, Any] | None) -> str:
    if not snapshot:
        return DEFAULT_NUDGE
    if snapshot.get("sleep") is not None and snapshot["sleep"] < 6:
        return "You slept less than 6 hours. Try a short nap or meditation."
    if snapshot.get("steps") is not None and snapshot["steps"] < 3000:
        return "You walked less than 3,000 steps. A short walk can boost your mood!"
    if snapshot.get("heartRate") is not None and snapshot["heartRate"] > 100:
        return "Your heart rate was high today. Take a few deep breaths."
    return DEFAULT_NUDGE


__all__ = [
    "DEFAULT_NUDGE",
    "LATEST",
    "averages",
    "daily_path",
    "history",
    "latest",
    "pick_nudge",
    "record_day",
    "streak",
    "streak_from",
]
