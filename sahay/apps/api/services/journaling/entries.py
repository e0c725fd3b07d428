"""Journal entries, reflection sessions and mood logs in the document store."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Sequence

from sahay.libs.store import Document, DocumentStore, utcnow_iso

LOGGER = logging.getLogger(__name__)

JOURNALS = "journals"
REFLECTIONS = "reflection_sessions"
MOOD = "mood_tracking"

NO_JOURNALS_TEXT = "User has no recent journal entries."
SUMMARY_CHARS = 200


class EntryNotFound(LookupError):
    """The document does not exist, or is hidden from the caller."""


class NotOwner(PermissionError):
    """The document exists but belongs to another user."""


def _parse_ts(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def _sort_key(item: Mapping[str, Any]) -> str:
    return str(item.get("createdAt") or "")


async def save_entry(
    store: DocumentStore,
    user_id: str,
    *,
    content: str,
    analysis: Mapping[str, Any],
    title: str | None = None,
    mood: str | None = None,
    tags: Sequence[str] | None = None,
    encrypted: bool = False,
) -> str:
    now = utcnow_iso()
    data = {
        "userId": user_id,
        "title": (title or "").strip() or "Untitled",
        "content": content,
        "mood": mood or "neutral",
        "tags": [tag for tag in tags or [] if tag],
        "createdAt": now,
        "updatedAt": now,
        "wordCount": len(content.split()),
        "sentiment": analysis.get("sentiment", "neutral"),
        "insights": dict(analysis),
        "encrypted": encrypted,
    }
    entry_id = await store.add(JOURNALS, data)
    LOGGER.info("[journal] saved entry %s for %s", entry_id, user_id)
    return entry_id


async def list_entries(
    store: DocumentStore,
    user_id: str,
    *,
    limit: int = 50,
    mood: str | None = None,
    tags: Sequence[str] | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> List[Dict[str, Any]]:
    docs = await store.query(
        JOURNALS, where=[("userId", "==", user_id)], order_by="createdAt", descending=True
    )
    start = _parse_ts(start_date)
    end = _parse_ts(end_date)
    wanted_tags = {tag for tag in tags or [] if tag}

    entries: List[Dict[str, Any]] = []
    for doc in docs:
        data = doc.data
        if mood and data.get("mood") != mood:
            continue
        if wanted_tags and not wanted_tags.intersection(data.get("tags") or []):
            continue
        created = _parse_ts(data.get("createdAt"))
        if start and (created is None or created < start):
            continue
        if end and (created is None or created > end):
            continue
        entries.append(doc.to_dict())
        if len(entries) >= limit:
            break
    return entries


async def _owned(store: DocumentStore, path: str, doc_id: str, user_id: str) -> Document:
    doc = await store.get(path, doc_id)
    if doc is None:
        raise EntryNotFound(doc_id)
    if doc.data.get("userId") != user_id:
        raise NotOwner(doc_id)
    return doc


async def update_entry(
    store: DocumentStore, user_id: str, entry_id: str, changes: Mapping[str, Any]
) -> Dict[str, Any]:
    try:
        await _owned(store, JOURNALS, entry_id, user_id)
    except NotOwner as exc:
        # Someone else's entry is reported exactly like a missing one.
        raise EntryNotFound(entry_id) from exc

    allowed = {key: value for key, value in changes.items() if key in {"title", "content", "mood", "tags"}}
    if "content" in allowed:
        allowed["wordCount"] = len(str(allowed["content"]).split())
    allowed["updatedAt"] = utcnow_iso()
    await store.set(JOURNALS, entry_id, allowed, merge=True)
    return allowed


async def delete_entry(store: DocumentStore, user_id: str, entry_id: str) -> None:
    try:
        await _owned(store, JOURNALS, entry_id, user_id)
    except NotOwner as exc:
        raise EntryNotFound(entry_id) from exc
    await store.delete(JOURNALS, entry_id)


async def save_session(store: DocumentStore, user_id: str, session: Mapping[str, Any]) -> str:
    now = utcnow_iso()
    session_id = str(session["id"])
    await store.set(
        REFLECTIONS,
        session_id,
        {
            "id": session_id,
            "userId": user_id,
            "type": session.get("type"),
            "prompts": list(session.get("prompts") or []),
            "responses": list(session.get("responses") or []),
            "insights": list(session.get("insights") or []),
            "emotionalState": session.get("emotionalState"),
            "createdAt": session.get("createdAt") or now,
            "completedAt": session.get("completedAt"),
            "updatedAt": now,
        },
    )
    return session_id


async def list_sessions(store: DocumentStore, user_id: str, *, limit: int = 50) -> List[Dict[str, Any]]:
    """Reflection sessions and journal entries, newest first, tagged by ``kind``."""

    reflections = await store.query(
        REFLECTIONS, where=[("userId", "==", user_id)], order_by="createdAt", limit=limit
    )
    journals = await store.query(
        JOURNALS, where=[("userId", "==", user_id)], order_by="createdAt", limit=limit
    )

    merged: List[Dict[str, Any]] = [{**doc.to_dict(), "kind": "reflection"} for doc in reflections]
    for doc in journals:
        item = doc.to_dict()
        item["kind"] = "entry"
        item.setdefault("sentiment", (item.get("insights") or {}).get("sentiment", "neutral"))
        merged.append(item)
    merged.sort(key=_sort_key, reverse=True)
    return merged[:limit]


async def delete_session(store: DocumentStore, user_id: str, session_id: str) -> None:
    await _owned(store, REFLECTIONS, session_id, user_id)
    await store.delete(REFLECTIONS, session_id)


async def journal_context(
    store: DocumentStore, user_id: str, *, limit: int = 10, days: int = 30
) -> Dict[str, Any]:
    """Summarised recent journal history used as conversation context."""

    now = datetime.now(timezone.utc)
    start = now - timedelta(days=days)
    docs = await store.query(
        JOURNALS, where=[("userId", "==", user_id)], order_by="createdAt", limit=100
    )

    journals: List[Dict[str, Any]] = []
    for doc in docs:
        created = _parse_ts(doc.data.get("createdAt"))
        if created is None or created < start:
            continue
        content = str(doc.data.get("content") or "")
        summary = content[:SUMMARY_CHARS] + ("..." if len(content) > SUMMARY_CHARS else "")
        journals.append(
            {
                "date": created.date().isoformat(),
                "mood": doc.data.get("mood") or "neutral",
                "title": doc.data.get("title") or "Untitled",
                "summary": summary,
                "tags": list(doc.data.get("tags") or []),
                "hasInsights": bool(doc.data.get("insights")),
            }
        )
        if len(journals) >= limit:
            break

    if journals:
        blocks = []
        for item in journals:
            block = f"{item['date']} - {item['mood']} mood - {item['title']}\n{item['summary']}"
            if item["tags"]:
                block += f"\nTags: {', '.join(item['tags'])}"
            blocks.append(block + "\n")
        context_text = f"User's Recent Journal History (last {days} days):\n\n" + "\n".join(blocks)
        dominant, count = Counter(item["mood"] for item in journals).most_common(1)[0]
        mood_pattern = f"Overall mood pattern: Mostly {dominant} ({round(count / len(journals) * 100)}% of entries)"
    else:
        context_text = NO_JOURNALS_TEXT
        mood_pattern = ""

    return {
        "contextText": context_text,
        "moodPattern": mood_pattern,
        "journalCount": len(journals),
        "dateRange": {"start": start.date().isoformat(), "end": now.date().isoformat()},
        "journals": journals,
    }


async def log_mood(
    store: DocumentStore,
    user_id: str,
    *,
    mood: int,
    note: str | None = None,
    emotions: Sequence[str] | None = None,
    triggers: Sequence[str] | None = None,
) -> str:
    return await store.add(
        MOOD,
        {
            "userId": user_id,
            "mood": int(mood),
            "note": note or "",
            "emotions": list(emotions or []),
            "triggers": list(triggers or []),
            "createdAt": utcnow_iso(),
        },
    )


def mood_trend(values: Sequence[float]) -> str:
    """``values`` are chronological; compares the newer half with the older half."""

    if len(values) < 2:
        return "insufficient-data"
    middle = len(values) // 2
    older = sum(values[:middle]) / middle
    newer = sum(values[middle:]) / (len(values) - middle)
    if newer - older > 0.5:
        return "improving"
    if older - newer > 0.5:
        return "declining"
    return "stable"


async def list_moods(store: DocumentStore, user_id: str, *, limit: int = 30) -> Dict[str, Any]:
    docs = await store.query(MOOD, where=[("userId", "==", user_id)], order_by="createdAt", limit=limit)
    entries = [doc.to_dict() for doc in docs]
    values = [float(entry["mood"]) for entry in reversed(entries) if isinstance(entry.get("mood"), (int, float))]
    average = round(sum(values) / len(values), 1) if values else None
    return {"entries": entries, "average": average, "trend": mood_trend(values)}


__all__ = [
    "EntryNotFound",
    "JOURNALS",
    "MOOD",
    "NotOwner",
    "REFLECTIONS",
    "delete_entry",
    "delete_session",
    "journal_context",
    "list_entries",
    "list_moods",
    "list_sessions",
    "log_mood",
    "mood_trend",
    "save_entry",
    "save_session",
    "update_entry",
]
