"""Per-user conversational memory kept in the document store.

Layout::

    users/{uid}/memory/profile        profile, emotionalPatterns, metadata
    users/{uid}/memory/activeContext  recentMessages, facts, sessionContext
    users/{uid}/conversations/{id}    messages, extractedFacts
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from sahay.apps.api.services.memory.facts import Fact, describe_fact, extract_facts, merge_profile
from sahay.libs.store import DocumentStore, utcnow_iso

LOGGER = logging.getLogger(__name__)

MAX_RECENT_MESSAGES = 20
MAX_FACTS = 50
MAX_RECENT_EMOTIONS = 10

FETCH_WARNING = "Memory fetch failed; proceeding without stored context."
WRITE_WARNING = "Memory write failed; conversation turn not persisted."


def memory_path(user_id: str) -> str:
    return f"users/{user_id}/memory"


def conversations_path(user_id: str) -> str:
    return f"users/{user_id}/conversations"


def _profile_facts(profile: Mapping[str, Any]) -> list[str]:
    facts: list[str] = []
    if profile.get("name"):
        facts.append(f"Name: {profile['name']}")
    interests = [item for item in profile.get("interests") or [] if item]
    if interests:
        facts.append(f"Interests: {', '.join(interests)}")
    if profile.get("field"):
        facts.append(f"Field of Study: {profile['field']}")
    if profile.get("location"):
        facts.append(f"Location: {profile['location']}")
    return facts


def empty_context() -> dict[str, Any]:
    return {"facts": [], "profile": {}, "recentMessages": [], "sessionContext": {}}


async def fetch_user_context(
    store: DocumentStore, user_id: str, *, enabled: bool = True
) -> tuple[dict[str, Any], list[str]]:
    """Load profile and active context as prompt-ready facts. Never raises."""

    if not enabled or not user_id:
        return empty_context(), []

    try:
        profile_doc = await store.get(memory_path(user_id), "profile")
        active_doc = await store.get(memory_path(user_id), "activeContext")
    except Exception as exc:
        LOGGER.warning("[memory] fetch failed for %s: %s", user_id, exc, exc_info=True)
        return empty_context(), [FETCH_WARNING]

    profile = (profile_doc.data.get("profile") if profile_doc else None) or {}
    active = active_doc.data if active_doc else {}

    facts = _profile_facts(profile)
    for fact in active.get("facts") or []:
        if isinstance(fact, str) and fact not in facts:
            facts.append(fact)

    return (
        {
            "facts": facts,
            "profile": profile,
            "recentMessages": list(active.get("recentMessages") or []),
            "sessionContext": dict(active.get("sessionContext") or {}),
        },
        [],
    )


async def record_conversation_turn(
    store: DocumentStore,
    user_id: str,
    *,
    user_message: str,
    assistant_message: str,
    emotion: Mapping[str, Any] | None = None,
    mode: str = "listener",
    language: str = "en",
    conversation_id: str | None = None,
    enabled: bool = True,
) -> tuple[list[Fact], list[str]]:
    """Persist one exchange and fold extracted facts into the profile.

    Returns ``(facts, warnings)``; storage failures become a warning.
    """

    if not enabled or not user_id:
        return [], []

    facts = extract_facts(user_message)
    now = utcnow_iso()
    emotion_label = ((emotion or {}).get("emotion") or {}).get("label")
    conversation_id = conversation_id or f"session-{datetime.now(timezone.utc):%Y-%m-%d}"

    try:
        await _write_profile(store, user_id, facts, emotion_label, now)
        await _write_active_context(
            store, user_id, user_message, assistant_message, facts, emotion_label, mode, now
        )
        await _append_conversation(
            store,
            user_id,
            conversation_id,
            [
                {"role": "user", "text": user_message, "timestamp": now},
                {"role": "assistant", "text": assistant_message, "timestamp": now},
            ],
            facts,
            mode,
            language,
            now,
        )
    except Exception as exc:
        LOGGER.warning("[memory] write failed for %s: %s", user_id, exc, exc_info=True)
        return facts, [WRITE_WARNING]

    if facts:
        LOGGER.debug("[memory] %d fact(s) stored for %s", len(facts), user_id)
    return facts, []


async def _write_profile(
    store: DocumentStore,
    user_id: str,
    facts: Sequence[Fact],
    emotion_label: str | None,
    now: str,
) -> None:
    existing = await store.get(memory_path(user_id), "profile")
    data = existing.data if existing else {}

    recent_emotions = list((data.get("emotionalPatterns") or {}).get("recentEmotions") or [])
    if emotion_label:
        recent_emotions.append({"label": emotion_label, "timestamp": now})
    metadata = dict(data.get("metadata") or {})

    await store.set(
        memory_path(user_id),
        "profile",
        {
            "profile": merge_profile(data.get("profile"), facts),
            "emotionalPatterns": {"recentEmotions": recent_emotions[-MAX_RECENT_EMOTIONS:]},
            "metadata": {
                "totalConversations": int(metadata.get("totalConversations") or 0) + 1,
                "firstSeen": metadata.get("firstSeen") or now,
                "lastActive": now,
            },
        },
    )


async def _write_active_context(
    store: DocumentStore,
    user_id: str,
    user_message: str,
    assistant_message: str,
    facts: Sequence[Fact],
    emotion_label: str | None,
    mode: str,
    now: str,
) -> None:
    existing = await store.get(memory_path(user_id), "activeContext")
    data = existing.data if existing else {}

    messages = list(data.get("recentMessages") or [])
    messages.extend(
        [
            {"role": "user", "text": user_message, "timestamp": now},
            {"role": "assistant", "text": assistant_message, "timestamp": now},
        ]
    )
    known = [fact for fact in data.get("facts") or [] if isinstance(fact, str)]
    for fact in facts:
        label = describe_fact(fact)
        if label not in known:
            known.append(label)

    await store.set(
        memory_path(user_id),
        "activeContext",
        {
            "recentMessages": messages[-MAX_RECENT_MESSAGES:],
            "facts": known[-MAX_FACTS:],
            "sessionContext": {
                "currentTopic": (data.get("sessionContext") or {}).get("currentTopic"),
                "emotionalState": emotion_label,
                "conversationGoal": mode,
            },
            "updatedAt": now,
        },
    )


async def _append_conversation(
    store: DocumentStore,
    user_id: str,
    conversation_id: str,
    messages: list[dict[str, Any]],
    facts: Sequence[Fact],
    mode: str,
    language: str,
    now: str,
) -> None:
    existing = await store.get(conversations_path(user_id), conversation_id)
    data = existing.data if existing else {}
    await store.set(
        conversations_path(user_id),
        conversation_id,
        {
            "messages": list(data.get("messages") or []) + messages,
            "extractedFacts": list(data.get("extractedFacts") or []) + [f.to_dict() for f in facts],
            "mode": mode,
            "language": language,
            "createdAt": data.get("createdAt") or now,
            "updatedAt": now,
        },
    )


__all__ = [
    "FETCH_WARNING",
    "MAX_FACTS",
    "MAX_RECENT_MESSAGES",
    "WRITE_WARNING",
    "empty_context",
    "fetch_user_context",
    "record_conversation_turn",
]
