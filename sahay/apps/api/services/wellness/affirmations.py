"""Daily and mood-based affirmations, saved per user."""

import logging
import random
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from sahay.apps.api.core.llm import JSON_MIME_TYPE, generate_text
from sahay.apps.api.services.conversation.memory_adapter import memory_path
from sahay.libs.llm_router import LLMError, LLMRouter, Ok, parse_or_default
from sahay.libs.store import DocumentStore, StoreError, utcnow_iso

LOGGER = logging.getLogger(__name__)

DAILY = "daily_affirmations"
INTERACTIONS = "affirmation_interactions"

MOOD_THEMES = {
    "anxiety": "calm, grounded, safe, present, in control",
    "sadness": "resilient, hopeful, worthy of love, capable of joy",
    "motivation": "capable, driven, unstoppable, progressing, achieving",
    "confidence": "strong, capable, valued, respected, powerful",
    "gratitude": "blessed, appreciative, abundant, fortunate, fulfilled",
    "self-love": "worthy, beautiful, enough, deserving, valuable",
}
DEFAULT_THEME = "peaceful, balanced, strong"

APPROACHES = (
    "action-oriented and empowering",
    "gentle and compassionate",
    "strong and confident",
    "peaceful and calming",
    "hopeful and forward-looking",
)

FALLBACK_AFFIRMATIONS: Dict[str, List[str]] = {
    "anxiety": [
        "I am safe in this moment and I trust myself completely.",
        "My breath anchors me to the calm present.",
        "I release what I cannot control with grace.",
        "Peace flows through me with every breath.",
        "I am stronger than my anxious thoughts.",
    ],
    "sadness": [
        "I honor my feelings and allow myself to heal.",
        "This moment will pass and joy will return.",
        "I am worthy of love even in my sadness.",
        "My heart is healing with each passing day.",
        "I embrace this time with self-compassion.",
    ],
    "motivation": [
        "I am capable of achieving anything I set my mind to.",
        "Every step forward is progress worth celebrating.",
        "My potential is limitless and I am unstoppable.",
        "I choose action and make today count.",
        "Success is built one determined moment at a time.",
    ],
    "confidence": [
        "I trust my abilities and know my worth.",
        "I am powerful capable and deserving of respect.",
        "My voice matters and I speak with confidence.",
        "I embrace my unique strengths and celebrate myself.",
        "I am enough exactly as I am right now.",
    ],
    "gratitude": [
        "I am grateful for the gift of this present moment.",
        "Abundance flows to me from expected and unexpected sources.",
        "I appreciate the beauty and blessings in my life.",
        "My heart overflows with thankfulness for what I have.",
        "I recognize and celebrate the good surrounding me.",
    ],
    "self-love": [
        "I am deserving of my own love and kindness.",
        "I treat myself with the compassion I give others.",
        "My worth is inherent and not based on achievement.",
        "I honor my needs and set boundaries with love.",
        "I am beautiful inside and out exactly as I am.",
    ],
}

_DAILY_PROMPT = """Generate a single, powerful daily affirmation (1 sentence, max 20 words) that promotes:
- Self-compassion
- Inner strength
- Present-moment awareness
- Positive self-image

Make it personal, using "I" statements. Be uplifting but authentic."""


def saved_path(user_id: str) -> str:
    return f"saved_affirmations/{user_id}/affirmations"


def _now_ms() -> int:
    return int(time.time() * 1000)


def strip_quotes(text: str) -> str:
    return re.sub(r"^[\"']|[\"']$", "", text.strip())


def fallback_affirmations(mood: str | None) -> List[str]:
    return list(FALLBACK_AFFIRMATIONS.get(mood or "", FALLBACK_AFFIRMATIONS["motivation"]))


def parse_affirmation_lines(text: str, count: int) -> List[str]:
    """Pull quoted or "I ..." lines out of a reply that was not JSON."""

    lines = []
    for line in (text or "").splitlines():
        stripped = line.strip()
        if not (stripped.startswith('"') or stripped.startswith("I ")):
            continue
        cleaned = re.sub(r"[\"',]+$", "", re.sub(r"^[\"'\-\d.]+\s*", "", stripped))
        if len(cleaned) > 10:
            lines.append(cleaned)
    return lines[:count]


def parse_affirmations(text: str, count: int) -> List[str]:
    parsed = parse_or_default(text, List[str] | Dict[str, Any], None)
    if isinstance(parsed, Ok):
        value = parsed.value
        items = value if isinstance(value, list) else value.get("affirmations")
        if isinstance(items, list):
            return [str(item).strip() for item in items if str(item).strip()][:count]
    return parse_affirmation_lines(text, count)


async def daily_affirmation(router: LLMRouter, store: DocumentStore, user_id: str) -> Dict[str, Any]:
    """Today's affirmation, generated once per user per day."""

    today = datetime.now(timezone.utc).date().isoformat()
    cached = await store.get(DAILY, user_id)
    if cached and cached.data.get("date") == today and cached.data.get("affirmation"):
        return cached.data["affirmation"]

    try:
        text = strip_quotes(await generate_text(router, _DAILY_PROMPT, temperature=0.8, max_tokens=50))
        personalized = True
    except LLMError as exc:
        LOGGER.warning("[wellness] daily affirmation unavailable: %s", exc)
        bank = FALLBACK_AFFIRMATIONS["self-love"]
        text = bank[datetime.now(timezone.utc).toordinal() % len(bank)]
        personalized = False

    affirmation = {
        "id": f"daily_{_now_ms()}",
        "text": text,
        "category": "daily",
        "mood": "general",
        "personalized": personalized,
        "createdAt": _now_ms(),
    }
    await store.set(DAILY, user_id, {"date": today, "affirmation": affirmation, "updatedAt": utcnow_iso()})
    return affirmation


async def _conversation_context(store: DocumentStore, user_id: str) -> str:
    try:
        doc = await store.get(memory_path(user_id), "activeContext")
    except StoreError as exc:
        LOGGER.info("[wellness] skipping personalisation for %s: %s", user_id, exc)
        return ""
    messages = (doc.data.get("recentMessages") if doc else None) or []
    texts = [str(m.get("text") or "") for m in messages if m.get("role") == "user"][-3:]
    return " ".join(texts)[:500]


async def mood_affirmations(
    router: LLMRouter,
    store: DocumentStore,
    user_id: str,
    *,
    mood: str,
    count: int = 5,
    personalized: bool = True,
) -> List[Dict[str, Any]]:
    context = await _conversation_context(store, user_id) if personalized else ""
    context_line = f'Context from their recent reflections: "{context[:200]}..."' if context else ""
    prompt = f"""Generate {count} UNIQUE and FRESH affirmations for someone experiencing {mood}. Make them {random.choice(APPROACHES)}.

{context_line}

Each affirmation should:
- Be 10-15 words long
- Use "I" statements (first person)
- Feel {MOOD_THEMES.get(mood, DEFAULT_THEME)}
- Be genuine, specific, and empowering
- Be completely different from common generic affirmations
- Avoid clichés - be creative and original

Return ONLY a JSON array of {count} strings, no additional text.
Example format: ["I am...", "I choose...", "I embrace..."]

Request ID: {_now_ms()}"""

    texts: List[str] = []
    try:
        raw = await generate_text(
            router, prompt, temperature=0.95, max_tokens=500, response_mime_type=JSON_MIME_TYPE
        )
        texts = parse_affirmations(raw, count)
    except LLMError as exc:
        LOGGER.warning("[wellness] affirmations unavailable: %s", exc)

    generated = bool(texts)
    if not texts:
        texts = fallback_affirmations(mood)[:count]

    stamp = _now_ms()
    return [
        {
            "id": f"{mood}_{stamp}_{i}",
            "text": text,
            "category": mood,
            "mood": mood,
            "personalized": bool(context) and generated,
            "createdAt": stamp,
        }
        for i, text in enumerate(texts)
    ]


async def save_affirmation(
    store: DocumentStore, user_id: str, *, affirmation_id: str, text: str, mood: str | None
) -> None:
    await store.set(saved_path(user_id), affirmation_id, {"text": text, "mood": mood, "savedAt": utcnow_iso()})
    await store.add(
        INTERACTIONS,
        {"userId": user_id, "affirmationId": affirmation_id, "action": "saved", "timestamp": utcnow_iso()},
    )


async def saved_affirmation_ids(store: DocumentStore, user_id: str) -> List[str]:
    return await store.list_ids(saved_path(user_id))


__all__ = [
    "FALLBACK_AFFIRMATIONS",
    "daily_affirmation",
    "fallback_affirmations",
    "mood_affirmations",
    "parse_affirmation_lines",
    "parse_affirmations",
    "save_affirmation",
    "saved_affirmation_ids",
    "strip_quotes",
]
