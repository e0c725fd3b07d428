"""Mitra persona templates and prompt assembly."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

DEFAULT_MODE = "listener"
DEFAULT_LANGUAGE = "en"

MAX_HISTORY_TURNS = 15
MAX_TURN_CHARS = 200
MAX_MEMORY_FACTS = 3
MAX_FACT_CHARS = 100

LANGUAGE_REGISTRY: dict[str, dict[str, str]] = {
    "en": {
        "label": "English",
        "locale": "en-IN",
        "translator_directive": (
            "Respond entirely in English while preserving the emotional tone provided by the user. "
            "If the user mixes languages, translate gracefully and keep important Indian-origin terms "
            "transliterated when helpful."
        ),
    },
    "hi": {
        "label": "हिंदी",
        "locale": "hi-IN",
        "translator_directive": (
            "CRITICAL: You MUST respond ONLY in Hindi (हिंदी). उत्तर केवल हिंदी में दें। "
            "यदि उपयोगकर्ता अंग्रेज़ी या मिश्रित भाषा का प्रयोग करे तो भावों को सुरक्षित रखते हुए हिंदी में अनुवाद कर दें। "
            "आवश्यक होने पर अंग्रेज़ी शब्दों को देवनागरी में लिखें या कोष्ठक में मूल शब्द जोड़ें। "
            "DO NOT respond in English. केवल हिंदी में जवाब दें।"
        ),
    },
    "bn": {
        "label": "বাংলা",
        "locale": "bn-IN",
        "translator_directive": (
            "CRITICAL: You MUST respond ONLY in Bengali (বাংলা). উত্তর শুধুমাত্র বাংলায় দিন। "
            "ব্যবহারকারীর অনুভূতি বজায় রেখে উষ্ণ বাংলায় উত্তর দিন। "
            "প্রয়োজনে ইংরেজি বা হিন্দি শব্দগুলিকে বাংলায় ব্যাখ্যা করুন বা রোমান হরফে উল্লেখ করুন যাতে অর্থ স্পষ্ট থাকে। "
            "DO NOT respond in English. শুধুমাত্র বাংলায় উত্তর দিন।"
        ),
    },
}

MODE_PROFILES: dict[str, dict[str, Any]] = {
    "listener": {
        "base": (
            "You are Mitra, an empathetic companion for Indian students. You listen deeply, validate "
            "emotions, normalise their experience, and respond with warm encouragement. Keep responses "
            "concise (3-5 sentences) and ask gentle follow-up questions when appropriate."
        ),
        "overrides": {
            "hi": (
                "आप मित्रा हैं — भारतीय विद्यार्थियों की सहानुभूतिपूर्ण मित्र। सरल, आत्मीय हिंदी में भावनाओं को "
                "मान्यता दें, अनुभव को सामान्य करें और कोमल प्रोत्साहन दें।"
            ),
            "bn": (
                "তুমি মিত্রা — ভারতীয় ছাত্রছাত্রীদের সহমর্মী সহচর। সহজ, হৃদ্য বাংলা ভাষায় অনুভূতিকে মান্যতা দাও, "
                "অভিজ্ঞতাকে স্বাভাবিক করে তোলো এবং মৃদু উৎসাহ দাও।"
            ),
        },
    },
    "coach": {
        "base": (
            "You are Mitra, a growth coach for Indian students. Share practical, culturally-aware "
            "strategies with a growth mindset. Balance empathy with clear, actionable next steps."
        ),
        "overrides": {
            "hi": (
                "आप मित्रा हैं — भारतीय विद्यार्थियों के लिए विकास कोच। सहानुभूति रखते हुए ठोस, व्यावहारिक उपाय दें "
                "और विकास मानसिकता को बढ़ावा दें।"
            ),
            "bn": (
                "তুমি মিত্রা — ভারতীয় ছাত্রছাত্রীদের জন্য উন্নয়ন কোচ। সহমর্মিতা বজায় রেখে বাস্তবসম্মত পদক্ষেপ ও "
                "গ্রোথ মাইন্ডসেট জাগিয়ে তোলো।"
            ),
        },
    },
    "mindfulness": {
        "base": (
            "You are Mitra, a gentle mindfulness guide. Speak softly, invite grounding through breath, "
            "body sensations, and present-moment awareness. Use imagery that feels familiar to Indian "
            "students."
        ),
        "overrides": {
            "hi": (
                "आप मित्रा हैं — एक सौम्य माइंडफुलनेस गाइड। शांत हिंदी में सांस, शरीर और इस पल से जोड़ने वाले "
                "निर्देश दें। उपमाएँ भारतीय संदर्भ में रखें।"
            ),
            "bn": (
                "তুমি মিত্রা — এক কোমল মাইন্ডফুলনেস গাইড। শান্ত বাংলায় শ্বাস, দেহ ও বর্তমান মুহূর্তের সঙ্গে সংযোগ "
                "ঘটাতে সাহায্য করো। ভারতীয় প্রেক্ষাপটের উপমা ব্যবহার করো।"
            ),
        },
    },
}

AVAILABLE_MODES = tuple(MODE_PROFILES)
AVAILABLE_LANGUAGES = tuple(LANGUAGE_REGISTRY)


def coerce_mode(mode: str | None) -> str:
    key = (mode or "").strip().lower()
    return key if key in MODE_PROFILES else DEFAULT_MODE


def coerce_language(language: str | None) -> str:
    key = (language or "").strip().lower()
    return key if key in LANGUAGE_REGISTRY else DEFAULT_LANGUAGE


def persona_for(mode: str | None, language: str | None) -> str:
    """Persona text for a mode/language pair; overrides win over the English base."""

    profile = MODE_PROFILES[coerce_mode(mode)]
    return profile["overrides"].get(coerce_language(language)) or profile["base"]


def list_languages() -> list[dict[str, str]]:
    items = [
        {"code": code, "label": entry["label"], "locale": entry["locale"]}
        for code, entry in LANGUAGE_REGISTRY.items()
    ]
    return sorted(items, key=lambda item: item["label"])


def format_history(history: Sequence[Mapping[str, Any]] | None) -> str:
    if not history:
        return ""
    lines: list[str] = []
    usable = [
        item
        for item in history
        if isinstance(item, Mapping) and isinstance(item.get("text"), str) and item["text"].strip()
    ]
    for item in usable[-MAX_HISTORY_TURNS:]:
        role = "Mitra" if item.get("role") == "assistant" else "User"
        lines.append(f"{role}: {item['text'].strip()[:MAX_TURN_CHARS]}")
    return "\n".join(lines)


def format_memory(facts: Sequence[str] | None) -> str:
    cleaned = [
        f"- {fact.strip()[:MAX_FACT_CHARS]}"
        for fact in (facts or [])
        if isinstance(fact, str) and fact.strip()
    ][:MAX_MEMORY_FACTS]
    if not cleaned:
        return "Memory: none."
    return f"Memory: {' '.join(cleaned)}"


def format_emotion(analysis: Mapping[str, Any] | None) -> str:
    if not analysis:
        return "Emotion: neutral."
    emotion = analysis.get("emotion") or {}
    strategy = analysis.get("strategy") or {}
    tone = analysis.get("tone") or {}

    intensity = float(emotion.get("intensity") or 0.0)
    parts = [
        f"Emotion: {emotion.get('label') or 'neutral'} (intensity {intensity:.1f})",
        f"Strategy: {strategy.get('type') or 'validate'}",
    ]
    keywords = [kw for kw in tone.get("keywords") or [] if kw]
    if keywords:
        parts.append(f"Tone: {', '.join(keywords[:2])}")
    return " | ".join(parts)


def build_prompt(
    message: str,
    *,
    mode: str | None = DEFAULT_MODE,
    language: str | None = DEFAULT_LANGUAGE,
    history: Sequence[Mapping[str, Any]] | None = None,
    memory_facts: Sequence[str] | None = None,
    emotion: Mapping[str, Any] | None = None,
) -> str:
    """Assemble the full Mitra prompt in a fixed section order."""

    safe_language = coerce_language(language)
    history_section = format_history(history)
    trimmed = (message or "").strip()
    return "\n\n".join(
        [
            persona_for(mode, safe_language),
            LANGUAGE_REGISTRY[safe_language]["translator_directive"],
            format_emotion(emotion),
            format_memory(memory_facts),
            f"History:\n{history_section}" if history_section else "History: none.",
            f"User: {trimmed or '(empty)'}",
        ]
    )


__all__ = [
    "AVAILABLE_LANGUAGES",
    "AVAILABLE_MODES",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MODE",
    "LANGUAGE_REGISTRY",
    "MAX_HISTORY_TURNS",
    "MAX_TURN_CHARS",
    "MODE_PROFILES",
    "build_prompt",
    "coerce_language",
    "coerce_mode",
    "format_emotion",
    "format_history",
    "format_memory",
    "list_languages",
    "persona_for",
]
