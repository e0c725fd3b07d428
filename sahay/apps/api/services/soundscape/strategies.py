"""Sound recommendation strategies, selected by the ``sound_strategy`` setting."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping

_OCEAN = "https://cdn.pixabay.com/audio/2022/10/16/audio_12b6b7b7b7.mp3"
_RAIN = "https://cdn.pixabay.com/audio/2022/07/26/audio_124bfae5e2.mp3"
_TONE = "https://cdn.pixabay.com/audio/2022/03/15/audio_115b9b5b9b.mp3"

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}
MAX_RECOMMENDATIONS = 4


def _sound(name: str, url: str, benefit: str) -> Dict[str, str]:
    return {"name": name, "url": url, "benefit": benefit}


SOUND_LIBRARY: Dict[str, List[Dict[str, str]]] = {
    "anxiety": [
        _sound("Ocean Waves", _OCEAN, "Reduces cortisol, promotes deep relaxation, masks racing thoughts"),
        _sound("Gentle Rain", _RAIN, "Natural white noise that calms the nervous system"),
        _sound("Binaural Beats Theta", _TONE, "4-8Hz theta waves for deep relaxation and meditation"),
    ],
    "stress": [
        _sound("Forest Ambience", _RAIN, "Nature sounds reduce stress hormones and improve mood"),
        _sound("Tibetan Singing Bowls", _TONE, "Ancient healing frequencies for stress relief"),
        _sound("Soft Piano", _TONE, "Melodic tones that soothe the mind and reduce tension"),
    ],
    "focus": [
        _sound("Brown Noise", _TONE, "Deep, rich sound that enhances concentration and blocks distractions"),
        _sound("Alpha Waves", _TONE, "8-12Hz alpha waves for relaxed focus and creativity"),
        _sound("Coffee Shop Ambience", _TONE, "Balanced background noise that improves productivity"),
    ],
    "sleep": [
        _sound("Deep Ocean", _OCEAN, "Promotes delta wave sleep and deep rest"),
        _sound("Night Rain", _RAIN, "Soothing precipitation sounds for better sleep quality"),
        _sound("Whale Songs", _OCEAN, "Low-frequency tones that induce relaxation and sleep"),
    ],
    "energy": [
        _sound("Upbeat Forest", _RAIN, "Natural sounds with gentle stimulation for energy boost"),
        _sound("Beta Waves", _TONE, "13-30Hz beta waves for alertness and motivation"),
        _sound("Morning Birds", _RAIN, "Natural wake-up sounds that boost morning energy"),
    ],
    "depression": [
        _sound("Healing Water", _OCEAN, "Flowing water sounds that lift mood and reduce sadness"),
        _sound("Sunrise Ambience", _RAIN, "Warm, uplifting nature sounds for emotional healing"),
        _sound("528Hz Love Frequency", _TONE, "Solfeggio frequency associated with love and emotional healing"),
    ],
    "creativity": [
        _sound("Pink Noise", _TONE, "Balanced noise that enhances creative thinking"),
        _sound("Wind Chimes", _TONE, "Melodic, random sounds that spark inspiration"),
        _sound("Jazz Cafe", _TONE, "Creative atmosphere sounds for artistic flow"),
    ],
}


def default_recommendations() -> List[Dict[str, Any]]:
    return [
        {
            "category": "getting-started",
            "sounds": [
                _sound("Ocean Waves", _OCEAN, "Natural calming sound for relaxation"),
                _sound("Gentle Rain", _RAIN, "Soothing precipitation sounds"),
                _sound("Brown Noise", _TONE, "Deep, rich sound for focus"),
            ],
            "reason": "Welcome to Dhwani! These are some popular therapeutic sounds to get you started on your wellness journey.",
        }
    ]


def personalized(analysis: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Categories chosen from mood state, sound needs and themes; top four by priority."""

    mood = str(analysis.get("moodState") or "").lower()
    needs = [str(item).lower() for item in analysis.get("soundNeeds") or []]
    themes = [str(item).lower() for item in analysis.get("keyThemes") or []]
    picks: List[Dict[str, Any]] = []

    def add(category: str, library: str, reason: str, priority: str) -> None:
        picks.append(
            {"category": category, "sounds": list(SOUND_LIBRARY[library]), "reason": reason, "priority": priority}
        )

    if mood in {"anxious", "anxiety"}:
        add(
            "anxiety-relief",
            "anxiety",
            f"Based on your current {mood} state, these sounds are scientifically proven to reduce anxiety symptoms and promote calmness.",
            "high",
        )
    if mood in {"stressed", "stress"} or "stress" in themes:
        add(
            "stress-relief",
            "stress",
            "These therapeutic sounds help lower cortisol levels and create a peaceful mental environment.",
            "high",
        )
    if "focus" in needs or "concentration" in needs or mood == "distracted":
        add(
            "focus-enhancement",
            "focus",
            "Optimized soundscapes that improve concentration and cognitive performance.",
            "medium",
        )
    if "sleep" in needs or mood in {"tired", "insomnia"}:
        add("sleep-support", "sleep", "Sleep-enhancing soundscapes that promote deep, restorative rest.", "high")
    if "energy" in needs or mood in {"low-energy", "fatigued"}:
        add("energy-boost", "energy", "Uplifting sounds that naturally boost energy and motivation.", "medium")
    if mood in {"depressed", "sad"} or "depression" in themes:
        add(
            "mood-lifting",
            "depression",
            "Therapeutic frequencies and nature sounds designed to lift mood and promote emotional healing.",
            "high",
        )
    if "creativity" in needs or "creative" in themes:
        add(
            "creative-enhancement",
            "creativity",
            "Sounds that enhance creative thinking and artistic expression.",
            "medium",
        )

    if not picks:
        picks.append(
            {
                "category": "general-wellness",
                "sounds": [SOUND_LIBRARY["anxiety"][0], SOUND_LIBRARY["focus"][0], SOUND_LIBRARY["sleep"][0]],
                "reason": "A curated selection of therapeutic sounds for overall emotional wellness and balance.",
                "priority": "low",
            }
        )

    picks.sort(key=lambda item: PRIORITY_ORDER[item["priority"]], reverse=True)
    return picks[:MAX_RECOMMENDATIONS]


def summary_keywords(analysis: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Categories chosen from keywords in the analysis summary."""

    summary = str(analysis.get("summary") or "").lower()
    suggestions = str(analysis.get("suggestions") or "").lower()
    picks: List[Dict[str, Any]] = []

    if any(word in summary for word in ("stress", "anxiety", "overwhelm")):
        picks.append(
            {
                "category": "stress",
                "sounds": SOUND_LIBRARY["anxiety"][:2] + SOUND_LIBRARY["stress"][:1],
                "reason": "Based on your recent entries showing stress patterns, these calming sounds can help reduce anxiety and promote relaxation.",
            }
        )
    if any(word in summary for word in ("focus", "concentration", "study")):
        picks.append(
            {
                "category": "focus",
                "sounds": SOUND_LIBRARY["focus"][:2],
                "reason": "These sounds are optimized for concentration and can help improve your focus during work or study sessions.",
            }
        )
    if any(word in summary for word in ("tired", "low energy", "fatigue")):
        picks.append(
            {
                "category": "energy",
                "sounds": SOUND_LIBRARY["energy"][:1],
                "reason": "Gentle, uplifting sounds to help boost your energy levels naturally.",
            }
        )
    if "sleep" in summary or "insomnia" in summary or "sleep" in suggestions:
        picks.append(
            {
                "category": "sleep",
                "sounds": SOUND_LIBRARY["sleep"][:2],
                "reason": "These soothing soundscapes are designed to promote better sleep quality and relaxation.",
            }
        )
    if not picks:
        picks.append(
            {
                "category": "general",
                "sounds": [SOUND_LIBRARY["anxiety"][0], SOUND_LIBRARY["focus"][0]],
                "reason": "A balanced selection of calming and focusing sounds for general wellness.",
            }
        )
    return picks


STRATEGIES: Dict[str, Callable[[Mapping[str, Any]], List[Dict[str, Any]]]] = {
    "personalized": personalized,
    "summary": summary_keywords,
}


def recommend(analysis: Mapping[str, Any], strategy: str = "personalized") -> List[Dict[str, Any]]:
    try:
        selected = STRATEGIES[strategy]
    except KeyError as exc:
        raise ValueError(f"Unknown sound strategy '{strategy}'") from exc
    return selected(analysis)


__all__ = [
    "SOUND_LIBRARY",
    "STRATEGIES",
    "default_recommendations",
    "personalized",
    "recommend",
    "summary_keywords",
]
