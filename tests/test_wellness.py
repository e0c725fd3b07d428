import json

import pytest

from sahay.apps.api.services.conversation.memory_adapter import record_conversation_turn
from sahay.apps.api.services.wellness import affirmations, sessions


@pytest.mark.asyncio
async def test_daily_affirmation_is_cached_for_the_day(llm, provider, store):
    provider.script('"I meet today with a steady heart."')
    first = await affirmations.daily_affirmation(llm, store, "u1")
    second = await affirmations.daily_affirmation(llm, store, "u1")

    assert first["text"] == "I meet today with a steady heart."
    assert first["personalized"] is True
    assert second == first
    assert len(provider.calls) == 1


@pytest.mark.asyncio
async def test_daily_affirmation_falls_back_to_bank(llm, provider, store):
    provider.script(None)
    result = await affirmations.daily_affirmation(llm, store, "u1")
    assert result["personalized"] is False
    assert result["text"] in affirmations.FALLBACK_AFFIRMATIONS["self-love"]


def test_parse_affirmations_accepts_arrays_and_objects():
    assert affirmations.parse_affirmations('["I rise", "I rest", "I return"]', 2) == ["I rise", "I rest"]
    assert affirmations.parse_affirmations('{"affirmations": ["I am here"]}', 5) == ["I am here"]


def test_parse_affirmations_ignores_non_list_values():
    assert affirmations.parse_affirmations('{"affirmations": "I am calm and steady"}', 3) == []
    assert affirmations.parse_affirmations('{"affirmations": null}', 3) == []


def test_parse_affirmation_lines_from_prose():
    text = 'Here you go:\n"I am brave and kind today",\nI choose calm over chaos\nI ok\nThanks!'
    assert affirmations.parse_affirmation_lines(text, 5) == ["I am brave and kind today", "I choose calm over chaos"]


def test_unknown_mood_uses_motivation_bank():
    assert affirmations.fallback_affirmations("zen") == affirmations.FALLBACK_AFFIRMATIONS["motivation"]


@pytest.mark.asyncio
async def test_mood_affirmations_personalised_from_memory(llm, provider, store):
    await record_conversation_turn(store, "u1", user_message="Exams are close and I panic", assistant_message="ok")
    provider.script(json.dumps(["I breathe through the pressure", "I am prepared enough"]))

    items = await affirmations.mood_affirmations(llm, store, "u1", mood="anxiety", count=2)

    assert [item["text"] for item in items] == ["I breathe through the pressure", "I am prepared enough"]
    assert all(item["personalized"] for item in items)
    assert "Exams are close and I panic" in provider.prompts[0]
    assert provider.calls[0]["options"].response_mime_type == "application/json"


@pytest.mark.asyncio
async def test_mood_affirmations_fall_back_when_generation_fails(llm, provider, store):
    provider.script(None)
    items = await affirmations.mood_affirmations(llm, store, "u1", mood="sadness", count=3, personalized=False)
    assert [item["text"] for item in items] == affirmations.FALLBACK_AFFIRMATIONS["sadness"][:3]
    assert not any(item["personalized"] for item in items)


@pytest.mark.asyncio
async def test_session_steps(llm, provider):
    steps = [
        {"phase": "breathe", "title": "Slow Breath", "instruction": "Breathe in for four.", "duration": 45},
        {"phase": "close", "title": "Return", "instruction": "Open your eyes.", "duration": 45},
    ]
    provider.script(json.dumps(steps), "not json")
    assert await sessions.session_steps(llm, "focus-reset") == steps
    assert "3-minute focus session" in provider.prompts[0]
    assert await sessions.session_steps(llm, None) == sessions.FALLBACK_STEPS


@pytest.mark.asyncio
async def test_breathing_sessions_update_preferences(store):
    await sessions.record_breathing(store, "u1", pattern="4-7-8", cycles=4, duration=120)
    await sessions.record_breathing(store, "u1", pattern="box", cycles=2, duration=60)
    prefs = (await store.get(sessions.PREFERENCES, "u1")).data
    assert prefs == {"lastBreathingPattern": "box", "totalBreathingSessions": 2, "totalBreathingMinutes": 3}


def test_affirmation_endpoints(client, provider):
    bad = client.post("/api/wellness/save-affirmation", json={"text": "I am here"})
    assert bad.status_code == 400
    assert bad.json() == {"error": "affirmationId and text are required"}

    saved = client.post(
        "/api/wellness/save-affirmation", json={"affirmationId": "a1", "text": "I am here", "mood": "calm"}
    )
    assert saved.json() == {"success": True}
    assert client.get("/api/wellness/saved-affirmations").json() == {"saved": ["a1"]}

    provider.script(None)
    body = client.post("/api/wellness/affirmations", json={"mood": "gratitude", "count": 2}).json()
    assert len(body["affirmations"]) == 2
    assert body["affirmations"][0]["category"] == "gratitude"

    assert client.post("/api/wellness/affirmations", json={"count": 20}).status_code == 400


def test_session_endpoints(client, provider):
    assert client.get("/api/wellness/progress").json() == {"level": 1, "xp": 0, "totalSessions": 0}

    first = client.post("/api/wellness/complete-session", json={"sessionType": "calm-2min", "xpEarned": 60}).json()
    assert first == {"success": True, "totalXP": 60, "level": 1, "xpEarned": 60}
    second = client.post("/api/wellness/complete-session", json={"xpEarned": 60}).json()
    assert second["level"] == 2

    progress = client.get("/api/wellness/progress").json()
    assert progress["totalSessions"] == 2
    assert progress["xp"] == 120

    assert client.post("/api/wellness/generate-session", json={}).json() == {"steps": sessions.FALLBACK_STEPS}

    provider.script(None)
    narration = client.post("/api/wellness/narration", json={"inhale": 4, "hold": 7, "exhale": 8}).json()
    assert narration == {"narration": sessions.fallback_narration(4, 7, 8)}

    breathing = client.post("/api/wellness/breathing-session", json={"pattern": "box", "cycles": 3, "duration": 90})
    assert breathing.json()["success"] is True
