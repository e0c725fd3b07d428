import asyncio
import json

import pytest

from sahay.apps.api.services.journaling import entries
from sahay.apps.api.services.journaling.analysis import (
    FALLBACK_INSIGHTS,
    UNAVAILABLE_REFRAMING,
    analyze_entry,
    keyword_sentiment,
    keyword_themes,
)
from sahay.libs.store import utcnow_iso


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I feel so grateful and happy today", "positive"),
        ("I am anxious and worried about everything", "negative"),
        ("I feel grateful but sad today", "positive"),
        ("I feel sad and lonely today", "neutral"),
        ("I am happy but also anxious", "neutral"),
        ("Went to class, came home.", "neutral"),
    ],
)
def test_keyword_sentiment(text, expected):
    assert keyword_sentiment(text) == expected


def test_keyword_themes_defaults_to_self_reflection():
    assert keyword_themes("The sky was blue") == ["self-reflection"]
    assert keyword_themes("exam stress and my parents")[:2] == ["academic pressure", "relationships"]


@pytest.mark.asyncio
async def test_analyze_entry_uses_model_json(llm, provider):
    provider.script(json.dumps({"sentiment": "Negative", "reframing": "It is okay to rest.", "themes": "fatigue, pressure"}))
    result = await analyze_entry(llm, "I am exhausted")
    assert result == {
        "sentiment": "negative",
        "reframing": "It is okay to rest.",
        "themes": ["fatigue", "pressure"],
        "aiGenerated": True,
    }


@pytest.mark.asyncio
async def test_analyze_entry_falls_back_to_keywords(llm, provider):
    provider.script(None)
    result = await analyze_entry(llm, "So grateful for my exam results")
    assert result["sentiment"] == "positive"
    assert result["reframing"] == UNAVAILABLE_REFRAMING
    assert result["aiGenerated"] is False
    assert "academic pressure" in result["themes"]


@pytest.mark.asyncio
async def test_analyze_entry_reads_sentiment_from_prose(llm, provider):
    provider.script("Sentiment: negative. The writer seems to be struggling.")
    result = await analyze_entry(llm, "It was an ordinary day")
    assert result["sentiment"] == "negative"
    assert result["aiGenerated"] is False


@pytest.mark.asyncio
async def test_analyze_entry_redacts_before_prompting(llm, provider):
    provider.script(None)
    await analyze_entry(llm, "Email me at asha@example.com")
    assert "asha@example.com" not in provider.prompts[0]
    assert "[EMAIL_ADDRESS]" in provider.prompts[0]


def test_save_entry_then_sessions_include_sentiment(client):
    saved = client.post("/api/journal/save", json={"content": "I am so happy and grateful today", "title": "Good day"})
    assert saved.status_code == 200
    body = saved.json()
    assert body["success"] is True
    assert body["sentiment"] == "positive"

    sessions = client.get("/api/journal/sessions").json()["sessions"]
    assert len(sessions) == 1
    assert sessions[0]["id"] == body["id"]
    assert sessions[0]["kind"] == "entry"
    assert sessions[0]["sentiment"] == "positive"


def test_save_requires_content(client):
    response = client.post("/api/journal/save", json={"content": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "Content is required and must be a non-empty string"}


def test_entries_filters_and_updates(client):
    first = client.post("/api/journal/save", json={"content": "exam prep", "mood": "stressed", "tags": ["study"]}).json()
    client.post("/api/journal/save", json={"content": "movie night", "mood": "happy", "tags": ["fun"]})

    stressed = client.get("/api/journal/entries", params={"mood": "stressed"}).json()
    assert [entry["id"] for entry in stressed["entries"]] == [first["id"]]
    tagged = client.get("/api/journal/entries", params={"tags": "fun, other"}).json()
    assert tagged["count"] == 1

    updated = client.put(f"/api/journal/entries/{first['id']}", json={"content": "exam prep went fine", "owner": "x"})
    assert updated.status_code == 200
    assert updated.json()["updated"]["wordCount"] == 4

    assert client.delete(f"/api/journal/entries/{first['id']}").status_code == 200
    assert client.delete(f"/api/journal/entries/{first['id']}").status_code == 404


@pytest.mark.asyncio
async def test_foreign_entry_looks_missing(store):
    entry_id = await entries.save_entry(store, "someone-else", content="private", analysis={})
    with pytest.raises(entries.EntryNotFound):
        await entries.update_entry(store, "dev-user", entry_id, {"title": "mine now"})
    with pytest.raises(entries.EntryNotFound):
        await entries.delete_entry(store, "dev-user", entry_id)


def test_reflection_session_lifecycle(client, store):
    payload = {"id": "sess-1", "type": "gratitude", "prompts": ["Who helped you?"], "responses": ["My sister"]}
    created = client.post("/api/journal/sessions", json=payload)
    assert created.json() == {"success": True, "sessionId": "sess-1"}

    sessions = client.get("/api/journal/sessions").json()["sessions"]
    assert sessions[0]["kind"] == "reflection"
    assert sessions[0]["type"] == "gratitude"

    assert client.post("/api/journal/sessions", json={"id": "x"}).status_code == 400
    assert client.delete("/api/journal/sessions/missing").status_code == 404
    assert client.delete("/api/journal/sessions/sess-1").json() == {"success": True}


@pytest.mark.asyncio
async def test_foreign_reflection_is_forbidden(store):
    await entries.save_session(store, "someone-else", {"id": "s1", "type": "daily", "responses": ["x"]})
    with pytest.raises(entries.NotOwner):
        await entries.delete_session(store, "dev-user", "s1")


def test_foreign_reflection_returns_403(client, store):
    asyncio.run(entries.save_session(store, "someone-else", {"id": "s1", "type": "daily", "responses": ["x"]}))
    response = client.delete("/api/journal/sessions/s1")
    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized"}


def test_insights_fallback_and_validation(client, provider):
    assert client.post("/api/journal/insights", json={"responses": []}).status_code == 400

    provider.script(None)
    body = client.post("/api/journal/insights", json={"type": "daily", "responses": ["I rested"]}).json()
    assert body == {"insights": FALLBACK_INSIGHTS, "aiGenerated": False}

    provider.script("1. You value rest more than you admit.\n2. Small wins matter to you.\nok")
    body = client.post("/api/journal/insights", json={"type": "daily", "responses": ["I rested"]}).json()
    assert body["aiGenerated"] is True
    assert body["insights"] == ["You value rest more than you admit.", "Small wins matter to you."]


def test_reflection_prompts_default_to_daily(client):
    body = client.post("/api/journal/reflection-prompts", json={"type": "unknown"}).json()
    assert len(body["prompts"]) == 5
    assert body["prompts"][0].startswith("What was the most meaningful moment")


@pytest.mark.asyncio
async def test_journal_context_summarises_recent_entries(store):
    assert (await entries.journal_context(store, "u1"))["contextText"] == entries.NO_JOURNALS_TEXT

    for mood in ("calm", "calm", "anxious"):
        await entries.save_entry(store, "u1", content="x" * 250, analysis={"sentiment": "neutral"}, mood=mood)
    await store.add(entries.JOURNALS, {"userId": "u1", "content": "old", "createdAt": "2001-01-01T00:00:00+00:00"})

    context = await entries.journal_context(store, "u1", days=30)
    assert context["journalCount"] == 3
    assert context["moodPattern"] == "Overall mood pattern: Mostly calm (67% of entries)"
    assert context["journals"][0]["summary"].endswith("...")
    assert len(context["journals"][0]["summary"]) == entries.SUMMARY_CHARS + 3


@pytest.mark.parametrize(
    "values, trend",
    [([5], "insufficient-data"), ([3, 4, 7, 8], "improving"), ([8, 8, 4, 3], "declining"), ([5, 5, 5, 6], "stable")],
)
def test_mood_trend(values, trend):
    assert entries.mood_trend(values) == trend


def test_mood_logging(client):
    assert client.post("/api/journal/mood", json={"mood": 11}).status_code == 400
    assert client.post("/api/journal/mood", json={}).status_code == 400
    for value in (4, 8):
        assert client.post("/api/journal/mood", json={"mood": value, "emotions": ["ok"]}).status_code == 200
    body = client.get("/api/journal/mood").json()
    assert len(body["entries"]) == 2
    assert body["average"] == 6.0


@pytest.mark.asyncio
async def test_list_entries_date_window(store):
    await store.add(entries.JOURNALS, {"userId": "u1", "content": "a", "createdAt": "2024-01-10T00:00:00+00:00"})
    await store.add(entries.JOURNALS, {"userId": "u1", "content": "b", "createdAt": utcnow_iso()})
    found = await entries.list_entries(store, "u1", start_date="2024-01-01", end_date="2024-02-01")
    assert [item["content"] for item in found] == ["a"]
