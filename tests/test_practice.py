import json
from datetime import date

import pytest

from sahay.apps.api.services.practice import coach, progress


def test_heuristic_feedback_rewards_i_statements_and_empathy():
    strong = coach.heuristic_feedback(
        "I understand you are busy, but I feel overwhelmed when plans change last minute. "
        "Could you please tell me a day earlier next time?"
    )
    weak = coach.heuristic_feedback("whatever")

    assert strong["empathyScore"] > weak["empathyScore"]
    assert strong["toneScore"] > weak["toneScore"]
    assert strong["clarityScore"] > weak["clarityScore"]
    assert {"assertiveness", "empathy", "clarity"} <= set(strong["skillsImproved"])
    assert weak["skillsImproved"] == []
    assert weak["clarityScore"] == 40
    assert 0 <= weak["xpEarned"] <= 50


def test_detailed_feedback_clamps_model_scores():
    parsed = coach.DetailedFeedback(overall="ok", empathyScore=140, toneScore=-5, xpEarned=99)
    assert (parsed.empathyScore, parsed.toneScore, parsed.xpEarned) == (100, 0, 50)


@pytest.mark.asyncio
async def test_detailed_feedback_prefers_model(llm, provider):
    provider.script(json.dumps({"overall": "Nicely done", "empathyScore": 88, "skillsImproved": ["empathy"]}))
    result = await coach.detailed_feedback(llm, scenario="boundaries", user_input="I need some space")
    assert result["aiGenerated"] is True
    assert result["overall"] == "Nicely done"
    assert result["empathyScore"] == 88


@pytest.mark.asyncio
async def test_detailed_feedback_falls_back_to_heuristics(llm, provider):
    provider.script(None)
    result = await coach.detailed_feedback(llm, scenario="boundaries", user_input="I need some space")
    assert result["aiGenerated"] is False
    assert "assertiveness" in result["skillsImproved"]


@pytest.mark.asyncio
async def test_simulate_substitutes_fallback_texts(llm, provider):
    provider.script(None, None)
    result = await coach.simulate(llm, scenario="help", user_input="Can you help me with maths?")
    assert result == {"ai": coach.FALLBACK_REPLY, "feedback": coach.FALLBACK_FEEDBACK}


@pytest.mark.asyncio
async def test_simulate_uses_scenario_prompts(llm, provider):
    provider.script("Of course, what part is hard?", "Clear request. Mention a deadline.")
    result = await coach.simulate(llm, scenario="help", user_input="Can you help me with maths?")
    assert result["ai"] == "Of course, what part is hard?"
    assert coach.SCENARIOS["help"]["interviewer"] in provider.prompts[0]
    assert coach.SCENARIOS["help"]["feedback"] in provider.prompts[1]


def test_unknown_scenario_uses_default():
    assert coach.scenario_for("karaoke") == coach.DEFAULT_SCENARIO


def test_streak_rules():
    today = date(2024, 3, 10)
    assert progress.next_streak(None, today) == (1, False)
    assert progress.next_streak("2024-03-10", today) == (0, True)
    assert progress.next_streak("2024-03-09", today) == (1, True)
    assert progress.next_streak("2024-03-01", today) == (1, False)


def test_apply_practice_levels_and_badges():
    state = progress.default_progress()
    state, badges = progress.apply_practice(
        state, scenario="assertive", xp_earned=60, scores={"assertiveness": 90}, today=date(2024, 3, 9)
    )
    assert badges == ["first-practice", "confident-speaker"]
    assert state["level"] == 1
    assert state["streak"] == 1

    state, badges = progress.apply_practice(
        state,
        scenario="assertive",
        xp_earned=60,
        skills_improved=["empathy"],
        scores={"assertiveness": 50},
        today=date(2024, 3, 10),
    )
    assert badges == []
    assert state["level"] == 2
    assert state["streak"] == 2
    assert state["completedScenarios"] == ["assertive"]
    assert state["skillScores"] == {"assertiveness": 78.0, "empathy": 55.0}


def test_week_warrior_badge():
    state = {**progress.default_progress(), "streak": 6, "lastPracticeDate": "2024-03-09", "badges": ["first-practice"]}
    _, badges = progress.apply_practice(state, scenario=None, xp_earned=5, today=date(2024, 3, 10))
    assert badges == ["week-warrior"]


def test_practice_endpoints(client, provider):
    catalogue = client.get("/api/practice").json()
    assert {item["id"] for item in catalogue["scenarios"]} == set(coach.SCENARIOS)

    assert client.post("/api/practice/simulate", json={"scenario": "help"}).status_code == 400

    first = client.post("/api/practice/progress", json={"scenario": "help", "xpEarned": 120}).json()
    assert first["success"] is True
    assert first["newBadges"] == ["first-practice"]
    assert first["leveledUp"] is True
    assert first["progress"]["level"] == 2

    stored = client.get("/api/practice/progress").json()
    assert stored["xp"] == 120
    assert stored["totalPractices"] == 1

    provider.script(None)
    feedback = client.post(
        "/api/practice/feedback-enhanced", json={"scenario": "help", "userInput": "Please help me, I feel stuck"}
    ).json()
    assert feedback["aiGenerated"] is False
