import json

from sahay.apps.api.routes.digital_twin import FAILED_SUMMARY
from sahay.apps.api.routes.mitra import intensity_note
from sahay.apps.api.services.conversation.orchestrator import SAFE_DEFAULT_RESPONSE
from sahay.libs.store import StoreError


def test_health_and_metrics(client):
    response = client.get("/health")
    assert response.json() == {"status": "ok"}
    assert "x-response-time-ms" in response.headers

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "requests_total" in metrics.text


def test_auth_rejections_without_bypass(make_client):
    client = make_client(dev_bypass_auth=False)

    missing = client.get("/api/mitra/languages")
    assert missing.status_code == 401
    assert missing.json() == {"error": "Missing Authorization header"}

    basic = client.get("/api/mitra/languages", headers={"Authorization": "Basic abc"})
    assert basic.json() == {"error": "Missing token"}

    bad = client.get("/api/mitra/languages", headers={"Authorization": "Bearer stale"})
    assert bad.status_code == 401
    assert bad.json() == {"error": "Invalid or expired token"}

    good = client.get("/api/mitra/languages", headers={"Authorization": "Bearer good-token"})
    assert good.status_code == 200
    assert {item["code"] for item in good.json()["languages"]} == {"en", "hi", "bn"}

    assert client.get("/api/mitra/languages", headers={"x-dev-auth": "allow"}).status_code == 200


def test_verified_user_owns_their_data(make_client):
    client = make_client(dev_bypass_auth=False)
    headers = {"Authorization": "Bearer good-token"}
    client.post("/api/journal/save", json={"content": "quiet evening"}, headers=headers)

    own = client.get("/api/journal/entries", headers=headers).json()
    assert own["count"] == 1
    dev = client.get("/api/journal/entries", headers={"x-dev-auth": "allow"}).json()
    assert dev["count"] == 0


def test_register_and_verify(client):
    assert client.post("/api/auth/register", json={"email": "a@b.co"}).json() == {"error": "Missing fields"}

    created = client.post("/api/auth/register", json={"email": "a@b.co", "password": "secret1"}).json()
    assert created == {"success": True, "uid": "uid-1"}
    duplicate = client.post("/api/auth/register", json={"email": "a@b.co", "password": "secret1"})
    assert duplicate.status_code == 500
    assert duplicate.json() == {"error": "EMAIL_EXISTS"}

    assert client.post("/api/auth/verify", json={}).status_code == 400
    assert client.post("/api/auth/verify", json={"token": "nope"}).json() == {"error": "Invalid token"}
    verified = client.post("/api/auth/verify", json={"token": "good-token"}).json()
    assert verified["uid"] == "user-1"
    assert verified["decoded"]["email"] == "asha@example.com"


def test_anonymize(client):
    assert client.post("/api/security/anonymize", json={}).json() == {"error": "Missing text"}
    body = client.post(
        "/api/security/anonymize", json={"text": "I'm Priya, mail priya@uni.edu or call +91 98765 43210"}
    ).json()
    assert body["anonymized"] == "I'm [PERSON_NAME], mail [EMAIL_ADDRESS] or call [PHONE_NUMBER]"


def test_conversation_endpoint(client, provider):
    assert client.post("/api/mitra/conversation", json={"message": ""}).json() == {"error": "Message is required."}

    provider.script(None, None)
    body = client.post("/api/mitra/conversation", json={"message": "hello", "mode": "coach"}).json()
    assert body["response"]["text"] == SAFE_DEFAULT_RESPONSE
    assert body["meta"]["mode"] == "coach"

    provider.script("{}", "Tell me more about your week.")
    body = client.post(
        "/api/mitra/conversation", json={"message": "I had a long week", "includeJournalContext": True}
    ).json()
    assert body["response"]["text"] == "Tell me more about your week."
    assert "User has no recent journal entries." in provider.prompts[-1]


def test_intensity_note_bands():
    assert intensity_note(1) is None
    assert "moderate emotional intensity (3/10)" in intensity_note(3)
    assert "high emotional intensity (8.5/10)" in intensity_note(8.5)


def test_mitra_chat_prefixes_intensity(client, provider):
    provider.script("I am here with you.")
    body = client.post("/api/mitra/chat", json={"message": "everything is too much", "emotionalIntensity": 7}).json()
    assert body["aiResponse"]["text"] == "I am here with you."
    assert body["emotionalIntensity"] == 7
    assert "high emotional intensity (7/10)" in provider.prompts[0]
    assert provider.prompts[0].rstrip().endswith("everything is too much\n\nMitra:")


def test_chat_message(client, provider):
    assert client.post("/api/chat/message", json={}).json() == {"error": "Missing message"}
    provider.script(None)
    body = client.post("/api/chat/message", json={"message": "hi", "language": "hi"}).json()
    assert body["language"] == "hi"
    assert "error" in body


def test_transcribe(client, transcriber):
    assert client.post("/api/mitra/transcribe", json={}).status_code == 400

    body = client.post(
        "/api/mitra/transcribe", json={"audioBase64": "UklGRg==", "language": "hi-IN", "enableSpeakerDiarization": True}
    ).json()
    assert body["transcript"] == "hello mitra"
    assert body["meta"] == {
        "userId": "dev-user",
        "mimeType": "audio/webm",
        "enableSpeakerDiarization": True,
        "wordCount": 1,
    }
    assert transcriber.calls[0] == {"mime_type": "audio/webm", "language_code": "hi-IN", "diarization": True}

    transcriber.fail = True
    failed = client.post("/api/mitra/transcribe", json={"audioBase64": "UklGRg=="})
    assert failed.status_code == 500
    assert failed.json() == {"error": "Transcription failed"}


def test_speak(client, synthesizer):
    assert client.post("/api/mitra/speak", json={"text": " "}).status_code == 400

    body = client.post("/api/mitra/speak", json={"text": "Breathe with me", "speakingRate": 1.1}).json()
    assert body == {
        "audioBase64": "SUQz",
        "mimeType": "audio/mpeg",
        "voice": {"languageCode": "en-IN", "name": "en-IN-Wavenet-D", "ssmlGender": "FEMALE"},
    }
    assert synthesizer.calls[0] == {"text": "Breathe with me", "language": "en", "speaking_rate": 1.1}

    synthesizer.fail = True
    assert client.post("/api/mitra/speak", json={"text": "hi"}).json() == {"error": "Speech synthesis failed"}


def test_digital_twin(client, provider):
    missing = client.get("/api/digital-twin")
    assert missing.status_code == 404
    assert missing.json() == {"error": "No digital twin data found."}

    assert client.post("/api/digital-twin", json={"mood": "calm"}).json() == {"success": True}
    client.post("/api/digital-twin", json={"mood": "tired"})
    twin = client.get("/api/digital-twin").json()
    assert twin["mood"] == "tired"
    assert [item["mood"] for item in twin["moodHistory"]] == ["calm", "tired"]

    provider.script("no json here")
    failed = client.post("/api/digital-twin/analyze").json()
    assert failed["aiInsights"] == {"summary": FAILED_SUMMARY, "moodTrends": [], "suggestions": []}

    insights = {"summary": "Steadier this week", "moodTrends": ["less tired"], "suggestions": ["keep walking"]}
    provider.script(json.dumps(insights))
    assert client.post("/api/digital-twin/analyze").json() == {"aiInsights": insights}
    assert "Current mood: tired" in provider.prompts[-1]
    assert client.get("/api/digital-twin").json()["aiInsights"] == insights


def test_validation_errors_render_as_400(client):
    response = client.post("/api/wellness/affirmations", json={"count": 20})
    assert response.status_code == 400
    assert response.json()["error"].startswith("count:")


def test_store_outage_renders_json_error(make_client, store, monkeypatch):
    async def offline(path, doc_id):
        raise StoreError(f"get {path}/{doc_id} failed: deadline exceeded")

    monkeypatch.setattr(store, "get", offline)
    response = make_client().get("/api/digital-twin")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
