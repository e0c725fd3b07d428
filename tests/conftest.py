from __future__ import annotations

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from sahay.apps.api.core.firebase import IdentityError
from sahay.apps.api.main import create_app
from sahay.libs.ingest import SpeechError, SynthesizedSpeech, Transcription
from sahay.libs.llm_router import BaseProvider, LLMError, LLMResponse, LLMRouter, Task
from sahay.libs.schemas.settings import AppSettings
from sahay.libs.store import MemoryStore


class FakeProvider(BaseProvider):
    """Replays scripted replies; ``None`` or an exception in the script simulates a failure."""

    def __init__(self, replies: List[Any] | None = None, default: Any = "I hear you.") -> None:
        super().__init__(name="fake")
        self.replies = list(replies or [])
        self.default = default
        self.calls: List[Dict[str, Any]] = []

    def script(self, *replies: Any) -> None:
        self.replies.extend(replies)

    @property
    def prompts(self) -> List[str]:
        return [call["prompt"] for call in self.calls]

    async def generate(self, prompt, *, model, options, task=Task.CHAT):
        self.calls.append({"prompt": prompt, "model": model, "options": options, "task": task})
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            raise LLMError("scripted failure")
        return LLMResponse(model=model, task=task, text=reply, provider=self.name)


class FakeIdentity:
    def __init__(self) -> None:
        self.tokens: Dict[str, Dict[str, Any]] = {
            "good-token": {"uid": "user-1", "email": "asha@example.com"},
        }
        self.users: Dict[str, str] = {}

    async def verify_token(self, token: str) -> Dict[str, Any]:
        if token not in self.tokens:
            raise IdentityError("token expired")
        return dict(self.tokens[token])

    async def create_user(self, email: str, password: str) -> str:
        if email in self.users:
            raise IdentityError("EMAIL_EXISTS")
        uid = f"uid-{len(self.users) + 1}"
        self.users[email] = uid
        return uid


class FakeTranscriber:
    def __init__(self) -> None:
        self.fail = False
        self.calls: List[Dict[str, Any]] = []

    async def transcribe(self, audio_base64, *, mime_type, language_code, diarization=False):
        self.calls.append({"mime_type": mime_type, "language_code": language_code, "diarization": diarization})
        if self.fail:
            raise SpeechError("recognizer offline")
        return Transcription(
            transcript="hello mitra",
            confidence=0.92,
            language_code=language_code,
            words=[{"word": "hello", "startTime": 0.0, "endTime": 0.4, "speakerTag": None}],
        )


class FakeSynthesizer:
    def __init__(self) -> None:
        self.fail = False
        self.calls: List[Dict[str, Any]] = []

    async def synthesize(self, text, *, language="en", **options):
        self.calls.append({"text": text, "language": language, **options})
        if self.fail:
            raise SpeechError("voice offline")
        return SynthesizedSpeech(
            audio_base64="SUQz",
            mime_type="audio/mpeg",
            voice={"languageCode": "en-IN", "name": "en-IN-Wavenet-D", "ssmlGender": "FEMALE"},
        )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def llm(provider: FakeProvider) -> LLMRouter:
    router = LLMRouter()
    router.register_provider("fake", provider)
    router.set_policy(Task.CHAT, "fake", "fake-chat")
    router.set_policy(Task.ANALYSIS, "fake", "fake-analysis")
    return router


@pytest.fixture
def identity() -> FakeIdentity:
    return FakeIdentity()


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


def make_settings(**overrides: Any) -> AppSettings:
    values: Dict[str, Any] = {
        "environment": "test",
        "store_backend": "memory",
        "dev_bypass_auth": True,
        "gemini_api_key": None,
        "log_format": "text",
    }
    values.update(overrides)
    return AppSettings(**values)


@pytest.fixture
def make_client(store, llm, identity, transcriber, synthesizer):
    def _make(**overrides: Any) -> TestClient:
        app = create_app(
            make_settings(**overrides),
            store=store,
            llm=llm,
            identity=identity,
            transcriber=transcriber,
            synthesizer=synthesizer,
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
