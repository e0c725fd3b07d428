import json
from typing import Dict, List

import httpx
import pytest
from pydantic import BaseModel

from sahay.apps.api.core.llm import generate_structured, generate_text
from sahay.libs.llm_router import (
    Fallback,
    GeminiProvider,
    GenerationOptions,
    LLMError,
    LLMRouter,
    Ok,
    Task,
    parse_or_default,
)


def _gemini(handler) -> GeminiProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiProvider("test-key", base_url="https://gemini.test/v1beta", client=client)


@pytest.mark.asyncio
async def test_gemini_joins_candidate_parts():
    seen: Dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "candidates": [
                    {"content": {"parts": [{"text": "Hello"}, {"text": "there "}]}, "finishReason": "STOP"}
                ],
                "usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 2, "totalTokenCount": 6},
            },
        )

    provider = _gemini(handler)
    response = await provider.generate(
        "hi",
        model="gemini-2.5-flash",
        options=GenerationOptions(temperature=0.2, max_tokens=50, response_mime_type="application/json"),
    )

    assert response.text == "Hello\nthere"
    assert response.finish_reason == "STOP"
    assert response.usage["total_tokens"] == 6
    assert seen["path"] == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert seen["key"] == "test-key"
    config = seen["body"]["generationConfig"]
    assert config == {"temperature": 0.2, "maxOutputTokens": 50, "responseMimeType": "application/json"}
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "hi"


@pytest.mark.asyncio
async def test_gemini_http_error_raises():
    provider = _gemini(lambda request: httpx.Response(503, text="overloaded"))
    with pytest.raises(LLMError, match="503"):
        await provider.generate("hi", model="m", options=GenerationOptions())


@pytest.mark.asyncio
async def test_gemini_empty_text_raises():
    provider = _gemini(
        lambda request: httpx.Response(200, json={"candidates": [], "promptFeedback": {"blockReason": "SAFETY"}})
    )
    with pytest.raises(LLMError, match="SAFETY"):
        await provider.generate("hi", model="m", options=GenerationOptions())


@pytest.mark.asyncio
async def test_gemini_non_json_raises():
    provider = _gemini(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(LLMError, match="non-JSON"):
        await provider.generate("hi", model="m", options=GenerationOptions())


def test_gemini_requires_key():
    with pytest.raises(ValueError):
        GeminiProvider("")


@pytest.mark.asyncio
async def test_router_without_policy_raises():
    router = LLMRouter()
    assert router.configured is False
    with pytest.raises(LLMError):
        await router.generate("hello")


@pytest.mark.asyncio
async def test_router_analysis_falls_back_to_chat_route(fake_provider):
    provider = fake_provider(["ok"])
    router = LLMRouter()
    router.register_provider("fake", provider)
    router.set_policy(Task.CHAT, "fake", "chat-model")

    response = await router.generate("hello", task=Task.ANALYSIS)

    assert response.text == "ok"
    assert provider.calls[0]["model"] == "chat-model"
    assert response.provider == "fake"


@pytest.mark.asyncio
async def test_router_wraps_unexpected_provider_errors(fake_provider):
    router = LLMRouter()
    router.register_provider("fake", fake_provider([RuntimeError("socket closed")]))
    router.set_policy(Task.CHAT, "fake", "m")
    with pytest.raises(LLMError, match="socket closed"):
        await router.generate("hello")


class Mood(BaseModel):
    label: str
    score: float = 0.5


def test_parse_or_default_strips_fences_and_trailing_commas():
    result = parse_or_default('```json\n{"label": "calm", "score": 0.9,}\n```', Mood, None)
    assert isinstance(result, Ok)
    assert result.value.label == "calm"


def test_parse_or_default_finds_json_inside_prose():
    result = parse_or_default('Sure! Here you go: ["a", "b"] Hope that helps.', List[str], list)
    assert isinstance(result, Ok)
    assert result.value == ["a", "b"]


def test_parse_or_default_returns_default_on_garbage():
    result = parse_or_default("not json at all", Mood, None)
    assert isinstance(result, Fallback)
    assert result.value is None
    assert "invalid JSON" in result.reason


def test_parse_or_default_schema_mismatch_calls_factory():
    result = parse_or_default('{"score": "high"}', Mood, dict)
    assert isinstance(result, Fallback)
    assert result.value == {}
    assert "schema mismatch" in result.reason


def test_parse_or_default_accepts_list_of_models():
    result = parse_or_default('[{"label": "calm"}, {"label": "tense", "score": 0.1}]', List[Mood], list)
    assert isinstance(result, Ok)
    assert [item.label for item in result.value] == ["calm", "tense"]


@pytest.mark.asyncio
async def test_generate_structured_never_raises(llm, provider):
    provider.script(None)
    result = await generate_structured(llm, "prompt", Mood, None)
    assert isinstance(result, Fallback)
    assert result.reason.startswith("generation failed")


@pytest.mark.asyncio
async def test_generate_structured_requests_json(llm, provider):
    provider.script('{"label": "hopeful"}')
    result = await generate_structured(llm, "prompt", Mood, None)
    assert isinstance(result, Ok)
    assert provider.calls[0]["options"].response_mime_type == "application/json"
    assert provider.calls[0]["task"] is Task.ANALYSIS


@pytest.mark.asyncio
async def test_generate_text_propagates_errors(llm, provider):
    provider.script(None)
    with pytest.raises(LLMError):
        await generate_text(llm, "prompt")
