"""Gemini ``generateContent`` provider over plain HTTPS."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .base import BaseProvider
from .types import GenerationOptions, LLMError, LLMResponse, Task

GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(BaseProvider):
    """Provider that posts single-turn prompts to the Gemini REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Gemini API key is required")

        super().__init__(name="gemini")
        self._api_key = api_key
        self._base_url = (base_url or GEMINI_DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self._client = client
        self._logger = logging.getLogger(__name__)

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        options: GenerationOptions,
        task: Task = Task.CHAT,
    ) -> LLMResponse:
        generation_config: dict[str, Any] = {
            "temperature": options.temperature,
            "maxOutputTokens": options.max_tokens,
        }
        if options.response_mime_type:
            generation_config["responseMimeType"] = options.response_mime_type

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        response_json = await self._post(f"/models/{model}:generateContent", payload)

        text = self._join_candidate_text(response_json)
        if not text:
            block = (response_json.get("promptFeedback") or {}).get("blockReason")
            raise LLMError(f"Gemini returned no text (blockReason={block})")

        candidates = response_json.get("candidates") or [{}]
        usage = response_json.get("usageMetadata") or {}
        return LLMResponse(
            model=response_json.get("modelVersion") or model,
            task=task,
            text=text,
            finish_reason=candidates[0].get("finishReason"),
            usage={
                "prompt_tokens": usage.get("promptTokenCount"),
                "completion_tokens": usage.get("candidatesTokenCount"),
                "total_tokens": usage.get("totalTokenCount"),
            },
            provider=self.name,
            raw=response_json,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _post(self, path: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        client = self._client or httpx.AsyncClient(timeout=self._timeout)
        try:
            try:
                response = await client.post(
                    url,
                    params={"key": self._api_key},
                    headers={"Content-Type": "application/json"},
                    json=payload,
                )
            except httpx.RequestError as exc:
                raise LLMError(f"Gemini network error: {exc}") from exc
        finally:
            if self._client is None:
                await client.aclose()

        if not response.is_success:
            raise LLMError(f"Gemini {response.status_code} on {path}. Body: {response.text[:400]}")
        try:
            body = response.json()
        except ValueError as exc:
            raise LLMError(f"Gemini returned non-JSON on {path}. Body: {response.text[:400]}") from exc
        if not isinstance(body, dict):
            raise LLMError(f"Gemini returned unexpected payload type {type(body).__name__}")
        return body

    @staticmethod
    def _join_candidate_text(response_json: Mapping[str, Any]) -> str:
        parts: list[str] = []
        for candidate in response_json.get("candidates") or []:
            content = (candidate or {}).get("content") or {}
            for part in content.get("parts") or []:
                text = (part or {}).get("text")
                if isinstance(text, str) and text:
                    parts.append(text)
        return "\n".join(parts).strip()


__all__ = ["GEMINI_DEFAULT_BASE_URL", "GeminiProvider"]
