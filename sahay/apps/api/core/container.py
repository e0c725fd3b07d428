"""Explicit service container handed to request handlers via ``app.state``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import Request

from sahay.libs.ingest import SpeechTranscriber, VoiceSynthesizer
from sahay.libs.llm_router import GeminiProvider, LLMRouter, Task
from sahay.libs.schemas.settings import AppSettings
from sahay.libs.store import DocumentStore, MemoryStore

LOGGER = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    async def verify_token(self, token: str) -> dict[str, Any]: ...

    async def create_user(self, email: str, password: str) -> str: ...


@dataclass
class Services:
    settings: AppSettings
    store: DocumentStore
    llm: LLMRouter
    identity: IdentityProvider
    transcriber: SpeechTranscriber
    synthesizer: VoiceSynthesizer

    async def aclose(self) -> None:
        await self.llm.aclose()


def build_llm_router(settings: AppSettings) -> LLMRouter:
    router = LLMRouter()
    if not settings.gemini_api_key:
        LOGGER.warning("[container] GEMINI_API_KEY not set; AI features will use fallbacks")
        return router
    router.register_provider(
        "gemini",
        GeminiProvider(
            settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            timeout=settings.llm_timeout,
        ),
    )
    router.set_policy(Task.CHAT, "gemini", settings.model_chat)
    router.set_policy(Task.ANALYSIS, "gemini", settings.model_analysis)
    return router


def build_store(settings: AppSettings) -> DocumentStore:
    if settings.store_backend == "memory":
        LOGGER.info("[container] Using in-memory document store")
        return MemoryStore()
    from sahay.libs.store.firestore import FirestoreStore

    from .firebase import init_firebase_app

    return FirestoreStore(init_firebase_app(settings))


def build_identity(settings: AppSettings) -> IdentityProvider:
    from .firebase import FirebaseIdentity, init_firebase_app

    if settings.store_backend == "memory" and settings.dev_bypass_auth:
        # Token verification never runs in this mode; skip credential lookup.
        return FirebaseIdentity()
    return FirebaseIdentity(init_firebase_app(settings))


def build_services(
    settings: AppSettings,
    *,
    store: DocumentStore | None = None,
    llm: LLMRouter | None = None,
    identity: IdentityProvider | None = None,
    transcriber: SpeechTranscriber | None = None,
    synthesizer: VoiceSynthesizer | None = None,
) -> Services:
    return Services(
        settings=settings,
        store=store if store is not None else build_store(settings),
        llm=llm if llm is not None else build_llm_router(settings),
        identity=identity if identity is not None else build_identity(settings),
        transcriber=transcriber or SpeechTranscriber(),
        synthesizer=synthesizer or VoiceSynthesizer(),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


__all__ = [
    "IdentityProvider",
    "Services",
    "build_identity",
    "build_llm_router",
    "build_services",
    "build_store",
    "get_services",
]
