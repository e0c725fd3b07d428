"""Mitra companion: conversation turns, simple chat, speech in and out."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.conversation.orchestrator import run_conversation_turn
from sahay.apps.api.services.conversation.prompt_config import list_languages
from sahay.apps.api.services.conversation.responder import chat_with_gemini
from sahay.apps.api.services.journaling.entries import journal_context
from sahay.libs.ingest import SpeechError
from sahay.libs.store import StoreError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mitra", tags=["mitra"])


class ConversationIn(BaseModel):
    message: Optional[str] = None
    mode: str = "listener"
    language: str = "en"
    history: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    includeJournalContext: bool = False


class ChatIn(BaseModel):
    message: Optional[str] = None
    mode: str = "listener"
    language: str = "en"
    history: List[Dict[str, Any]] = Field(default_factory=list)
    emotionalIntensity: float = 0
    includeJournalContext: bool = False


class TranscribeIn(BaseModel):
    audioBase64: Optional[str] = None
    mimeType: str = "audio/webm"
    language: str = "en-US"
    enableSpeakerDiarization: bool = False


class SpeakIn(BaseModel):
    text: Optional[str] = None
    language: str = "en"
    speakingRate: Optional[float] = None
    pitch: Optional[float] = None


async def _journal_note(services: Services, user_id: str, label: str) -> str | None:
    try:
        context = await journal_context(services.store, user_id, limit=5, days=14)
    except StoreError as exc:
        LOGGER.warning("[mitra] journal context unavailable for %s: %s", user_id, exc)
        return None
    return f"[{label}: {context['contextText']}\n{context['moodPattern']}]"


def intensity_note(intensity: float) -> str | None:
    if intensity > 5:
        return (
            f"[User is experiencing high emotional intensity ({intensity:g}/10). "
            "Respond with extra compassion and care.]"
        )
    if intensity > 2:
        return (
            f"[User is experiencing moderate emotional intensity ({intensity:g}/10). "
            "Be attentive to their needs.]"
        )
    return None


@router.get("/languages")
async def languages(user: AuthUser = Depends(get_current_user)) -> Dict[str, Any]:
    return {"languages": list_languages()}


@router.post("/conversation")
async def conversation(
    payload: ConversationIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    message = (payload.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required.")

    note = None
    if payload.includeJournalContext:
        note = await _journal_note(services, user.uid, "JOURNAL CONTEXT")

    return await run_conversation_turn(
        router=services.llm,
        store=services.store,
        message=message,
        user_id=user.uid,
        history=payload.history,
        mode=payload.mode,
        language=payload.language,
        metadata=payload.metadata,
        context_note=note,
        memory_enabled=services.settings.enable_memory,
    )


@router.post("/chat")
async def chat(
    payload: ChatIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    message = (payload.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required.")

    parts = []
    if payload.includeJournalContext:
        journal = await _journal_note(services, user.uid, "CONTEXT")
        if journal:
            parts.append(journal)
    note = intensity_note(payload.emotionalIntensity)
    parts.append(f"{note} {message}" if note else message)

    reply = await chat_with_gemini(
        services.llm,
        "\n\n".join(parts),
        mode=payload.mode,
        language=payload.language,
        history=payload.history,
    )
    return {"aiResponse": reply, "emotionalIntensity": payload.emotionalIntensity}


@router.post("/transcribe")
async def transcribe(
    payload: TranscribeIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not payload.audioBase64 or not payload.audioBase64.strip():
        raise HTTPException(status_code=400, detail="audioBase64 payload is required.")
    try:
        result = await services.transcriber.transcribe(
            payload.audioBase64,
            mime_type=payload.mimeType,
            language_code=payload.language,
            diarization=payload.enableSpeakerDiarization,
        )
    except SpeechError as exc:
        LOGGER.error("[mitra] transcription failed for %s: %s", user.uid, exc)
        raise HTTPException(status_code=500, detail="Transcription failed") from exc

    return {
        "transcript": result.transcript,
        "confidence": result.confidence,
        "languageCode": result.language_code,
        "words": result.words,
        "meta": {
            "userId": user.uid,
            "mimeType": payload.mimeType,
            "enableSpeakerDiarization": payload.enableSpeakerDiarization,
            "wordCount": len(result.words),
        },
    }


@router.post("/speak")
async def speak(
    payload: SpeakIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not payload.text or not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text is required for speech synthesis.")

    options: Dict[str, float] = {}
    if payload.speakingRate is not None:
        options["speaking_rate"] = payload.speakingRate
    if payload.pitch is not None:
        options["pitch"] = payload.pitch
    try:
        speech = await services.synthesizer.synthesize(payload.text, language=payload.language, **options)
    except SpeechError as exc:
        LOGGER.error("[mitra] speech synthesis failed for %s: %s", user.uid, exc)
        raise HTTPException(status_code=500, detail="Speech synthesis failed") from exc

    return {"audioBase64": speech.audio_base64, "mimeType": speech.mime_type, "voice": speech.voice}


__all__ = ["intensity_note", "router"]
