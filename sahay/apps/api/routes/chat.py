from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.conversation.responder import chat_with_gemini

router = APIRouter(prefix="/api/chat", tags=["chat"])


class MessageIn(BaseModel):
    message: Optional[str] = None
    mode: str = "listener"
    language: str = "en"
    history: List[Dict[str, Any]] = Field(default_factory=list)


@router.post("/message")
async def message(
    payload: MessageIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not payload.message or not payload.message.strip():
        raise HTTPException(status_code=400, detail="Missing message")
    return await chat_with_gemini(
        services.llm,
        payload.message.strip(),
        mode=payload.mode,
        language=payload.language,
        history=payload.history,
    )


__all__ = ["router"]
