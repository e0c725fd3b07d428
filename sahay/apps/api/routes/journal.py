from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.journaling import entries
from sahay.apps.api.services.journaling.analysis import (
    analyze_entry,
    generate_insights,
    reflection_prompts,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/journal", tags=["journal"])


class SaveEntryIn(BaseModel):
    content: Optional[str] = None
    title: Optional[str] = None
    mood: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    encrypted: bool = False


class UpdateEntryIn(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    mood: Optional[str] = None
    tags: Optional[List[str]] = None


class AnalyzeIn(BaseModel):
    entry: Optional[str] = None


class SessionIn(BaseModel):
    id: Optional[str] = None
    type: Optional[str] = None
    prompts: List[str] = Field(default_factory=list)
    responses: Optional[List[str]] = None
    insights: List[str] = Field(default_factory=list)
    emotionalState: Optional[Dict[str, Any]] = None
    createdAt: Optional[str] = None
    completedAt: Optional[str] = None


class InsightsIn(BaseModel):
    type: str = "daily"
    responses: Optional[List[str]] = None
    emotionalState: Dict[str, Any] = Field(default_factory=dict)


class PromptsIn(BaseModel):
    type: Optional[str] = None


class MoodIn(BaseModel):
    mood: Optional[int] = None
    note: Optional[str] = None
    emotions: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)


@router.post("/save")
async def save_entry(
    payload: SaveEntryIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    content = (payload.content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail="Content is required and must be a non-empty string")

    analysis = await analyze_entry(services.llm, content)
    entry_id = await entries.save_entry(
        services.store,
        user.uid,
        content=content,
        analysis=analysis,
        title=payload.title,
        mood=payload.mood,
        tags=payload.tags,
        encrypted=payload.encrypted,
    )
    return {
        "success": True,
        "id": entry_id,
        "sentiment": analysis["sentiment"],
        "message": "Journal entry saved successfully",
    }


@router.get("/entries")
async def list_entries(
    limit: int = Query(50, ge=1, le=200),
    mood: Optional[str] = None,
    tags: Optional[str] = Query(None, description="comma separated"),
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    items = await entries.list_entries(
        services.store,
        user.uid,
        limit=limit,
        mood=mood,
        tags=[tag.strip() for tag in (tags or "").split(",") if tag.strip()],
        start_date=startDate,
        end_date=endDate,
    )
    return {"entries": items, "count": len(items)}


@router.put("/entries/{entry_id}")
async def update_entry(
    entry_id: str,
    payload: UpdateEntryIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    changes = payload.model_dump(exclude_none=True)
    if "content" in changes and not changes["content"].strip():
        raise HTTPException(status_code=400, detail="Content is required and must be a non-empty string")
    try:
        updated = await entries.update_entry(services.store, user.uid, entry_id, changes)
    except entries.EntryNotFound as exc:
        raise HTTPException(status_code=404, detail="Journal entry not found or unauthorized") from exc
    return {"success": True, "id": entry_id, "updated": updated}


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: str,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    try:
        await entries.delete_entry(services.store, user.uid, entry_id)
    except entries.EntryNotFound as exc:
        raise HTTPException(status_code=404, detail="Journal entry not found or unauthorized") from exc
    return {"success": True}


@router.post("/analyze")
async def analyze(
    payload: AnalyzeIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    text = (payload.entry or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Entry is required and must be a non-empty string")
    return await analyze_entry(services.llm, text)


@router.post("/sessions")
async def save_session(
    payload: SessionIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not payload.id or not payload.type or payload.responses is None:
        raise HTTPException(status_code=400, detail="Missing required fields")
    session_id = await entries.save_session(services.store, user.uid, payload.model_dump())
    return {"success": True, "sessionId": session_id}


@router.get("/sessions")
async def list_sessions(
    limit: int = Query(50, ge=1, le=200),
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return {"sessions": await entries.list_sessions(services.store, user.uid, limit=limit)}


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    try:
        await entries.delete_session(services.store, user.uid, session_id)
    except entries.EntryNotFound as exc:
        raise HTTPException(status_code=404, detail="Session not found") from exc
    except entries.NotOwner as exc:
        raise HTTPException(status_code=403, detail="Unauthorized") from exc
    return {"success": True}


@router.post("/insights")
async def insights(
    payload: InsightsIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    responses = [r for r in payload.responses or [] if str(r).strip()]
    if not responses:
        raise HTTPException(status_code=400, detail="Missing or invalid responses")
    return await generate_insights(
        services.llm, kind=payload.type, responses=responses, emotional_state=payload.emotionalState
    )


@router.post("/reflection-prompts")
async def prompts(payload: PromptsIn, user: AuthUser = Depends(get_current_user)) -> Dict[str, Any]:
    return {"type": payload.type or "daily", "prompts": reflection_prompts(payload.type)}


@router.get("/context")
async def context(
    limit: int = Query(10, ge=1, le=50),
    days: int = Query(30, ge=1, le=365),
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await entries.journal_context(services.store, user.uid, limit=limit, days=days)


@router.post("/mood")
async def log_mood(
    payload: MoodIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if payload.mood is None or not 1 <= payload.mood <= 10:
        raise HTTPException(status_code=400, detail="Mood must be an integer between 1 and 10")
    mood_id = await entries.log_mood(
        services.store,
        user.uid,
        mood=payload.mood,
        note=payload.note,
        emotions=payload.emotions,
        triggers=payload.triggers,
    )
    return {"success": True, "id": mood_id}


@router.get("/mood")
async def list_moods(
    limit: int = Query(30, ge=1, le=200),
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await entries.list_moods(services.store, user.uid, limit=limit)


__all__ = ["router"]
