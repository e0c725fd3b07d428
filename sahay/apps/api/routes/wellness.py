from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.wellness import affirmations, sessions

router = APIRouter(prefix="/api/wellness", tags=["wellness"])


class NarrationIn(BaseModel):
    pattern: str = "box"
    inhale: int = Field(default=4, ge=1, le=30)
    hold: int = Field(default=4, ge=0, le=30)
    exhale: int = Field(default=4, ge=1, le=30)


class BreathingIn(BaseModel):
    pattern: str = "box"
    cycles: int = Field(default=0, ge=0)
    duration: int = Field(default=0, ge=0)
    timestamp: Optional[Any] = None


class AffirmationsIn(BaseModel):
    mood: str = "motivation"
    count: int = Field(default=5, ge=1, le=10)
    personalized: bool = True


class SaveAffirmationIn(BaseModel):
    affirmationId: Optional[str] = None
    text: Optional[str] = None
    mood: Optional[str] = None


class GenerateSessionIn(BaseModel):
    sessionType: Optional[str] = None
    duration: Optional[int] = None


class CompleteSessionIn(BaseModel):
    sessionType: str = "calm-2min"
    duration: int = Field(default=0, ge=0)
    xpEarned: int = Field(default=0, ge=0, le=500)
    completedAt: Optional[Any] = None


@router.post("/narration")
async def narration(
    payload: NarrationIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, str]:
    text = await sessions.breathing_narration(
        services.llm,
        pattern=payload.pattern,
        inhale=payload.inhale,
        hold=payload.hold,
        exhale=payload.exhale,
    )
    return {"narration": text.strip()}


@router.post("/breathing-session")
async def breathing_session(
    payload: BreathingIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    session_id = await sessions.record_breathing(
        services.store,
        user.uid,
        pattern=payload.pattern,
        cycles=payload.cycles,
        duration=payload.duration,
        timestamp=payload.timestamp,
    )
    return {"success": True, "sessionId": session_id}


@router.get("/daily-affirmation")
async def daily_affirmation(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return {"affirmation": await affirmations.daily_affirmation(services.llm, services.store, user.uid)}


@router.post("/affirmations")
async def mood_affirmations(
    payload: AffirmationsIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, List[Dict[str, Any]]]:
    items = await affirmations.mood_affirmations(
        services.llm,
        services.store,
        user.uid,
        mood=payload.mood,
        count=payload.count,
        personalized=payload.personalized,
    )
    return {"affirmations": items}


@router.post("/save-affirmation")
async def save_affirmation(
    payload: SaveAffirmationIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, bool]:
    if not payload.affirmationId or not payload.text:
        raise HTTPException(status_code=400, detail="affirmationId and text are required")
    await affirmations.save_affirmation(
        services.store,
        user.uid,
        affirmation_id=payload.affirmationId,
        text=payload.text,
        mood=payload.mood,
    )
    return {"success": True}


@router.get("/saved-affirmations")
async def saved_affirmations(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, List[str]]:
    return {"saved": await affirmations.saved_affirmation_ids(services.store, user.uid)}


@router.post("/generate-session")
async def generate_session(
    payload: GenerateSessionIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return {"steps": await sessions.session_steps(services.llm, payload.sessionType)}


@router.post("/complete-session")
async def complete_session(
    payload: CompleteSessionIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await sessions.complete_session(
        services.store,
        user.uid,
        session_type=payload.sessionType,
        duration=payload.duration,
        xp_earned=payload.xpEarned,
        completed_at=payload.completedAt,
    )


@router.get("/progress")
async def progress(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await sessions.wellness_progress(services.store, user.uid)


__all__ = ["router"]
