from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.practice import coach, progress

router = APIRouter(prefix="/api/practice", tags=["practice"])


class SimulateIn(BaseModel):
    scenario: Optional[str] = None
    userInput: Optional[str] = None
    history: List[Dict[str, Any]] = Field(default_factory=list)


class ProgressIn(BaseModel):
    scenario: Optional[str] = None
    xpEarned: int = Field(default=0, ge=0, le=500)
    skillsImproved: List[str] = Field(default_factory=list)
    scores: Dict[str, float] = Field(default_factory=dict)


def _require_scenario(payload: SimulateIn) -> tuple[str, str]:
    if not payload.scenario or not (payload.userInput or "").strip():
        raise HTTPException(status_code=400, detail="Missing scenario or userInput")
    return payload.scenario, payload.userInput.strip()


@router.get("")
async def catalogue(user: AuthUser = Depends(get_current_user)) -> Dict[str, Any]:
    return coach.catalogue()


@router.post("/simulate")
async def simulate(
    payload: SimulateIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, str]:
    scenario, text = _require_scenario(payload)
    return await coach.simulate(services.llm, scenario=scenario, user_input=text, history=payload.history)


@router.post("/feedback-enhanced")
async def feedback_enhanced(
    payload: SimulateIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    scenario, text = _require_scenario(payload)
    return await coach.detailed_feedback(services.llm, scenario=scenario, user_input=text)


@router.get("/progress")
async def get_progress(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await progress.get_progress(services.store, user.uid)


@router.post("/progress")
async def save_progress(
    payload: ProgressIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    result = await progress.record_practice(
        services.store,
        user.uid,
        scenario=payload.scenario,
        xp_earned=payload.xpEarned,
        skills_improved=payload.skillsImproved,
        scores=payload.scores,
    )
    return {"success": True, **result}


__all__ = ["router"]
