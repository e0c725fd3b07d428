from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.health import insights, metrics

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])


class HealthEntryIn(BaseModel):
    date: Optional[str] = None
    sleep: Optional[float] = None
    sleepQuality: Optional[int] = None
    steps: Optional[int] = None
    heartRate: Optional[float] = None
    stressLevel: Optional[int] = None
    mood: Optional[Any] = None
    waterIntake: Optional[float] = None
    screenTime: Optional[float] = None
    activityLevel: Optional[str] = None
    nutrition: Optional[List[Dict[str, Any]]] = None
    notes: Optional[str] = None
    timestamp: Optional[Any] = None


class InsightsIn(BaseModel):
    days: int = Field(default=7, ge=1, le=90)


class NutritionIn(BaseModel):
    mealType: str = "snack"
    activityLevel: Optional[str] = None
    studyIntensity: Optional[str] = None


class HealthChatIn(BaseModel):
    message: Optional[str] = None


@router.post("")
async def record(
    payload: HealthEntryIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if payload.stressLevel is not None and not 1 <= payload.stressLevel <= 10:
        raise HTTPException(status_code=400, detail="stressLevel must be between 1 and 10")
    try:
        day = await metrics.record_day(services.store, user.uid, payload.model_dump(exclude_none=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="date must be formatted as YYYY-MM-DD") from exc
    return {"success": True, "date": day, "streak": await metrics.streak(services.store, user.uid)}


@router.get("")
async def latest(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    snapshot = await metrics.latest(services.store, user.uid)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No health data found")
    return snapshot


@router.get("/history")
async def history(
    days: int = Query(7, ge=1, le=365),
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    entries = await metrics.history(services.store, user.uid, days=days)
    return {"entries": entries, "days": days}


@router.get("/streak")
async def streak(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, int]:
    return {"streak": await metrics.streak(services.store, user.uid)}


@router.post("/insights")
async def health_insights(
    payload: Optional[InsightsIn] = None,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    days = payload.days if payload else 7
    entries = await metrics.history(services.store, user.uid, days=days)
    return await insights.build_insights(services.llm, metrics.averages(entries))


@router.post("/nutrition")
async def nutrition(
    payload: NutritionIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    return await insights.suggest_meals(
        services.llm,
        meal_type=payload.mealType,
        activity_level=payload.activityLevel,
        study_intensity=payload.studyIntensity,
    )


@router.post("/chat")
async def chat(
    payload: HealthChatIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, str]:
    if not payload.message or not payload.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    snapshot = await metrics.latest(services.store, user.uid)
    return {"response": await insights.health_chat(services.llm, payload.message.strip(), snapshot)}


nudge_router = APIRouter(prefix="/api/nudge", tags=["nudge"])


@nudge_router.get("/predict")
async def predict(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, str]:
    return {"nudge": metrics.pick_nudge(await metrics.latest(services.store, user.uid))}


__all__ = ["nudge_router", "router"]
