from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.soundscape import analysis, dhwani, strategies
from sahay.libs.llm_router import LLMError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/soundscape", tags=["soundscape"])
dhwani_router = APIRouter(prefix="/api/dhwani", tags=["dhwani"])


class MeditationIn(BaseModel):
    theme: Optional[str] = None
    duration: int = Field(default=5, ge=1, le=60)
    mood: Optional[str] = None
    background: Optional[str] = None


class AmbientIn(BaseModel):
    environment: str = "forest"
    mood: Optional[str] = None
    duration: int = Field(default=10, ge=1, le=120)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/recommend")
async def recommend(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    data = await analysis.collect_user_data(services.store, user.uid)
    if not analysis.has_signal(data):
        return {
            "recommendations": strategies.default_recommendations(),
            "analysis": {
                "summary": analysis.WELCOME_SUMMARY,
                "moodState": "neutral",
                "confidence": 0.5,
                "dataFound": {key: len(value) for key, value in data.items()},
            },
            "timestamp": _now(),
        }

    result = await analysis.analyze(services.llm, data)
    strategy = services.settings.sound_strategy
    return {
        "recommendations": strategies.recommend(result, strategy),
        "analysis": result,
        "strategy": strategy,
        "timestamp": _now(),
    }


@dhwani_router.post("/generate")
async def generate_meditation(
    payload: MeditationIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not payload.theme or not payload.theme.strip():
        raise HTTPException(status_code=400, detail="Theme is required")
    try:
        script = await dhwani.meditation_script(
            services.llm,
            theme=payload.theme.strip(),
            duration=payload.duration,
            mood=payload.mood,
            background=payload.background,
        )
    except LLMError as exc:
        LOGGER.error("[dhwani] script generation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to generate meditation script") from exc
    return {"script": script, "theme": payload.theme, "duration": payload.duration, "generatedAt": _now()}


@dhwani_router.post("/soundscape")
async def generate_soundscape(
    payload: AmbientIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    try:
        text = await dhwani.ambient_soundscape(
            services.llm, environment=payload.environment, duration=payload.duration, mood=payload.mood
        )
    except LLMError as exc:
        LOGGER.error("[dhwani] soundscape generation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to generate soundscape") from exc
    return {
        "soundscape": text,
        "environment": payload.environment,
        "mood": payload.mood,
        "duration": payload.duration,
        "generatedAt": _now(),
    }


__all__ = ["dhwani_router", "router"]
