"""Digital twin: a per-user mood state with AI-written insights."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.core.llm import generate_structured
from sahay.apps.api.deps.auth import AuthUser, get_current_user
from sahay.apps.api.services.health import metrics
from sahay.apps.api.services.journaling.entries import JOURNALS
from sahay.libs.llm_router import Ok
from sahay.libs.store import utcnow_iso

LOGGER = logging.getLogger(__name__)

COLLECTION = "digitalTwins"
FAILED_SUMMARY = "AI analysis failed. Please try again later."

router = APIRouter(prefix="/api/digital-twin", tags=["digital-twin"])


class TwinIn(BaseModel):
    mood: Optional[str] = None
    aiInsights: Optional[Dict[str, Any]] = None


class TwinInsights(BaseModel):
    summary: str = ""
    moodTrends: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


def _failed_insights() -> Dict[str, Any]:
    return {"summary": FAILED_SUMMARY, "moodTrends": [], "suggestions": []}


@router.get("")
async def get_twin(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    doc = await services.store.get(COLLECTION, user.uid)
    if doc is None:
        raise HTTPException(status_code=404, detail="No digital twin data found.")
    return doc.data


@router.post("")
async def update_twin(
    payload: TwinIn,
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, bool]:
    doc = await services.store.get(COLLECTION, user.uid)
    current = doc.data if doc else {}
    history = list(current.get("moodHistory") or [])
    if payload.mood:
        history.append({"mood": payload.mood, "timestamp": utcnow_iso()})
    await services.store.set(
        COLLECTION,
        user.uid,
        {
            "mood": payload.mood or current.get("mood"),
            "moodHistory": history,
            "aiInsights": payload.aiInsights or current.get("aiInsights") or {},
            "updatedAt": utcnow_iso(),
        },
        merge=True,
    )
    return {"success": True}


@router.post("/analyze")
async def analyze(
    user: AuthUser = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    journals = await services.store.query(
        JOURNALS, where=[("userId", "==", user.uid)], order_by="createdAt", limit=10
    )
    health = await metrics.latest(services.store, user.uid) or {}
    twin = await services.store.get(COLLECTION, user.uid)
    mood = twin.data.get("mood") if twin else None

    journal_text = "\n".join(str(doc.data.get("content") or "") for doc in journals)
    prompt = f"""Analyze the following user data and return a JSON object with:
- summary: a short, compassionate summary of the user's current wellbeing
- moodTrends: a list of short observations about mood over time
- suggestions: a list of gentle, actionable suggestions

Journal entries:
{journal_text or "None"}

Health data:
{json.dumps(health, default=str)}

Current mood: {mood or "unknown"}

Return ONLY the JSON object."""

    result = await generate_structured(services.llm, prompt, TwinInsights, None)
    if isinstance(result, Ok):
        insights = result.value.model_dump()
    else:
        LOGGER.warning("[digital-twin] analysis fell back for %s: %s", user.uid, result.reason)
        insights = _failed_insights()

    await services.store.set(
        COLLECTION, user.uid, {"aiInsights": insights, "updatedAt": utcnow_iso()}, merge=True
    )
    return {"aiInsights": insights}


__all__ = ["COLLECTION", "FAILED_SUMMARY", "router"]
