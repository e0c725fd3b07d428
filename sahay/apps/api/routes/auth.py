"""Registration and token verification against the identity provider."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from sahay.apps.api.core.container import Services, get_services
from sahay.apps.api.core.firebase import IdentityError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyIn(BaseModel):
    token: Optional[str] = None


@router.post("/register")
async def register(payload: RegisterIn, services: Services = Depends(get_services)) -> Dict[str, Any]:
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Missing fields")
    try:
        uid = await services.identity.create_user(payload.email, payload.password)
    except IdentityError as exc:
        LOGGER.warning("[auth] registration failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True, "uid": uid}


@router.post("/verify")
async def verify(payload: VerifyIn, services: Services = Depends(get_services)) -> Dict[str, Any]:
    if not payload.token:
        raise HTTPException(status_code=400, detail="Missing token")
    try:
        decoded = await services.identity.verify_token(payload.token)
    except IdentityError as exc:
        LOGGER.info("[auth] token rejected: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    return {"success": True, "uid": decoded.get("uid"), "decoded": decoded}


__all__ = ["router"]
