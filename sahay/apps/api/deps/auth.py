from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends, Header, HTTPException

from sahay.apps.api.core.container import Services, get_services

LOGGER = logging.getLogger(__name__)

DEV_USER_ID = "dev-user"
DEV_USER_EMAIL = "dev@example.com"


@dataclass(slots=True)
class AuthUser:
    uid: str
    email: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


async def get_current_user(
    authorization: str | None = Header(default=None),
    x_dev_auth: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> AuthUser:
    if services.settings.dev_bypass_auth or (x_dev_auth or "").lower() == "allow":
        return AuthUser(uid=DEV_USER_ID, email=DEV_USER_EMAIL)

    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Missing token")

    try:
        decoded = await services.identity.verify_token(token)
    except Exception as exc:
        LOGGER.info("[auth] Token verification failed: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid or expired token") from exc

    uid = decoded.get("uid") or decoded.get("user_id") or decoded.get("sub")
    if not uid:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return AuthUser(uid=uid, email=decoded.get("email"), claims=dict(decoded))


__all__ = ["AuthUser", "DEV_USER_EMAIL", "DEV_USER_ID", "get_current_user"]
