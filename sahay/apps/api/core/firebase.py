"""Firebase app bootstrap and identity verification."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import firebase_admin
from firebase_admin import auth, credentials

from sahay.libs.schemas.settings import AppSettings

LOGGER = logging.getLogger(__name__)


class IdentityError(RuntimeError):
    """Raised when a token cannot be verified or a user cannot be created."""


def init_firebase_app(settings: AppSettings) -> firebase_admin.App:
    """Return the default Firebase app, initialising it on first use."""

    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if settings.firebase_credentials:
        cred = credentials.Certificate(settings.firebase_credentials)
    else:
        cred = credentials.ApplicationDefault()
    options: dict[str, Any] = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    LOGGER.info("[firebase] Initialising app (project=%s)", settings.firebase_project_id or "default")
    return firebase_admin.initialize_app(cred, options or None)


class FirebaseIdentity:
    """Verify ID tokens and register users through Firebase Auth."""

    def __init__(self, app: firebase_admin.App | None = None) -> None:
        self._app = app

    async def verify_token(self, token: str) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(auth.verify_id_token, token, app=self._app)
        except Exception as exc:
            raise IdentityError(str(exc)) from exc

    async def create_user(self, email: str, password: str) -> str:
        try:
            record = await asyncio.to_thread(
                auth.create_user, email=email, password=password, app=self._app
            )
        except Exception as exc:
            raise IdentityError(str(exc)) from exc
        return record.uid


__all__ = ["FirebaseIdentity", "IdentityError", "init_firebase_app"]
