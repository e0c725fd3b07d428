"""FastAPI application entrypoint for Sahay."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette_exporter import PrometheusMiddleware, handle_metrics

from sahay.apps.api.core.container import build_services
from sahay.apps.api.middleware import TelemetryMiddleware
from sahay.apps.api.routes.auth import router as auth_router
from sahay.apps.api.routes.chat import router as chat_router
from sahay.apps.api.routes.digital_twin import router as digital_twin_router
from sahay.apps.api.routes.health import nudge_router
from sahay.apps.api.routes.health import router as health_router
from sahay.apps.api.routes.journal import router as journal_router
from sahay.apps.api.routes.mitra import router as mitra_router
from sahay.apps.api.routes.practice import router as practice_router
from sahay.apps.api.routes.security import router as security_router
from sahay.apps.api.routes.soundscape import dhwani_router
from sahay.apps.api.routes.soundscape import router as soundscape_router
from sahay.apps.api.routes.wellness import router as wellness_router
from sahay.libs.logging_utils import configure_logging
from sahay.libs.schemas.settings import AppSettings, get_settings
from sahay.libs.store import StoreError

LOGGER = logging.getLogger(__name__)

ROUTERS = (
    auth_router,
    mitra_router,
    chat_router,
    journal_router,
    practice_router,
    health_router,
    nudge_router,
    soundscape_router,
    dhwani_router,
    digital_twin_router,
    wellness_router,
    security_router,
)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse({"error": message}, status_code=400)


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    LOGGER.error("[store] %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app(settings: AppSettings | None = None, **overrides: Any) -> FastAPI:
    """Build the API. ``overrides`` replace container collaborators (store, llm, ...)."""

    settings = settings or get_settings()
    configure_logging(
        settings.log_level,
        settings.log_format,
        environment=settings.environment,
        color=settings.log_color,
    )
    services = build_services(settings, **overrides)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await services.aclose()

    app = FastAPI(title=f"{settings.app_name} API", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(PrometheusMiddleware)
    app.add_route("/metrics", handle_metrics)
    app.add_middleware(TelemetryMiddleware)

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StoreError, _store_error)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    for router in ROUTERS:
        app.include_router(router)

    LOGGER.info(
        "[startup] %s ready (env=%s, store=%s, ai=%s)",
        settings.app_name,
        settings.environment,
        settings.store_backend,
        "gemini" if settings.gemini_api_key else "fallback",
    )
    return app


__all__ = ["create_app"]
