"""Request telemetry middleware for logging sanitized request metadata."""

from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from sahay.libs.safety import _mask_pii

LOGGER = logging.getLogger(__name__)


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration for every request."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - started) * 1000)

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        LOGGER.info(
            "[telemetry] %s %s -> %s (%dms)",
            request.method,
            _mask_pii(path),
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": _mask_pii(path),
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers["X-Response-Time-ms"] = str(duration_ms)
        return response


__all__ = ["TelemetryMiddleware"]
