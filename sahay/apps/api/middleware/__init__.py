"""API middleware utilities for Sahay."""

from .telemetry import TelemetryMiddleware

__all__ = ["TelemetryMiddleware"]
