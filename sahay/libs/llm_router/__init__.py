"""Model-agnostic LLM routing utilities."""

from .base import BaseProvider
from .gemini import GEMINI_DEFAULT_BASE_URL, GeminiProvider
from .router import LLMRouteConfig, LLMRouter, Route
from .structured import Fallback, Ok, Parsed, parse_or_default
from .types import GenerationOptions, LLMError, LLMResponse, Task

__all__ = [
    "BaseProvider",
    "Fallback",
    "GEMINI_DEFAULT_BASE_URL",
    "GeminiProvider",
    "GenerationOptions",
    "LLMError",
    "LLMResponse",
    "LLMRouteConfig",
    "LLMRouter",
    "Ok",
    "Parsed",
    "Route",
    "Task",
    "parse_or_default",
]
