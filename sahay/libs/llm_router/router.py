"""Policy-aware LLM router mapping tasks to a provider and model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .base import BaseProvider
from .types import GenerationOptions, LLMError, LLMResponse, Task


@dataclass(frozen=True)
class Route:
    """Provider key and model used for one task."""

    provider: str
    model: str


@dataclass
class LLMRouteConfig:
    """Configuration payload controlling provider selection per task."""

    policy: dict[Task, Route] = field(default_factory=dict)


class LLMRouter:
    """Dispatch single-shot generation requests to the provider configured for a task.

    Each request is sent exactly once; callers own the fallback when it fails.
    """

    def __init__(
        self,
        *,
        config: LLMRouteConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._providers: dict[str, BaseProvider] = {}
        self._logger = logger or logging.getLogger(__name__)
        self._config = config or LLMRouteConfig()

    def register_provider(self, key: str, provider: BaseProvider) -> None:
        """Register or replace a provider under ``key``."""

        self._providers[key] = provider

    def set_policy(self, task: Task, provider: str, model: str) -> None:
        """Route ``task`` to ``provider`` using ``model``."""

        if not provider or not model:
            raise ValueError("Route requires both a provider key and a model")
        self._config.policy[task] = Route(provider=provider, model=model)

    @property
    def configured(self) -> bool:
        return any(route.provider in self._providers for route in self._config.policy.values())

    async def generate(
        self,
        prompt: str,
        *,
        task: Task = Task.CHAT,
        options: GenerationOptions | None = None,
        model: str | None = None,
    ) -> LLMResponse:
        """Generate text for ``prompt``; raises :class:`LLMError` on any failure."""

        route = self._resolve(task)
        provider = self._providers[route.provider]
        try:
            response = await provider.generate(
                prompt,
                model=model or route.model,
                options=options or GenerationOptions(),
                task=task,
            )
        except LLMError:
            raise
        except Exception as exc:
            raise LLMError(f"Provider {route.provider} failed for {task.value}: {exc}") from exc

        if response.provider is None:
            response.provider = route.provider
        self._log_usage(route.provider, response)
        return response

    async def aclose(self) -> None:
        for provider in self._providers.values():
            await provider.aclose()

    def _resolve(self, task: Task) -> Route:
        route = self._config.policy.get(task) or self._config.policy.get(Task.CHAT)
        if route is None:
            raise LLMError(f"No provider configured for task '{task.value}'")
        if route.provider not in self._providers:
            raise LLMError(f"Provider '{route.provider}' is not registered")
        return route

    def _log_usage(self, provider_key: str, response: LLMResponse) -> None:
        usage = response.usage or {}
        self._logger.info(
            "llm_task=%s provider=%s model=%s prompt_tokens=%s completion_tokens=%s total_tokens=%s",
            response.task.value,
            provider_key,
            response.model,
            usage.get("prompt_tokens"),
            usage.get("completion_tokens"),
            usage.get("total_tokens"),
        )


__all__ = ["LLMRouteConfig", "LLMRouter", "Route"]
