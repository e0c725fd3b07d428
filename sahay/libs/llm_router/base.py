"""Abstract provider interfaces for the LLM router."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .types import GenerationOptions, LLMResponse, Task


class BaseProvider(ABC):
    """Common interface all LLM providers must implement."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        options: GenerationOptions,
        task: Task = Task.CHAT,
    ) -> LLMResponse:
        """Send a single prompt and return the generated text."""

    async def aclose(self) -> None:  # pragma: no cover - optional hook
        """Release pooled connections, if any."""


__all__ = ["BaseProvider"]
