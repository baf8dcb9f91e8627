from __future__ import annotations

"""Common interface for chat-completion clients.

A client accepts OpenAI-style messages ({"role": "system"|"user", "content": str})
and returns either the free-form reply text or a validated multi-step result.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any

from ..schemas import ConversionMode, StepwiseResult


class LLMClient(ABC):
    """Abstract base class for language model clients."""

    def __init__(self, model: str, temperature: float = 0.5):
        self.model = model
        self.temperature = temperature

    @abstractmethod
    def chat(self, messages: List[Dict[str, Any]]) -> str:  # noqa: D401
        """Send a chat completion request and return the model reply as text."""
        ...

    @abstractmethod
    def chat_structured(self, messages: List[Dict[str, Any]], mode: ConversionMode) -> StepwiseResult:
        """Request a reply matching the multi-step schema of *mode*."""
        ...

    def list_models(self) -> List[str]:  # noqa: D401
        """Return list of available model names (best effort)."""
        raise NotImplementedError
