from __future__ import annotations

"""Factory helpers for LLM clients."""

from .base import LLMClient
from .errors import (
    LLMError,
    APIConnectionError,
    APIStatusError,
    MalformedResponseError,
    SchemaValidationError,
)
from .openai_client import OpenAIClient
from ..settings import ConverterSettings

__all__ = [
    "get_llm_client",
    "LLMClient",
    "OpenAIClient",
    "LLMError",
    "APIConnectionError",
    "APIStatusError",
    "MalformedResponseError",
    "SchemaValidationError",
]


def get_llm_client(settings: ConverterSettings) -> OpenAIClient:
    """Return a client for the endpoint configured in *settings*."""

    if not settings.model:
        raise ValueError("Model name must be specified (set it in the settings).")
    return OpenAIClient(
        api_key=settings.api_key,
        model=settings.model,
        base_url=settings.base_url,
        timeout=settings.timeout,
    )
