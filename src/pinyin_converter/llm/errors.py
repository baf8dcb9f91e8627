from __future__ import annotations

from typing import Any


class LLMError(Exception):
    """Base class for failures talking to the chat-completions endpoint."""


class APIConnectionError(LLMError):
    def __init__(self, base_url: str):
        self.base_url = base_url
        super().__init__(f"Cannot connect to API server ({base_url})")


class APIStatusError(LLMError):
    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(message or f"API request failed (HTTP {status_code})")

    @classmethod
    def from_response(cls, resp: Any) -> "APIStatusError":
        """Prefer the server's ``error.message`` over the generic status text."""
        message = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                message = error.get("message")
            elif isinstance(error, str):
                message = error
        return cls(resp.status_code, message if isinstance(message, str) and message else None)


class MalformedResponseError(LLMError):
    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__("Server returned malformed data")


class SchemaValidationError(LLMError):
    """The structured reply did not match the requested step layout."""

    def __init__(self, errors: Any = None):
        self.errors = errors
        super().__init__("Model reply did not match the expected step structure")
