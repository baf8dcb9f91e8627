from __future__ import annotations

import re
from typing import Any, Dict, List

import requests
import logging
from pydantic import ValidationError

from ..schemas import ConversionMode, StepwiseResult, schema_for
from ..schemas import response_format as format_directive
from .base import LLMClient
from .errors import (
    APIConnectionError,
    APIStatusError,
    LLMError,
    MalformedResponseError,
    SchemaValidationError,
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class OpenAIClient(LLMClient):
    """Tiny wrapper around the OpenAI-compatible Chat Completion endpoint.

    Plain `requests` is enough here; any endpoint that speaks the OpenAI REST
    format (SiliconFlow, DeepSeek, OpenRouter, a local gateway, ...) works by
    passing a different `base_url` and `api_key`.

    No timeout is applied unless one is configured, so a call waits on the
    network for as long as the server takes.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.5,
        top_p: float = 0.7,
        max_tokens: int = 4096,
        timeout: float | None = None,
    ):
        super().__init__(model=model, temperature=temperature)
        if not api_key:
            raise RuntimeError("Missing API key for OpenAI-compatible endpoint")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.top_p = top_p
        self.max_tokens = max_tokens
        self.timeout = timeout

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, messages: List[dict], response_format: Dict[str, Any] | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "top_p": self.top_p,
        }
        if response_format is not None:
            payload["response_format"] = response_format
        return payload

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/chat/completions"
        try:
            resp = requests.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.ConnectionError as exc:
            logging.error("Chat completion: cannot reach %s: %s", self.base_url, exc)
            raise APIConnectionError(self.base_url) from exc
        except requests.RequestException as exc:
            logging.error("Chat completion request failed: %s", exc)
            raise LLMError(f"API request failed: {exc}") from exc

        if not resp.ok:
            error = APIStatusError.from_response(resp)
            logging.error("Chat completion HTTP %s: %s", resp.status_code, error)
            raise error

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponseError("body is not JSON") from exc
        if not isinstance(data, dict):
            raise MalformedResponseError("body is not a JSON object")
        return data

    @staticmethod
    def _content(data: Dict[str, Any]) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedResponseError("missing choices[0].message.content") from exc
        if not isinstance(content, str) or not content.strip():
            raise MalformedResponseError("empty message content")
        return content.strip()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chat(self, messages: List[dict]) -> str:
        data = self._post(self.build_payload(messages))
        return self._content(data)

    def chat_structured(self, messages: List[dict], mode: ConversionMode) -> StepwiseResult:
        mode = ConversionMode(mode)
        data = self._post(self.build_payload(messages, response_format=format_directive(mode)))
        content = self._content(data)

        # some gateways wrap JSON replies in a markdown fence
        match = _FENCE_RE.match(content)
        if match:
            content = match.group(1)

        try:
            return schema_for(mode).model_validate_json(content)  # type: ignore[return-value]
        except ValidationError as exc:
            logging.error("Structured reply failed validation (%s mode): %s", mode.value, exc)
            raise SchemaValidationError(exc.errors()) from exc

    def list_models(self) -> List[str]:
        url = f"{self.base_url}/models"
        try:
            resp = requests.get(url, headers=self._headers(), timeout=10)
            resp.raise_for_status()
            return [m["id"] for m in resp.json().get("data", [])]
        except Exception as exc:
            if hasattr(exc, "response") and exc.response is not None:
                logging.error("/models failed %s: %s", exc.response.status_code, exc.response.text)
            else:
                logging.error("/models failed: %s", exc)
            return []

