from __future__ import annotations

"""User settings for the converter.

Settings are loaded once, merged over the defaults and written back to a
plain JSON file every time a field changes. Environment variables (read via
python-dotenv) override the stored endpoint, model and key so secrets can
live in `.env` instead of the settings file.
"""

import json
import logging
import os
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

from dotenv import load_dotenv

from .context import ContextStrategy

DEFAULT_BASE_URL = "https://api.siliconflow.cn/v1"
DEFAULT_MODEL = "Qwen/Qwen2.5-7B-Instruct"

# env var -> settings field
ENV_OVERRIDES = {
    "PINYIN_BASE_URL": "base_url",
    "PINYIN_MODEL": "model",
    "PINYIN_API_KEY": "api_key",
}


@dataclass
class ConverterSettings:
    """Mutable config controlled by the settings endpoint."""

    base_url: str = DEFAULT_BASE_URL  # the /v1 suffix is part of the URL
    model: str = DEFAULT_MODEL
    api_key: str = ""
    with_context: bool = False
    math_mode: bool = True
    stepwise: bool = True
    context_strategy: str = "document"  # "document" | "backward"
    timeout: float | None = None

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")

    def to_dict(self):
        return asdict(self)

    def to_public_dict(self) -> Dict[str, Any]:
        data = self.to_dict()
        if data["api_key"]:
            data["api_key"] = data["api_key"][:3] + "***"
        return data

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def merged(cls, data: Mapping[str, Any] | None) -> "ConverterSettings":
        """Return defaults overlaid by *data*; unknown keys are dropped."""
        known = cls.field_names()
        values = {k: v for k, v in (data or {}).items() if k in known and v is not None}
        return cls(**values)


class SettingsStore:
    """JSON-file backed persistence for `ConverterSettings`."""

    def __init__(self, path: str | os.PathLike[str] = "pinyin_settings.json", env_file: str | None = ".env"):
        self.path = Path(path)
        self.env_file = env_file

    def load(self) -> ConverterSettings:
        if self.env_file:
            load_dotenv(self.env_file, override=False)

        data: Dict[str, Any] = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8")) or {}
            except json.JSONDecodeError as exc:
                logging.error("Settings file %s is not valid JSON, using defaults: %s", self.path, exc)
                data = {}

        for env_name, field_name in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                data[field_name] = value

        settings = ConverterSettings.merged(data)
        logging.debug("[settings] loaded from %s model=%s base_url=%s", self.path, settings.model, settings.base_url)
        return settings

    def save(self, settings: ConverterSettings) -> None:
        self.path.write_text(json.dumps(settings.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")

    def update(self, settings: ConverterSettings, **changes: Any) -> ConverterSettings:
        """Apply *changes* in place and persist immediately."""
        unknown = set(changes) - ConverterSettings.field_names()
        if unknown:
            raise ValueError(f"Unknown settings field(s): {', '.join(sorted(unknown))}")
        if "context_strategy" in changes:
            ContextStrategy(changes["context_strategy"])

        updated = replace(settings, **changes)
        for name in changes:
            setattr(settings, name, getattr(updated, name))
        self.save(settings)
        logging.info("[settings] updated %s", ", ".join(sorted(changes)))
        return settings
