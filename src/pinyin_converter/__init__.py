"""Turn pinyin / English / spoken-math note lines into Chinese and MathJax."""

from .context import ContextStrategy, extract_context
from .converter import PinyinConverter
from .editor import Position, TextBuffer, replace_line
from .prompts import Prompt, build_prompt
from .schemas import ConversionMode, MathSteps, PlainSteps
from .settings import ConverterSettings, SettingsStore

__all__ = [
    "ContextStrategy",
    "ConversionMode",
    "ConverterSettings",
    "MathSteps",
    "PinyinConverter",
    "PlainSteps",
    "Position",
    "Prompt",
    "SettingsStore",
    "TextBuffer",
    "build_prompt",
    "extract_context",
    "replace_line",
]
