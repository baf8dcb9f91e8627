from __future__ import annotations

"""The convert command: context -> prompt -> model -> edit.

`PinyinConverter.convert` is the single entry point a host calls per user
gesture. Every failure ends as a notice; the document is only touched after
a successful, non-empty conversion.
"""

import logging
from typing import Optional

from .context import extract_context, is_blank
from .editor import Editor, Position, replace_span
from .llm import LLMClient, LLMError, get_llm_client
from .notices import LoggingNotifier, Notifier, PERSISTENT
from .prompts import Prompt, build_prompt
from .schemas import ConversionMode
from .settings import ConverterSettings

NOTICE_EMPTY_LINE = "No text to convert on the current line"
NOTICE_PROGRESS = "Converting pinyin..."
NOTICE_DONE = "Conversion complete!"
NOTICE_FAILED = "Conversion failed: {}"


class EmptyResultError(LLMError):
    def __init__(self):
        super().__init__("API returned an empty result")


def _single_line(text: str) -> str:
    """Fold a multi-line reply so a line conversion never changes line count."""
    parts = [part.strip() for part in text.splitlines() if part.strip()]
    return " ".join(parts)


class PinyinConverter:
    """Converts the current line (or selection) of an editor in place."""

    def __init__(
        self,
        settings: ConverterSettings,
        client: Optional[LLMClient] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.settings = settings
        self._client = client
        self.notifier = notifier or LoggingNotifier()

    # ------------------------------------------------------------------
    # Model calls
    # ------------------------------------------------------------------

    def _get_client(self) -> LLMClient:
        # built per call so settings edits take effect immediately
        if self._client is not None:
            return self._client
        return get_llm_client(self.settings)

    def request(self, prompt: Prompt, mode: ConversionMode) -> str:
        if self.settings.stepwise:
            return self.request_stepwise(prompt, mode)
        return self._get_client().chat(prompt.messages()).strip()

    def request_stepwise(self, prompt: Prompt, mode: ConversionMode) -> str:
        """Schema-mode call; failures are reported here and yield ``""``."""
        try:
            result = self._get_client().chat_structured(prompt.messages(), mode)
        except Exception as exc:
            logging.error("Stepwise conversion failed (%s): %s", type(exc).__name__, exc)
            self.notifier.notify(NOTICE_FAILED.format(str(exc) or "unknown error"), 5000)
            return ""
        logging.debug("[convert] stepwise result %s", result.model_dump_json())
        converted = result.final_output.strip()
        if not converted:
            self.notifier.notify(NOTICE_FAILED.format(EmptyResultError()), 5000)
        return converted

    # ------------------------------------------------------------------
    # Command
    # ------------------------------------------------------------------

    def convert(self, editor: Editor) -> bool:
        """Run the command against *editor*; return True when text was replaced."""

        span = editor.selection_range()
        if span is not None:
            start, end = span
            target = editor.get_selection()
        else:
            line = editor.get_cursor().line
            start, end = Position(line, 0), Position(line, len(editor.get_line(line)))
            target = editor.get_line(line)

        if is_blank(target):
            self.notifier.notify(NOTICE_EMPTY_LINE, 3000)
            return False

        progress = self.notifier.notify(NOTICE_PROGRESS, PERSISTENT)
        try:
            mode = ConversionMode.from_flag(self.settings.math_mode)
            context = ""
            if self.settings.with_context:
                lines = [editor.get_line(i) for i in range(editor.line_count())]
                context = extract_context(lines, start.line, self.settings.context_strategy)

            prompt = build_prompt(target, context, mode, stepwise=self.settings.stepwise)
            logging.info(
                "[convert] model=%s mode=%s stepwise=%s context_chars=%d",
                self.settings.model,
                mode.value,
                self.settings.stepwise,
                len(context),
            )

            converted = self.request(prompt, mode)
            if not converted:
                if self.settings.stepwise:
                    return False
                raise EmptyResultError()

            if span is None:
                converted = _single_line(converted)
            replace_span(editor, start, end, converted)
            self.notifier.notify(NOTICE_DONE, 2000)
            return True
        except Exception as exc:
            logging.error("Conversion error: %s", exc)
            self.notifier.notify(NOTICE_FAILED.format(str(exc) or "unknown error"), 5000)
            return False
        finally:
            progress.hide()
