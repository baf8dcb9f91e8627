from __future__ import annotations

"""User notifications.

A notice is fire-and-forget with a duration in milliseconds; ``0`` keeps it
visible until `Notice.hide()` is called.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Protocol

PERSISTENT = 0


@dataclass
class Notice:
    message: str
    duration_ms: int = 3000
    hidden: bool = False

    def hide(self) -> None:
        self.hidden = True


class Notifier(Protocol):
    def notify(self, message: str, duration_ms: int = 3000) -> Notice: ...


class LoggingNotifier:
    """Writes every notice to the log."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("pinyin_converter.notices")

    def notify(self, message: str, duration_ms: int = 3000) -> Notice:
        self.logger.info("[notice] %s", message)
        return Notice(message, duration_ms)


@dataclass
class RecordingNotifier:
    """Keeps notices in memory so callers can return or inspect them."""

    notices: List[Notice] = field(default_factory=list)

    def notify(self, message: str, duration_ms: int = 3000) -> Notice:
        notice = Notice(message, duration_ms)
        self.notices.append(notice)
        return notice

    @property
    def messages(self) -> List[str]:
        return [n.message for n in self.notices]

    def transient(self) -> List[str]:
        """Messages of notices that were not persistent progress indicators."""
        return [n.message for n in self.notices if n.duration_ms != PERSISTENT]
