"""Prompt abstraction used by the session instead of modal dialogs."""

from __future__ import annotations

from enum import Enum, auto
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class PromptResult(Enum):
    ACCEPTED = auto()
    DECLINED = auto()


class Prompt(Protocol):
    """Asks the candidate something and reports back a result value."""

    def confirm(self, title: str, message: str) -> PromptResult:
        ...

    def notify(self, title: str, message: str) -> None:
        ...


class AutoAcceptPrompt:
    """Prompt that accepts every confirmation and logs notifications.

    Used for headless sessions.
    """

    def confirm(self, title: str, message: str) -> PromptResult:
        logger.info("Auto-accepting prompt '%s': %s", title, message)
        return PromptResult.ACCEPTED

    def notify(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
