"""Message boxes used by the candidate window, and the Qt ``Prompt``."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from quiz_portal.core.prompts import PromptResult


def confirm_action(parent: QWidget, title: str, message: str) -> bool:
    """Ask a Yes/No question; No is the default button.

    Returns:
        True if the candidate picked Yes
    """
    reply = QMessageBox.question(
        parent,
        title,
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    """Modal information box with a single OK button."""
    box = QMessageBox(QMessageBox.Information, title, message, QMessageBox.Ok, parent)
    box.exec()


class QtPrompt:
    """``Prompt`` answered through modal message boxes on ``parent``."""

    def __init__(self, parent: QWidget) -> None:
        self._parent = parent

    def confirm(self, title: str, message: str) -> PromptResult:
        accepted = confirm_action(self._parent, title, message)
        return PromptResult.ACCEPTED if accepted else PromptResult.DECLINED

    def notify(self, title: str, message: str) -> None:
        show_info(self._parent, title, message)
