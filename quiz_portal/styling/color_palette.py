"""Color palette for QuizPortal supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from quiz_portal.core.models import QuestionStatus


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the candidate window."""

    TEXT_PRIMARY = ThemeColors(light="#0F172A", dark="#F5F5F5")
    TEXT_SECONDARY = ThemeColors(light="#475569", dark="#AAAAAA")
    TEXT_ON_ACCENT = ThemeColors(light="#FFFFFF", dark="#000000")

    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F1F5F9", dark="#2D2D2D")

    ACCENT_PRIMARY = ThemeColors(light="#2563EB", dark="#4A9EFF")
    BORDER_PRIMARY = ThemeColors(light="#CBD5E1", dark="#555555")

    BUTTON_SUBMIT_BG = ThemeColors(light="#059669", dark="#34D399")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F8FAFC", dark="#3A3A3A")
    BUTTON_HOVER_BG = ThemeColors(light="#E2E8F0", dark="#505050")

    # Timer
    TIMER_NORMAL = ThemeColors(light="#312E81", dark="#A5B4FC")
    TIMER_LOW = ThemeColors(light="#DC2626", dark="#FF6B6B")

    # Navigator status
    STATUS_ANSWERED = ThemeColors(light="#10B981", dark="#6FCF6F")
    STATUS_UNANSWERED = ThemeColors(light="#F43F5E", dark="#FF6B6B")
    STATUS_NOT_VISITED = ThemeColors(light="#FBBF24", dark="#FFC83D")

    @classmethod
    def for_status(cls, status: QuestionStatus) -> ThemeColors:
        if status is QuestionStatus.ANSWERED:
            return cls.STATUS_ANSWERED
        if status is QuestionStatus.UNANSWERED:
            return cls.STATUS_UNANSWERED
        return cls.STATUS_NOT_VISITED
