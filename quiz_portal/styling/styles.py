"""Centralized styles for the candidate window."""

from quiz_portal.core.models import QuestionStatus

from .color_palette import ColorPalette, Theme


class Styles:
    """Helper class to generate Qt stylesheets based on the current theme."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        return f"""
            QMainWindow, QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
                font-size: 14px;
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_SECONDARY_BG.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 6px;
                padding: 8px 16px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:disabled {{
                color: {ColorPalette.TEXT_SECONDARY.get(theme)};
            }}
            QPlainTextEdit {{
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 6px;
                padding: 6px;
            }}
            QGroupBox {{
                border: 1px solid {ColorPalette.BORDER_PRIMARY.get(theme)};
                border-radius: 6px;
                margin-top: 6px;
                padding-top: 10px;
            }}
        """

    @staticmethod
    def get_primary_button_style(theme: Theme = Theme.LIGHT) -> str:
        return (
            f"QPushButton {{ background-color: {ColorPalette.ACCENT_PRIMARY.get(theme)}; "
            f"color: {ColorPalette.TEXT_ON_ACCENT.get(theme)}; border: none; }}"
        )

    @staticmethod
    def get_submit_button_style(theme: Theme = Theme.LIGHT) -> str:
        return (
            f"QPushButton {{ background-color: {ColorPalette.BUTTON_SUBMIT_BG.get(theme)}; "
            f"color: {ColorPalette.TEXT_ON_ACCENT.get(theme)}; border: none; font-weight: bold; }}"
        )

    @staticmethod
    def get_timer_style(low_time: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.TIMER_LOW if low_time else ColorPalette.TIMER_NORMAL
        return f"font-size: 18pt; font-weight: bold; color: {color.get(theme)};"

    @staticmethod
    def get_navigator_button_style(
        status: QuestionStatus,
        is_current: bool,
        theme: Theme = Theme.LIGHT,
    ) -> str:
        border = (
            f"3px solid {ColorPalette.ACCENT_PRIMARY.get(theme)}"
            if is_current
            else f"1px solid {ColorPalette.BORDER_PRIMARY.get(theme)}"
        )
        return (
            f"QPushButton {{ background-color: {ColorPalette.for_status(status).get(theme)}; "
            f"border: {border}; border-radius: 6px; font-weight: bold; "
            "min-width: 36px; min-height: 36px; padding: 0; }}"
        )

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 16pt; font-weight: bold;"
