"""Qt UI components for the candidate application."""

from .candidate_quiz_window import CandidateQuizWindow
from .dialog_helpers import QtPrompt, confirm_action, show_error, show_info
from .qt_scheduler import QtTickScheduler
from .results_panel import ResultsPanel

__all__ = [
    "CandidateQuizWindow",
    "QtPrompt",
    "QtTickScheduler",
    "ResultsPanel",
    "confirm_action",
    "show_error",
    "show_info",
]
