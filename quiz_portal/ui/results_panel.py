"""Component showing the graded result of a submitted attempt."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QLabel,
    QListWidget,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quiz_portal.constants.ui_constants import BUTTON_CLOSE, RESULTS_TITLE
from quiz_portal.core.models import AnswerReview, AttemptResult
from quiz_portal.styling.styles import Styles


def _format_duration(seconds: int | None) -> str:
    if seconds is None:
        return "-"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}m {secs:02d}s"


def _describe_answer(index: int, review: AnswerReview) -> str:
    question = review.question
    if review.selected_option is not None:
        given = review.selected_option.text
    else:
        given = review.text_answer or "(no answer)"
    if review.is_correct is None:
        verdict = "awaiting manual grading"
    elif review.is_correct:
        verdict = f"correct, +{review.points_earned or 0}"
    else:
        correct = next((o.text for o in question.options if o.is_correct), None)
        verdict = f"wrong, correct answer: {correct}" if correct else "wrong"
    return f"{index}. {question.text.splitlines()[0]}  ->  {given} ({verdict})"


class ResultsPanel(QWidget):
    """Score summary and per-question review."""

    def __init__(self, on_close: Callable[[], None], parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._on_close = on_close
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        title = QLabel(RESULTS_TITLE, self)
        title.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(title)

        self.score_label = QLabel("", self)
        self.score_label.setAlignment(Qt.AlignCenter)
        self.score_label.setStyleSheet("font-size: 28pt; font-weight: bold;")
        layout.addWidget(self.score_label)

        self.details_label = QLabel("", self)
        self.details_label.setWordWrap(True)
        layout.addWidget(self.details_label)

        self.review_list = QListWidget(self)
        layout.addWidget(self.review_list, stretch=1)

        close_button = QPushButton(BUTTON_CLOSE, self)
        close_button.clicked.connect(self._on_close)
        layout.addWidget(close_button, alignment=Qt.AlignRight)

    def show_result(self, result: AttemptResult) -> None:
        attempt = result.attempt
        self.score_label.setText(
            f"{attempt.score or 0} / {attempt.total_points}  ({result.percentage}%, {result.grade_band})"
        )
        details = [
            f"Quiz: {attempt.quiz_title or attempt.quiz_id}",
            f"Time taken: {_format_duration(attempt.time_taken_seconds)}",
        ]
        if attempt.exceeded_time_limit:
            details.append("Submitted after the time limit.")
        self.details_label.setText("\n".join(details))

        self.review_list.clear()
        for index, review in enumerate(result.answers, start=1):
            self.review_list.addItem(_describe_answer(index, review))

    def show_summary_only(self, message: str) -> None:
        self.score_label.setText("")
        self.details_label.setText(message)
        self.review_list.clear()
