"""Service tracking which question the candidate is looking at."""

from __future__ import annotations

from typing import Sequence

from quiz_portal.core.models import Question, QuestionStatus
from quiz_portal.core.services.answer_buffer import AnswerBuffer, derive_status


class QuestionNavigator:
    """Cursor over the quiz's questions. Never writes to the answer buffer."""

    def __init__(self, questions: Sequence[Question], answers: AnswerBuffer) -> None:
        if not questions:
            raise ValueError("Quiz must contain at least one question.")
        self._questions = tuple(questions)
        self._answers = answers
        self._cursor = 0

    @property
    def current_index(self) -> int:
        return self._cursor

    @property
    def current_question(self) -> Question:
        return self._questions[self._cursor]

    @property
    def count(self) -> int:
        return len(self._questions)

    @property
    def is_last(self) -> bool:
        return self._cursor == len(self._questions) - 1

    def go_to(self, index: int) -> bool:
        """Move to ``index``. Out-of-range requests leave the cursor alone."""
        if not 0 <= index < len(self._questions):
            return False
        moved = index != self._cursor
        self._cursor = index
        return moved

    def advance(self) -> bool:
        """Move to the next question; False when already on the last one."""
        if self.is_last:
            return False
        self._cursor += 1
        return True

    def status_at(self, index: int) -> QuestionStatus:
        return self._answers.status_of(self._questions[index].id)

    def statuses(self) -> list[QuestionStatus]:
        snapshot = self._answers.snapshot()
        return [derive_status(snapshot[question.id]) for question in self._questions]
