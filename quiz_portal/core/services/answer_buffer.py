"""Service holding the candidate's current answer for every question."""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from quiz_portal.core.errors import UnknownQuestionError
from quiz_portal.core.models import AnswerEntry, Question, QuestionStatus


def derive_status(entry: AnswerEntry) -> QuestionStatus:
    """Compute the navigator status of an entry."""
    if entry.has_answer:
        return QuestionStatus.ANSWERED
    if entry.visited:
        return QuestionStatus.UNANSWERED
    return QuestionStatus.NOT_VISITED


@dataclass(frozen=True, slots=True)
class AnswerProgress:
    answered: int
    unanswered: int
    not_visited: int


class AnswerBuffer:
    """Maps question ids to answer entries, one entry per question."""

    def __init__(self, questions: Iterable[Question]) -> None:
        self._questions: dict[int, Question] = {}
        self._entries: dict[int, AnswerEntry] = {}
        for question in questions:
            self._questions[question.id] = question
            self._entries[question.id] = AnswerEntry(question_id=question.id)

    def select_option(self, question_id: int, option_id: int) -> None:
        question = self._require(question_id)
        if not question.type.is_choice:
            raise ValueError(f"Question {question_id} does not accept option selections.")
        if not question.has_option(option_id):
            raise ValueError(f"Option {option_id} does not belong to question {question_id}.")
        self._update(question_id, selected_option_id=option_id, visited=True)

    def set_text(self, question_id: int, text: str) -> None:
        question = self._require(question_id)
        if question.type.is_choice:
            raise ValueError(f"Question {question_id} does not accept text answers.")
        self._update(question_id, text_answer=text, visited=True)

    def clear(self, question_id: int) -> None:
        self._require(question_id)
        self._update(question_id, selected_option_id=None, text_answer=None)

    def mark_visited(self, question_id: int) -> None:
        self._require(question_id)
        self._update(question_id, visited=True)

    def get_entry(self, question_id: int) -> AnswerEntry:
        self._require(question_id)
        return self._entries[question_id]

    def status_of(self, question_id: int) -> QuestionStatus:
        return derive_status(self.get_entry(question_id))

    def snapshot(self) -> Mapping[int, AnswerEntry]:
        """Return a read-only copy of all entries, in question order."""
        return MappingProxyType(dict(self._entries))

    def progress(self) -> AnswerProgress:
        statuses = [derive_status(entry) for entry in self._entries.values()]
        return AnswerProgress(
            answered=statuses.count(QuestionStatus.ANSWERED),
            unanswered=statuses.count(QuestionStatus.UNANSWERED),
            not_visited=statuses.count(QuestionStatus.NOT_VISITED),
        )

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _require(self, question_id: int) -> Question:
        question = self._questions.get(question_id)
        if question is None:
            raise UnknownQuestionError(question_id)
        return question

    def _update(self, question_id: int, **changes: object) -> None:
        self._entries[question_id] = replace(self._entries[question_id], **changes)
