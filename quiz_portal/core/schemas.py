"""Pydantic wire schemas shared by the scoring client and the reference server.

Field names are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quiz_portal.core.models import (
    AnswerReview,
    Attempt,
    AttemptResult,
    AttemptStatus,
    Option,
    Question,
    QuestionType,
    Quiz,
    QuizSummary,
    ReviewedOption,
    ReviewedQuestion,
    SubmittedAnswer,
)


def as_utc(value: datetime | None, assume: tzinfo = timezone.utc) -> datetime | None:
    """Convert to UTC, reading naive timestamps as wall time in ``assume``."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=assume)
    return value.astimezone(timezone.utc)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OptionPayload(WireModel):
    id: int
    option_text: str
    is_correct: bool | None = None

    def to_option(self) -> Option:
        return Option(id=self.id, text=self.option_text)

    def to_reviewed(self) -> ReviewedOption:
        return ReviewedOption(id=self.id, text=self.option_text, is_correct=bool(self.is_correct))


class QuestionPayload(WireModel):
    id: int
    question_text: str
    type: QuestionType
    points: int = Field(gt=0)
    options: list[OptionPayload] = Field(default_factory=list)

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            text=self.question_text,
            type=self.type,
            points=self.points,
            options=tuple(option.to_option() for option in self.options),
        )

    def to_reviewed(self) -> ReviewedQuestion:
        return ReviewedQuestion(
            id=self.id,
            text=self.question_text,
            type=self.type,
            points=self.points,
            options=tuple(option.to_reviewed() for option in self.options),
        )

    def leaks_correctness(self) -> bool:
        return any(option.is_correct is not None for option in self.options)


class QuizPayload(WireModel):
    id: int
    title: str
    description: str | None = None
    duration: int = Field(gt=0)
    questions: list[QuestionPayload] = Field(default_factory=list)

    def to_quiz(self) -> Quiz:
        return Quiz(
            id=self.id,
            title=self.title,
            description=self.description,
            duration_minutes=self.duration,
            questions=tuple(question.to_question() for question in self.questions),
        )


class QuizSummaryPayload(WireModel):
    id: int
    title: str
    description: str | None = None
    duration: int
    question_count: int = Field(
        validation_alias=AliasChoices("questionCount", "totalQuestions", "question_count"),
        serialization_alias="questionCount",
    )

    def to_summary(self) -> QuizSummary:
        return QuizSummary(
            id=self.id,
            title=self.title,
            description=self.description,
            duration_minutes=self.duration,
            question_count=self.question_count,
        )


class AttemptPayload(WireModel):
    id: int
    quiz_id: int
    quiz_title: str | None = None
    started_at: datetime
    submitted_at: datetime | None = None
    score: int | None = None
    total_points: int
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    # Elapsed seconds. Older services name it timeTakenMinutes but still send seconds.
    time_taken_seconds: int | None = Field(
        default=None,
        validation_alias=AliasChoices("timeTaken", "timeTakenSeconds", "timeTakenMinutes", "time_taken_seconds"),
        serialization_alias="timeTaken",
    )
    exceeded_time_limit: bool | None = None

    @property
    def has_naive_timestamps(self) -> bool:
        return any(
            stamp is not None and stamp.tzinfo is None for stamp in (self.started_at, self.submitted_at)
        )

    def to_attempt(self, server_tz: tzinfo = timezone.utc) -> Attempt:
        return Attempt(
            id=self.id,
            quiz_id=self.quiz_id,
            quiz_title=self.quiz_title,
            started_at=as_utc(self.started_at, server_tz),
            submitted_at=as_utc(self.submitted_at, server_tz),
            score=self.score,
            total_points=self.total_points,
            status=self.status,
            time_taken_seconds=self.time_taken_seconds,
            exceeded_time_limit=bool(self.exceeded_time_limit),
        )


class CandidateAnswerPayload(WireModel):
    question: QuestionPayload
    selected_option: OptionPayload | None = None
    text_answer: str | None = None
    correct: bool | None = None
    points_earned: int | None = None

    def to_review(self) -> AnswerReview:
        selected = self.selected_option.to_reviewed() if self.selected_option else None
        return AnswerReview(
            question=self.question.to_reviewed(),
            selected_option=selected,
            text_answer=self.text_answer,
            is_correct=self.correct,
            points_earned=self.points_earned,
        )


class DetailedAttemptPayload(AttemptPayload):
    quiz: QuizPayload | None = None
    candidate_answers: list[CandidateAnswerPayload] = Field(default_factory=list)

    def to_result(self, server_tz: tzinfo = timezone.utc) -> AttemptResult:
        questions = tuple(q.to_reviewed() for q in self.quiz.questions) if self.quiz else ()
        return AttemptResult(
            attempt=self.to_attempt(server_tz),
            questions=questions,
            answers=tuple(answer.to_review() for answer in self.candidate_answers),
        )


class AnswerRequest(WireModel):
    question_id: int
    selected_option_id: int | None = None
    text_answer: str | None = None

    @classmethod
    def from_answer(cls, answer: SubmittedAnswer) -> "AnswerRequest":
        return cls(
            question_id=answer.question_id,
            selected_option_id=answer.selected_option_id,
            text_answer=answer.text_answer,
        )


class SubmitQuizRequest(WireModel):
    attempt_id: int
    answers: list[AnswerRequest] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        # Null selections/text stay explicit in the request body.
        return self.model_dump(mode="json", by_alias=True)


class Envelope(WireModel):
    """Uniform ``{success, data}`` / ``{success: false, error}`` wrapper."""

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
