"""Domain models for the candidate quiz session."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class QuestionType(Enum):
    """Supported question kinds."""

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"

    @property
    def is_choice(self) -> bool:
        return self is not QuestionType.SHORT_ANSWER


class QuestionStatus(Enum):
    """Navigator status of a question, derived from its answer entry."""

    NOT_VISITED = "not-visited"
    UNANSWERED = "unanswered"
    ANSWERED = "answered"


class AttemptStatus(Enum):
    IN_PROGRESS = "IN_PROGRESS"
    EVALUATED = "EVALUATED"


class Role(Enum):
    ADMIN = "ADMIN"
    CANDIDATE = "CANDIDATE"


@dataclass(frozen=True, slots=True)
class Option:
    """Answer option as shown to a candidate. Carries no correctness data."""

    id: int
    text: str


@dataclass(frozen=True, slots=True)
class Question:
    id: int
    text: str
    type: QuestionType
    points: int
    options: tuple[Option, ...] = ()

    def has_option(self, option_id: int) -> bool:
        return any(option.id == option_id for option in self.options)


@dataclass(frozen=True, slots=True)
class Quiz:
    """Candidate-facing quiz definition, immutable once an attempt starts."""

    id: int
    title: str
    duration_minutes: int
    questions: tuple[Question, ...]
    description: str | None = None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def total_points(self) -> int:
        return sum(question.points for question in self.questions)


@dataclass(frozen=True, slots=True)
class QuizSummary:
    id: int
    title: str
    duration_minutes: int
    question_count: int
    description: str | None = None


@dataclass(frozen=True, slots=True)
class AnswerEntry:
    """Current recorded answer for one question within an attempt."""

    question_id: int
    selected_option_id: int | None = None
    text_answer: str | None = None
    visited: bool = False

    @property
    def has_answer(self) -> bool:
        if self.selected_option_id is not None:
            return True
        return bool(self.text_answer and self.text_answer.strip())


@dataclass(frozen=True, slots=True)
class SubmittedAnswer:
    """One answer record of a submission payload."""

    question_id: int
    selected_option_id: int | None
    text_answer: str | None


@dataclass(frozen=True, slots=True)
class Attempt:
    """Server-authoritative record of one candidate run through a quiz."""

    id: int
    quiz_id: int
    started_at: datetime
    total_points: int
    quiz_title: str | None = None
    submitted_at: datetime | None = None
    score: int | None = None
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    time_taken_seconds: int | None = None
    exceeded_time_limit: bool = False

    @property
    def is_finalized(self) -> bool:
        return self.submitted_at is not None


@dataclass(frozen=True, slots=True)
class ReviewedOption:
    id: int
    text: str
    is_correct: bool


@dataclass(frozen=True, slots=True)
class ReviewedQuestion:
    id: int
    text: str
    type: QuestionType
    points: int
    options: tuple[ReviewedOption, ...] = ()


@dataclass(frozen=True, slots=True)
class AnswerReview:
    question: ReviewedQuestion
    selected_option: ReviewedOption | None
    text_answer: str | None
    is_correct: bool | None
    points_earned: int | None


@dataclass(frozen=True, slots=True)
class AttemptResult:
    """Finalized attempt plus review detail for the results display."""

    attempt: Attempt
    questions: tuple[ReviewedQuestion, ...] = ()
    answers: tuple[AnswerReview, ...] = field(default_factory=tuple)

    @property
    def percentage(self) -> int:
        if not self.attempt.total_points or self.attempt.score is None:
            return 0
        return round(self.attempt.score / self.attempt.total_points * 100)

    @property
    def grade_band(self) -> str:
        percentage = self.percentage
        if percentage >= 70:
            return "Passed"
        if percentage >= 50:
            return "Average"
        return "Failed"


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Identity of the signed-in user, passed explicitly to the session."""

    token: str
    display_name: str
    role: Role = Role.CANDIDATE

    @property
    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}
