"""In-memory store of authored quizzes and candidate attempts, with grading."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from threading import Lock
from typing import Iterable

from quiz_portal.core.models import AttemptStatus, QuestionType, SubmittedAnswer
from quiz_portal.utils.time_utils import TimeSource, utc_now

logger = logging.getLogger(__name__)


class QuizStoreError(Exception):
    """Base error for rejected store operations."""

    status_code: int = 400


class AuthenticationError(QuizStoreError):
    status_code = 401


class ForbiddenError(QuizStoreError):
    status_code = 403


class NotFoundError(QuizStoreError):
    status_code = 404

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(f"{resource} not found with id: {identifier}")


class ConflictError(QuizStoreError):
    status_code = 409


@dataclass(slots=True)
class AuthoredOption:
    id: int
    text: str
    is_correct: bool = False


@dataclass(slots=True)
class AuthoredQuestion:
    id: int
    text: str
    type: QuestionType
    points: int = 1
    options: list[AuthoredOption] = field(default_factory=list)

    def find_option(self, option_id: int) -> AuthoredOption | None:
        return next((option for option in self.options if option.id == option_id), None)


@dataclass(slots=True)
class AuthoredQuiz:
    """Quiz as stored by the service, including correctness data."""

    id: int
    title: str
    duration_minutes: int
    questions: list[AuthoredQuestion]
    description: str | None = None
    is_active: bool = True

    @property
    def total_points(self) -> int:
        return sum(question.points for question in self.questions)

    def find_question(self, question_id: int) -> AuthoredQuestion | None:
        return next((q for q in self.questions if q.id == question_id), None)


@dataclass(slots=True)
class Candidate:
    candidate_id: int
    display_name: str
    token: str


@dataclass(slots=True)
class GradedAnswer:
    question_id: int
    selected_option_id: int | None
    text_answer: str | None
    is_correct: bool | None
    points_earned: int | None


@dataclass(slots=True)
class AttemptRecord:
    id: int
    quiz_id: int
    candidate_id: int
    started_at: datetime
    total_points: int
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    submitted_at: datetime | None = None
    score: int | None = None
    time_taken_seconds: int | None = None
    exceeded_time_limit: bool = False
    answers: list[GradedAnswer] = field(default_factory=list)


class QuizStore:
    """Thread-safe store backing the reference scoring service."""

    def __init__(self, time_source: TimeSource = utc_now) -> None:
        self._lock = Lock()
        self._time_source = time_source
        self._quizzes: dict[int, AuthoredQuiz] = {}
        self._attempts: dict[int, AttemptRecord] = {}
        self._candidates: dict[str, Candidate] = {}
        self._quiz_counter = 0
        self._question_counter = 0
        self._option_counter = 0
        self._attempt_counter = 0

    # --- Setup ---

    def add_quiz(self, quiz: AuthoredQuiz) -> AuthoredQuiz:
        """Store ``quiz``, assigning fresh ids to it and its questions/options."""
        if not quiz.questions:
            raise ValueError("Quiz must contain at least one question.")
        if quiz.duration_minutes <= 0:
            raise ValueError("Quiz duration must be a positive number of minutes.")
        with self._lock:
            self._quiz_counter += 1
            quiz.id = self._quiz_counter
            for question in quiz.questions:
                self._question_counter += 1
                question.id = self._question_counter
                for option in question.options:
                    self._option_counter += 1
                    option.id = self._option_counter
            self._quizzes[quiz.id] = quiz
        logger.info("Stored quiz %s '%s' with %d questions", quiz.id, quiz.title, len(quiz.questions))
        return quiz

    def register_candidate(self, token: str, display_name: str) -> Candidate:
        with self._lock:
            candidate = Candidate(
                candidate_id=len(self._candidates) + 1,
                display_name=display_name,
                token=token,
            )
            self._candidates[token] = candidate
            return candidate

    def authenticate(self, token: str | None) -> Candidate:
        with self._lock:
            candidate = self._candidates.get(token or "")
        if candidate is None:
            raise AuthenticationError("Invalid or missing bearer token")
        return candidate

    # --- Queries ---

    def list_active_quizzes(self) -> list[AuthoredQuiz]:
        with self._lock:
            return [quiz for quiz in self._quizzes.values() if quiz.is_active]

    def get_quiz(self, quiz_id: int) -> AuthoredQuiz:
        with self._lock:
            return self._require_quiz(quiz_id)

    def list_attempts(self, candidate: Candidate) -> list[AttemptRecord]:
        with self._lock:
            return [a for a in self._attempts.values() if a.candidate_id == candidate.candidate_id]

    def get_attempt(self, attempt_id: int, candidate: Candidate) -> AttemptRecord:
        with self._lock:
            return self._require_owned_attempt(attempt_id, candidate)

    # --- Attempt lifecycle ---

    def start_attempt(self, quiz_id: int, candidate: Candidate) -> AttemptRecord:
        with self._lock:
            quiz = self._require_quiz(quiz_id)
            self._attempt_counter += 1
            attempt = AttemptRecord(
                id=self._attempt_counter,
                quiz_id=quiz.id,
                candidate_id=candidate.candidate_id,
                started_at=self._time_source(),
                total_points=quiz.total_points,
            )
            self._attempts[attempt.id] = attempt
        logger.info("Candidate %s started attempt %s on quiz %s", candidate.display_name, attempt.id, quiz_id)
        return attempt

    def submit_attempt(
        self,
        attempt_id: int,
        candidate: Candidate,
        answers: Iterable[SubmittedAnswer],
    ) -> AttemptRecord:
        """Grade and finalize an attempt. Rejects a second submission."""
        with self._lock:
            attempt = self._require_owned_attempt(attempt_id, candidate)
            if attempt.status is not AttemptStatus.IN_PROGRESS:
                raise ConflictError("Quiz already submitted")
            quiz = self._require_quiz(attempt.quiz_id)
            # Everything is graded before the attempt is touched.
            graded = [self._grade(quiz, answer) for answer in answers]

            now = self._time_source()
            elapsed_seconds = max(0, int((now - attempt.started_at).total_seconds()))
            attempt.time_taken_seconds = elapsed_seconds
            attempt.exceeded_time_limit = elapsed_seconds // 60 > quiz.duration_minutes
            attempt.answers = graded
            attempt.score = sum(answer.points_earned or 0 for answer in graded)
            attempt.submitted_at = now
            attempt.status = AttemptStatus.EVALUATED

        if attempt.exceeded_time_limit:
            logger.warning(
                "Attempt %s submitted after the time limit (%ds elapsed, %d min allowed)",
                attempt.id,
                elapsed_seconds,
                quiz.duration_minutes,
            )
        logger.info("Attempt %s evaluated: %s/%s", attempt.id, attempt.score, attempt.total_points)
        return attempt

    def _grade(self, quiz: AuthoredQuiz, answer: SubmittedAnswer) -> GradedAnswer:
        question = quiz.find_question(answer.question_id)
        if question is None:
            raise NotFoundError("Question", answer.question_id)
        is_correct: bool | None = None
        points_earned: int | None = None
        if answer.selected_option_id is not None:
            option = question.find_option(answer.selected_option_id)
            if option is None:
                raise NotFoundError("Option", answer.selected_option_id)
            is_correct = option.is_correct
            points_earned = question.points if option.is_correct else 0
        # Text answers are stored for manual grading.
        return GradedAnswer(
            question_id=question.id,
            selected_option_id=answer.selected_option_id,
            text_answer=answer.text_answer,
            is_correct=is_correct,
            points_earned=points_earned,
        )

    def _require_quiz(self, quiz_id: int) -> AuthoredQuiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)
        return quiz

    def _require_owned_attempt(self, attempt_id: int, candidate: Candidate) -> AttemptRecord:
        attempt = self._attempts.get(attempt_id)
        if attempt is None:
            raise NotFoundError("QuizAttempt", attempt_id)
        if attempt.candidate_id != candidate.candidate_id:
            raise ForbiddenError("Unauthorized")
        return attempt
