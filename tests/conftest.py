"""
Pytest configuration and shared fakes for quiz_portal tests.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from quiz_portal.core.errors import ScoringServiceError
from quiz_portal.core.models import (
    Attempt,
    AttemptResult,
    AttemptStatus,
    AuthContext,
    Option,
    Question,
    QuestionType,
    Quiz,
    SubmittedAnswer,
)
from quiz_portal.core.prompts import PromptResult

START_TIME = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


class FakeTimeSource:
    """Settable clock; call it to read the current time."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class ManualTickHandle:
    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTickScheduler:
    """Tick scheduler that only fires when the test says so."""

    def __init__(self):
        self.handles: list[ManualTickHandle] = []

    def schedule_repeating(self, interval_seconds: float, callback: Callable[[], None]) -> ManualTickHandle:
        handle = ManualTickHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def active_handles(self) -> list[ManualTickHandle]:
        return [handle for handle in self.handles if not handle.cancelled]

    def fire(self) -> None:
        for handle in self.active_handles:
            handle.callback()


class RecordingPrompt:
    """Prompt that answers confirmations with ``answer`` and records everything."""

    def __init__(self, answer: PromptResult = PromptResult.ACCEPTED):
        self.answer = answer
        self.confirmations: list[str] = []
        self.notifications: list[tuple[str, str]] = []

    def confirm(self, title: str, message: str) -> PromptResult:
        self.confirmations.append(title)
        return self.answer

    def notify(self, title: str, message: str) -> None:
        self.notifications.append((title, message))

    @property
    def notified_titles(self) -> list[str]:
        return [title for title, _ in self.notifications]


class FakeScoringService:
    """In-memory stand-in for the remote quiz service.

    ``submit_failures`` is consumed one error per submit call. When
    ``fetch_gate`` or ``submit_gate`` is set, that call waits for it before
    answering.
    """

    def __init__(self, quiz: Quiz, time_source: FakeTimeSource):
        self.quiz = quiz
        self.time_source = time_source
        self.fetch_error: ScoringServiceError | None = None
        self.start_error: ScoringServiceError | None = None
        self.submit_failures: list[ScoringServiceError] = []
        self.fetch_gate: asyncio.Event | None = None
        self.submit_gate: asyncio.Event | None = None
        self.submit_calls: list[tuple[int, list[SubmittedAnswer]]] = []
        self.fetch_calls = 0
        self.start_calls = 0

    async def fetch_quiz(self, auth: AuthContext, quiz_id: int) -> Quiz:
        self.fetch_calls += 1
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.quiz

    async def start_attempt(self, auth: AuthContext, quiz_id: int) -> Attempt:
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error
        return Attempt(
            id=42,
            quiz_id=quiz_id,
            quiz_title=self.quiz.title,
            started_at=self.time_source(),
            total_points=self.quiz.total_points,
        )

    async def submit_attempt(
        self, auth: AuthContext, attempt_id: int, answers: list[SubmittedAnswer]
    ) -> Attempt:
        self.submit_calls.append((attempt_id, list(answers)))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_failures:
            raise self.submit_failures.pop(0)
        return Attempt(
            id=attempt_id,
            quiz_id=self.quiz.id,
            quiz_title=self.quiz.title,
            started_at=START_TIME,
            submitted_at=self.time_source(),
            score=len(answers),
            total_points=self.quiz.total_points,
            status=AttemptStatus.EVALUATED,
        )

    async def fetch_attempt_result(self, auth: AuthContext, attempt_id: int) -> AttemptResult:
        attempt = Attempt(
            id=attempt_id,
            quiz_id=self.quiz.id,
            started_at=START_TIME,
            submitted_at=self.time_source(),
            score=1,
            total_points=self.quiz.total_points,
            status=AttemptStatus.EVALUATED,
        )
        return AttemptResult(attempt=attempt)


def make_quiz(duration_minutes: int = 30) -> Quiz:
    """Three questions: multiple choice, true/false and short answer."""
    return Quiz(
        id=7,
        title="Sample Quiz",
        duration_minutes=duration_minutes,
        questions=(
            Question(
                id=1,
                text="What is $2 + 2$?",
                type=QuestionType.MULTIPLE_CHOICE,
                points=2,
                options=(Option(11, "3"), Option(12, "4"), Option(13, "5")),
            ),
            Question(
                id=2,
                text="The sky is green.",
                type=QuestionType.TRUE_FALSE,
                points=1,
                options=(Option(21, "True"), Option(22, "False")),
            ),
            Question(
                id=3,
                text="Describe a deadline.",
                type=QuestionType.SHORT_ANSWER,
                points=3,
            ),
        ),
    )


@pytest.fixture
def quiz() -> Quiz:
    return make_quiz()


@pytest.fixture
def time_source() -> FakeTimeSource:
    return FakeTimeSource()


@pytest.fixture
def scheduler() -> ManualTickScheduler:
    return ManualTickScheduler()


@pytest.fixture
def prompt() -> RecordingPrompt:
    return RecordingPrompt()


@pytest.fixture
def auth() -> AuthContext:
    return AuthContext(token="alice-token", display_name="Alice")


@pytest.fixture
def service(quiz, time_source) -> FakeScoringService:
    return FakeScoringService(quiz, time_source)


@pytest.fixture
def drain():
    """Let pending event-loop tasks run to completion."""

    async def run(rounds: int = 5) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return run
