"""Controller for one candidate's timed quiz attempt.

Composes the answer buffer, navigator, countdown clock and submission
coordinator. The controller is the only owner of session state and the
boundary where collaborator errors are translated into the portal's error
kinds.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from enum import Enum, auto
import logging
from typing import Callable, Protocol

from quiz_portal.constants.ui_constants import (
    ANSWER_REQUIRED_MESSAGE,
    ANSWER_REQUIRED_TITLE,
    CONFIRM_SUBMIT_MESSAGE,
    CONFIRM_SUBMIT_TITLE,
    LAST_QUESTION_MESSAGE,
    LAST_QUESTION_TITLE,
    SUBMIT_FAILED_TITLE,
)
from quiz_portal.core.errors import BootstrapFailure, ScoringServiceError, SubmissionFailure
from quiz_portal.core.models import (
    Attempt,
    AttemptResult,
    AuthContext,
    Question,
    QuestionStatus,
    Quiz,
    Role,
    SubmittedAnswer,
)
from quiz_portal.core.prompts import Prompt, PromptResult
from quiz_portal.core.services.answer_buffer import AnswerBuffer, AnswerProgress
from quiz_portal.core.services.countdown_clock import (
    CountdownClock,
    TickScheduler,
    TimeSource,
    utc_now,
)
from quiz_portal.core.services.question_navigator import QuestionNavigator
from quiz_portal.core.services.submission_coordinator import (
    SubmissionCoordinator,
    SubmissionPhase,
    SubmissionTrigger,
)

logger = logging.getLogger(__name__)


class ScoringService(Protocol):
    """Remote quiz/scoring collaborator consumed by the session."""

    async def fetch_quiz(self, auth: AuthContext, quiz_id: int) -> Quiz:
        ...

    async def start_attempt(self, auth: AuthContext, quiz_id: int) -> Attempt:
        ...

    async def submit_attempt(
        self, auth: AuthContext, attempt_id: int, answers: list[SubmittedAnswer]
    ) -> Attempt:
        ...

    async def fetch_attempt_result(self, auth: AuthContext, attempt_id: int) -> AttemptResult:
        ...


class SessionStage(Enum):
    CREATED = auto()
    LOADING = auto()
    IN_PROGRESS = auto()
    FINISHED = auto()
    FAILED = auto()
    DISPOSED = auto()


class SaveOutcome(Enum):
    ADVANCED = auto()
    LAST_QUESTION = auto()
    ANSWER_REQUIRED = auto()
    LOCKED = auto()


class SessionController:
    """Runs a single timed attempt from bootstrap to final hand-off."""

    def __init__(
        self,
        service: ScoringService,
        auth: AuthContext,
        quiz_id: int,
        *,
        prompt: Prompt,
        scheduler: TickScheduler,
        time_source: TimeSource = utc_now,
        on_tick: Callable[[timedelta], None] | None = None,
        on_finished: Callable[[Attempt], None] | None = None,
        on_terminal_error: Callable[[SubmissionFailure], None] | None = None,
        on_phase_changed: Callable[[SubmissionPhase], None] | None = None,
    ) -> None:
        self._service = service
        self._auth = auth
        self._quiz_id = quiz_id
        self._prompt = prompt
        self._scheduler = scheduler
        self._time_source = time_source
        self._on_tick = on_tick
        self._on_finished = on_finished
        self._on_terminal_error = on_terminal_error
        self._on_phase_changed = on_phase_changed

        self._stage = SessionStage.CREATED
        self._quiz: Quiz | None = None
        self._attempt: Attempt | None = None
        self._answers: AnswerBuffer | None = None
        self._navigator: QuestionNavigator | None = None
        self._clock: CountdownClock | None = None
        self._coordinator: SubmissionCoordinator | None = None
        self._final_attempt: Attempt | None = None

    # --- Bootstrap ---

    async def start(self) -> None:
        """Fetch the quiz, open an attempt and start the countdown.

        Raises BootstrapFailure; no timer is running when it does.
        """
        if self._stage is SessionStage.DISPOSED:
            return
        if self._stage is not SessionStage.CREATED:
            raise RuntimeError(f"Session cannot be started from stage {self._stage.name}.")
        if self._auth.role is not Role.CANDIDATE:
            self._stage = SessionStage.FAILED
            raise BootstrapFailure("Only candidates can take quizzes.")

        self._stage = SessionStage.LOADING
        try:
            quiz = await self._service.fetch_quiz(self._auth, self._quiz_id)
            if self._stage is SessionStage.DISPOSED:
                return
            if not quiz.questions:
                raise BootstrapFailure(f"Quiz '{quiz.title}' has no questions.")
            answers = AnswerBuffer(quiz.questions)
            attempt = await self._service.start_attempt(self._auth, quiz.id)
        except ScoringServiceError as exc:
            if self._stage is SessionStage.DISPOSED:
                logger.info("Session disposed before quiz %s loaded: %s", self._quiz_id, exc)
                return
            self._stage = SessionStage.FAILED
            logger.error("Failed to start quiz %s: %s", self._quiz_id, exc)
            raise BootstrapFailure(f"Failed to start quiz: {exc}") from exc
        except BootstrapFailure:
            self._stage = SessionStage.FAILED
            raise
        if self._stage is SessionStage.DISPOSED:
            logger.info("Session disposed while attempt %s was starting", attempt.id)
            return

        self._quiz = quiz
        self._attempt = attempt
        self._answers = answers
        self._navigator = QuestionNavigator(quiz.questions, answers)
        self._coordinator = SubmissionCoordinator(attempt.id, answers, self._submit_to_service)
        self._coordinator.on_submitted(self._handle_submitted)
        self._coordinator.on_failed(self._handle_submission_failed)
        if self._on_phase_changed is not None:
            self._coordinator.add_phase_listener(self._on_phase_changed)

        # Deadline comes from the server's start time, not from local elapsed time.
        self._clock = CountdownClock.for_duration(
            attempt.started_at,
            quiz.duration_minutes,
            self._scheduler,
            time_source=self._time_source,
        )
        if self._on_tick is not None:
            self._clock.on_tick(self._on_tick)
        self._clock.on_expired(self._handle_expired)

        self._answers.mark_visited(self._navigator.current_question.id)
        self._stage = SessionStage.IN_PROGRESS
        logger.info(
            "Attempt %s started for quiz %s (%d questions, %d min)",
            attempt.id,
            quiz.id,
            quiz.question_count,
            quiz.duration_minutes,
        )
        self._clock.start()

    # --- Read access ---

    @property
    def stage(self) -> SessionStage:
        return self._stage

    @property
    def quiz(self) -> Quiz:
        return self._require_started()[0]

    @property
    def attempt(self) -> Attempt | None:
        return self._attempt

    @property
    def final_attempt(self) -> Attempt | None:
        return self._final_attempt

    @property
    def phase(self) -> SubmissionPhase:
        if self._coordinator is None:
            return SubmissionPhase.IDLE
        return self._coordinator.phase

    @property
    def current_index(self) -> int:
        return self._navigator_or_raise().current_index

    @property
    def current_question(self) -> Question:
        return self._navigator_or_raise().current_question

    @property
    def answers(self) -> AnswerBuffer:
        return self._require_started()[1]

    @property
    def clock(self) -> CountdownClock | None:
        return self._clock

    def remaining(self) -> timedelta:
        if self._clock is None:
            return timedelta(0)
        return self._clock.remaining()

    def statuses(self) -> list[QuestionStatus]:
        return self._navigator_or_raise().statuses()

    def progress(self) -> AnswerProgress:
        return self.answers.progress()

    def is_locked(self) -> bool:
        """True once answers can no longer be changed."""
        return self._stage is not SessionStage.IN_PROGRESS or not self._coordinator.is_idle()

    # --- Candidate actions ---

    def select_option(self, option_id: int) -> None:
        if self.is_locked():
            return
        self.answers.select_option(self.current_question.id, option_id)

    def set_text(self, text: str) -> None:
        if self.is_locked():
            return
        self.answers.set_text(self.current_question.id, text)

    def clear_response(self) -> None:
        if self.is_locked():
            return
        self.answers.clear(self.current_question.id)

    def go_to(self, index: int) -> bool:
        if self.is_locked():
            return False
        navigator = self._navigator_or_raise()
        if not navigator.go_to(index):
            return False
        self.answers.mark_visited(navigator.current_question.id)
        return True

    def save_and_next(self) -> SaveOutcome:
        """Keep the current answer and move on to the next question."""
        if self.is_locked():
            return SaveOutcome.LOCKED
        navigator = self._navigator_or_raise()
        question_id = navigator.current_question.id
        if not self.answers.get_entry(question_id).has_answer:
            self._prompt.notify(ANSWER_REQUIRED_TITLE, ANSWER_REQUIRED_MESSAGE)
            return SaveOutcome.ANSWER_REQUIRED
        self.answers.mark_visited(question_id)
        if not navigator.advance():
            self._prompt.notify(LAST_QUESTION_TITLE, LAST_QUESTION_MESSAGE)
            return SaveOutcome.LAST_QUESTION
        self.answers.mark_visited(navigator.current_question.id)
        return SaveOutcome.ADVANCED

    def submit_now(self, *, confirm: bool = True) -> asyncio.Task[Attempt | None] | None:
        """Submit on the candidate's request. Returns None when nothing was sent."""
        if self._stage is not SessionStage.IN_PROGRESS or not self._coordinator.is_idle():
            return None
        if confirm:
            answer = self._prompt.confirm(CONFIRM_SUBMIT_TITLE, CONFIRM_SUBMIT_MESSAGE)
            if answer is not PromptResult.ACCEPTED:
                return None
        return self._coordinator.trigger(SubmissionTrigger.CANDIDATE)

    async def load_result(self) -> AttemptResult:
        """Fetch the review detail of the submitted attempt."""
        if self._final_attempt is None:
            raise RuntimeError("Attempt has not been submitted yet.")
        return await self._service.fetch_attempt_result(self._auth, self._final_attempt.id)

    # --- Teardown ---

    def dispose(self) -> None:
        """Release the timer and discard any in-flight submission."""
        if self._stage is SessionStage.DISPOSED:
            return
        self._stage = SessionStage.DISPOSED
        if self._clock is not None:
            self._clock.stop()
        if self._coordinator is not None:
            self._coordinator.dispose()
        logger.debug("Session for quiz %s disposed", self._quiz_id)

    # --- Internal wiring ---

    async def _submit_to_service(self, attempt_id: int, answers: list[SubmittedAnswer]) -> Attempt:
        return await self._service.submit_attempt(self._auth, attempt_id, answers)

    def _handle_expired(self) -> None:
        logger.info("Time is up for attempt %s", self._attempt.id if self._attempt else None)
        if self._coordinator is not None:
            self._coordinator.trigger(SubmissionTrigger.EXPIRY)

    def _handle_submitted(self, attempt: Attempt) -> None:
        self._final_attempt = attempt
        self._stage = SessionStage.FINISHED
        self._clock.stop()
        if self._on_finished is not None:
            self._on_finished(attempt)

    def _handle_submission_failed(self, failure: SubmissionFailure) -> None:
        if failure.terminal:
            self._stage = SessionStage.FAILED
            self._clock.stop()
            if self._on_terminal_error is not None:
                self._on_terminal_error(failure)
            return
        self._prompt.notify(SUBMIT_FAILED_TITLE, str(failure))
        if self._clock.has_expired():
            # The expiry trigger was ignored while this submission was in flight.
            logger.info("Time already expired for attempt %s, submitting automatically", self._attempt.id)
            self._coordinator.trigger(SubmissionTrigger.EXPIRY)

    def _require_started(self) -> tuple[Quiz, AnswerBuffer]:
        if self._quiz is None or self._answers is None:
            raise RuntimeError("Session has not been started.")
        return self._quiz, self._answers

    def _navigator_or_raise(self) -> QuestionNavigator:
        if self._navigator is None:
            raise RuntimeError("Session has not been started.")
        return self._navigator
