"""State machine guaranteeing at most one submission per attempt."""

from __future__ import annotations

import asyncio
from enum import Enum
import logging
from typing import Awaitable, Callable, Mapping

from quiz_portal.core.errors import ScoringServiceError, SubmissionFailure
from quiz_portal.core.models import AnswerEntry, Attempt, SubmittedAnswer
from quiz_portal.core.services.answer_buffer import AnswerBuffer

logger = logging.getLogger(__name__)

SubmitAttempt = Callable[[int, list[SubmittedAnswer]], Awaitable[Attempt]]


class SubmissionPhase(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


class SubmissionTrigger(Enum):
    """What asked for the submission."""

    CANDIDATE = "candidate"
    EXPIRY = "expiry"


def build_payload(entries: Mapping[int, AnswerEntry]) -> list[SubmittedAnswer]:
    """Convert answer entries into submission records, skipping unanswered ones."""
    payload: list[SubmittedAnswer] = []
    for entry in entries.values():
        if not entry.has_answer:
            continue
        text = entry.text_answer if entry.text_answer and entry.text_answer.strip() else None
        payload.append(
            SubmittedAnswer(
                question_id=entry.question_id,
                selected_option_id=entry.selected_option_id,
                text_answer=text,
            )
        )
    return payload


class SubmissionCoordinator:
    """Sends the attempt to the scoring service exactly once.

    ``trigger`` checks and flips the phase synchronously, before any network
    task exists, so a candidate click and a clock expiry arriving back to back
    cannot both get through.
    """

    def __init__(self, attempt_id: int, answers: AnswerBuffer, submit_attempt: SubmitAttempt) -> None:
        self._attempt_id = attempt_id
        self._answers = answers
        self._submit_attempt = submit_attempt
        self._phase = SubmissionPhase.IDLE
        self._task: asyncio.Task[Attempt | None] | None = None
        self._result: Attempt | None = None
        self._disposed = False
        self._phase_listeners: list[Callable[[SubmissionPhase], None]] = []
        self._submitted_listeners: list[Callable[[Attempt], None]] = []
        self._failed_listeners: list[Callable[[SubmissionFailure], None]] = []

    @property
    def phase(self) -> SubmissionPhase:
        return self._phase

    @property
    def result(self) -> Attempt | None:
        return self._result

    def is_idle(self) -> bool:
        return self._phase is SubmissionPhase.IDLE

    def add_phase_listener(self, listener: Callable[[SubmissionPhase], None]) -> None:
        self._phase_listeners.append(listener)

    def on_submitted(self, listener: Callable[[Attempt], None]) -> None:
        self._submitted_listeners.append(listener)

    def on_failed(self, listener: Callable[[SubmissionFailure], None]) -> None:
        self._failed_listeners.append(listener)

    def trigger(self, source: SubmissionTrigger) -> asyncio.Task[Attempt | None] | None:
        """Start a submission unless one is running or already done."""
        if self._disposed:
            logger.debug("Ignoring %s submit trigger on a disposed session", source.value)
            return None
        if self._phase is not SubmissionPhase.IDLE:
            logger.info(
                "Ignoring %s submit trigger for attempt %s in phase %s",
                source.value,
                self._attempt_id,
                self._phase.value,
            )
            return None
        self._set_phase(SubmissionPhase.SUBMITTING)
        payload = build_payload(self._answers.snapshot())
        logger.info(
            "Submitting attempt %s (%s, %d answers)",
            self._attempt_id,
            source.value,
            len(payload),
        )
        self._task = asyncio.get_running_loop().create_task(self._run(source, payload))
        return self._task

    def dispose(self) -> None:
        """Drop any in-flight submission; its late result is discarded."""
        self._disposed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._phase_listeners.clear()
        self._submitted_listeners.clear()
        self._failed_listeners.clear()

    async def _run(self, source: SubmissionTrigger, payload: list[SubmittedAnswer]) -> Attempt | None:
        try:
            attempt = await self._submit_attempt(self._attempt_id, payload)
        except ScoringServiceError as exc:
            if self._disposed:
                return None
            self._handle_failure(source, exc)
            return None
        if self._disposed:
            logger.info("Discarding submission result for disposed attempt %s", self._attempt_id)
            return None
        self._result = attempt
        self._set_phase(SubmissionPhase.SUBMITTED)
        logger.info("Attempt %s scored %s/%s", attempt.id, attempt.score, attempt.total_points)
        for listener in list(self._submitted_listeners):
            listener(attempt)
        return attempt

    def _handle_failure(self, source: SubmissionTrigger, exc: ScoringServiceError) -> None:
        terminal = source is SubmissionTrigger.EXPIRY
        logger.warning(
            "Submission of attempt %s failed (%s, terminal=%s): %s",
            self._attempt_id,
            source.value,
            terminal,
            exc,
        )
        self._set_phase(SubmissionPhase.FAILED)
        if not terminal:
            self._set_phase(SubmissionPhase.IDLE)
        failure = SubmissionFailure(f"Failed to submit quiz: {exc}", terminal=terminal)
        for listener in list(self._failed_listeners):
            listener(failure)

    def _set_phase(self, phase: SubmissionPhase) -> None:
        self._phase = phase
        for listener in list(self._phase_listeners):
            listener(phase)
