"""HTTP client for the remote quiz/scoring service."""

from __future__ import annotations

import logging
from datetime import timezone, tzinfo
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from quiz_portal.constants.network_constants import (
    CANDIDATE_QUIZZES_PATH,
    DEFAULT_API_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
)
from quiz_portal.core.errors import ScoringServiceError
from quiz_portal.core.models import (
    Attempt,
    AttemptResult,
    AuthContext,
    Quiz,
    QuizSummary,
    SubmittedAnswer,
)
from quiz_portal.core.schemas import (
    AnswerRequest,
    AttemptPayload,
    DetailedAttemptPayload,
    Envelope,
    QuizPayload,
    QuizSummaryPayload,
    SubmitQuizRequest,
)

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class ScoringClient:
    """Candidate-side calls to the quiz service.

    Every failure (transport error, non-2xx status, ``success: false``
    envelope or malformed body) surfaces as ``ScoringServiceError``.

    Timestamps sent without a zone are read as wall time in ``server_tz``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        server_tz: tzinfo = timezone.utc,
    ) -> None:
        self._server_tz = server_tz
        self._warned_naive = False
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "ScoringClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def list_quizzes(self, auth: AuthContext) -> list[QuizSummary]:
        data = await self._request("GET", CANDIDATE_QUIZZES_PATH, auth)
        return [self._parse(QuizSummaryPayload, item).to_summary() for item in self._as_list(data)]

    async def fetch_quiz(self, auth: AuthContext, quiz_id: int) -> Quiz:
        data = await self._request("GET", f"{CANDIDATE_QUIZZES_PATH}/{quiz_id}", auth)
        payload = self._parse(QuizPayload, data)
        if any(question.leaks_correctness() for question in payload.questions):
            logger.warning("Quiz %s was served with correctness flags; dropping them", quiz_id)
        return payload.to_quiz()

    async def start_attempt(self, auth: AuthContext, quiz_id: int) -> Attempt:
        data = await self._request("POST", f"{CANDIDATE_QUIZZES_PATH}/{quiz_id}/start", auth)
        return self._attempt(self._parse(AttemptPayload, data))

    async def submit_attempt(
        self, auth: AuthContext, attempt_id: int, answers: list[SubmittedAnswer]
    ) -> Attempt:
        body = SubmitQuizRequest(
            attempt_id=attempt_id,
            answers=[AnswerRequest.from_answer(answer) for answer in answers],
        )
        data = await self._request("POST", f"{CANDIDATE_QUIZZES_PATH}/submit", auth, json=body.to_wire())
        return self._attempt(self._parse(AttemptPayload, data))

    async def list_my_attempts(self, auth: AuthContext) -> list[Attempt]:
        data = await self._request("GET", f"{CANDIDATE_QUIZZES_PATH}/my-attempts", auth)
        return [self._attempt(self._parse(AttemptPayload, item)) for item in self._as_list(data)]

    async def fetch_attempt_result(self, auth: AuthContext, attempt_id: int) -> AttemptResult:
        data = await self._request("GET", f"{CANDIDATE_QUIZZES_PATH}/attempts/{attempt_id}", auth)
        payload = self._parse(DetailedAttemptPayload, data)
        self._check_zone(payload)
        return payload.to_result(self._server_tz)

    def _attempt(self, payload: AttemptPayload) -> Attempt:
        self._check_zone(payload)
        return payload.to_attempt(self._server_tz)

    def _check_zone(self, payload: AttemptPayload) -> None:
        if payload.has_naive_timestamps and not self._warned_naive:
            self._warned_naive = True
            logger.warning(
                "Quiz service sent timestamps without a time zone; reading them as %s", self._server_tz
            )

    async def _request(
        self,
        method: str,
        path: str,
        auth: AuthContext,
        *,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, json=json, headers=auth.authorization_header)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ScoringServiceError(f"Unable to reach the quiz service: {exc}") from exc

        try:
            envelope = Envelope.model_validate(response.json())
        except (ValueError, ValidationError):
            envelope = None

        if response.is_error or envelope is None or not envelope.success:
            message = self._error_message(response, envelope)
            logger.error(
                "%s %s rejected: status=%s error=%s",
                method,
                path,
                response.status_code,
                message,
            )
            raise ScoringServiceError(message, status_code=response.status_code)
        return envelope.data

    @staticmethod
    def _error_message(response: httpx.Response, envelope: Envelope | None) -> str:
        if envelope is not None and (envelope.error or envelope.message):
            return envelope.error or envelope.message
        if response.is_error:
            return f"Quiz service responded with status {response.status_code}"
        return "Quiz service returned an unexpected response"

    @staticmethod
    def _parse(model: type[PayloadT], data: Any) -> PayloadT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ScoringServiceError(f"Malformed response from quiz service: {exc}") from exc

    @staticmethod
    def _as_list(data: Any) -> list[Any]:
        if not isinstance(data, list):
            raise ScoringServiceError("Expected a list from the quiz service")
        return data
