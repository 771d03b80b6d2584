"""FastAPI reference implementation of the candidate quiz/scoring service."""

from __future__ import annotations

import logging
from threading import Thread
import time

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import uvicorn

from quiz_portal.constants.network_constants import (
    API_PREFIX,
    CANDIDATE_QUIZZES_PATH,
    DEFAULT_HOST,
    DEFAULT_PORT,
)
from quiz_portal.core.models import SubmittedAnswer
from quiz_portal.core.schemas import (
    AttemptPayload,
    CandidateAnswerPayload,
    DetailedAttemptPayload,
    OptionPayload,
    QuestionPayload,
    QuizPayload,
    QuizSummaryPayload,
    SubmitQuizRequest,
)
from quiz_portal.server.quiz_store import (
    AttemptRecord,
    AuthoredOption,
    AuthoredQuestion,
    AuthoredQuiz,
    Candidate,
    QuizStore,
    QuizStoreError,
)

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def _option_payload(option: AuthoredOption, *, reveal: bool) -> OptionPayload:
    return OptionPayload(
        id=option.id,
        option_text=option.text,
        is_correct=option.is_correct if reveal else None,
    )


def _question_payload(question: AuthoredQuestion, *, reveal: bool) -> QuestionPayload:
    return QuestionPayload(
        id=question.id,
        question_text=question.text,
        type=question.type,
        points=question.points,
        options=[_option_payload(option, reveal=reveal) for option in question.options],
    )


def _quiz_payload(quiz: AuthoredQuiz, *, reveal: bool) -> QuizPayload:
    # Correctness is only revealed once an attempt has been graded.
    return QuizPayload(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        duration=quiz.duration_minutes,
        questions=[_question_payload(question, reveal=reveal) for question in quiz.questions],
    )


def _attempt_fields(attempt: AttemptRecord, quiz: AuthoredQuiz) -> dict[str, object]:
    return {
        "id": attempt.id,
        "quiz_id": quiz.id,
        "quiz_title": quiz.title,
        "started_at": attempt.started_at,
        "submitted_at": attempt.submitted_at,
        "score": attempt.score,
        "total_points": attempt.total_points,
        "status": attempt.status,
        "time_taken_seconds": attempt.time_taken_seconds,
        "exceeded_time_limit": attempt.exceeded_time_limit,
    }


def _attempt_payload(attempt: AttemptRecord, quiz: AuthoredQuiz) -> AttemptPayload:
    return AttemptPayload(**_attempt_fields(attempt, quiz))


def _detailed_attempt_payload(attempt: AttemptRecord, quiz: AuthoredQuiz) -> DetailedAttemptPayload:
    graded = attempt.submitted_at is not None
    answers: list[CandidateAnswerPayload] = []
    for answer in attempt.answers:
        question = quiz.find_question(answer.question_id)
        if question is None:
            continue
        selected = None
        if answer.selected_option_id is not None:
            option = question.find_option(answer.selected_option_id)
            selected = _option_payload(option, reveal=True) if option else None
        answers.append(
            CandidateAnswerPayload(
                question=_question_payload(question, reveal=True),
                selected_option=selected,
                text_answer=answer.text_answer,
                correct=answer.is_correct,
                points_earned=answer.points_earned,
            )
        )
    return DetailedAttemptPayload(
        **_attempt_fields(attempt, quiz),
        quiz=_quiz_payload(quiz, reveal=graded),
        candidate_answers=answers,
    )


def _success(data: object) -> dict[str, object]:
    return {"success": True, "data": data}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_api_app(store: QuizStore) -> FastAPI:
    """Create a FastAPI application serving the candidate endpoints of ``store``."""
    app = FastAPI(title="QuizPortal Scoring API", version="0.1.0")

    @app.exception_handler(QuizStoreError)
    async def handle_store_error(request: Request, exc: QuizStoreError) -> JSONResponse:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error_response(exc.status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(422, f"Invalid request: {exc.errors()}")

    base_path = f"{API_PREFIX}{CANDIDATE_QUIZZES_PATH}"

    def current_candidate(
        credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    ) -> Candidate:
        return store.authenticate(credentials.credentials if credentials else None)

    @app.get(base_path)
    def list_quizzes(candidate: Candidate = Depends(current_candidate)) -> dict[str, object]:
        summaries = [
            QuizSummaryPayload(
                id=quiz.id,
                title=quiz.title,
                description=quiz.description,
                duration=quiz.duration_minutes,
                question_count=len(quiz.questions),
            ).to_wire()
            for quiz in store.list_active_quizzes()
        ]
        return _success(summaries)

    @app.get(f"{base_path}/my-attempts")
    def list_my_attempts(candidate: Candidate = Depends(current_candidate)) -> dict[str, object]:
        attempts = [
            _attempt_payload(attempt, store.get_quiz(attempt.quiz_id)).to_wire()
            for attempt in store.list_attempts(candidate)
        ]
        return _success(attempts)

    @app.get(f"{base_path}/attempts/{{attempt_id}}")
    def get_attempt(attempt_id: int, candidate: Candidate = Depends(current_candidate)) -> dict[str, object]:
        attempt = store.get_attempt(attempt_id, candidate)
        quiz = store.get_quiz(attempt.quiz_id)
        return _success(_detailed_attempt_payload(attempt, quiz).to_wire())

    @app.get(f"{base_path}/{{quiz_id}}")
    def get_quiz(quiz_id: int, candidate: Candidate = Depends(current_candidate)) -> dict[str, object]:
        quiz = store.get_quiz(quiz_id)
        return _success(_quiz_payload(quiz, reveal=False).to_wire())

    @app.post(f"{base_path}/submit")
    def submit_quiz(
        payload: SubmitQuizRequest,
        candidate: Candidate = Depends(current_candidate),
    ) -> dict[str, object]:
        answers = [
            SubmittedAnswer(
                question_id=answer.question_id,
                selected_option_id=answer.selected_option_id,
                text_answer=answer.text_answer,
            )
            for answer in payload.answers
        ]
        attempt = store.submit_attempt(payload.attempt_id, candidate, answers)
        quiz = store.get_quiz(attempt.quiz_id)
        return _success(_attempt_payload(attempt, quiz).to_wire())

    @app.post(f"{base_path}/{{quiz_id}}/start")
    def start_quiz(quiz_id: int, candidate: Candidate = Depends(current_candidate)) -> dict[str, object]:
        attempt = store.start_attempt(quiz_id, candidate)
        quiz = store.get_quiz(quiz_id)
        return _success(_attempt_payload(attempt, quiz).to_wire())

    return app


def start_api_server(
    store: QuizStore,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(store)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizScoringServer", daemon=True)
    thread.start()
    # Block until the socket is bound so callers can connect right away.
    while not server.started and thread.is_alive():
        time.sleep(0.05)
    logger.info("Scoring service listening on http://%s:%s/api", host, port)
    return thread
