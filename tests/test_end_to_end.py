"""Candidate session driven against the reference service over ASGI."""

import asyncio

import httpx
import pytest

from quiz_portal.client.scoring_client import ScoringClient
from quiz_portal.core.models import AttemptStatus
from quiz_portal.core.prompts import AutoAcceptPrompt
from quiz_portal.core.session_controller import SessionController, SessionStage
from quiz_portal.server.api_server import create_api_app
from quiz_portal.server.quiz_importer import parse_quiz_text
from quiz_portal.server.quiz_store import QuizStore

QUIZ_TEXT = """
TITLE: Capitals
DURATION: 2

Q: Capital of France?
A: Paris
B: Lyon
CORRECT: A
POINTS: 3

Q: Capital of Italy?
A: Milan
B: Rome
CORRECT: B

Q: Name another capital.
TYPE: SHORT_ANSWER
"""


@pytest.fixture
def store(time_source):
    store = QuizStore(time_source=time_source)
    store.add_quiz(parse_quiz_text(QUIZ_TEXT))
    store.register_candidate("alice-token", "Alice")
    return store


@pytest.fixture
def scoring_client(store):
    transport = httpx.ASGITransport(app=create_api_app(store))
    return ScoringClient(http_client=httpx.AsyncClient(transport=transport, base_url="http://portal.test/api"))


def _controller(scoring_client, auth, scheduler, time_source, finished):
    return SessionController(
        scoring_client,
        auth,
        1,
        prompt=AutoAcceptPrompt(),
        scheduler=scheduler,
        time_source=time_source,
        on_finished=finished.append,
    )


@pytest.mark.asyncio
async def test_candidate_submits_and_reviews_result(scoring_client, auth, scheduler, time_source):
    finished = []
    controller = _controller(scoring_client, auth, scheduler, time_source, finished)
    await controller.start()

    paris, _ = controller.current_question.options
    controller.select_option(paris.id)
    controller.save_and_next()
    milan, _ = controller.current_question.options
    controller.select_option(milan.id)
    controller.go_to(2)
    controller.set_text("Madrid")
    time_source.advance(45)

    attempt = await controller.submit_now()

    assert attempt.score == 3
    assert attempt.total_points == 5
    assert attempt.status is AttemptStatus.EVALUATED
    assert attempt.time_taken_seconds == 45
    assert finished == [attempt]

    result = await controller.load_result()
    assert result.percentage == 60
    assert result.grade_band == "Average"
    assert [review.is_correct for review in result.answers] == [True, False, None]
    assert result.answers[2].text_answer == "Madrid"


@pytest.mark.asyncio
async def test_expired_attempt_is_submitted_automatically(scoring_client, auth, scheduler, time_source):
    finished = []
    controller = _controller(scoring_client, auth, scheduler, time_source, finished)
    await controller.start()
    controller.select_option(controller.current_question.options[0].id)

    time_source.advance(2 * 60 + 1)
    scheduler.fire()
    for _ in range(200):
        if finished:
            break
        await asyncio.sleep(0.01)

    assert controller.stage is SessionStage.FINISHED
    assert finished[0].score == 3
    # Exceeded means more whole minutes than allowed.
    assert finished[0].exceeded_time_limit is False
    assert controller.submit_now(confirm=False) is None
