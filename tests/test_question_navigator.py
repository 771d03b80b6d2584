import pytest

from quiz_portal.core.models import QuestionStatus
from quiz_portal.core.services.answer_buffer import AnswerBuffer
from quiz_portal.core.services.question_navigator import QuestionNavigator


@pytest.fixture
def answers(quiz):
    return AnswerBuffer(quiz.questions)


@pytest.fixture
def navigator(quiz, answers):
    return QuestionNavigator(quiz.questions, answers)


def test_starts_on_first_question(navigator, quiz):
    assert navigator.current_index == 0
    assert navigator.current_question == quiz.questions[0]
    assert navigator.count == 3


def test_empty_question_list_is_rejected(answers):
    with pytest.raises(ValueError):
        QuestionNavigator([], answers)


@pytest.mark.parametrize("index", [-1, 3, 100])
def test_out_of_range_go_to_leaves_cursor(navigator, index):
    navigator.go_to(1)

    assert navigator.go_to(index) is False
    assert navigator.current_index == 1


def test_go_to_jumps_anywhere(navigator, quiz):
    assert navigator.go_to(2) is True
    assert navigator.current_question == quiz.questions[2]
    assert navigator.go_to(0) is True
    assert navigator.go_to(0) is False


def test_advance_stops_at_last_question(navigator):
    assert navigator.advance() is True
    assert navigator.advance() is True
    assert navigator.is_last
    assert navigator.advance() is False
    assert navigator.current_index == 2


def test_statuses_follow_the_answer_buffer(navigator, answers):
    answers.mark_visited(1)
    answers.select_option(2, 22)

    assert navigator.statuses() == [
        QuestionStatus.UNANSWERED,
        QuestionStatus.ANSWERED,
        QuestionStatus.NOT_VISITED,
    ]
    assert navigator.status_at(1) is QuestionStatus.ANSWERED


def test_moving_never_writes_answers(navigator, answers):
    navigator.go_to(2)
    navigator.go_to(1)

    assert answers.progress().not_visited == 3
