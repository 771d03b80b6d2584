import pytest

from quiz_portal.core.errors import UnknownQuestionError
from quiz_portal.core.models import QuestionStatus
from quiz_portal.core.services.answer_buffer import AnswerBuffer


@pytest.fixture
def buffer(quiz):
    return AnswerBuffer(quiz.questions)


def test_every_question_starts_not_visited(buffer, quiz):
    assert len(buffer) == quiz.question_count
    for question in quiz.questions:
        entry = buffer.get_entry(question.id)
        assert entry.selected_option_id is None
        assert entry.text_answer is None
        assert entry.visited is False
        assert buffer.status_of(question.id) is QuestionStatus.NOT_VISITED


def test_last_selection_wins(buffer):
    buffer.select_option(1, 11)
    buffer.select_option(1, 12)

    entry = buffer.get_entry(1)
    assert entry.selected_option_id == 12
    assert entry.visited is True
    assert buffer.status_of(1) is QuestionStatus.ANSWERED


def test_text_answer_marks_question_answered(buffer):
    buffer.set_text(3, "The time an attempt must end.")

    assert buffer.get_entry(3).text_answer == "The time an attempt must end."
    assert buffer.status_of(3) is QuestionStatus.ANSWERED


def test_whitespace_only_text_counts_as_unanswered(buffer):
    buffer.set_text(3, "   \n ")

    assert buffer.status_of(3) is QuestionStatus.UNANSWERED
    assert buffer.get_entry(3).has_answer is False


def test_clear_keeps_visited_flag(buffer):
    buffer.select_option(2, 21)
    buffer.clear(2)

    entry = buffer.get_entry(2)
    assert entry.selected_option_id is None
    assert entry.visited is True
    assert buffer.status_of(2) is QuestionStatus.UNANSWERED


def test_mark_visited_without_answer(buffer):
    buffer.mark_visited(1)

    assert buffer.status_of(1) is QuestionStatus.UNANSWERED


def test_unknown_question_raises_and_changes_nothing(buffer):
    before = dict(buffer.snapshot())

    with pytest.raises(UnknownQuestionError):
        buffer.select_option(99, 11)
    with pytest.raises(UnknownQuestionError):
        buffer.set_text(99, "text")
    with pytest.raises(UnknownQuestionError):
        buffer.mark_visited(99)

    assert dict(buffer.snapshot()) == before
    assert 99 not in buffer


def test_option_from_another_question_is_rejected(buffer):
    with pytest.raises(ValueError):
        buffer.select_option(1, 21)
    assert buffer.get_entry(1).selected_option_id is None


def test_text_on_choice_question_is_rejected(buffer):
    with pytest.raises(ValueError):
        buffer.set_text(1, "4")


def test_selection_on_short_answer_is_rejected(buffer):
    with pytest.raises(ValueError):
        buffer.select_option(3, 11)


def test_snapshot_is_read_only_copy(buffer):
    snapshot = buffer.snapshot()
    buffer.select_option(1, 11)

    assert snapshot[1].selected_option_id is None
    with pytest.raises(TypeError):
        snapshot[1] = buffer.get_entry(1)


def test_progress_counts_each_status(buffer):
    buffer.select_option(1, 12)
    buffer.mark_visited(2)

    progress = buffer.progress()
    assert (progress.answered, progress.unanswered, progress.not_visited) == (1, 1, 1)
