from pathlib import Path

import pytest

from quiz_portal.core.models import QuestionType
from quiz_portal.server.quiz_importer import QuizImportError, load_quiz_from_file, parse_quiz_text

SAMPLE_QUIZ = Path(__file__).resolve().parents[1] / "quiz_portal" / "data" / "sample_quiz.txt"


def test_bundled_sample_quiz_parses():
    imported = load_quiz_from_file(SAMPLE_QUIZ)

    quiz = imported.quiz
    assert imported.source_path == SAMPLE_QUIZ
    assert quiz.title == "General Knowledge Check"
    assert quiz.duration_minutes == 10
    assert quiz.description
    assert [q.type for q in quiz.questions] == [
        QuestionType.MULTIPLE_CHOICE,
        QuestionType.MULTIPLE_CHOICE,
        QuestionType.TRUE_FALSE,
        QuestionType.MULTIPLE_CHOICE,
        QuestionType.SHORT_ANSWER,
    ]


def test_question_fields_are_read():
    quiz = parse_quiz_text(
        "TITLE: T\nDURATION: 5\n\nQ: Pick one\nwith a second line\nA: x\nB: y\nC: z\nCORRECT: c\nPOINTS: 4\n"
    )

    question = quiz.questions[0]
    assert question.text == "Pick one\nwith a second line"
    assert question.points == 4
    assert [option.text for option in question.options] == ["x", "y", "z"]
    assert [option.is_correct for option in question.options] == [False, False, True]


def test_true_false_defaults_its_options():
    quiz = parse_quiz_text("DURATION: 5\n---\nQ: Sure?\nTYPE: TRUE_FALSE\nCORRECT: TRUE\n")

    question = quiz.questions[0]
    assert quiz.title == "Untitled quiz"
    assert [option.text for option in question.options] == ["True", "False"]
    assert question.options[0].is_correct is True


def test_short_answer_has_no_options():
    quiz = parse_quiz_text("DURATION: 5\n\nQ: Explain\nTYPE: SHORT_ANSWER\n")

    assert quiz.questions[0].options == []


@pytest.mark.parametrize(
    "text, message",
    [
        ("Q: Lonely\nA: 1\nB: 2\nCORRECT: A\n", "DURATION"),
        ("DURATION: 5\n", "any questions"),
        ("DURATION: 0\n\nQ: x\nA: 1\nB: 2\nCORRECT: A\n", "positive"),
        ("DURATION: 5\n\nQ: x\nA: 1\nC: 2\nCORRECT: A\n", "consecutively"),
        ("DURATION: 5\n\nQ: x\nA: 1\nB: 2\nCORRECT: D\n", "CORRECT must name"),
        ("DURATION: 5\n\nQ: x\nA: 1\nB: 2\n", "CORRECT is required"),
        ("DURATION: 5\n\nQ: x\nA: only\nCORRECT: A\n", "at least two"),
        ("DURATION: 5\n\nQ: x\nTYPE: ESSAY\n", "Unknown question TYPE"),
        ("DURATION: 5\n\nQ: x\nTYPE: SHORT_ANSWER\nA: 1\n", "SHORT_ANSWER"),
        ("DURATION: 5\n\nstray text\n", "outside of a known section"),
        ("DURATION: 5\nAUTHOR: me\n\nQ: x\nA: 1\nB: 2\nCORRECT: A\n", "Unknown header"),
    ],
)
def test_invalid_definitions_are_rejected(text, message):
    with pytest.raises(QuizImportError, match=message):
        parse_quiz_text(text)
