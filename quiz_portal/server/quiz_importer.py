"""Utilities for importing quizzes from a human-friendly text file.

File format: an optional header block followed by question blocks, separated
by blank lines or '---'.

    TITLE: Quiz title
    DURATION: minutes
    DESCRIPTION: optional one-line description

    Q: Question text (supports markdown). Additional lines until the next
       marker are treated as part of the question.
    TYPE: MULTIPLE_CHOICE|TRUE_FALSE|SHORT_ANSWER   (optional, default MULTIPLE_CHOICE)
    POINTS: positive integer                       (optional, default 1)
    A: First option text
    B: Second option text
    ...
    CORRECT: A                                     (choice questions only)

TRUE_FALSE questions may omit their options; "True" and "False" are used.
SHORT_ANSWER questions take no options and no CORRECT line.

Example:

    TITLE: Arithmetic
    DURATION: 5

    Q: What is $2 + 2$?
    A: 3
    B: 4
    CORRECT: B
    POINTS: 2
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import string

from quiz_portal.core.models import QuestionType
from quiz_portal.server.quiz_store import AuthoredOption, AuthoredQuestion, AuthoredQuiz


class QuizImportError(Exception):
    """Raised when a quiz definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for the source path and the parsed quiz."""

    source_path: Path
    quiz: AuthoredQuiz


_OPTION_LETTERS = string.ascii_uppercase
_HEADER_KEYS = ("TITLE:", "DURATION:", "DESCRIPTION:")
_TRUE_FALSE_OPTIONS = ("True", "False")


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    quiz = parse_quiz_text(text, default_title=file_path.stem)
    return ImportedQuiz(source_path=file_path, quiz=quiz)


def parse_quiz_text(text: str, *, default_title: str = "Untitled quiz") -> AuthoredQuiz:
    blocks = _split_blocks(text)
    title = default_title
    duration: int | None = None
    description: str | None = None
    if blocks and blocks[0].lstrip().upper().startswith(_HEADER_KEYS):
        title, duration, description = _parse_header(blocks.pop(0), title)

    questions = [_parse_block(block) for block in blocks]
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    if duration is None:
        raise QuizImportError("DURATION must be given in the header block.")
    return AuthoredQuiz(
        id=0,  # overwritten by QuizStore when the quiz is added
        title=title,
        duration_minutes=duration,
        questions=questions,
        description=description,
    )


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _parse_header(block: str, default_title: str) -> tuple[str, int | None, str | None]:
    title = default_title
    duration: int | None = None
    description: str | None = None
    for raw_line in block.splitlines():
        line = raw_line.strip()
        key, _, value = line.partition(":")
        key = key.upper()
        value = value.strip()
        if key == "TITLE":
            if not value:
                raise QuizImportError("TITLE cannot be empty.")
            title = value
        elif key == "DURATION":
            duration = _parse_positive_int(value, "DURATION")
        elif key == "DESCRIPTION":
            description = value or None
        else:
            raise QuizImportError(f"Unknown header line: '{line}'.")
    return title, duration, description


def _parse_block(block: str) -> AuthoredQuestion:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    question_type = QuestionType.MULTIPLE_CHOICE
    points = 1
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if upper.startswith("TYPE:"):
            raw_type = line.split(":", 1)[1].strip().upper()
            try:
                question_type = QuestionType(raw_type)
            except ValueError as exc:
                raise QuizImportError(f"Unknown question TYPE '{raw_type}'.") from exc
            current_section = None
            continue

        if upper.startswith("POINTS:"):
            points = _parse_positive_int(line.split(":", 1)[1].strip(), "POINTS")
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in _OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in options:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text missing (Q: ...)")

    option_texts = _ordered_options(options)
    if question_type is QuestionType.SHORT_ANSWER:
        if option_texts or correct_letter is not None:
            raise QuizImportError("SHORT_ANSWER questions cannot have options or CORRECT.")
        return AuthoredQuestion(id=0, text=question_text, type=question_type, points=points)

    if question_type is QuestionType.TRUE_FALSE:
        if not option_texts:
            option_texts = list(_TRUE_FALSE_OPTIONS)
        if correct_letter in ("TRUE", "FALSE"):
            correct_letter = "A" if correct_letter == "TRUE" else "B"
        if len(option_texts) != 2:
            raise QuizImportError("TRUE_FALSE questions must have exactly two options.")
    elif len(option_texts) < 2:
        raise QuizImportError("MULTIPLE_CHOICE questions need at least two options.")

    if correct_letter is None:
        raise QuizImportError("CORRECT is required for choice questions.")
    correct_index = _OPTION_LETTERS.find(correct_letter) if len(correct_letter) == 1 else -1
    if not 0 <= correct_index < len(option_texts):
        raise QuizImportError(f"CORRECT must name one of the options, got '{correct_letter}'.")

    return AuthoredQuestion(
        id=0,
        text=question_text,
        type=question_type,
        points=points,
        options=[
            AuthoredOption(id=0, text=text, is_correct=index == correct_index)
            for index, text in enumerate(option_texts)
        ],
    )


def _ordered_options(options: dict[str, str]) -> list[str]:
    letters = sorted(options)
    expected = list(_OPTION_LETTERS[: len(letters)])
    if letters != expected:
        raise QuizImportError("Options must be lettered consecutively starting at A.")
    cleaned = [options[letter].strip() for letter in letters]
    if any(not text for text in cleaned):
        raise QuizImportError("Option text cannot be empty.")
    return cleaned


def _parse_positive_int(raw_value: str, field_name: str) -> int:
    if not raw_value:
        raise QuizImportError(f"{field_name} must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise QuizImportError(f"{field_name} must be an integer.") from exc
    if parsed_value <= 0:
        raise QuizImportError(f"{field_name} must be a positive integer.")
    return parsed_value
