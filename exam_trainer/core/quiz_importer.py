"""Bulk import of questions from a spreadsheet export (CSV).

Columns are addressed by their header, so order does not matter:

    Frage;Antwort 1;Antwort 1 korrekt;Antwort 2;Antwort 2 korrekt;...;Kategorie;Fragetyp

- ``Antwort 1`` .. ``Antwort 8`` hold the option texts; blank cells are skipped.
- ``Antwort N korrekt`` marks a correct option with ``richtig`` (any case).
- ``Kategorie`` defaults to ``Allgemein``.
- ``Fragetyp`` starting with ``Single`` makes a single-choice question,
  anything else (including an empty cell) a multi-select question.

Both ``,`` and ``;`` are accepted as delimiter. Rows without question text,
options or a correct answer are skipped and counted instead of aborting the
whole file.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from exam_trainer.constants.quiz_constants import DEFAULT_CATEGORY, MAX_IMPORT_OPTIONS
from exam_trainer.core.models import Question, QuestionType, validate_question
from exam_trainer.core.text_normalizer import normalize_text

logger = logging.getLogger(__name__)

_CORRECT_MARKER = "richtig"


class QuizImportError(Exception):
    """Raised when a question file cannot be imported."""


@dataclass(slots=True)
class ImportedQuestions:
    """Questions parsed from one file plus bookkeeping for the admin message."""

    questions: list[Question]
    skipped_rows: int = 0
    source_path: Path | None = field(default=None)


def load_questions_from_file(file_path: Path, association: str) -> ImportedQuestions:
    if file_path.suffix.lower() != ".csv":
        raise QuizImportError("Please choose a CSV file. Other file types are not supported.")
    raw = file_path.read_bytes()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Spreadsheet programs on Windows still write ANSI files.
        text = raw.decode("cp1252")
    result = parse_questions_csv(text, association)
    result.source_path = file_path
    return result


def parse_questions_csv(text: str, association: str) -> ImportedQuestions:
    """Parse CSV text into validated questions tagged with ``association``."""

    association = (association or "").strip()
    if not association:
        raise QuizImportError("Please choose the association the questions belong to.")

    text = text.removeprefix("\ufeff")
    if not text.strip():
        raise QuizImportError("The file is empty.")

    reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=_detect_delimiter(text))
    questions: list[Question] = []
    skipped = 0
    for line_number, row in enumerate(reader, start=2):
        cleaned = {(key or "").strip(): value for key, value in row.items()}
        question = _parse_row(cleaned, association)
        if question is None:
            skipped += 1
            logger.debug("Skipping CSV line %d", line_number)
            continue
        questions.append(question)

    if not questions:
        raise QuizImportError(
            "No questions could be extracted from the CSV file. "
            "Check the column names (e.g. 'Frage', 'Antwort 1', 'Antwort 1 korrekt')."
        )
    logger.info("Parsed %d questions from CSV (%d rows skipped)", len(questions), skipped)
    return ImportedQuestions(questions=questions, skipped_rows=skipped)


def _detect_delimiter(text: str) -> str:
    header = text.splitlines()[0] if text else ""
    return ";" if header.count(";") > header.count(",") else ","


def _cell(row: dict[str, str | None], column: str) -> str:
    value = row.get(column)
    return value if isinstance(value, str) else ""


def _parse_row(row: dict[str, str | None], association: str) -> Question | None:
    question_text = normalize_text(_cell(row, "Frage"))
    if not question_text:
        return None

    options: list[str] = []
    correct: list[int] = []
    for number in range(1, MAX_IMPORT_OPTIONS + 1):
        option = normalize_text(_cell(row, f"Antwort {number}"))
        if not option:
            continue
        if _cell(row, f"Antwort {number} korrekt").strip().lower() == _CORRECT_MARKER:
            correct.append(len(options))
        options.append(option)

    if not options or not correct:
        return None

    raw_type = _cell(row, "Fragetyp").strip()
    question = Question(
        question_text=question_text,
        options=options,
        correct_answer_indices=correct,
        type=QuestionType.SINGLE if raw_type.startswith("Single") else QuestionType.MULTI,
        category=normalize_text(_cell(row, "Kategorie")) or DEFAULT_CATEGORY,
        association=association,
    )
    try:
        validate_question(question)
    except ValueError as exc:
        logger.info("Rejected imported question %r: %s", question_text[:40], exc)
        return None
    return question
