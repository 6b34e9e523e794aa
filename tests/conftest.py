from __future__ import annotations

import random

import pytest

from exam_trainer.core.models import Question, QuestionType
from exam_trainer.core.services.memory_store import MemoryDataStore


def _question(
    text: str = "Wie viele Zähne hat ein erwachsener Hund?",
    options: list[str] | None = None,
    correct: list[int] | None = None,
    question_type: QuestionType = QuestionType.SINGLE,
    category: str | None = "Hundeführerschein",
    association: str | None = "DZKB",
) -> Question:
    return Question(
        question_text=text,
        options=options if options is not None else ["42", "32", "28", "46"],
        correct_answer_indices=correct if correct is not None else [0],
        type=question_type,
        category=category,
        association=association,
    )


@pytest.fixture
def make_question():
    return _question


@pytest.fixture
def sample_questions() -> list[Question]:
    return [
        _question(),
        _question(
            text="Welche Signale können Stress anzeigen?",
            options=["Gähnen", "Hecheln", "Schwanzwedeln", "Tiefschlaf"],
            correct=[0, 1],
            question_type=QuestionType.MULTI,
        ),
        _question(
            text="Wann ist ein Schulhund einsatzbereit?",
            options=["Nach der Prüfung", "Sofort", "Mit acht Wochen"],
            correct=[0],
            category="Schulhund",
            association="ProHunde",
        ),
    ]


@pytest.fixture
def store(sample_questions) -> MemoryDataStore:
    return MemoryDataStore(
        questions=sample_questions,
        admin_users={"admin": "geheim"},
        rng=random.Random(7),
    )


@pytest.fixture
def keep_order():
    """Random source that leaves the option order untouched."""
    return lambda: 0.999999
