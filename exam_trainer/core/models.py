"""Domain models for the exam trainer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class QuestionType(str, Enum):
    """Selection mode of a question."""

    SINGLE = "Single"
    MULTI = "Multi"

    @classmethod
    def parse(cls, value: str | None) -> "QuestionType":
        """Map stored or imported labels ("Single Choice", "Multi", ...) to a type."""
        if value is None:
            return cls.SINGLE
        text = str(value).strip()
        if not text or text.startswith("Single"):
            return cls.SINGLE
        return cls.MULTI


@dataclass(slots=True)
class Question:
    """One quiz item with one or more correct options."""

    question_text: str
    options: list[str]
    correct_answer_indices: list[int]
    type: QuestionType = QuestionType.SINGLE
    category: str | None = None
    association: str | None = None
    image_url: str | None = None
    id: int | None = None
    created_at: datetime | None = None

    @property
    def is_multi(self) -> bool:
        return self.type is QuestionType.MULTI

    def copy_with(self, **changes: object) -> "Question":
        return replace(self, **changes)


@dataclass(slots=True)
class AccessCode:
    """Credential gating student access to the trainer."""

    id: int
    code: str
    email: str | None = None
    student_name: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    sent_at: datetime | None = None  # Delivery tracking for the self-service mail
    send_status: str | None = None
    send_error: str | None = None


class OptionState(str, Enum):
    """Review classification of a single option after scoring."""

    CORRECTLY_SELECTED = "correctly_selected"
    INCORRECTLY_SELECTED = "incorrectly_selected"
    MISSED_CORRECT = "missed_correct"
    NEUTRAL = "neutral"


@dataclass(slots=True, frozen=True)
class QuestionOutcome:
    """Per-question result used by the review screen."""

    is_correct: bool
    option_states: tuple[OptionState, ...]


@dataclass(slots=True, frozen=True)
class QuizOutcome:
    """Immutable scoring snapshot of a finished quiz."""

    correct_count: int
    total_count: int
    percentage: int
    per_question: tuple[QuestionOutcome, ...] = field(default_factory=tuple)


def validate_question(question: Question) -> Question:
    """Check the structural invariants of a question and return it unchanged.

    Raises:
        ValueError: if the text is empty, no options are given, an index is
            out of range or a single-choice question has more than one answer.
    """
    if not question.question_text or not question.question_text.strip():
        raise ValueError("Question text must not be empty.")
    if not question.options:
        raise ValueError("A question needs at least one option.")
    if any(not str(option).strip() for option in question.options):
        raise ValueError("Option text cannot be empty.")
    if not question.correct_answer_indices:
        raise ValueError("A question needs at least one correct answer.")
    if len(set(question.correct_answer_indices)) != len(question.correct_answer_indices):
        raise ValueError("Correct answer indices must be unique.")
    for index in question.correct_answer_indices:
        if not 0 <= index < len(question.options):
            raise ValueError(f"Correct answer index {index} is out of range.")
    if question.type is QuestionType.SINGLE and len(question.correct_answer_indices) != 1:
        raise ValueError("Single choice questions need exactly one correct answer.")
    return question
