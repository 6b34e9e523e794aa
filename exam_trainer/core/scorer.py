"""Scoring of a finished quiz attempt."""

from __future__ import annotations

from collections.abc import Sequence

from exam_trainer.core.models import OptionState, Question, QuestionOutcome, QuizOutcome


def score_quiz(questions: Sequence[Question], user_answers: Sequence[Sequence[int]]) -> QuizOutcome:
    """Compare selections with the correct answers; no partial credit is given."""
    per_question: list[QuestionOutcome] = []
    for index, question in enumerate(questions):
        selection = user_answers[index] if index < len(user_answers) else ()
        per_question.append(_score_question(question, selection))

    correct_count = sum(1 for outcome in per_question if outcome.is_correct)
    return QuizOutcome(
        correct_count=correct_count,
        total_count=len(questions),
        percentage=_rounded_percentage(correct_count, len(questions)),
        per_question=tuple(per_question),
    )


def is_passed(percentage: int, threshold: int) -> bool:
    return percentage >= threshold


def _score_question(question: Question, selection: Sequence[int]) -> QuestionOutcome:
    selected = sorted(set(selection))
    correct = sorted(set(question.correct_answer_indices))
    states = tuple(
        _classify_option(index in correct, index in selected)
        for index in range(len(question.options))
    )
    return QuestionOutcome(is_correct=selected == correct, option_states=states)


def _classify_option(is_correct: bool, is_selected: bool) -> OptionState:
    if is_correct and is_selected:
        return OptionState.CORRECTLY_SELECTED
    if is_selected:
        return OptionState.INCORRECTLY_SELECTED
    if is_correct:
        return OptionState.MISSED_CORRECT
    return OptionState.NEUTRAL


def _rounded_percentage(correct_count: int, total_count: int) -> int:
    if total_count == 0:
        return 0
    # Integer half-up rounding of correct / total * 100.
    return (correct_count * 200 + total_count) // (2 * total_count)
