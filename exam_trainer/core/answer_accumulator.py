"""Selection rules for single- and multi-select questions."""

from __future__ import annotations

from collections.abc import Sequence

from exam_trainer.core.models import Question, QuestionType


def select_option(current_selection: Sequence[int], candidate_index: int, is_multi: bool) -> list[int]:
    """Return the selection that results from clicking ``candidate_index``.

    Single mode always yields ``[candidate_index]``. Multi mode toggles the
    index and keeps the result sorted ascending. The input is left untouched.
    """
    if not is_multi:
        return [candidate_index]
    if candidate_index in current_selection:
        return sorted(index for index in current_selection if index != candidate_index)
    return sorted([*current_selection, candidate_index])


def truncate_selection(selection: Sequence[int]) -> list[int]:
    """Keep at most the first previously selected index."""
    return list(selection[:1])


def apply_type_change(question: Question, new_type: QuestionType) -> Question:
    """Switch the question type, truncating correct answers when going to single."""
    indices = list(question.correct_answer_indices)
    if new_type is QuestionType.SINGLE and len(indices) > 1:
        indices = truncate_selection(indices)
    return question.copy_with(type=new_type, correct_answer_indices=indices)
