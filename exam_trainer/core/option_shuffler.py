"""Randomized presentation order for answer options."""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from exam_trainer.core.models import Question

RandomSource = Callable[[], float]


@dataclass(slots=True, frozen=True)
class ShuffledOptions:
    """Options in display order plus the remapped correct indices."""

    options: list[str]
    correct_indices: list[int]
    order: list[int]  # order[new_position] == original_position


def shuffle_options(
    options: Sequence[str],
    correct_indices: Sequence[int],
    random_source: RandomSource | None = None,
    *,
    track_by_index: bool = False,
) -> ShuffledOptions:
    """Fisher-Yates shuffle of ``options`` that keeps track of the correct ones.

    Args:
        options: Option texts in their stored order. Not modified.
        correct_indices: Indices of the correct options in ``options``.
        random_source: Callable returning floats in ``[0, 1)``. Defaults to
            :func:`random.random`; tests pass a fixed sequence.
        track_by_index: When ``False`` (default) correctness is re-derived by
            comparing option texts, so every duplicate of a correct text is
            marked correct. When ``True`` the original positions are followed
            through the permutation instead.
    """
    draw = random_source or random.random
    correct_texts = {options[index] for index in correct_indices}
    correct_positions = set(correct_indices)

    order = list(range(len(options)))
    for i in range(len(order) - 1, 0, -1):
        j = int(draw() * (i + 1))
        order[i], order[j] = order[j], order[i]

    shuffled = [options[original] for original in order]
    if track_by_index:
        new_correct = [pos for pos, original in enumerate(order) if original in correct_positions]
    else:
        new_correct = [pos for pos, text in enumerate(shuffled) if text in correct_texts]
    return ShuffledOptions(options=shuffled, correct_indices=sorted(new_correct), order=order)


def shuffle_question(
    question: Question,
    random_source: RandomSource | None = None,
    *,
    track_by_index: bool = False,
) -> Question:
    """Return a copy of ``question`` with its options in a random order."""
    result = shuffle_options(
        question.options,
        question.correct_answer_indices,
        random_source,
        track_by_index=track_by_index,
    )
    return question.copy_with(options=result.options, correct_answer_indices=result.correct_indices)
