from __future__ import annotations

from collections import Counter
import random

from exam_trainer.core.models import QuestionType
from exam_trainer.core.option_shuffler import shuffle_options, shuffle_question


def _sequence(*values: float):
    iterator = iter(values)
    return lambda: next(iterator)


def test_fisher_yates_with_fixed_draws():
    result = shuffle_options(["A", "B", "C", "D"], [1], _sequence(0.6, 0.1, 0.7))

    assert result.options == ["D", "B", "A", "C"]
    assert result.order == [3, 1, 0, 2]
    assert result.correct_indices == [1]


def test_correct_indices_follow_the_texts():
    result = shuffle_options(["A", "B", "C", "D"], [0, 2], _sequence(0.6, 0.1, 0.7))

    assert [result.options[i] for i in result.correct_indices] == ["A", "C"]
    assert result.correct_indices == [2, 3]


def test_duplicate_text_is_marked_correct_by_default():
    result = shuffle_options(["Ja", "Nein", "Ja"], [0], lambda: 0.999999)

    assert result.correct_indices == [0, 2]


def test_track_by_index_follows_positions():
    result = shuffle_options(["Ja", "Nein", "Ja"], [0], lambda: 0.999999, track_by_index=True)

    assert result.correct_indices == [0]


def test_input_is_not_modified():
    options = ["A", "B", "C"]
    correct = [2]

    shuffle_options(options, correct, random.Random(3).random)

    assert options == ["A", "B", "C"]
    assert correct == [2]


def test_shuffle_keeps_every_option_once():
    rng = random.Random(11)
    for _ in range(50):
        result = shuffle_options(["A", "B", "C", "D", "E"], [4], rng.random)
        assert Counter(result.options) == Counter("ABCDE")
        assert result.options[result.correct_indices[0]] == "E"


def test_shuffle_question_returns_copy(make_question):
    question = make_question(options=["A", "B", "C"], correct=[0, 1], question_type=QuestionType.MULTI)

    shuffled = shuffle_question(question, _sequence(0.0, 0.0))

    assert shuffled.options == ["B", "C", "A"]
    assert shuffled.correct_answer_indices == [0, 2]
    assert question.options == ["A", "B", "C"]
