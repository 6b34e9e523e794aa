from __future__ import annotations

from exam_trainer.core.answer_accumulator import apply_type_change, select_option, truncate_selection
from exam_trainer.core.models import QuestionType


def test_single_mode_replaces_selection():
    assert select_option([2], 0, is_multi=False) == [0]
    assert select_option([], 3, is_multi=False) == [3]


def test_single_mode_click_on_selected_keeps_it():
    assert select_option([1], 1, is_multi=False) == [1]


def test_multi_mode_toggles_and_sorts():
    selection = select_option([], 2, is_multi=True)
    selection = select_option(selection, 0, is_multi=True)
    assert selection == [0, 2]

    assert select_option(selection, 2, is_multi=True) == [0]


def test_select_option_does_not_modify_input():
    current = [1, 3]
    select_option(current, 2, is_multi=True)
    assert current == [1, 3]


def test_truncate_selection_keeps_first():
    assert truncate_selection([2, 0, 1]) == [2]
    assert truncate_selection([]) == []


def test_switch_to_single_truncates_correct_answers(make_question):
    question = make_question(correct=[1, 3], question_type=QuestionType.MULTI)

    changed = apply_type_change(question, QuestionType.SINGLE)

    assert changed.type is QuestionType.SINGLE
    assert changed.correct_answer_indices == [1]


def test_switch_to_multi_keeps_answers(make_question):
    question = make_question(correct=[2])

    changed = apply_type_change(question, QuestionType.MULTI)

    assert changed.type is QuestionType.MULTI
    assert changed.correct_answer_indices == [2]
