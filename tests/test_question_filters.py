from __future__ import annotations

import pytest

from exam_trainer.core.models import QuestionType
from exam_trainer.core.question_filters import (
    filter_questions,
    list_categories,
    next_sort_state,
    select_all,
    select_ids_matching,
    sort_questions,
    toggle_id,
)


@pytest.fixture
def bank(store):
    return store.fetch_all_questions()


def test_search_matches_text_and_options_case_insensitive(bank):
    assert [q.id for q in filter_questions(bank, "SCHULHUND")] == [3]
    assert [q.id for q in filter_questions(bank, "hecheln")] == [2]
    assert len(filter_questions(bank, "  ")) == 3


def test_filters_combine(bank):
    result = filter_questions(bank, category="Hundeführerschein", question_type=QuestionType.MULTI)

    assert [q.id for q in result] == [2]
    assert [q.id for q in filter_questions(bank, association="ProHunde")] == [3]


def test_sort_by_text_and_direction(bank):
    ascending = sort_questions(bank, "question_text")
    descending = sort_questions(bank, "question_text", descending=True)

    assert [q.id for q in ascending] == [3, 2, 1]
    assert [q.id for q in descending] == [1, 2, 3]


def test_sort_without_key_keeps_order(bank):
    assert [q.id for q in sort_questions(bank, None)] == [1, 2, 3]


def test_sort_rejects_unknown_key(bank):
    with pytest.raises(ValueError):
        sort_questions(bank, "id")


def test_next_sort_state_cycle():
    assert next_sort_state(None, False, "category") == ("category", False)
    assert next_sort_state("category", False, "category") == ("category", True)
    assert next_sort_state("category", True, "category") == ("category", False)
    assert next_sort_state("category", True, "type") == ("type", False)


def test_list_categories_first_seen(bank):
    assert list_categories(bank) == ["Hundeführerschein", "Schulhund"]


def test_select_matching_adds_to_selection(bank):
    selected, count = select_ids_matching(bank, {3}, category="Hundeführerschein")

    assert selected == {1, 2, 3}
    assert count == 2


def test_toggle_and_select_all(bank):
    selected = toggle_id(set(), 2)
    assert selected == {2}
    assert toggle_id(selected, 2) == set()

    assert select_all(bank, True) == {1, 2, 3}
    assert select_all(bank, False) == set()
