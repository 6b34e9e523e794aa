from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from exam_trainer.core.errors import DataStoreError, QuestionsNotFoundError
from exam_trainer.core.models import QuestionType
from exam_trainer.core.services.memory_store import MemoryDataStore


def test_fetch_questions_samples_without_duplicates(store):
    questions = store.fetch_questions(5)

    assert len(questions) == 3
    assert len({q.id for q in questions}) == 3


def test_fetch_questions_respects_count(store):
    assert len(store.fetch_questions(2)) == 2


def test_module_filter_is_case_insensitive(store):
    questions = store.fetch_questions(10, "schulhund")

    assert [q.category for q in questions] == ["Schulhund"]


def test_no_match_raises(store):
    with pytest.raises(QuestionsNotFoundError):
        store.fetch_questions(5, "Agility")


def test_non_positive_count_is_rejected(store):
    with pytest.raises(ValueError):
        store.fetch_questions(0)


def test_create_assigns_ids_and_sorts_indices(store, make_question):
    created = store.create_question(make_question(correct=[2, 0], question_type=QuestionType.MULTI))

    assert created.id == 4
    assert created.correct_answer_indices == [0, 2]
    assert created.created_at is not None


def test_create_rejects_invalid_question(store, make_question):
    with pytest.raises(ValueError):
        store.create_question(make_question(correct=[7]))


def test_update_and_delete(store):
    first = store.fetch_all_questions()[0]

    store.update_question(first.copy_with(question_text="Neu"))
    assert store.fetch_all_questions()[0].question_text == "Neu"

    store.delete_question(first.id)
    assert [q.id for q in store.fetch_all_questions()] == [2, 3]

    with pytest.raises(DataStoreError):
        store.delete_question(first.id)


def test_bulk_delete(store):
    store.delete_questions([1, 3])
    store.delete_questions([])

    assert [q.id for q in store.fetch_all_questions()] == [2]


def test_access_code_lifecycle():
    store = MemoryDataStore()
    record = store.create_access_code("MUTIG-PFOTE-417", "Anna", "anna@example.org")

    assert store.validate_access_code(" MUTIG-PFOTE-417 ")
    assert not store.validate_access_code("")

    store.update_access_code(record.id, is_active=False)
    assert not store.validate_access_code("MUTIG-PFOTE-417")

    with pytest.raises(ValueError):
        store.update_access_code(record.id, code="OTHER")

    store.delete_access_code(record.id)
    assert store.fetch_all_access_codes() == []


def test_duplicate_code_is_rejected():
    store = MemoryDataStore()
    store.create_access_code("TREU-LEINE-100", "Ben", "ben@example.org")

    with pytest.raises(DataStoreError):
        store.create_access_code("TREU-LEINE-100", "Ben", "ben@example.org")


def test_expired_code_is_rejected():
    store = MemoryDataStore(access_code_max_age_days=365)
    store.create_access_code("BRAV-WUFF-200", "Ben", "ben@example.org")

    later = datetime.now(timezone.utc) + timedelta(days=400)

    assert store.validate_access_code("BRAV-WUFF-200")
    assert not store.validate_access_code("BRAV-WUFF-200", now=later)


def test_find_active_code_by_email_ignores_case_and_inactive():
    store = MemoryDataStore()
    old = store.create_access_code("A-A-100", "Anna", "Anna@Example.org")
    newest = store.create_access_code("B-B-200", "Anna", "anna@example.org")
    store.update_access_code(newest.id, is_active=False)

    assert store.find_active_code_by_email(" ANNA@example.org ").id == old.id
    assert store.find_active_code_by_email("bob@example.org") is None


def test_new_code_stores_lowercased_email():
    store = MemoryDataStore()
    record = store.create_access_code("A-A-100", "  Anna ", " Anna@Example.ORG ")

    assert record.student_name == "Anna"
    assert record.email == "anna@example.org"


@pytest.mark.parametrize(
    ("name", "email"),
    [(None, "anna@example.org"), ("  ", "anna@example.org"), ("Anna", None), ("Anna", " "), ("Anna", "anna")],
)
def test_new_code_requires_name_and_email(name, email):
    store = MemoryDataStore()

    with pytest.raises(ValueError):
        store.create_access_code("A-A-100", name, email)

    assert store.fetch_all_access_codes() == []


@pytest.mark.parametrize("pattern", ["*", "%", "%@example.org", "anna_example.org", "ANNA@%"])
def test_find_active_code_by_email_treats_wildcards_literally(pattern):
    store = MemoryDataStore()
    store.create_access_code("A-A-100", "Anna", "anna@example.org")

    assert store.find_active_code_by_email(pattern) is None


def test_admin_credentials(store):
    assert store.validate_admin_credentials("admin", "geheim")
    assert not store.validate_admin_credentials("admin", "falsch")
    assert not store.validate_admin_credentials("unknown", "geheim")
    assert not store.validate_admin_credentials("admin", "")


def test_study_guide_round_trip(store):
    assert store.fetch_study_guide() is None

    store.upload_study_guide(b"%PDF-1.4")

    assert store.fetch_study_guide() == b"%PDF-1.4"
    with pytest.raises(ValueError):
        store.upload_study_guide(b"")
