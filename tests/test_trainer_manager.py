from __future__ import annotations

import pytest

from exam_trainer.core.errors import DataStoreError, QuestionsNotFoundError
from exam_trainer.core.services.memory_store import MemoryDataStore
from exam_trainer.core.services.quiz_session import SessionState
from exam_trainer.core.services.trainer_manager import AuthenticationRequiredError, TrainerManager

CODE = "MUTIG-PFOTE-417"


@pytest.fixture
def manager(store, keep_order) -> TrainerManager:
    store.create_access_code(CODE, "Anna", "anna@example.org")
    return TrainerManager(store, random_source=keep_order)


@pytest.fixture
def token(manager) -> str:
    token = manager.new_token()
    assert manager.login(token, CODE)
    return token


def _answer_all_correctly(manager, token):
    view = manager.get_view(token)
    for index, question in enumerate(view.questions):
        for option in question.correct_answer_indices:
            manager.select_answer(token, index, option)


def test_login_rejects_unknown_code(manager):
    token = manager.new_token()

    assert not manager.login(token, "FALSCH-CODE-000")
    assert not manager.is_authenticated(token)
    with pytest.raises(AuthenticationRequiredError):
        manager.get_view(token)


def test_login_rejects_inactive_code(manager, store):
    record = store.fetch_access_code(CODE)
    store.update_access_code(record.id, is_active=False)

    assert not manager.login(manager.new_token(), CODE)


def test_login_again_keeps_running_attempt(manager, token):
    manager.start_quiz(token, 5)
    manager.select_answer(token, 0, 0)

    assert manager.login(token, f" {CODE} ")

    view = manager.get_view(token)
    assert view.state is SessionState.QUIZ
    assert view.user_answers[0] == (0,)
    assert manager.active_session_count() == 1


def test_login_with_other_code_starts_fresh(manager, store, token):
    store.create_access_code("TREU-LEINE-100", "Ben", "ben@example.org")
    manager.start_quiz(token, 5)

    assert manager.login(token, "TREU-LEINE-100")

    assert manager.get_view(token).state is SessionState.CONFIG


def test_login_does_not_log_the_code(manager, caplog):
    with caplog.at_level("INFO", logger="exam_trainer.core.services.trainer_manager"):
        assert manager.login(manager.new_token(), CODE)
        assert not manager.login(manager.new_token(), "FALSCH-CODE-000")

    assert caplog.records
    assert all(CODE not in record.getMessage() for record in caplog.records)
    assert all("FALSCH" not in record.getMessage() for record in caplog.records)


def test_sessions_are_independent(manager, token):
    other = manager.new_token()
    manager.login(other, CODE)

    manager.start_quiz(token, 5)

    assert manager.get_view(token).state is SessionState.QUIZ
    assert manager.get_view(other).state is SessionState.CONFIG
    assert manager.active_session_count() == 2


def test_full_attempt_passes(manager, token):
    manager.start_quiz(token, 5)
    _answer_all_correctly(manager, token)
    manager.request_submit(token)

    outcome = manager.confirm_submit(token)
    view = manager.get_view(token)

    assert outcome.percentage == 100
    assert view.state is SessionState.RESULTS
    assert view.passed
    assert view.answered_count == 3


def test_failed_attempt(manager, token):
    manager.start_quiz(token, 5)
    manager.request_submit(token)
    manager.confirm_submit(token)

    view = manager.get_view(token)
    assert view.outcome.percentage == 0
    assert not view.passed


def test_module_filter(manager, token):
    manager.start_quiz(token, 10, "Schulhund")

    view = manager.get_view(token)
    assert [q.category for q in view.questions] == ["Schulhund"]


def test_invalid_count_is_rejected(manager, token):
    with pytest.raises(ValueError):
        manager.start_quiz(token, 7)


def test_no_questions_sets_error(keep_order):
    store = MemoryDataStore()
    store.create_access_code(CODE, "Anna", "anna@example.org")
    manager = TrainerManager(store, random_source=keep_order)
    token = manager.new_token()
    manager.login(token, CODE)

    manager.start_quiz(token, 5)

    view = manager.get_view(token)
    assert view.state is SessionState.CONFIG
    assert view.error == QuestionsNotFoundError.user_message
    assert not view.is_busy

    manager.dismiss_error(token)
    assert manager.get_view(token).error is None


def test_unexpected_store_failure_is_reported_generically(manager, token, monkeypatch):
    def broken(count, module_filter=None):
        raise RuntimeError("socket closed")

    monkeypatch.setattr(manager.store, "fetch_questions", broken)

    manager.start_quiz(token, 5)

    assert manager.get_view(token).error == DataStoreError.user_message


def test_navigation(manager, token):
    manager.start_quiz(token, 5)

    manager.next_question(token)
    manager.next_question(token)
    manager.next_question(token)
    assert manager.get_view(token).current_index == 2

    manager.previous_question(token)
    assert manager.get_view(token).current_index == 1

    manager.navigate(token, 0)
    assert manager.get_view(token).current_index == 0


def test_logout_drops_session(manager, token):
    manager.logout(token)

    assert not manager.is_authenticated(token)
    with pytest.raises(AuthenticationRequiredError):
        manager.start_quiz(token, 5)


def test_study_guide_passthrough(manager, store):
    assert manager.fetch_study_guide() is None
    store.upload_study_guide(b"%PDF")
    assert manager.fetch_study_guide() == b"%PDF"


def test_access_code_request_without_mailer_is_ignored(manager):
    manager.request_access_code("anna@example.org", "127.0.0.1")
