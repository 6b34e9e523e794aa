from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from exam_trainer.core.errors import DataStoreError, QuestionsNotFoundError
from exam_trainer.core.models import QuestionType
from exam_trainer.core.services.access_code_mailer import AccessCodeMailer
from exam_trainer.core.services.rest_store import RestDataStore

QUESTION_ROW = {
    "id": 7,
    "questionText": "Wie viele Zähne hat ein erwachsener Hund?",
    "options": ["42", "32", "28"],
    "correctAnswerIndices": [0],
    "type": "Single",
    "category": "Hundeführerschein",
    "verband": "DZKB",
    "imageUrl": None,
    "created_at": "2024-04-01T10:00:00+00:00",
}


def _store(handler, **kwargs) -> tuple[RestDataStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    store = RestDataStore(
        "https://db.example.org/",
        "secret-key",
        transport=httpx.MockTransport(recording),
        **kwargs,
    )
    return store, seen


def test_fetch_questions_filters_by_category():
    store, seen = _store(lambda request: httpx.Response(200, json=[QUESTION_ROW]))

    questions = store.fetch_questions(5, "Hundeführerschein")

    assert len(questions) == 1
    question = questions[0]
    assert question.id == 7
    assert question.association == "DZKB"
    assert question.type is QuestionType.SINGLE
    request = seen[0]
    assert request.url.path == "/rest/v1/questions"
    assert request.url.params["category"] == "ilike.Hundeführerschein"
    assert request.headers["apikey"] == "secret-key"
    assert request.headers["authorization"] == "Bearer secret-key"


def test_category_wildcards_match_nothing():
    other_row = {**QUESTION_ROW, "id": 8, "category": "Schulhund"}
    store, _ = _store(lambda request: httpx.Response(200, json=[QUESTION_ROW, other_row]))

    with pytest.raises(QuestionsNotFoundError):
        store.fetch_questions(5, "*")

    assert [q.id for q in store.fetch_questions(5, "schulhund")] == [8]


def test_empty_result_raises_not_found():
    store, _ = _store(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(QuestionsNotFoundError):
        store.fetch_questions(5)


def test_create_questions_posts_camel_case(make_question):
    store, seen = _store(lambda request: httpx.Response(201, json=[QUESTION_ROW]))

    created = store.create_questions([make_question(association="ProHunde")])

    assert created[0].id == 7
    body = json.loads(seen[0].content)
    assert body[0]["questionText"] == "Wie viele Zähne hat ein erwachsener Hund?"
    assert body[0]["verband"] == "ProHunde"
    assert body[0]["correctAnswerIndices"] == [0]
    assert seen[0].headers["prefer"] == "return=representation"


def test_update_of_missing_question_raises(make_question):
    store, seen = _store(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(DataStoreError):
        store.update_question(make_question().copy_with(id=99))

    assert seen[0].method == "PATCH"
    assert seen[0].url.params["id"] == "eq.99"


def test_bulk_delete_uses_in_filter():
    store, seen = _store(lambda request: httpx.Response(204))

    store.delete_questions([3, 1, 3])
    store.delete_questions([])

    assert len(seen) == 1
    assert seen[0].method == "DELETE"
    assert seen[0].url.params["id"] == "in.(1,3)"


def test_server_error_becomes_data_store_error():
    store, _ = _store(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(DataStoreError):
        store.fetch_all_questions()


def test_network_error_becomes_data_store_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    store, _ = _store(handler)

    with pytest.raises(DataStoreError):
        store.fetch_all_access_codes()


def test_malformed_row_becomes_data_store_error():
    store, _ = _store(lambda request: httpx.Response(200, json=[{"id": 1}]))

    with pytest.raises(DataStoreError):
        store.fetch_all_questions()


def test_validate_access_code_applies_age_limit():
    created = (datetime.now(timezone.utc) - timedelta(days=400)).isoformat()
    row = {"id": 1, "code": "MUTIG-PFOTE-417", "is_active": True, "created_at": created}
    store, seen = _store(lambda request: httpx.Response(200, json=[row]), access_code_max_age_days=365)

    assert not store.validate_access_code("MUTIG-PFOTE-417")
    assert seen[0].url.params["code"] == "eq.MUTIG-PFOTE-417"


def test_find_active_code_by_email_query():
    row = {"id": 3, "code": "TREU-LEINE-100", "email": "anna@example.org", "is_active": True}
    store, seen = _store(lambda request: httpx.Response(200, json=[row]))

    record = store.find_active_code_by_email(" Anna@Example.org ")

    assert record.code == "TREU-LEINE-100"
    params = seen[0].url.params
    assert params["email"] == "eq.anna@example.org"
    assert params["is_active"] == "is.true"
    assert params["order"] == "created_at.desc"


def test_wildcard_address_does_not_match_other_codes():
    victim = {"id": 3, "code": "TREU-LEINE-100", "student_name": "Vera", "email": "vera@example.org", "is_active": True}

    mails: list[httpx.Request] = []

    def send_mail(request):
        mails.append(request)
        return httpx.Response(200, json={"id": "mail-1"})

    def handler(request):
        if request.url.params.get("email") == "eq.vera@example.org":
            return httpx.Response(200, json=[victim])
        return httpx.Response(200, json=[])

    store, seen = _store(handler)
    mailer = AccessCodeMailer(
        store,
        api_url="https://mail.example.org/emails",
        api_key="re_test",
        sender="noreply@example.org",
        transport=httpx.MockTransport(send_mail),
    )

    for pattern in ("*", "%@example.org", "vera_example.org"):
        mailer.request_access_code(pattern, "10.0.0.1")

    assert [request.url.params["email"] for request in seen] == [
        "eq.*",
        "eq.%@example.org",
        "eq.vera_example.org",
    ]
    assert mails == []


def test_create_access_code_lowercases_email():
    row = {"id": 5, "code": "MUTIG-PFOTE-417", "student_name": "Anna", "email": "anna@example.org", "is_active": True}
    store, seen = _store(lambda request: httpx.Response(201, json=[row]))

    store.create_access_code("MUTIG-PFOTE-417", " Anna ", "Anna@Example.ORG")

    assert json.loads(seen[0].content) == {
        "code": "MUTIG-PFOTE-417",
        "student_name": "Anna",
        "email": "anna@example.org",
        "is_active": True,
    }


def test_create_access_code_without_email_sends_nothing():
    store, seen = _store(lambda request: httpx.Response(201, json=[]))

    with pytest.raises(ValueError):
        store.create_access_code("MUTIG-PFOTE-417", "Anna", None)

    assert seen == []


def test_update_access_code_serializes_datetimes():
    sent = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    row = {"id": 3, "code": "X", "send_status": "sent", "sent_at": sent.isoformat()}
    store, seen = _store(lambda request: httpx.Response(200, json=[row]))

    record = store.update_access_code(3, sent_at=sent, send_status="sent")

    assert record.send_status == "sent"
    assert json.loads(seen[0].content) == {"sent_at": sent.isoformat(), "send_status": "sent"}


def test_update_access_code_rejects_unknown_fields():
    store, seen = _store(lambda request: httpx.Response(200, json=[]))

    with pytest.raises(ValueError):
        store.update_access_code(3, code="OTHER")

    assert seen == []


def test_admin_credentials():
    def handler(request):
        if request.url.params["username"] == "eq.admin":
            return httpx.Response(200, json=[{"password": "geheim"}])
        return httpx.Response(200, json=[])

    store, _ = _store(handler)

    assert store.validate_admin_credentials("admin", "geheim")
    assert not store.validate_admin_credentials("admin", "falsch")
    assert not store.validate_admin_credentials("someone", "geheim")


def test_study_guide_upload_and_download():
    stored: dict[str, bytes] = {}

    def handler(request):
        if request.method == "POST":
            stored["pdf"] = request.content
            return httpx.Response(200, json={"Key": "learning_materials/studienleitfaden.pdf"})
        if "pdf" not in stored:
            return httpx.Response(404, json={"error": "not_found"})
        return httpx.Response(200, content=stored["pdf"])

    store, seen = _store(handler)

    assert store.fetch_study_guide() is None
    store.upload_study_guide(b"%PDF-1.7")
    assert store.fetch_study_guide() == b"%PDF-1.7"

    upload = seen[1]
    assert upload.url.path == "/storage/v1/object/learning_materials/studienleitfaden.pdf"
    assert upload.headers["x-upsert"] == "true"
    assert upload.headers["content-type"] == "application/pdf"
