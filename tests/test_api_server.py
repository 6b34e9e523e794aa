from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from exam_trainer.constants.network_constants import SESSION_COOKIE
from exam_trainer.core.services.trainer_manager import TrainerManager
from exam_trainer.server.api_server import INVALID_CODE_MESSAGE, _client_ip, create_api_app

CODE = "MUTIG-PFOTE-417"


@pytest.fixture
def manager(store, keep_order) -> TrainerManager:
    store.create_access_code(CODE, "Anna", "anna@example.org")
    return TrainerManager(store, random_source=keep_order)


@pytest.fixture
def client(manager) -> TestClient:
    return TestClient(create_api_app(manager))


def _login(client: TestClient) -> dict:
    response = client.post("/login", json={"code": CODE})
    assert response.status_code == 200
    return response.json()


def test_student_page_is_served(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


def test_state_without_login(client):
    state = client.get("/state").json()

    assert state["authenticated"] is False
    assert state["question_count_choices"] == [5, 10, 20, 60]


def test_invalid_code_is_rejected(client):
    response = client.post("/login", json={"code": "FALSCH"})

    assert response.status_code == 401
    assert response.json()["detail"] == INVALID_CODE_MESSAGE


def test_quiz_actions_require_login(client):
    assert client.post("/quiz/start", json={"count": 5}).status_code == 401
    assert client.post("/quiz/answer", json={"question_index": 0, "option_index": 0}).status_code == 401


def test_login_sets_session_cookie(client):
    state = _login(client)

    assert state["authenticated"] is True
    assert state["state"] == "config"
    assert client.cookies.get(SESSION_COOKIE)


def test_full_flow(client, manager):
    _login(client)

    state = client.post("/quiz/start", json={"count": 5}).json()
    assert state["state"] == "quiz"
    assert state["quiz"]["total"] == 3
    assert "correct_answer_indices" not in state["quiz"]["question"]

    view = manager.get_view(client.cookies.get(SESSION_COOKIE))
    for index, question in enumerate(view.questions):
        for option in question.correct_answer_indices:
            response = client.post("/quiz/answer", json={"question_index": index, "option_index": option})
            assert response.status_code == 200

    state = client.post("/quiz/navigate/next").json()
    assert state["quiz"]["current_index"] == 1
    assert state["quiz"]["answered_count"] == 3

    assert client.post("/quiz/submit/confirm").status_code == 409

    state = client.post("/quiz/submit").json()
    assert state["quiz"]["confirmation_pending"] is True

    state = client.post("/quiz/submit/confirm").json()
    results = state["results"]
    assert state["state"] == "results"
    assert results["percentage"] == 100
    assert results["passed"] is True
    assert all(q["is_correct"] for q in results["questions"])

    state = client.post("/quiz/restart").json()
    assert state["state"] == "config"


def test_invalid_input_returns_422(client):
    _login(client)

    assert client.post("/quiz/start", json={"count": 7}).status_code == 422

    client.post("/quiz/start", json={"count": 5})
    assert client.post("/quiz/answer", json={"question_index": 0, "option_index": 9}).status_code == 422
    assert client.post("/quiz/navigate", json={"index": 9}).status_code == 422
    assert client.post("/quiz/navigate/sideways").status_code == 422


def test_unknown_module_reports_error(client):
    _login(client)

    state = client.post("/quiz/start", json={"count": 5, "module": "Agility"}).json()

    assert state["state"] == "config"
    assert state["error"]


def test_logout(client):
    _login(client)

    state = client.post("/logout").json()

    assert state["authenticated"] is False
    assert client.get("/state").json()["authenticated"] is False


def test_study_guide(client, store):
    assert client.get("/study-guide").status_code == 401

    _login(client)
    assert client.get("/study-guide").status_code == 404

    store.upload_study_guide(b"%PDF-1.4 test")
    response = client.get("/study-guide")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content == b"%PDF-1.4 test"


def test_access_code_request_is_always_ok(client, manager, monkeypatch):
    def explode(email, client_ip):
        raise RuntimeError("mail service down")

    assert client.post("/access-code/request", json={"email": "anna@example.org"}).json() == {"ok": True}

    monkeypatch.setattr(manager, "request_access_code", explode)
    assert client.post("/access-code/request", json={"email": "x@example.org"}).json() == {"ok": True}


class _FakeRequest:
    def __init__(self, headers, host="10.0.0.5"):
        self.headers = headers
        self.client = type("Client", (), {"host": host})()


def test_client_ip_uses_proxy_headers_only_when_trusted():
    request = _FakeRequest({"x-forwarded-for": "203.0.113.7, 10.0.0.1"})

    assert _client_ip(request, trust_proxy_headers=True) == "203.0.113.7"
    assert _client_ip(request, trust_proxy_headers=False) == "10.0.0.5"
    assert _client_ip(_FakeRequest({"cf-connecting-ip": "198.51.100.2"}), True) == "198.51.100.2"
