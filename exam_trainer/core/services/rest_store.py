"""Data store backed by a hosted PostgREST / storage API.

Questions live in the ``questions`` table (camelCase columns), access codes in
``access_codes`` and admin accounts in ``admin_users``. The study guide is a
single object in a storage bucket that is overwritten on every upload.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from exam_trainer.constants.quiz_constants import STUDY_GUIDE_KEY
from exam_trainer.core.errors import DataStoreError
from exam_trainer.core.models import AccessCode, Question, QuestionType
from exam_trainer.core.services.data_store import (
    DataStore,
    matches_module,
    prepare_access_code_contact,
    prepare_question,
)

logger = logging.getLogger(__name__)

_REPRESENTATION = {"Prefer": "return=representation"}
_UPDATABLE_CODE_FIELDS = frozenset(
    {"email", "student_name", "is_active", "sent_at", "send_status", "send_error"}
)


class _QuestionRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    question_text: str = Field(alias="questionText")
    options: list[str]
    correct_answer_indices: list[int] = Field(alias="correctAnswerIndices")
    type: str | None = None
    category: str | None = None
    association: str | None = Field(default=None, alias="verband")
    image_url: str | None = Field(default=None, alias="imageUrl")
    created_at: datetime | None = None

    def to_question(self) -> Question:
        return Question(
            question_text=self.question_text,
            options=list(self.options),
            correct_answer_indices=sorted(self.correct_answer_indices),
            type=QuestionType.parse(self.type),
            category=self.category,
            association=self.association,
            image_url=self.image_url,
            id=self.id,
            created_at=self.created_at,
        )


class _AccessCodeRow(BaseModel):
    id: int
    code: str
    email: str | None = None
    student_name: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    sent_at: datetime | None = None
    send_status: str | None = None
    send_error: str | None = None

    def to_access_code(self) -> AccessCode:
        return AccessCode(**self.model_dump())


def _question_payload(question: Question) -> dict[str, Any]:
    return {
        "questionText": question.question_text,
        "options": list(question.options),
        "correctAnswerIndices": list(question.correct_answer_indices),
        "type": question.type.value,
        "category": question.category,
        "verband": question.association,
        "imageUrl": question.image_url,
    }


def _jsonable(value: object) -> object:
    return value.isoformat() if isinstance(value, datetime) else value


class RestDataStore(DataStore):
    """``DataStore`` implementation talking to ``/rest/v1`` and ``/storage/v1``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        bucket: str = "learning_materials",
        timeout: float = 10.0,
        access_code_max_age_days: int | None = None,
        rng: random.Random | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(access_code_max_age_days=access_code_max_age_days, rng=rng)
        self._bucket = bucket
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # --- Questions ---

    def _fetch_matching_questions(self, module_filter: str | None) -> list[Question]:
        params = {"select": "*"}
        if module_filter:
            params["category"] = f"ilike.{module_filter}"
        questions = self._questions_from(self._request("GET", "/rest/v1/questions", params=params))
        # ilike treats * % _ as wildcards; keep only exact category matches.
        return [q for q in questions if matches_module(q, module_filter)]

    def fetch_all_questions(self) -> list[Question]:
        rows = self._request("GET", "/rest/v1/questions", params={"select": "*", "order": "id.asc"})
        return self._questions_from(rows)

    def create_questions(self, questions: list[Question]) -> list[Question]:
        if not questions:
            return []
        payload = [_question_payload(prepare_question(q)) for q in questions]
        rows = self._request("POST", "/rest/v1/questions", json=payload, headers=_REPRESENTATION)
        return self._questions_from(rows)

    def update_question(self, question: Question) -> Question:
        if question.id is None:
            raise ValueError("A question needs an id to be updated.")
        payload = _question_payload(prepare_question(question))
        rows = self._request(
            "PATCH",
            "/rest/v1/questions",
            params={"id": f"eq.{question.id}"},
            json=payload,
            headers=_REPRESENTATION,
        )
        updated = self._questions_from(rows)
        if not updated:
            raise DataStoreError("The question could not be found. It may have been deleted already.")
        return updated[0]

    def delete_question(self, question_id: int) -> None:
        rows = self._request(
            "DELETE",
            "/rest/v1/questions",
            params={"id": f"eq.{question_id}"},
            headers=_REPRESENTATION,
        )
        if not rows:
            raise DataStoreError("The question could not be found. It may have been deleted already.")

    def delete_questions(self, question_ids: Iterable[int]) -> None:
        ids = sorted({int(i) for i in question_ids})
        if not ids:
            return
        joined = ",".join(str(i) for i in ids)
        self._request("DELETE", "/rest/v1/questions", params={"id": f"in.({joined})"})

    # --- Access codes ---

    def fetch_access_code(self, code: str) -> AccessCode | None:
        rows = self._request(
            "GET",
            "/rest/v1/access_codes",
            params={"select": "*", "code": f"eq.{code}", "limit": "1"},
        )
        codes = self._codes_from(rows)
        return codes[0] if codes else None

    def fetch_all_access_codes(self) -> list[AccessCode]:
        rows = self._request(
            "GET", "/rest/v1/access_codes", params={"select": "*", "order": "created_at.desc"}
        )
        return self._codes_from(rows)

    def create_access_code(self, code: str, student_name: str | None, email: str | None) -> AccessCode:
        student_name, email = prepare_access_code_contact(student_name, email)
        payload = {"code": code, "student_name": student_name, "email": email, "is_active": True}
        rows = self._request("POST", "/rest/v1/access_codes", json=payload, headers=_REPRESENTATION)
        codes = self._codes_from(rows)
        if not codes:
            raise DataStoreError("Access code could not be created.")
        return codes[0]

    def update_access_code(self, code_id: int, **fields: object) -> AccessCode:
        unknown = set(fields) - _UPDATABLE_CODE_FIELDS
        if unknown:
            raise ValueError(f"Unknown access code fields: {', '.join(sorted(unknown))}")
        payload = {name: _jsonable(value) for name, value in fields.items()}
        rows = self._request(
            "PATCH",
            "/rest/v1/access_codes",
            params={"id": f"eq.{code_id}"},
            json=payload,
            headers=_REPRESENTATION,
        )
        codes = self._codes_from(rows)
        if not codes:
            raise DataStoreError("The access code could not be found.")
        return codes[0]

    def delete_access_code(self, code_id: int) -> None:
        rows = self._request(
            "DELETE",
            "/rest/v1/access_codes",
            params={"id": f"eq.{code_id}"},
            headers=_REPRESENTATION,
        )
        if not rows:
            raise DataStoreError("The access code could not be found.")

    def find_active_code_by_email(self, email: str) -> AccessCode | None:
        rows = self._request(
            "GET",
            "/rest/v1/access_codes",
            params={
                "select": "*",
                "email": f"eq.{email.strip().lower()}",
                "is_active": "is.true",
                "order": "created_at.desc",
                "limit": "1",
            },
        )
        codes = self._codes_from(rows)
        return codes[0] if codes else None

    # --- Admin ---

    def _fetch_admin_password(self, username: str) -> str | None:
        rows = self._request(
            "GET",
            "/rest/v1/admin_users",
            params={"select": "password", "username": f"eq.{username}", "limit": "1"},
        )
        if not rows:
            return None
        password = rows[0].get("password")
        return str(password) if password is not None else None

    # --- Study guide ---

    def upload_study_guide(self, data: bytes) -> None:
        if not data:
            raise ValueError("The study guide file is empty.")
        self._send(
            "POST",
            self._study_guide_path,
            content=data,
            headers={"Content-Type": "application/pdf", "x-upsert": "true"},
        )
        logger.info("Study guide uploaded (%d bytes)", len(data))

    def fetch_study_guide(self) -> bytes | None:
        response = self._send("GET", self._study_guide_path, allow_missing=True)
        return None if response is None else response.content

    @property
    def _study_guide_path(self) -> str:
        return f"/storage/v1/object/{self._bucket}/{STUDY_GUIDE_KEY}"

    # --- Transport ---

    def _request(self, method: str, path: str, **kwargs: Any) -> list[dict[str, Any]]:
        response = self._send(method, path, **kwargs)
        if response is None or not response.content:
            return []
        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Backend returned invalid JSON for %s %s", method, path)
            raise DataStoreError() from exc
        if isinstance(body, dict):
            return [body]
        return list(body)

    def _send(self, method: str, path: str, allow_missing: bool = False, **kwargs: Any) -> httpx.Response | None:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Backend request %s %s failed: %s", method, path, exc)
            raise DataStoreError() from exc
        if allow_missing and response.status_code in (400, 404):
            return None
        if response.status_code >= 400:
            logger.error(
                "Backend request %s %s returned %s: %s",
                method,
                path,
                response.status_code,
                response.text[:500],
            )
            raise DataStoreError()
        return response

    @staticmethod
    def _questions_from(rows: list[dict[str, Any]]) -> list[Question]:
        try:
            return [_QuestionRow.model_validate(row).to_question() for row in rows]
        except ValidationError as exc:
            logger.error("Malformed question row from backend: %s", exc)
            raise DataStoreError() from exc

    @staticmethod
    def _codes_from(rows: list[dict[str, Any]]) -> list[AccessCode]:
        try:
            return [_AccessCodeRow.model_validate(row).to_access_code() for row in rows]
        except ValidationError as exc:
            logger.error("Malformed access code row from backend: %s", exc)
            raise DataStoreError() from exc
