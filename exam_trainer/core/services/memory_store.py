"""Process-local data store used for demo runs and tests."""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import fields, replace
from datetime import datetime, timezone
from threading import Lock

from exam_trainer.core.errors import DataStoreError
from exam_trainer.core.models import AccessCode, Question
from exam_trainer.core.services.data_store import (
    DataStore,
    matches_module,
    prepare_access_code_contact,
    prepare_question,
)

_ACCESS_CODE_FIELDS = {f.name for f in fields(AccessCode)} - {"id", "code", "created_at"}


class MemoryDataStore(DataStore):
    """Keeps questions, access codes and the study guide in memory."""

    def __init__(
        self,
        questions: Iterable[Question] = (),
        access_codes: Iterable[AccessCode] = (),
        admin_users: dict[str, str] | None = None,
        access_code_max_age_days: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(access_code_max_age_days=access_code_max_age_days, rng=rng)
        self._lock = Lock()
        self._questions: list[Question] = []
        self._question_counter = 0
        self._access_codes: list[AccessCode] = list(access_codes)
        self._access_code_counter = max((c.id for c in self._access_codes), default=0)
        self._admin_users = dict(admin_users or {})
        self._study_guide: bytes | None = None
        if questions:
            self.create_questions(list(questions))

    def _fetch_matching_questions(self, module_filter: str | None) -> list[Question]:
        with self._lock:
            return [q for q in self._questions if matches_module(q, module_filter)]

    def fetch_all_questions(self) -> list[Question]:
        with self._lock:
            return sorted(self._questions, key=lambda q: q.id or 0)

    def create_questions(self, questions: list[Question]) -> list[Question]:
        prepared = [prepare_question(q) for q in questions]
        created: list[Question] = []
        with self._lock:
            for question in prepared:
                self._question_counter += 1
                stored = question.copy_with(
                    id=self._question_counter,
                    created_at=question.created_at or datetime.now(timezone.utc),
                )
                self._questions.append(stored)
                created.append(stored)
        return created

    def update_question(self, question: Question) -> Question:
        if question.id is None:
            raise ValueError("A question needs an id to be updated.")
        prepared = prepare_question(question)
        with self._lock:
            index = self._question_index(question.id)
            stored = prepared.copy_with(created_at=self._questions[index].created_at)
            self._questions[index] = stored
            return stored

    def delete_question(self, question_id: int) -> None:
        with self._lock:
            self._questions.pop(self._question_index(question_id))

    def delete_questions(self, question_ids: Iterable[int]) -> None:
        ids = set(question_ids)
        if not ids:
            return
        with self._lock:
            self._questions = [q for q in self._questions if q.id not in ids]

    def fetch_access_code(self, code: str) -> AccessCode | None:
        with self._lock:
            return next((c for c in self._access_codes if c.code == code), None)

    def fetch_all_access_codes(self) -> list[AccessCode]:
        with self._lock:
            return sorted(
                self._access_codes,
                key=lambda c: c.created_at or datetime.min.replace(tzinfo=timezone.utc),
                reverse=True,
            )

    def create_access_code(self, code: str, student_name: str | None, email: str | None) -> AccessCode:
        student_name, email = prepare_access_code_contact(student_name, email)
        with self._lock:
            if any(c.code == code for c in self._access_codes):
                raise DataStoreError("Access code could not be created.")
            self._access_code_counter += 1
            record = AccessCode(
                id=self._access_code_counter,
                code=code,
                student_name=student_name,
                email=email,
                is_active=True,
                created_at=datetime.now(timezone.utc),
            )
            self._access_codes.append(record)
            return record

    def update_access_code(self, code_id: int, **changes: object) -> AccessCode:
        unknown = set(changes) - _ACCESS_CODE_FIELDS
        if unknown:
            raise ValueError(f"Unknown access code fields: {', '.join(sorted(unknown))}")
        with self._lock:
            index = self._access_code_index(code_id)
            updated = replace(self._access_codes[index], **changes)
            self._access_codes[index] = updated
            return updated

    def delete_access_code(self, code_id: int) -> None:
        with self._lock:
            self._access_codes.pop(self._access_code_index(code_id))

    def find_active_code_by_email(self, email: str) -> AccessCode | None:
        wanted = email.strip().lower()
        with self._lock:
            matches = [c for c in self._access_codes if c.is_active and c.email == wanted]
        if not matches:
            return None
        return max(matches, key=lambda c: c.created_at or datetime.min.replace(tzinfo=timezone.utc))

    def _fetch_admin_password(self, username: str) -> str | None:
        return self._admin_users.get(username)

    def upload_study_guide(self, data: bytes) -> None:
        if not data:
            raise ValueError("The study guide file is empty.")
        self._study_guide = bytes(data)

    def fetch_study_guide(self) -> bytes | None:
        return self._study_guide

    def _question_index(self, question_id: int) -> int:
        for index, question in enumerate(self._questions):
            if question.id == question_id:
                return index
        raise DataStoreError("The question could not be found. It may have been deleted already.")

    def _access_code_index(self, code_id: int) -> int:
        for index, code in enumerate(self._access_codes):
            if code.id == code_id:
                return index
        raise DataStoreError("The access code could not be found.")
