"""Interface of the question / access-code backend.

The trainer never talks to storage directly. A single ``DataStore`` instance
is built at startup from the settings and handed to the API server and the
admin console. Implementations only provide the primitive reads and writes;
sampling, credential checks and the access-code policy live here.
"""

from __future__ import annotations

import hmac
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from exam_trainer.core.access_codes import is_access_code_valid
from exam_trainer.core.errors import QuestionsNotFoundError
from exam_trainer.core.models import AccessCode, Question, validate_question


class DataStore(ABC):
    """Backend operations used by the student server and the admin console."""

    def __init__(self, access_code_max_age_days: int | None = None, rng: random.Random | None = None) -> None:
        self._access_code_max_age_days = access_code_max_age_days
        self._rng = rng or random.Random()

    # --- Questions ---

    def fetch_questions(self, count: int, module_filter: str | None = None) -> list[Question]:
        """Return up to ``count`` random questions, optionally limited to one category."""
        if count <= 0:
            raise ValueError("Question count must be positive.")
        candidates = self._fetch_matching_questions(module_filter)
        if not candidates:
            raise QuestionsNotFoundError()
        return self._rng.sample(candidates, min(count, len(candidates)))

    @abstractmethod
    def _fetch_matching_questions(self, module_filter: str | None) -> list[Question]:
        """Return every question whose category matches ``module_filter`` (all when None)."""

    @abstractmethod
    def fetch_all_questions(self) -> list[Question]:
        """Return the whole bank ordered by id."""

    def create_question(self, question: Question) -> Question:
        return self.create_questions([question])[0]

    @abstractmethod
    def create_questions(self, questions: list[Question]) -> list[Question]:
        """Insert new questions and return them with ids assigned."""

    @abstractmethod
    def update_question(self, question: Question) -> Question:
        """Overwrite the stored question with the same id."""

    @abstractmethod
    def delete_question(self, question_id: int) -> None:
        """Delete one question; raises when nothing was deleted."""

    @abstractmethod
    def delete_questions(self, question_ids: Iterable[int]) -> None:
        """Delete several questions at once; an empty list does nothing."""

    # --- Access codes ---

    @abstractmethod
    def fetch_access_code(self, code: str) -> AccessCode | None:
        """Return the record for ``code`` or ``None``."""

    @abstractmethod
    def fetch_all_access_codes(self) -> list[AccessCode]:
        """Return all codes, newest first."""

    @abstractmethod
    def create_access_code(self, code: str, student_name: str | None, email: str | None) -> AccessCode:
        """Store a new active code for a named student.

        Both ``student_name`` and ``email`` are required; see :func:`prepare_access_code_contact`.
        """

    @abstractmethod
    def update_access_code(self, code_id: int, **fields: object) -> AccessCode:
        """Change selected fields (``is_active``, ``student_name``, ...) of a code."""

    @abstractmethod
    def delete_access_code(self, code_id: int) -> None:
        """Remove a code."""

    @abstractmethod
    def find_active_code_by_email(self, email: str) -> AccessCode | None:
        """Return the newest active code registered for ``email``."""

    def validate_access_code(self, code: str, now: datetime | None = None) -> bool:
        code = (code or "").strip()
        if not code:
            return False
        return is_access_code_valid(self.fetch_access_code(code), now, self._access_code_max_age_days)

    # --- Admin ---

    @abstractmethod
    def _fetch_admin_password(self, username: str) -> str | None:
        """Return the stored password for ``username`` or ``None``."""

    def validate_admin_credentials(self, username: str, password: str) -> bool:
        if not username or not password:
            return False
        stored = self._fetch_admin_password(username)
        if stored is None:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))

    # --- Study guide ---

    @abstractmethod
    def upload_study_guide(self, data: bytes) -> None:
        """Replace the study guide PDF stored under the well-known key."""

    @abstractmethod
    def fetch_study_guide(self) -> bytes | None:
        """Return the current study guide PDF or ``None`` when none was uploaded."""


def prepare_question(question: Question) -> Question:
    """Validate a question and sort its correct indices before it is stored."""
    validate_question(question)
    return question.copy_with(correct_answer_indices=sorted(question.correct_answer_indices))


def matches_module(question: Question, module_filter: str | None) -> bool:
    if not module_filter:
        return True
    return (question.category or "").casefold() == module_filter.casefold()


def prepare_access_code_contact(student_name: str | None, email: str | None) -> tuple[str, str]:
    """Return the trimmed name and lowercased e-mail stored with a new code.

    Self-service lookups compare e-mails exactly, so they are kept lowercase.
    """
    name = (student_name or "").strip()
    address = (email or "").strip().lower()
    if not name:
        raise ValueError("Access codes need a student name.")
    if not address or "@" not in address:
        raise ValueError("Access codes need a valid e-mail address.")
    return name, address
