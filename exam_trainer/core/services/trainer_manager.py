"""Facade shared by the student API and the admin console."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from threading import Lock

from exam_trainer.constants.quiz_constants import PASSING_PERCENTAGE, QUESTION_COUNT_CHOICES
from exam_trainer.core.errors import DataStoreError, TrainerError
from exam_trainer.core.models import Question, QuizOutcome
from exam_trainer.core.option_shuffler import RandomSource
from exam_trainer.core.scorer import is_passed
from exam_trainer.core.services.access_code_mailer import AccessCodeMailer
from exam_trainer.core.services.data_store import DataStore
from exam_trainer.core.services.quiz_session import QuizSession, SessionState

logger = logging.getLogger(__name__)


class AuthenticationRequiredError(RuntimeError):
    """Raised when a quiz action arrives without a valid login."""


@dataclass(slots=True)
class _BrowserSession:
    access_code: str
    quiz: QuizSession


@dataclass(slots=True, frozen=True)
class SessionView:
    """Consistent snapshot of one browser session, taken under the manager lock."""

    state: SessionState
    is_busy: bool
    error: str | None
    questions: tuple[Question, ...] = ()
    user_answers: tuple[tuple[int, ...], ...] = ()
    current_index: int = 0
    confirmation_pending: bool = False
    outcome: QuizOutcome | None = None
    passing_percentage: int = PASSING_PERCENTAGE
    answered_count: int = 0
    passed: bool = False


class TrainerManager:
    """Owns the browser sessions and routes them to the data store."""

    def __init__(
        self,
        store: DataStore,
        mailer: AccessCodeMailer | None = None,
        passing_percentage: int = PASSING_PERCENTAGE,
        track_by_index: bool = False,
        random_source: RandomSource | None = None,
    ) -> None:
        self._lock = Lock()
        self._store = store
        self._mailer = mailer
        self._passing_percentage = passing_percentage
        self._track_by_index = track_by_index
        self._random_source = random_source
        self._sessions: dict[str, _BrowserSession] = {}

    @property
    def store(self) -> DataStore:
        return self._store

    @property
    def passing_percentage(self) -> int:
        return self._passing_percentage

    # --- Authentication ---

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(24)

    def login(self, token: str, code: str) -> bool:
        """Check ``code`` against the store and bind a quiz session to ``token``.

        Logging in again with the same code keeps the running attempt.
        """
        code = (code or "").strip()
        if not self._store.validate_access_code(code):
            logger.info("Rejected login attempt")
            return False
        with self._lock:
            existing = self._sessions.get(token)
            if existing is not None and existing.access_code == code:
                return True
            session = QuizSession(random_source=self._random_source, track_by_index=self._track_by_index)
            self._sessions[token] = _BrowserSession(access_code=code, quiz=session)
            active = len(self._sessions)
        logger.info("Student logged in (%d active sessions)", active)
        return True

    def logout(self, token: str | None) -> None:
        with self._lock:
            self._sessions.pop(token or "", None)

    def is_authenticated(self, token: str | None) -> bool:
        with self._lock:
            return bool(token) and token in self._sessions

    def active_session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    # --- Quiz flow ---

    def get_view(self, token: str | None) -> SessionView:
        with self._lock:
            quiz = self._quiz(token)
            outcome = quiz.outcome
            return SessionView(
                state=quiz.state,
                is_busy=quiz.is_busy,
                error=quiz.error,
                questions=quiz.questions,
                user_answers=tuple(tuple(selection) for selection in quiz.user_answers),
                current_index=quiz.current_index,
                confirmation_pending=quiz.confirmation_pending,
                outcome=outcome,
                passing_percentage=self._passing_percentage,
                answered_count=quiz.answered_count(),
                passed=outcome is not None and is_passed(outcome.percentage, self._passing_percentage),
            )

    def start_quiz(self, token: str | None, count: int, module_filter: str | None = None) -> None:
        """Load a new quiz; the lock is released while the store is queried."""
        if count not in QUESTION_COUNT_CHOICES:
            raise ValueError(f"Question count must be one of {QUESTION_COUNT_CHOICES}.")
        with self._lock:
            quiz = self._quiz(token)
            quiz.begin_loading()
        try:
            questions = self._store.fetch_questions(count, module_filter or None)
        except TrainerError as exc:
            with self._lock:
                quiz.fail_loading(exc)
            return
        except Exception:
            logger.exception("Unexpected failure while loading questions")
            with self._lock:
                quiz.fail_loading(DataStoreError())
            return
        with self._lock:
            quiz.finish_loading(questions)

    def select_answer(self, token: str | None, question_index: int, option_index: int) -> list[int]:
        with self._lock:
            return self._quiz(token).select_answer(question_index, option_index)

    def navigate(self, token: str | None, question_index: int) -> None:
        with self._lock:
            self._quiz(token).go_to(question_index)

    def next_question(self, token: str | None) -> None:
        with self._lock:
            self._quiz(token).next_question()

    def previous_question(self, token: str | None) -> None:
        with self._lock:
            self._quiz(token).previous_question()

    def request_submit(self, token: str | None) -> None:
        with self._lock:
            self._quiz(token).request_submit()

    def cancel_submit(self, token: str | None) -> None:
        with self._lock:
            self._quiz(token).cancel_submit()

    def confirm_submit(self, token: str | None) -> QuizOutcome:
        with self._lock:
            return self._quiz(token).confirm_submit()

    def restart(self, token: str | None) -> None:
        with self._lock:
            self._quiz(token).restart()

    def dismiss_error(self, token: str | None) -> None:
        with self._lock:
            self._quiz(token).dismiss_error()

    # --- Public services ---

    def fetch_study_guide(self) -> bytes | None:
        return self._store.fetch_study_guide()

    def request_access_code(self, email: str, client_ip: str | None) -> None:
        """Forward a self-service request; never reveals whether the address is known."""
        if self._mailer is None:
            logger.warning("Access code requested but no mailer is configured")
            return
        self._mailer.request_access_code(email, client_ip)

    def _quiz(self, token: str | None) -> QuizSession:
        entry = self._sessions.get(token or "")
        if entry is None:
            raise AuthenticationRequiredError("Please log in with your access code.")
        return entry.quiz
