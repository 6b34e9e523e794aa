"""State machine for one student's quiz attempt."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from exam_trainer.core.answer_accumulator import select_option
from exam_trainer.core.errors import QuestionsNotFoundError, TrainerError
from exam_trainer.core.models import Question, QuizOutcome
from exam_trainer.core.option_shuffler import RandomSource, shuffle_question
from exam_trainer.core.scorer import score_quiz
from exam_trainer.core.text_normalizer import normalize_question

logger = logging.getLogger(__name__)

QuestionLoader = Callable[[int, str | None], list[Question]]


class SessionState(Enum):
    """Screens of the student flow."""

    CONFIG = "config"
    QUIZ = "quiz"
    RESULTS = "results"


class SessionStateError(RuntimeError):
    """Raised for an action that is not allowed in the current state."""


class QuizSession:
    """Runs config -> quiz -> results for a single attempt.

    Loading is split into :meth:`begin_loading` and :meth:`finish_loading` /
    :meth:`fail_loading` so callers can release their locks while the remote
    fetch is in flight. The busy flag rejects a second start in the meantime.
    """

    def __init__(self, random_source: RandomSource | None = None, track_by_index: bool = False) -> None:
        self._random_source = random_source
        self._track_by_index = track_by_index
        self._state = SessionState.CONFIG
        self._busy = False
        self._error: str | None = None
        self._questions: tuple[Question, ...] = ()
        self._answers: list[list[int]] = []
        self._current_index = 0
        self._confirmation_pending = False
        self._outcome: QuizOutcome | None = None

    # --- Read access ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def user_answers(self) -> list[list[int]]:
        return [list(selection) for selection in self._answers]

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def confirmation_pending(self) -> bool:
        return self._confirmation_pending

    @property
    def outcome(self) -> QuizOutcome | None:
        return self._outcome

    # --- config -> quiz ---

    def start(self, loader: QuestionLoader, count: int, module_filter: str | None = None) -> None:
        """Load, normalize and shuffle ``count`` questions in one call."""
        self.begin_loading()
        try:
            questions = loader(count, module_filter)
        except TrainerError as exc:
            self.fail_loading(exc)
            return
        except Exception:
            self._busy = False
            raise
        self.finish_loading(questions)

    def begin_loading(self) -> None:
        self._require(SessionState.CONFIG)
        if self._busy:
            raise SessionStateError("A quiz is already being loaded.")
        self._busy = True
        self._error = None

    def finish_loading(self, questions: list[Question]) -> None:
        if not self._busy:
            raise SessionStateError("No quiz is being loaded.")
        self._busy = False
        if not questions:
            self._error = QuestionsNotFoundError.user_message
            return
        prepared = [
            shuffle_question(
                normalize_question(question),
                self._random_source,
                track_by_index=self._track_by_index,
            )
            for question in questions
        ]
        self._questions = tuple(prepared)
        self._answers = [[] for _ in prepared]
        self._current_index = 0
        self._confirmation_pending = False
        self._outcome = None
        self._state = SessionState.QUIZ
        logger.info("Quiz started with %d questions", len(prepared))

    def fail_loading(self, error: TrainerError) -> None:
        self._busy = False
        self._error = error.user_message
        logger.warning("Loading the quiz failed: %s", error)

    # --- quiz ---

    def select_answer(self, question_index: int, option_index: int) -> list[int]:
        """Apply a click on an option and return the new selection for that question."""
        self._require(SessionState.QUIZ)
        question = self._question_at(question_index)
        if not 0 <= option_index < len(question.options):
            raise IndexError(f"Option index {option_index} out of range")
        selection = select_option(self._answers[question_index], option_index, question.is_multi)
        self._answers[question_index] = selection
        return list(selection)

    def go_to(self, question_index: int) -> None:
        self._require(SessionState.QUIZ)
        self._question_at(question_index)
        self._current_index = question_index

    def next_question(self) -> None:
        self._require(SessionState.QUIZ)
        self._current_index = min(self._current_index + 1, len(self._questions) - 1)

    def previous_question(self) -> None:
        self._require(SessionState.QUIZ)
        self._current_index = max(self._current_index - 1, 0)

    def answered_count(self) -> int:
        return sum(1 for selection in self._answers if selection)

    def request_submit(self) -> None:
        self._require(SessionState.QUIZ)
        self._confirmation_pending = True

    def cancel_submit(self) -> None:
        self._require(SessionState.QUIZ)
        self._confirmation_pending = False

    def confirm_submit(self) -> QuizOutcome:
        """Score the attempt; only valid after :meth:`request_submit`."""
        self._require(SessionState.QUIZ)
        if not self._confirmation_pending:
            raise SessionStateError("Submission must be confirmed before the quiz is scored.")
        self._confirmation_pending = False
        self._outcome = score_quiz(self._questions, self._answers)
        self._state = SessionState.RESULTS
        logger.info(
            "Quiz submitted: %d/%d correct (%d%%)",
            self._outcome.correct_count,
            self._outcome.total_count,
            self._outcome.percentage,
        )
        return self._outcome

    # --- results / error exits ---

    def restart(self) -> None:
        if self._state is SessionState.QUIZ:
            raise SessionStateError("Submit the quiz before starting a new one.")
        if self._busy:
            raise SessionStateError("A quiz is already being loaded.")
        self._reset()

    def dismiss_error(self) -> None:
        self._require(SessionState.CONFIG)
        self._error = None

    def _reset(self) -> None:
        self._state = SessionState.CONFIG
        self._error = None
        self._questions = ()
        self._answers = []
        self._current_index = 0
        self._confirmation_pending = False
        self._outcome = None

    def _require(self, expected: SessionState) -> None:
        if self._state is not expected:
            raise SessionStateError(
                f"Action not allowed while the session is in '{self._state.value}' state."
            )

    def _question_at(self, question_index: int) -> Question:
        if not 0 <= question_index < len(self._questions):
            raise IndexError(f"Question index {question_index} out of range")
        return self._questions[question_index]
