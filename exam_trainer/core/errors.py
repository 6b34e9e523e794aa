"""Exceptions raised by the external collaborators of the trainer.

Each error carries a ``user_message`` that is safe to show to students and
admins; internal details stay in the exception chain and the log.
"""

from __future__ import annotations

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again later."


class TrainerError(Exception):
    """Base class for failures that are reported to the user."""

    user_message: str = GENERIC_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class DataStoreError(TrainerError):
    """Raised when the question / access-code backend fails."""


class QuestionsNotFoundError(DataStoreError):
    """Raised when no question matches the requested filter."""

    user_message = "No questions found that match the selected criteria."


class QuestionGenerationError(TrainerError):
    """Raised when the AI generator does not return a usable quiz."""

    user_message = "The quiz questions could not be generated."
