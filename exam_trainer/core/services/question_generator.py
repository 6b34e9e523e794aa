"""AI-assisted question generation through an OpenAI-compatible chat endpoint."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from exam_trainer.core.errors import QuestionGenerationError
from exam_trainer.core.models import Question, QuestionType, validate_question
from exam_trainer.core.text_normalizer import normalize_question
from exam_trainer.utils.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_TEMPLATE = (
    "Erstelle ein Multiple-Choice-Quiz auf Deutsch mit {numQuestions} Fragen zum Thema \"{topic}\". "
    "Jede Frage sollte 4 Antwortmöglichkeiten haben. Gib für jede Frage an, ob nur eine Antwort "
    "('Single') oder mehrere Antworten ('Multi') korrekt sein können. Gib für jede Frage eine passende "
    "Kategorie an, die sich auf das Thema \"{topic}\" bezieht. Die Fragen sollten für Teilnehmende "
    "geeignet sein, die sich auf eine Abschlussprüfung vorbereiten. Gib die Antwort ausschließlich als "
    "JSON-Array von Objekten mit den Feldern 'questionText', 'options', 'correctAnswerIndices' "
    "(Array von Zahlen, beginnend bei 0), 'category' und 'type' zurück. Füge keine Markdown-Formatierung "
    "oder andere Texte außerhalb des JSON hinzu."
)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class GeneratedQuestion(BaseModel):
    """Shape of one entry in the model's JSON answer."""

    model_config = ConfigDict(populate_by_name=True)

    question_text: str = Field(alias="questionText", min_length=1)
    options: list[str] = Field(min_length=2)
    correct_answer_indices: list[int] = Field(alias="correctAnswerIndices", min_length=1)
    category: str | None = None
    type: str | None = None

    def to_question(self) -> Question:
        return Question(
            question_text=self.question_text,
            options=list(self.options),
            correct_answer_indices=sorted(set(self.correct_answer_indices)),
            type=QuestionType.parse(self.type),
            category=self.category,
        )


def render_prompt(template: str, topic: str, count: int) -> str:
    return template.replace("{numQuestions}", str(count)).replace("{topic}", topic)


def extract_json_array(content: str) -> list[Any]:
    """Pull the question array out of a chat answer.

    Accepts a bare array, an array wrapped in code fences or an object with a
    ``questions`` key.
    """
    text = _FENCE.sub("", (content or "").strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("["), text.rfind("]")
        if start < 0 or end <= start:
            raise QuestionGenerationError() from None
        try:
            data = json.loads(text[start : end + 1])
        except json.JSONDecodeError as exc:
            raise QuestionGenerationError() from exc
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise QuestionGenerationError()
    return data


def parse_generated_questions(items: list[Any]) -> list[Question]:
    """Validate and normalize the raw entries, dropping the unusable ones."""
    questions: list[Question] = []
    for position, item in enumerate(items, start=1):
        try:
            question = normalize_question(GeneratedQuestion.model_validate(item).to_question())
            validate_question(question)
        except (ValidationError, ValueError) as exc:
            logger.info("Dropping generated question %d: %s", position, exc)
            continue
        questions.append(question)
    return questions


class QuestionGenerator:
    """Client for the chat completion endpoint."""

    def __init__(
        self,
        base_url: str,
        model: str,
        api_key: str | None = None,
        temperature: float = 0.7,
        timeout: float = 60.0,
        prompt_template: str = DEFAULT_PROMPT_TEMPLATE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._timeout = timeout
        self.prompt_template = prompt_template
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "QuestionGenerator":
        return cls(
            base_url=settings.generator_base_url,
            model=settings.generator_model,
            api_key=settings.generator_api_key,
            temperature=settings.generator_temperature,
            timeout=settings.generator_timeout_seconds,
            transport=transport,
        )

    def generate(self, topic: str, count: int) -> list[Question]:
        topic = (topic or "").strip()
        if not topic:
            raise ValueError("Please enter a topic.")
        if count <= 0:
            raise ValueError("Question count must be positive.")

        payload = {
            "model": self._model,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": render_prompt(self.prompt_template, topic, count)}],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._url, json=payload, headers=headers)
                response.raise_for_status()
                content = response.json()["choices"][0]["message"]["content"]
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Question generation request failed: %s", exc)
            raise QuestionGenerationError() from exc

        questions = parse_generated_questions(extract_json_array(content))
        if not questions:
            raise QuestionGenerationError()
        logger.info("Generated %d questions for topic %r", len(questions), topic)
        return questions
