"""Cleanup of question text coming from imports, the database or the AI generator.

Imported spreadsheets frequently carry HTML entities (``&amp;``, ``&#x000D;``)
and stray markup from rich-text editors. The normalizer turns such text into
plain display text with single line breaks.
"""

from __future__ import annotations

import html
import re

from exam_trainer.core.models import Question

_TAG_PATTERN = re.compile(r"<[^>]*>")
_LINE_BREAK_RUN = re.compile(r"(\n\s*)+")


def normalize_text(text: str | None) -> str:
    """Return ``text`` without entities, tags and repeated line breaks."""
    if not text:
        return ""
    normalized = _decode_markup(str(text))
    normalized = normalized.replace("\r\n", "\n").replace("\r", "\n")
    normalized = _LINE_BREAK_RUN.sub("\n", normalized)
    return normalized.strip()


def normalize_question(question: Question) -> Question:
    """Return a copy of ``question`` with text, options and category normalized."""
    category = normalize_text(question.category) if question.category is not None else None
    return question.copy_with(
        question_text=normalize_text(question.question_text),
        options=[normalize_text(option) for option in question.options],
        category=category,
    )


def _decode_markup(text: str) -> str:
    # Repeat until stable so double-encoded input ("&amp;amp;") ends up plain.
    previous = None
    while previous != text:
        previous = text
        text = _TAG_PATTERN.sub("", html.unescape(text))
    return text
