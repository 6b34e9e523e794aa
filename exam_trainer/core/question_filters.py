"""Search, filter, sort and selection helpers for the admin question table.

Filter arguments use ``None`` for "all". The helpers are pure so the Qt
panel only keeps the current filter values and the selected id set.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from exam_trainer.core.models import Question, QuestionType

SORTABLE_KEYS: tuple[str, ...] = ("question_text", "type", "category", "association")


def _matches(
    question: Question,
    search: str,
    category: str | None,
    association: str | None,
    question_type: QuestionType | None,
) -> bool:
    if category is not None and question.category != category:
        return False
    if association is not None and question.association != association:
        return False
    if question_type is not None and question.type is not question_type:
        return False
    if not search:
        return True
    return search in question.question_text.lower() or any(search in option.lower() for option in question.options)


def filter_questions(
    questions: Iterable[Question],
    search: str = "",
    category: str | None = None,
    association: str | None = None,
    question_type: QuestionType | None = None,
) -> list[Question]:
    """Return the questions matching every active filter.

    ``search`` is a case-insensitive substring match on the question text and
    all options.
    """
    needle = (search or "").strip().lower()
    return [q for q in questions if _matches(q, needle, category, association, question_type)]


def _sort_value(question: Question, key: str) -> str:
    value = getattr(question, key)
    if isinstance(value, QuestionType):
        value = value.value
    return str(value or "").casefold()


def sort_questions(questions: Iterable[Question], key: str | None, descending: bool = False) -> list[Question]:
    if key is None:
        return list(questions)
    if key not in SORTABLE_KEYS:
        raise ValueError(f"Cannot sort by '{key}'.")
    return sorted(questions, key=lambda q: _sort_value(q, key), reverse=descending)


def next_sort_state(current_key: str | None, current_descending: bool, clicked_key: str) -> tuple[str, bool]:
    """Clicking the active ascending column flips it; any other click sorts ascending."""
    if current_key == clicked_key and not current_descending:
        return clicked_key, True
    return clicked_key, False


def list_categories(questions: Iterable[Question]) -> list[str]:
    """Distinct non-empty categories in first-seen order."""
    seen: dict[str, None] = {}
    for question in questions:
        if question.category:
            seen.setdefault(question.category, None)
    return list(seen)


def select_ids_matching(
    questions: Iterable[Question],
    selected: set[int],
    category: str | None = None,
    association: str | None = None,
    question_type: QuestionType | None = None,
) -> tuple[set[int], int]:
    """Add every question matching the given filter to ``selected``.

    Returns the new selection and the number of matching questions.
    """
    matching = [
        q.id
        for q in filter_questions(questions, "", category, association, question_type)
        if q.id is not None
    ]
    return selected | set(matching), len(matching)


def toggle_id(selected: set[int], question_id: int) -> set[int]:
    updated = set(selected)
    if question_id in updated:
        updated.remove(question_id)
    else:
        updated.add(question_id)
    return updated


def select_all(visible: Sequence[Question], checked: bool) -> set[int]:
    if not checked:
        return set()
    return {q.id for q in visible if q.id is not None}
