"""Access code generation, validity policy and optimistic admin toggling."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from exam_trainer.core.models import AccessCode

logger = logging.getLogger(__name__)

_ADJECTIVES = (
    "BRAV",
    "FRECH",
    "FRÖHLICH",
    "VERSPIELT",
    "TREU",
    "CHARMANT",
    "CLEVER",
    "MUTIG",
    "LIEB",
    "TAPFER",
    "NEUGIERIG",
    "GLÜCKLICH",
    "FLAUSCHIG",
    "WACH",
    "ENTSPANNT",
    "SOUVERÄN",
    "ZUVERLÄSSIG",
    "LERNFREUDIG",
)

_NOUNS = (
    "PFOTE",
    "FELLNASE",
    "WUFF",
    "WELPE",
    "SCHNAUZE",
    "LECKERLI",
    "KNOCHEN",
    "SPIELZEUG",
    "APPORT",
    "TRAIL",
    "DUMMY",
    "HUNDEWIESE",
    "GRUPPE",
    "TRAINING",
    "CLICKER",
    "LEINE",
    "HALSBAND",
)


def generate_readable_code(rng: random.Random | None = None) -> str:
    """Return a code such as ``MUTIG-PFOTE-417``."""
    source = rng or random.Random()
    adjective = source.choice(_ADJECTIVES)
    noun = source.choice(_NOUNS)
    number = source.randint(100, 999)
    return f"{adjective}-{noun}-{number}"


def is_access_code_valid(
    record: AccessCode | None,
    now: datetime | None = None,
    max_age_days: int | None = None,
) -> bool:
    """Apply the login policy to a stored access code.

    Inactive codes never pass. With ``max_age_days`` set, codes created
    before the cutoff are expired; codes without a creation date fail then too.
    """
    if record is None or not record.is_active:
        return False
    if max_age_days is None:
        return True
    if record.created_at is None:
        return False
    current = now or datetime.now(timezone.utc)
    created_at = record.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return created_at >= current - timedelta(days=max_age_days)


class OptimisticToggle:
    """Flip ``is_active`` locally first and roll back when the backend refuses.

    The admin list shows the new state immediately; ``commit`` receives the
    code id and the new flag and must raise on failure.
    """

    def __init__(self, codes: list[AccessCode], commit: Callable[[int, bool], AccessCode]) -> None:
        self._codes = codes
        self._commit = commit

    @property
    def codes(self) -> list[AccessCode]:
        return self._codes

    def toggle(self, code_id: int) -> AccessCode:
        position = self._position_of(code_id)
        snapshot = self._codes[position]
        speculative = replace(snapshot, is_active=not snapshot.is_active)
        self._codes[position] = speculative
        try:
            confirmed = self._commit(code_id, speculative.is_active)
        except Exception:
            logger.warning("Toggling access code %s failed; restoring previous state", code_id)
            self._codes[self._position_of(code_id)] = snapshot
            raise
        self._codes[self._position_of(code_id)] = confirmed
        return confirmed

    def _position_of(self, code_id: int) -> int:
        for position, code in enumerate(self._codes):
            if code.id == code_id:
                return position
        raise KeyError(f"Access code {code_id} is not loaded")
