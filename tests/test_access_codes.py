from __future__ import annotations

import random
import re
from datetime import datetime, timedelta, timezone

import pytest

from exam_trainer.core.access_codes import OptimisticToggle, generate_readable_code, is_access_code_valid
from exam_trainer.core.errors import DataStoreError
from exam_trainer.core.models import AccessCode

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_generated_code_format():
    code = generate_readable_code(random.Random(1))

    assert re.fullmatch(r"[A-ZÄÖÜ]+-[A-ZÄÖÜ]+-\d{3}", code)


def test_generation_is_reproducible_with_seed():
    assert generate_readable_code(random.Random(5)) == generate_readable_code(random.Random(5))


def test_inactive_or_missing_code_is_invalid():
    assert not is_access_code_valid(None, NOW)
    assert not is_access_code_valid(AccessCode(id=1, code="X", is_active=False), NOW)


def test_active_code_without_age_limit_is_valid():
    assert is_access_code_valid(AccessCode(id=1, code="X"), NOW)


def test_age_limit():
    fresh = AccessCode(id=1, code="X", created_at=NOW - timedelta(days=30))
    old = AccessCode(id=2, code="Y", created_at=NOW - timedelta(days=400))
    undated = AccessCode(id=3, code="Z")

    assert is_access_code_valid(fresh, NOW, max_age_days=365)
    assert not is_access_code_valid(old, NOW, max_age_days=365)
    assert not is_access_code_valid(undated, NOW, max_age_days=365)


def test_naive_timestamps_are_treated_as_utc():
    record = AccessCode(id=1, code="X", created_at=datetime(2024, 4, 30))

    assert is_access_code_valid(record, datetime(2024, 5, 1), max_age_days=2)


def test_toggle_commits_new_state():
    codes = [AccessCode(id=1, code="A"), AccessCode(id=2, code="B")]
    calls = []

    def commit(code_id, is_active):
        calls.append((code_id, is_active))
        return AccessCode(id=code_id, code="B", is_active=is_active, send_status="sent")

    toggle = OptimisticToggle(codes, commit)
    confirmed = toggle.toggle(2)

    assert calls == [(2, False)]
    assert confirmed.is_active is False
    assert toggle.codes[1].send_status == "sent"


def test_toggle_rolls_back_on_failure():
    codes = [AccessCode(id=1, code="A", is_active=True)]
    seen = []

    def commit(code_id, is_active):
        seen.append(codes[0].is_active)
        raise DataStoreError()

    toggle = OptimisticToggle(codes, commit)
    with pytest.raises(DataStoreError):
        toggle.toggle(1)

    assert seen == [False]
    assert toggle.codes[0].is_active is True


def test_toggle_unknown_id():
    toggle = OptimisticToggle([], lambda code_id, is_active: None)

    with pytest.raises(KeyError):
        toggle.toggle(9)
