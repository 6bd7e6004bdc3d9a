"""
Tri-state field updates and time slot normalization.
"""

from datetime import date
from typing import Optional

import pytest
from pydantic import BaseModel

from padel_league.utils.field_update import CLEARED, UNCHANGED, FieldUpdate, apply_updates, field_update
from padel_league.utils.time_slots import day_of_week, normalize_time_slot, normalize_time_slots


class Body(BaseModel):
    reason: Optional[str] = None
    count: Optional[int] = None


class Target:
    def __init__(self):
        self.reason = "old"
        self.count = 3


def test_absent_null_and_value_are_distinct():
    body = Body.model_validate({"reason": None, "count": 5})

    assert field_update(body, "reason") == CLEARED
    assert field_update(body, "count") == FieldUpdate.set_to(5)
    assert field_update(Body(), "reason") == UNCHANGED


def test_apply_resolves_against_current_value():
    assert UNCHANGED.apply("x") == "x"
    assert CLEARED.apply("x") is None
    assert FieldUpdate.set_to("y").apply("x") == "y"
    assert CLEARED.is_cleared
    assert not FieldUpdate.set_to(None).is_cleared


def test_apply_updates_only_touches_sent_fields():
    target = Target()

    changed = apply_updates(target, Body.model_validate({"reason": None}), ["reason", "count"])

    assert changed is True
    assert target.reason is None
    assert target.count == 3


def test_apply_updates_reports_no_change():
    target = Target()

    assert apply_updates(target, Body.model_validate({"count": 3}), ["reason", "count"]) is False


@pytest.mark.parametrize(
    "raw, expected",
    [("18:30", "18:30"), ("18:30:00", "18:30"), ("9:05", "09:05"), (" 21:00 ", "21:00")],
)
def test_normalize_time_slot(raw, expected):
    assert normalize_time_slot(raw) == expected


@pytest.mark.parametrize("raw", ["", "18", "24:00", "18:60", "six thirty"])
def test_normalize_time_slot_rejects_garbage(raw):
    with pytest.raises(ValueError):
        normalize_time_slot(raw)


def test_normalize_time_slots_dedupes_and_sorts():
    assert normalize_time_slots(["21:00", "9:00", "21:00:00"]) == ["09:00", "21:00"]


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2026, 3, 1)) == 0
    assert day_of_week(date(2026, 3, 7)) == 6
