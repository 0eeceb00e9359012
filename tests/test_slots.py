from datetime import datetime
from decimal import Decimal

import pytest

from services.slots import SlotError, TimeSlot, build_draft, parse_duration


def test_from_parts_builds_hour_aligned_window():
    slot = TimeSlot.from_parts("2026-10-20", "22:00", 1)

    assert slot.start == datetime(2026, 10, 20, 22, 0)
    assert slot.end == datetime(2026, 10, 20, 23, 0)
    assert slot.duration_hours == 1
    assert slot.day.isoformat() == "2026-10-20"


@pytest.mark.parametrize("value", [0, -1, 1.5, "", "two", True, None])
def test_duration_must_be_positive_whole_hours(value):
    with pytest.raises(SlotError):
        parse_duration(value)


def test_duration_accepts_numeric_strings_and_whole_floats():
    assert parse_duration("3") == 3
    assert parse_duration(2.0) == 2


def test_from_parts_rejects_bad_date_and_time():
    with pytest.raises(SlotError):
        TimeSlot.from_parts("20-10-2026", "10:00", 1)
    with pytest.raises(SlotError):
        TimeSlot.from_parts("2026-10-20", "25:00", 1)


def test_end_before_start_is_rejected():
    with pytest.raises(SlotError):
        TimeSlot(datetime(2026, 10, 20, 11), datetime(2026, 10, 20, 10))


def test_overlap_is_strict():
    slot = TimeSlot.from_parts("2026-10-20", "10:00", 1)

    assert slot.overlaps(datetime(2026, 10, 20, 10, 30), datetime(2026, 10, 20, 11, 30))
    assert not slot.overlaps(datetime(2026, 10, 20, 11), datetime(2026, 10, 20, 12))
    assert not slot.overlaps(datetime(2026, 10, 20, 9), datetime(2026, 10, 20, 10))


def test_draft_snapshots_amount_and_strips_fields():
    slot = TimeSlot.from_parts("2026-10-20", "10:00", 2)
    draft = build_draft("  Ravi  ", " 9876543210 ", slot, "150")

    assert draft.customer_name == "Ravi"
    assert draft.phone_number == "9876543210"
    assert draft.total_amount == Decimal("300.00")
    assert draft.as_row()["duration_hours"] == 2


@pytest.mark.parametrize("name, phone", [("", "123"), ("Ravi", "  "), (None, "123")])
def test_draft_requires_name_and_phone(name, phone):
    slot = TimeSlot.from_parts("2026-10-20", "10:00", 1)
    with pytest.raises(SlotError):
        build_draft(name, phone, slot, 150)
