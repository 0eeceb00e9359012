from datetime import datetime, timedelta
from types import SimpleNamespace

from services.availability import (
    REASON_OUTSIDE_HOURS,
    REASON_OVERLAP,
    REASON_PAST_TIME,
    bookings_on_date,
    check_availability,
)

NOW = datetime(2026, 10, 19, 8, 0)
DAY = datetime(2026, 10, 20)


def at(hour, minute=0, day=DAY):
    return day + timedelta(hours=hour, minutes=minute)


def existing(start_hour, end_hour, day=DAY):
    return SimpleNamespace(booking_time=at(start_hour, day=day), end_time=at(end_hour, day=day))


def check(start, end, bookings=(), now=NOW, open_hour=6, close_hour=23):
    return check_availability(start, end, list(bookings), now, open_hour, close_hour)


def test_free_slot_inside_hours_is_valid():
    result = check(at(10), at(11))

    assert result.valid
    assert result.reason is None


def test_past_start_is_rejected_before_anything_else():
    # also outside hours and overlapping, past time still wins
    start = NOW - timedelta(hours=5)
    result = check(start, start + timedelta(hours=1), [existing(3, 4, day=datetime(2026, 10, 19))])

    assert not result.valid
    assert result.reason == REASON_PAST_TIME


def test_last_hour_before_close_is_valid():
    assert check(at(22), at(23)).valid


def test_slot_running_past_close_is_rejected():
    result = check(at(22, 30), at(23, 30))

    assert not result.valid
    assert result.reason == REASON_OUTSIDE_HOURS


def test_end_minutes_after_close_hour_are_rejected():
    assert check(at(21, 30), at(23, 1)).reason == REASON_OUTSIDE_HOURS


def test_start_before_open_is_rejected():
    assert check(at(5), at(6)).reason == REASON_OUTSIDE_HOURS


def test_slot_rolling_past_midnight_is_rejected():
    # 22:00 + 3h ends at 01:00 the next day
    assert check(at(22), at(25)).reason == REASON_OUTSIDE_HOURS


def test_exact_overlap_is_rejected():
    result = check(at(10), at(11), [existing(10, 11)])

    assert not result.valid
    assert result.reason == REASON_OVERLAP


def test_partial_overlap_is_rejected():
    assert check(at(10, 30), at(11, 30), [existing(10, 11)]).reason == REASON_OVERLAP
    assert check(at(9), at(12), [existing(10, 11)]).reason == REASON_OVERLAP


def test_back_to_back_is_allowed():
    bookings = [existing(10, 11)]

    assert check(at(11), at(12), bookings).valid
    assert check(at(9), at(10), bookings).valid


def test_bookings_on_date_keeps_only_that_day():
    today = existing(10, 11)
    other = existing(10, 11, day=DAY + timedelta(days=1))

    assert bookings_on_date([today, other], DAY.date()) == [today]
