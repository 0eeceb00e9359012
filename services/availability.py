from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple, Optional

REASON_PAST_TIME = "past_time"
REASON_OUTSIDE_HOURS = "outside_operating_hours"
REASON_OVERLAP = "overlap"


class AvailabilityResult(NamedTuple):
    valid: bool
    reason: Optional[str] = None
    message: Optional[str] = None


AVAILABLE = AvailabilityResult(valid=True)


def bookings_on_date(bookings: Iterable, day: date) -> list:
    """Existing bookings whose start falls on the given calendar date."""
    return [b for b in bookings if b.booking_time.date() == day]


def check_availability(
    proposed_start: datetime,
    proposed_end: datetime,
    existing_for_same_date: Iterable,
    now: datetime,
    open_hour: int,
    close_hour: int,
) -> AvailabilityResult:
    """
    Decide whether [proposed_start, proposed_end) may be booked.

    Rules run in order and the first failure wins: the slot must not start
    in the past, must sit inside operating hours, and must not overlap any
    existing booking of that day. Existing bookings only need
    ``booking_time`` and ``end_time``.
    """
    if proposed_start < now:
        return AvailabilityResult(False, REASON_PAST_TIME, "Cannot book for a past time.")

    # End measured from the start's midnight so a slot rolling past midnight
    # counts as after closing instead of wrapping to an early hour
    day_start = datetime.combine(proposed_start.date(), datetime.min.time())
    closes_at = day_start + timedelta(hours=close_hour)
    if proposed_start.hour < open_hour or proposed_end > closes_at:
        return AvailabilityResult(
            False,
            REASON_OUTSIDE_HOURS,
            f"Booking must be between {open_hour}:00 and {close_hour}:00.",
        )

    for booking in existing_for_same_date:
        if proposed_start < booking.end_time and proposed_end > booking.booking_time:
            return AvailabilityResult(
                False,
                REASON_OVERLAP,
                "Selected time overlaps with an existing booking.",
            )

    return AVAILABLE
