from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")


class SlotError(ValueError):
    """Raised when a proposed slot or booking draft is malformed."""


@dataclass(frozen=True)
class TimeSlot:
    """A reservation window [start, end) in facility wall-clock time."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise SlotError("end_time must be after start_time")

    @classmethod
    def from_parts(cls, date_str: str, time_str: str, duration_hours) -> "TimeSlot":
        hours = parse_duration(duration_hours)
        try:
            day = date.fromisoformat((date_str or "").strip())
        except ValueError:
            raise SlotError("Invalid date. Use YYYY-MM-DD")
        try:
            clock = datetime.strptime((time_str or "").strip(), "%H:%M").time()
        except ValueError:
            raise SlotError("Invalid start time. Use HH:MM")

        start = datetime.combine(day, clock)
        return cls(start=start, end=start + timedelta(hours=hours))

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def duration_hours(self) -> int:
        return int((self.end - self.start).total_seconds() // 3600)

    def overlaps(self, other_start: datetime, other_end: datetime) -> bool:
        # Strict comparison: back-to-back slots do not overlap
        return self.start < other_end and self.end > other_start


def parse_duration(value) -> int:
    if isinstance(value, bool):
        raise SlotError("duration_hours must be a positive whole number")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise SlotError("duration_hours must be a positive whole number")
        value = int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise SlotError("duration_hours must be a positive whole number")
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise SlotError("duration_hours must be a positive whole number")
    return value


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class BookingDraft:
    customer_name: str
    phone_number: str
    slot: TimeSlot
    total_amount: Decimal

    def as_row(self) -> dict:
        return {
            "customer_name": self.customer_name,
            "phone_number": self.phone_number,
            "booking_time": self.slot.start,
            "end_time": self.slot.end,
            "duration_hours": self.slot.duration_hours,
            "total_amount": self.total_amount,
        }


def build_draft(customer_name, phone_number, slot: TimeSlot, hourly_rate) -> BookingDraft:
    """Validate customer fields and snapshot the amount at the current rate."""
    name = (customer_name or "").strip() if isinstance(customer_name, str) else ""
    phone = (phone_number or "").strip() if isinstance(phone_number, str) else ""
    if not name:
        raise SlotError("customer_name is required")
    if not phone:
        raise SlotError("phone_number is required")
    if len(name) > 120:
        raise SlotError("customer_name is too long")
    if len(phone) > 30:
        raise SlotError("phone_number is too long")

    rate = to_money(hourly_rate)
    if rate < 0:
        raise SlotError("hourly_rate must not be negative")

    return BookingDraft(
        customer_name=name,
        phone_number=phone,
        slot=slot,
        total_amount=to_money(rate * slot.duration_hours),
    )
