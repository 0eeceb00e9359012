import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, NamedTuple, Optional, Tuple

from models.booking import PAYMENT_PAID

RANGES = ("today", "yesterday", "week", "month", "year", "custom", "all")
# Revenue stops at the end of today for these; the list view shows the whole period
TO_DATE_RANGES = ("week", "month", "year")
LIST_FILTERS = ("today", "yesterday", "week", "month", "all")
CHART_VIEWS = ("day", "week", "month")


class RangeError(ValueError):
    pass


class RevenueSummary(NamedTuple):
    total: Decimal
    paid_count: int
    booking_count: int
    bookings: list


def _midnight(d: date) -> datetime:
    return datetime.combine(d, datetime.min.time())


def _is_paid(booking) -> bool:
    return booking.payment_status == PAYMENT_PAID


def _income(bookings: Iterable) -> Decimal:
    return sum((Decimal(b.total_amount) for b in bookings if _is_paid(b)), Decimal("0"))


def resolve_range(range_name: str, now: datetime, start: Optional[str] = None,
                  end: Optional[str] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Half-open [start, end) window for a named range. ``all`` gives
    (None, None). Week starts on Sunday. Custom bounds are inclusive
    calendar dates.
    """
    today = _midnight(now.date())

    if range_name == "today":
        return today, today + timedelta(days=1)
    if range_name == "yesterday":
        return today - timedelta(days=1), today
    if range_name == "week":
        # date.weekday(): Monday == 0, Sunday == 6
        week_start = today - timedelta(days=(now.weekday() + 1) % 7)
        return week_start, week_start + timedelta(days=7)
    if range_name == "month":
        first = today.replace(day=1)
        days = calendar.monthrange(first.year, first.month)[1]
        return first, first + timedelta(days=days)
    if range_name == "year":
        return today.replace(month=1, day=1), today.replace(year=today.year + 1, month=1, day=1)
    if range_name == "custom":
        if not start or not end:
            raise RangeError("custom range needs start and end dates")
        try:
            first = _midnight(date.fromisoformat(start))
            last = _midnight(date.fromisoformat(end))
        except ValueError:
            raise RangeError("Invalid date. Use YYYY-MM-DD")
        if last < first:
            raise RangeError("end must not be before start")
        return first, last + timedelta(days=1)
    if range_name == "all":
        return None, None

    raise RangeError(f"range must be one of {', '.join(RANGES)}")


def revenue_window(range_name: str, now: datetime, start: Optional[str] = None,
                   end: Optional[str] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """resolve_range, with week, month and year cut off at the end of today."""
    window = resolve_range(range_name, now, start, end)
    if range_name in TO_DATE_RANGES:
        return window[0], _midnight(now.date()) + timedelta(days=1)
    return window


def _in_window(booking, window) -> bool:
    start, end = window
    if start is None:
        return True
    return start <= booking.booking_time < end


def aggregate(bookings: Iterable, range_name: str, now: datetime,
              start: Optional[str] = None, end: Optional[str] = None) -> RevenueSummary:
    """
    Revenue for a range, to date for week, month and year. ``total`` and
    ``paid_count`` only see paid bookings; ``booking_count`` counts every
    booking in the window.
    """
    window = revenue_window(range_name, now, start, end)
    matching = [b for b in bookings if _in_window(b, window)]
    paid = sorted((b for b in matching if _is_paid(b)), key=lambda b: b.booking_time, reverse=True)
    return RevenueSummary(
        total=_income(paid),
        paid_count=len(paid),
        booking_count=len(matching),
        bookings=paid,
    )


def filter_bookings(bookings: Iterable, filter_name: str, now: datetime,
                    search: str = "") -> List:
    """Booking list view: date filter plus name/phone search, newest first."""
    if filter_name not in LIST_FILTERS:
        raise RangeError(f"filter must be one of {', '.join(LIST_FILTERS)}")

    window = resolve_range(filter_name, now)
    needle = (search or "").strip().lower()

    out = []
    for b in bookings:
        if not _in_window(b, window):
            continue
        if needle and needle not in b.customer_name.lower() and needle not in b.phone_number:
            continue
        out.append(b)
    return sorted(out, key=lambda b: b.booking_time, reverse=True)


def _bucket(label: str, start: datetime, end: datetime, bookings: list) -> dict:
    inside = [b for b in bookings if start <= b.booking_time < end]
    return {
        "label": label,
        "start": start.isoformat(),
        "income": float(_income(inside)),
        "paid_count": sum(1 for b in inside if _is_paid(b)),
    }


def chart_buckets(bookings: Iterable, view: str, now: datetime,
                  open_hour: int = 6, close_hour: int = 23) -> List[dict]:
    bookings = list(bookings)
    today = _midnight(now.date())

    if view == "day":
        # Opening hour through closing hour, both inclusive
        return [
            _bucket(f"{hour}:00", today + timedelta(hours=hour),
                    today + timedelta(hours=hour + 1), bookings)
            for hour in range(open_hour, close_hour + 1)
        ]
    if view == "week":
        out = []
        for back in range(6, -1, -1):
            day = today - timedelta(days=back)
            out.append(_bucket(day.strftime("%a"), day, day + timedelta(days=1), bookings))
        return out
    if view == "month":
        first = today.replace(day=1)
        days = calendar.monthrange(first.year, first.month)[1]
        return [
            _bucket(str(n + 1), first + timedelta(days=n), first + timedelta(days=n + 1), bookings)
            for n in range(days)
        ]

    raise RangeError(f"view must be one of {', '.join(CHART_VIEWS)}")


def dashboard_metrics(bookings: Iterable, now: datetime) -> dict:
    bookings = list(bookings)
    today_window = resolve_range("today", now)
    month_start = _midnight(now.date()).replace(day=1)

    today_bookings = [b for b in bookings if _in_window(b, today_window)]
    month_bookings = [b for b in bookings if b.booking_time >= month_start]

    return {
        "total_income": float(_income(bookings)),
        "total_bookings": len(bookings),
        "unique_customers": len({b.phone_number for b in bookings}),
        "today_income": float(_income(today_bookings)),
        "today_count": len(today_bookings),
        "month_income": float(_income(month_bookings)),
        "month_count": len(month_bookings),
    }
