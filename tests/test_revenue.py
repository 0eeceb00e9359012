from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from services.revenue import (
    RangeError,
    aggregate,
    chart_buckets,
    dashboard_metrics,
    filter_bookings,
    resolve_range,
    revenue_window,
)

# Monday 19 October 2026
NOW = datetime(2026, 10, 19, 15, 0)


def booking(start, amount=150, status="paid", name="Ravi", phone="9000000001"):
    return SimpleNamespace(
        booking_time=start,
        total_amount=Decimal(str(amount)),
        payment_status=status,
        customer_name=name,
        phone_number=phone,
    )


def test_resolve_named_ranges():
    assert resolve_range("today", NOW) == (datetime(2026, 10, 19), datetime(2026, 10, 20))
    assert resolve_range("yesterday", NOW) == (datetime(2026, 10, 18), datetime(2026, 10, 19))
    # week starts on Sunday
    assert resolve_range("week", NOW) == (datetime(2026, 10, 18), datetime(2026, 10, 25))
    assert resolve_range("month", NOW) == (datetime(2026, 10, 1), datetime(2026, 11, 1))
    assert resolve_range("year", NOW) == (datetime(2026, 1, 1), datetime(2027, 1, 1))
    assert resolve_range("all", NOW) == (None, None)


def test_custom_range_is_inclusive_of_end_date():
    assert resolve_range("custom", NOW, "2026-10-01", "2026-10-05") == (
        datetime(2026, 10, 1),
        datetime(2026, 10, 6),
    )


@pytest.mark.parametrize("args", [("custom", None, None), ("custom", "2026-10-05", "2026-10-01"), ("decade", None, None)])
def test_bad_ranges_raise(args):
    name, start, end = args
    with pytest.raises(RangeError):
        resolve_range(name, NOW, start, end)


def test_today_total_excludes_unpaid_bookings():
    rows = [
        booking(datetime(2026, 10, 19, 10), 150),
        booking(datetime(2026, 10, 19, 12), 300, status="pending"),
        booking(datetime(2026, 10, 18, 10), 150),
    ]
    summary = aggregate(rows, "today", NOW)

    assert summary.total == Decimal("150")
    assert summary.paid_count == 1
    assert summary.booking_count == 2


def test_revenue_window_runs_to_end_of_today():
    assert revenue_window("week", NOW) == (datetime(2026, 10, 18), datetime(2026, 10, 20))
    assert revenue_window("month", NOW) == (datetime(2026, 10, 1), datetime(2026, 10, 20))
    assert revenue_window("year", NOW) == (datetime(2026, 1, 1), datetime(2026, 10, 20))
    assert revenue_window("today", NOW) == resolve_range("today", NOW)


def test_week_revenue_is_week_to_date():
    rows = [
        booking(datetime(2026, 10, 18, 10), 150),
        booking(datetime(2026, 10, 19, 20), 150),
        # later this week
        booking(datetime(2026, 10, 23, 10), 300),
    ]
    summary = aggregate(rows, "week", NOW)

    assert summary.total == Decimal("300")
    assert summary.booking_count == 2
    # the list view still shows the whole week
    assert len(filter_bookings(rows, "week", NOW)) == 3


def test_all_range_newest_first():
    rows = [booking(datetime(2026, 1, 1, 10)), booking(datetime(2026, 10, 19, 10))]
    summary = aggregate(rows, "all", NOW)

    assert [b.booking_time.month for b in summary.bookings] == [10, 1]
    assert summary.total == Decimal("300")


def test_filter_bookings_counts_unpaid_and_searches():
    rows = [
        booking(datetime(2026, 10, 19, 10), status="pending", name="Ravi Kumar", phone="9000000001"),
        booking(datetime(2026, 10, 19, 12), name="Anita", phone="9111111111"),
        booking(datetime(2026, 10, 17, 9), name="Ravi Kumar"),
    ]

    assert len(filter_bookings(rows, "today", NOW)) == 2
    assert [b.customer_name for b in filter_bookings(rows, "today", NOW, "ravi")] == ["Ravi Kumar"]
    assert len(filter_bookings(rows, "all", NOW, "91111")) == 1
    assert len(filter_bookings(rows, "week", NOW)) == 2


def test_filter_bookings_rejects_custom():
    with pytest.raises(RangeError):
        filter_bookings([], "custom", NOW)


def test_day_chart_has_one_zeroed_bucket_per_operating_hour():
    rows = [booking(datetime(2026, 10, 19, 10), 150), booking(datetime(2026, 10, 19, 11), 150, status="pending")]
    buckets = chart_buckets(rows, "day", NOW, open_hour=6, close_hour=23)

    assert len(buckets) == 18
    assert buckets[0]["label"] == "6:00"
    assert buckets[-1]["label"] == "23:00"
    by_label = {b["label"]: b["income"] for b in buckets}
    assert by_label["10:00"] == 150.0
    assert by_label["11:00"] == 0.0


def test_week_chart_is_trailing_seven_days():
    rows = [booking(datetime(2026, 10, 13, 10)), booking(datetime(2026, 10, 12, 10))]
    buckets = chart_buckets(rows, "week", NOW)

    assert len(buckets) == 7
    assert buckets[0]["start"] == "2026-10-13T00:00:00"
    assert buckets[-1]["label"] == "Mon"
    assert sum(b["income"] for b in buckets) == 150.0


def test_month_chart_has_every_calendar_day():
    buckets = chart_buckets([booking(datetime(2026, 10, 31, 10))], "month", NOW)

    assert len(buckets) == 31
    assert buckets[-1]["income"] == 150.0
    assert all(b["income"] == 0.0 for b in buckets[:-1])


def test_dashboard_metrics():
    rows = [
        booking(datetime(2026, 10, 19, 10), 150, phone="1"),
        booking(datetime(2026, 10, 19, 11), 300, status="pending", phone="1"),
        booking(datetime(2026, 9, 30, 10), 150, phone="2"),
    ]
    metrics = dashboard_metrics(rows, NOW)

    assert metrics["total_income"] == 300.0
    assert metrics["total_bookings"] == 3
    assert metrics["unique_customers"] == 2
    assert metrics["today_income"] == 150.0
    assert metrics["today_count"] == 2
    assert metrics["month_income"] == 150.0
    assert metrics["month_count"] == 2
