from flask import Blueprint, request, jsonify, g

from services.revenue import RangeError, aggregate, chart_buckets, dashboard_metrics
from utils.auth_context import console_required
from utils.serialize import booking_json

revenue_bp = Blueprint("revenue", __name__, url_prefix="/revenue")


@revenue_bp.get("")
@console_required
def revenue_report():
    range_name = request.args.get("range", "today")
    try:
        summary = aggregate(
            g.console.store.bookings,
            range_name,
            g.console.now(),
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
    except RangeError as err:
        return jsonify(error=str(err)), 400

    return jsonify(
        range=range_name,
        total=float(summary.total),
        paid_count=summary.paid_count,
        booking_count=summary.booking_count,
        bookings=[booking_json(b) for b in summary.bookings],
    ), 200


@revenue_bp.get("/chart")
@console_required
def revenue_chart():
    view = request.args.get("view", "week")
    settings = g.console.settings
    try:
        buckets = chart_buckets(
            g.console.store.bookings,
            view,
            g.console.now(),
            open_hour=settings.open_hour,
            close_hour=settings.close_hour,
        )
    except RangeError as err:
        return jsonify(error=str(err)), 400
    return jsonify(view=view, buckets=buckets), 200


@revenue_bp.get("/dashboard")
@console_required
def dashboard():
    return jsonify(dashboard_metrics(g.console.store.bookings, g.console.now())), 200
