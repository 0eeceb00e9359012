from datetime import date

from flask import Blueprint, request, jsonify, g, session

from services.availability import bookings_on_date, check_availability
from services.booking_store import BookingAlreadyPaid, BookingNotFound, StoreError
from services.payment_flow import FlowEntry, PaymentFlow
from services.revenue import RangeError, filter_bookings
from services.slots import SlotError, TimeSlot, build_draft
from utils.auth_context import console_required
from utils.audit import log_event
from utils.serialize import booking_json, flow_json

booking_bp = Blueprint("booking", __name__, url_prefix="/bookings")

FLOW_SESSION_KEY = "payment_flow"


def _store_failure(message: str, error):
    # Refusals raised by the store itself are caller mistakes, not outages
    if isinstance(error, BookingNotFound):
        return jsonify(error=str(error)), 404
    if isinstance(error, BookingAlreadyPaid):
        return jsonify(error=str(error)), 409
    if isinstance(error, StoreError):
        return jsonify(error=str(error)), 400
    return jsonify(error=message), 503


def _slot_from_request(data: dict) -> TimeSlot:
    return TimeSlot.from_parts(
        data.get("date"),
        data.get("start_time"),
        data.get("duration_hours", 1),
    )


def _check(slot: TimeSlot):
    console = g.console
    return check_availability(
        slot.start,
        slot.end,
        bookings_on_date(console.store.bookings, slot.day),
        console.now(),
        console.settings.open_hour,
        console.settings.close_hour,
    )


# ---------- STAFF: day timeline and list view ----------
@booking_bp.get("")
@console_required
def list_bookings():
    console = g.console
    date_str = request.args.get("date")

    if date_str:
        try:
            day = date.fromisoformat(date_str)
        except ValueError:
            return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400
        rows = sorted(bookings_on_date(console.store.bookings, day), key=lambda b: b.booking_time)
        return jsonify(
            date=day.isoformat(),
            open_time=console.settings.as_dict()["open_time"],
            close_time=console.settings.as_dict()["close_time"],
            bookings=[booking_json(b) for b in rows],
        ), 200

    filter_name = request.args.get("filter", "today")
    search = request.args.get("search", "")
    try:
        rows = filter_bookings(console.store.bookings, filter_name, console.now(), search)
    except RangeError as err:
        return jsonify(error=str(err)), 400

    # Counts every matching booking, paid or not
    return jsonify(
        filter=filter_name,
        count=len(rows),
        bookings=[booking_json(b) for b in rows],
    ), 200


# ---------- STAFF: check a slot without booking it ----------
@booking_bp.post("/availability")
@console_required
def availability():
    data = request.get_json(silent=True) or {}
    try:
        slot = _slot_from_request(data)
    except SlotError as err:
        return jsonify(error=str(err)), 400

    result = _check(slot)
    amount = g.console.settings.hourly_rate * slot.duration_hours
    return jsonify(
        valid=result.valid,
        reason=result.reason,
        message=result.message,
        start=slot.start.isoformat(),
        end=slot.end.isoformat(),
        total_amount=float(amount),
    ), 200


# ---------- STAFF: create booking (re-validated against latest data) ----------
@booking_bp.post("")
@console_required
def create_booking():
    console = g.console
    data = request.get_json(silent=True) or {}

    try:
        slot = _slot_from_request(data)
        draft = build_draft(
            data.get("customer_name"),
            data.get("phone_number"),
            slot,
            console.settings.hourly_rate,
        )
    except SlotError as err:
        return jsonify(error=str(err)), 400

    result = _check(slot)
    if not result.valid:
        return jsonify(error=result.message, reason=result.reason), 409

    created, error = console.store.create_bookings([draft])
    if error:
        return _store_failure("Failed to save booking", error)

    booking = created[0]
    flow = PaymentFlow(booking.id, booking.total_amount, FlowEntry.NEW_BOOKING)
    session[FLOW_SESSION_KEY] = flow.to_dict()

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"booking_time": booking.booking_time.isoformat(),
                        "duration_hours": booking.duration_hours})
    return jsonify(booking=booking_json(booking), payment_flow=flow_json(flow)), 201


@booking_bp.get("/<int:booking_id>")
@console_required
def get_booking(booking_id: int):
    booking, error = g.console.store.get_booking(booking_id)
    if error:
        return _store_failure("Failed to load booking", error)
    return jsonify(booking_json(booking)), 200


# ---------- STAFF: detail view edits ----------
@booking_bp.patch("/<int:booking_id>")
@console_required
def update_booking(booking_id: int):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify(error="No fields to update"), 400

    booking, error = g.console.store.update_booking(booking_id, data)
    if error:
        return _store_failure("Failed to update booking", error)

    log_event("BOOKING_UPDATE", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"fields": sorted(data)})
    return jsonify(booking_json(booking)), 200


# ---------- STAFF: hard delete (irreversible) ----------
@booking_bp.delete("/<int:booking_id>")
@console_required
def delete_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    if data.get("confirm") is not True:
        return jsonify(error="Deleting a booking cannot be undone. Send confirm=true."), 400

    _, error = g.console.store.delete_booking(booking_id)
    if error:
        return _store_failure("Failed to delete booking", error)

    flow = session.get(FLOW_SESSION_KEY)
    if flow and flow.get("booking_id") == booking_id:
        session.pop(FLOW_SESSION_KEY, None)

    log_event("BOOKING_DELETE", user_id=g.user.id, entity="booking", entity_id=booking_id)
    return jsonify(message="Booking deleted"), 200
