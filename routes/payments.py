import logging

from flask import Blueprint, request, jsonify, g, session, current_app

from models.booking import PAYMENT_PAID
from routes.booking import FLOW_SESSION_KEY, _store_failure
from services.booking_store import BookingAlreadyPaid, BookingNotFound
from services.payment_flow import FlowEntry, InvalidTransition, PaymentFlow
from utils.auth_context import console_required
from utils.audit import log_event
from utils.serialize import flow_json, payment_json

logger = logging.getLogger(__name__)

payments_bp = Blueprint("payments", __name__, url_prefix="/payments")


def _flow_response(flow: PaymentFlow, status: int = 200, **extra):
    body = flow_json(
        flow,
        upi_id=g.console.settings.upi_id,
        payee_name=current_app.config.get("UPI_PAYEE_NAME", "DSA"),
        currency=current_app.config.get("UPI_CURRENCY", "INR"),
    )
    body.update(extra)
    return jsonify(payment_flow=body), status


def _load_flow():
    data = session.get(FLOW_SESSION_KEY)
    if not data:
        return None
    try:
        return PaymentFlow.from_dict(data)
    except (KeyError, ValueError, TypeError):
        session.pop(FLOW_SESSION_KEY, None)
        return None


def _save_flow(flow: PaymentFlow):
    if flow.finished:
        session.pop(FLOW_SESSION_KEY, None)
    else:
        session[FLOW_SESSION_KEY] = flow.to_dict()


def _step(action):
    flow = _load_flow()
    if flow is None:
        return None, (jsonify(error="No payment in progress"), 404)
    try:
        action(flow)
    except InvalidTransition as err:
        return None, (jsonify(error=str(err), state=flow.state.value), 409)
    except ValueError as err:
        return None, (jsonify(error=str(err)), 400)
    return flow, None


# ---------- STAFF: start collecting payment for a pending booking ----------
@payments_bp.post("/flow")
@console_required
def start_flow():
    data = request.get_json(silent=True) or {}
    booking_id = data.get("booking_id")
    if not isinstance(booking_id, int) or isinstance(booking_id, bool):
        return jsonify(error="booking_id required"), 400

    booking, error = g.console.store.get_booking(booking_id)
    if error:
        return _store_failure("Failed to load booking", error)
    if booking.payment_status == PAYMENT_PAID:
        return jsonify(error="Booking already paid"), 409

    flow = PaymentFlow(booking.id, booking.total_amount, FlowEntry.PENDING_BOOKING)
    _save_flow(flow)
    return _flow_response(flow, 201)


@payments_bp.get("/flow")
@console_required
def current_flow():
    flow = _load_flow()
    if flow is None:
        return jsonify(error="No payment in progress"), 404
    return _flow_response(flow)


@payments_bp.delete("/flow")
@console_required
def discard_flow():
    # Closing the modal: nothing was written, nothing to undo
    session.pop(FLOW_SESSION_KEY, None)
    return jsonify(message="Payment discarded"), 200


@payments_bp.post("/flow/pay-later")
@console_required
def pay_later():
    flow, failure = _step(lambda f: f.pay_later())
    if failure:
        return failure
    _save_flow(flow)
    log_event("PAYMENT_DEFERRED", user_id=g.user.id, entity="booking", entity_id=flow.booking_id)
    return _flow_response(flow)


@payments_bp.post("/flow/pay-now")
@console_required
def pay_now():
    flow, failure = _step(lambda f: f.pay_now())
    if failure:
        return failure
    _save_flow(flow)
    return _flow_response(flow)


@payments_bp.post("/flow/method")
@console_required
def select_method():
    data = request.get_json(silent=True) or {}
    method = data.get("method")
    flow, failure = _step(lambda f: f.select_method(method))
    if failure:
        return failure
    _save_flow(flow)
    return _flow_response(flow)


@payments_bp.post("/flow/back")
@console_required
def back():
    flow, failure = _step(lambda f: f.back())
    if failure:
        return failure
    _save_flow(flow)
    return _flow_response(flow)


@payments_bp.post("/flow/confirm")
@console_required
def confirm():
    flow = _load_flow()
    if flow is None:
        return jsonify(error="No payment in progress"), 404

    try:
        payment, error, stage = flow.confirm(g.console.store)
    except InvalidTransition as err:
        return jsonify(error=str(err), state=flow.state.value), 409

    if stage == "status_update":
        if isinstance(error, (BookingAlreadyPaid, BookingNotFound)):
            # Paid from another desk or deleted; this flow can never confirm
            session.pop(FLOW_SESSION_KEY, None)
        else:
            # Still in verify; the user can retry the confirm
            _save_flow(flow)
        return _store_failure("Failed to update booking status", error)

    _save_flow(flow)
    if stage == "payment_record":
        logger.error(f"Booking {flow.booking_id} marked paid but payment row failed: {error}")
        log_event("PAYMENT_RECORD_FAIL", user_id=g.user.id, entity="booking", entity_id=flow.booking_id,
                  metadata={"method": flow.method, "amount": str(flow.amount)})
        return _flow_response(
            flow, 502,
            error="Booking updated but failed to record payment details",
        )

    log_event("PAYMENT_CONFIRM", user_id=g.user.id, entity="payment", entity_id=payment.id,
              metadata={"booking_id": flow.booking_id, "method": flow.method, "amount": str(flow.amount)})
    return _flow_response(flow, payment=payment_json(payment))


# ---------- STAFF: payment ledger ----------
@payments_bp.get("")
@console_required
def list_payments():
    rows, error = g.console.store.fetch_payments()
    if error:
        return _store_failure("Failed to load payments", error)
    return jsonify([payment_json(p) for p in rows]), 200
