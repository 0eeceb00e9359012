from decimal import Decimal
from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from models.payment import PAYMENT_METHOD_UPI, PAYMENT_METHODS
from services.slots import to_money


class FlowState(str, Enum):
    CHOICE = "choice"
    METHOD = "method"
    VERIFY = "verify"
    CONFIRMED = "confirmed"
    DEFERRED = "deferred"


class FlowEntry(str, Enum):
    NEW_BOOKING = "new_booking"
    PENDING_BOOKING = "pending_booking"


TERMINAL_STATES = (FlowState.CONFIRMED, FlowState.DEFERRED)

# The pending list opens straight on the method picker: those bookings were
# already deferred once.
ENTRY_STATES = {
    FlowEntry.NEW_BOOKING: FlowState.CHOICE,
    FlowEntry.PENDING_BOOKING: FlowState.METHOD,
}


class InvalidTransition(Exception):
    def __init__(self, state: FlowState, action: str):
        self.state = state
        self.action = action

    def __str__(self):
        return f"cannot {self.action} while in '{self.state.value}'"


class PaymentFlow:
    """
    choice -> method -> verify -> confirmed, with "pay later" ending in
    deferred. One instance per payment sequence, used by both the new-booking
    and the pending-booking entry points.
    """

    def __init__(self, booking_id: int, amount, entry: FlowEntry = FlowEntry.NEW_BOOKING,
                 state: Optional[FlowState] = None, method: Optional[str] = None):
        self.booking_id = booking_id
        self.amount = to_money(amount)
        self.entry = FlowEntry(entry)
        self.state = FlowState(state) if state else ENTRY_STATES[self.entry]
        self.method = method

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def _require(self, state: FlowState, action: str):
        if self.state != state:
            raise InvalidTransition(self.state, action)

    def pay_later(self):
        self._require(FlowState.CHOICE, "pay later")
        self.state = FlowState.DEFERRED

    def pay_now(self):
        self._require(FlowState.CHOICE, "pay now")
        self.state = FlowState.METHOD

    def select_method(self, method: str):
        self._require(FlowState.METHOD, "select a method")
        if method not in PAYMENT_METHODS:
            raise ValueError(f"payment method must be one of {', '.join(PAYMENT_METHODS)}")
        self.method = method
        self.state = FlowState.VERIFY

    def back(self):
        self._require(FlowState.VERIFY, "go back")
        self.method = None
        self.state = FlowState.METHOD

    def confirm(self, store):
        """
        Mark the booking paid, then append the payment row.

        Returns ``(payment, error, stage)``. A failed status update, including a
        booking that another desk already paid, leaves the flow in verify with
        nothing written. A failed payment insert after a
        successful update still finishes the flow, since the booking is paid,
        and reports stage ``payment_record``.
        """
        self._require(FlowState.VERIFY, "confirm")

        _, error = store.mark_paid(self.booking_id)
        if error:
            return None, error, "status_update"

        self.state = FlowState.CONFIRMED
        payment, error = store.add_payment(self.booking_id, self.amount, self.method)
        if error:
            return None, error, "payment_record"
        return payment, None, None

    # ---------- UPI QR payload ----------
    def upi_configured(self, upi_id: Optional[str]) -> bool:
        return bool((upi_id or "").strip())

    def payment_request(self, upi_id: Optional[str], payee_name: str, currency: str = "INR"):
        """Payload for QR rendering, or None when no UPI id is configured."""
        if self.state != FlowState.VERIFY or self.method != PAYMENT_METHOD_UPI:
            return None
        if not self.upi_configured(upi_id):
            return None

        amount = _format_amount(self.amount)
        query = urlencode({"pa": upi_id.strip(), "pn": payee_name, "am": amount, "cu": currency})
        return {
            "uri": f"upi://pay?{query}",
            "payee_address": upi_id.strip(),
            "payee_name": payee_name,
            "amount": amount,
            "currency": currency,
        }

    # ---------- session storage ----------
    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "amount": str(self.amount),
            "entry": self.entry.value,
            "state": self.state.value,
            "method": self.method,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentFlow":
        return cls(
            booking_id=int(data["booking_id"]),
            amount=Decimal(data["amount"]),
            entry=FlowEntry(data["entry"]),
            state=FlowState(data["state"]),
            method=data.get("method"),
        )


def _format_amount(amount: Decimal) -> str:
    # 300.00 -> "300", 150.50 -> "150.50"
    if amount == amount.to_integral_value():
        return str(int(amount))
    return str(amount)
