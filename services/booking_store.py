import logging
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError

from models.booking import Booking, BOOKING_STATUSES, PAYMENT_PAID, PAYMENT_PENDING, PAYMENT_STATUSES
from models.payment import Payment, PAYMENT_METHODS
from services.slots import BookingDraft, to_money

logger = logging.getLogger(__name__)

# Fields the detail view may change after creation. The slot window and the
# amount snapshot are fixed once the booking exists.
UPDATABLE_FIELDS = ("customer_name", "phone_number", "payment_status", "booking_status")


class StoreError(Exception):
    """A store call was refused before reaching the database."""


class BookingNotFound(StoreError):
    pass


class BookingAlreadyPaid(StoreError):
    pass


class BookingStore:
    """
    Owns the canonical booking and payment collections.

    Every operation returns a ``(data, error)`` pair. The in-memory mirrors
    only change after the database confirmed the write, and they take the
    values the database returned rather than the caller's input.
    """

    def __init__(self, session, user_id=None):
        self.session = session
        self.user_id = user_id
        self.bookings: List[Booking] = []
        self.payments: List[Payment] = []

    # ---------- reads ----------
    def fetch_bookings(self):
        try:
            rows = self.session.query(Booking).order_by(Booking.booking_time.asc()).all()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error fetching bookings: {err}")
            return [], err

        self.bookings = list(rows)
        return list(rows), None

    def fetch_payments(self):
        try:
            rows = self.session.query(Payment).order_by(Payment.created_at.asc()).all()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error fetching payments: {err}")
            return [], err

        self.payments = list(rows)
        return list(rows), None

    def get_booking(self, booking_id: int):
        try:
            booking = self.session.get(Booking, booking_id)
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error retrieving booking {booking_id}: {err}")
            return None, err

        if booking is None:
            return None, BookingNotFound("Booking not found")
        return booking, None

    # ---------- writes ----------
    def create_bookings(self, drafts: Iterable[BookingDraft]):
        rows = [Booking(created_by=self.user_id, **draft.as_row()) for draft in drafts]
        if not rows:
            return [], StoreError("No bookings to create")

        try:
            self.session.add_all(rows)
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error creating bookings: {err}")
            return [], err

        for row in rows:
            self.session.refresh(row)
        self.bookings.extend(rows)
        return rows, None

    def update_booking(self, booking_id: int, fields: dict):
        refused = sorted(set(fields) - set(UPDATABLE_FIELDS))
        if refused:
            return None, StoreError(f"Field(s) not updatable: {', '.join(refused)}")
        if "payment_status" in fields and fields["payment_status"] not in PAYMENT_STATUSES:
            return None, StoreError("Invalid payment_status")
        if "booking_status" in fields and fields["booking_status"] not in BOOKING_STATUSES:
            return None, StoreError("Invalid booking_status")
        for name in ("customer_name", "phone_number"):
            if name in fields and (not isinstance(fields[name], str) or not fields[name].strip()):
                return None, StoreError(f"{name} must be a non-empty string")

        booking, error = self.get_booking(booking_id)
        if error:
            return None, error

        try:
            for name, value in fields.items():
                setattr(booking, name, value.strip() if isinstance(value, str) else value)
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error updating booking {booking_id}: {err}")
            return None, err

        self.session.refresh(booking)
        self._replace_mirror(booking)
        return booking, None

    def mark_paid(self, booking_id: int):
        """
        Flip a pending booking to paid in a single conditional UPDATE.

        Only one caller can win the pending -> paid change; the others get
        BookingAlreadyPaid and must not record a payment.
        """
        try:
            changed = (
                self.session.query(Booking)
                .filter(Booking.id == booking_id, Booking.payment_status == PAYMENT_PENDING)
                .update({Booking.payment_status: PAYMENT_PAID}, synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error marking booking {booking_id} paid: {err}")
            return None, err

        booking, error = self.get_booking(booking_id)
        if error:
            return None, error
        if not changed:
            return None, BookingAlreadyPaid("Booking already paid")

        self._replace_mirror(booking)
        return booking, None

    def delete_booking(self, booking_id: int):
        booking, error = self.get_booking(booking_id)
        if error:
            return None, error

        # Payments for this booking are left untouched
        try:
            self.session.delete(booking)
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error deleting booking {booking_id}: {err}")
            return None, err

        self.bookings = [b for b in self.bookings if b.id != booking_id]
        return None, None

    def add_payment(self, booking_id: int, amount_paid, payment_method: str):
        if payment_method not in PAYMENT_METHODS:
            return None, StoreError("Invalid payment_method")

        payment = Payment(
            booking_id=booking_id,
            amount_paid=to_money(amount_paid),
            payment_method=payment_method,
        )
        try:
            self.session.add(payment)
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error(f"Error adding payment for booking {booking_id}: {err}")
            return None, err

        self.session.refresh(payment)
        self.payments.append(payment)
        return payment, None

    def _replace_mirror(self, booking: Booking):
        self.bookings = [booking if b.id == booking.id else b for b in self.bookings]
