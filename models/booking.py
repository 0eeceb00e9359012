from datetime import datetime
from models.db import db

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_STATUSES = (PAYMENT_PENDING, PAYMENT_PAID)

BOOKING_CONFIRMED = "confirmed"
BOOKING_STATUSES = (BOOKING_CONFIRMED,)


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    customer_name = db.Column(db.String(120), nullable=False)
    phone_number = db.Column(db.String(30), nullable=False, index=True)

    # Facility wall-clock time, the frame operating hours are expressed in
    booking_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False)
    duration_hours = db.Column(db.Integer, nullable=False)

    # Snapshot of duration * hourly rate at creation, never recomputed
    total_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    payment_status = db.Column(db.String(20), nullable=False, default=PAYMENT_PENDING)
    booking_status = db.Column(db.String(20), nullable=False, default=BOOKING_CONFIRMED)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("end_time > booking_time", name="ck_booking_end_after_start"),
        db.CheckConstraint("duration_hours > 0", name="ck_booking_positive_duration"),
        db.CheckConstraint("total_amount >= 0", name="ck_booking_amount_non_negative"),
    )
