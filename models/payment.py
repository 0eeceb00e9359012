from datetime import datetime
from models.db import db

PAYMENT_METHOD_CASH = "cash"
PAYMENT_METHOD_UPI = "upi"
PAYMENT_METHODS = (PAYMENT_METHOD_CASH, PAYMENT_METHOD_UPI)


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)

    # Weak reference: deleting a booking leaves its payments in place
    booking_id = db.Column(db.Integer, nullable=False, index=True)

    amount_paid = db.Column(db.Numeric(10, 2), nullable=False)
    payment_method = db.Column(db.String(10), nullable=False)  # cash, upi

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
