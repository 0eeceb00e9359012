from models.db import db

class Constant(db.Model):
    __tablename__ = "constants"

    id = db.Column(db.Integer, primary_key=True)

    # e.g. hourly_rate, open_time, close_time, upi_id
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    value = db.Column(db.String(255), nullable=False, default="")
