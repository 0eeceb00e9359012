from flask import Blueprint, jsonify

from .auth import auth_bp
from .settings import settings_bp
from .booking import booking_bp
from .payments import payments_bp
from .revenue import revenue_bp
from .audit_logs import audit_bp

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(status="ok"), 200
