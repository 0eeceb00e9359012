from flask import Blueprint, request, jsonify, current_app, g, session

from models.user import User
from security.bruteforce import is_locked, register_failure, reset_attempts
from security.csrf import issue_csrf_token
from security.password import verify_password
from security.session import create_session, revoke_session, revoke_all_sessions
from utils.audit import log_event
from utils.auth_context import login_required, close_console

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    locked, seconds_left = is_locked(email)
    if locked:
        log_event("LOGIN_LOCKED", metadata={"email": email, "seconds_left": seconds_left})
        return jsonify(error="Account temporarily locked. Try again later.", retry_after_seconds=seconds_left), 429

    user = User.query.filter_by(email=email).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        fail_count, locked_now = register_failure(email)
        log_event(
            "LOGIN_FAIL",
            user_id=user.id if user else None,
            metadata={"email": email, "fail_count": fail_count, "locked_now": locked_now},
        )
        if locked_now:
            return jsonify(error="Too many failed attempts. Account locked.",
                           lockout_minutes=current_app.config.get("LOCKOUT_MINUTES", 5)), 429
        return jsonify(error="Invalid credentials"), 401

    reset_attempts(email)

    # One console session per staff member
    revoked_count = revoke_all_sessions(user.id)
    raw_token = create_session(user.id)

    resp = jsonify(message="Login OK", id=user.id, email=user.email, full_name=user.full_name)
    resp.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "courtdesk_session"),
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 12 * 60 * 60),
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(id=g.user.id, email=g.user.email, full_name=g.user.full_name), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "courtdesk_session")
    revoke_session(request.cookies.get(cookie_name))
    close_console()
    session.clear()
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    return resp, 200
