from models import db
from models.audit_log import AuditLog
from tests.conftest import STAFF_EMAIL, STAFF_PASSWORD


def test_login_sets_session_and_csrf_cookies(app, staff):
    client = app.test_client()
    resp = client.post("/auth/login", json={"email": STAFF_EMAIL.upper(), "password": STAFF_PASSWORD})

    assert resp.status_code == 200
    assert client.get_cookie("courtdesk_session") is not None
    assert client.get_cookie("csrf_token") is not None
    assert client.get("/auth/me").get_json()["email"] == STAFF_EMAIL


def test_bad_password_then_lockout(app, staff):
    client = app.test_client()
    for _ in range(4):
        resp = client.post("/auth/login", json={"email": STAFF_EMAIL, "password": "wrong-password"})
        assert resp.status_code == 401

    resp = client.post("/auth/login", json={"email": STAFF_EMAIL, "password": "wrong-password"})
    assert resp.status_code == 429

    resp = client.post("/auth/login", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    assert resp.status_code == 429


def test_inactive_staff_cannot_sign_in(app, staff):
    staff.is_active = False
    db.session.commit()

    resp = app.test_client().post("/auth/login", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    assert resp.status_code == 401


def test_logout_ends_console_access(client):
    assert client.post("/auth/logout").status_code == 200

    assert client.get("/auth/me").status_code == 401
    assert client.get("/bookings").status_code == 401


def test_second_login_revokes_first_session(app, staff, client):
    other = app.test_client()
    other.post("/auth/login", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})

    assert client.get("/auth/me").status_code == 401
    assert other.get("/auth/me").status_code == 200


def test_audit_trail_records_logins(client):
    rows = client.get("/audit-logs?action=LOGIN_SUCCESS").get_json()

    assert len(rows) == 1
    assert AuditLog.query.count() >= 1


def test_health_is_public(app):
    resp = app.test_client().get("/health")
    assert resp.status_code == 200
