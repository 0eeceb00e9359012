from datetime import datetime

import pytest

from app import create_app
from config import Config
from models import db
from models.constant import Constant
from models.user import User
from security.password import hash_password

# Monday morning, 08:00 facility time
FIXED_NOW = datetime(2026, 10, 19, 8, 0)

STAFF_EMAIL = "desk@example.com"
STAFF_PASSWORD = "correct-horse-battery"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    FACILITY_TIMEZONE = None
    UPI_PAYEE_NAME = "DSA"
    LOG_LEVEL = "WARNING"


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "courtdesk-test.db")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def fixed_clock(monkeypatch):
    monkeypatch.setattr("services.context.local_now", lambda tz=None: FIXED_NOW)
    return FIXED_NOW


@pytest.fixture
def staff(app):
    user = User(email=STAFF_EMAIL, password_hash=hash_password(STAFF_PASSWORD), full_name="Front Desk")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def rate_150(app):
    db.session.add(Constant(name="hourly_rate", value="150"))
    db.session.commit()


def login(app, email, password):
    client = app.test_client()
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    client.environ_base["HTTP_X_CSRF_TOKEN"] = client.get_cookie("csrf_token").value
    return client


@pytest.fixture
def client(app, staff, fixed_clock):
    return login(app, STAFF_EMAIL, STAFF_PASSWORD)


@pytest.fixture
def second_desk(app, fixed_clock):
    user = User(email="counter@example.com", password_hash=hash_password(STAFF_PASSWORD), full_name="Counter")
    db.session.add(user)
    db.session.commit()
    return login(app, user.email, STAFF_PASSWORD)
