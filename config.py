import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as courtdesk.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "courtdesk.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "courtdesk_session"

    # 12 hours session lifetime (one staff shift)
    SESSION_LIFETIME_SECONDS = 12 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    # Brute-force protection
    MAX_LOGIN_ATTEMPTS = 5
    LOCKOUT_MINUTES = 5

    # Facility clock: bookings and operating hours are wall-clock times here
    FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "Asia/Kolkata")

    # Operating hours used until the constants table has its own values
    DEFAULT_OPEN_TIME = os.getenv("DEFAULT_OPEN_TIME", "06:00")
    DEFAULT_CLOSE_TIME = os.getenv("DEFAULT_CLOSE_TIME", "23:00")

    # UPI QR payload
    UPI_PAYEE_NAME = os.getenv("UPI_PAYEE_NAME", "DSA")
    UPI_CURRENCY = "INR"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
