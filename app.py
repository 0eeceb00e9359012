import logging

import click
from flask import Flask, request, g
from flask_migrate import Migrate

from config import Config
from routes import health_bp, auth_bp, settings_bp, booking_bp, payments_bp, revenue_bp, audit_bp

from models import db
from utils.auth_context import load_current_user, close_console
from security.csrf import require_csrf

CSRF_EXEMPT_PATHS = {
    "/auth/login",
    "/health",
}


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(revenue_bp)
    app.register_blueprint(audit_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF once a staff session cookie is in play
            if getattr(g, "user", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.teardown_request
    def _drop_console(exc):
        close_console(exc)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def register_cli(app):
    from models.user import User
    from security.password import hash_password

    @app.cli.command("create-staff")
    @click.argument("email")
    @click.password_option()
    @click.option("--name", default=None, help="Display name shown in the console.")
    def create_staff(email, password, name):
        """Create (or reactivate) a console staff account."""
        email = email.strip().lower()
        try:
            pw_hash = hash_password(password)
        except ValueError as err:
            raise click.BadParameter(str(err), param_hint="password")

        user = User.query.filter_by(email=email).first()
        if user:
            user.password_hash = pw_hash
            user.is_active = True
            if name:
                user.full_name = name
            db.session.commit()
            click.echo(f"{user.email} updated")
            return

        db.session.add(User(email=email, password_hash=pw_hash, full_name=name))
        db.session.commit()
        click.echo(f"{email} created")

    @app.cli.command("deactivate-staff")
    @click.argument("email")
    def deactivate_staff(email):
        """Block a staff account from signing in."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return
        user.is_active = False
        db.session.commit()
        click.echo(f"{user.email} deactivated")


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
