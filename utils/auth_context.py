import logging
from functools import wraps
from flask import current_app, g, jsonify

from models import db
from models.user import User
from security.session import get_session_from_request
from services.context import ConsoleContext

logger = logging.getLogger(__name__)


def load_current_user():
    g.user = None
    g.session = None
    g.console = None

    sess = get_session_from_request()
    if not sess:
        return
    user = db.session.get(User, sess.user_id)
    if user is None or not user.is_active:
        return
    g.session = sess
    g.user = user


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper


def console_required(fn):
    """
    login_required plus a loaded ConsoleContext on g.console. A store
    failure while loading answers 503 instead of serving partial data.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401

        console = ConsoleContext(
            user_id=g.user.id,
            session=db.session,
            timezone=current_app.config.get("FACILITY_TIMEZONE"),
            default_open_time=current_app.config.get("DEFAULT_OPEN_TIME", "06:00"),
            default_close_time=current_app.config.get("DEFAULT_CLOSE_TIME", "23:00"),
        )
        error = console.load()
        if error:
            logger.error(f"Console load failed for user {g.user.id}: {error}")
            return jsonify(error="Could not load console data. Try again."), 503

        g.console = console
        return fn(*args, **kwargs)
    return wrapper


def close_console(_exc=None):
    console = getattr(g, "console", None)
    if console is not None:
        console.close()
        g.console = None
