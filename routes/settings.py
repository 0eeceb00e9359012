from flask import Blueprint, request, jsonify, g

from services.settings_registry import SettingsError
from utils.auth_context import console_required
from utils.audit import log_event

settings_bp = Blueprint("settings", __name__, url_prefix="/settings")


@settings_bp.get("")
@console_required
def get_settings():
    return jsonify(g.console.settings.as_dict()), 200


@settings_bp.put("/<name>")
@console_required
def update_setting(name: str):
    data = request.get_json(silent=True) or {}
    if "value" not in data:
        return jsonify(error="value required"), 400

    try:
        value, error = g.console.settings.update(name, data.get("value"))
    except SettingsError as err:
        return jsonify(error=str(err)), 400
    if error:
        return jsonify(error=f"Failed to save {name}"), 503

    log_event("SETTING_UPDATE", user_id=g.user.id, entity="constant", entity_id=name,
              metadata={"value": value})
    return jsonify(name=name, value=value, settings=g.console.settings.as_dict()), 200
