import logging

from flask import request, jsonify
from .blueprint import api_bp
from ..domain.models import Settings
from . import deps

log = logging.getLogger("WindowQuote.routes.settings")

@api_bp.get("/settings")
def get_settings():
    return jsonify(deps.settings_mgr.load().model_dump())

@api_bp.post("/settings")
def set_settings():
    """Merge the posted fields over the stored settings, validate, persist."""
    data = request.get_json(force=True) or {}
    current = deps.settings_mgr.load().model_dump()
    current.update(data)
    try:
        s = Settings(**current)
    except Exception as e:
        return jsonify({"ok": False, "error": f"Invalid settings: {e}"}), 400
    ok, errors = deps.settings_mgr.validate(s)
    if not ok:
        return jsonify({"ok": False, "errors": errors}), 400
    saved = deps.settings_mgr.save(s)
    log.info("settings updated fields=%s", sorted(data))
    return jsonify({"ok": True, "settings": saved.model_dump()})
