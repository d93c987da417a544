from flask import request, jsonify
from .blueprint import api_bp
from ..domain.models import ConfigurationRequest
from ..domain import rules

@api_bp.post("/validate")
def validate_request():
    """
    Schema + rule check of a configuration request.
    Missing dimensions are reported per field so the form can flag them
    before any price is shown.
    """
    data = request.get_json(force=True) or {}
    payload = data.get("request", data)
    try:
        req = ConfigurationRequest(**payload)
    except Exception as e:
        return jsonify({"ok": False, "errors": {"schema": str(e)}}), 400
    errors = rules.validate(req)
    if errors:
        return jsonify({"ok": False, "errors": errors}), 400
    return jsonify({"ok": True, "family": req.family, "selected": len(req.selection)})
