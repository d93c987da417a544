from datetime import UTC, datetime
from flask import jsonify
from .blueprint import api_bp
from . import deps

@api_bp.get("/health")
def health():
    now = datetime.now(UTC)
    s = deps.settings_mgr.load()
    return jsonify({
        "ok": True,
        "ts": now.isoformat().replace("+00:00", "Z"),
        "grid_overflow": s.GRID_OVERFLOW_POLICY,
        "currency": s.CURRENCY,
    })
