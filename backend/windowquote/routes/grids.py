# backend/windowquote/routes/grids.py
from __future__ import annotations

import logging
from pathlib import Path

from flask import request, jsonify

from .blueprint import api_bp
from . import deps
from ..domain import grid as grid_ops
from ..domain.dimensions import parse_dimension
from ..domain.errors import ConfigurationError, OutOfRangeGrid
from ..domain.keys import normalize_key
from ..domain.models import PricingGrid
from ..services.grid_workbook import read_grid_workbook, write_grid_workbook

log = logging.getLogger("WindowQuote.routes.grids")


def _import_payload(result: grid_ops.GridImport) -> dict:
    return {
        "ok": True,
        "grid": result.grid.model_dump(mode="json", by_alias=True),
        "header": result.header,
        "skipped_rows": result.skipped_rows,
    }


@api_bp.post("/grids/import")
def import_grid():
    """
    Body: { "csv": "<text>" } or { "path": "<file.xlsx>", "sheet": "<name>" }
    Malformed rows are skipped and reported, never fatal.
    """
    data = request.get_json(force=True) or {}
    try:
        if data.get("csv") is not None:
            result = grid_ops.parse_grid_csv(str(data["csv"]))
        elif data.get("path"):
            result = read_grid_workbook(data["path"], data.get("sheet") or None)
        else:
            return jsonify({"ok": False, "errors": {"grid": "Provide 'csv' text or a workbook 'path'."}}), 400
    except FileNotFoundError as e:
        return jsonify({"ok": False, "errors": {"path": str(e)}}), 404
    except ValueError as e:
        return jsonify({"ok": False, "errors": {"grid": str(e)}}), 400
    return jsonify(_import_payload(result))


@api_bp.post("/grids/export")
def export_grid():
    """
    Body: { "grid": {...}, "format": "csv" | "xlsx", "header": true, "name": "..." }
    CSV comes back inline; xlsx is written under OUTPUT_DIR/grids.
    """
    data = request.get_json(force=True) or {}
    try:
        grid = PricingGrid(**(data.get("grid") or {}))
    except Exception as e:
        return jsonify({"ok": False, "errors": {"grid": str(e)}}), 400

    fmt = str(data.get("format") or "csv").lower()
    if fmt == "csv":
        text = grid_ops.grid_to_csv(grid, header=bool(data.get("header", True)))
        return jsonify({"ok": True, "format": "csv", "csv": text})
    if fmt != "xlsx":
        return jsonify({"ok": False, "errors": {"format": f"Unsupported format '{fmt}'"}}), 400

    s = deps.settings_mgr.load()
    name = normalize_key(str(data.get("name") or "")) or "pricing_grid"
    target = Path(s.OUTPUT_DIR or "outputs") / "grids" / f"{name}.xlsx"
    path = write_grid_workbook(grid, target)
    log.info("grid exported path=%s tiers=%d", path, len(grid.tiers))
    return jsonify({"ok": True, "format": "xlsx", "path": str(path)})


@api_bp.post("/grids/resolve")
def resolve_grid():
    """Body: { "grid": {...}, "width": ..., "drop": ... } -> { price }"""
    data = request.get_json(force=True) or {}
    try:
        grid = PricingGrid(**(data.get("grid") or {}))
    except Exception as e:
        return jsonify({"ok": False, "errors": {"grid": str(e)}}), 400

    width = parse_dimension(data.get("width"))
    drop = parse_dimension(data.get("drop"))
    missing = []
    if width is None:
        missing.append("width")
    if grid.grid_type == "width_drop" and drop is None:
        missing.append("drop")
    if missing:
        return jsonify({"ok": True, "complete": False, "missing": missing})

    s = deps.settings_mgr.load()
    overflow = data.get("overflow") or s.GRID_OVERFLOW_POLICY
    if overflow not in ("reject", "clamp"):
        return jsonify({"ok": False, "errors": {"overflow": f"Unknown overflow policy '{overflow}'"}}), 400
    try:
        price = grid_ops.resolve(grid, width, drop, overflow=overflow)
    except OutOfRangeGrid as e:
        return jsonify({
            "ok": False,
            "errors": {"grid": str(e)},
            "max_width": e.max_width,
            "max_drop": e.max_drop,
        }), 422
    except ConfigurationError as e:
        return jsonify({"ok": False, "errors": {"grid": str(e)}}), 400
    return jsonify({"ok": True, "complete": True, "price": price})
