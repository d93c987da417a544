# backend/windowquote/routes/options.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, TypedDict

from flask import Blueprint, jsonify, request

from .blueprint import api_bp
from ..domain.models import PRICING_METHODS
from ..services.outbound import PARTNER_FIELDS

log = logging.getLogger("WindowQuote.routes.options")
bp = Blueprint("options", __name__, url_prefix="/options")


class OptionsPayload(TypedDict):
    """
    Closed vocabularies the frontend needs to build configuration forms.
    Values are the canonical strings the domain models accept.
    """
    pricing_method: List[str]
    grid_type: List[str]
    grid_overflow_policy: List[str]
    inventory_pricing_mode: List[str]
    family: List[str]
    orientation: List[str]
    wallcovering_pricing: List[str]
    partner_field: List[str]


@dataclass(frozen=True)
class _Available:
    """
    Canonical option vocabulary.
    IMPORTANT: These values align with the Literal types in domain.models.
    """
    pricing_method: List[str]
    grid_type: List[str]
    grid_overflow_policy: List[str]
    inventory_pricing_mode: List[str]
    family: List[str]
    orientation: List[str]
    wallcovering_pricing: List[str]
    partner_field: List[str]


AVAILABLE = _Available(
    pricing_method=list(PRICING_METHODS),
    grid_type=["width", "width_drop"],
    grid_overflow_policy=["reject", "clamp"],
    inventory_pricing_mode=["selling", "cost", "cost_with_markup"],
    family=["fabric", "wallcovering", "blind"],
    orientation=["vertical", "horizontal"],
    wallcovering_pricing=["per_roll", "per_area"],
    partner_field=sorted(PARTNER_FIELDS),
)

# Friendly labels; anything missing falls back to the value itself.
LABELS: Dict[str, str] = {
    "fixed": "Fixed Price",
    "per-linear-unit": "Per Running Metre",
    "per-area-unit": "Per m²",
    "per-panel": "Per Panel",
    "percentage": "Percentage",
    "grid": "Pricing Grid",
    "width": "Width only",
    "width_drop": "Width × Drop",
    "reject": "Reject oversize requests",
    "clamp": "Use largest tier",
    "selling": "Selling price",
    "cost": "Cost price",
    "cost_with_markup": "Cost + markup",
    "vertical": "Standard (vertical)",
    "horizontal": "Railroaded (horizontal)",
    "per_roll": "Per roll",
    "per_area": "Per m²",
}


def _compose_payload() -> OptionsPayload:
    """Return the complete options payload in one response."""
    payload: OptionsPayload = {
        "pricing_method": AVAILABLE.pricing_method,
        "grid_type": AVAILABLE.grid_type,
        "grid_overflow_policy": AVAILABLE.grid_overflow_policy,
        "inventory_pricing_mode": AVAILABLE.inventory_pricing_mode,
        "family": AVAILABLE.family,
        "orientation": AVAILABLE.orientation,
        "wallcovering_pricing": AVAILABLE.wallcovering_pricing,
        "partner_field": AVAILABLE.partner_field,
    }
    return payload


@bp.get("")
def get_all_options():
    """
    GET /api/options
    Returns every vocabulary so the FE can hydrate all <select>s in one call.
    """
    log.debug("Options requested (all)")
    return jsonify(_compose_payload())


@bp.get("/<category>")
def get_options(category: str):
    """
    GET /api/options/<category>
    Returns a single vocabulary to support lazy-loading.
    """
    log.debug("Options requested for category=%s", category)
    data: Dict[str, Any] = _compose_payload()
    if category not in data:
        log.warning("Unknown options category requested: %s", category)
        return jsonify({"error": f"Unknown category '{category}'"}), 404
    return jsonify({category: data[category]})


@bp.post("/labels")
def get_labeled_options():
    """
    POST /api/options/labels
    Body: { "categories": ["pricing_method","family",...] }
    Returns [{ value, label }] for each requested category.
    """
    body = request.get_json(silent=True) or {}
    cats: List[str] = body.get("categories") or []
    full = _compose_payload()

    result: Dict[str, List[Dict[str, str]]] = {}
    for cat in cats:
        if cat not in full:
            continue
        result[cat] = [{"value": v, "label": LABELS.get(v, v)} for v in full[cat]]

    log.debug("Labeled options response for categories=%s", cats)
    return jsonify(result)


# Register nested blueprint under the API namespace
api_bp.register_blueprint(bp)
