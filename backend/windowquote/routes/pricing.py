# backend/windowquote/routes/pricing.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import request, jsonify, current_app

from .blueprint import api_bp
from . import deps
from ..domain.errors import ConfigurationError, OutOfRangeGrid
from ..domain.models import ConfigurationRequest, Incomplete
from ..domain import rules
from ..services.inventory import InventoryPriceBook

log = logging.getLogger("WindowQuote.routes.pricing")


def _price_book(records: Any, default_markup: float) -> Optional[InventoryPriceBook]:
    if not records:
        return None
    if not isinstance(records, list):
        raise ConfigurationError("'inventory' must be a list of stock records.")
    try:
        return InventoryPriceBook.from_records(records, default_markup_percent=default_markup)
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid inventory record: {e}") from e


@api_bp.post("/price", endpoint="price_live")
def price_live():
    """
    Quote one configured item.

    Request body supports:
    - either top-level fields or { "request": { ... } }
    - optional "inventory": [{id, selling_price, cost_price, markup_percent}]
      used for options linked to stock items

    A missing dimension is not an error: the response carries
    ``complete: false`` and the list of missing fields instead of a price.
    """
    payload = request.get_json(force=True) or {}
    data = payload.get("request", payload)

    try:
        req = ConfigurationRequest(**data)
    except Exception as e:
        return jsonify({"ok": False, "errors": {"request": str(e)}}), 400

    s = deps.settings_mgr.load()
    try:
        book = _price_book(payload.get("inventory"), s.DEFAULT_MARKUP_PERCENT)
        result = rules.compute(req, settings=s, resolve_inventory_price=book)
    except OutOfRangeGrid as e:
        log.info("price out_of_range: %s", e)
        return jsonify({
            "ok": False,
            "errors": {"grid": str(e)},
            "max_width": e.max_width,
            "max_drop": e.max_drop,
        }), 422
    except ConfigurationError as e:
        return jsonify({"ok": False, "errors": {"configuration": str(e)}}), 400
    except Exception as e:
        current_app.logger.exception("Pricing failed")
        return jsonify({"ok": False, "errors": {"pricing": f"{type(e).__name__}: {e}"}}), 500

    if isinstance(result, Incomplete):
        return jsonify({"ok": True, "complete": False, "missing": result.missing})

    body: Dict[str, Any] = {
        "ok": True,
        "complete": True,
        "pricing": result.model_dump(mode="json"),
        "display": result.display(s.DISPLAY_DECIMALS),
    }
    return jsonify(body)
