# backend/windowquote/routes/orders.py
from __future__ import annotations

import logging

from flask import request, jsonify

from .blueprint import api_bp
from . import deps
from ..domain.models import OrderDraft
from ..services.outbound import map_line_item, prepare_submission

log = logging.getLogger("WindowQuote.routes.orders")


@api_bp.post("/orders/map")
def map_order_items():
    """Partner line items for a draft, without grouping."""
    data = request.get_json(force=True) or {}
    try:
        draft = OrderDraft(**data)
    except Exception as e:
        return jsonify({"ok": False, "errors": {"order": str(e)}}), 400
    items = [map_line_item(i).model_dump(mode="json", by_alias=True) for i in draft.items]
    return jsonify({"ok": True, "items": items})


@api_bp.post("/orders/prepare")
def prepare_order():
    """
    Map a draft order to partner submissions, one per item number.
    Nothing is sent; the caller submits each group and retries failures
    individually.
    """
    data = request.get_json(force=True) or {}
    try:
        draft = OrderDraft(**data)
    except Exception as e:
        return jsonify({"ok": False, "errors": {"order": str(e)}}), 400

    s = deps.settings_mgr.load()
    groups = prepare_submission(draft, po_prefix=s.PARTNER_PO_PREFIX)
    log.info("order prepared po=%s groups=%d", draft.purchase_order_number, len(groups))
    return jsonify({"ok": True, "groups": [g.payload() for g in groups]})
