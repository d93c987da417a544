from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable

from ..domain.models import GroupResult, SubmissionGroup, SubmissionReport

log = logging.getLogger("WindowQuote.services.submission")

# submit_order(payload) -> {"success": True, "orderId": ...} | {"error": ...}
SubmitOrder = Callable[[Dict[str, Any]], Dict[str, Any]]


def _order_id(response: Dict[str, Any]) -> str | None:
    for key in ("orderId", "order_id", "id"):
        value = response.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def submit_groups(groups: Iterable[SubmissionGroup], submit_order: SubmitOrder) -> SubmissionReport:
    """Submit each product-type group on its own, in order.

    A failure (error response or exception from the transport) is recorded
    against that group only; later groups are still submitted.
    """
    report = SubmissionReport()
    for group in groups:
        try:
            response = submit_order(group.payload()) or {}
        except Exception as exc:  # transport failures stay per group
            log.warning(
                "submit_group failed item=%s po=%s err=%s",
                group.item_number, group.purchase_order_number, exc,
            )
            report.results.append(
                GroupResult(
                    item_number=group.item_number,
                    purchase_order_number=group.purchase_order_number,
                    ok=False,
                    error=f"{type(exc).__name__}: {exc}",
                )
            )
            continue

        ok = bool(response.get("success")) and not response.get("error")
        result = GroupResult(
            item_number=group.item_number,
            purchase_order_number=group.purchase_order_number,
            ok=ok,
            order_id=_order_id(response) if ok else None,
            error=None if ok else str(response.get("error") or "Submission rejected"),
        )
        if not ok:
            log.warning(
                "submit_group rejected item=%s po=%s err=%s",
                group.item_number, group.purchase_order_number, result.error,
            )
        else:
            log.debug("submit_group ok item=%s po=%s order=%s", group.item_number, group.purchase_order_number, result.order_id)
        report.results.append(result)
    return report
