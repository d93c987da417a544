# backend/windowquote/domain/options.py
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from . import grid as grid_resolver
from .errors import ConfigurationError
from .keys import normalize_key
from .models import ExcludedOption, OptionContext, OptionLine, OptionNode, OptionsCost

log = logging.getLogger("WindowQuote.domain.options")

# resolve_inventory_price(item_id, mode, markup_percent) -> price
InventoryResolver = Callable[[str, str, Optional[float]], float]

_UNITS: Dict[str, str] = {
    "fixed": "item",
    "per-linear-unit": "m",
    "per-area-unit": "m²",
    "per-panel": "panel",
    "percentage": "%",
    "grid": "item",
}


def iter_nodes(tree: Iterable[OptionNode]) -> Iterator[OptionNode]:
    """Pre-order walk of an option forest of any depth."""
    stack: List[OptionNode] = list(reversed(list(tree)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(tree: Iterable[OptionNode], node_id: str) -> Optional[OptionNode]:
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def option_key(node: OptionNode) -> str:
    return normalize_key(node.key or node.id)


def _applies(node: OptionNode, heading: Optional[str]) -> bool:
    if node.applies_to_headings is None:
        return True
    return heading is not None and heading in node.applies_to_headings


def _unit_price(
    node: OptionNode,
    ctx: OptionContext,
    resolve_inventory_price: Optional[InventoryResolver],
) -> float:
    # An inventory link replaces the literal price entirely.
    if node.inventory_ref:
        if resolve_inventory_price is None:
            raise ConfigurationError(
                f"Option '{node.id}' is linked to inventory item '{node.inventory_ref}' but no inventory resolver was given."
            )
        return float(resolve_inventory_price(node.inventory_ref, ctx.inventory_pricing_mode, ctx.markup_percent))
    return float(node.base_price)


def _quantity(node: OptionNode, ctx: OptionContext) -> float:
    method = node.pricing_method
    if method == "per-linear-unit":
        return ctx.width / 100.0
    if method == "per-area-unit":
        if ctx.drop is None:
            raise ConfigurationError(f"Option '{node.id}' is priced per m² but no drop was given.")
        return ctx.width * ctx.drop / 10000.0
    if method == "per-panel":
        return float(ctx.panel_count)
    return 1.0


def _price_line(
    node: OptionNode,
    key: str,
    ctx: OptionContext,
    resolve_inventory_price: Optional[InventoryResolver],
) -> OptionLine:
    if node.pricing_method == "grid":
        if node.grid is None:
            raise ConfigurationError(f"Option '{node.id}' uses grid pricing but has no grid table.")
        unit_price = grid_resolver.resolve(node.grid, ctx.width, ctx.drop, overflow=ctx.grid_overflow)
    else:
        unit_price = _unit_price(node, ctx, resolve_inventory_price)
    qty = _quantity(node, ctx)
    return OptionLine(
        id=node.id,
        label=node.label,
        key=key,
        pricing_method=node.pricing_method,
        unit_price=unit_price,
        quantity=qty,
        unit=_UNITS[node.pricing_method],
        amount=unit_price * qty,
    )


def aggregate(
    tree: Iterable[OptionNode],
    selected: Iterable[str],
    ctx: OptionContext,
    *,
    resolve_inventory_price: Optional[InventoryResolver] = None,
) -> OptionsCost:
    """Total cost of the selected options in ``tree``.

    Two passes: every non-percentage option is priced first, then each
    percentage option is applied to ``ctx.base_amount`` plus that
    subtotal. Options whose heading restriction excludes the active
    heading are skipped with their whole subtree. When two selected nodes
    share a normalised key only the first one met is charged.
    """
    chosen = frozenset(selected)
    heading = ctx.heading.strip().lower() if ctx.heading else None

    lines: List[OptionLine] = []
    excluded: List[ExcludedOption] = []
    percentage: List[Tuple[OptionNode, str]] = []
    seen: Set[str] = set()

    stack: List[OptionNode] = list(reversed(list(tree)))
    while stack:
        node = stack.pop()
        if not _applies(node, heading):
            for skipped in iter_nodes([node]):
                if skipped.id in chosen:
                    excluded.append(ExcludedOption(id=skipped.id, reason="heading"))
            log.debug("options heading_excluded id=%s heading=%s", node.id, heading)
            continue

        if node.id in chosen:
            key = option_key(node)
            if key in seen:
                log.warning("options duplicate_skipped id=%s key=%s", node.id, key)
                excluded.append(ExcludedOption(id=node.id, reason="duplicate"))
            else:
                seen.add(key)
                if node.pricing_method == "percentage":
                    percentage.append((node, key))
                else:
                    lines.append(_price_line(node, key, ctx, resolve_inventory_price))

        stack.extend(reversed(node.children))

    subtotal = sum(line.amount for line in lines)
    basis = ctx.base_amount + subtotal
    pct_total = 0.0
    for node, key in percentage:
        pct = _unit_price(node, ctx, resolve_inventory_price)
        amount = basis * pct / 100.0
        pct_total += amount
        lines.append(
            OptionLine(
                id=node.id,
                label=node.label,
                key=key,
                pricing_method="percentage",
                unit_price=pct,
                quantity=basis,
                unit="%",
                amount=amount,
            )
        )

    total = subtotal + pct_total
    log.debug(
        "options_aggregate done lines=%d excluded=%d subtotal=%.4f pct=%.4f total=%.4f",
        len(lines), len(excluded), subtotal, pct_total, total,
    )
    return OptionsCost(
        lines=lines,
        excluded=excluded,
        non_percentage_subtotal=subtotal,
        percentage_total=pct_total,
        total=total,
    )
