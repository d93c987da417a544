from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from ..domain.errors import ConfigurationError

log = logging.getLogger("WindowQuote.services.inventory")


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str = ""
    selling_price: Optional[float] = None
    cost_price: Optional[float] = None
    markup_percent: Optional[float] = None


class InventoryPriceBook:
    """In-memory ``resolve_inventory_price`` over already-fetched stock records.

    Pass :meth:`resolve` wherever the option aggregator expects an
    inventory resolver.
    """

    def __init__(self, items: Iterable[InventoryItem], default_markup_percent: float = 0.0) -> None:
        self._items: Dict[str, InventoryItem] = {item.id: item for item in items}
        self.default_markup_percent = default_markup_percent

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> InventoryItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise ConfigurationError(f"Unknown inventory item: {item_id}") from None

    def _with_markup(self, item: InventoryItem, markup_percent: Optional[float]) -> float:
        if item.cost_price is None:
            raise ConfigurationError(f"Inventory item '{item.id}' has no cost price.")
        markup = markup_percent
        if markup is None:
            markup = item.markup_percent
        if markup is None:
            markup = self.default_markup_percent
        return item.cost_price * (1 + markup / 100.0)

    def resolve(self, item_id: str, mode: str = "selling", markup_percent: Optional[float] = None) -> float:
        item = self.get(item_id)
        if mode == "selling":
            if item.selling_price is not None:
                return float(item.selling_price)
            log.debug("inventory no_selling_price id=%s; using cost with markup", item_id)
            return self._with_markup(item, markup_percent)
        if mode == "cost":
            if item.cost_price is None:
                raise ConfigurationError(f"Inventory item '{item.id}' has no cost price.")
            return float(item.cost_price)
        if mode == "cost_with_markup":
            return self._with_markup(item, markup_percent)
        raise ConfigurationError(f"Unknown inventory pricing mode: {mode}")

    __call__ = resolve

    @classmethod
    def from_records(cls, records: Iterable[dict], default_markup_percent: float = 0.0) -> "InventoryPriceBook":
        items = []
        for rec in records:
            items.append(
                InventoryItem(
                    id=str(rec["id"]),
                    name=str(rec.get("name") or ""),
                    selling_price=_opt_float(rec.get("selling_price")),
                    cost_price=_opt_float(rec.get("cost_price")),
                    markup_percent=_opt_float(rec.get("markup_percent")),
                )
            )
        return cls(items, default_markup_percent=default_markup_percent)


def _opt_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)
