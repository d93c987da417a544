# backend/windowquote/services/outbound.py
"""Map an order's option selections onto the manufacturing partner's vocabulary.

The partner validates every custom field against its own fixed list and
accepts a single product type (``itemNumber``) per submitted order, so
this module:

* strips per-unit instance suffixes from internal option keys,
* resolves the partner field name through an ordered list of lookups,
* drops empty values and anything the partner would not recognise,
* translates values whose wording differs, and extracts colour names,
* groups line items by ``itemNumber`` into independent submissions.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..domain.keys import normalize_key, strip_instance_suffix
from ..domain.models import (
    CustomField,
    DraftLineItem,
    OptionSelection,
    OrderDraft,
    OrderLineItem,
    SubmissionGroup,
)

log = logging.getLogger("WindowQuote.services.outbound")

PARTNER_FIELDS: frozenset[str] = frozenset({
    "Control Type",
    "Control Side",
    "Chain Colour",
    "Chain Length",
    "Bracket Type",
    "Bracket Colour",
    "Fixing",
    "Mount Type",
    "Roll Direction",
    "Bottom Rail",
    "Bottom Rail Colour",
    "Motor Type",
    "Remote",
    "Heading",
    "Lining",
    "Stack",
    "Fullness",
    "Louvre Size",
    "Frame Type",
    "Hinge Colour",
    "Tilt Rod",
    "Valance",
    "Comments",
})

# Internal option keys (already suffix-stripped) that differ from the partner's wording.
_KEY_ALIASES: Dict[str, str] = {
    "control": "Control Type",
    "operation": "Control Type",
    "operating_system": "Control Type",
    "chain_side": "Control Side",
    "control_position": "Control Side",
    "chain_color": "Chain Colour",
    "brackets": "Bracket Type",
    "bracket_color": "Bracket Colour",
    "fixing_type": "Fixing",
    "mounting": "Mount Type",
    "fit": "Mount Type",
    "fit_type": "Mount Type",
    "roll_type": "Roll Direction",
    "bottom_bar": "Bottom Rail",
    "bottom_bar_colour": "Bottom Rail Colour",
    "bottom_rail_color": "Bottom Rail Colour",
    "motor": "Motor Type",
    "motorisation": "Motor Type",
    "remote_type": "Remote",
    "heading_type": "Heading",
    "lining_type": "Lining",
    "stack_direction": "Stack",
    "stacking": "Stack",
    "blade_size": "Louvre Size",
    "frame": "Frame Type",
    "hinge_color": "Hinge Colour",
    "tilt": "Tilt Rod",
    "pelmet": "Valance",
    "notes": "Comments",
}


def _build_field_map() -> Dict[str, str]:
    table: Dict[str, str] = {}
    for field in PARTNER_FIELDS:
        table[field] = field
        table[field.lower()] = field
        table[normalize_key(field)] = field
    table.update(_KEY_ALIASES)
    return table


FIELD_MAP: Dict[str, str] = _build_field_map()

# Partner field -> {lowercased internal value: partner value}
VALUE_MAP: Dict[str, Dict[str, str]] = {
    "Control Type": {
        "chain": "Cord operated",
        "chain operated": "Cord operated",
        "cord": "Cord operated",
        "corded": "Cord operated",
        "motor": "Motorised",
        "motorised": "Motorised",
        "motorized": "Motorised",
        "wand": "Wand operated",
        "spring": "Spring assisted",
    },
    "Control Side": {"left": "L", "right": "R", "l": "L", "r": "R"},
    "Stack": {"left": "L", "right": "R", "centre": "C", "center": "C", "split": "C"},
    "Roll Direction": {
        "back": "Back roll",
        "back roll": "Back roll",
        "standard": "Back roll",
        "front": "Front roll",
        "front roll": "Front roll",
        "reverse": "Front roll",
    },
    "Mount Type": {
        "inside": "Inside mount",
        "recess": "Inside mount",
        "outside": "Outside mount",
        "face": "Outside mount",
    },
}

EMPTY_VALUES = frozenset({"", "n/a", "none"})

_COLOUR_CODE = re.compile(r"^\s*\d+(?:\s*-\s*|\s+)(\S.*?)\s*$")

# Ordered lookups: first hit wins.
LookupStrategy = Tuple[str, Callable[[str, str], str]]
LOOKUP_STRATEGIES: List[LookupStrategy] = [
    ("raw_key", lambda key, label: key),
    ("lower_key", lambda key, label: key.lower()),
    ("label", lambda key, label: label),
    ("lower_label", lambda key, label: label.lower()),
    ("normalized_key", lambda key, label: normalize_key(key)),
]


def extract_colour(value: str) -> str:
    """``"3095 LIGHT CREAM"`` / ``"3095 - LIGHT CREAM"`` -> ``"LIGHT CREAM"``."""
    m = _COLOUR_CODE.match(value or "")
    if not m:
        return (value or "").strip()
    return m.group(1)


def is_empty(value: Optional[str]) -> bool:
    return value is None or value.strip().lower() in EMPTY_VALUES


def resolve_field(selection: OptionSelection) -> Optional[str]:
    key = strip_instance_suffix(selection.option_key)
    label = selection.label.strip()
    for name, probe in LOOKUP_STRATEGIES:
        candidate = probe(key, label)
        if not candidate:
            continue
        field = FIELD_MAP.get(candidate)
        if field is not None:
            log.debug("outbound field_resolved key=%s via=%s field=%s", selection.option_key, name, field)
            return field
    return None


def translate_value(field: str, value: str) -> str:
    cleaned = value.strip()
    mapped = VALUE_MAP.get(field, {}).get(cleaned.lower())
    if mapped is not None:
        cleaned = mapped
    if "Colour" in field:
        cleaned = extract_colour(cleaned)
    return cleaned


def map_selections(selections: Iterable[OptionSelection]) -> List[CustomField]:
    """Partner custom fields for one line item, first occurrence of a field wins."""
    fields: List[CustomField] = []
    seen: set[str] = set()
    for sel in selections:
        if is_empty(sel.value):
            continue
        field = resolve_field(sel)
        if field is None or field not in PARTNER_FIELDS:
            log.debug("outbound unmappable key=%s label=%s", sel.option_key, sel.label)
            continue
        if field in seen:
            continue
        value = translate_value(field, sel.value)
        if is_empty(value):
            continue
        seen.add(field)
        fields.append(CustomField(name=field, value=value))
    return fields


def _to_mm(cm: Optional[float]) -> int:
    return int(round(cm * 10)) if cm else 0


def map_line_item(item: DraftLineItem) -> OrderLineItem:
    custom = map_selections([*item.selected_options, *item.breakdown_fields])
    return OrderLineItem(
        item_number=item.item_number.strip(),
        item_name=item.item_name,
        location=item.location,
        quantity=item.quantity,
        width=_to_mm(item.width),
        drop=_to_mm(item.drop),
        material=item.material.strip(),
        colour=extract_colour(item.colour),
        custom_field_values=custom,
    )


def map_for_submission(items: Iterable[DraftLineItem]) -> List[List[CustomField]]:
    return [map_line_item(item).custom_field_values for item in items]


def group_by_item_number(
    items: Iterable[OrderLineItem],
    purchase_order_number: str,
    *,
    prefix: str = "",
    customer_reference: str = "",
) -> List[SubmissionGroup]:
    """One submission per product type, in first-seen order.

    A single group keeps the purchase order number as is; several groups
    get ``-1``, ``-2`` ... suffixes so each can be submitted (and retried)
    on its own.
    """
    buckets: Dict[str, List[OrderLineItem]] = {}
    for item in items:
        buckets.setdefault(item.item_number, []).append(item)

    po = f"{prefix}{purchase_order_number}"
    many = len(buckets) > 1
    groups: List[SubmissionGroup] = []
    for idx, (item_number, bucket) in enumerate(buckets.items(), start=1):
        groups.append(
            SubmissionGroup(
                item_number=item_number,
                purchase_order_number=f"{po}-{idx}" if many else po,
                customer_reference=customer_reference,
                items=bucket,
            )
        )
    log.debug("outbound grouped po=%s groups=%d", po, len(groups))
    return groups


def prepare_submission(draft: OrderDraft, *, po_prefix: str = "") -> List[SubmissionGroup]:
    mapped = [map_line_item(item) for item in draft.items]
    return group_by_item_number(
        mapped,
        draft.purchase_order_number,
        prefix=po_prefix,
        customer_reference=draft.customer_reference,
    )
