from __future__ import annotations

import pytest

from windowquote.domain.models import DraftLineItem, OptionSelection, OrderDraft
from windowquote.services import outbound


def _sel(key: str, value: str, label: str = "") -> OptionSelection:
    return OptionSelection(option_key=key, label=label, value=value)


@pytest.mark.parametrize("raw, expected", [
    ("3095 LIGHT CREAM", "LIGHT CREAM"),
    ("3095 - LIGHT CREAM", "LIGHT CREAM"),
    ("3095-WHITE", "WHITE"),
    ("TO CONFIRM", "TO CONFIRM"),
    ("3095", "3095"),
    ("  Ivory ", "Ivory"),
])
def test_extract_colour(raw, expected):
    assert outbound.extract_colour(raw) == expected


def test_instance_suffixed_key_maps_to_partner_field_and_value():
    fields = outbound.map_selections([_sel("control_type_a1b2c3d4", "chain")])
    assert [(f.name, f.value) for f in fields] == [("Control Type", "Cord operated")]


def test_lookup_falls_back_to_label():
    fields = outbound.map_selections([_sel("opt_123", "Left", label="Control Side")])
    assert [(f.name, f.value) for f in fields] == [("Control Side", "L")]


def test_colour_fields_lose_their_code():
    fields = outbound.map_selections([_sel("Bottom Rail Colour", "3095 - LIGHT CREAM")])
    assert fields[0].value == "LIGHT CREAM"


def test_unknown_and_empty_selections_are_dropped():
    fields = outbound.map_selections([
        _sel("internal_margin", "40"),
        _sel("lining", "N/A"),
        _sel("heading", "  "),
        _sel("fixing", "Top fix"),
    ])
    assert [f.name for f in fields] == ["Fixing"]
    assert all(f.name in outbound.PARTNER_FIELDS for f in fields)


def test_first_selection_for_a_field_wins():
    fields = outbound.map_selections([
        _sel("control_type_a1b2c3d4", "wand"),
        _sel("control_type_0badf00d", "chain"),
    ])
    assert [(f.name, f.value) for f in fields] == [("Control Type", "Wand operated")]


def test_line_item_dimensions_are_sent_in_millimetres():
    item = DraftLineItem(
        item_number="ROLLER",
        width="152.4",
        drop=210,
        colour="3095 LIGHT CREAM",
        selected_options=[_sel("mounting", "recess")],
        breakdown_fields=[_sel("notes", "Leave at reception")],
    )
    mapped = outbound.map_line_item(item)
    assert (mapped.width, mapped.drop) == (1524, 2100)
    assert mapped.colour == "LIGHT CREAM"
    assert [(f.name, f.value) for f in mapped.custom_field_values] == [
        ("Mount Type", "Inside mount"),
        ("Comments", "Leave at reception"),
    ]


def _draft() -> OrderDraft:
    return OrderDraft.model_validate({
        "purchaseOrderNumber": "1001",
        "customerReference": "Smith",
        "items": [
            {"itemNumber": "ROLLER", "width": 100, "drop": 100},
            {"itemNumber": "VENETIAN", "width": 80, "drop": 120},
            {"itemNumber": "ROLLER", "width": 60, "drop": 90},
        ],
    })


def test_grouping_by_item_number_suffixes_po():
    groups = outbound.prepare_submission(_draft(), po_prefix="WQ-")
    assert [(g.item_number, g.purchase_order_number, len(g.items)) for g in groups] == [
        ("ROLLER", "WQ-1001-1", 2),
        ("VENETIAN", "WQ-1001-2", 1),
    ]
    payload = groups[0].payload()
    assert payload["purchaseOrderNumber"] == "WQ-1001-1"
    assert payload["customerReference"] == "Smith"
    assert payload["items"][0]["customFieldValues"] == []


def test_single_item_number_keeps_po_unchanged():
    draft = _draft()
    draft.items = [i for i in draft.items if i.item_number == "ROLLER"]
    groups = outbound.prepare_submission(draft)
    assert [g.purchase_order_number for g in groups] == ["1001"]


def test_mapper_never_emits_unknown_fields():
    keys = ["control_type_a1b2c3d4", "Lining", "HEADING", "random", "chain colour", "x_deadbeef", "", "Comments"]
    labels = ["", "Stack", "Mystery", "bracket colour", "Notes"]
    selections = [_sel(k, "3095 - WHITE", label=l) for k in keys for l in labels]
    fields = outbound.map_selections(selections)
    assert fields
    assert {f.name for f in fields} <= outbound.PARTNER_FIELDS
    assert len({f.name for f in fields}) == len(fields)


def test_map_for_submission_returns_fields_per_line_item():
    items = [
        DraftLineItem(item_number="A", selected_options=[_sel("lining", "Blackout")]),
        DraftLineItem(item_number="B", breakdown_fields=[_sel("stack", "centre")]),
    ]
    mapped = outbound.map_for_submission(items)
    assert [[(f.name, f.value) for f in fields] for fields in mapped] == [
        [("Lining", "Blackout")],
        [("Stack", "C")],
    ]


@pytest.mark.parametrize("key, field", [
    ("Control-Type", "Control Type"),
    ("bottom-rail-colour_a1b2c3d4", "Bottom Rail Colour"),
    ("CHAIN  COLOUR", "Chain Colour"),
])
def test_punctuation_variants_of_keys_resolve(key, field):
    assert outbound.resolve_field(_sel(key, "x")) == field
