from __future__ import annotations

import pytest


def test_price_success(client, fabric_request):
    resp = client.post("/api/price", json={"request": fabric_request})
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["ok"] is True
    assert payload["complete"] is True
    pricing = payload["pricing"]
    assert pricing["quantity"]["widths_required"] == 3
    assert pricing["total_cost"] == pytest.approx(168.3)
    assert payload["display"] == {
        "currency": "GBP",
        "material_cost": 168.3,
        "options_cost": 0.0,
        "labor_cost": None,
        "total_cost": 168.3,
    }


def test_price_incomplete_is_not_an_error(client, fabric_request):
    fabric_request["measurements"] = {"width": 150, "drop": ""}
    resp = client.post("/api/price", json=fabric_request)
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["complete"] is False
    assert payload["missing"] == ["drop"]
    assert "pricing" not in payload


def test_price_with_inventory_records(client, fabric_request):
    fabric_request["options"] = [{"id": "track", "label": "Track", "inventoryRef": "T1"}]
    fabric_request["selected_option_ids"] = ["track"]
    fabric_request["inventory_pricing_mode"] = "cost_with_markup"
    resp = client.post(
        "/api/price",
        json={"request": fabric_request, "inventory": [{"id": "T1", "cost_price": 40}]},
    )
    assert resp.status_code == 200
    # settings default markup is 25%
    assert resp.get_json()["pricing"]["options_cost"] == pytest.approx(50)


def test_price_configuration_error(client, fabric_request):
    fabric_request["material"] = {"name": "No roll", "roll_width": 0, "price_per_linear_unit": 10}
    resp = client.post("/api/price", json=fabric_request)
    assert resp.status_code == 400
    assert "configuration" in resp.get_json()["errors"]


def test_price_out_of_range_grid(client):
    body = {
        "family": "blind",
        "material": {
            "pricing_grid": {"gridType": "width", "tiers": [{"thresholdWidth": 100, "price": 50}]},
        },
        "measurements": {"width": 180, "drop": 100},
    }
    resp = client.post("/api/price", json=body)
    assert resp.status_code == 422
    payload = resp.get_json()
    assert payload["max_width"] == 100
    assert payload["errors"]["grid"]


def test_price_schema_error(client):
    resp = client.post("/api/price", json={"family": "fabric", "material": {"roll_width": 137}})
    assert resp.status_code == 400
    assert resp.get_json()["ok"] is False
