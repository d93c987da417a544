from __future__ import annotations


def test_options_all(client):
    resp = client.get("/api/options")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert set(payload) >= {"pricing_method", "grid_type", "family", "partner_field"}
    assert "Control Type" in payload["partner_field"]


def test_options_category_success(client):
    resp = client.get("/api/options/pricing_method")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload == {
        "pricing_method": ["fixed", "per-linear-unit", "per-area-unit", "per-panel", "percentage", "grid"]
    }


def test_options_category_unknown(client):
    resp = client.get("/api/options/unknown")
    assert resp.status_code == 404
    payload = resp.get_json()
    assert "error" in payload


def test_options_labels(client):
    resp = client.post("/api/options/labels", json={"categories": ["family", "pricing_method", "bogus"]})
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["family"][0] == {"value": "fabric", "label": "fabric"}
    assert {"value": "grid", "label": "Pricing Grid"} in payload["pricing_method"]
    assert "bogus" not in payload
