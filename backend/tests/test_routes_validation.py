from __future__ import annotations


def test_validate_success(client, fabric_request):
    resp = client.post("/api/validate", json=fabric_request)
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


def test_validate_accepts_wrapped_request(client, fabric_request):
    resp = client.post("/api/validate", json={"request": fabric_request})
    assert resp.status_code == 200


def test_validate_schema_error(client):
    resp = client.post("/api/validate", json={"family": "curtain", "material": {}})
    assert resp.status_code == 400
    payload = resp.get_json()
    assert payload["errors"]["schema"]


def test_validate_rules_error(client, fabric_request):
    fabric_request["measurements"] = {"width": "abc", "drop": 220}
    resp = client.post("/api/validate", json=fabric_request)
    assert resp.status_code == 400
    payload = resp.get_json()
    assert payload["ok"] is False
    assert payload["errors"]["measurements.width"] == "Enter a number greater than 0 (cm)."
