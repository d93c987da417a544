from __future__ import annotations


def test_health_endpoint(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["ok"] is True
    assert payload["ts"].endswith("Z")


def test_health_reports_active_pricing_policy(client):
    payload = client.get("/api/health").get_json()
    assert payload["grid_overflow"] == "reject"
    assert payload["currency"] == "GBP"
