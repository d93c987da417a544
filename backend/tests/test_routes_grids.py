from __future__ import annotations

from pathlib import Path

GRID = {
    "gridType": "width_drop",
    "tiers": [
        {"thresholdWidth": 100, "thresholdDrop": 100, "price": 50},
        {"thresholdWidth": 200, "thresholdDrop": 200, "price": 120},
    ],
}


def test_import_csv_reports_skipped_rows(client):
    resp = client.post("/api/grids/import", json={"csv": "width,drop,price\n100,100,50\nbad,row,here\n200,200,120\n"})
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["grid"]["gridType"] == "width_drop"
    assert len(payload["grid"]["tiers"]) == 2
    assert payload["skipped_rows"] == [3]


def test_import_requires_source(client):
    resp = client.post("/api/grids/import", json={})
    assert resp.status_code == 400


def test_import_missing_workbook(client, tmp_path):
    resp = client.post("/api/grids/import", json={"path": str(tmp_path / "none.xlsx")})
    assert resp.status_code == 404


def test_export_csv(client):
    resp = client.post("/api/grids/export", json={"grid": GRID})
    assert resp.status_code == 200
    assert resp.get_json()["csv"].splitlines()[0] == "width,drop,price"


def test_export_xlsx_then_import(client, settings_mgr):
    resp = client.post("/api/grids/export", json={"grid": GRID, "format": "xlsx", "name": "Roller Blinds"})
    assert resp.status_code == 200
    path = Path(resp.get_json()["path"])
    assert path.name == "roller_blinds.xlsx"
    assert path.parent.parent == Path(settings_mgr.load().OUTPUT_DIR)

    again = client.post("/api/grids/import", json={"path": str(path)}).get_json()
    assert again["grid"]["tiers"][1]["price"] == 120


def test_resolve(client):
    resp = client.post("/api/grids/resolve", json={"grid": GRID, "width": "150", "drop": 90})
    assert resp.get_json() == {"ok": True, "complete": True, "price": 120.0}

    resp = client.post("/api/grids/resolve", json={"grid": GRID, "width": 150})
    assert resp.get_json()["missing"] == ["drop"]

    resp = client.post("/api/grids/resolve", json={"grid": GRID, "width": 250, "drop": 90})
    assert resp.status_code == 422

    resp = client.post("/api/grids/resolve", json={"grid": GRID, "width": 250, "drop": 90, "overflow": "clamp"})
    assert resp.get_json()["price"] == 120.0
