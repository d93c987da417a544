from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from windowquote.config import SettingsManager
from windowquote.domain.models import Material, Settings, TreatmentTemplate


# ---------------------------------------------------------------------------
# Domain builders
# ---------------------------------------------------------------------------


@pytest.fixture()
def pencil_pleat() -> TreatmentTemplate:
    """Curtain make-up used in most fabric examples: 2x fullness, no hems."""
    return TreatmentTemplate(
        name="Pencil pleat",
        heading="pencil pleat",
        fullness_ratio=2.0,
        header_allowance=20.0,
        bottom_hem=15.0,
        waste_percent=10.0,
    )


@pytest.fixture()
def plain_fabric() -> Material:
    return Material(name="Linen 137", roll_width=137.0, price_per_linear_unit=20.0)


@pytest.fixture()
def fabric_request(pencil_pleat: TreatmentTemplate, plain_fabric: Material) -> Dict[str, Any]:
    return {
        "family": "fabric",
        "template": pencil_pleat.model_dump(),
        "material": plain_fabric.model_dump(),
        "measurements": {"width": 150, "drop": 220},
    }


# ---------------------------------------------------------------------------
# Flask app fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_settings(tmp_path: Path) -> Settings:
    outputs = tmp_path / "outputs"
    outputs.mkdir()
    return Settings(
        OUTPUT_DIR=str(outputs),
        GRID_OVERFLOW_POLICY="reject",
        INVENTORY_PRICING_MODE="selling",
        DEFAULT_MARKUP_PERCENT=25.0,
        CURRENCY="gbp",
        PARTNER_PO_PREFIX="WQ-",
    )


@pytest.fixture()
def settings_mgr(fake_settings: Settings, tmp_path: Path) -> SettingsManager:
    mgr = SettingsManager(storage_path=tmp_path / "settings.json")
    mgr.save(fake_settings)
    return mgr


@pytest.fixture()
def app(monkeypatch: pytest.MonkeyPatch, settings_mgr: SettingsManager) -> Any:
    from windowquote import create_app
    from windowquote.routes import deps

    monkeypatch.setattr(deps, "settings_mgr", settings_mgr)

    flask_app = create_app()
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app) -> Any:  # noqa: ANN001
    return app.test_client()
