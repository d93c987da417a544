from __future__ import annotations

import pytest

from windowquote.domain import grid
from windowquote.domain.errors import ConfigurationError, OutOfRangeGrid
from windowquote.domain.models import GridTier, PricingGrid


def _two_axis() -> PricingGrid:
    return PricingGrid(
        grid_type="width_drop",
        tiers=[
            GridTier(threshold_width=200, threshold_drop=200, price=120.0),
            GridTier(threshold_width=100, threshold_drop=100, price=50.0),
            GridTier(threshold_width=100, threshold_drop=200, price=70.0),
            GridTier(threshold_width=200, threshold_drop=100, price=90.0),
        ],
    )


def _width_only() -> PricingGrid:
    return PricingGrid(
        grid_type="width",
        tiers=[GridTier(threshold_width=w, price=p) for w, p in [(120, 40.0), (60, 20.0), (90, 30.0)]],
    )


def test_tiers_are_sorted_on_construction():
    g = _width_only()
    assert [t.threshold_width for t in g.tiers] == [60, 90, 120]


def test_width_only_lookup_picks_smallest_covering_tier():
    g = _width_only()
    assert grid.resolve(g, 50) == 20.0
    assert grid.resolve(g, 60) == 20.0
    assert grid.resolve(g, 61) == 30.0
    assert grid.resolve(g, 120, drop=999) == 40.0


def test_two_axis_lookup_requires_both_thresholds():
    g = _two_axis()
    assert grid.resolve(g, 80, 80) == 50.0
    assert grid.resolve(g, 80, 150) == 70.0
    assert grid.resolve(g, 150, 80) == 90.0
    assert grid.resolve(g, 150, 150) == 120.0


def test_lookup_is_idempotent():
    g = _two_axis()
    assert {grid.resolve(g, 150, 150) for _ in range(5)} == {120.0}


def test_overflow_rejects_by_default():
    with pytest.raises(OutOfRangeGrid) as exc:
        grid.resolve(_two_axis(), 250, 150)
    assert exc.value.max_width == 200
    assert exc.value.max_drop == 200
    assert "250" in str(exc.value)


def test_overflow_clamp_uses_largest_tier(caplog):
    with caplog.at_level("WARNING", logger="WindowQuote.domain.grid"):
        assert grid.resolve(_width_only(), 500, overflow="clamp") == 40.0
    assert "grid_overflow" in caplog.text


def test_bad_lookups_are_configuration_errors():
    with pytest.raises(ConfigurationError):
        grid.resolve(PricingGrid(grid_type="width"), 100)
    with pytest.raises(ConfigurationError):
        grid.resolve(_two_axis(), 100)
    with pytest.raises(ConfigurationError):
        grid.resolve(_width_only(), 0)


def test_width_drop_grid_needs_drop_on_every_tier():
    with pytest.raises(ValueError):
        PricingGrid(grid_type="width_drop", tiers=[GridTier(threshold_width=100, price=1.0)])


def test_csv_import_with_header_and_bad_rows():
    text = "width,drop,price\n100,100,50\n100,abc,60\n200,200,120\n300,300\n-5,100,10\n"
    result = grid.parse_grid_csv(text)
    assert result.header == ["width", "drop", "price"]
    assert result.grid.grid_type == "width_drop"
    assert len(result.grid.tiers) == 2
    assert result.skipped_rows == [3, 5, 6]


def test_csv_import_without_header_detects_width_only():
    result = grid.parse_grid_csv("60,20\n90,30.5\n")
    assert result.header is None
    assert result.grid.grid_type == "width"
    assert grid.resolve(result.grid, 70) == 30.5


def test_csv_import_with_no_valid_rows_fails():
    with pytest.raises(ConfigurationError):
        grid.parse_grid_csv("width,price\nfoo,bar\n")


def test_csv_export_writes_header_and_integral_values():
    text = grid.grid_to_csv(_two_axis())
    lines = text.strip().splitlines()
    assert lines[0] == "width,drop,price"
    assert lines[1] == "100,100,50"
    assert grid.grid_to_csv(_width_only(), header=False).splitlines()[0] == "60,20"


def test_exported_grid_reimports_identically():
    g = _two_axis()
    again = grid.parse_grid_csv(grid.grid_to_csv(g)).grid
    assert again == g
