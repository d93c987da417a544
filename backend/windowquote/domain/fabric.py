# backend/windowquote/domain/fabric.py
"""Fullness-based fabric consumption for curtains and drapes.

All intermediate lengths are centimetres; consumption is reported in
metres. Nothing is rounded here: money is rounded only for display.

Vertical (standard) make-up::

    fabric_width_required = width * fullness + returns
    widths_required       = max(1, ceil(fabric_width_required / roll_width))
    total_drop            = drop + pooling + header_allowance + bottom_hem
    seams                 = widths_required - 1
    hem_correction        = seams * seam_hems * 2 + panels * side_hems * 2
    linear_meters         = (widths_required * total_drop + hem_correction) / 100
    with_waste            = linear_meters * (1 + waste_percent / 100)

Railroaded (horizontal) make-up turns the cloth 90 degrees: the drop is
split across roll widths and each piece runs the full gathered width.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Union

from . import grid as grid_resolver
from .errors import ConfigurationError
from .models import (
    FabricQuantity,
    GridOverflowPolicy,
    Incomplete,
    Material,
    Measurements,
    Orientation,
    TreatmentTemplate,
)

log = logging.getLogger("WindowQuote.domain.fabric")


def missing_dimensions(measurements: Measurements) -> list[str]:
    return [name for name in ("width", "drop") if getattr(measurements, name) is None]


def _unit_price(
    material: Material,
    width: float,
    drop: float,
    overflow: GridOverflowPolicy,
) -> tuple[float, str]:
    if material.pricing_grid is not None:
        return grid_resolver.resolve(material.pricing_grid, width, drop, overflow=overflow), "grid"
    if material.price_per_linear_unit is None:
        raise ConfigurationError(f"Fabric '{material.name}' has no price per linear metre or pricing grid.")
    return float(material.price_per_linear_unit), "per_linear_unit"


def calculate(
    measurements: Measurements,
    template: TreatmentTemplate,
    material: Material,
    *,
    orientation: Orientation = "vertical",
    overflow: GridOverflowPolicy = "reject",
) -> Union[FabricQuantity, Incomplete]:
    missing = missing_dimensions(measurements)
    if missing:
        log.debug("fabric_calc incomplete missing=%s", missing)
        return Incomplete(missing=missing)

    roll_width: Optional[float] = material.roll_width
    if roll_width is None or roll_width <= 0:
        raise ConfigurationError(f"Fabric '{material.name}' has no usable roll width ({roll_width!r}).")

    width = measurements.width
    drop = measurements.drop
    panels = template.panel_count

    gathered_width = width * template.fullness_ratio + template.returns
    total_drop = drop + measurements.pooling + template.header_allowance + template.bottom_hem

    if orientation == "horizontal":
        widths = max(1, math.ceil(total_drop / roll_width))
        seams = widths - 1
        piece_length = gathered_width + template.side_hems * 2
        hem_correction = seams * template.seam_hems * 2
        linear_cm = widths * piece_length + hem_correction
    else:
        widths = max(1, math.ceil(gathered_width / roll_width))
        seams = widths - 1
        hem_correction = seams * template.seam_hems * 2 + panels * template.side_hems * 2
        linear_cm = widths * total_drop + hem_correction

    linear_m = linear_cm / 100.0
    with_waste = linear_m * (1 + template.waste_percent / 100.0)

    unit_price, source = _unit_price(material, width, drop, overflow)
    cost = with_waste * unit_price

    log.debug(
        "fabric_calc done orientation=%s widths=%d total_drop=%.1f linear_m=%.4f waste_m=%.4f unit=%.2f source=%s",
        orientation, widths, total_drop, linear_m, with_waste, unit_price, source,
    )

    return FabricQuantity(
        orientation=orientation,
        fabric_width_required_cm=gathered_width,
        widths_required=widths,
        panel_count=panels,
        total_drop_cm=total_drop,
        seams=seams,
        hem_correction_cm=hem_correction,
        linear_meters=linear_m,
        linear_meters_with_waste=with_waste,
        waste_percent_applied=template.waste_percent,
        unit_price=unit_price,
        pricing_source=source,
        material_cost=cost,
    )


def labour_cost(quantity: FabricQuantity, template: TreatmentTemplate) -> Optional[float]:
    """Make-up charge from the template's machine prices, ``None`` when it has none."""
    if not template.machine_price_per_metre and not template.machine_price_per_panel:
        return None
    return (
        template.machine_price_per_metre * quantity.linear_meters_with_waste
        + template.machine_price_per_panel * quantity.panel_count
    )
