from __future__ import annotations

import logging
from typing import Dict, Optional, Union

from . import blind, fabric, wallcovering
from .models import (
    ConfigurationRequest,
    FabricQuantity,
    Incomplete,
    Measurements,
    OptionContext,
    PriceBreakdown,
    QuantityResult,
    Settings,
    WallMeasurements,
    WallcoveringQuantity,
)
from .options import InventoryResolver, aggregate, iter_nodes

log = logging.getLogger("WindowQuote.domain.rules")

DIMENSION_MESSAGE = "Enter a number greater than 0 (cm)."


def measurements_for(req: ConfigurationRequest) -> Union[Measurements, WallMeasurements]:
    if req.family == "wallcovering":
        return WallMeasurements.model_validate(req.measurements)
    return Measurements.model_validate(req.measurements)


def validate(req: ConfigurationRequest) -> Dict[str, str]:
    """Field -> message for everything that would stop a quote being produced."""
    errors: Dict[str, str] = {}

    meas = measurements_for(req)
    for name, value in meas.model_dump().items():
        if name != "pooling" and value is None:
            errors[f"measurements.{name}"] = DIMENSION_MESSAGE

    mat = req.material
    if mat.roll_width is None or mat.roll_width <= 0:
        if req.family != "blind":
            errors["material.roll_width"] = "Roll width must be greater than 0."

    if req.family == "fabric":
        if mat.pricing_grid is None and mat.price_per_linear_unit is None:
            errors["material.price"] = "Fabric needs a price per metre or a pricing grid."
    elif req.family == "wallcovering":
        if mat.wallcovering_pricing == "per_roll":
            if mat.roll_length is None or mat.roll_length <= 0:
                errors["material.roll_length"] = "Roll length must be greater than 0."
            if mat.price_per_roll is None:
                errors["material.price"] = "Wallcovering needs a price per roll."
        elif mat.price_per_area_unit is None:
            errors["material.price"] = "Wallcovering needs a price per m²."
    elif mat.pricing_grid is None and mat.price_per_area_unit is None:
        errors["material.price"] = "Blind material needs a pricing grid or a price per m²."

    known = {node.id for node in iter_nodes(req.options)}
    unknown = sorted(set(req.selected_option_ids) - known)
    if unknown:
        errors["selected_option_ids"] = f"Unknown option id(s): {', '.join(unknown)}"
    return errors


def _panel_count(quantity: QuantityResult) -> int:
    if isinstance(quantity, FabricQuantity):
        return quantity.widths_required
    if isinstance(quantity, WallcoveringQuantity):
        return quantity.strips_needed
    return 1


def compute(
    req: ConfigurationRequest,
    *,
    settings: Optional[Settings] = None,
    resolve_inventory_price: Optional[InventoryResolver] = None,
) -> Union[PriceBreakdown, Incomplete]:
    """Quantity, material cost, options cost and total for one configured item.

    Returns :class:`Incomplete` (never a zero price) while a required
    dimension is missing. Configuration problems and out-of-range grids
    propagate as exceptions.
    """
    s = settings or Settings()
    overflow = s.GRID_OVERFLOW_POLICY
    meas = measurements_for(req)
    labor: Optional[float] = None

    if req.family == "wallcovering":
        result = wallcovering.calculate(meas, req.material)
        width, drop = meas.wall_width, meas.wall_height
    elif req.family == "blind":
        result = blind.calculate(meas, req.material, req.template, overflow=overflow)
        width, drop = meas.width, meas.drop
    else:
        result = fabric.calculate(
            meas, req.template, req.material, orientation=req.orientation, overflow=overflow
        )
        width, drop = meas.width, meas.drop
        if isinstance(result, FabricQuantity):
            labor = fabric.labour_cost(result, req.template)

    if isinstance(result, Incomplete):
        return result

    ctx = OptionContext(
        width=width,
        drop=drop,
        panel_count=_panel_count(result),
        inventory_pricing_mode=req.inventory_pricing_mode or s.INVENTORY_PRICING_MODE,
        markup_percent=req.markup_percent,
        heading=req.template.heading if req.template else None,
        base_amount=result.material_cost,
        grid_overflow=overflow,
    )
    opts = aggregate(
        req.options, req.selection, ctx, resolve_inventory_price=resolve_inventory_price
    )

    total = result.material_cost + opts.total + (labor or 0.0)
    log.debug(
        "compute done family=%s material=%.4f options=%.4f labor=%s total=%.4f",
        req.family, result.material_cost, opts.total, labor, total,
    )
    return PriceBreakdown(
        family=req.family,
        quantity=result,
        options=opts,
        material_cost=result.material_cost,
        options_cost=opts.total,
        labor_cost=labor,
        total_cost=total,
        currency=s.CURRENCY,
    )
