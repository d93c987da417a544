# backend/windowquote/domain/blind.py
from __future__ import annotations

import logging
from typing import Optional, Union

from . import grid as grid_resolver
from .errors import ConfigurationError
from .models import BlindQuantity, GridOverflowPolicy, Incomplete, Material, Measurements, TreatmentTemplate

log = logging.getLogger("WindowQuote.domain.blind")


def calculate(
    measurements: Measurements,
    material: Material,
    template: Optional[TreatmentTemplate] = None,
    *,
    overflow: GridOverflowPolicy = "reject",
) -> Union[BlindQuantity, Incomplete]:
    """Blinds and shutters: grid price when the material has a grid, else area price.

    Area pricing measures the made-up blind, i.e. the rail width plus both
    side hems by the drop plus header and bottom hem, with the template's
    waste applied.
    """
    missing = [name for name in ("width", "drop") if getattr(measurements, name) is None]
    if missing:
        return Incomplete(missing=missing)

    width, drop = measurements.width, measurements.drop
    side = template.side_hems if template else 0.0
    header = template.header_allowance if template else 0.0
    bottom = template.bottom_hem if template else 0.0
    waste = template.waste_percent if template else 0.0

    eff_width = width + side * 2
    eff_drop = drop + header + bottom
    sqm = eff_width * eff_drop / 10000.0 * (1 + waste / 100.0)

    if material.pricing_grid is not None:
        unit_price = grid_resolver.resolve(material.pricing_grid, width, drop, overflow=overflow)
        cost, source = unit_price, "grid"
    elif material.price_per_area_unit is not None:
        unit_price = float(material.price_per_area_unit)
        cost, source = sqm * unit_price, "per_area_unit"
    else:
        raise ConfigurationError(f"Blind material '{material.name}' has neither a pricing grid nor a price per m².")

    log.debug("blind_calc done source=%s sqm=%.4f cost=%.4f", source, sqm, cost)
    return BlindQuantity(
        effective_width_cm=eff_width,
        effective_drop_cm=eff_drop,
        square_meters=sqm,
        waste_percent_applied=waste,
        pricing_source=source,
        unit_price=unit_price,
        material_cost=cost,
    )
