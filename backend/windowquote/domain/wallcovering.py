# backend/windowquote/domain/wallcovering.py
from __future__ import annotations

import logging
import math
from typing import Optional, Union

from .errors import ConfigurationError
from .models import Incomplete, Material, WallcoveringQuantity, WallMeasurements

log = logging.getLogger("WindowQuote.domain.wallcovering")


def strip_length(wall_height: float, pattern_repeat: Optional[float]) -> float:
    """Wall height rounded up to the next whole pattern repeat (if any)."""
    if not pattern_repeat or pattern_repeat <= 0:
        return wall_height
    return math.ceil(wall_height / pattern_repeat) * pattern_repeat


def calculate(wall: WallMeasurements, material: Material) -> Union[WallcoveringQuantity, Incomplete]:
    """Strips, rolls and cost for one wall.

    ``per_roll`` materials are charged per whole roll; ``per_area`` materials
    are charged on the wall area and report m² as the unit.
    """
    missing = [name for name in ("wall_width", "wall_height") if getattr(wall, name) is None]
    if missing:
        log.debug("wallcovering_calc incomplete missing=%s", missing)
        return Incomplete(missing=missing)

    roll_width = material.roll_width
    if roll_width is None or roll_width <= 0:
        raise ConfigurationError(f"Wallcovering '{material.name}' has no usable roll width ({roll_width!r}).")

    mode = material.wallcovering_pricing
    roll_length = material.roll_length
    if mode == "per_roll" and (roll_length is None or roll_length <= 0):
        raise ConfigurationError(f"Wallcovering '{material.name}' has no usable roll length ({roll_length!r}).")

    strips = max(1, math.ceil(wall.wall_width / roll_width))
    length = strip_length(wall.wall_height, material.pattern_repeat)
    total_length = strips * length
    rolls = max(1, math.ceil(total_length / roll_length)) if roll_length and roll_length > 0 else None
    sqm = (wall.wall_width * wall.wall_height) / 10000.0

    if mode == "per_area":
        if material.price_per_area_unit is None:
            raise ConfigurationError(f"Wallcovering '{material.name}' is area-priced but has no price per m².")
        unit_price = float(material.price_per_area_unit)
        quantity, unit = sqm, "m²"
    else:
        if material.price_per_roll is None:
            raise ConfigurationError(f"Wallcovering '{material.name}' has no price per roll.")
        unit_price = float(material.price_per_roll)
        quantity, unit = float(rolls), "rolls"

    cost = quantity * unit_price
    log.debug(
        "wallcovering_calc done mode=%s strips=%d strip_cm=%.1f rolls=%s sqm=%.3f cost=%.4f",
        mode, strips, length, rolls, sqm, cost,
    )
    return WallcoveringQuantity(
        pricing_mode=mode,
        strips_needed=strips,
        strip_length_cm=length,
        total_length_cm=total_length,
        rolls_needed=rolls,
        square_meters=sqm,
        unit=unit,
        quantity=quantity,
        unit_price=unit_price,
        material_cost=cost,
    )
