from __future__ import annotations

import math
from typing import Optional, Union

Raw = Union[str, int, float, None]


def parse_dimension(raw: Raw, *, allow_zero: bool = False) -> Optional[float]:
    """Convert a user-entered measurement (cm) into a validated float.

    Blank, non-numeric, NaN/inf and negative input give ``None``. Zero is
    treated as "not entered" unless ``allow_zero`` is set. Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        cleaned = raw.strip()
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(value) or value < 0:
        return None
    if value == 0 and not allow_zero:
        return None
    return value
