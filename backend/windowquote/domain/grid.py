# backend/windowquote/domain/grid.py
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import ConfigurationError, OutOfRangeGrid
from .models import GridOverflowPolicy, GridTier, PricingGrid

log = logging.getLogger("WindowQuote.domain.grid")


def resolve(
    grid: PricingGrid,
    width: float,
    drop: Optional[float] = None,
    *,
    overflow: GridOverflowPolicy = "reject",
) -> float:
    """Price of the smallest tier whose threshold covers the request.

    Width-only grids ignore ``drop``. On width+drop grids a tier covers the
    request only when both its thresholds are >= the requested values. When
    nothing covers the request, ``overflow="reject"`` raises
    :class:`OutOfRangeGrid`; ``"clamp"`` falls back to the largest tier.
    """
    if not grid.tiers:
        raise ConfigurationError("Pricing grid has no tiers.")
    if width is None or width <= 0:
        raise ConfigurationError("Grid lookup needs a positive width.")

    two_axis = grid.grid_type == "width_drop"
    if two_axis and (drop is None or drop <= 0):
        raise ConfigurationError("Width/drop grid lookup needs a positive drop.")

    for tier in grid.tiers:
        if tier.threshold_width < width:
            continue
        if two_axis and (tier.threshold_drop or 0.0) < drop:
            continue
        return tier.price

    if overflow == "clamp":
        largest = grid.tiers[-1]
        log.warning(
            "grid_overflow clamped width=%.1f drop=%s tier_width=%.1f tier_drop=%s",
            width, drop, largest.threshold_width, largest.threshold_drop,
        )
        return largest.price

    raise OutOfRangeGrid(width, drop if two_axis else None, grid.max_width, grid.max_drop)


# ---------------------------------------------------------------------------
# CSV import / export
# ---------------------------------------------------------------------------

@dataclass
class GridImport:
    grid: PricingGrid
    skipped_rows: List[int]
    header: Optional[List[str]] = None


def _to_float(token: str) -> Optional[float]:
    try:
        return float(token.strip())
    except (TypeError, ValueError):
        return None


def grid_from_rows(rows: Iterable[Sequence[object]]) -> GridImport:
    """Build a grid from 2-column (width,price) or 3-column (width,drop,price) rows.

    A row whose first token is not numeric is taken as a header and skipped.
    Rows with non-numeric values, a column count different from the first
    data row, or non-positive thresholds are discarded (their 1-based row
    numbers are reported). The import never aborts on a bad row.
    """
    tiers: List[GridTier] = []
    skipped: List[int] = []
    header: Optional[List[str]] = None
    width_cols: Optional[int] = None

    for lineno, raw in enumerate(rows, start=1):
        cells = ["" if c is None else str(c).strip() for c in raw]
        while cells and cells[-1] == "":
            cells.pop()
        if not cells:
            continue

        if _to_float(cells[0]) is None:
            if header is None and not tiers:
                header = cells
            else:
                skipped.append(lineno)
            continue

        if width_cols is None:
            if len(cells) not in (2, 3):
                skipped.append(lineno)
                continue
            width_cols = len(cells)
        if len(cells) != width_cols:
            skipped.append(lineno)
            continue

        values = [_to_float(c) for c in cells]
        if any(v is None for v in values):
            skipped.append(lineno)
            continue

        if width_cols == 2:
            w, price = values
            d = None
        else:
            w, d, price = values
        if w <= 0 or (d is not None and d <= 0) or price < 0:
            skipped.append(lineno)
            continue
        tiers.append(GridTier(threshold_width=w, threshold_drop=d, price=price))

    if not tiers:
        raise ConfigurationError("No valid pricing rows found.")

    grid_type = "width" if width_cols == 2 else "width_drop"
    if skipped:
        log.warning("grid_import skipped_rows=%s", skipped)
    log.debug("grid_import done type=%s tiers=%d", grid_type, len(tiers))
    return GridImport(grid=PricingGrid(grid_type=grid_type, tiers=tiers), skipped_rows=skipped, header=header)


def parse_grid_csv(text: str) -> GridImport:
    reader = csv.reader(io.StringIO(text.strip()))
    return grid_from_rows(reader)


def grid_header(grid: PricingGrid) -> List[str]:
    if grid.grid_type == "width":
        return ["width", "price"]
    return ["width", "drop", "price"]


def grid_rows(grid: PricingGrid) -> List[List[float]]:
    if grid.grid_type == "width":
        return [[t.threshold_width, t.price] for t in grid.tiers]
    return [[t.threshold_width, t.threshold_drop, t.price] for t in grid.tiers]


def _fmt(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else repr(float(v))


def grid_to_csv(grid: PricingGrid, *, header: bool = True) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    if header:
        writer.writerow(grid_header(grid))
    for row in grid_rows(grid):
        writer.writerow([_fmt(v) for v in row])
    return buf.getvalue()
