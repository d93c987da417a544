from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from openpyxl import Workbook, load_workbook

from ..domain.grid import GridImport, grid_from_rows, grid_rows
from ..domain.models import PricingGrid

log = logging.getLogger("WindowQuote.services.grid_workbook")

GRID_SHEET = "Pricing Grid"


def read_grid_workbook(path: str | Path, sheet: Optional[str] = None) -> GridImport:
    """Read a (width, [drop,] price) table from an .xlsx sheet.

    Uses the active sheet unless ``sheet`` is given. The same header and
    bad-row rules as the CSV import apply.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        if sheet is not None:
            if sheet not in wb.sheetnames:
                raise ValueError(f"Sheet not found: {sheet}")
            ws = wb[sheet]
        else:
            ws = wb.active
        result = grid_from_rows(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    log.debug("grid_workbook read path=%s sheet=%s tiers=%d", path, sheet, len(result.grid.tiers))
    return result


def write_grid_workbook(grid: PricingGrid, path: str | Path, sheet: str = GRID_SHEET) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet
    if grid.grid_type == "width":
        ws.append(["Width", "Price"])
    else:
        ws.append(["Width", "Drop", "Price"])
    for row in grid_rows(grid):
        ws.append(row)

    wb.save(path)
    log.debug("grid_workbook written path=%s tiers=%d", path, len(grid.tiers))
    return path
