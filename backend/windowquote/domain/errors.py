# backend/windowquote/domain/errors.py
from __future__ import annotations

from typing import Optional


class QuoteError(Exception):
    """Base class for pricing engine failures."""


class ConfigurationError(QuoteError, ValueError):
    """A template, material or option record is missing a required constant."""


class OutOfRangeGrid(QuoteError, ValueError):
    """Requested dimensions exceed every tier of a pricing grid."""

    def __init__(
        self,
        width: float,
        drop: Optional[float],
        max_width: float,
        max_drop: Optional[float] = None,
    ) -> None:
        self.width = width
        self.drop = drop
        self.max_width = max_width
        self.max_drop = max_drop
        if drop is None or max_drop is None:
            msg = f"Width {width:g}cm exceeds the largest grid tier ({max_width:g}cm)."
        else:
            msg = (
                f"{width:g}cm x {drop:g}cm exceeds the largest grid tier "
                f"({max_width:g}cm x {max_drop:g}cm)."
            )
        super().__init__(msg)
