from __future__ import annotations

import re

# Items cloned per unit carry "<key>_<8 hex>" so sibling copies stay distinct.
_INSTANCE_SUFFIX = re.compile(r"[_\-][0-9a-f]{8}$", re.IGNORECASE)
_NON_WORD = re.compile(r"[^a-z0-9]+")


def strip_instance_suffix(key: str) -> str:
    return _INSTANCE_SUFFIX.sub("", key.strip())


def normalize_key(text: str) -> str:
    """``"Control Type_a1b2c3d4"`` -> ``"control_type"``."""
    base = strip_instance_suffix(text).lower()
    return _NON_WORD.sub("_", base).strip("_")
