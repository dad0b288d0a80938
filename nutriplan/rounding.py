# -*- coding: utf-8 -*-
"""Rounding helpers shared by the target, portion and plan arithmetic."""

from __future__ import annotations

import math
from typing import Any, Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (2.5 -> 3, -2.5 -> -2).

    Not ``round()``: banker's rounding sends 1742.5 to 1742.
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def finite_or_none(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def positive_or_none(value: Any) -> Optional[float]:
    f = finite_or_none(value)
    if f is None or f <= 0:
        return None
    return f
