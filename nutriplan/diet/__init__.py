# -*- coding: utf-8 -*-
"""Diet domain (photo estimate parsing and portion normalization)."""

from .portions import normalize_food_estimates

__all__ = ["normalize_food_estimates"]
