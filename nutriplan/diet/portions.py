# -*- coding: utf-8 -*-
"""
Portion normalization

Reconciles per-item weight estimates with a known plate weight and/or a
forced calorie total using integer grams. Every function here is total:
degenerate input yields a documented fallback, never an exception.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..rounding import finite_or_none, round_half_up
from .models import (
    FoodEstimate,
    NormalizedFoodItem,
    NormalizedMeal,
    NormalizedTotals,
)

logger = logging.getLogger(__name__)

MAX_CORRECTION_STEPS = 10_000
# Residual kcal accepted after the single density-based correction.
CALORIE_SLACK = 3


def _clean_weight(value: object) -> float:
    f = finite_or_none(value)
    return f if f is not None and f > 0 else 0.0


def _kcal(density_per_100g: float, weight_g: float) -> int:
    return round_half_up(density_per_100g / 100.0 * weight_g)


def normalize_weights_to_total(raw_weights: Sequence[object], total_grams: int) -> List[int]:
    """
    Scale weights so their integer sum is exactly ``total_grams``.

    Non-positive entries count as 0. When every entry is 0 the total is split
    evenly and the remainder goes one gram at a time to the first items.
    Otherwise weights are scaled proportionally, rounded with a floor of 1 g,
    and single grams are shifted (never below 1 g) until the sum matches.
    """
    count = len(raw_weights)
    if count == 0:
        return []
    total = round_half_up(finite_or_none(total_grams) or 0)
    weights = [_clean_weight(w) for w in raw_weights]
    positive_sum = sum(weights)

    if positive_sum <= 0:
        base, remainder = divmod(max(total, 0), count)
        return [base + (1 if i < remainder else 0) for i in range(count)]

    result = [max(1, round_half_up(w / positive_sum * total)) for w in weights]

    # Largest estimates absorb the correction first.
    order = sorted(range(count), key=lambda i: weights[i], reverse=True)
    steps = 0
    cursor = 0
    while steps < MAX_CORRECTION_STEPS:
        diff = total - sum(result)
        if diff == 0:
            break
        idx = order[cursor % count]
        cursor += 1
        steps += 1
        if diff > 0:
            result[idx] += 1
        elif result[idx] > 1:
            result[idx] -= 1

    if sum(result) != total:
        logger.warning(
            "weight normalization did not converge after %d steps (total=%s, got=%s)",
            steps,
            total,
            sum(result),
        )
    return result


def adjust_weights_to_target_calories(
    weights: Sequence[int],
    per100_calories: Sequence[float],
    target_calories: int,
) -> List[int]:
    """
    Rescale integer weights so the plate lands on ``target_calories``.

    One proportional pass, then a single correction on the densest item.
    Whatever residual remains (usually <= 3 kcal) is left as rounding slack.
    """
    weights = [round_half_up(_clean_weight(w)) for w in weights]
    densities = [_clean_weight(d) for d in per100_calories]
    if len(densities) < len(weights):
        densities += [0.0] * (len(weights) - len(densities))

    current = sum(_kcal(d, w) for d, w in zip(densities, weights))
    if current == 0:
        return list(weights)

    target = _clean_weight(target_calories)
    factor = target / current
    scaled = [max(1, round_half_up(w * factor)) for w in weights]

    delta = round_half_up(target) - sum(_kcal(d, w) for d, w in zip(densities, scaled))
    if delta != 0:
        densest = max(range(len(scaled)), key=lambda i: densities[i])
        density = densities[densest]
        if density > 0:
            grams = round_half_up(delta / (density / 100.0))
            scaled[densest] = max(1, scaled[densest] + grams)
    return scaled


def derive_item_nutrition(estimate: FoodEstimate, weight_g: int) -> NormalizedFoodItem:
    """Absolute nutrition for ``weight_g``; each nutrient rounded on its own."""
    per100 = estimate.per_100g
    ratio = weight_g / 100.0

    def opt(value: Optional[float]) -> Optional[int]:
        return round_half_up(value * ratio) if value is not None else None

    return NormalizedFoodItem(
        name=estimate.name,
        confidence=estimate.confidence,
        weight_g=weight_g,
        calories=round_half_up(per100.calories * ratio),
        protein_g=round_half_up(per100.protein * ratio),
        carbs_g=round_half_up(per100.carbs * ratio),
        fat_g=round_half_up(per100.fat * ratio),
        fiber_g=opt(per100.fiber),
        sugar_g=opt(per100.sugar),
        sodium_mg=opt(per100.sodium),
        per_100g=per100,
    )


def _totals(items: List[NormalizedFoodItem]) -> NormalizedTotals:
    return NormalizedTotals(
        weight_g=sum(i.weight_g for i in items),
        calories=sum(i.calories for i in items),
        protein_g=sum(i.protein_g for i in items),
        carbs_g=sum(i.carbs_g for i in items),
        fat_g=sum(i.fat_g for i in items),
    )


def normalize_food_estimates(
    estimates: Sequence[FoodEstimate],
    *,
    total_grams: Optional[int] = None,
    forced_calories: Optional[int] = None,
) -> NormalizedMeal:
    """
    Full post-processing of one photo's estimates.

    Args:
        estimates: per-item estimates from the vision collaborator.
        total_grams: known plate weight; weights are normalized to it.
        forced_calories: known calorie total; applied after the weight
            normalization, so it wins when both constraints are given.

    Returns:
        NormalizedMeal with integer weights, per-item nutrition and totals.
    """
    warnings: List[str] = []
    if not estimates:
        return NormalizedMeal(items=[], totals=NormalizedTotals(), warnings=["No food items to normalize"])

    raw = [e.raw_weight_g for e in estimates]
    if total_grams is not None and total_grams > 0:
        if total_grams < len(estimates):
            warnings.append("Total weight is smaller than one gram per item")
        weights = normalize_weights_to_total(raw, total_grams)
    else:
        weights = [max(1, round_half_up(_clean_weight(w))) for w in raw]
        if any(_clean_weight(w) == 0 for w in raw):
            warnings.append("Some items had no weight estimate; 1 g assumed")

    if forced_calories is not None and forced_calories > 0:
        densities = [e.per_100g.calories for e in estimates]
        adjusted = adjust_weights_to_target_calories(weights, densities, forced_calories)
        if adjusted == weights and sum(_kcal(d, w) for d, w in zip(densities, weights)) == 0:
            warnings.append("Items carry no calorie density; forced calories ignored")
        weights = adjusted

    items = [derive_item_nutrition(e, w) for e, w in zip(estimates, weights)]

    if forced_calories is not None and forced_calories > 0:
        deviation = forced_calories - sum(i.calories for i in items)
        # Known approximation: the first item absorbs the slack, whichever it is.
        if 0 < abs(deviation) <= CALORIE_SLACK:
            first = items[0]
            items[0] = first.model_copy(update={"calories": max(0, first.calories + deviation)})
        elif deviation:
            warnings.append(f"Calorie total differs from the forced value by {deviation} kcal")

    return NormalizedMeal(items=items, totals=_totals(items), warnings=warnings)
