# -*- coding: utf-8 -*-
"""
Daily target calculator

Energy (BMR -> TDEE -> goal adjustment) and macro split from onboarding data.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..rounding import clamp, positive_or_none, round_half_up
from .models import BiometricProfile, TargetSet

MIN_CALORIES = 1200
MAX_CALORIES = 3500
DEFAULT_BMR = 1600
MIN_FAT_G = 20

GAIN_BASELINE_SURPLUS = 250
# ~7700 kcal per kg of body mass spread over 7 days.
KCAL_PER_WEEKLY_KG = 1100
MAX_PLAUSIBLE_WEEKLY_RATE_KG = 2.0

_ACTIVITY_FACTORS = {
    "sedentary": 1.20,
    "regular": 1.55,
    "heavy": 1.725,
}
_DEFAULT_ACTIVITY_FACTOR = 1.375

_LOSS_DEFICIT_BY_INTENSITY = {
    "slow": 0.15,
    "recommended": 0.25,
    "fast": 0.30,
}

_PROTEIN_PER_KG = {
    "loss": 1.6,
    "gain": 1.2,
    "maintain": 1.3,
}

_LOSS_WORDS = ("loss", "lose", "cut", "perder", "emagrec", "seca", "defini")
_GAIN_WORDS = ("gain", "bulk", "ganhar", "massa", "hipertrof")

_SEDENTARY_WORDS = ("sedent",)
_HEAVY_WORDS = ("heavy", "very", "intense", "intenso", "muito", "athlete")
_REGULAR_WORDS = ("regular", "active", "moderate", "ativo", "ativa", "moderad", "light", "leve")

_FEMALE_WORDS = {"female", "f", "woman", "feminino", "mulher", "fem"}


def normalize_goal(raw: Optional[str]) -> str:
    """Map free-text goal labels to loss | gain | maintain."""
    if not raw:
        return "maintain"
    g = raw.strip().lower()
    if any(w in g for w in _LOSS_WORDS):
        return "loss"
    if any(w in g for w in _GAIN_WORDS):
        return "gain"
    return "maintain"


def normalize_activity(raw: Optional[str]) -> Optional[str]:
    """Map free-text activity labels to sedentary | regular | heavy, None if unrecognized."""
    if not raw:
        return None
    a = raw.strip().lower()
    if any(w in a for w in _SEDENTARY_WORDS):
        return "sedentary"
    if any(w in a for w in _HEAVY_WORDS):
        return "heavy"
    if any(w in a for w in _REGULAR_WORDS):
        return "regular"
    return None


def normalize_intensity(raw: Optional[str]) -> str:
    key = (raw or "").strip().lower()
    return key if key in _LOSS_DEFICIT_BY_INTENSITY else "recommended"


def _is_female(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in _FEMALE_WORDS


def basal_metabolic_rate(profile: BiometricProfile) -> int:
    """Mifflin-St Jeor when weight, height and age are known; coarse fallbacks otherwise."""
    weight = positive_or_none(profile.weight_kg)
    height = positive_or_none(profile.height_cm)
    age = positive_or_none(profile.age)

    if weight and height and age:
        s = -161 if _is_female(profile.gender) else 5
        return round_half_up(10 * weight + 6.25 * height - 5 * age + s)
    if weight:
        return round_half_up(22 * weight)
    return DEFAULT_BMR


def activity_factor(activity_level: Optional[str]) -> float:
    level = normalize_activity(activity_level)
    if level is None:
        return _DEFAULT_ACTIVITY_FACTOR
    return _ACTIVITY_FACTORS[level]


def total_daily_expenditure(profile: BiometricProfile) -> int:
    return round_half_up(basal_metabolic_rate(profile) * activity_factor(profile.activity_level))


def _plausible_weekly_rate(profile: BiometricProfile) -> Optional[float]:
    rate = positive_or_none(profile.weekly_rate_kg)
    if rate is None or rate > MAX_PLAUSIBLE_WEEKLY_RATE_KG:
        # The app slider can send a 0-10 "effort" scale in the same field.
        return None
    return rate


def _gain_calories(tdee: int, profile: BiometricProfile) -> int:
    rate = _plausible_weekly_rate(profile)
    if rate is not None:
        rate = clamp(rate, 0.2, 0.7)
        return tdee + round_half_up(rate * KCAL_PER_WEEKLY_KG)

    calories = tdee + GAIN_BASELINE_SURPLUS
    weight = positive_or_none(profile.weight_kg)
    target = positive_or_none(profile.target_weight_kg)
    if weight and target and target > weight:
        calories += int(clamp(round_half_up((target - weight) * 60), 150, 400))
    return calories


def _loss_calories(tdee: int, profile: BiometricProfile) -> int:
    deficit_pct = _LOSS_DEFICIT_BY_INTENSITY[normalize_intensity(profile.rate_intensity)]
    calories = round_half_up(tdee * (1 - deficit_pct))

    rate = _plausible_weekly_rate(profile)
    if rate is not None:
        # The larger deficit wins. Unlike the gain path this is a min(), keep it.
        calories = min(calories, tdee - round_half_up(rate * KCAL_PER_WEEKLY_KG))
    return calories


def split_macros(calories: int, weight_kg: Optional[float], goal: str) -> Tuple[int, int, int]:
    """Return (protein_g, carbs_g, fat_g) whose kcal equivalents sum to ``calories``."""
    weight = positive_or_none(weight_kg)
    if weight:
        protein = round_half_up(weight * _PROTEIN_PER_KG.get(goal, _PROTEIN_PER_KG["maintain"]))
    else:
        protein = round_half_up(calories * 0.28 / 4)
    # Leave room for the fat floor plus the final 4a+9b closing shift.
    protein = max(0, min(protein, (calories - (MIN_FAT_G + 4) * 9) // 4))

    remaining = calories - protein * 4
    carbs = round_half_up(remaining * 0.5 / 4)
    fat = round_half_up(remaining * 0.5 / 9)
    fat += round_half_up((calories - (protein * 4 + carbs * 4 + fat * 9)) / 9)
    fat = max(fat, MIN_FAT_G)

    # Whole fat grams leave up to +-4 kcal; close it with 4a + 9b, smallest fat move first.
    residual = calories - (protein * 4 + carbs * 4 + fat * 9)
    if residual:
        shift = residual % 4
        candidates = sorted((shift, shift - 4), key=abs)
        for b in candidates:
            a = (residual - 9 * b) // 4
            if fat + b >= MIN_FAT_G and carbs + a >= 0:
                fat += b
                carbs += a
                break
    return protein, carbs, fat


def compute_targets(profile: BiometricProfile) -> TargetSet:
    """
    Compute clamped calorie and macro targets. Total: never raises.

    Args:
        profile: onboarding biometrics; any field may be missing.

    Returns:
        TargetSet with calories in [1200, 3500] and
        protein*4 + carbs*4 + fat*9 == calories.
    """
    goal = normalize_goal(profile.goal)
    tdee = total_daily_expenditure(profile)

    if goal == "gain":
        calories = _gain_calories(tdee, profile)
    elif goal == "loss":
        calories = _loss_calories(tdee, profile)
    else:
        calories = tdee

    calories = int(clamp(calories, MIN_CALORIES, MAX_CALORIES))
    protein, carbs, fat = split_macros(calories, profile.weight_kg, goal)
    return TargetSet(calories=calories, protein_g=protein, carbs_g=carbs, fat_g=fat)
