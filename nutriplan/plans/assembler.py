# -*- coding: utf-8 -*-
"""
Deterministic day plan assembly

Builds a day's meals and workouts from a TargetSet. Variety comes from an
explicit seed hash over static tables, never from a random generator, so the
same inputs always give the same plan.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from ..rounding import clamp, finite_or_none, round_half_up
from ..targets.calculator import normalize_activity
from ..targets.models import BiometricProfile, TargetSet
from .content import (
    CONTENT_VERSION,
    EVENING_START_TIMES,
    MEAL_POOLS,
    MEAL_RATIO_PRESETS,
    MEAL_SLOTS,
    MORNING_START_TIMES,
    SLOTS_BY_MEAL_COUNT,
    WORKOUT_DURATION_MIN,
    WORKOUT_FOCUSES,
    WORKOUT_POOLS,
    WORKOUT_TITLES,
)
from .models import PlanDraft, PlanMeal, PlanWorkout

DEFAULT_MEALS_PER_DAY = 6
DEFAULT_WORKOUTS = 3
MAX_WORKOUTS_PER_DAY = 6

_VEGAN_WORDS = ("vegan", "vegano", "vegana", "plant-based", "plant based")
_VEGETARIAN_WORDS = ("vegetarian", "vegetariano", "vegetariana", "veggie", "ovo-lacto", "ovolacto")
_BEGINNER_WORDS = ("beginner", "iniciante", "novice", "starter")
_INTENSITY_BY_ACTIVITY = {"sedentary": "low", "regular": "moderate", "heavy": "high"}


def normalize_diet(raw: Optional[str]) -> str:
    """vegan | vegetarian | none. Vegan variants are checked first."""
    d = (raw or "").strip().lower()
    if not d:
        return "none"
    if any(w in d for w in _VEGAN_WORDS):
        return "vegan"
    if any(w in d for w in _VEGETARIAN_WORDS):
        return "vegetarian"
    return "none"


def seeded_index(seed: int, multiplier: int, offset: int, pool_size: int) -> int:
    """The pseudo-variety hash: ``(seed * multiplier + offset) mod pool_size``."""
    if pool_size <= 0:
        return 0
    return (seed * multiplier + offset) % pool_size


def variation_seed_for(day: date) -> int:
    """Weekday seed, Sunday 0 .. Saturday 6."""
    return (day.weekday() + 1) % 7


def regeneration_seed(day: date, now: Optional[datetime] = None) -> int:
    """Weekday seed mixed with wall-clock seconds; regenerating twice differs."""
    moment = now or datetime.now(timezone.utc)
    return variation_seed_for(day) + int(moment.timestamp())


def _meal_count(meals_per_day: Optional[int]) -> int:
    value = finite_or_none(meals_per_day)
    if value is None:
        return DEFAULT_MEALS_PER_DAY
    return int(clamp(round_half_up(value), 2, 6))


def _format_description(text: str, calories: int, protein: int, carbs: int, fat: int) -> str:
    return f"{text} • {calories} kcal · Protein {protein}g · Carbs {carbs}g · Fat {fat}g"


def build_meals(targets: TargetSet, diet: str, meals_per_day: Optional[int], variation_seed: int) -> List[PlanMeal]:
    seed = abs(int(variation_seed))
    ratios = MEAL_RATIO_PRESETS[seed % len(MEAL_RATIO_PRESETS)]
    indices = SLOTS_BY_MEAL_COUNT[_meal_count(meals_per_day)]
    ratio_sum = sum(ratios[i] for i in indices) or 1.0
    pool = MEAL_POOLS[diet]

    meals: List[PlanMeal] = []
    for position, idx in enumerate(indices):
        slot = MEAL_SLOTS[idx]
        share = ratios[idx] / ratio_sum
        calories = round_half_up(targets.calories * share)
        protein = round_half_up(targets.protein_g * share)
        carbs = round_half_up(targets.carbs_g * share)
        fat = round_half_up(targets.fat_g * share)

        options = pool[slot.key]
        text = options[seeded_index(seed, slot.prime, slot.offset, len(options))]
        meals.append(
            PlanMeal(
                position=position,
                slot=slot.key,
                title=slot.title,
                description=_format_description(text, calories, protein, carbs, fat),
                start_time=slot.start_time,
                end_time=slot.end_time,
                calories=calories,
                protein_g=protein,
                carbs_g=carbs,
                fat_g=fat,
                source="plan",
                source_meta={
                    "content_version": CONTENT_VERSION,
                    "variation_seed": seed,
                    "diet": diet,
                },
            )
        )
    return meals


def _workout_count(profile: Optional[BiometricProfile], workouts_per_day: Optional[int]) -> int:
    value = finite_or_none(workouts_per_day)
    if value is None and profile is not None:
        value = finite_or_none(profile.workouts_per_week)
    if value is None:
        value = DEFAULT_WORKOUTS
    return int(clamp(round_half_up(value), 0, MAX_WORKOUTS_PER_DAY))


def _is_beginner(profile: Optional[BiometricProfile]) -> bool:
    experience = ((profile.experience if profile else None) or "").strip().lower()
    return any(w in experience for w in _BEGINNER_WORDS)


def _add_minutes(hhmm: str, minutes: int) -> str:
    start = datetime.strptime(hhmm, "%H:%M")
    return (start + timedelta(minutes=minutes)).strftime("%H:%M")


def build_workouts(
    profile: Optional[BiometricProfile],
    workouts_per_day: Optional[int],
    variation_seed: int,
) -> List[PlanWorkout]:
    seed = abs(int(variation_seed))
    count = _workout_count(profile, workouts_per_day)
    start_times = MORNING_START_TIMES if _is_beginner(profile) else EVENING_START_TIMES
    activity = normalize_activity(profile.activity_level if profile else None)
    intensity = _INTENSITY_BY_ACTIVITY.get(activity or "", "moderate")

    workouts: List[PlanWorkout] = []
    for i in range(count):
        focus = WORKOUT_FOCUSES[i % len(WORKOUT_FOCUSES)]
        start = start_times[i * len(start_times) // count]
        pool = WORKOUT_POOLS[focus]
        text = pool[seeded_index(seed, 3, i * 5, len(pool))]
        workouts.append(
            PlanWorkout(
                position=i,
                title=WORKOUT_TITLES[focus],
                focus=focus,
                description=text,
                start_time=start,
                end_time=_add_minutes(start, WORKOUT_DURATION_MIN),
                duration_min=WORKOUT_DURATION_MIN,
                intensity=intensity,
                source="plan",
                source_meta={"content_version": CONTENT_VERSION, "variation_seed": seed},
            )
        )
    return workouts


def assemble_plan(
    targets: TargetSet,
    diet: Optional[str],
    meals_per_day: Optional[int],
    workouts_per_day: Optional[int],
    variation_seed: int,
    profile: Optional[BiometricProfile] = None,
) -> PlanDraft:
    """
    Assemble one day. Deterministic for identical arguments; never raises.

    Args:
        targets: daily calorie/macro targets.
        diet: raw diet label; falls back to ``profile.diet_type``.
        meals_per_day: 2..6, None for all six slots.
        workouts_per_day: explicit count; None uses the profile's weekly count.
        variation_seed: non-negative integer driving ratio and text choice.
        profile: experience, activity level and workout count defaults.
    """
    raw_diet = diet if diet else (profile.diet_type if profile else None)
    diet_kind = normalize_diet(raw_diet)
    seed = abs(int(variation_seed or 0))
    return PlanDraft(
        targets=targets,
        diet=diet_kind,
        variation_seed=seed,
        meals=build_meals(targets, diet_kind, meals_per_day, seed),
        workouts=build_workouts(profile, workouts_per_day, seed),
    )
