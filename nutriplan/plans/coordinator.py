# -*- coding: utf-8 -*-
"""
Plan reconciliation

Turns assembled drafts (or caller-supplied items) into persisted plan days.
The in-scope collections of an existing day are swapped inside one storage
transaction; everything out of scope is left exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Sequence

from ..diet.models import NormalizedMeal
from ..targets.calculator import normalize_goal
from ..targets.estimator import TargetStrategy, resolve_targets
from ..targets.models import BiometricProfile, TargetSet
from .assembler import assemble_plan, regeneration_seed, variation_seed_for
from .models import PlanDay, PlanDraft, PlanMeal, PlanWorkout, RangeFailure, ReplaceScope
from .storage import create_plan, find_plan, replace_items, replace_meal

logger = logging.getLogger(__name__)


@dataclass
class RangeResult:
    items: List[PlanDay] = field(default_factory=list)
    failures: List[RangeFailure] = field(default_factory=list)


def goal_label(profile: Optional[BiometricProfile]) -> Optional[str]:
    if profile is None or not profile.goal:
        return None
    return normalize_goal(profile.goal)


def _meal_total(meals: Sequence[PlanMeal]) -> int:
    return sum(m.calories or 0 for m in meals)


def reconcile_plan_day(
    *,
    user_id: str,
    day: str,
    meals: Sequence[PlanMeal] = (),
    workouts: Sequence[PlanWorkout] = (),
    scope: ReplaceScope = ReplaceScope.all,
    goal: Optional[str] = None,
    db_path: Path | None = None,
) -> PlanDay:
    """
    Store generated items for one (user, date).

    A missing day is created with the in-scope items only. An existing day
    gets its in-scope collections replaced atomically, with the day total
    re-summed from the stored meals in that same transaction.
    """
    new_meals = list(meals) if scope.includes_meals else []
    new_workouts = list(workouts) if scope.includes_workouts else []

    existing = find_plan(user_id, day, db_path=db_path)
    if existing is None:
        plan = create_plan(
            user_id=user_id,
            day=day,
            goal=goal,
            total_calories=_meal_total(new_meals),
            meals=new_meals,
            workouts=new_workouts,
            db_path=db_path,
        )
        logger.info("plan day created user=%s date=%s scope=%s", user_id, day, scope.value)
        return plan

    plan = replace_items(
        plan_id=existing.id,
        scope=scope,
        meals=new_meals,
        workouts=new_workouts,
        goal=goal,
        db_path=db_path,
    )
    logger.info("plan day reconciled user=%s date=%s scope=%s", user_id, day, scope.value)
    return plan


def _store_draft(
    user_id: str,
    day: date,
    draft: PlanDraft,
    scope: ReplaceScope,
    goal: Optional[str],
    db_path: Path | None,
) -> PlanDay:
    return reconcile_plan_day(
        user_id=user_id,
        day=day.isoformat(),
        meals=draft.meals,
        workouts=draft.workouts,
        scope=scope,
        goal=goal,
        db_path=db_path,
    )


def preview_plan(
    *,
    profile: BiometricProfile,
    day: date,
    meals_per_day: Optional[int] = None,
    workouts_per_day: Optional[int] = None,
    variation_seed: Optional[int] = None,
    use_estimator: bool = False,
    strategies: Sequence[TargetStrategy] | None = None,
) -> tuple[PlanDraft, str]:
    targets, method = resolve_targets(profile, prefer_estimator=use_estimator, strategies=strategies)
    seed = variation_seed if variation_seed is not None else variation_seed_for(day)
    draft = assemble_plan(targets, profile.diet_type, meals_per_day, workouts_per_day, seed, profile)
    return draft, method


def generate_plan_for_date(
    *,
    user_id: str,
    profile: BiometricProfile,
    day: date,
    meals_per_day: Optional[int] = None,
    workouts_per_day: Optional[int] = None,
    scope: ReplaceScope = ReplaceScope.all,
    targets: Optional[TargetSet] = None,
    use_estimator: bool = False,
    db_path: Path | None = None,
) -> PlanDay:
    if targets is None:
        targets, _ = resolve_targets(profile, prefer_estimator=use_estimator)
    draft = assemble_plan(
        targets, profile.diet_type, meals_per_day, workouts_per_day, variation_seed_for(day), profile
    )
    return _store_draft(user_id, day, draft, scope, goal_label(profile), db_path)


def regenerate_plan_for_date(
    *,
    user_id: str,
    profile: BiometricProfile,
    day: date,
    scope: ReplaceScope = ReplaceScope.all,
    meals_per_day: Optional[int] = None,
    workouts_per_day: Optional[int] = None,
    variation_seed: Optional[int] = None,
    targets: Optional[TargetSet] = None,
    use_estimator: bool = False,
    db_path: Path | None = None,
) -> PlanDay:
    """Like generate, but with a fresh seed so the day actually changes."""
    if targets is None:
        targets, _ = resolve_targets(profile, prefer_estimator=use_estimator)
    seed = variation_seed if variation_seed is not None else regeneration_seed(day)
    draft = assemble_plan(targets, profile.diet_type, meals_per_day, workouts_per_day, seed, profile)
    return _store_draft(user_id, day, draft, scope, goal_label(profile), db_path)


def date_range(start: date, end: date) -> List[date]:
    if end < start:
        return []
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def generate_plan_range(
    *,
    user_id: str,
    profile: BiometricProfile,
    start: date,
    end: date,
    meals_per_day: Optional[int] = None,
    workouts_per_day: Optional[int] = None,
    scope: ReplaceScope = ReplaceScope.all,
    regenerate: bool = False,
    variation_seed: Optional[int] = None,
    use_estimator: bool = False,
    db_path: Path | None = None,
) -> RangeResult:
    """
    Generate every date in [start, end], one after the other.

    Targets are resolved once for the whole range. A date that fails is
    logged, reported in ``failures`` and skipped; the rest still run.
    """
    targets, method = resolve_targets(profile, prefer_estimator=use_estimator)
    logger.info(
        "generating %s..%s for user=%s (targets via %s)", start.isoformat(), end.isoformat(), user_id, method
    )
    result = RangeResult()
    for day in date_range(start, end):
        try:
            if regenerate:
                plan = regenerate_plan_for_date(
                    user_id=user_id,
                    profile=profile,
                    day=day,
                    scope=scope,
                    meals_per_day=meals_per_day,
                    workouts_per_day=workouts_per_day,
                    variation_seed=variation_seed,
                    targets=targets,
                    db_path=db_path,
                )
            else:
                plan = generate_plan_for_date(
                    user_id=user_id,
                    profile=profile,
                    day=day,
                    meals_per_day=meals_per_day,
                    workouts_per_day=workouts_per_day,
                    scope=scope,
                    targets=targets,
                    db_path=db_path,
                )
        except Exception as exc:
            logger.exception("plan generation failed for user=%s date=%s", user_id, day.isoformat())
            result.failures.append(RangeFailure(date=day.isoformat(), error=str(exc) or type(exc).__name__))
            continue
        result.items.append(plan)
    return result


def _chat_meta(item_meta: Optional[dict]) -> dict:
    meta = dict(item_meta or {})
    meta.setdefault("origin", "chat")
    return meta


def replace_day_items(
    *,
    user_id: str,
    day: str,
    meals: Optional[Sequence[PlanMeal]] = None,
    workouts: Optional[Sequence[PlanWorkout]] = None,
    db_path: Path | None = None,
) -> PlanDay:
    """Store caller-supplied meals or workouts for a day (assistant edits)."""
    if meals is not None:
        scope = ReplaceScope.meals
        items = [
            m.model_copy(update={"position": i, "source": "chat", "source_meta": _chat_meta(m.source_meta)})
            for i, m in enumerate(meals)
        ]
        return reconcile_plan_day(user_id=user_id, day=day, meals=items, scope=scope, db_path=db_path)

    scope = ReplaceScope.workouts
    items_w = [
        w.model_copy(update={"position": i, "source": "chat", "source_meta": _chat_meta(w.source_meta)})
        for i, w in enumerate(workouts or [])
    ]
    return reconcile_plan_day(user_id=user_id, day=day, workouts=items_w, scope=scope, db_path=db_path)


def _photo_description(meal: NormalizedMeal) -> str:
    names = ", ".join(f"{i.name} ({i.weight_g} g)" for i in meal.items)
    return names or "Photo meal"


def replace_meal_with_photo(
    *,
    user_id: str,
    meal_id: str,
    meal: NormalizedMeal,
    name: Optional[str] = None,
    description: Optional[str] = None,
    db_path: Path | None = None,
) -> PlanDay:
    """Overwrite one plan meal with a normalized photo estimate."""
    totals = meal.totals
    updates = {
        "title": name,
        "description": description or _photo_description(meal),
        "calories": totals.calories,
        "protein_g": totals.protein_g,
        "carbs_g": totals.carbs_g,
        "fat_g": totals.fat_g,
        "source": "photo",
        "source_meta": {
            "weight_g": totals.weight_g,
            "items": [i.name for i in meal.items],
            "warnings": list(meal.warnings),
        },
    }
    plan = replace_meal(user_id=user_id, meal_id=meal_id, updates=updates, db_path=db_path)
    logger.info("meal %s replaced from photo (%s kcal)", meal_id, totals.calories)
    return plan
