# -*- coding: utf-8 -*-
"""Plan endpoints (daily meals and workouts)."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional, Tuple, Union

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import settings
from ..security import get_current_user
from .coordinator import (
    generate_plan_for_date,
    generate_plan_range,
    goal_label,
    preview_plan,
    regenerate_plan_for_date,
    replace_day_items,
    replace_meal_with_photo,
)
from .models import (
    MealsReplaceRequest,
    PhotoMealRequest,
    PlanDay,
    PlanGenerateRequest,
    PlanItemPatchRequest,
    PlanItemPatchResponse,
    PlanPreviewResponse,
    PlanRangeResponse,
    PlanRegenerateRequest,
    PlanWeekResponse,
    WorkoutsReplaceRequest,
)
from .storage import find_plan, get_plan, list_plans, update_item

router = APIRouter(prefix="/api/plans", tags=["Plans"])


def _parse_day_or_400(raw: Optional[str], field: str = "date") -> date:
    if not raw:
        return date.today()
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {raw!r} (expected YYYY-MM-DD)") from exc


def _resolve_range(request: PlanGenerateRequest) -> Tuple[date, date]:
    start = _parse_day_or_400(request.date)
    if request.range == "day":
        return start, start
    if request.range == "week":
        return start, start + timedelta(days=6)

    if not request.end:
        raise HTTPException(status_code=400, detail="end is required for range=custom")
    end = _parse_day_or_400(request.end, field="end")
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before date")
    days = (end - start).days + 1
    if days > settings.plan_max_range_days:
        raise HTTPException(
            status_code=400,
            detail=f"Range too long: {days} days > {settings.plan_max_range_days}",
        )
    return start, end


def _empty_day(user_id: str, day: date) -> PlanDay:
    return PlanDay(user_id=user_id, date=day.isoformat())


@router.get("", response_model=Union[PlanWeekResponse, PlanDay], summary="Get a plan day or week")
def get_plans(
    date_: str | None = Query(default=None, alias="date", description="YYYY-MM-DD, defaults to today"),
    week: bool = Query(default=False, description="Return the 7 days starting at date"),
    user: dict = Depends(get_current_user),
):
    start = _parse_day_or_400(date_)
    if not week:
        return find_plan(user["id"], start.isoformat()) or _empty_day(user["id"], start)

    end = start + timedelta(days=6)
    stored = {p.date: p for p in list_plans(user["id"], start.isoformat(), end.isoformat())}
    items = []
    for i in range(7):
        day = start + timedelta(days=i)
        items.append(stored.get(day.isoformat()) or _empty_day(user["id"], day))
    return PlanWeekResponse(items=items)


@router.post("", response_model=PlanRangeResponse, status_code=201, summary="Generate plan day(s)")
def generate_plans(request: PlanGenerateRequest, user: dict = Depends(get_current_user)):
    start, end = _resolve_range(request)
    if start == end:
        plan = generate_plan_for_date(
            user_id=user["id"],
            profile=request.profile,
            day=start,
            meals_per_day=request.meals_per_day,
            workouts_per_day=request.workouts_per_day,
            use_estimator=request.use_estimator,
        )
        return PlanRangeResponse(items=[plan])

    result = generate_plan_range(
        user_id=user["id"],
        profile=request.profile,
        start=start,
        end=end,
        meals_per_day=request.meals_per_day,
        workouts_per_day=request.workouts_per_day,
        use_estimator=request.use_estimator,
    )
    return PlanRangeResponse(items=result.items, failures=result.failures)


@router.post("/preview", response_model=PlanPreviewResponse, summary="Assemble a day without saving it")
def preview_plan_api(request: PlanRegenerateRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    day = _parse_day_or_400(request.date)
    draft, method = preview_plan(
        profile=request.profile,
        day=day,
        meals_per_day=request.meals_per_day,
        workouts_per_day=request.workouts_per_day,
        variation_seed=request.variation_seed,
        use_estimator=request.use_estimator,
    )
    return PlanPreviewResponse(
        date=day.isoformat(),
        goal=goal_label(request.profile),
        total_calories=draft.total_calories,
        targets=draft.targets,
        method=method,
        variation_seed=draft.variation_seed,
        meals=draft.meals if request.scope.includes_meals else [],
        workouts=draft.workouts if request.scope.includes_workouts else [],
    )


@router.post("/regenerate", response_model=PlanRangeResponse, summary="Regenerate meals and/or workouts")
def regenerate_plans(request: PlanRegenerateRequest, user: dict = Depends(get_current_user)):
    start, end = _resolve_range(request)
    if start == end:
        plan = regenerate_plan_for_date(
            user_id=user["id"],
            profile=request.profile,
            day=start,
            scope=request.scope,
            meals_per_day=request.meals_per_day,
            workouts_per_day=request.workouts_per_day,
            variation_seed=request.variation_seed,
            use_estimator=request.use_estimator,
        )
        return PlanRangeResponse(items=[plan])

    result = generate_plan_range(
        user_id=user["id"],
        profile=request.profile,
        start=start,
        end=end,
        meals_per_day=request.meals_per_day,
        workouts_per_day=request.workouts_per_day,
        scope=request.scope,
        regenerate=True,
        variation_seed=request.variation_seed,
        use_estimator=request.use_estimator,
    )
    return PlanRangeResponse(items=result.items, failures=result.failures)


def _target_day_or_404(user_id: str, plan_day_id: Optional[str], raw_date: Optional[str]) -> str:
    if plan_day_id:
        plan = get_plan(user_id, plan_day_id)
        if not plan:
            raise HTTPException(status_code=404, detail="Plan not found")
        return plan.date
    return _parse_day_or_400(raw_date).isoformat()


@router.post("/meals/replace", response_model=PlanDay, summary="Replace a day's meals")
def replace_meals(request: MealsReplaceRequest, user: dict = Depends(get_current_user)):
    if not request.meals:
        raise HTTPException(status_code=400, detail="meals must not be empty")
    day = _target_day_or_404(user["id"], request.plan_day_id, request.date)
    return replace_day_items(user_id=user["id"], day=day, meals=request.meals)


@router.post("/workouts/replace", response_model=PlanDay, summary="Replace a day's workouts")
def replace_workouts(request: WorkoutsReplaceRequest, user: dict = Depends(get_current_user)):
    if not request.workouts:
        raise HTTPException(status_code=400, detail="workouts must not be empty")
    day = _target_day_or_404(user["id"], request.plan_day_id, request.date)
    return replace_day_items(user_id=user["id"], day=day, workouts=request.workouts)


@router.post("/meals/{meal_id}/photo", response_model=PlanDay, summary="Apply a photo estimate to a meal")
def replace_meal_photo(meal_id: str, request: PhotoMealRequest, user: dict = Depends(get_current_user)):
    if not request.meal.items:
        raise HTTPException(status_code=400, detail="meal has no items")
    return replace_meal_with_photo(
        user_id=user["id"],
        meal_id=meal_id,
        meal=request.meal,
        name=request.name,
        description=request.description,
    )


@router.patch("/items", response_model=PlanItemPatchResponse, summary="Update one meal or workout")
def patch_item(request: PlanItemPatchRequest, user: dict = Depends(get_current_user)):
    data = request.data
    item = update_item(
        user_id=user["id"],
        item_type=request.item_type,
        item_id=request.item_id,
        status=request.status,
        title=data.title if data else None,
        start_time=data.start_time if data else None,
        end_time=data.end_time if data else None,
        notes=data.notes if data else None,
    )
    if request.item_type == "meal":
        return PlanItemPatchResponse(item_type="meal", meal=item)
    return PlanItemPatchResponse(item_type="workout", workout=item)
