# -*- coding: utf-8 -*-
"""Plan models for API payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..diet.models import NormalizedMeal
from ..targets.models import BiometricProfile, TargetSet


ItemStatus = Literal["pending", "done", "skipped"]
DietKind = Literal["vegan", "vegetarian", "none"]


class ReplaceScope(str, Enum):
    all = "all"
    meals = "meals"
    workouts = "workouts"

    @classmethod
    def parse(cls, value: object) -> "ReplaceScope":
        raw = str(value.value if isinstance(value, ReplaceScope) else value or "").strip().lower()
        if raw == "both":
            return cls.all
        return cls(raw)

    @property
    def includes_meals(self) -> bool:
        return self in (ReplaceScope.all, ReplaceScope.meals)

    @property
    def includes_workouts(self) -> bool:
        return self in (ReplaceScope.all, ReplaceScope.workouts)


class PlanMeal(BaseModel):
    id: Optional[str] = None
    position: int = 0
    slot: Optional[str] = None
    title: str = "Meal"
    description: Optional[str] = None
    start_time: str = "08:00"
    end_time: str = "08:30"
    calories: Optional[int] = Field(None, ge=0)
    protein_g: Optional[int] = Field(None, ge=0)
    carbs_g: Optional[int] = Field(None, ge=0)
    fat_g: Optional[int] = Field(None, ge=0)
    status: ItemStatus = "pending"
    source: str = "plan"
    source_meta: Optional[Dict[str, Any]] = None


class PlanWorkout(BaseModel):
    id: Optional[str] = None
    position: int = 0
    title: str = "Workout"
    focus: Optional[str] = None
    description: Optional[str] = None
    start_time: str = "08:00"
    end_time: str = "09:00"
    duration_min: Optional[int] = Field(None, ge=0)
    intensity: Optional[str] = None
    status: ItemStatus = "pending"
    source: str = "plan"
    source_meta: Optional[Dict[str, Any]] = None


class PlanDay(BaseModel):
    id: Optional[str] = None
    user_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    goal: Optional[str] = None
    total_calories: Optional[int] = None
    meals: List[PlanMeal] = Field(default_factory=list)
    workouts: List[PlanWorkout] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class PlanDraft(BaseModel):
    """Assembler output; nothing here is persisted yet."""

    targets: TargetSet
    diet: DietKind = "none"
    variation_seed: int = 0
    meals: List[PlanMeal] = Field(default_factory=list)
    workouts: List[PlanWorkout] = Field(default_factory=list)

    @property
    def total_calories(self) -> int:
        return sum(m.calories or 0 for m in self.meals)


class PlanGenerateRequest(BaseModel):
    profile: BiometricProfile = Field(default_factory=BiometricProfile)
    date: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to today")
    range: Literal["day", "week", "custom"] = "day"
    end: Optional[str] = Field(None, description="Last day (inclusive) for range=custom")
    meals_per_day: Optional[int] = Field(None, ge=1, le=12)
    workouts_per_day: Optional[int] = Field(None, ge=0, le=12)
    use_estimator: bool = False


class PlanRegenerateRequest(PlanGenerateRequest):
    scope: ReplaceScope = ReplaceScope.all
    variation_seed: Optional[int] = Field(None, ge=0)

    @field_validator("scope", mode="before")
    @classmethod
    def _coerce_scope(cls, value: object) -> ReplaceScope:
        return ReplaceScope.parse(value)


class PlanPreviewResponse(BaseModel):
    date: str
    goal: Optional[str] = None
    total_calories: int
    targets: TargetSet
    method: str
    variation_seed: int
    meals: List[PlanMeal]
    workouts: List[PlanWorkout]


class PlanWeekResponse(BaseModel):
    items: List[PlanDay]


class RangeFailure(BaseModel):
    date: str
    error: str


class PlanRangeResponse(BaseModel):
    items: List[PlanDay]
    failures: List[RangeFailure] = Field(default_factory=list)


class MealsReplaceRequest(BaseModel):
    plan_day_id: Optional[str] = None
    date: Optional[str] = None
    meals: List[PlanMeal] = Field(default_factory=list)


class WorkoutsReplaceRequest(BaseModel):
    plan_day_id: Optional[str] = None
    date: Optional[str] = None
    workouts: List[PlanWorkout] = Field(default_factory=list)


class PhotoMealRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    meal: NormalizedMeal


class ItemPatch(BaseModel):
    title: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    notes: Optional[str] = None


class PlanItemPatchRequest(BaseModel):
    item_id: str
    item_type: Literal["meal", "workout"]
    status: Optional[ItemStatus] = None
    data: Optional[ItemPatch] = None


class PlanItemPatchResponse(BaseModel):
    item_type: Literal["meal", "workout"]
    meal: Optional[PlanMeal] = None
    workout: Optional[PlanWorkout] = None
