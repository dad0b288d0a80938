# -*- coding: utf-8 -*-
"""Diet: Pydantic models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class NutritionPer100g(BaseModel):
    calories: float = Field(0.0, ge=0)
    protein: float = Field(0.0, ge=0)
    carbs: float = Field(0.0, ge=0)
    fat: float = Field(0.0, ge=0)
    fiber: Optional[float] = Field(None, ge=0)
    sugar: Optional[float] = Field(None, ge=0)
    sodium: Optional[float] = Field(None, ge=0, description="mg per 100 g")


class FoodEstimate(BaseModel):
    name: str = Field(..., min_length=1, description="Food name, e.g. 'rice', 'apple'")
    confidence: float = Field(0.0, ge=0, le=1)
    raw_weight_g: float = Field(0.0, description="Estimated grams; non-positive means unknown")
    per_100g: NutritionPer100g = Field(default_factory=NutritionPer100g)


class NormalizedFoodItem(BaseModel):
    name: str
    confidence: float = Field(0.0, ge=0, le=1)
    weight_g: int = Field(..., ge=0)
    calories: int = Field(0, ge=0)
    protein_g: int = Field(0, ge=0)
    carbs_g: int = Field(0, ge=0)
    fat_g: int = Field(0, ge=0)
    fiber_g: Optional[int] = Field(None, ge=0)
    sugar_g: Optional[int] = Field(None, ge=0)
    sodium_mg: Optional[int] = Field(None, ge=0)
    per_100g: NutritionPer100g


class NormalizedTotals(BaseModel):
    weight_g: int = Field(0, ge=0)
    calories: int = Field(0, ge=0)
    protein_g: int = Field(0, ge=0)
    carbs_g: int = Field(0, ge=0)
    fat_g: int = Field(0, ge=0)


class NormalizedMeal(BaseModel):
    items: List[NormalizedFoodItem] = []
    totals: NormalizedTotals = NormalizedTotals()
    warnings: List[str] = []


class DietNormalizeRequest(BaseModel):
    foods: Optional[List[Dict[str, Any]]] = Field(
        None, description="Raw food entries from the vision collaborator"
    )
    raw_text: Optional[str] = Field(None, description="Unparsed model output (JSON somewhere inside)")
    total_grams: Optional[int] = Field(None, ge=1, description="Known total weight of the plate")
    forced_calories: Optional[int] = Field(None, ge=1, description="Known total calories (e.g. label)")

    @field_validator("foods", mode="before")
    @classmethod
    def _coerce_foods(cls, value: object) -> Optional[List[Dict[str, Any]]]:
        """A single object is accepted in place of a one-element list."""
        if isinstance(value, dict):
            return [value]
        return value  # type: ignore[return-value]
