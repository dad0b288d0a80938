# -*- coding: utf-8 -*-
"""Targets: Pydantic models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


TargetMethod = Literal["formula", "estimator"]


class BiometricProfile(BaseModel):
    """Onboarding answers as sent by the app. Every field is optional.

    Enum-like fields stay free strings: the app is localized and older clients
    send labels such as "Perder peso" or "Sedentário". The calculator and the
    assembler normalize them and fall back to defaults for anything unknown.
    """

    model_config = ConfigDict(frozen=True)

    weight_kg: Optional[float] = Field(None, description="Current weight (kg)")
    height_cm: Optional[float] = Field(None, description="Height (cm)")
    age: Optional[int] = Field(None, description="Age (years)")
    gender: Optional[str] = Field(None, description="male | female")
    goal: Optional[str] = Field(None, description="loss | gain | maintain (free text accepted)")
    activity_level: Optional[str] = Field(None, description="sedentary | regular | heavy")
    target_weight_kg: Optional[float] = None
    weekly_rate_kg: Optional[float] = Field(None, description="Desired change per week (kg)")
    rate_intensity: Optional[str] = Field(None, description="slow | recommended | fast")
    workouts_per_week: Optional[int] = None
    experience: Optional[str] = Field(None, description="beginner | intermediate | advanced")
    diet_type: Optional[str] = Field(None, description="vegan | vegetarian | none")


class TargetSet(BaseModel):
    calories: int = Field(..., ge=0)
    protein_g: int = Field(..., ge=0)
    carbs_g: int = Field(..., ge=0)
    fat_g: int = Field(..., ge=0)


class TargetsRequest(BaseModel):
    profile: BiometricProfile = Field(default_factory=BiometricProfile)
    use_estimator: bool = Field(True, description="Try the remote estimator before the formula")


class TargetsResponse(BaseModel):
    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int
    method: TargetMethod
