# -*- coding: utf-8 -*-
"""Diet: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..security import get_current_user
from .models import DietNormalizeRequest, NormalizedMeal
from .parsing import parse_food_estimates, parse_model_output_json
from .portions import normalize_food_estimates

router = APIRouter(prefix="/api/diet", tags=["Diet"])


@router.post("/normalize", response_model=NormalizedMeal, summary="Normalize photo food estimates")
def normalize(request: DietNormalizeRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    if request.foods is not None:
        payload: object = request.foods
    elif request.raw_text:
        try:
            payload = parse_model_output_json(request.raw_text)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Unreadable estimate output: {exc}") from exc
    else:
        raise HTTPException(status_code=400, detail="Provide foods or raw_text")

    estimates = parse_food_estimates(payload)
    if not estimates:
        raise HTTPException(status_code=400, detail="No food items found")

    return normalize_food_estimates(
        estimates,
        total_grams=request.total_grams,
        forced_calories=request.forced_calories,
    )
