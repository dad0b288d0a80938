# -*- coding: utf-8 -*-
"""Targets: API endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from .estimator import resolve_targets
from .models import TargetsRequest, TargetsResponse

router = APIRouter(prefix="/api/targets", tags=["Targets"])


@router.post("", response_model=TargetsResponse, summary="Daily calorie and macro targets for a profile")
def compute_targets_api(request: TargetsRequest):
    targets, method = resolve_targets(request.profile, prefer_estimator=request.use_estimator)
    return TargetsResponse(method=method, **targets.model_dump())
