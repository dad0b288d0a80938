# -*- coding: utf-8 -*-
"""Targets: remote estimator strategy with formula fallback."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from ..config import settings
from ..diet.parsing import parse_model_output_json
from ..rounding import clamp, finite_or_none, round_half_up
from .calculator import MAX_CALORIES, MIN_CALORIES, compute_targets
from .models import BiometricProfile, TargetSet

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are a sports nutritionist. Return STRICT JSON only, no markdown. "
    "Given a user's profile, estimate daily targets as "
    '{"calories": number, "protein": number, "carbs": number, "fat": number, '
    '"explanation": "string"}. Protein, carbs and fat are grams per day.'
)


@dataclass(frozen=True)
class EstimatorSettings:
    base_url: str
    api_key: Optional[str]
    model: str
    timeout: float
    temperature: float


def resolve_estimator_settings() -> EstimatorSettings:
    return EstimatorSettings(
        base_url=settings.estimator_base_url.rstrip("/"),
        api_key=settings.estimator_api_key,
        model=settings.estimator_model,
        timeout=settings.estimator_timeout,
        temperature=settings.estimator_temperature,
    )


def _profile_summary(profile: BiometricProfile) -> Dict[str, Any]:
    return {k: v for k, v in profile.model_dump().items() if v is not None}


def _completions_url(base_url: str) -> str:
    if base_url.endswith("/chat/completions"):
        return base_url
    return f"{base_url}/chat/completions"


def _message_content(data: object) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content
    return ""


def _targets_from_payload(parsed: Dict[str, Any]) -> Optional[TargetSet]:
    values: Dict[str, float] = {}
    for key in ("calories", "protein", "carbs", "fat"):
        fv = finite_or_none(parsed.get(key))
        if fv is None or fv < 0:
            return None
        values[key] = fv
    return TargetSet(
        calories=int(clamp(round_half_up(values["calories"]), MIN_CALORIES, MAX_CALORIES)),
        protein_g=round_half_up(values["protein"]),
        carbs_g=round_half_up(values["carbs"]),
        fat_g=round_half_up(values["fat"]),
    )


def compute_targets_via_estimator(
    profile: BiometricProfile,
    *,
    client: httpx.Client | None = None,
) -> Optional[TargetSet]:
    """Ask the remote model for targets. Returns None on any failure, never raises."""
    cfg = resolve_estimator_settings()
    if not cfg.api_key:
        logger.info("target estimator disabled (no API key)")
        return None

    payload = {
        "model": cfg.model,
        "temperature": cfg.temperature,
        "messages": [
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps({"profile": _profile_summary(profile)}, ensure_ascii=False)},
        ],
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {cfg.api_key}",
    }

    owns_client = client is None
    http = client or httpx.Client(timeout=cfg.timeout)
    try:
        resp = http.post(_completions_url(cfg.base_url), headers=headers, json=payload, timeout=cfg.timeout)
        resp.raise_for_status()
        content = _message_content(resp.json())
        parsed = parse_model_output_json(content)
    except httpx.TimeoutException as exc:
        logger.warning("target estimator timed out: %s", exc)
        return None
    except httpx.HTTPError as exc:
        logger.warning("target estimator request failed: %s", exc)
        return None
    except ValueError as exc:
        logger.warning("target estimator returned malformed output: %s", exc)
        return None
    except Exception as exc:
        logger.warning("target estimator call failed: %s", exc, exc_info=True)
        return None
    finally:
        if owns_client:
            http.close()

    targets = _targets_from_payload(parsed)
    if targets is None:
        logger.warning("target estimator payload missing numeric fields: %s", sorted(parsed.keys()))
    return targets


class TargetStrategy(ABC):
    """One way of turning a profile into targets; ``None`` means "try the next one"."""

    name: str = "strategy"

    @abstractmethod
    def compute(self, profile: BiometricProfile) -> Optional[TargetSet]: ...


class FormulaStrategy(TargetStrategy):
    name = "formula"

    def compute(self, profile: BiometricProfile) -> Optional[TargetSet]:
        return compute_targets(profile)


class EstimatorStrategy(TargetStrategy):
    name = "estimator"

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client

    def compute(self, profile: BiometricProfile) -> Optional[TargetSet]:
        return compute_targets_via_estimator(profile, client=self._client)


def default_strategies(prefer_estimator: bool) -> List[TargetStrategy]:
    if prefer_estimator:
        return [EstimatorStrategy(), FormulaStrategy()]
    return [FormulaStrategy()]


def resolve_targets(
    profile: BiometricProfile,
    *,
    prefer_estimator: bool = False,
    strategies: Sequence[TargetStrategy] | None = None,
) -> Tuple[TargetSet, str]:
    """Try remote, fall back to local. The formula always closes the chain."""
    chain = list(strategies) if strategies is not None else default_strategies(prefer_estimator)
    if not any(isinstance(s, FormulaStrategy) for s in chain):
        chain.append(FormulaStrategy())

    for strategy in chain:
        targets = strategy.compute(profile)
        if targets is not None:
            logger.info("targets resolved via %s: %s kcal", strategy.name, targets.calories)
            return targets, strategy.name
    return compute_targets(profile), FormulaStrategy.name
