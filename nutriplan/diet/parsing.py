# -*- coding: utf-8 -*-
"""Diet: turn raw model output into FoodEstimate records.

Only the numbers are handled here; recognition itself happens upstream.
"""

from __future__ import annotations

import ast
import json
import logging
import re
from typing import Any, Dict, List, Optional

from .models import FoodEstimate, NutritionPer100g

logger = logging.getLogger(__name__)

_NUM_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _remove_trailing_commas(text: str) -> str:
    """Remove trailing commas before } or ] while preserving string literals."""
    out: list[str] = []
    in_str = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_str:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            i += 1
            continue

        if ch == "\"":
            in_str = True
            out.append(ch)
            i += 1
            continue

        if ch == ",":
            j = i + 1
            while j < len(text) and text[j] in " \t\r\n":
                j += 1
            if j < len(text) and text[j] in "}]":
                i += 1
                continue

        out.append(ch)
        i += 1
    return "".join(out)


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned, flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", cleaned)


def _iter_json_object_candidates(text: str) -> list[str]:
    """Balanced {...} spans, outermost only, string literals respected."""
    cleaned = _strip_fences(text)
    candidates: list[str] = []
    in_str = False
    escaped = False
    depth = 0
    start_idx: int | None = None

    for i, ch in enumerate(cleaned):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == "\"":
                in_str = False
            continue

        if ch == "\"":
            in_str = True
            continue

        if ch == "{":
            if depth == 0:
                start_idx = i
            depth += 1
            continue

        if ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start_idx is not None:
                candidates.append(cleaned[start_idx : i + 1])
                start_idx = None

    return candidates


def _sanitize_json_like(text: str) -> str:
    # Curly quotes, trailing commas and non-finite floats show up in model output.
    cleaned = text.replace("“", "\"").replace("”", "\"").replace("‘", "'").replace("’", "'")
    cleaned = _remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"-?\bInfinity\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def parse_model_output_json(content: str) -> Dict[str, Any]:
    """Extract the first JSON object from model text. Raises ValueError if none parses."""
    last_error: Exception | None = None

    for candidate in _iter_json_object_candidates(content or ""):
        sanitized = _sanitize_json_like(candidate)
        for attempt in (candidate, sanitized):
            try:
                parsed = json.loads(attempt)
                if isinstance(parsed, dict):
                    return parsed
            except ValueError as exc:
                last_error = exc

        # Python-literal dicts (single quotes / None / True) as a last resort.
        py = re.sub(r"\bnull\b", "None", sanitized, flags=re.IGNORECASE)
        py = re.sub(r"\btrue\b", "True", py, flags=re.IGNORECASE)
        py = re.sub(r"\bfalse\b", "False", py, flags=re.IGNORECASE)
        try:
            parsed = ast.literal_eval(py)
            if isinstance(parsed, dict):
                return parsed
        except (ValueError, SyntaxError) as exc:
            last_error = exc

    raise ValueError(f"Failed to parse model JSON: {last_error or 'no JSON object found'}")


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        m = _NUM_RE.search(s.replace(",", "."))
        if not m:
            return None
        return float(m.group(0))
    return None


def _first_present(obj: Dict[str, Any], keys: List[str]) -> Any:
    for k in keys:
        if k in obj and obj.get(k) is not None:
            return obj.get(k)
    return None


def _pick_num(obj: Dict[str, Any], keys: List[str]) -> Optional[float]:
    for k in keys:
        if k in obj:
            val = _coerce_float(obj.get(k))
            if val is not None:
                return max(0.0, val)
    return None


_NUTRIENT_KEYS = {
    "calories": ["calories", "kcal", "energy_kcal", "energy", "calories_kcal"],
    "protein": ["protein", "protein_g"],
    "carbs": ["carbohydrates", "carbs", "carbs_g", "carb"],
    "fat": ["fat", "fat_g", "lipid"],
    "fiber": ["fiber", "fibre", "fiber_g"],
    "sugar": ["sugar", "sugars", "sugar_g"],
    "sodium": ["sodium", "sodium_mg"],
}


def _nutrient_vector(raw: Dict[str, Any]) -> Dict[str, Optional[float]]:
    return {field: _pick_num(raw, keys) for field, keys in _NUTRIENT_KEYS.items()}


def _per_100g(raw: Dict[str, Any], weight: float) -> NutritionPer100g:
    per100 = raw.get("nutrition_per_100g") or raw.get("per_100g")
    if isinstance(per100, dict):
        values = _nutrient_vector(per100)
    else:
        # Legacy shape: absolute values for the served portion.
        absolute = raw.get("nutrition") if isinstance(raw.get("nutrition"), dict) else raw
        values = _nutrient_vector(absolute)
        scale = 100.0 / weight if weight > 0 else 0.0
        values = {k: (v * scale if v is not None else None) for k, v in values.items()}

    return NutritionPer100g(
        calories=values["calories"] or 0.0,
        protein=values["protein"] or 0.0,
        carbs=values["carbs"] or 0.0,
        fat=values["fat"] or 0.0,
        fiber=values["fiber"],
        sugar=values["sugar"],
        sodium=values["sodium"],
    )


def parse_food_estimates(payload: Any) -> List[FoodEstimate]:
    """Best-effort conversion of a vision payload into FoodEstimate records.

    Accepts ``{"foods": [...]}``, ``{"items": [...]}`` or a bare list.
    Entries that are not objects are skipped.
    """
    if isinstance(payload, dict):
        items = payload.get("foods")
        if items is None:
            items = payload.get("items")
    else:
        items = payload
    if not isinstance(items, list):
        return []

    out: List[FoodEstimate] = []
    for raw in items:
        if not isinstance(raw, dict):
            continue

        name = _first_present(raw, ["food_name", "name", "food", "item", "dish"])
        name = str(name).strip() if name is not None else ""
        name = name or "unknown"

        weight = _pick_num(raw, ["weight_g", "grams", "weight", "gram", "g"])
        if weight is None:
            weight = _coerce_float(raw.get("serving_size")) or 0.0

        confidence = _coerce_float(_first_present(raw, ["confidence", "conf", "score"]))
        if confidence is not None and 1 < confidence <= 100:
            confidence = confidence / 100.0
        confidence = max(0.0, min(1.0, confidence or 0.0))

        out.append(
            FoodEstimate(
                name=name,
                confidence=confidence,
                raw_weight_g=weight,
                per_100g=_per_100g(raw, weight),
            )
        )
    if len(out) != len(items):
        logger.info("skipped %d malformed food entries", len(items) - len(out))
    return out
