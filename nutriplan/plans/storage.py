# -*- coding: utf-8 -*-
"""Plan storage helpers (SQLite)."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from .models import PlanDay, PlanMeal, PlanWorkout, ReplaceScope


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _path(db_path: Path | None) -> Path:
    return db_path or settings.app_db_path


def _load_meta(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def _dump_meta(meta: Optional[Dict[str, Any]]) -> Optional[str]:
    if meta is None:
        return None
    return json.dumps(meta, ensure_ascii=False)


def _row_to_meal(row: sqlite3.Row) -> PlanMeal:
    r = dict(row)
    return PlanMeal(
        id=r["id"],
        position=r["position"],
        slot=r.get("slot"),
        title=r["title"],
        description=r.get("description"),
        start_time=r["start_time"],
        end_time=r["end_time"],
        calories=r.get("calories"),
        protein_g=r.get("protein_g"),
        carbs_g=r.get("carbs_g"),
        fat_g=r.get("fat_g"),
        status=r["status"],
        source=r["source"],
        source_meta=_load_meta(r.get("source_meta_json")),
    )


def _row_to_workout(row: sqlite3.Row) -> PlanWorkout:
    r = dict(row)
    return PlanWorkout(
        id=r["id"],
        position=r["position"],
        title=r["title"],
        focus=r.get("focus"),
        description=r.get("description"),
        start_time=r["start_time"],
        end_time=r["end_time"],
        duration_min=r.get("duration_min"),
        intensity=r.get("intensity"),
        status=r["status"],
        source=r["source"],
        source_meta=_load_meta(r.get("source_meta_json")),
    )


def _load_plan(conn: sqlite3.Connection, row: sqlite3.Row) -> PlanDay:
    r = dict(row)
    meals = conn.execute(
        "SELECT * FROM plan_meals WHERE plan_day_id = ? ORDER BY position ASC",
        (r["id"],),
    ).fetchall()
    workouts = conn.execute(
        "SELECT * FROM plan_workouts WHERE plan_day_id = ? ORDER BY position ASC",
        (r["id"],),
    ).fetchall()
    return PlanDay(
        id=r["id"],
        user_id=r["user_id"],
        date=r["date"],
        goal=r.get("goal"),
        total_calories=r.get("total_calories"),
        meals=[_row_to_meal(m) for m in meals],
        workouts=[_row_to_workout(w) for w in workouts],
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _insert_meals(conn: sqlite3.Connection, plan_id: str, meals: Iterable[PlanMeal]) -> int:
    count = 0
    for position, meal in enumerate(meals):
        conn.execute(
            """
            INSERT INTO plan_meals (
                id, plan_day_id, position, slot, title, description, start_time, end_time,
                calories, protein_g, carbs_g, fat_g, status, source, source_meta_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(uuid4()),
                plan_id,
                position,
                meal.slot,
                meal.title,
                meal.description,
                meal.start_time,
                meal.end_time,
                meal.calories,
                meal.protein_g,
                meal.carbs_g,
                meal.fat_g,
                meal.status,
                meal.source,
                _dump_meta(meal.source_meta),
            ),
        )
        count += 1
    return count


def _insert_workouts(conn: sqlite3.Connection, plan_id: str, workouts: Iterable[PlanWorkout]) -> int:
    count = 0
    for position, workout in enumerate(workouts):
        conn.execute(
            """
            INSERT INTO plan_workouts (
                id, plan_day_id, position, title, focus, description, start_time, end_time,
                duration_min, intensity, status, source, source_meta_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(uuid4()),
                plan_id,
                position,
                workout.title,
                workout.focus,
                workout.description,
                workout.start_time,
                workout.end_time,
                workout.duration_min,
                workout.intensity,
                workout.status,
                workout.source,
                _dump_meta(workout.source_meta),
            ),
        )
        count += 1
    return count


def find_plan(user_id: str, day: str, db_path: Path | None = None) -> Optional[PlanDay]:
    with db_conn(_path(db_path)) as conn:
        row = conn.execute(
            "SELECT * FROM plan_days WHERE user_id = ? AND date = ?",
            (user_id, day),
        ).fetchone()
        if not row:
            return None
        return _load_plan(conn, row)


def get_plan(user_id: str, plan_id: str, db_path: Path | None = None) -> Optional[PlanDay]:
    with db_conn(_path(db_path)) as conn:
        row = conn.execute(
            "SELECT * FROM plan_days WHERE id = ? AND user_id = ?",
            (plan_id, user_id),
        ).fetchone()
        if not row:
            return None
        return _load_plan(conn, row)


def list_plans(user_id: str, start: str, end: str, db_path: Path | None = None) -> List[PlanDay]:
    with db_conn(_path(db_path)) as conn:
        rows = conn.execute(
            """
            SELECT * FROM plan_days
            WHERE user_id = ? AND date >= ? AND date <= ?
            ORDER BY date ASC
            """,
            (user_id, start, end),
        ).fetchall()
        return [_load_plan(conn, r) for r in rows]


def create_plan(
    *,
    user_id: str,
    day: str,
    goal: Optional[str],
    total_calories: Optional[int],
    meals: Iterable[PlanMeal] = (),
    workouts: Iterable[PlanWorkout] = (),
    db_path: Path | None = None,
) -> PlanDay:
    plan_id = str(uuid4())
    now = _iso_now()
    with db_conn(_path(db_path)) as conn:
        conn.execute(
            """
            INSERT INTO plan_days (id, user_id, date, goal, total_calories, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (plan_id, user_id, day, goal, total_calories, now, now),
        )
        _insert_meals(conn, plan_id, meals)
        _insert_workouts(conn, plan_id, workouts)
        row = conn.execute("SELECT * FROM plan_days WHERE id = ?", (plan_id,)).fetchone()
        return _load_plan(conn, row)


def replace_items(
    *,
    plan_id: str,
    scope: ReplaceScope,
    meals: Iterable[PlanMeal] = (),
    workouts: Iterable[PlanWorkout] = (),
    goal: Optional[str] = None,
    db_path: Path | None = None,
) -> PlanDay:
    """
    Delete and re-insert the in-scope collections in a single transaction.

    The day total is re-summed from the stored meals inside the same
    transaction, so it covers both freshly inserted and retained meals.
    """
    now = _iso_now()
    with db_conn(_path(db_path)) as conn:
        row = conn.execute("SELECT * FROM plan_days WHERE id = ?", (plan_id,)).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Plan not found")

        if scope.includes_meals:
            conn.execute("DELETE FROM plan_meals WHERE plan_day_id = ?", (plan_id,))
            _insert_meals(conn, plan_id, meals)
        if scope.includes_workouts:
            conn.execute("DELETE FROM plan_workouts WHERE plan_day_id = ?", (plan_id,))
            _insert_workouts(conn, plan_id, workouts)

        total_calories = _meal_total(conn, plan_id)
        conn.execute(
            """
            UPDATE plan_days
            SET total_calories = ?, goal = COALESCE(?, goal), updated_at = ?
            WHERE id = ?
            """,
            (total_calories, goal, now, plan_id),
        )
        row = conn.execute("SELECT * FROM plan_days WHERE id = ?", (plan_id,)).fetchone()
        return _load_plan(conn, row)


def _meal_total(conn: sqlite3.Connection, plan_id: str) -> int:
    row = conn.execute(
        "SELECT COALESCE(SUM(calories), 0) AS total FROM plan_meals WHERE plan_day_id = ?",
        (plan_id,),
    ).fetchone()
    return int(row["total"])


def replace_meal(
    *,
    user_id: str,
    meal_id: str,
    updates: Dict[str, Any],
    db_path: Path | None = None,
) -> PlanDay:
    """Overwrite one meal's fields and refresh the day total."""
    allowed = {"title", "description", "calories", "protein_g", "carbs_g", "fat_g", "source", "source_meta"}
    fields = {k: v for k, v in updates.items() if k in allowed and v is not None}
    with db_conn(_path(db_path)) as conn:
        row = conn.execute(
            """
            SELECT m.plan_day_id FROM plan_meals m
            JOIN plan_days d ON d.id = m.plan_day_id
            WHERE m.id = ? AND d.user_id = ?
            """,
            (meal_id, user_id),
        ).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Meal not found for this user")
        plan_id = row["plan_day_id"]

        if "source_meta" in fields:
            fields["source_meta_json"] = _dump_meta(fields.pop("source_meta"))
        if fields:
            assignments = ", ".join(f"{k} = ?" for k in fields)
            conn.execute(
                f"UPDATE plan_meals SET {assignments} WHERE id = ?",
                (*fields.values(), meal_id),
            )
        conn.execute(
            "UPDATE plan_days SET total_calories = ?, updated_at = ? WHERE id = ?",
            (_meal_total(conn, plan_id), _iso_now(), plan_id),
        )
        day_row = conn.execute("SELECT * FROM plan_days WHERE id = ?", (plan_id,)).fetchone()
        return _load_plan(conn, day_row)


def update_item(
    *,
    user_id: str,
    item_type: str,
    item_id: str,
    status: Optional[str] = None,
    title: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    notes: Optional[str] = None,
    db_path: Path | None = None,
) -> Union[PlanMeal, PlanWorkout]:
    table = "plan_meals" if item_type == "meal" else "plan_workouts"
    patch: Dict[str, Any] = {}
    if status:
        patch["status"] = status
    if title is not None:
        patch["title"] = title
    if start_time is not None:
        patch["start_time"] = start_time
    if end_time is not None:
        patch["end_time"] = end_time
    if notes is not None:
        patch["description"] = notes

    with db_conn(_path(db_path)) as conn:
        row = conn.execute(
            f"""
            SELECT i.* FROM {table} i
            JOIN plan_days d ON d.id = i.plan_day_id
            WHERE i.id = ? AND d.user_id = ?
            """,
            (item_id, user_id),
        ).fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Item not found for this user")
        if patch:
            assignments = ", ".join(f"{k} = ?" for k in patch)
            conn.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", (*patch.values(), item_id))
            conn.execute(
                "UPDATE plan_days SET updated_at = ? WHERE id = ?",
                (_iso_now(), row["plan_day_id"]),
            )
        updated = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (item_id,)).fetchone()
    return _row_to_meal(updated) if item_type == "meal" else _row_to_workout(updated)
