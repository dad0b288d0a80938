# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import sqlite3
import tempfile
import unittest
from datetime import date
from pathlib import Path
from unittest import mock

from fastapi import HTTPException

from nutriplan.app_db import init_app_db
from nutriplan.diet.models import FoodEstimate, NutritionPer100g
from nutriplan.diet.portions import normalize_food_estimates
from nutriplan.plans import coordinator, storage
from nutriplan.plans.coordinator import (
    generate_plan_for_date,
    generate_plan_range,
    regenerate_plan_for_date,
    replace_day_items,
    replace_meal_with_photo,
)
from nutriplan.plans.models import PlanMeal, PlanWorkout, ReplaceScope
from nutriplan.targets.models import BiometricProfile

PROFILE = BiometricProfile(
    weight_kg=70,
    height_cm=175,
    age=30,
    gender="male",
    activity_level="regular",
    goal="Perder peso",
    workouts_per_week=2,
)
DAY = date(2024, 3, 4)


def _ids(items) -> list:
    return [i.id for i in items]


class TestPlanCoordinator(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutriplan-test-"))
        self.db_path = self._tmp / "plans.db"
        init_app_db(self.db_path)

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _generate(self, user_id: str = "u1", day: date = DAY):
        return generate_plan_for_date(user_id=user_id, profile=PROFILE, day=day, db_path=self.db_path)

    def test_first_generation_creates_day(self) -> None:
        plan = self._generate()
        self.assertEqual(plan.date, "2024-03-04")
        self.assertEqual(plan.goal, "loss")
        self.assertEqual(len(plan.meals), 6)
        self.assertEqual(len(plan.workouts), 2)
        self.assertEqual(plan.total_calories, sum(m.calories for m in plan.meals))
        self.assertTrue(all(m.id for m in plan.meals))

        again = storage.find_plan("u1", "2024-03-04", db_path=self.db_path)
        self.assertEqual(again, plan)
        self.assertIsNone(storage.find_plan("u2", "2024-03-04", db_path=self.db_path))

    def test_generation_is_idempotent_per_date(self) -> None:
        first = self._generate()
        second = self._generate()
        self.assertEqual(first.id, second.id)
        self.assertEqual([m.description for m in first.meals], [m.description for m in second.meals])
        self.assertEqual(len(storage.list_plans("u1", "2024-03-01", "2024-03-31", db_path=self.db_path)), 1)

    def test_meals_scope_keeps_workouts(self) -> None:
        before = self._generate()
        after = regenerate_plan_for_date(
            user_id="u1",
            profile=PROFILE,
            day=DAY,
            scope=ReplaceScope.meals,
            meals_per_day=3,
            variation_seed=42,
            db_path=self.db_path,
        )
        self.assertEqual(after.id, before.id)
        self.assertEqual(after.workouts, before.workouts)
        self.assertEqual(len(after.meals), 3)
        self.assertTrue(set(_ids(after.meals)).isdisjoint(_ids(before.meals)))
        self.assertEqual(after.total_calories, sum(m.calories for m in after.meals))

    def test_workouts_scope_keeps_meals_and_total(self) -> None:
        before = self._generate()
        after = regenerate_plan_for_date(
            user_id="u1",
            profile=PROFILE,
            day=DAY,
            scope=ReplaceScope.workouts,
            workouts_per_day=4,
            variation_seed=7,
            db_path=self.db_path,
        )
        self.assertEqual(after.meals, before.meals)
        self.assertEqual(after.total_calories, before.total_calories)
        self.assertEqual(len(after.workouts), 4)
        self.assertTrue(set(_ids(after.workouts)).isdisjoint(_ids(before.workouts)))

    def test_workouts_scope_total_includes_meal_edited_after_lookup(self) -> None:
        before = self._generate()
        edited = before.meals[0]

        def lookup_then_edit(user_id, day, db_path=None):
            snapshot = storage.find_plan(user_id, day, db_path=db_path)
            storage.replace_meal(
                user_id=user_id, meal_id=edited.id, updates={"calories": 2000}, db_path=db_path
            )
            return snapshot

        with mock.patch.object(coordinator, "find_plan", side_effect=lookup_then_edit):
            after = regenerate_plan_for_date(
                user_id="u1",
                profile=PROFILE,
                day=DAY,
                scope=ReplaceScope.workouts,
                variation_seed=3,
                db_path=self.db_path,
            )

        stored = storage.find_plan("u1", "2024-03-04", db_path=self.db_path)
        self.assertEqual(next(m for m in stored.meals if m.id == edited.id).calories, 2000)
        self.assertEqual(stored.total_calories, sum(m.calories for m in stored.meals))
        self.assertEqual(after.total_calories, stored.total_calories)
        self.assertNotEqual(after.total_calories, before.total_calories)

    def test_all_scope_replaces_both(self) -> None:
        before = self._generate()
        after = regenerate_plan_for_date(
            user_id="u1", profile=PROFILE, day=DAY, scope=ReplaceScope.parse("both"), db_path=self.db_path
        )
        self.assertTrue(set(_ids(after.meals)).isdisjoint(_ids(before.meals)))
        self.assertTrue(set(_ids(after.workouts)).isdisjoint(_ids(before.workouts)))

    def test_workouts_scope_on_new_day_stores_only_workouts(self) -> None:
        plan = regenerate_plan_for_date(
            user_id="u1", profile=PROFILE, day=DAY, scope=ReplaceScope.workouts, db_path=self.db_path
        )
        self.assertEqual(plan.meals, [])
        self.assertEqual(len(plan.workouts), 2)
        self.assertEqual(plan.total_calories, 0)

    def test_failed_insert_rolls_back(self) -> None:
        before = self._generate()
        with mock.patch.object(storage, "_insert_workouts", side_effect=sqlite3.OperationalError("disk I/O error")):
            with self.assertRaises(sqlite3.OperationalError):
                regenerate_plan_for_date(
                    user_id="u1", profile=PROFILE, day=DAY, scope=ReplaceScope.all, db_path=self.db_path
                )
        after = storage.find_plan("u1", "2024-03-04", db_path=self.db_path)
        self.assertEqual(after, before)

    def test_range_skips_failing_dates(self) -> None:
        original = coordinator.reconcile_plan_day

        def flaky(**kwargs):
            if kwargs["day"] == "2024-03-05":
                raise RuntimeError("storage unavailable")
            return original(**kwargs)

        with mock.patch.object(coordinator, "reconcile_plan_day", side_effect=flaky), mock.patch.object(
            coordinator, "resolve_targets", wraps=coordinator.resolve_targets
        ) as resolve, self.assertLogs("nutriplan.plans.coordinator", level="ERROR"):
            result = generate_plan_range(
                user_id="u1",
                profile=PROFILE,
                start=date(2024, 3, 4),
                end=date(2024, 3, 6),
                db_path=self.db_path,
            )

        self.assertEqual(resolve.call_count, 1)
        self.assertEqual([p.date for p in result.items], ["2024-03-04", "2024-03-06"])
        self.assertEqual(len(result.failures), 1)
        self.assertEqual(result.failures[0].date, "2024-03-05")
        self.assertEqual(result.failures[0].error, "storage unavailable")

    def test_range_with_end_before_start_is_empty(self) -> None:
        result = generate_plan_range(
            user_id="u1", profile=PROFILE, start=date(2024, 3, 6), end=date(2024, 3, 4), db_path=self.db_path
        )
        self.assertEqual(result.items, [])
        self.assertEqual(result.failures, [])

    def test_chat_meals_replace_only_meals(self) -> None:
        before = self._generate()
        meals = [
            PlanMeal(title="Brunch", start_time="10:00", end_time="10:45", calories=700, protein_g=40),
            PlanMeal(title="Dinner", start_time="19:00", end_time="19:45", calories=900, protein_g=60),
        ]
        after = replace_day_items(user_id="u1", day="2024-03-04", meals=meals, db_path=self.db_path)
        self.assertEqual([m.title for m in after.meals], ["Brunch", "Dinner"])
        self.assertEqual([m.position for m in after.meals], [0, 1])
        self.assertTrue(all(m.source == "chat" for m in after.meals))
        self.assertEqual(after.total_calories, 1600)
        self.assertEqual(_ids(after.workouts), _ids(before.workouts))

    def test_chat_workouts_replace_only_workouts(self) -> None:
        before = self._generate()
        after = replace_day_items(
            user_id="u1",
            day="2024-03-04",
            workouts=[PlanWorkout(title="Yoga", start_time="06:30", end_time="07:15", duration_min=45)],
            db_path=self.db_path,
        )
        self.assertEqual([w.title for w in after.workouts], ["Yoga"])
        self.assertEqual(after.workouts[0].source, "chat")
        self.assertEqual(_ids(after.meals), _ids(before.meals))
        self.assertEqual(after.total_calories, before.total_calories)

    def test_photo_replaces_one_meal_and_total(self) -> None:
        before = self._generate()
        photo = normalize_food_estimates(
            [
                FoodEstimate(name="rice", raw_weight_g=150, per_100g=NutritionPer100g(calories=130, protein=2.7)),
                FoodEstimate(name="chicken", raw_weight_g=100, per_100g=NutritionPer100g(calories=165, protein=31)),
            ]
        )
        target = before.meals[2]
        after = replace_meal_with_photo(
            user_id="u1", meal_id=target.id, meal=photo, name="Lunch (photo)", db_path=self.db_path
        )
        replaced = next(m for m in after.meals if m.id == target.id)
        self.assertEqual(replaced.title, "Lunch (photo)")
        self.assertEqual(replaced.source, "photo")
        self.assertEqual(replaced.calories, 195 + 165)
        self.assertEqual(replaced.description, "rice (150 g), chicken (100 g)")
        self.assertEqual(replaced.source_meta["items"], ["rice", "chicken"])
        self.assertEqual(after.total_calories, sum(m.calories for m in after.meals))
        self.assertEqual(_ids(after.workouts), _ids(before.workouts))

        with self.assertRaises(HTTPException) as ctx:
            replace_meal_with_photo(user_id="someone-else", meal_id=target.id, meal=photo, db_path=self.db_path)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_update_item_checks_owner(self) -> None:
        plan = self._generate()
        workout = plan.workouts[0]
        updated = storage.update_item(
            user_id="u1", item_type="workout", item_id=workout.id, status="done", db_path=self.db_path
        )
        self.assertEqual(updated.status, "done")
        self.assertEqual(updated.title, workout.title)

        meal = storage.update_item(
            user_id="u1",
            item_type="meal",
            item_id=plan.meals[0].id,
            title="Late breakfast",
            start_time="09:00",
            end_time="09:30",
            db_path=self.db_path,
        )
        self.assertEqual((meal.title, meal.start_time, meal.end_time), ("Late breakfast", "09:00", "09:30"))
        self.assertEqual(meal.status, "pending")

        with self.assertRaises(HTTPException) as ctx:
            storage.update_item(user_id="u2", item_type="meal", item_id=plan.meals[0].id, db_path=self.db_path)
        self.assertEqual(ctx.exception.status_code, 404)


if __name__ == "__main__":
    unittest.main()
