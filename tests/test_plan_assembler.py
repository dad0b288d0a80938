# -*- coding: utf-8 -*-

from __future__ import annotations

import re
import unittest
from datetime import date, datetime, timezone

from nutriplan.plans.assembler import (
    assemble_plan,
    normalize_diet,
    regeneration_seed,
    seeded_index,
    variation_seed_for,
)
from nutriplan.plans.content import CONTENT_VERSION, MEAL_POOLS, WORKOUT_POOLS
from nutriplan.targets.models import BiometricProfile, TargetSet

TARGETS = TargetSet(calories=2000, protein_g=150, carbs_g=200, fat_g=67)

_MEAT_RE = re.compile(
    r"\b(chicken|beef|pork|ham|turkey|fish|salmon|tuna|shrimp|bacon|meatballs?|sardines?)\b",
    re.IGNORECASE,
)
_ANIMAL_RE = re.compile(
    r"\b(eggs?|cheese|honey|whey|casein|ricotta|feta|paneer|parmesan|mozzarella|halloumi|skyr|kefir)\b",
    re.IGNORECASE,
)


class TestDietAndSeeds(unittest.TestCase):
    def test_normalize_diet(self) -> None:
        self.assertEqual(normalize_diet("Vegano"), "vegan")
        self.assertEqual(normalize_diet("plant-based"), "vegan")
        self.assertEqual(normalize_diet("Vegetariana"), "vegetarian")
        self.assertEqual(normalize_diet("ovo-lacto"), "vegetarian")
        # Vegan variants win when both appear.
        self.assertEqual(normalize_diet("vegetarian, mostly vegan"), "vegan")
        self.assertEqual(normalize_diet("keto"), "none")
        self.assertEqual(normalize_diet(None), "none")

    def test_weekday_seed(self) -> None:
        self.assertEqual(variation_seed_for(date(2024, 1, 7)), 0)  # Sunday
        self.assertEqual(variation_seed_for(date(2024, 1, 8)), 1)  # Monday
        self.assertEqual(variation_seed_for(date(2024, 1, 13)), 6)  # Saturday

    def test_regeneration_seed_mixes_clock(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(regeneration_seed(date(2024, 1, 8), now), 1 + 1704067200)

    def test_seeded_index(self) -> None:
        self.assertEqual(seeded_index(3, 13, 2, 5), 1)
        self.assertEqual(seeded_index(9, 7, 0, 0), 0)


class TestMeals(unittest.TestCase):
    def test_deterministic(self) -> None:
        a = assemble_plan(TARGETS, "vegan", 5, 3, 4)
        b = assemble_plan(TARGETS, "vegan", 5, 3, 4)
        self.assertEqual(a, b)

    def test_seed_changes_text(self) -> None:
        a = assemble_plan(TARGETS, None, None, 0, 0)
        b = assemble_plan(TARGETS, None, None, 0, 1)
        self.assertNotEqual([m.description for m in a.meals], [m.description for m in b.meals])

    def test_slot_subsets(self) -> None:
        expected = {
            None: ["breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner", "late_snack"],
            6: ["breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner", "late_snack"],
            5: ["breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner"],
            4: ["breakfast", "lunch", "afternoon_snack", "dinner"],
            3: ["breakfast", "lunch", "dinner"],
            2: ["lunch", "dinner"],
            1: ["lunch", "dinner"],
            9: ["breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner", "late_snack"],
        }
        for count, slots in expected.items():
            with self.subTest(meals_per_day=count):
                draft = assemble_plan(TARGETS, None, count, 0, 2)
                self.assertEqual([m.slot for m in draft.meals], slots)
                self.assertEqual([m.position for m in draft.meals], list(range(len(slots))))

    def test_shares_cover_targets(self) -> None:
        for seed in range(5):
            for count in (2, 3, 4, 5, 6):
                with self.subTest(seed=seed, meals=count):
                    draft = assemble_plan(TARGETS, None, count, 0, seed)
                    # Each slot rounds on its own, so the day may drift by < 1 kcal per meal.
                    self.assertLessEqual(abs(draft.total_calories - TARGETS.calories), count)
                    self.assertLessEqual(abs(sum(m.protein_g for m in draft.meals) - TARGETS.protein_g), count)

    def test_meal_text_uses_slot_hash(self) -> None:
        draft = assemble_plan(TARGETS, None, 6, 0, 3)
        lunch = next(m for m in draft.meals if m.slot == "lunch")
        self.assertTrue(lunch.description.startswith(MEAL_POOLS["none"]["lunch"][1]))
        self.assertIn(f"{lunch.calories} kcal", lunch.description)
        self.assertEqual(lunch.source, "plan")
        self.assertEqual(lunch.source_meta["content_version"], CONTENT_VERSION)
        self.assertEqual(lunch.source_meta["variation_seed"], 3)

    def test_negative_seed_is_absolute(self) -> None:
        self.assertEqual(assemble_plan(TARGETS, None, 4, 1, -3), assemble_plan(TARGETS, None, 4, 1, 3))

    def test_diet_falls_back_to_profile(self) -> None:
        draft = assemble_plan(TARGETS, None, 3, 0, 0, BiometricProfile(diet_type="Vegan"))
        self.assertEqual(draft.diet, "vegan")
        self.assertEqual(draft.meals[0].source_meta["diet"], "vegan")

    def test_vegan_and_vegetarian_days_hold_no_meat(self) -> None:
        for diet in ("vegan", "vegetarian"):
            for seed in range(10):
                draft = assemble_plan(TARGETS, diet, 6, 0, seed)
                for meal in draft.meals:
                    self.assertIsNone(_MEAT_RE.search(meal.description), meal.description)
                    if diet == "vegan":
                        self.assertIsNone(_ANIMAL_RE.search(meal.description), meal.description)

    def test_pools_are_disjoint_and_complete(self) -> None:
        seen = {}
        for diet, slots in MEAL_POOLS.items():
            self.assertEqual(
                set(slots),
                {"breakfast", "morning_snack", "lunch", "afternoon_snack", "dinner", "late_snack"},
            )
            for slot, options in slots.items():
                self.assertEqual(len(options), 5)
                for text in options:
                    self.assertNotIn(text, seen, f"{text!r} in both {seen.get(text)} and {diet}/{slot}")
                    seen[text] = f"{diet}/{slot}"
                    if diet != "none":
                        self.assertIsNone(_MEAT_RE.search(text), text)


class TestWorkouts(unittest.TestCase):
    def test_pools(self) -> None:
        for focus, pool in WORKOUT_POOLS.items():
            self.assertEqual(len(pool), 100, focus)
            self.assertEqual(len(set(pool)), 100, focus)

    def test_rotation_and_evening_times(self) -> None:
        profile = BiometricProfile(workouts_per_week=4, activity_level="heavy")
        draft = assemble_plan(TARGETS, None, 6, None, 2, profile)
        self.assertEqual([w.focus for w in draft.workouts], ["strength", "cardio", "mobility", "strength"])
        self.assertEqual([w.start_time for w in draft.workouts], ["17:00", "18:30", "19:30", "20:30"])
        self.assertEqual([w.end_time for w in draft.workouts], ["17:45", "19:15", "20:15", "21:15"])
        self.assertTrue(all(w.duration_min == 45 for w in draft.workouts))
        self.assertTrue(all(w.intensity == "high" for w in draft.workouts))
        self.assertEqual(draft.workouts[1].description, WORKOUT_POOLS["cardio"][11])

    def test_beginner_mornings(self) -> None:
        profile = BiometricProfile(experience="Iniciante")
        draft = assemble_plan(TARGETS, None, 6, 2, 0, profile)
        self.assertEqual([w.start_time for w in draft.workouts], ["07:30", "09:30"])
        self.assertEqual(draft.workouts[0].intensity, "moderate")

    def test_counts(self) -> None:
        profile = BiometricProfile(workouts_per_week=5)
        self.assertEqual(len(assemble_plan(TARGETS, None, 6, 1, 0, profile).workouts), 1)
        self.assertEqual(len(assemble_plan(TARGETS, None, 6, None, 0, profile).workouts), 5)
        self.assertEqual(len(assemble_plan(TARGETS, None, 6, None, 0).workouts), 3)
        self.assertEqual(len(assemble_plan(TARGETS, None, 6, 0, 0, profile).workouts), 0)
        self.assertEqual(len(assemble_plan(TARGETS, None, 6, 10, 0).workouts), 6)


if __name__ == "__main__":
    unittest.main()
