# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from nutriplan.diet.models import FoodEstimate, NutritionPer100g
from nutriplan.diet.portions import (
    adjust_weights_to_target_calories,
    derive_item_nutrition,
    normalize_food_estimates,
    normalize_weights_to_total,
)


def _food(name: str, weight: float, kcal: float, protein: float = 0.0, carbs: float = 0.0, fat: float = 0.0) -> FoodEstimate:
    return FoodEstimate(
        name=name,
        confidence=0.9,
        raw_weight_g=weight,
        per_100g=NutritionPer100g(calories=kcal, protein=protein, carbs=carbs, fat=fat),
    )


class TestNormalizeWeights(unittest.TestCase):
    def test_zero_entries_keep_one_gram(self) -> None:
        self.assertEqual(normalize_weights_to_total([50, 30, 0, 0], 200), [124, 74, 1, 1])

    def test_all_unknown_splits_evenly(self) -> None:
        self.assertEqual(normalize_weights_to_total([0, -3, None], 10), [4, 3, 3])
        self.assertEqual(normalize_weights_to_total([0, 0], 9), [5, 4])

    def test_sum_is_exact(self) -> None:
        cases = [
            ([33.3, 33.3, 33.4], 100),
            ([1, 1, 1, 997], 50),
            ([120.5, 80.25, 10], 333),
            ([7], 250),
        ]
        for raw, total in cases:
            with self.subTest(raw=raw, total=total):
                out = normalize_weights_to_total(raw, total)
                self.assertEqual(sum(out), total)
                self.assertTrue(all(w >= 1 for w in out))

    def test_empty(self) -> None:
        self.assertEqual(normalize_weights_to_total([], 100), [])

    def test_unreachable_total_is_logged_not_raised(self) -> None:
        with self.assertLogs("nutriplan.diet.portions", level="WARNING"):
            out = normalize_weights_to_total([5, 5, 5], 2)
        self.assertEqual(out, [1, 1, 1])


class TestAdjustToCalories(unittest.TestCase):
    def test_exact_scale(self) -> None:
        self.assertEqual(adjust_weights_to_target_calories([200, 200], [150, 50], 600), [300, 300])

    def test_densest_item_absorbs_residual(self) -> None:
        out = adjust_weights_to_target_calories([100, 100], [133, 47], 500)
        self.assertEqual(out, [277, 278])
        kcal = sum(round(d / 100 * w) for d, w in zip([133, 47], out))
        self.assertLessEqual(abs(kcal - 500), 3)

    def test_zero_density_returns_weights_unchanged(self) -> None:
        self.assertEqual(adjust_weights_to_target_calories([80, 20], [0, 0], 500), [80, 20])


class TestNormalizeFoodEstimates(unittest.TestCase):
    def test_item_nutrition_is_rounded_per_nutrient(self) -> None:
        item = derive_item_nutrition(_food("rice", 0, 130, protein=2.7, carbs=28.2, fat=0.3), 150)
        self.assertEqual(item.weight_g, 150)
        self.assertEqual(item.calories, 195)
        self.assertEqual(item.protein_g, 4)
        self.assertEqual(item.carbs_g, 42)
        self.assertEqual(item.fat_g, 0)
        self.assertIsNone(item.fiber_g)

    def test_total_grams(self) -> None:
        meal = normalize_food_estimates(
            [_food("rice", 50, 130), _food("beans", 30, 77), _food("salad", 0, 15), _food("oil", 0, 884)],
            total_grams=200,
        )
        self.assertEqual([i.weight_g for i in meal.items], [124, 74, 1, 1])
        self.assertEqual(meal.totals.weight_g, 200)
        self.assertEqual(meal.totals.calories, sum(i.calories for i in meal.items))

    def test_forced_calories_slack_goes_to_first_item(self) -> None:
        meal = normalize_food_estimates(
            [_food("rice", 100, 133), _food("greens", 100, 47)],
            forced_calories=500,
        )
        self.assertEqual([i.weight_g for i in meal.items], [277, 278])
        # 368 + 131 = 499; the missing kcal lands on the first item.
        self.assertEqual(meal.items[0].calories, 369)
        self.assertEqual(meal.items[1].calories, 131)
        self.assertEqual(meal.totals.calories, 500)
        self.assertEqual(meal.warnings, [])

    def test_forced_calories_win_over_total_grams(self) -> None:
        meal = normalize_food_estimates(
            [_food("granola", 50, 200), _food("milk", 50, 100)],
            total_grams=300,
            forced_calories=300,
        )
        self.assertEqual(meal.totals.calories, 300)
        self.assertEqual(meal.totals.weight_g, 200)

    def test_degenerate_inputs(self) -> None:
        empty = normalize_food_estimates([])
        self.assertEqual(empty.items, [])
        self.assertEqual(empty.totals.calories, 0)
        self.assertTrue(empty.warnings)

        water = normalize_food_estimates([_food("water", 250, 0)], forced_calories=400)
        self.assertEqual(water.items[0].weight_g, 250)
        self.assertEqual(water.totals.calories, 0)
        self.assertIn("Items carry no calorie density; forced calories ignored", water.warnings)

        unknown = normalize_food_estimates([_food("mystery", 0, 100)])
        self.assertEqual(unknown.items[0].weight_g, 1)
        self.assertIn("Some items had no weight estimate; 1 g assumed", unknown.warnings)


if __name__ == "__main__":
    unittest.main()
