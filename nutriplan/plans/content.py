# -*- coding: utf-8 -*-
"""Static content tables for generated plans.

Pure data. Bump CONTENT_VERSION whenever a table changes: the version is
stored with every generated item so old plans stay explainable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

CONTENT_VERSION = "2024.2"


@dataclass(frozen=True)
class MealSlot:
    key: str
    title: str
    start_time: str
    end_time: str
    # Pseudo-variety hash parameters: (seed * prime + offset) mod pool size.
    prime: int
    offset: int


MEAL_SLOTS: Tuple[MealSlot, ...] = (
    MealSlot("breakfast", "Breakfast", "07:00", "07:30", 7, 0),
    MealSlot("morning_snack", "Morning snack", "10:00", "10:15", 11, 1),
    MealSlot("lunch", "Lunch", "12:30", "13:00", 13, 2),
    MealSlot("afternoon_snack", "Afternoon snack", "16:00", "16:20", 17, 3),
    MealSlot("dinner", "Dinner", "19:30", "20:00", 19, 4),
    MealSlot("late_snack", "Late snack (optional)", "22:00", "22:15", 23, 5),
)

# Calorie share per slot, in MEAL_SLOTS order. Picked by seed mod 5.
MEAL_RATIO_PRESETS: Tuple[Tuple[float, ...], ...] = (
    (0.18, 0.07, 0.30, 0.08, 0.22, 0.05),  # balanced
    (0.20, 0.07, 0.32, 0.08, 0.20, 0.03),  # lighter dinner
    (0.20, 0.08, 0.34, 0.08, 0.22, 0.00),  # no late snack
    (0.22, 0.08, 0.32, 0.07, 0.23, 0.00),  # early trainer
    (0.19, 0.08, 0.31, 0.09, 0.23, 0.05),  # evenly spread
)

# Slot indices kept for a given number of meals per day.
SLOTS_BY_MEAL_COUNT: Dict[int, Tuple[int, ...]] = {
    6: (0, 1, 2, 3, 4, 5),
    5: (0, 1, 2, 3, 4),
    4: (0, 2, 3, 4),
    3: (0, 2, 4),
    2: (2, 4),
}

MEAL_POOLS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "none": {
        "breakfast": (
            "Scrambled eggs, oats with banana; coffee or tea without sugar.",
            "Wholegrain toast with turkey breast and cottage cheese, plus an orange.",
            "Greek yogurt with granola and berries, one boiled egg.",
            "Tapioca crepe filled with egg and cheese, papaya slices.",
            "Omelette with ham and tomato, wholegrain bread.",
        ),
        "morning_snack": (
            "Natural yogurt with chia seeds.",
            "Cheese cubes and an apple.",
            "Handful of mixed nuts and a tangerine.",
            "Protein shake with milk.",
            "Turkey slices rolled with cream cheese.",
        ),
        "lunch": (
            "Grilled chicken breast, brown rice, black beans and a large salad.",
            "Baked salmon, sweet potato and steamed broccoli.",
            "Lean beef stir-fry with vegetables and rice.",
            "Roast pork loin, quinoa and sauteed greens.",
            "Tuna pasta salad with olive oil, tomatoes and arugula.",
        ),
        "afternoon_snack": (
            "Wholegrain sandwich with shredded chicken.",
            "Rice cakes with peanut butter and milk.",
            "Boiled eggs and a pear.",
            "Kefir with oats and cinnamon.",
            "Wrap with tuna and lettuce.",
        ),
        "dinner": (
            "Grilled fish with roasted vegetables; light carbs if training at night.",
            "Chicken soup with vegetables and a slice of wholegrain bread.",
            "Beef and vegetable skewers with a green salad.",
            "Shrimp with zucchini noodles and olive oil.",
            "Turkey meatballs in tomato sauce with sauteed spinach.",
        ),
        "late_snack": (
            "Cottage cheese with strawberries.",
            "Warm milk with cocoa.",
            "Greek yogurt with walnuts.",
            "Casein shake with water.",
            "Cheese slice and a few almonds.",
        ),
    },
    "vegetarian": {
        "breakfast": (
            "Veggie omelette with spinach and feta, wholegrain toast.",
            "Oat porridge cooked in milk with apple and cinnamon.",
            "Greek yogurt parfait with honey, oats and kiwi.",
            "Wholegrain pancakes with ricotta and berries.",
            "Poached eggs on avocado toast with cherry tomatoes.",
        ),
        "morning_snack": (
            "Skyr with pumpkin seeds.",
            "Hard-boiled egg and grapes.",
            "Mozzarella sticks and a peach.",
            "Milk-based protein smoothie with banana.",
            "Cottage cheese with pineapple.",
        ),
        "lunch": (
            "Lentil curry with brown rice and a cucumber raita.",
            "Halloumi and roasted vegetable bowl with bulgur.",
            "Egg fried rice with peas, carrots and edamame.",
            "Spinach and ricotta cannelloni with a side salad.",
            "Chickpea and feta salad with quinoa and olives.",
        ),
        "afternoon_snack": (
            "Wholegrain toast with egg salad.",
            "Yogurt with sunflower seeds and dates.",
            "Cheese and tomato rice cakes.",
            "Hummus with carrot sticks and a boiled egg.",
            "Kefir smoothie with mango.",
        ),
        "dinner": (
            "Vegetable frittata with a mixed leaf salad.",
            "Paneer tikka with roasted peppers and naan.",
            "Black bean quesadilla with cheese and salsa.",
            "Mushroom risotto with parmesan and steamed green beans.",
            "Shakshuka with wholegrain pita.",
        ),
        "late_snack": (
            "Warm milk with turmeric.",
            "Ricotta with a drizzle of honey.",
            "Greek yogurt with flaxseed.",
            "Cheese cubes with cucumber slices.",
            "Milk and two oat biscuits.",
        ),
    },
    "vegan": {
        "breakfast": (
            "Tofu scramble with peppers and wholegrain toast.",
            "Overnight oats with soy milk, chia and blueberries.",
            "Peanut butter toast with banana and oat milk.",
            "Buckwheat porridge with almond milk and apple.",
            "Chickpea flour pancake with spinach and tomato.",
        ),
        "morning_snack": (
            "Soy yogurt with hemp seeds.",
            "Almonds and a pear.",
            "Roasted chickpeas.",
            "Pea protein shake with oat milk.",
            "Edamame with sea salt.",
        ),
        "lunch": (
            "Tempeh with brown rice, black beans and a large salad.",
            "Lentil bolognese with wholewheat spaghetti.",
            "Tofu and vegetable stir-fry with rice noodles.",
            "Quinoa bowl with chickpeas, avocado and tahini.",
            "Seitan fajitas with peppers and corn tortillas.",
        ),
        "afternoon_snack": (
            "Hummus wrap with grated carrot.",
            "Rice cakes with almond butter.",
            "Fruit and walnut mix.",
            "Soy milk smoothie with oats and cacao.",
            "Guacamole with wholegrain crackers.",
        ),
        "dinner": (
            "Baked tofu with roasted vegetables; light carbs if training at night.",
            "Red lentil soup with a slice of rye bread.",
            "Bean chili with brown rice.",
            "Chickpea curry with cauliflower and spinach.",
            "Stuffed peppers with quinoa and black beans.",
        ),
        "late_snack": (
            "Warm oat milk with cinnamon.",
            "Soy yogurt with berries.",
            "Handful of pistachios.",
            "Chamomile tea and a few dates.",
            "Coconut yogurt with pumpkin seeds.",
        ),
    },
}


WORKOUT_FOCUSES: Tuple[str, ...] = ("strength", "cardio", "mobility")
WORKOUT_DURATION_MIN = 45
MORNING_START_TIMES: Tuple[str, ...] = ("07:30", "08:30", "09:30", "10:30")
EVENING_START_TIMES: Tuple[str, ...] = ("17:00", "18:30", "19:30", "20:30")

WORKOUT_TITLES: Dict[str, str] = {
    "strength": "Strength training",
    "cardio": "Cardio session",
    "mobility": "Mobility & stretching",
}

_STRENGTH_MOVES = (
    "goblet squats", "push-ups", "dumbbell rows", "Romanian deadlifts", "walking lunges",
    "overhead presses", "glute bridges", "step-ups", "bench presses", "split squats",
)
_STRENGTH_FORMATS = (
    "4 x 8 {}, 90 s rest",
    "3 x 12 {}, 60 s rest",
    "5 x 5 {}, 2 min rest",
    "3 x 10 {} with a slow 3 s lowering phase",
    "EMOM 12 min: 6 {}",
    "4 x 10 {} supersetted with a 30 s plank",
    "3 rounds of 15 {}, 60 s rest",
    "Pyramid 12-10-8-6 {}",
    "2 x 15 light {} then 2 x 8 heavier",
    "Circuit x 4: 10 {} + 20 jumping jacks",
)

_CARDIO_MOVES = (
    "brisk walking", "jogging", "cycling", "rowing", "jump rope",
    "elliptical", "stair climbing", "swimming", "dance cardio", "shadow boxing",
)
_CARDIO_FORMATS = (
    "30 min steady {} at conversational pace",
    "8 x 1 min hard {} / 1 min easy",
    "20 min {} with 5 x 30 s surges",
    "Tempo {}: 10 min easy, 15 min moderate, 5 min easy",
    "40 min easy {} in zone 2",
    "6 x 2 min {} at hard effort, 90 s recovery",
    "Ladder {}: 1-2-3-2-1 min hard with equal rest",
    "25 min {} progressing every 5 min",
    "10 x 20 s sprint {} / 40 s easy",
    "35 min {} with the last 5 min fast",
)

_MOBILITY_TARGETS = (
    "hip", "thoracic spine", "shoulder", "ankle", "hamstring",
    "neck and upper back", "lower back", "wrist and forearm", "full-body", "glute",
)
_MOBILITY_FORMATS = (
    "15 min {} mobility flow",
    "{} stretches: 3 x 45 s holds each side",
    "Yoga sequence focused on the {} area",
    "Foam rolling and {} release, 20 min",
    "Dynamic {} warm-up drills, 2 rounds",
    "PNF {} stretching, 3 contract-relax cycles",
    "Controlled articular rotations for the {} region",
    "Slow {} opener circuit with breathing",
    "Pilates-style {} stability work",
    "Restorative {} stretching before bed",
)


def _build_pool(formats: Tuple[str, ...], moves: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(fmt.format(move) for fmt in formats for move in moves)


WORKOUT_POOLS: Dict[str, Tuple[str, ...]] = {
    "strength": _build_pool(_STRENGTH_FORMATS, _STRENGTH_MOVES),
    "cardio": _build_pool(_CARDIO_FORMATS, _CARDIO_MOVES),
    "mobility": _build_pool(_MOBILITY_FORMATS, _MOBILITY_TARGETS),
}
