"""Daily totals and progress derived from the meal log."""

import math
from collections.abc import Iterable

from meal_dashboard.domain.meals import (
    DEFAULT_TARGETS,
    DailyTargets,
    DailyTotals,
    MacroProgress,
    MealEntry,
)


def daily_totals(entries: Iterable[MealEntry]) -> DailyTotals:
    """Return the field-wise sum of the entries."""
    calories = protein_g = carbs_g = fat_g = 0.0
    for entry in entries:
        calories += entry.calories
        protein_g += entry.protein_g
        carbs_g += entry.carbs_g
        fat_g += entry.fat_g
    return DailyTotals(
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
    )


def remaining_budget(totals: DailyTotals, target_calories: float) -> float:
    """Return calories left for the day, never below zero."""
    return max(0.0, target_calories - totals.calories)


def percent_of_target(value: float, target: float) -> int:
    """Return value as a whole percent of target, clamped to 0..100."""
    if target <= 0:
        return 0
    # Half-up rounding so 28.5 becomes 29.
    percent = math.floor(value / target * 100 + 0.5)
    return max(0, min(100, percent))


def calorie_progress(
    totals: DailyTotals, targets: DailyTargets = DEFAULT_TARGETS
) -> MacroProgress:
    """Return calorie consumption against the calorie target."""
    return MacroProgress(
        label="Calories",
        unit="kcal",
        consumed=totals.calories,
        target=targets.calories,
        percent=percent_of_target(totals.calories, targets.calories),
    )


def macro_progress(
    totals: DailyTotals, targets: DailyTargets = DEFAULT_TARGETS
) -> tuple[MacroProgress, ...]:
    """Return protein, carbs and fat progress in display order."""
    rows = (
        ("Protein", totals.protein_g, targets.protein_g),
        ("Carbs", totals.carbs_g, targets.carbs_g),
        ("Fat", totals.fat_g, targets.fat_g),
    )
    return tuple(
        MacroProgress(
            label=label,
            unit="g",
            consumed=consumed,
            target=target,
            percent=percent_of_target(consumed, target),
        )
        for label, consumed, target in rows
    )
