"""Nutrition totals accumulator."""

from collections.abc import Iterable

from food_journal.domain.entries import FoodEntry, NutritionVector


def sum_nutrition(items: Iterable[FoodEntry | NutritionVector]) -> NutritionVector:
    """Return the field-wise sum of entries or vectors.

    An empty input yields the zero vector.
    """
    total = NutritionVector()
    for item in items:
        vector = item.nutrition if isinstance(item, FoodEntry) else item
        total = total + vector
    return total
