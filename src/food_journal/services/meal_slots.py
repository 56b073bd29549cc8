"""Meal slot inference from the local time of day."""

from food_journal.domain.entries import MealSlot

BREAKFAST_START = 300
LUNCH_START = 751
DINNER_START = 1020
DINNER_END = 1319


def infer_meal_slot(minute_of_day: int) -> MealSlot:
    """Return the meal slot for minutes since local midnight."""
    if BREAKFAST_START <= minute_of_day < LUNCH_START:
        return MealSlot.BREAKFAST
    if LUNCH_START <= minute_of_day < DINNER_START:
        return MealSlot.LUNCH
    if DINNER_START <= minute_of_day <= DINNER_END:
        return MealSlot.DINNER
    return MealSlot.SNACK
