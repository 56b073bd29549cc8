"""Tests for meal slot inference."""

import pytest

from food_journal.domain.entries import MealSlot
from food_journal.services.meal_slots import infer_meal_slot


@pytest.mark.parametrize(
    ("minute", "expected"),
    [
        (0, MealSlot.SNACK),
        (299, MealSlot.SNACK),
        (300, MealSlot.BREAKFAST),
        (750, MealSlot.BREAKFAST),
        (751, MealSlot.LUNCH),
        (1019, MealSlot.LUNCH),
        (1020, MealSlot.DINNER),
        (1319, MealSlot.DINNER),
        (1320, MealSlot.SNACK),
        (1439, MealSlot.SNACK),
    ],
)
def test_infer_meal_slot_windows(minute: int, expected: MealSlot) -> None:
    assert infer_meal_slot(minute) is expected
