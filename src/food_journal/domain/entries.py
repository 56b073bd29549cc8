"""Domain models for journal entries."""

from dataclasses import dataclass, field
from enum import Enum


class Provenance(str, Enum):
    """Where an entry's nutrition estimate came from."""

    PHOTO = "photo"
    LABEL = "label"
    TEXT = "text"
    WATER = "water"


class MealSlot(str, Enum):
    """Meal slot an entry is filed under."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


@dataclass(frozen=True)
class NutritionVector:
    """Nutrient amounts for one entry or a sum of entries.

    Absent values are zero, never missing.
    """

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    sugar_g: float = 0.0
    water_ml: float = 0.0

    def __add__(self, other: "NutritionVector") -> "NutritionVector":
        return NutritionVector(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
            fiber_g=self.fiber_g + other.fiber_g,
            sugar_g=self.sugar_g + other.sugar_g,
            water_ml=self.water_ml + other.water_ml,
        )


@dataclass(frozen=True)
class FoodEntry:
    """A logged food or water event.

    Entries are immutable; edits are a delete followed by a new entry.
    """

    id: str
    name: str
    timestamp_ms: int
    nutrition: NutritionVector = field(default_factory=NutritionVector)
    provenance: Provenance = Provenance.PHOTO
    meal_slot: MealSlot = MealSlot.SNACK
    description: str | None = None
    health_tip: str | None = None
    image_url: str | None = None
