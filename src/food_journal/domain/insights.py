"""Domain models for day and range summaries."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from food_journal.domain.entries import FoodEntry, NutritionVector


@dataclass(frozen=True)
class RangeWindow:
    """Declarative lookback window definition."""

    label: str
    days: int


class TimeRange(Enum):
    """Lookback windows available for insights and export."""

    WEEK = RangeWindow("1W", 7)
    MONTH = RangeWindow("1M", 30)
    QUARTER = RangeWindow("3M", 90)
    YEAR = RangeWindow("1Y", 365)

    @property
    def label(self) -> str:
        return self.value.label

    @property
    def days(self) -> int:
        return self.value.days

    @classmethod
    def from_label(cls, label: str) -> "TimeRange":
        """Return the range for a label such as ``1W``."""
        for entry in cls:
            if entry.value.label == label.upper():
                return entry
        raise ValueError(f"Unknown range: {label}")


@dataclass(frozen=True)
class DailyBucket:
    """Calories and water logged on one local calendar day."""

    day: date
    calories: float
    water_ml: float
    label: str = ""

    @property
    def key(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class MacroShare:
    """Unnormalized macro total for relative-size display."""

    name: str
    grams: float


@dataclass(frozen=True)
class RangeSummary:
    """Aggregated analytics for a lookback window."""

    time_range: TimeRange
    start_day: date
    end_day: date
    daily: list[DailyBucket]
    totals: NutritionVector
    average_daily_calories: float
    macro_distribution: list[MacroShare]
    entries: list[FoodEntry]


@dataclass(frozen=True)
class DaySummary:
    """Entries and totals for a single day against the calorie goal."""

    day: date
    entries: list[FoodEntry]
    totals: NutritionVector
    calorie_goal: float
    goal_percent: int
