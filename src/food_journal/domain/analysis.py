"""Models for food analysis results."""

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalysisMode(str, Enum):
    """What the analysis service is asked to look at."""

    PHOTO = "photo"
    LABEL = "label"
    TEXT = "text"


class AnalysisResult(BaseModel):
    """Structured nutrition estimate returned by the analysis service."""

    model_config = ConfigDict(populate_by_name=True)

    food_name: str = Field(alias="foodName")
    description: str = ""
    health_tip: str = Field(default="", alias="healthTip")
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    water: float = 0.0

    @field_validator("description", "health_tip", mode="before")
    @classmethod
    def _text_or_empty(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "calories", "protein", "carbs", "fat", "fiber", "sugar", "water", mode="before"
    )
    @classmethod
    def _non_negative(cls, value: object) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float | str):
            return 0.0
        try:
            number = float(value)
        except (OverflowError, ValueError):
            return 0.0
        if not math.isfinite(number):
            return 0.0
        return max(number, 0.0)
