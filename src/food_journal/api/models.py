"""Pydantic models for journal API request bodies."""

from pydantic import BaseModel, Field

from food_journal.domain.analysis import AnalysisMode
from food_journal.domain.entries import MealSlot


class ProfileRequest(BaseModel):
    """Onboarding payload."""

    name: str


class AnalyzeRequest(BaseModel):
    """A photo, label photo or text description to analyze and log."""

    mode: AnalysisMode
    text: str | None = None
    image_base64: str | None = Field(default=None, description="Base64 image bytes")
    meal_slot: MealSlot | None = None
