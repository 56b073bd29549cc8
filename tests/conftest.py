"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from food_journal.config import Settings
from food_journal.containers import AppContainer
from food_journal.domain.entries import FoodEntry, MealSlot, NutritionVector, Provenance
from food_journal.services.analysis import AnalysisClient, AnalysisService
from food_journal.services.calendar import to_epoch_ms
from food_journal.services.insights import InsightsService
from food_journal.services.journal import BlobStore, JournalService

NEW_YORK = ZoneInfo("America/New_York")


@dataclass
class InMemoryBlobStore(BlobStore):
    """In-memory blob store for tests."""

    blobs: dict[str, str] = field(default_factory=dict)
    saves: list[str] = field(default_factory=list)

    def load(self, key: str) -> str | None:
        return self.blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self.saves.append(key)
        self.blobs[key] = blob


@dataclass
class FailingBlobStore(InMemoryBlobStore):
    """Blob store whose writes always fail, like a full storage quota."""

    def save(self, key: str, blob: str) -> None:
        raise OSError("Quota exceeded")


@dataclass
class FakeAnalysisClient(AnalysisClient):
    """Fake analysis client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "foodName": "Oatmeal with berries",
            "description": "Rolled oats, blueberries, honey",
            "healthTip": "Add nuts for protein.",
            "calories": 320,
            "protein": 9,
            "carbs": 58,
            "fat": 6,
            "fiber": 7,
            "sugar": 18,
            "water": 150,
        }
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def analyze(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None,
    ) -> dict[str, object]:
        self.calls.append({"prompt": prompt, "image_data_url": image_data_url})
        if self.error is not None:
            raise self.error
        return self.payload


def make_entry(  # noqa: PLR0913
    entry_id: str,
    moment: datetime,
    *,
    name: str = "Toast",
    calories: float = 0.0,
    protein_g: float = 0.0,
    carbs_g: float = 0.0,
    fat_g: float = 0.0,
    water_ml: float = 0.0,
    meal_slot: MealSlot = MealSlot.BREAKFAST,
    provenance: Provenance = Provenance.TEXT,
) -> FoodEntry:
    """Build an entry logged at an aware datetime."""
    return FoodEntry(
        id=entry_id,
        name=name,
        timestamp_ms=to_epoch_ms(moment),
        nutrition=NutritionVector(
            calories=calories,
            protein_g=protein_g,
            carbs_g=carbs_g,
            fat_g=fat_g,
            water_ml=water_ml,
        ),
        provenance=provenance,
        meal_slot=meal_slot,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        timezone="America/New_York",
        data_dir=tmp_path / "data",
    )


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def analysis_client() -> FakeAnalysisClient:
    return FakeAnalysisClient()


@pytest.fixture
def journal_service(blob_store: InMemoryBlobStore) -> JournalService:
    return JournalService.load(blob_store, NEW_YORK)


@pytest.fixture
def container(
    settings: Settings,
    blob_store: InMemoryBlobStore,
    analysis_client: FakeAnalysisClient,
    journal_service: JournalService,
) -> AppContainer:
    analysis_service = AnalysisService(
        client=analysis_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        timezone=NEW_YORK,
        blob_store=blob_store,
        journal_service=journal_service,
        insights_service=InsightsService(source=journal_service, timezone=NEW_YORK),
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
