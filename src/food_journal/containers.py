"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from supabase import create_client

from food_journal.adapters.file_blob_store import FileBlobStore
from food_journal.adapters.openai_analysis_client import OpenAIAnalysisClient
from food_journal.adapters.supabase_blob_store import SupabaseBlobStore
from food_journal.config import Settings
from food_journal.services.analysis import AnalysisService
from food_journal.services.insights import InsightsService
from food_journal.services.journal import BlobStore, JournalService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    timezone: ZoneInfo
    blob_store: BlobStore
    journal_service: JournalService
    insights_service: InsightsService
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_blob_store(settings: Settings) -> BlobStore:
    """Return the Supabase store when configured, else JSON files on disk."""
    if settings.uses_supabase:
        return SupabaseBlobStore(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    return FileBlobStore(settings.data_dir)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timezone = ZoneInfo(resolved_settings.timezone)
    blob_store = build_blob_store(resolved_settings)
    journal_service = JournalService.load(
        blob_store,
        timezone,
        calorie_goal=resolved_settings.daily_calorie_goal,
    )
    insights_service = InsightsService(source=journal_service, timezone=timezone)

    openai_client = None
    if resolved_settings.openai_api_key:
        openai_client = OpenAIAnalysisClient.create(resolved_settings.openai_api_key)
    else:
        logger.warning("OPENAI_API_KEY is not set; food analysis is disabled")
    analysis_service = AnalysisService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        timezone=timezone,
        blob_store=blob_store,
        journal_service=journal_service,
        insights_service=insights_service,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
