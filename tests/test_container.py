"""Tests for container wiring."""

import asyncio

from food_journal.adapters.file_blob_store import FileBlobStore
from food_journal.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.blob_store, FileBlobStore)
    assert container.journal_service.all() == []
    assert container.insights_service.source is container.journal_service
    assert container.analysis_service.client is not None
    asyncio.run(container.close_resources())


def test_build_container_without_openai_key(settings) -> None:
    settings.openai_api_key = None

    container = build_container(settings)

    assert container.analysis_service.client is None
    asyncio.run(container.close_resources())
