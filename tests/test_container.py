"""Tests for container wiring."""

import asyncio

from meal_snap.adapters.json_file_storage import JsonFileKeyValueStorage
from meal_snap.adapters.openai_estimation_client import OpenAIEstimationClient
from meal_snap.containers import build_container
from meal_snap.services.storage import NullKeyValueStorage


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.meal_store.storage, NullKeyValueStorage)
    assert isinstance(container.estimation_service.client, OpenAIEstimationClient)
    assert container.stats_service.store is container.meal_store
    asyncio.run(container.close_resources())


def test_build_container_with_file_storage_and_no_key(settings, tmp_path) -> None:
    settings.storage_path = tmp_path / "storage.json"
    settings.openai_api_key = None

    container = build_container(settings)

    assert isinstance(container.meal_store.storage, JsonFileKeyValueStorage)
    assert container.estimation_service.client is None
    asyncio.run(container.close_resources())
