"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meal_snap.adapters.json_file_storage import JsonFileKeyValueStorage
from meal_snap.adapters.openai_estimation_client import OpenAIEstimationClient
from meal_snap.config import Settings
from meal_snap.services.estimation import EstimationService
from meal_snap.services.meals import KeyValueStorage, MealStore
from meal_snap.services.stats import StatsService
from meal_snap.services.storage import NullKeyValueStorage


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    estimation_service: EstimationService
    meal_store: MealStore
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage: KeyValueStorage
    if resolved_settings.storage_path is None:
        storage = NullKeyValueStorage()
    else:
        storage = JsonFileKeyValueStorage(resolved_settings.storage_path)
    meal_store = MealStore(
        storage=storage,
        timezone=resolved_settings.tzinfo,
        storage_key=resolved_settings.storage_key,
    )
    openai_client = (
        OpenAIEstimationClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    estimation_service = EstimationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        max_image_kb=resolved_settings.max_image_kb,
        environment=resolved_settings.environment,
    )

    async def close_resources() -> None:
        if openai_client is not None:
            await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        estimation_service=estimation_service,
        meal_store=meal_store,
        stats_service=StatsService(meal_store),
        close_resources=close_resources,
    )
