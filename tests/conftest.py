"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from meal_snap.config import Settings
from meal_snap.containers import AppContainer
from meal_snap.domain.meals import MealRecord
from meal_snap.services.estimation import EstimationClient, EstimationService
from meal_snap.services.meals import MealStore
from meal_snap.services.stats import StatsService
from meal_snap.services.storage import InMemoryKeyValueStorage

FIXED_NOW = datetime(2024, 1, 2, 12, 0, tzinfo=UTC)


def make_record(meal_id: str, timestamp: datetime, **overrides: object) -> MealRecord:
    """Build a valid UTC-dated meal record for tests."""
    values: dict[str, object] = {
        "id": meal_id,
        "date": timestamp.astimezone(UTC).date().isoformat(),
        "timestamp": timestamp,
        "name": "焼き魚定食",
        "calories": 650,
        "carbs": 80,
        "protein": 20,
        "fat": 18,
        "confidence": 0.92,
    }
    values.update(overrides)
    return MealRecord.model_validate(values)


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimation client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "焼き魚定食",
            "calories": 650,
            "protein": 20,
            "fat": 18,
            "carbs": 80,
            "confidence": 0.92,
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def estimate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls.append({"model": model, "image_data_url": image_data_url})
        return self.payload


@dataclass
class FailingEstimationClient(EstimationClient):
    """Fake estimation client that raises the configured error."""

    error: Exception

    async def estimate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        raise self.error


class UpstreamStatusError(Exception):
    """Provider-style error carrying an HTTP status code."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class BrokenKeyValueStorage:
    """Storage whose reads and writes fail at the OS level."""

    def get(self, key: str) -> str | None:
        raise OSError("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("disk full")

    def remove(self, key: str) -> None:
        raise OSError("disk full")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        storage_path=None,
        timezone="UTC",
        environment="local",
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def meal_store(storage: InMemoryKeyValueStorage) -> MealStore:
    return MealStore(storage=storage, timezone=UTC, clock=lambda: FIXED_NOW)


@pytest.fixture
def estimation_client() -> FakeEstimationClient:
    return FakeEstimationClient()


@pytest.fixture
def container(
    settings: Settings,
    meal_store: MealStore,
    estimation_client: FakeEstimationClient,
) -> AppContainer:
    estimation_service = EstimationService(
        client=estimation_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
        max_image_kb=settings.max_image_kb,
        environment=settings.environment,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        estimation_service=estimation_service,
        meal_store=meal_store,
        stats_service=StatsService(meal_store),
        close_resources=close_resources,
    )
