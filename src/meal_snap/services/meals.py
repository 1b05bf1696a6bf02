"""Meal record store backed by a single key-value entry."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from typing import Protocol
from uuid import uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from meal_snap.domain.errors import (
    DuplicateMealError,
    InvalidMealRecordError,
    StorageReadError,
    StorageWriteError,
)
from meal_snap.domain.estimation import NutritionEstimate
from meal_snap.domain.meals import MealChange, MealRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "meal_records"
ENVELOPE_VERSION = 1

MealListener = Callable[[MealChange], None]

_RECORDS_ADAPTER = TypeAdapter(list[MealRecord])


class KeyValueStorage(Protocol):
    """Interface for a string key-value store."""

    def get(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Replace the value stored under key."""

    def remove(self, key: str) -> None:
        """Delete the key if present."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MealStore:
    """Durable, insertion-ordered collection of meal records."""

    storage: KeyValueStorage
    timezone: tzinfo
    storage_key: str = STORAGE_KEY
    clock: Callable[[], datetime] = _utc_now
    _listeners: list[MealListener] = field(default_factory=list, init=False)

    def save(self, record: MealRecord) -> None:
        """Append a record and persist the whole collection."""
        local_day = record.timestamp.astimezone(self.timezone).date().isoformat()
        if local_day != record.date:
            raise InvalidMealRecordError(
                f"Meal {record.id} timestamp falls on {local_day}, not {record.date}"
            )
        records = self._load()
        if any(existing.id == record.id for existing in records):
            raise DuplicateMealError(f"Meal {record.id} already exists")
        records.append(record)
        self._write(records)
        self._notify(MealChange("saved", record.id))

    def get_all(self) -> list[MealRecord]:
        """Return all records in insertion order, or empty if unreadable."""
        try:
            return self._load()
        except StorageReadError:
            logger.warning("Stored meal data is unreadable; treating as empty")
            return []

    def get_today(self) -> list[MealRecord]:
        """Return records dated on the current local day."""
        today = self.clock().astimezone(self.timezone).date().isoformat()
        return [record for record in self.get_all() if record.date == today]

    def get_grouped_by_date(self) -> dict[str, list[MealRecord]]:
        """Partition records by date, each bucket ordered by timestamp."""
        grouped: dict[str, list[MealRecord]] = {}
        for record in self.get_all():
            grouped.setdefault(record.date, []).append(record)
        for bucket in grouped.values():
            bucket.sort(key=lambda record: record.timestamp)
        return grouped

    def get_by_id(self, meal_id: str) -> MealRecord | None:
        """Return the record with the given id."""
        for record in self.get_all():
            if record.id == meal_id:
                return record
        return None

    def delete_by_id(self, meal_id: str) -> None:
        """Remove the record with the given id; absent ids are ignored."""
        records = self._load()
        remaining = [record for record in records if record.id != meal_id]
        if len(remaining) == len(records):
            return
        self._write(remaining)
        self._notify(MealChange("deleted", meal_id))

    def clear_all(self) -> None:
        """Remove every record."""
        try:
            self.storage.remove(self.storage_key)
        except OSError as exc:
            raise StorageWriteError(f"Failed to clear meal data: {exc}") from exc
        self._notify(MealChange("cleared"))

    def subscribe(self, listener: MealListener) -> Callable[[], None]:
        """Register a change listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _load(self) -> list[MealRecord]:
        try:
            raw = self.storage.get(self.storage_key)
        except OSError as exc:
            raise StorageReadError(f"Failed to read meal data: {exc}") from exc
        if not raw:
            return []
        return decode_records(raw)

    def _write(self, records: list[MealRecord]) -> None:
        try:
            self.storage.set(self.storage_key, encode_records(records))
        except OSError as exc:
            raise StorageWriteError(f"Failed to write meal data: {exc}") from exc

    def _notify(self, change: MealChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Meal change listener failed")


def encode_records(records: list[MealRecord]) -> str:
    """Serialize records into the versioned storage envelope."""
    return json.dumps(
        {
            "version": ENVELOPE_VERSION,
            "records": [
                record.model_dump(mode="json", exclude_none=True) for record in records
            ],
        },
        ensure_ascii=False,
    )


def decode_records(raw: str) -> list[MealRecord]:
    """Parse a storage envelope, accepting the legacy bare-array layout."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageReadError(f"Stored meal data is not valid JSON: {exc}") from exc
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        version = payload.get("version")
        if not isinstance(version, int) or version > ENVELOPE_VERSION:
            raise StorageReadError(f"Unsupported meal data version: {version!r}")
        items = payload.get("records", [])
    else:
        raise StorageReadError("Stored meal data has an unexpected shape")
    try:
        return _RECORDS_ADAPTER.validate_python(items)
    except PydanticValidationError as exc:
        raise StorageReadError(f"Stored meal records are invalid: {exc}") from exc


def build_meal_record(
    estimate: NutritionEstimate,
    captured_at: datetime,
    timezone: tzinfo,
    image: str | None = None,
    meal_id: str | None = None,
) -> MealRecord:
    """Create a meal record from an estimate and its capture instant."""
    if captured_at.tzinfo is None:
        captured_at = captured_at.replace(tzinfo=timezone)
    local = captured_at.astimezone(timezone)
    return MealRecord(
        id=meal_id or uuid4().hex,
        date=local.date().isoformat(),
        timestamp=captured_at,
        name=estimate.name,
        calories=estimate.calories,
        carbs=estimate.carbs,
        protein=estimate.protein,
        fat=estimate.fat,
        confidence=estimate.confidence,
        image=image,
    )
