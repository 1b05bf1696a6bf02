"""Key-value storage backends that live in process memory."""

from dataclasses import dataclass, field

from meal_snap.services.meals import KeyValueStorage


@dataclass
class InMemoryKeyValueStorage(KeyValueStorage):
    """Dictionary-backed storage, lost when the process exits."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class NullKeyValueStorage(KeyValueStorage):
    """Storage for contexts without persistence: reads are empty, writes vanish."""

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str) -> None:
        return None

    def remove(self, key: str) -> None:
        return None
