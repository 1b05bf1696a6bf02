"""Key-value storage persisted as one JSON object on disk."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from meal_snap.services.meals import KeyValueStorage

logger = logging.getLogger(__name__)


class CorruptStorageFileError(OSError):
    """The storage file exists but does not hold a JSON object."""


@dataclass
class JsonFileKeyValueStorage(KeyValueStorage):
    """Stores all keys in a single JSON file, replaced atomically on write."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the value for key, or None if the file or key is missing."""
        entries = self._read_entries()
        value = entries.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store value under key."""
        entries = self._read_entries()
        entries[key] = value
        self._write_entries(entries)

    def remove(self, key: str) -> None:
        """Delete key if present; an unreadable file is reset to empty."""
        try:
            entries = self._read_entries()
        except CorruptStorageFileError:
            logger.warning("Resetting unreadable storage file %s", self.path)
            self._write_entries({})
            return
        if entries.pop(key, None) is not None:
            self._write_entries(entries)

    def _read_entries(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptStorageFileError(
                f"Storage file {self.path} is not valid JSON"
            ) from exc
        if not isinstance(data, dict):
            raise CorruptStorageFileError(
                f"Storage file {self.path} does not hold an object"
            )
        return data

    def _write_entries(self, entries: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
