"""Application configuration."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEBUG_ENVIRONMENTS = frozenset({"local", "development"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    storage_path: Path | None = Path(".meal_snap/storage.json")
    storage_key: str = "meal_records"
    timezone: str = "UTC"
    max_image_kb: int = 5000
    retain_images: bool = True
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        """Return the configured local time zone."""
        return ZoneInfo(self.timezone)

    @property
    def include_debug(self) -> bool:
        """Whether error responses may carry debug details."""
        return self.environment in DEBUG_ENVIRONMENTS
