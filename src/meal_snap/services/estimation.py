"""Nutrition estimation gateway using a vision model."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from meal_snap.domain.errors import (
    ImageTooLargeError,
    MissingCredentialsError,
    NoImageProvidedError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitError,
    UpstreamRequestError,
    UpstreamUnknownError,
)
from meal_snap.domain.estimation import NutritionEstimate

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMAGE_KB = 5000

NUTRITION_PROMPT = (
    "Analyze this meal photo and estimate the dish name, calories, "
    "and PFC (protein, fat, carbohydrates). Treat it as a typical Japanese "
    "meal and give the dish name in Japanese. Rate your confidence in the "
    "analysis from 0 to 1. Provide numbers as accurate as possible."
)

NUTRITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Dish name in Japanese"},
        "calories": {"type": "number", "description": "Estimated kcal"},
        "protein": {"type": "number", "description": "Protein in grams"},
        "fat": {"type": "number", "description": "Fat in grams"},
        "carbs": {"type": "number", "description": "Carbohydrates in grams"},
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
    },
    "required": ["name", "calories", "protein", "fat", "carbs", "confidence"],
    "additionalProperties": False,
}

_STATUS_ERRORS: dict[int, tuple[type[UpstreamError], str]] = {
    400: (
        UpstreamRequestError,
        "The request was malformed. Please check the image.",
    ),
    401: (
        UpstreamAuthError,
        "The API key is invalid. Check that OPENAI_API_KEY is set correctly.",
    ),
    403: (
        UpstreamAuthError,
        "The API key is invalid. Check that OPENAI_API_KEY is set correctly.",
    ),
    429: (
        UpstreamRateLimitError,
        "The API rate limit was reached. Please wait a moment and try again.",
    ),
}


class EstimationClient(Protocol):
    """Interface for structured nutrition extraction from an image."""

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
        """Return the raw structured estimate."""


@dataclass
class EstimationService:
    """Service that validates images, calls the model and maps failures."""

    client: EstimationClient | None
    model: str
    reasoning_effort: str | None
    store: bool
    max_image_kb: int = DEFAULT_MAX_IMAGE_KB
    environment: str = "local"

    async def analyze(self, image: str | None) -> NutritionEstimate:
        """Estimate nutrition for an encoded image (data URL or base64)."""
        if self.client is None:
            logger.error("No OpenAI API key configured")
            raise MissingCredentialsError(
                _missing_credentials_message(self.environment),
                debug={"has_api_key": False, "environment": self.environment},
            )
        if not image:
            raise NoImageProvidedError("No image was provided.")

        size_kb = encoded_size_kb(image)
        logger.info("Image size: %sKB", size_kb)
        if size_kb > self.max_image_kb:
            raise ImageTooLargeError(
                "The image is too large. Please try a smaller image."
            )

        logger.info("Starting nutrition analysis")
        try:
            raw = await self.client.estimate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=_ensure_data_url(image),
                schema=NUTRITION_SCHEMA,
                prompt=NUTRITION_PROMPT,
            )
            estimate = NutritionEstimate.model_validate(raw)
        except Exception as exc:
            logger.exception("Nutrition analysis failed")
            raise classify_upstream_error(exc) from exc
        logger.info("Nutrition analysis completed: %s", estimate.name)
        return estimate

    async def analyze_bytes(self, image_bytes: bytes) -> NutritionEstimate:
        """Estimate nutrition for raw image bytes."""
        return await self.analyze(_to_data_url(image_bytes) if image_bytes else None)


def encoded_size_kb(image: str) -> int:
    """Approximate decoded size in KB of a base64-encoded image string."""
    return round(len(image) * 3 / 4 / 1024)


def classify_upstream_error(exc: Exception) -> UpstreamError:
    """Map a provider exception to the upstream error taxonomy."""
    if isinstance(exc, UpstreamError):
        return exc
    if isinstance(exc, PydanticValidationError):
        return UpstreamUnknownError(
            f"The model returned an invalid estimate: {exc.error_count()} errors"
        )
    status_code = getattr(exc, "status_code", None)
    message = str(exc)
    if status_code not in _STATUS_ERRORS:
        lowered = message.lower()
        if "401" in message or "authentication" in lowered:
            status_code = 401
        elif "429" in message:
            status_code = 429
        elif "400" in message:
            status_code = 400
    if status_code in _STATUS_ERRORS:
        error_type, user_message = _STATUS_ERRORS[status_code]
        return error_type(user_message)
    return UpstreamUnknownError(f"An error occurred during analysis: {message}")


def _missing_credentials_message(environment: str) -> str:
    if environment in {"local", "development"}:
        return (
            "The API key is not configured. "
            f"Set OPENAI_API_KEY in .env.{environment} or .env."
        )
    return (
        "The API key is not configured. "
        "Set the OPENAI_API_KEY environment variable for this deployment."
    )


def _ensure_data_url(image: str) -> str:
    if image.startswith("data:"):
        return image
    try:
        head = base64.b64decode(image[:16], validate=False)
    except (binascii.Error, ValueError):
        head = b""
    return f"data:{_detect_mime_type(head)};base64,{image}"


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
