"""Error taxonomy shared by the gateway, the store and the API."""


class MealSnapError(Exception):
    """Base error carrying a user-facing message and an HTTP-style status."""

    status_code = 500

    def __init__(self, message: str, debug: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.debug = debug

    def to_payload(self, include_debug: bool = False) -> dict[str, object]:
        """Return the `{error, debug?}` body for this error."""
        payload: dict[str, object] = {"error": self.message}
        if include_debug and self.debug:
            payload["debug"] = self.debug
        return payload


class ConfigurationError(MealSnapError):
    """The application is missing required configuration."""


class MissingCredentialsError(ConfigurationError):
    """No API key is configured for the vision model."""


class ValidationError(MealSnapError):
    """Input rejected before any external call."""

    status_code = 400


class NoImageProvidedError(ValidationError):
    """Request did not include an image."""


class ImageTooLargeError(ValidationError):
    """Encoded image exceeds the configured size limit."""

    status_code = 413


class UpstreamError(MealSnapError):
    """The vision model call failed."""


class UpstreamAuthError(UpstreamError):
    status_code = 401


class UpstreamRateLimitError(UpstreamError):
    status_code = 429


class UpstreamRequestError(UpstreamError):
    status_code = 400


class UpstreamUnknownError(UpstreamError):
    status_code = 500


class StorageError(MealSnapError):
    """Persisted meal data could not be read or written."""


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class MealRecordError(MealSnapError):
    """A meal record violates a store invariant."""

    status_code = 422


class DuplicateMealError(MealRecordError):
    status_code = 409


class InvalidMealRecordError(MealRecordError):
    pass
