"""Error taxonomy mapped onto HTTP status codes."""


class FodmapError(Exception):
    """Base error carrying a client-safe message and a status code."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FodmapError):
    """Malformed or missing request fields."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(FodmapError):
    """Unknown food id or chat session."""

    status_code = 404
    default_message = "Not found"


class UpstreamUnavailable(FodmapError):
    """Generation or persistence call failed."""

    status_code = 503
    default_message = "Service temporarily unavailable. Please try again later."


class DataLoadError(FodmapError):
    """Catalog file missing or corrupt."""

    default_message = "Failed to load food catalog"
