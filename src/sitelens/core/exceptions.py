"""Custom exceptions for SiteLens."""


class SiteLensError(Exception):
    """Base exception for all SiteLens errors."""

    code = "internal_error"

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(SiteLensError):
    """Raised when input validation fails."""

    code = "validation_error"


class InvalidUrlError(ValidationError):
    """Raised when a URL is malformed or too long."""

    code = "invalid_url"


class ForbiddenTargetError(ValidationError):
    """Raised when a URL points at a private or internal target."""

    code = "forbidden"


class FetchError(SiteLensError):
    """Base class for page retrieval failures."""

    code = "fetch_error"


class FetchFailedError(FetchError):
    """Raised when both the direct fetch and the proxy fetch fail."""

    code = "fetch_failed"


class InsufficientContentError(FetchError):
    """Raised when the fetched page is too small to analyze."""

    code = "insufficient_content"


class RateLimitError(SiteLensError):
    """Raised when rate limit is exceeded."""

    code = "rate_limited"

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict | None = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after

