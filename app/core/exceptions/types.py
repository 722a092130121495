from datetime import datetime

from fastapi import status


class AppException(Exception):
    """Base application exception.

    ``error`` is the short title returned in the ``error`` field of the JSON
    body; ``message`` is the human-readable explanation.
    """

    default_error: str = "Internal server error"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
        error: str | None = None,
    ):
        self.message = message
        self.status_code = status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        self.details = details
        self.error = error or self.default_error
        super().__init__(message)


class AuthenticationException(AppException):
    """Exception raised for authentication-related errors."""

    default_error = "Authentication failed"

    def __init__(self, message: str = "Authentication failed.", error: str | None = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, error=error)


class MissingApiKeyException(AuthenticationException):
    """Exception raised when a request carries no API key."""

    default_error = "API key required"

    def __init__(self, signup_url: str = "https://your-domain.com"):
        super().__init__(f"Get your free API key at {signup_url}")
        self.signup_url = signup_url


class InvalidApiKeyException(AuthenticationException):
    """Exception raised when a key was never issued by this service."""

    default_error = "Invalid API key"

    def __init__(
        self,
        message: str = "This API key was not issued by this service. Generate one at /generate-key.",
    ):
        super().__init__(message)


class RateLimitExceededException(AppException):
    """Exception raised when rate limit is exceeded."""

    default_error = "Rate limit exceeded. Upgrade your plan."

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: int | None = None,
        limit: int | None = None,
        reset_at: datetime | None = None,
    ):
        super().__init__(message, status.HTTP_429_TOO_MANY_REQUESTS)
        self.retry_after = retry_after
        self.limit = limit
        self.reset_at = reset_at


class NotFoundException(AppException):
    """Exception raised when a resource is not found."""

    default_error = "Not found"

    def __init__(self, message: str = "Resource not found.", error: str | None = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, error=error)


class AssetNotFoundException(NotFoundException):
    """Exception raised when the price provider has no entry for an asset id."""

    default_error = "Cryptocurrency not found"

    def __init__(self, asset_id: str):
        super().__init__(
            f"No data for '{asset_id}'. Try 'bitcoin', 'ethereum', 'cardano', etc."
        )
        self.asset_id = asset_id


class UpstreamException(AppException):
    """Exception raised when the upstream price provider call fails.

    The message is the underlying failure, passed through unchanged.
    """

    default_error = "Failed to fetch prices"

    def __init__(
        self,
        message: str = "The price provider request failed.",
        error: str | None = None,
        upstream_status: int | None = None,
    ):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, error=error)
        self.upstream_status = upstream_status


__all__ = [
    "AppException",
    "AuthenticationException",
    "MissingApiKeyException",
    "InvalidApiKeyException",
    "RateLimitExceededException",
    "NotFoundException",
    "AssetNotFoundException",
    "UpstreamException",
]
