from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.core.config import request_logger
from app.core.exceptions.types import (
    AppException,
    AuthenticationException,
    NotFoundException,
    RateLimitExceededException,
    UpstreamException,
)


def _error_content(exc: AppException) -> dict:
    content = {"error": exc.error, "message": exc.message}
    if exc.details:
        content["details"] = exc.details
    return content


async def general_exception_handler(request: Request, exc: AppException):
    """
    Handles any AppException without a more specific handler.

    Args:
        request: The request object.
        exc (AppException): The exception instance.

    Returns:
        JSONResponse: ``{"error", "message"}`` with the exception's status code.
    """
    request_logger.error(f"GeneralException: {exc}")
    return JSONResponse(status_code=exc.status_code, content=_error_content(exc))


async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
):
    """
    Handles missing or rejected API keys.

    Returns:
        JSONResponse: A response with status code 401.
    """
    request_logger.warning(
        f"AuthenticationException on {request.url.path}: {exc.error}"
    )
    return JSONResponse(status_code=exc.status_code, content=_error_content(exc))


async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceededException
):
    """
    Handles rate limit exceeded exceptions by returning a JSON response.

    Args:
        request: The request object.
        exc (RateLimitExceededException): The rate limit exception instance.

    Returns:
        JSONResponse: A response with status code 429, ``Retry-After`` and
        ``X-RateLimit-*`` headers when the limiter supplied them.
    """
    request_logger.warning(f"RateLimitExceededException: {exc}")
    headers = {}
    if exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    if exc.limit is not None:
        headers["X-RateLimit-Limit"] = str(exc.limit)
        headers["X-RateLimit-Remaining"] = "0"
    if exc.reset_at is not None:
        headers["X-RateLimit-Reset"] = str(int(exc.reset_at.timestamp()))
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc),
        headers=headers,
    )


async def not_found_exception_handler(request: Request, exc: NotFoundException):
    request_logger.warning(f"NotFoundException on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content=_error_content(exc))


async def upstream_exception_handler(request: Request, exc: UpstreamException):
    """
    Handles failures of the upstream price provider.

    The underlying failure message is returned to the caller as-is.
    """
    request_logger.error(f"UpstreamException on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content=_error_content(exc))


exception_schema = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "description": "Upstream Failure",
        "content": {
            "application/json": {
                "example": {
                    "error": "Failed to fetch prices",
                    "message": "timeout of 10000ms exceeded",
                },
            }
        },
    },
    status.HTTP_401_UNAUTHORIZED: {
        "description": "Missing API Key",
        "content": {
            "application/json": {
                "example": {
                    "error": "API key required",
                    "message": "Get your free API key at https://your-domain.com",
                },
            }
        },
    },
    status.HTTP_429_TOO_MANY_REQUESTS: {
        "description": "Rate Limit Exceeded",
        "content": {
            "application/json": {
                "example": {
                    "error": "Rate limit exceeded. Upgrade your plan.",
                    "message": "Rate limit exceeded. Try again in 1800 seconds.",
                },
            }
        },
    },
}


__all__ = [
    "general_exception_handler",
    "authentication_exception_handler",
    "rate_limit_exception_handler",
    "not_found_exception_handler",
    "upstream_exception_handler",
    "exception_schema",
]
