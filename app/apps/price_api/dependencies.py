"""
FastAPI dependencies for the price API.

- ``get_services``: the process-scoped ``ServiceState``
- ``require_api_key``: ``x-api-key`` presence check and tier resolution
- ``rate_limit_by_tier``: per-route, per-tier rate limiting
"""

from dataclasses import dataclass
from typing import Annotated, Callable

from fastapi import Depends, Header, Request, Response

from app.apps.price_api.state import ServiceState
from app.core.config import request_logger
from app.core.enums import Tier
from app.core.exceptions.types import MissingApiKeyException, RateLimitExceededException
from app.core.services.rate_limit import RateLimitResult


def get_services(request: Request) -> ServiceState:
    """Return the ``ServiceState`` attached to the running app."""
    return request.app.state.services


ServicesDep = Annotated[ServiceState, Depends(get_services)]


@dataclass(frozen=True)
class ApiKeyContext:
    """The caller's API key and the tier it resolved to."""

    api_key: str
    tier: Tier


async def require_api_key(
    services: ServicesDep,
    x_api_key: Annotated[str | None, Header()] = None,
) -> ApiKeyContext:
    """
    Validate the ``x-api-key`` header and resolve the caller's tier.

    Raises:
        MissingApiKeyException: If the header is absent or empty.
        InvalidApiKeyException: If registry mode rejects the key.
    """
    if not x_api_key:
        request_logger.warning("Price request missing x-api-key header")
        raise MissingApiKeyException(signup_url=services.config.API_KEY_SIGNUP_URL)

    tier = services.api_keys.resolve(x_api_key)
    return ApiKeyContext(api_key=x_api_key, tier=tier)


ApiKeyDep = Annotated[ApiKeyContext, Depends(require_api_key)]


def rate_limit_by_tier(scope: str) -> Callable:
    """
    Create a dependency that rate limits a route by the caller's tier.

    Each route gets its own buckets through ``scope``. The caller is
    identified by client address (or the whole tier, depending on
    ``RATE_LIMIT_KEY_BY``). Every caller is held to the free-tier limits
    unless ``RATE_LIMIT_APPLY_RESOLVED_TIER`` is on, in which case the
    limits of the resolved tier apply.

    Args:
        scope: Name of the limited route, e.g. ``"prices"``.

    Example:
        >>> @router.get("/prices")
        >>> async def get_prices(
        ...     rate_limit: Annotated[RateLimitResult, Depends(rate_limit_by_tier("prices"))],
        ... ):
        ...     ...
    """

    async def dependency(
        request: Request,
        response: Response,
        services: ServicesDep,
        api_key: ApiKeyDep,
    ) -> RateLimitResult:
        tier = (
            api_key.tier
            if services.config.RATE_LIMIT_APPLY_RESOLVED_TIER
            else Tier.FREE
        )
        client_ip = request.client.host if request.client else "unknown"

        result = await services.rate_limiter.check_tier(client_ip, tier, scope)

        if not result.allowed:
            raise RateLimitExceededException(
                message=f"Rate limit exceeded. Try again in {result.retry_after} seconds.",
                retry_after=result.retry_after,
                limit=result.limit,
                reset_at=result.reset_at,
            )

        response.headers["X-RateLimit-Limit"] = str(result.limit)
        response.headers["X-RateLimit-Remaining"] = str(result.remaining)
        response.headers["X-RateLimit-Reset"] = str(int(result.reset_at.timestamp()))
        return result

    return dependency


__all__ = [
    "get_services",
    "ServicesDep",
    "ApiKeyContext",
    "require_api_key",
    "ApiKeyDep",
    "rate_limit_by_tier",
]
