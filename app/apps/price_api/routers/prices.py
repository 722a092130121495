"""
Price endpoints.

Both routes require an ``x-api-key`` header and are rate limited by the
caller's tier, each route with its own buckets.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.apps.price_api.dependencies import ApiKeyDep, ServicesDep, rate_limit_by_tier
from app.apps.price_api.schemas import PricesResponse
from app.apps.price_api.services.prices import normalize_asset_ids
from app.core.exceptions.types import AssetNotFoundException, UpstreamException
from app.core.services.rate_limit import RateLimitResult


router = APIRouter(prefix="/prices", tags=["Prices"])


@router.get(
    "",
    response_model=PricesResponse,
    summary="Get BTC and ETH prices",
    description="""
Current USD price, 24h change, market cap and 24h volume for the default
assets (bitcoin and ethereum). Responses are cached for one minute.

**Rate Limit Response Headers**:
| Header | Description |
|--------|-------------|
| `X-RateLimit-Limit` | Max requests per window for your tier |
| `X-RateLimit-Remaining` | Remaining in the current window |
| `X-RateLimit-Reset` | Unix timestamp when the window resets |
| `Retry-After` | Seconds until the window resets (429 only) |
""",
)
async def get_prices(
    services: ServicesDep,
    api_key: ApiKeyDep,
    rate_limit: Annotated[RateLimitResult, Depends(rate_limit_by_tier("prices"))],
) -> PricesResponse:
    data = await services.prices.get_prices(services.config.DEFAULT_ASSET_IDS)
    return PricesResponse(
        tier=api_key.tier,
        data=data,
        timestamp=services.clock.now(),
    )


@router.get(
    "/{asset_id}",
    response_model=PricesResponse,
    summary="Get a specific crypto price",
    description="""
Price data for one asset, identified by its CoinGecko id (case-insensitive),
e.g. `bitcoin`, `ethereum`, `cardano`. Returns 404 when the provider has no
entry for the id.
""",
)
async def get_price(
    asset_id: Annotated[str, Path(description="CoinGecko asset id")],
    services: ServicesDep,
    api_key: ApiKeyDep,
    rate_limit: Annotated[RateLimitResult, Depends(rate_limit_by_tier("price"))],
) -> PricesResponse:
    try:
        normalized_id = normalize_asset_ids(asset_id)
    except ValueError:
        raise AssetNotFoundException(asset_id)

    try:
        data = await services.prices.get_prices(normalized_id)
    except UpstreamException as exc:
        raise UpstreamException(
            exc.message,
            error="Failed to fetch price",
            upstream_status=exc.upstream_status,
        ) from exc

    if normalized_id not in data:
        raise AssetNotFoundException(asset_id)

    return PricesResponse(
        tier=api_key.tier,
        data=data,
        timestamp=services.clock.now(),
    )
