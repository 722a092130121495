"""
Unauthenticated service endpoints: metadata and health.
"""

from fastapi import APIRouter

from app.apps.price_api.dependencies import ServicesDep
from app.apps.price_api.schemas import HealthResponse, ServiceInfoResponse
from app.core.enums import Tier


router = APIRouter(tags=["Service"])


def _per_window(window_seconds: float) -> str:
    hours = int(window_seconds // 3600)
    if hours <= 1:
        return "hour"
    return f"{hours} hours"


@router.get("/", response_model=ServiceInfoResponse, summary="Service metadata")
async def root(services: ServicesDep) -> ServiceInfoResponse:
    limits = services.rate_limiter.limits
    per = _per_window(services.config.RATE_LIMIT_WINDOW_SECONDS)

    return ServiceInfoResponse(
        name=services.config.APP_NAME,
        version=services.config.APP_VERSION,
        description=services.config.APP_DESCRIPTION,
        endpoints={
            "/prices": "Get BTC and ETH prices",
            "/prices/:id": "Get specific crypto price",
            "/generate-key": "Generate a test API key",
            "/health": "Health check",
        },
        pricing={
            Tier.FREE.value: {
                "price": "$0/month",
                "requests": f"{limits[Tier.FREE].limit:,}/{per}",
            },
            Tier.PRO.value: {
                "price": "$9/month",
                "requests": f"{limits[Tier.PRO].limit:,}/{per}",
            },
            Tier.ENTERPRISE.value: {"price": "$49/month", "requests": "Unlimited"},
        },
        payment={"crypto": services.config.PAYMENT_ADDRESS},
    )


@router.head("/health", include_in_schema=False)
@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(services: ServicesDep) -> HealthResponse:
    """
    Health check endpoint to verify if the API is running.

    Does not call the upstream provider.
    """
    return HealthResponse(
        timestamp=services.clock.now(),
        uptime=services.uptime_seconds(),
    )
