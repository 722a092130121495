from app.apps.price_api.schemas.prices import (
    GenerateKeyRequest,
    GenerateKeyResponse,
    HealthResponse,
    PriceData,
    PricesResponse,
    PricingTier,
    ServiceInfoResponse,
)

__all__ = [
    "GenerateKeyRequest",
    "GenerateKeyResponse",
    "HealthResponse",
    "PriceData",
    "PricesResponse",
    "PricingTier",
    "ServiceInfoResponse",
]
