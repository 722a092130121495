"""
Schemas for price, key issuance and service metadata responses.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import Tier

# Provider body, passed through untouched: asset id -> quote fields
PriceData = dict[str, dict[str, Any]]


class PricesResponse(BaseModel):
    """Successful price lookup."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "tier": "free",
                "data": {
                    "bitcoin": {
                        "usd": 67250.0,
                        "usd_market_cap": 1324000000000.0,
                        "usd_24h_vol": 28500000000.0,
                        "usd_24h_change": 1.42,
                    }
                },
                "timestamp": "2024-05-01T12:00:00.000Z",
            }
        }
    )

    success: bool = True
    tier: Tier
    data: PriceData
    timestamp: datetime


class GenerateKeyRequest(BaseModel):
    """Request body for minting a test key."""

    model_config = ConfigDict(json_schema_extra={"example": {"tier": "pro"}})

    tier: Tier = Field(default=Tier.FREE, description="Tier encoded in the key prefix")


class GenerateKeyResponse(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "apiKey": "pro_k3j9x0a1b2cq8w7e6r5t4y3u",
                "tier": "pro",
                "message": "This is a test key. For production, please upgrade.",
            }
        },
    )

    api_key: str = Field(alias="apiKey")
    tier: Tier
    message: str = "This is a test key. For production, please upgrade."


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: datetime
    uptime: float = Field(description="Seconds since the service started")


class PricingTier(BaseModel):
    price: str
    requests: str


class ServiceInfoResponse(BaseModel):
    """Service metadata served at the root path."""

    name: str
    version: str
    description: str
    endpoints: dict[str, str]
    pricing: dict[str, PricingTier]
    payment: dict[str, str]


__all__ = [
    "PriceData",
    "PricesResponse",
    "GenerateKeyRequest",
    "GenerateKeyResponse",
    "HealthResponse",
    "PricingTier",
    "ServiceInfoResponse",
]
