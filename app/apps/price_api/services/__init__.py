from app.apps.price_api.services.api_key import (
    ApiKeyRecord,
    ApiKeyService,
    TIER_PREFIXES,
    classify_api_key,
    generate_api_key,
)
from app.apps.price_api.services.coingecko import CoinGeckoClient
from app.apps.price_api.services.price_cache import CacheEntry, PriceCache
from app.apps.price_api.services.prices import PriceService, normalize_asset_ids

__all__ = [
    "ApiKeyRecord",
    "ApiKeyService",
    "TIER_PREFIXES",
    "classify_api_key",
    "generate_api_key",
    "CoinGeckoClient",
    "CacheEntry",
    "PriceCache",
    "PriceService",
    "normalize_asset_ids",
]
