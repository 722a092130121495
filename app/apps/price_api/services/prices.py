from typing import Any, Iterable

from app.apps.price_api.services.coingecko import CoinGeckoClient
from app.apps.price_api.services.price_cache import PriceCache
from app.core.config import cache_logger


def normalize_asset_ids(asset_ids: str | Iterable[str]) -> str:
    """
    Turn asset ids into the cache/query key used for the provider call.

    Ids are stripped and lowercased, blanks dropped and duplicates removed
    keeping first-seen order. Order is otherwise preserved, so
    ``"ethereum,bitcoin"`` and ``"bitcoin,ethereum"`` are different keys.

    Raises:
        ValueError: If no asset id is left after normalization.

    Example:
        >>> normalize_asset_ids(" Bitcoin,ETHEREUM,bitcoin ")
        'bitcoin,ethereum'
    """
    if isinstance(asset_ids, str):
        asset_ids = asset_ids.split(",")

    normalized: list[str] = []
    for asset_id in asset_ids:
        asset_id = asset_id.strip().lower()
        if asset_id and asset_id not in normalized:
            normalized.append(asset_id)

    if not normalized:
        raise ValueError("At least one asset id is required.")

    return ",".join(normalized)


class PriceService:
    """Cache-aware price lookup in front of the upstream provider."""

    def __init__(self, client: CoinGeckoClient, cache: PriceCache):
        self.client = client
        self.cache = cache

    async def get_prices(self, asset_ids: str | Iterable[str]) -> dict[str, Any]:
        """
        Return price data for ``asset_ids``, from cache when fresh.

        A miss or stale entry triggers exactly one upstream call whose result
        replaces the cache entry. Upstream failures propagate unchanged and
        leave the cache untouched.
        """
        query_key = normalize_asset_ids(asset_ids)

        entry = self.cache.get(query_key)
        if entry is not None and self.cache.is_fresh(entry):
            cache_logger.debug(f"Cache hit for '{query_key}'")
            return entry.payload

        cache_logger.debug(f"Cache miss for '{query_key}'")
        payload = await self.client.fetch_prices(query_key)
        self.cache.put(query_key, payload)
        return payload
