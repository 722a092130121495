"""
Process-scoped service state.

Everything that outlives a single request (cache, key registry, rate limit
counters, upstream client) is built once by ``build_state`` and attached to
``app.state.services``. Request handlers reach it through dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime

from app.apps.price_api.services.api_key import ApiKeyService
from app.apps.price_api.services.coingecko import CoinGeckoClient
from app.apps.price_api.services.price_cache import PriceCache
from app.apps.price_api.services.prices import PriceService
from app.core.config import Settings, settings
from app.core.services.rate_limit import RateLimiter, tier_limits_from_settings
from app.core.utils import Clock


@dataclass
class ServiceState:
    clock: Clock
    started_at: datetime
    cache: PriceCache
    coingecko: CoinGeckoClient
    prices: PriceService
    api_keys: ApiKeyService
    rate_limiter: RateLimiter
    config: Settings = field(default_factory=lambda: settings)

    def uptime_seconds(self) -> float:
        return (self.clock.now() - self.started_at).total_seconds()


def build_state(
    config: Settings | None = None,
    clock: Clock | None = None,
    coingecko: CoinGeckoClient | None = None,
) -> ServiceState:
    """
    Construct all shared services from configuration.

    Args:
        config: Settings to build from. Defaults to the global settings.
        clock: Time source shared by every service. Defaults to the wall clock.
        coingecko: Upstream client override, mainly for tests.
    """
    config = config or settings
    clock = clock or Clock()

    cache = PriceCache(ttl_seconds=config.PRICE_CACHE_TTL_SECONDS, clock=clock)
    coingecko = coingecko or CoinGeckoClient(
        base_url=config.COINGECKO_BASE_URL,
        timeout=config.UPSTREAM_TIMEOUT_SECONDS,
        api_key=config.COINGECKO_API_KEY,
        api_key_header=config.COINGECKO_API_KEY_HEADER,
    )

    return ServiceState(
        clock=clock,
        started_at=clock.now(),
        cache=cache,
        coingecko=coingecko,
        prices=PriceService(client=coingecko, cache=cache),
        api_keys=ApiKeyService(
            clock=clock, require_registered=config.API_KEY_REQUIRE_REGISTERED
        ),
        rate_limiter=RateLimiter(
            limits=tier_limits_from_settings(config),
            clock=clock,
            key_by=config.RATE_LIMIT_KEY_BY,
        ),
        config=config,
    )
