"""
Tier-based rate limiting.

This module provides a fixed-window, in-memory rate limiter whose limits
are looked up per service tier. Time is read through an injected
``Clock`` so windows can be exercised deterministically in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.core.config import Settings, rate_limit_logger, settings
from app.core.enums import RateLimitKeyType, Tier
from app.core.utils import Clock


@dataclass
class RateLimitResult:
    """
    Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed.
        remaining: Number of remaining requests in the current window.
        limit: The maximum number of requests allowed.
        reset_at: When the rate limit window resets.
        retry_after: Seconds until the client can retry (only if not allowed).
    """

    allowed: bool
    remaining: int
    limit: int
    reset_at: datetime
    retry_after: int | None = None


@dataclass(frozen=True)
class TierLimit:
    """Maximum requests per window (in seconds) for one tier."""

    limit: int
    window: float


def tier_limits_from_settings(config: Settings | None = None) -> dict[Tier, TierLimit]:
    """
    Build the per-tier limits table from configuration.

    Every tier shares the same window; only the request ceiling differs.
    """
    config = config or settings
    window = config.RATE_LIMIT_WINDOW_SECONDS
    return {
        Tier.FREE: TierLimit(limit=config.RATE_LIMIT_FREE_REQUESTS, window=window),
        Tier.PRO: TierLimit(limit=config.RATE_LIMIT_PRO_REQUESTS, window=window),
        Tier.ENTERPRISE: TierLimit(
            limit=config.RATE_LIMIT_ENTERPRISE_REQUESTS, window=window
        ),
    }


class RateLimitBackend(ABC):
    """
    Abstract base class for rate limit backends.

    Implementations must provide methods for checking rate limits,
    resetting keys, and getting remaining request counts.
    """

    @abstractmethod
    async def check(self, key: str, limit: int, window: float) -> RateLimitResult:
        """
        Count a request against ``key`` and report whether it is allowed.

        Args:
            key: The rate limit key (e.g., "rate_limit:free:ip:10.0.0.1:prices").
            limit: Maximum number of requests allowed in the window.
            window: Time window in seconds.
        """
        pass

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget all requests counted against ``key``."""
        pass

    @abstractmethod
    async def get_remaining(self, key: str, limit: int, window: float) -> int:
        """Return how many requests ``key`` may still make in its window."""
        pass


class MemoryBackend(RateLimitBackend):
    """
    In-memory fixed-window rate limit backend.

    A window opens on the first request for a key and lasts ``window``
    seconds; once it elapses the next request opens a fresh window.

    Expired windows are swept out at most once every ``sweep_interval``
    seconds, so keys for clients that stop calling do not accumulate.

    Note:
        Data is lost on application restart and is not shared between
        processes.
    """

    def __init__(self, clock: Clock | None = None, sweep_interval: float = 60.0):
        self._clock = clock or Clock()
        self._store: dict[str, tuple[int, datetime]] = {}
        self._sweep_interval = timedelta(seconds=sweep_interval)
        self._next_sweep_at: datetime | None = None

    def __len__(self) -> int:
        return len(self._store)

    def _purge_expired(self, now: datetime) -> None:
        expired = [key for key, (_, reset_at) in self._store.items() if now >= reset_at]
        for key in expired:
            del self._store[key]
        if expired:
            rate_limit_logger.debug(f"Purged {len(expired)} expired rate limit entries")
        self._next_sweep_at = now + self._sweep_interval

    async def check(self, key: str, limit: int, window: float) -> RateLimitResult:
        now = self._clock.now()

        if self._next_sweep_at is None or now >= self._next_sweep_at:
            self._purge_expired(now)

        if key in self._store:
            count, reset_at = self._store[key]

            if now >= reset_at:
                reset_at = now + timedelta(seconds=window)
                self._store[key] = (1, reset_at)
                rate_limit_logger.debug(f"Rate limit window reset for key: {key}")
                return RateLimitResult(
                    allowed=True,
                    remaining=limit - 1,
                    limit=limit,
                    reset_at=reset_at,
                )

            if count >= limit:
                retry_after = int((reset_at - now).total_seconds())
                rate_limit_logger.warning(
                    f"Rate limit exceeded for key: {key}, retry after: {retry_after}s"
                )
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    limit=limit,
                    reset_at=reset_at,
                    retry_after=max(1, retry_after),
                )

            self._store[key] = (count + 1, reset_at)
            remaining = limit - count - 1
            rate_limit_logger.debug(
                f"Rate limit check passed for key: {key}, remaining: {remaining}"
            )
            return RateLimitResult(
                allowed=True,
                remaining=remaining,
                limit=limit,
                reset_at=reset_at,
            )

        reset_at = now + timedelta(seconds=window)
        self._store[key] = (1, reset_at)
        rate_limit_logger.debug(f"New rate limit entry created for key: {key}")
        return RateLimitResult(
            allowed=True,
            remaining=limit - 1,
            limit=limit,
            reset_at=reset_at,
        )

    async def reset(self, key: str) -> None:
        if key in self._store:
            del self._store[key]
            rate_limit_logger.debug(f"Rate limit reset for key: {key}")

    async def get_remaining(self, key: str, limit: int, window: float) -> int:
        if key not in self._store:
            return limit

        count, reset_at = self._store[key]

        # If window expired, full limit available
        if self._clock.now() >= reset_at:
            return limit

        return max(0, limit - count)


def format_rate_limit_key(
    tier: Tier,
    key_type: RateLimitKeyType,
    identifier: str,
    scope: str,
) -> str:
    """
    Format a rate limit key with consistent structure.

    Args:
        tier: The tier whose limits apply to this bucket.
        key_type: What the bucket is keyed on (client address or whole tier).
        identifier: The client address, or the tier name for shared buckets.
        scope: The route the bucket belongs to.

    Example:
        >>> format_rate_limit_key(Tier.FREE, RateLimitKeyType.IP, "10.0.0.1", "prices")
        'rate_limit:free:ip:10.0.0.1:prices'
    """
    return f"rate_limit:{tier.value}:{key_type.value}:{identifier}:{scope}"


class RateLimiter:
    """
    Rate limiter that applies per-tier limits to caller identities.

    One instance is created per process and shared by every request.

    Args:
        limits: Per-tier limits. Defaults to the configured table.
        backend: Counter storage. Defaults to a ``MemoryBackend``.
        clock: Time source used when the default backend is created.
        key_by: Whether buckets are per client address or per tier.

    Example:
        >>> limiter = RateLimiter()
        >>> result = await limiter.check_tier("10.0.0.1", Tier.PRO, scope="prices")
        >>> if not result.allowed:
        ...     raise RateLimitExceededException(retry_after=result.retry_after)
    """

    def __init__(
        self,
        limits: dict[Tier, TierLimit] | None = None,
        backend: RateLimitBackend | None = None,
        clock: Clock | None = None,
        key_by: RateLimitKeyType | None = None,
    ):
        self.limits = limits or tier_limits_from_settings()
        self._backend = backend or MemoryBackend(clock=clock)
        self.key_by = key_by or settings.RATE_LIMIT_KEY_BY

        rate_limit_logger.debug(
            f"RateLimiter initialized, keyed by {self.key_by.value}: "
            + ", ".join(
                f"{tier.value}={tier_limit.limit}/{tier_limit.window}s"
                for tier, tier_limit in self.limits.items()
            )
        )

    def limit_for(self, tier: Tier) -> TierLimit:
        return self.limits[tier]

    def key_for(self, identity: str, tier: Tier, scope: str) -> str:
        """Build the bucket key for a caller, honoring ``key_by``."""
        if self.key_by == RateLimitKeyType.TIER:
            return format_rate_limit_key(tier, self.key_by, tier.value, scope)
        return format_rate_limit_key(tier, self.key_by, identity, scope)

    async def check(self, key: str, limit: int, window: float) -> RateLimitResult:
        return await self._backend.check(key, limit, window)

    async def check_tier(
        self, identity: str, tier: Tier, scope: str = "default"
    ) -> RateLimitResult:
        """
        Count one request from ``identity`` against the limits of ``tier``.

        Args:
            identity: The caller's network origin.
            tier: The tier whose limits apply.
            scope: The route being limited; each scope has its own buckets.
        """
        tier_limit = self.limit_for(tier)
        key = self.key_for(identity, tier, scope)
        return await self.check(key, tier_limit.limit, tier_limit.window)

    async def allow(self, identity: str, tier: Tier, scope: str = "default") -> bool:
        """Shorthand for ``check_tier(...).allowed``."""
        result = await self.check_tier(identity, tier, scope)
        return result.allowed

    async def reset(self, key: str) -> None:
        await self._backend.reset(key)

    async def get_remaining(self, identity: str, tier: Tier, scope: str = "default") -> int:
        tier_limit = self.limit_for(tier)
        key = self.key_for(identity, tier, scope)
        return await self._backend.get_remaining(key, tier_limit.limit, tier_limit.window)


__all__ = [
    "RateLimitResult",
    "TierLimit",
    "tier_limits_from_settings",
    "RateLimitBackend",
    "MemoryBackend",
    "RateLimiter",
    "format_rate_limit_key",
]
