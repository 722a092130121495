from app.core.services.rate_limit import (
    MemoryBackend,
    RateLimitBackend,
    RateLimiter,
    RateLimitResult,
    TierLimit,
    format_rate_limit_key,
    tier_limits_from_settings,
)

__all__ = [
    # Rate limiting
    "MemoryBackend",
    "RateLimitBackend",
    "RateLimiter",
    "RateLimitResult",
    "TierLimit",
    "format_rate_limit_key",
    "tier_limits_from_settings",
]
