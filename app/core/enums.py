from enum import Enum


class Tier(str, Enum):
    """Service tier derived from an API key prefix."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class RateLimitKeyType(str, Enum):
    """What a rate limit bucket is keyed on."""

    IP = "ip"  # One bucket per client address within a tier
    TIER = "tier"  # One bucket shared by every caller of a tier
