from functools import lru_cache
import logging

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.enums import RateLimitKeyType
from app.core.logger import setup_logger, init_sentry


class Settings(BaseSettings):
    # Application settings
    ENVIRONMENT: str = "development"  # Options: development, production, test
    APP_NAME: str = "Crypto Price API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Real-time cryptocurrency price data API"
    DEBUG: bool = False

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # CORS settings
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = False

    # Upstream price provider settings
    COINGECKO_BASE_URL: str = "https://api.coingecko.com/api/v3"
    COINGECKO_API_KEY: str = ""
    COINGECKO_API_KEY_HEADER: str = "x-cg-demo-api-key"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # Price cache settings
    PRICE_CACHE_TTL_SECONDS: float = 60.0
    DEFAULT_ASSET_IDS: list[str] = ["bitcoin", "ethereum"]

    # Rate limiting settings (requests per window, per tier)
    RATE_LIMIT_WINDOW_SECONDS: int = 60 * 60
    RATE_LIMIT_FREE_REQUESTS: int = 100
    RATE_LIMIT_PRO_REQUESTS: int = 10_000
    RATE_LIMIT_ENTERPRISE_REQUESTS: int = 100_000
    RATE_LIMIT_KEY_BY: RateLimitKeyType = RateLimitKeyType.IP
    # True applies the limits of the key's own tier; False holds every caller
    # to the free-tier limits
    RATE_LIMIT_APPLY_RESOLVED_TIER: bool = False

    # API key settings
    # False trusts the key prefix alone; True requires a key issued by this process
    API_KEY_REQUIRE_REGISTERED: bool = False
    API_KEY_SIGNUP_URL: str = "https://your-domain.com"

    # Payment settings
    PAYMENT_ADDRESS: str = "0xdef68D7130806C789fDD31B9DaC99364f54C8a9C (USDC on Base)"

    # Sentry settings
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    model_config: SettingsConfigDict = SettingsConfigDict(  # type: ignore
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _validate_positive_limits(self) -> "Settings":
        """Reject zero or negative limits, windows and timeouts."""
        must_be_positive: dict[str, float] = {
            "UPSTREAM_TIMEOUT_SECONDS": self.UPSTREAM_TIMEOUT_SECONDS,
            "PRICE_CACHE_TTL_SECONDS": self.PRICE_CACHE_TTL_SECONDS,
            "RATE_LIMIT_WINDOW_SECONDS": self.RATE_LIMIT_WINDOW_SECONDS,
            "RATE_LIMIT_FREE_REQUESTS": self.RATE_LIMIT_FREE_REQUESTS,
            "RATE_LIMIT_PRO_REQUESTS": self.RATE_LIMIT_PRO_REQUESTS,
            "RATE_LIMIT_ENTERPRISE_REQUESTS": self.RATE_LIMIT_ENTERPRISE_REQUESTS,
        }

        not_positive = [
            name for name, value in must_be_positive.items() if value <= 0
        ]

        if not_positive:
            raise ValueError(
                f"The following settings must be greater than zero: "
                f"{', '.join(not_positive)}."
            )

        return self


@lru_cache()
def get_settings() -> Settings:
    return Settings()  # type: ignore


settings = get_settings()

if not settings.DEBUG:
    init_sentry(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

# One logger per component, each with its own log file and Sentry tag
app_logger = setup_logger(
    name="app_logger",
    log_file="logs/app.log",
    level=logging.INFO,
    sentry_tag="app",
)
request_logger = setup_logger(
    name="request_logger",
    log_file="logs/requests.log",
    level=logging.INFO,
    sentry_tag="request",
)
rate_limit_logger = setup_logger(
    name="rate_limit_logger",
    log_file="logs/rate_limit.log",
    level=logging.INFO,
    sentry_tag="rate_limit",
)
coingecko_logger = setup_logger(
    name="coingecko_logger",
    log_file="logs/coingecko.log",
    level=logging.INFO,
    sentry_tag="coingecko",
)
cache_logger = setup_logger(
    name="cache_logger",
    log_file="logs/cache.log",
    level=logging.INFO,
    sentry_tag="cache",
)
api_key_logger = setup_logger(
    name="api_key_logger",
    log_file="logs/api_key.log",
    level=logging.INFO,
    sentry_tag="api_key",
)
utils_logger = setup_logger(
    name="utils_logger",
    log_file="logs/utils.log",
    level=logging.INFO,
    sentry_tag="utils",
)

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "app_logger",
    "request_logger",
    "rate_limit_logger",
    "coingecko_logger",
    "cache_logger",
    "api_key_logger",
    "utils_logger",
]
