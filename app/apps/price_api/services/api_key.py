"""
API key issuance and tier resolution.

Trust model: a key's tier is whatever its prefix says. ``pro_anything`` is a
pro key whether or not this service issued it, and issued keys are test
keys only. Setting ``API_KEY_REQUIRE_REGISTERED`` switches resolution to
the in-process registry, accepting only keys issued since startup.
"""

from dataclasses import dataclass
from datetime import datetime
import secrets
import string

from app.core.config import api_key_logger, settings
from app.core.enums import Tier
from app.core.exceptions.types import InvalidApiKeyException, MissingApiKeyException
from app.core.utils import Clock

TIER_PREFIXES: dict[Tier, str] = {
    Tier.FREE: "free_",
    Tier.PRO: "pro_",
    Tier.ENTERPRISE: "ent_",
}

# Base-36, two 11-character segments
_TOKEN_ALPHABET = string.digits + string.ascii_lowercase
_TOKEN_SEGMENT_LENGTH = 11
_TOKEN_SEGMENTS = 2


@dataclass(frozen=True)
class ApiKeyRecord:
    key: str
    tier: Tier
    created_at: datetime


def classify_api_key(api_key: str | None) -> Tier:
    """
    Derive the tier of ``api_key`` from its prefix.

    ``ent_`` is enterprise, ``pro_`` is pro, anything else (including
    ``free_``) is free.

    Raises:
        MissingApiKeyException: If no key was supplied.
    """
    if not api_key:
        raise MissingApiKeyException(signup_url=settings.API_KEY_SIGNUP_URL)

    if api_key.startswith(TIER_PREFIXES[Tier.ENTERPRISE]):
        return Tier.ENTERPRISE
    if api_key.startswith(TIER_PREFIXES[Tier.PRO]):
        return Tier.PRO
    return Tier.FREE


def generate_api_key(tier: Tier = Tier.FREE) -> str:
    """Return a new random key carrying the prefix of ``tier``."""
    token = "".join(
        secrets.choice(_TOKEN_ALPHABET)
        for _ in range(_TOKEN_SEGMENT_LENGTH * _TOKEN_SEGMENTS)
    )
    return TIER_PREFIXES[tier] + token


class ApiKeyService:
    """
    Process-wide registry of issued test keys.

    Records live as long as the process and are never persisted or deleted.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        require_registered: bool | None = None,
    ):
        self._clock = clock or Clock()
        self.require_registered = (
            require_registered
            if require_registered is not None
            else settings.API_KEY_REQUIRE_REGISTERED
        )
        self._records: dict[str, ApiKeyRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def issue_key(self, tier: Tier = Tier.FREE) -> ApiKeyRecord:
        key = generate_api_key(tier)
        while key in self._records:
            key = generate_api_key(tier)

        record = ApiKeyRecord(key=key, tier=tier, created_at=self._clock.now())
        self._records[key] = record
        api_key_logger.info(f"Issued {tier.value} API key {key[:8]}...")
        return record

    def get(self, api_key: str) -> ApiKeyRecord | None:
        return self._records.get(api_key)

    def resolve(self, api_key: str | None) -> Tier:
        """
        Resolve the tier a request is served under.

        Prefix-only unless registry mode is on, in which case the key must
        have been issued here and its recorded tier wins.

        Raises:
            MissingApiKeyException: If no key was supplied.
            InvalidApiKeyException: In registry mode, for an unknown key.
        """
        tier = classify_api_key(api_key)
        if not self.require_registered:
            return tier

        record = self._records.get(api_key or "")
        if record is None:
            api_key_logger.warning(f"Rejected unregistered API key {(api_key or '')[:8]}...")
            raise InvalidApiKeyException()
        return record.tier
