"""
Pytest configuration and core fixtures.

Every test gets its own ``ServiceState`` built on a frozen clock and a
CoinGecko client whose ``fetch_prices`` is an ``AsyncMock``, so no test
touches the network or shares counters with another test.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient


SAMPLE_PRICES = {
    "bitcoin": {
        "usd": 67250.0,
        "usd_market_cap": 1324000000000.0,
        "usd_24h_vol": 28500000000.0,
        "usd_24h_change": 1.42,
    },
    "ethereum": {
        "usd": 3150.5,
        "usd_market_cap": 378000000000.0,
        "usd_24h_vol": 14200000000.0,
        "usd_24h_change": -0.87,
    },
}


def pytest_configure(config):
    """Configure pytest with custom settings."""
    os.environ["ENVIRONMENT"] = "test"
    os.environ.setdefault("SENTRY_DSN", "")


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def sample_prices() -> dict:
    return {asset: dict(quote) for asset, quote in SAMPLE_PRICES.items()}


@pytest.fixture
def mock_coingecko(sample_prices):
    """CoinGecko client with a mocked upstream call."""
    from app.apps.price_api.services.coingecko import CoinGeckoClient

    client = CoinGeckoClient(base_url="https://coingecko.test/api/v3", timeout=10.0)

    async def fake_fetch(ids: str) -> dict:
        return {
            asset_id: sample_prices[asset_id]
            for asset_id in ids.split(",")
            if asset_id in sample_prices
        }

    client.fetch_prices = AsyncMock(side_effect=fake_fetch)
    client.init = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def test_settings():
    """Copy of the global settings, safe to mutate per test."""
    from app.core.config import settings

    return settings.model_copy()


@pytest.fixture
def services(test_settings, clock, mock_coingecko):
    from app.apps.price_api.state import build_state

    return build_state(config=test_settings, clock=clock, coingecko=mock_coingecko)


@pytest.fixture
def test_app(services) -> FastAPI:
    from app.main import create_app

    return create_app(services)


@pytest.fixture
def client(test_app) -> TestClient:
    """Test client for synchronous requests."""
    return TestClient(test_app)


@pytest.fixture
async def async_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Async test client for asynchronous requests."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def api_headers() -> dict[str, str]:
    return {"x-api-key": "free_testkey1234567890"}
