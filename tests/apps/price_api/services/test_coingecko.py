"""
Test suite for the CoinGecko client.

The underlying ``httpx.AsyncClient.get`` is mocked; responses are real
``httpx.Response`` objects so status and JSON handling run unmodified.

Run tests:
    pytest tests/apps/price_api/services/test_coingecko.py -v
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from app.apps.price_api.services.coingecko import CoinGeckoClient
from app.core.exceptions.types import UpstreamException

BASE_URL = "https://coingecko.test/api/v3"


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(
        status_code,
        request=httpx.Request("GET", f"{BASE_URL}/simple/price"),
        **kwargs,
    )


@pytest.fixture
async def coingecko():
    client = CoinGeckoClient(base_url=BASE_URL, timeout=10.0, api_key="")
    yield client
    await client.aclose()


class TestClientLifecycle:

    @pytest.mark.asyncio
    async def test_client_created_lazily(self, coingecko):
        assert coingecko._client is None

        http_client = coingecko._init_client()

        assert isinstance(http_client, httpx.AsyncClient)
        assert coingecko._init_client() is http_client
        assert str(http_client.base_url).rstrip("/") == BASE_URL

    @pytest.mark.asyncio
    async def test_init_replaces_existing_client(self, coingecko):
        first = coingecko._init_client()

        await coingecko.init()

        assert coingecko._client is not None
        assert coingecko._client is not first
        assert first.is_closed

    @pytest.mark.asyncio
    async def test_aclose(self, coingecko):
        http_client = coingecko._init_client()

        await coingecko.aclose()

        assert coingecko._client is None
        assert http_client.is_closed

    @pytest.mark.asyncio
    async def test_aclose_without_client_is_noop(self, coingecko):
        await coingecko.aclose()

        assert coingecko._client is None

    def test_timeout_applied(self):
        client = CoinGeckoClient(base_url=BASE_URL, timeout=2.5)

        http_client = client._init_client()

        assert http_client.timeout.read == 2.5

    def test_api_key_header_only_when_configured(self):
        without_key = CoinGeckoClient(base_url=BASE_URL, api_key="")
        with_key = CoinGeckoClient(
            base_url=BASE_URL, api_key="cg-secret", api_key_header="x-cg-pro-api-key"
        )

        assert "x-cg-pro-api-key" not in without_key._headers()
        assert with_key._headers()["x-cg-pro-api-key"] == "cg-secret"


class TestFetchPrices:

    @pytest.mark.asyncio
    async def test_returns_body_unmodified(self, coingecko, sample_prices):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(return_value=_response(200, json=sample_prices))

        result = await coingecko.fetch_prices("bitcoin,ethereum")

        assert result == sample_prices

    @pytest.mark.asyncio
    async def test_sends_price_query(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(return_value=_response(200, json={}))

        await coingecko.fetch_prices("bitcoin")

        http_client.get.assert_awaited_once()
        path = http_client.get.call_args.args[0]
        params = http_client.get.call_args.kwargs["params"]
        assert path == "/simple/price"
        assert params == {
            "ids": "bitcoin",
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_market_cap": "true",
            "include_24hr_vol": "true",
        }

    @pytest.mark.asyncio
    async def test_unknown_ids_give_empty_object(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(return_value=_response(200, json={}))

        assert await coingecko.fetch_prices("doesnotexist") == {}

    @pytest.mark.asyncio
    async def test_timeout(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        with patch("app.apps.price_api.services.coingecko.coingecko_logger") as mock_logger:
            with pytest.raises(UpstreamException) as exc_info:
                await coingecko.fetch_prices("bitcoin")

        assert exc_info.value.message == "timeout of 10000ms exceeded"
        assert exc_info.value.error == "Failed to fetch prices"
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_non_2xx_status(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(
            return_value=_response(429, json={"status": {"error_code": 429}})
        )

        with pytest.raises(UpstreamException) as exc_info:
            await coingecko.fetch_prices("bitcoin")

        assert exc_info.value.message == "Request failed with status code 429"
        assert exc_info.value.upstream_status == 429

    @pytest.mark.asyncio
    async def test_transport_error(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(
            side_effect=httpx.ConnectError("getaddrinfo ENOTFOUND api.coingecko.com")
        )

        with pytest.raises(UpstreamException) as exc_info:
            await coingecko.fetch_prices("bitcoin")

        assert exc_info.value.message == "getaddrinfo ENOTFOUND api.coingecko.com"

    @pytest.mark.asyncio
    async def test_invalid_json(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(return_value=_response(200, content=b"<html>"))

        with pytest.raises(UpstreamException) as exc_info:
            await coingecko.fetch_prices("bitcoin")

        assert exc_info.value.message == "Price provider returned an invalid response"

    @pytest.mark.asyncio
    async def test_non_object_body(self, coingecko):
        http_client = coingecko._init_client()
        http_client.get = AsyncMock(return_value=_response(200, json=["bitcoin"]))

        with pytest.raises(UpstreamException):
            await coingecko.fetch_prices("bitcoin")
