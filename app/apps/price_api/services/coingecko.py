from typing import Any

import httpx

from app.core.config import coingecko_logger, settings
from app.core.exceptions.types import UpstreamException


class CoinGeckoClient:
    """
    Client for the CoinGecko ``/simple/price`` endpoint.

    Stateless with respect to caching: callers decide what to do with the
    payload. One ``httpx.AsyncClient`` is reused across calls; it is created
    on first use and released by ``aclose()``.
    """

    SIMPLE_PRICE_PATH: str = "/simple/price"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        api_key: str | None = None,
        api_key_header: str | None = None,
    ):
        self.base_url = base_url or settings.COINGECKO_BASE_URL
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self._api_key = api_key if api_key is not None else settings.COINGECKO_API_KEY
        self._api_key_header = api_key_header or settings.COINGECKO_API_KEY_HEADER
        self._client: httpx.AsyncClient | None = None

    def _init_client(self) -> httpx.AsyncClient:
        """Return the HTTP client, creating it on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self._headers(),
            )
            coingecko_logger.info("CoinGecko HTTP client initialized")
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if it was opened."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None
                coingecko_logger.info("CoinGecko HTTP client closed")

    async def init(self) -> None:
        """(Re)open the HTTP client, closing any existing one first."""
        await self.aclose()
        self._init_client()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers[self._api_key_header] = self._api_key
        return headers

    @staticmethod
    def _price_params(ids: str) -> dict[str, str]:
        return {
            "ids": ids,
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_market_cap": "true",
            "include_24hr_vol": "true",
        }

    async def fetch_prices(self, ids: str) -> dict[str, Any]:
        """
        Fetch USD price, 24h change, market cap and 24h volume for ``ids``.

        Args:
            ids: Comma-separated CoinGecko asset ids, e.g. ``"bitcoin,ethereum"``.

        Returns:
            The provider's JSON body, mapping asset id to its quote. Ids the
            provider does not know are simply absent.

        Raises:
            UpstreamException: On timeout, transport error, non-2xx status or
                a body that is not a JSON object.
        """
        client = self._init_client()

        try:
            response = await client.get(
                self.SIMPLE_PRICE_PATH, params=self._price_params(ids)
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            message = f"timeout of {int(self.timeout * 1000)}ms exceeded"
            coingecko_logger.error(f"Error fetching prices for '{ids}': {message}")
            raise UpstreamException(message) from e
        except httpx.HTTPStatusError as e:
            upstream_status = e.response.status_code
            message = f"Request failed with status code {upstream_status}"
            coingecko_logger.error(f"Error fetching prices for '{ids}': {message}")
            raise UpstreamException(message, upstream_status=upstream_status) from e
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            coingecko_logger.error(f"Error fetching prices for '{ids}': {message}")
            raise UpstreamException(message) from e
        except ValueError as e:
            coingecko_logger.error(
                f"Error fetching prices for '{ids}': invalid JSON body ({e})"
            )
            raise UpstreamException("Price provider returned an invalid response") from e

        if not isinstance(data, dict):
            coingecko_logger.error(
                f"Error fetching prices for '{ids}': expected an object, got {type(data).__name__}"
            )
            raise UpstreamException("Price provider returned an invalid response")

        coingecko_logger.info(f"Fetched prices for '{ids}' ({len(data)} assets)")
        return data
