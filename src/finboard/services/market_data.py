"""
# Market Data Service

This module fetches the data behind widgets from external market-data providers.

## Providers

| Id | Name | Endpoints |
|----|------|-----------|
| `alpha-vantage` | Alpha Vantage | `TIME_SERIES_DAILY`, `GLOBAL_QUOTE` |
| `finnhub` | Finnhub | `quote`, `stock/profile2` |
| `indian-api` | Indian Stock API (Mock) | `stock_price` |

Each adapter performs **one** request attempt and turns provider failures into
`MarketDataError` subclasses. Alpha Vantage reports some errors inside HTTP 200
bodies (`Note`, `Error Message`, `Information`); Finnhub reports them as an `error`
field or through status codes.

## Fetch Pipeline (`MarketDataService.fetch`)

1. **Cache**: a fresh cached response is returned immediately.
2. **Validation**: the provider must exist and every required parameter be present.
3. **Rate limit**: checked before every attempt; a refusal raises `RateLimitExceededError`.
4. **Retry**: the adapter is called up to `settings.MARKET_DATA_MAX_RETRIES` times with
   exponential backoff (`base_delay * 2**attempt`). Rate-limit and authentication
   errors are raised immediately. Every attempt is recorded with the limiter.
5. The result is cached.

## Error Mapping

| Exception | HTTP status |
|-----------|-------------|
| `InvalidRequestError` | 400 |
| `InvalidApiKeyError` | 401 |
| `ForbiddenError` | 403 |
| `UnknownProviderError` | 404 |
| `RateLimitExceededError` | 429 |
| `ProviderError` | 502 |
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

import httpx
from prometheus_client import Counter

from finboard.config import settings
from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import ApiConfig
from finboard.models.market_data_models import EndpointSpec, MarketDataResult, ProviderInfo
from finboard.services.rate_limiter import RateLimiter
from finboard.services.response_cache import ResponseCache, cache_key
from finboard.utils.api_key_validator import get_api_key, get_api_key_status, is_demo_key

logger = get_logger(prefix="[MarketData]")


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------


class MarketDataError(Exception):
    """Base class for market-data failures."""

    status_code = 502

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class ProviderError(MarketDataError):
    """The provider or the transport failed."""


class InvalidRequestError(MarketDataError):
    """Unknown endpoint or missing required parameter."""

    status_code = 400


class InvalidApiKeyError(MarketDataError):
    status_code = 401


class ForbiddenError(MarketDataError):
    status_code = 403


class UnknownProviderError(MarketDataError):
    status_code = 404


class RateLimitExceededError(MarketDataError):
    """A local limit or the provider refused the request for rate reasons."""

    status_code = 429

    def __init__(self, message: str, provider: Optional[str] = None, retry_after: Optional[int] = None):
        super().__init__(message, provider)
        self.retry_after = retry_after


NON_RETRYABLE = (RateLimitExceededError, InvalidApiKeyError, ForbiddenError, InvalidRequestError)


class MarketDataMetrics:
    """Prometheus counters for provider calls."""

    def __init__(self):
        self.requests = Counter(
            "finboard_market_data_requests_total",
            "Market-data fetches by provider and outcome",
            ["provider", "outcome"],
        )

    def record(self, provider: str, outcome: str):
        self.requests.labels(provider=provider, outcome=outcome).inc()


market_data_metrics = MarketDataMetrics()


# ----------------------------------------------------------------------
# Adapters
# ----------------------------------------------------------------------


class ProviderAdapter:
    """One market-data provider. Subclasses implement a single request attempt."""

    id: str = ""
    name: str = ""
    endpoints: List[EndpointSpec] = []

    def endpoint(self, value: str) -> Optional[EndpointSpec]:
        return next((spec for spec in self.endpoints if spec.value == value), None)

    def warn_if_demo_key(self):
        if is_demo_key(get_api_key(self.id)):
            logger.warning(f"{self.name}: using demo key, configure an API key for live data")

    async def fetch(self, client: httpx.AsyncClient, endpoint: str, params: Mapping[str, str]) -> Any:
        raise NotImplementedError

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.name} returned invalid JSON: {e}", self.id) from e


class AlphaVantageAdapter(ProviderAdapter):
    id = "alpha-vantage"
    name = "Alpha Vantage"
    endpoints = [
        EndpointSpec(label="Time Series Daily", value="TIME_SERIES_DAILY", params=["symbol"]),
        EndpointSpec(label="Global Quote", value="GLOBAL_QUOTE", params=["symbol"]),
    ]

    async def fetch(self, client: httpx.AsyncClient, endpoint: str, params: Mapping[str, str]) -> Any:
        query = {"function": endpoint, "apikey": get_api_key(self.id), **params}
        response = await client.get(settings.ALPHA_VANTAGE_BASE_URL, params=query)

        if response.status_code == 429:
            raise RateLimitExceededError("Rate limit exceeded. Try again later.", self.id)
        if response.is_error:
            raise ProviderError(f"API Error: {response.reason_phrase} ({response.status_code})", self.id)

        data = self._json(response)
        if isinstance(data, dict):
            note = data.get("Note")
            if isinstance(note, str) and "call frequency" in note:
                raise RateLimitExceededError(
                    "API Rate Limit Reached (5 calls/min). Please wait before retrying.", self.id
                )
            if data.get("Error Message"):
                raise InvalidRequestError(f"Invalid API Params or Key: {data['Error Message']}", self.id)
            if data.get("Information"):
                raise ProviderError(str(data["Information"]), self.id)
        return data


class FinnhubAdapter(ProviderAdapter):
    id = "finnhub"
    name = "Finnhub"
    endpoints = [
        EndpointSpec(label="Quote", value="quote", params=["symbol"]),
        EndpointSpec(label="Company Profile", value="stock/profile2", params=["symbol"]),
    ]

    async def fetch(self, client: httpx.AsyncClient, endpoint: str, params: Mapping[str, str]) -> Any:
        query = {"token": get_api_key(self.id), **params}
        response = await client.get(f"{settings.FINNHUB_BASE_URL}/{endpoint}", params=query)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            if retry_after and retry_after.isdigit():
                raise RateLimitExceededError(
                    f"Rate limit exceeded. Retry after {retry_after} seconds.", self.id, int(retry_after)
                )
            raise RateLimitExceededError("Rate limit exceeded. Try again later.", self.id)
        if response.status_code == 401:
            raise InvalidApiKeyError("Invalid API Key. Please check your Finnhub API key.", self.id)
        if response.status_code == 403:
            raise ForbiddenError("API access forbidden. Check your API key permissions.", self.id)
        if response.is_error:
            raise ProviderError(f"API Error: {response.reason_phrase} ({response.status_code})", self.id)

        data = self._json(response)
        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(f"Finnhub API Error: {data['error']}", self.id)
        return data


class IndianApiAdapter(ProviderAdapter):
    """Mock provider producing random quotes; there is no free public NSE API."""

    id = "indian-api"
    name = "Indian Stock API (Mock)"
    endpoints = [EndpointSpec(label="Stock Price", value="stock_price", params=["symbol"])]

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def warn_if_demo_key(self):
        pass

    async def fetch(self, client: httpx.AsyncClient, endpoint: str, params: Mapping[str, str]) -> Any:
        return {
            "symbol": params.get("symbol"),
            "price": f"{self._rng.uniform(100, 2100):.2f}",
            "change": f"{self._rng.uniform(-5, 5):.2f}%",
            "volume": self._rng.randrange(1_000_000),
            "marketCap": "1.5T",
        }


def default_adapters() -> Dict[str, ProviderAdapter]:
    adapters = [AlphaVantageAdapter(), FinnhubAdapter(), IndianApiAdapter()]
    return {adapter.id: adapter for adapter in adapters}


# ----------------------------------------------------------------------
# Service
# ----------------------------------------------------------------------


class MarketDataService:
    """
    Cached, rate-limited, retrying access to the provider adapters.

    Args:
        client: Shared async HTTP client.
        rate_limiter: Per-provider limiter.
        cache: Response cache.
        adapters: Adapters by provider id; the built-in set if omitted.
        max_retries: Attempts per fetch; defaults to `settings.MARKET_DATA_MAX_RETRIES`.
        base_delay: Backoff base in seconds; defaults to `settings.MARKET_DATA_RETRY_BASE_DELAY`.
        sleep: Awaitable sleep used between attempts.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        cache: ResponseCache,
        adapters: Optional[Dict[str, ProviderAdapter]] = None,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.client = client
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.adapters = adapters if adapters is not None else default_adapters()
        self.max_retries = settings.MARKET_DATA_MAX_RETRIES if max_retries is None else max_retries
        self.base_delay = settings.MARKET_DATA_RETRY_BASE_DELAY if base_delay is None else base_delay
        self._sleep = sleep

    def providers(self) -> List[ProviderInfo]:
        return [
            ProviderInfo(
                id=adapter.id,
                name=adapter.name,
                endpoints=adapter.endpoints,
                key_status=get_api_key_status(adapter.id),
                remaining=self.rate_limiter.remaining(adapter.id),
            )
            for adapter in self.adapters.values()
        ]

    def _resolve(self, api_config: ApiConfig) -> ProviderAdapter:
        adapter = self.adapters.get(api_config.provider)
        if adapter is None:
            raise UnknownProviderError(f"Unknown provider: {api_config.provider}", api_config.provider)

        spec = adapter.endpoint(api_config.endpoint)
        if spec is None:
            raise InvalidRequestError(f"Unknown endpoint for {adapter.name}: {api_config.endpoint}", adapter.id)
        missing = [name for name in spec.params if not api_config.params.get(name)]
        if missing:
            raise InvalidRequestError(f"Missing required parameters: {', '.join(missing)}", adapter.id)
        return adapter

    def _check_rate_limit(self, adapter: ProviderAdapter):
        decision = self.rate_limiter.can_make_request(adapter.id)
        if not decision.allowed:
            market_data_metrics.record(adapter.id, "rate_limited")
            message = decision.reason or "Rate limit exceeded"
            if decision.retry_after:
                message = f"{message}. Retry after {decision.retry_after}s"
            raise RateLimitExceededError(message, adapter.id, decision.retry_after)

    async def _fetch_with_retry(self, adapter: ProviderAdapter, api_config: ApiConfig) -> Any:
        last_error: Optional[MarketDataError] = None
        for attempt in range(self.max_retries):
            if attempt > 0:
                self._check_rate_limit(adapter)
            try:
                return await adapter.fetch(self.client, api_config.endpoint, api_config.params)
            except NON_RETRYABLE:
                raise
            except httpx.HTTPError as e:
                last_error = ProviderError(f"{adapter.name} request failed: {e}", adapter.id)
            except MarketDataError as e:
                last_error = e
            finally:
                self.rate_limiter.record_request(adapter.id)

            if attempt < self.max_retries - 1:
                delay = self.base_delay * 2**attempt
                logger.warning(
                    f"{adapter.name} attempt {attempt + 1}/{self.max_retries} failed: {last_error.message}. "
                    f"Retrying in {delay:.1f}s"
                )
                await self._sleep(delay)

        raise last_error

    async def fetch(self, api_config: ApiConfig) -> MarketDataResult:
        """
        Fetch data for a widget's API configuration.

        Args:
            api_config: Provider, endpoint and query parameters.

        Returns:
            MarketDataResult: The provider payload and whether it came from the cache.

        Raises:
            MarketDataError: A subclass describing the failure.
        """
        key = cache_key(api_config.provider, api_config.endpoint, api_config.params)
        cached = self.cache.get(key)
        if cached is not None:
            market_data_metrics.record(api_config.provider, "cache_hit")
            return MarketDataResult(
                provider=api_config.provider,
                endpoint=api_config.endpoint,
                params=api_config.params,
                cached=True,
                data=cached,
            )

        adapter = self._resolve(api_config)
        adapter.warn_if_demo_key()

        self._check_rate_limit(adapter)

        try:
            data = await self._fetch_with_retry(adapter, api_config)
        except MarketDataError as e:
            market_data_metrics.record(adapter.id, "error")
            logger.error(f"{adapter.name} {api_config.endpoint} failed: {e.message}")
            raise

        market_data_metrics.record(adapter.id, "success")
        self.cache.set(key, data)
        return MarketDataResult(
            provider=adapter.id,
            endpoint=api_config.endpoint,
            params=api_config.params,
            cached=False,
            data=data,
        )
