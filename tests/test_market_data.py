"""Tests for the market-data adapters and fetch pipeline."""

import random

import httpx
import pytest

from finboard.models.dashboard_models import ApiConfig
from finboard.services.market_data import (
    ForbiddenError,
    IndianApiAdapter,
    InvalidApiKeyError,
    InvalidRequestError,
    MarketDataService,
    ProviderError,
    RateLimitExceededError,
    UnknownProviderError,
    default_adapters,
)
from finboard.services.rate_limiter import RateLimitConfig, RateLimiter
from finboard.services.response_cache import ResponseCache


class Provider:
    """Scripted HTTP provider for `httpx.MockTransport`."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def delays():
    return []


@pytest.fixture
def make_service(clock, delays):
    def _make(provider, limits=None):
        async def record_sleep(delay):
            delays.append(delay)

        client = httpx.AsyncClient(transport=httpx.MockTransport(provider))
        adapters = default_adapters()
        adapters["indian-api"] = IndianApiAdapter(rng=random.Random(1))
        return MarketDataService(
            client=client,
            rate_limiter=RateLimiter(limits=limits, clock=clock),
            cache=ResponseCache(ttl_seconds=300, clock=clock),
            adapters=adapters,
            max_retries=3,
            base_delay=1.0,
            sleep=record_sleep,
        )

    return _make


QUOTE = ApiConfig(provider="finnhub", endpoint="quote", params={"symbol": "AAPL"})
DAILY = ApiConfig(provider="alpha-vantage", endpoint="TIME_SERIES_DAILY", params={"symbol": "IBM"})


@pytest.mark.asyncio
async def test_finnhub_quote_is_fetched_and_cached(make_service):
    provider = Provider(httpx.Response(200, json={"c": 189.5}))
    service = make_service(provider)

    first = await service.fetch(QUOTE)
    second = await service.fetch(QUOTE)

    assert first.data == {"c": 189.5}
    assert not first.cached
    assert second.cached
    assert len(provider.requests) == 1
    request = provider.requests[0]
    assert request.url.path == "/api/v1/quote"
    assert request.url.params["symbol"] == "AAPL"
    assert "token" in request.url.params


@pytest.mark.asyncio
async def test_finnhub_rate_limit_is_not_retried(make_service, delays):
    provider = Provider(httpx.Response(429, headers={"Retry-After": "30"}))
    service = make_service(provider)

    with pytest.raises(RateLimitExceededError) as exc_info:
        await service.fetch(QUOTE)

    assert exc_info.value.retry_after == 30
    assert exc_info.value.status_code == 429
    assert len(provider.requests) == 1
    assert delays == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status, error", [(401, InvalidApiKeyError), (403, ForbiddenError)])
async def test_finnhub_auth_errors_are_not_retried(make_service, status, error):
    provider = Provider(httpx.Response(status))
    service = make_service(provider)

    with pytest.raises(error):
        await service.fetch(QUOTE)
    assert len(provider.requests) == 1


@pytest.mark.asyncio
async def test_finnhub_error_body(make_service):
    service = make_service(Provider(httpx.Response(200, json={"error": "Symbol not supported"})))

    with pytest.raises(ProviderError, match="Symbol not supported"):
        await service.fetch(QUOTE)


@pytest.mark.asyncio
async def test_server_errors_are_retried_with_backoff(make_service, delays):
    provider = Provider(httpx.Response(500), httpx.Response(502), httpx.Response(200, json={"c": 1}))
    service = make_service(provider)

    result = await service.fetch(QUOTE)

    assert result.data == {"c": 1}
    assert len(provider.requests) == 3
    assert delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_retries_exhausted_raise_last_error(make_service, delays):
    provider = Provider(httpx.ConnectError("connection refused"))
    service = make_service(provider)

    with pytest.raises(ProviderError, match="connection refused"):
        await service.fetch(QUOTE)

    assert len(provider.requests) == 3
    assert delays == [1.0, 2.0]
    assert service.rate_limiter.remaining("finnhub").per_minute is None


@pytest.mark.asyncio
async def test_attempts_are_recorded_with_the_limiter(make_service):
    provider = Provider(httpx.Response(500), httpx.Response(200, json={"c": 1}))
    service = make_service(provider, limits={"finnhub": RateLimitConfig(requests_per_minute=10)})

    await service.fetch(QUOTE)

    assert service.rate_limiter.remaining("finnhub").per_minute == 8


@pytest.mark.asyncio
async def test_local_rate_limit_blocks_before_request(make_service):
    provider = Provider(httpx.Response(200, json={"c": 1}))
    service = make_service(provider, limits={"finnhub": RateLimitConfig(requests_per_minute=1)})

    await service.fetch(QUOTE)
    with pytest.raises(RateLimitExceededError, match="Retry after 60s"):
        await service.fetch(ApiConfig(provider="finnhub", endpoint="quote", params={"symbol": "MSFT"}))

    assert len(provider.requests) == 1


@pytest.mark.asyncio
async def test_retries_stop_when_local_rate_limit_is_reached(make_service, delays):
    provider = Provider(httpx.Response(500), httpx.Response(500), httpx.Response(200, json={"c": 1}))
    service = make_service(provider, limits={"finnhub": RateLimitConfig(requests_per_minute=2)})

    with pytest.raises(RateLimitExceededError, match="Rate limit: 2 requests per minute"):
        await service.fetch(QUOTE)

    assert len(provider.requests) == 2
    assert service.rate_limiter.remaining("finnhub").per_minute == 0


@pytest.mark.asyncio
async def test_alpha_vantage_request_shape(make_service):
    provider = Provider(httpx.Response(200, json={"Time Series (Daily)": {}}))
    service = make_service(provider)

    await service.fetch(DAILY)

    params = provider.requests[0].url.params
    assert params["function"] == "TIME_SERIES_DAILY"
    assert params["symbol"] == "IBM"
    assert "apikey" in params


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, error, attempts",
    [
        ({"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."}, RateLimitExceededError, 1),
        ({"Error Message": "Invalid API call."}, InvalidRequestError, 1),
        ({"Information": "Premium endpoint."}, ProviderError, 3),
    ],
)
async def test_alpha_vantage_soft_errors(make_service, body, error, attempts):
    provider = Provider(httpx.Response(200, json=body))
    service = make_service(provider)

    with pytest.raises(error):
        await service.fetch(DAILY)
    assert len(provider.requests) == attempts


@pytest.mark.asyncio
async def test_invalid_json_is_a_provider_error(make_service):
    service = make_service(Provider(httpx.Response(200, text="<html>")))
    with pytest.raises(ProviderError, match="invalid JSON"):
        await service.fetch(QUOTE)


@pytest.mark.asyncio
async def test_unknown_provider(make_service):
    service = make_service(Provider(httpx.Response(200, json={})))
    with pytest.raises(UnknownProviderError) as exc_info:
        await service.fetch(ApiConfig(provider="bloomberg", endpoint="quote"))
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "api_config",
    [
        ApiConfig(provider="finnhub", endpoint="quote"),
        ApiConfig(provider="finnhub", endpoint="candles", params={"symbol": "AAPL"}),
    ],
)
async def test_invalid_requests_never_reach_provider(make_service, api_config):
    provider = Provider(httpx.Response(200, json={}))
    service = make_service(provider)

    with pytest.raises(InvalidRequestError):
        await service.fetch(api_config)
    assert provider.requests == []


@pytest.mark.asyncio
async def test_indian_mock_provider(make_service):
    provider = Provider(httpx.Response(500))
    service = make_service(provider)

    result = await service.fetch(ApiConfig(provider="indian-api", endpoint="stock_price", params={"symbol": "TCS"}))

    assert result.data["symbol"] == "TCS"
    assert set(result.data) == {"symbol", "price", "change", "volume", "marketCap"}
    assert provider.requests == []


def test_providers_listing(make_service):
    service = make_service(Provider(httpx.Response(200, json={})))

    providers = {info.id: info for info in service.providers()}

    assert set(providers) == {"alpha-vantage", "finnhub", "indian-api"}
    assert [e.value for e in providers["finnhub"].endpoints] == ["quote", "stock/profile2"]
    assert providers["alpha-vantage"].key_status.provider == "alpha-vantage"
