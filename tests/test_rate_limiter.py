"""Tests for the per-provider rate limiter."""

import pytest

from finboard.config import settings
from finboard.services.rate_limiter import RateLimitConfig, RateLimiter


@pytest.fixture
def limiter(clock):
    return RateLimiter(
        limits={"alpha-vantage": RateLimitConfig(requests_per_minute=2, requests_per_day=3)},
        clock=clock,
        day_start=lambda now: now - now % 86400,
    )


def test_unconfigured_provider_is_always_allowed(limiter):
    for _ in range(100):
        limiter.record_request("unknown")
    assert limiter.can_make_request("unknown").allowed
    assert limiter.remaining("unknown").per_minute is None


def test_per_minute_limit_with_retry_after(limiter, clock):
    limiter.record_request("alpha-vantage")
    clock.advance(20)
    limiter.record_request("alpha-vantage")

    decision = limiter.can_make_request("alpha-vantage")

    assert not decision.allowed
    assert decision.reason == "Rate limit: 2 requests per minute"
    assert decision.retry_after == 40


def test_window_slides(limiter, clock):
    limiter.record_request("alpha-vantage")
    limiter.record_request("alpha-vantage")
    clock.advance(60.5)

    assert limiter.can_make_request("alpha-vantage").allowed
    assert limiter.remaining("alpha-vantage").per_minute == 2


def test_daily_quota(limiter, clock):
    for _ in range(3):
        limiter.record_request("alpha-vantage")
        clock.advance(61)

    decision = limiter.can_make_request("alpha-vantage")

    assert not decision.allowed
    assert decision.reason == "Daily quota exceeded: 3 requests per day"
    assert decision.retry_after is None
    assert limiter.remaining("alpha-vantage").per_day == 0


def test_daily_quota_resets_next_day(limiter, clock):
    for _ in range(3):
        limiter.record_request("alpha-vantage")
        clock.advance(61)

    clock.advance(86400)

    assert limiter.can_make_request("alpha-vantage").allowed
    assert limiter.remaining("alpha-vantage").per_day == 3


def test_reset(limiter):
    limiter.record_request("alpha-vantage")
    limiter.record_request("alpha-vantage")
    limiter.reset("alpha-vantage")
    assert limiter.can_make_request("alpha-vantage").allowed

    limiter.record_request("alpha-vantage")
    limiter.reset()
    assert limiter.remaining("alpha-vantage").per_minute == 2


def test_from_settings_configures_builtin_providers(clock):
    limiter = RateLimiter.from_settings(clock=clock)

    assert limiter.remaining("alpha-vantage").per_minute == settings.ALPHA_VANTAGE_REQUESTS_PER_MINUTE
    assert limiter.remaining("finnhub").per_day == settings.FINNHUB_REQUESTS_PER_DAY
    assert limiter.remaining("indian-api").per_day is None
