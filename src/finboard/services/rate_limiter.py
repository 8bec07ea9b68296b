"""
# Rate Limiter

Per-provider request limiting for the market-data adapters.

## Model

Every provider has a per-minute limit and an optional per-day quota:

- **Minute window**: timestamps of recent requests; entries older than 60 seconds are
  discarded before each check. When full, the decision carries `retry_after`, the
  seconds until the oldest request leaves the window.
- **Daily quota**: a counter reset when a new day starts.

Providers without a configured limit are always allowed.

The limiter is constructed explicitly and injected where it is needed, so tests can
build their own with a fake clock instead of sharing process-wide state.

## Usage Example

```python
limiter = RateLimiter.from_settings()
decision = limiter.can_make_request("alpha-vantage")
if decision.allowed:
    limiter.record_request("alpha-vantage")
```
"""

from dataclasses import dataclass, field
from datetime import datetime
import math
import time
from typing import Callable, Dict, List, Optional

from finboard.config import settings
from finboard.managers.logging_manager import get_logger
from finboard.models.market_data_models import RateLimitDecision, RemainingRequests

logger = get_logger(prefix="[RateLimiter]")

MINUTE_SECONDS = 60.0
DAY_SECONDS = 86400.0


@dataclass
class RateLimitConfig:
    requests_per_minute: int
    requests_per_day: Optional[int] = None


@dataclass
class _ProviderState:
    requests: List[float] = field(default_factory=list)
    daily_requests: int = 0
    day_start: float = 0.0


def _start_of_day(now: float) -> float:
    midnight = datetime.fromtimestamp(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.timestamp()


class RateLimiter:
    """
    Sliding one-minute window plus daily quota, per provider.

    Args:
        limits: Limit configuration by provider id.
        clock: Returns the current time in epoch seconds.
        day_start: Maps a timestamp to the start of its day.
    """

    def __init__(
        self,
        limits: Optional[Dict[str, RateLimitConfig]] = None,
        clock: Callable[[], float] = time.time,
        day_start: Callable[[float], float] = _start_of_day,
    ):
        self._limits: Dict[str, RateLimitConfig] = dict(limits or {})
        self._states: Dict[str, _ProviderState] = {}
        self._clock = clock
        self._day_start = day_start

    @classmethod
    def from_settings(cls, clock: Callable[[], float] = time.time) -> "RateLimiter":
        """Limiter with the configured limits of the built-in providers."""
        return cls(
            limits={
                "alpha-vantage": RateLimitConfig(
                    settings.ALPHA_VANTAGE_REQUESTS_PER_MINUTE, settings.ALPHA_VANTAGE_REQUESTS_PER_DAY
                ),
                "finnhub": RateLimitConfig(settings.FINNHUB_REQUESTS_PER_MINUTE, settings.FINNHUB_REQUESTS_PER_DAY),
                "indian-api": RateLimitConfig(settings.INDIAN_API_REQUESTS_PER_MINUTE),
            },
            clock=clock,
        )

    def set_limit(self, provider: str, config: RateLimitConfig):
        self._limits[provider] = config

    def _state(self, provider: str) -> _ProviderState:
        state = self._states.get(provider)
        if state is None:
            state = _ProviderState(day_start=self._day_start(self._clock()))
            self._states[provider] = state
        return state

    def _cleanup(self, provider: str) -> _ProviderState:
        state = self._state(provider)
        now = self._clock()
        state.requests = [ts for ts in state.requests if ts > now - MINUTE_SECONDS]
        if now >= state.day_start + DAY_SECONDS:
            state.daily_requests = 0
            state.day_start = self._day_start(now)
        return state

    def can_make_request(self, provider: str) -> RateLimitDecision:
        """Check whether a request to `provider` fits in its limits right now."""
        config = self._limits.get(provider)
        if config is None:
            return RateLimitDecision(allowed=True)

        state = self._cleanup(provider)

        if len(state.requests) >= config.requests_per_minute:
            retry_after = math.ceil(state.requests[0] + MINUTE_SECONDS - self._clock())
            logger.warning(f"{provider}: per-minute limit of {config.requests_per_minute} reached")
            return RateLimitDecision(
                allowed=False,
                reason=f"Rate limit: {config.requests_per_minute} requests per minute",
                retry_after=max(0, retry_after),
            )

        if config.requests_per_day is not None and state.daily_requests >= config.requests_per_day:
            logger.warning(f"{provider}: daily quota of {config.requests_per_day} exhausted")
            return RateLimitDecision(
                allowed=False,
                reason=f"Daily quota exceeded: {config.requests_per_day} requests per day",
            )

        return RateLimitDecision(allowed=True)

    def record_request(self, provider: str):
        """Count one request attempt against `provider`."""
        state = self._cleanup(provider)
        state.requests.append(self._clock())
        state.daily_requests += 1

    def remaining(self, provider: str) -> RemainingRequests:
        config = self._limits.get(provider)
        if config is None:
            return RemainingRequests()

        state = self._cleanup(provider)
        return RemainingRequests(
            per_minute=max(0, config.requests_per_minute - len(state.requests)),
            per_day=(
                max(0, config.requests_per_day - state.daily_requests)
                if config.requests_per_day is not None
                else None
            ),
        )

    def reset(self, provider: Optional[str] = None):
        """Forget recorded requests for one provider, or for all of them."""
        if provider is None:
            self._states.clear()
        else:
            self._states.pop(provider, None)
