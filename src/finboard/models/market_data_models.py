"""
# Market Data Models

Data structures shared by the market-data collaborators: provider metadata,
API key status, rate-limit decisions and fetch results.

These collaborators only feed widgets with data. None of them takes part in grid
placement.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EndpointSpec(BaseModel):
    """An endpoint a provider adapter can query."""

    label: str = Field(..., description="Human-readable endpoint name")
    value: str = Field(..., description="Endpoint id sent to the provider")
    params: List[str] = Field(default_factory=list, description="Required query parameters")


class ApiKeyStatus(BaseModel):
    """Configuration status of a provider's API key."""

    provider: str
    is_valid: bool
    is_demo: bool
    message: Optional[str] = None


class RateLimitDecision(BaseModel):
    """Outcome of a rate-limit check."""

    allowed: bool
    reason: Optional[str] = None
    retry_after: Optional[int] = Field(None, ge=0, description="Seconds until a slot frees up")


class RemainingRequests(BaseModel):
    """Requests left in the current minute and day; `None` means unlimited."""

    per_minute: Optional[int] = None
    per_day: Optional[int] = None


class ProviderInfo(BaseModel):
    """Provider metadata returned by `GET /market-data/providers`."""

    id: str
    name: str
    endpoints: List[EndpointSpec]
    key_status: ApiKeyStatus
    remaining: RemainingRequests


class MarketDataResult(BaseModel):
    """Payload returned by `POST /market-data/fetch`."""

    provider: str
    endpoint: str
    params: Dict[str, str] = Field(default_factory=dict)
    cached: bool = False
    data: Any = None
