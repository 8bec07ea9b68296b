"""
# Market Data Routes

| Method | Path | Behaviour |
|--------|------|-----------|
| GET | `/market-data/providers` | Providers, endpoints, key status and remaining quota |
| POST | `/market-data/fetch` | Fetch data for a widget's API configuration |

`MarketDataError`s are translated to their HTTP status. Rate-limit refusals carry a
`Retry-After` header when the wait is known.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import ApiConfig
from finboard.models.market_data_models import MarketDataResult, ProviderInfo
from finboard.routes.dependencies import get_market_data_service
from finboard.services.market_data import MarketDataError, MarketDataService, RateLimitExceededError

logger = get_logger(prefix="[MarketDataRoutes]")

router = APIRouter(prefix="/market-data", tags=["market-data"])


@router.get("/providers", response_model=List[ProviderInfo])
async def list_providers(service: MarketDataService = Depends(get_market_data_service)):
    return service.providers()


@router.post("/fetch", response_model=MarketDataResult)
async def fetch_market_data(
    api_config: ApiConfig,
    service: MarketDataService = Depends(get_market_data_service),
):
    """
    Fetch provider data through the cache, rate limiter and retry pipeline.

    Args:
        api_config (ApiConfig): Provider, endpoint and parameters.

    Returns:
        MarketDataResult: Provider payload, flagged when served from the cache.

    Raises:
        HTTPException: With the status of the underlying `MarketDataError`.
    """
    try:
        return await service.fetch(api_config)
    except RateLimitExceededError as e:
        headers = {"Retry-After": str(e.retry_after)} if e.retry_after else None
        raise HTTPException(status_code=e.status_code, detail=e.message, headers=headers)
    except MarketDataError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
