"""
FastAPI dependencies for the dashboard and market-data routes.

The application lifespan stores one `DashboardSession` and one `MarketDataService`
on `app.state`; routes receive them through `Depends`.
"""

from fastapi import HTTPException, Request

from finboard.services.dashboard_service import DashboardSession
from finboard.services.market_data import MarketDataService


def get_dashboard_session(request: Request) -> DashboardSession:
    session = getattr(request.app.state, "dashboard_session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Dashboard session not initialized")
    return session


def get_market_data_service(request: Request) -> MarketDataService:
    service = getattr(request.app.state, "market_data_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Market data service not initialized")
    return service
