"""
# Finboard - Main Application Module

Entry point of the Finboard API: builds the FastAPI application, wires the routers and
owns the lifecycle of the per-process components.

## Lifespan

**Startup:**
1. **Store**: a `DashboardStore` at `settings.DASHBOARD_STORAGE_PATH` (or the path given
   to `create_app`).
2. **Session**: a `DashboardSession` restored from the store. Corrupt or missing files
   yield an empty dashboard.
3. **Market data**: one shared `httpx.AsyncClient`, a `RateLimiter`, a `ResponseCache`
   and the `MarketDataService` built from them.

**Shutdown:** the HTTP client is closed.

Everything is stored on `app.state` and reaches the routes through dependencies, so
each application instance (and each test) gets its own components.

## Endpoints

- `/dashboard/*`: dashboard session (see `finboard.routes.dashboard.routes`)
- `/market-data/*`: provider data (see `finboard.routes.market_data.routes`)
- `/health`: liveness and widget count
- `/metrics`: Prometheus scrape endpoint

## Running

```bash
uvicorn finboard.main:app --host 127.0.0.1 --port 8000
```
"""

from contextlib import asynccontextmanager
from pathlib import Path
import time
from typing import Optional, Union

from fastapi import FastAPI
import httpx
from prometheus_fastapi_instrumentator import Instrumentator
import uvicorn

from finboard import __version__
from finboard.config import settings
from finboard.managers.logging_manager import get_logger
from finboard.routes.dashboard.routes import router as dashboard_router
from finboard.routes.market_data.routes import router as market_data_router
from finboard.services.dashboard_service import DashboardSession
from finboard.services.dashboard_store import DashboardStore
from finboard.services.market_data import MarketDataService
from finboard.services.rate_limiter import RateLimiter
from finboard.services.response_cache import ResponseCache

logger = get_logger(prefix="[Main]")


def create_app(storage_path: Optional[Union[str, Path]] = None) -> FastAPI:
    """
    Build the Finboard application.

    Args:
        storage_path: Dashboard file; defaults to `settings.DASHBOARD_STORAGE_PATH`.

    Returns:
        FastAPI: The configured application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        startup_start_time = time.time()
        logger.info(f"Starting Finboard {__version__} ({'production' if settings.is_production else 'development'})")

        store = DashboardStore(storage_path or settings.DASHBOARD_STORAGE_PATH)
        session = DashboardSession(store=store)
        session.restore()

        client = httpx.AsyncClient(timeout=settings.MARKET_DATA_TIMEOUT_SECONDS)
        app.state.dashboard_session = session
        app.state.market_data_service = MarketDataService(
            client=client,
            rate_limiter=RateLimiter.from_settings(),
            cache=ResponseCache(),
        )

        logger.info(
            f"Startup completed in {time.time() - startup_start_time:.3f}s "
            f"with {session.widget_count} widgets from {store.path}"
        )
        try:
            yield
        finally:
            await client.aclose()
            logger.info("Finboard shutdown completed")

    app = FastAPI(
        title="Finboard API",
        description="Personal finance dashboard builder: widgets on a responsive grid backed by market data.",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
        openapi_tags=[
            {"name": "dashboard", "description": "Widgets, layouts, themes, import/export and templates"},
            {"name": "market-data", "description": "Provider metadata and data fetching"},
        ],
    )

    app.include_router(dashboard_router)
    app.include_router(market_data_router)

    @app.get("/health", tags=["health"])
    async def health():
        session: Optional[DashboardSession] = getattr(app.state, "dashboard_session", None)
        return {
            "status": "ok",
            "version": __version__,
            "widgets": session.widget_count if session is not None else 0,
        }

    instrumentator = Instrumentator(should_group_status_codes=True, should_ignore_untemplated=True)
    instrumentator.instrument(app).expose(app, include_in_schema=False, endpoint="/metrics")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("finboard.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG, log_level="info")
