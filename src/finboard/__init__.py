"""
# Finboard

A **FastAPI service for building personal finance dashboards**: users add widgets (cards,
tables, charts) backed by market-data queries, arrange them on a responsive grid and
persist the arrangement.

## Architecture Overview

```
┌──────────────────────────────────────────────────────────┐
│                 FastAPI (finboard.main)                   │
│   /dashboard/*          /market-data/*        /metrics    │
├──────────────────────────────────────────────────────────┤
│  DashboardSession                 MarketDataService       │
│   ├─ Placement planner             ├─ RateLimiter         │
│   ├─ Overlap resolver              ├─ ResponseCache       │
│   ├─ Layout reconciler + gate      └─ Provider adapters   │
│   └─ DashboardStore (JSON file)        (httpx)            │
└──────────────────────────────────────────────────────────┘
```

## Grid Engine

The core of the package keeps widget rectangles consistent across three breakpoints
(`lg` 12 columns, `md` 10, `sm` 6):

- **`services.grid_collision`**: half-open rectangle overlap test.
- **`services.placement_planner`**: first-fit position for a new widget.
- **`services.overlap_resolver`**: repair of loaded or imported layouts.
- **`services.layout_reconciler`**: validation and diffing of grid-surface events.

## Package Structure

- **`config`**: pydantic-settings configuration
- **`managers`**: logging
- **`models`**: pydantic data models
- **`routes`**: FastAPI routers and template data
- **`services`**: grid engine, dashboard session, persistence and market data
- **`utils`**: API key helpers
"""

__version__ = "0.1.0"
