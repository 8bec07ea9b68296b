"""
# Dashboard Template Data

This module defines the **built-in dashboard templates** users can start from.

## Domain Overview

A template is a complete persisted dashboard document: widgets, an `lg` layout and a
theme. The `md` and `sm` layouts are intentionally empty; loading a template goes
through the normal load pathway, which gives every widget a free default position in
those breakpoints.

| Template | Category | Theme |
|----------|----------|-------|
| `market-overview` | market | dark |
| `indian-market` | indian | light |
| `crypto-tracker` | crypto | dark |
| `portfolio-dashboard` | portfolio | light |

## Usage

```python
from finboard.routes.dashboard.template_data import get_template

session.load(get_template("crypto-tracker"))
```
"""

import copy
from typing import Any, Dict, List, Optional

TEMPLATE_INFOS: Dict[str, Dict[str, str]] = {
    "market-overview": {
        "id": "market-overview",
        "name": "Market Overview",
        "description": "Track major US stocks with real-time quotes and market trends",
        "category": "market",
    },
    "indian-market": {
        "id": "indian-market",
        "name": "Indian Market",
        "description": "Monitor NSE stocks and Indian market indices",
        "category": "indian",
    },
    "crypto-tracker": {
        "id": "crypto-tracker",
        "name": "Crypto Tracker",
        "description": "Track cryptocurrency prices and market movements",
        "category": "crypto",
    },
    "portfolio-dashboard": {
        "id": "portfolio-dashboard",
        "name": "Portfolio Dashboard",
        "description": "Comprehensive portfolio tracking with performance metrics",
        "category": "portfolio",
    },
}


def _quote_card(widget_id: str, title: str, symbol: str, description: str) -> Dict[str, Any]:
    return {
        "id": widget_id,
        "type": "card",
        "title": title,
        "apiConfig": {"provider": "finnhub", "endpoint": "quote", "params": {"symbol": symbol}},
        "dataMap": {"value": "c"},
        "format": "currency",
        "description": description,
    }


def _indian_card(widget_id: str, title: str, symbol: str) -> Dict[str, Any]:
    return {
        "id": widget_id,
        "type": "card",
        "title": title,
        "apiConfig": {"provider": "indian-api", "endpoint": "stock_price", "params": {"symbol": symbol}},
        "format": "currency",
        "description": "NSE Live",
    }


TEMPLATES: Dict[str, Dict[str, Any]] = {
    "market-overview": {
        "theme": "dark",
        "layouts": {
            "lg": [
                {"i": "card-1", "x": 0, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "card-2", "x": 3, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "card-3", "x": 6, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "card-4", "x": 9, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "chart-1", "x": 0, "y": 6, "w": 8, "h": 10},
                {"i": "list-1", "x": 9, "y": 6, "w": 3, "h": 6, "minW": 3, "minH": 5},
            ],
            "md": [],
            "sm": [],
        },
        "widgets": {
            "card-1": _quote_card("card-1", "Apple Inc", "AAPL", "Current Price"),
            "card-2": _quote_card("card-2", "Google", "GOOGL", "Current Price"),
            "card-3": _quote_card("card-3", "Microsoft", "MSFT", "Current Price"),
            "card-4": _quote_card("card-4", "Tesla", "TSLA", "Current Price"),
            "chart-1": {
                "id": "chart-1",
                "type": "chart",
                "title": "Market Trend (Mock)",
                "apiConfig": {"provider": "alpha-vantage", "endpoint": "TIME_SERIES_DAILY", "params": {"symbol": "IBM"}},
            },
            "list-1": {"id": "list-1", "type": "card", "title": "Top Gainers", "settings": {"cardType": "market-gainers"}},
        },
    },
    "indian-market": {
        "theme": "light",
        "layouts": {
            "lg": [
                {"i": "in-1", "x": 0, "y": 0, "w": 4, "h": 4},
                {"i": "in-2", "x": 4, "y": 0, "w": 4, "h": 4},
                {"i": "in-chart", "x": 0, "y": 4, "w": 12, "h": 8},
            ],
            "md": [],
            "sm": [],
        },
        "widgets": {
            "in-1": _indian_card("in-1", "Reliance", "RELIANCE"),
            "in-2": _indian_card("in-2", "TCS", "TCS"),
            "in-chart": {
                "id": "in-chart",
                "type": "chart",
                "title": "Nifty 50 Trend",
                "apiConfig": {"provider": "indian-api", "endpoint": "stock_price", "params": {"symbol": "NIFTY50"}},
            },
        },
    },
    "crypto-tracker": {
        "theme": "dark",
        "layouts": {
            "lg": [
                {"i": "crypto-1", "x": 0, "y": 0, "w": 4, "h": 4},
                {"i": "crypto-2", "x": 4, "y": 0, "w": 4, "h": 4},
                {"i": "crypto-3", "x": 8, "y": 0, "w": 4, "h": 4},
                {"i": "crypto-chart", "x": 0, "y": 4, "w": 12, "h": 8},
                {"i": "crypto-table", "x": 0, "y": 12, "w": 12, "h": 6},
            ],
            "md": [],
            "sm": [],
        },
        "widgets": {
            "crypto-1": _quote_card("crypto-1", "Bitcoin", "BINANCE:BTCUSDT", "BTC Price"),
            "crypto-2": _quote_card("crypto-2", "Ethereum", "BINANCE:ETHUSDT", "ETH Price"),
            "crypto-3": _quote_card("crypto-3", "Solana", "BINANCE:SOLUSDT", "SOL Price"),
            "crypto-chart": {
                "id": "crypto-chart",
                "type": "chart",
                "title": "Crypto Market Trend",
                "settings": {"chartType": "candle", "chartInterval": "daily"},
            },
            "crypto-table": {"id": "crypto-table", "type": "table", "title": "Top Cryptocurrencies"},
        },
    },
    "portfolio-dashboard": {
        "theme": "light",
        "layouts": {
            "lg": [
                {"i": "port-1", "x": 0, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "port-2", "x": 3, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "port-3", "x": 6, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "port-4", "x": 9, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5},
                {"i": "port-performance", "x": 0, "y": 6, "w": 6, "h": 6},
                {"i": "port-chart", "x": 6, "y": 6, "w": 6, "h": 6},
                {"i": "port-table", "x": 0, "y": 12, "w": 12, "h": 6},
            ],
            "md": [],
            "sm": [],
        },
        "widgets": {
            "port-1": {
                "id": "port-1",
                "type": "card",
                "title": "Total Value",
                "settings": {"cardType": "single"},
                "format": "currency",
                "description": "Portfolio Value",
            },
            "port-2": {
                "id": "port-2",
                "type": "card",
                "title": "Daily Gain",
                "settings": {"cardType": "performance"},
                "format": "percent",
            },
            "port-3": {"id": "port-3", "type": "card", "title": "Holdings", "settings": {"cardType": "watchlist"}},
            "port-4": {"id": "port-4", "type": "card", "title": "Top Gainers", "settings": {"cardType": "market-gainers"}},
            "port-performance": {
                "id": "port-performance",
                "type": "card",
                "title": "Performance Metrics",
                "settings": {"cardType": "performance"},
            },
            "port-chart": {
                "id": "port-chart",
                "type": "chart",
                "title": "Portfolio Trend",
                "settings": {"chartType": "line", "chartInterval": "weekly"},
            },
            "port-table": {"id": "port-table", "type": "table", "title": "Portfolio Holdings"},
        },
    },
}


def get_template_infos() -> List[Dict[str, str]]:
    """Metadata of every built-in template, in display order."""
    return [dict(info) for info in TEMPLATE_INFOS.values()]


def get_template(template_id: str) -> Optional[Dict[str, Any]]:
    """Independent copy of a template document, or `None` if the id is unknown."""
    template = TEMPLATES.get(template_id)
    return copy.deepcopy(template) if template is not None else None
