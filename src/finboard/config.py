"""
# Configuration Management Module

This module provides the **configuration system** for the Finboard dashboard service.
Built on **Pydantic Settings**, it loads values from the environment or a dotenv-style
file, validates them at import time, and exposes a single `settings` object.

## Architecture Overview

Configuration follows a **layered hierarchy** (higher layers override lower layers):

```
┌─────────────────────────────────────────────────────────────┐
│  1. Environment Variables (HIGHEST PRIORITY)                │
├─────────────────────────────────────────────────────────────┤
│  2. FINBOARD_CONFIG_PATH (custom config file path)          │
├─────────────────────────────────────────────────────────────┤
│  3. .finboard File (Project Root)                           │
├─────────────────────────────────────────────────────────────┤
│  4. .env File (Project Root)                                │
├─────────────────────────────────────────────────────────────┤
│  5. Default Values (LOWEST PRIORITY)                        │
└─────────────────────────────────────────────────────────────┘
```

## Configuration Groups

| Group | Purpose |
|-------|---------|
| **Server** | Host, port, debug mode, log level |
| **Dashboard** | Storage path, default theme, placement scan bound, insertion grace window |
| **Market Data** | Provider API keys, per-provider rate limits, cache TTL, retry policy |

Grid column counts are **not** configurable. They are constants of the grid model
(see `finboard.models.dashboard_models.BREAKPOINT_COLUMNS`).

## Usage Example

```python
from finboard.config import settings

if settings.DEBUG:
    print(f"Running in debug mode on {settings.HOST}:{settings.PORT}")

finnhub_key = settings.FINNHUB_API_KEY.get_secret_value()
```

## Module-Level Constants & Attributes

Attributes:
    FINBOARD_FILENAME (str): Primary configuration filename (`.finboard`).
    DEFAULT_ENV_FILENAME (str): Fallback configuration filename (`.env`).
    CONFIG_ENV_VAR (str): Environment variable naming a custom config file.
    PROJECT_ROOT (Path): Project root used to locate config files.
    CONFIG_PATH (Optional[str]): Resolved config file path, or `None` in environment-only mode.
    settings (Settings): Global settings instance.
"""

import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
FINBOARD_FILENAME: str = ".finboard"
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "FINBOARD_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determines the configuration file path based on a predefined precedence order.

    1.  **Environment Variable**: `FINBOARD_CONFIG_PATH` (if set and the file exists).
    2.  **Finboard Config**: `.finboard` file in the project root directory.
    3.  **Dotenv Config**: `.env` file in the project root directory.
    4.  **Fallback**: `None`, which means environment-variable-only mode.

    Returns:
        Optional[str]: The path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    finboard_path: Path = PROJECT_ROOT / FINBOARD_FILENAME
    if finboard_path.exists():
        return str(finboard_path)
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=True)


class Settings(BaseSettings):
    """
    Application configuration settings model.

    **Configuration Groups:**
    *   **Server**: Host, port, debug mode, log level.
    *   **Dashboard**: Where the dashboard is persisted and how the grid engine is bounded.
    *   **Market Data**: Provider keys, rate limits, response cache and retry policy.

    **Validation:**
    Numeric knobs must be positive, the insertion grace window must stay short
    (0-10 seconds), and enumerated strings (theme, log level) must be known values.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Dashboard configuration
    DASHBOARD_STORAGE_PATH: str = "finboard_dashboard.json"
    DEFAULT_THEME: str = "dark"
    PLACEMENT_MAX_SCAN_ROWS: int = 1000  # Row cap for the first-fit scan
    INSERT_SUPPRESSION_SECONDS: float = 1.0  # Grace window after programmatic insertion

    # Market data provider keys ("demo" means not configured)
    ALPHA_VANTAGE_API_KEY: SecretStr = SecretStr("demo")
    FINNHUB_API_KEY: SecretStr = SecretStr("demo")
    ALPHA_VANTAGE_BASE_URL: str = "https://www.alphavantage.co/query"
    FINNHUB_BASE_URL: str = "https://finnhub.io/api/v1"

    # Per-provider rate limits (free tier defaults)
    ALPHA_VANTAGE_REQUESTS_PER_MINUTE: int = 5
    ALPHA_VANTAGE_REQUESTS_PER_DAY: int = 500
    FINNHUB_REQUESTS_PER_MINUTE: int = 60
    FINNHUB_REQUESTS_PER_DAY: int = 10000
    INDIAN_API_REQUESTS_PER_MINUTE: int = 100

    # Response cache and retry policy
    MARKET_DATA_CACHE_TTL_SECONDS: int = 300
    MARKET_DATA_MAX_RETRIES: int = 3
    MARKET_DATA_RETRY_BASE_DELAY: float = 1.0
    MARKET_DATA_TIMEOUT_SECONDS: float = 10.0

    @field_validator(
        "PLACEMENT_MAX_SCAN_ROWS",
        "MARKET_DATA_CACHE_TTL_SECONDS",
        "MARKET_DATA_MAX_RETRIES",
        "ALPHA_VANTAGE_REQUESTS_PER_MINUTE",
        "ALPHA_VANTAGE_REQUESTS_PER_DAY",
        "FINNHUB_REQUESTS_PER_MINUTE",
        "FINNHUB_REQUESTS_PER_DAY",
        "INDIAN_API_REQUESTS_PER_MINUTE",
        mode="before",
    )
    @classmethod
    def validate_positive_integers(cls, v: Any, info: Any) -> int:
        """
        Validates that numeric settings are positive integers.

        Args:
            v (Any): The value to validate.
            info (Any): Validation info.

        Returns:
            int: The validated positive integer.

        Raises:
            ValueError: If the value is not a positive integer.
        """
        value = int(v)
        if value <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer")
        return value

    @field_validator("INSERT_SUPPRESSION_SECONDS", mode="before")
    @classmethod
    def validate_suppression_window(cls, v: Any) -> float:
        """
        Validates that the insertion grace window is short (0-10 seconds).

        The window only has to outlast one re-render of the grid surface; anything
        longer would swallow genuine user drags.

        Raises:
            ValueError: If the window is out of range.
        """
        window = float(v)
        if window < 0.0 or window > 10.0:
            raise ValueError("INSERT_SUPPRESSION_SECONDS must be between 0 and 10 seconds")
        return window

    @field_validator("MARKET_DATA_RETRY_BASE_DELAY", "MARKET_DATA_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def validate_non_negative_seconds(cls, v: Any, info: Any) -> float:
        """Validates that a duration in seconds is not negative."""
        value = float(v)
        if value < 0.0:
            raise ValueError(f"{info.field_name} must not be negative")
        return value

    @field_validator("DEFAULT_THEME", mode="before")
    @classmethod
    def validate_theme(cls, v: Any) -> str:
        """Validates that the default theme is `light` or `dark`."""
        theme = str(v).strip().lower()
        if theme not in ("light", "dark"):
            raise ValueError("DEFAULT_THEME must be 'light' or 'dark'")
        return theme

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        """Validates that the log level is a standard logging level name."""
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return level

    @property
    def is_production(self) -> bool:
        """
        Determine if the application is running in production mode.

        Returns:
            `bool`: `True` if running in production (`DEBUG=False`), `False` otherwise.
        """
        return not self.DEBUG


# Global settings instance
settings: Settings = Settings()
