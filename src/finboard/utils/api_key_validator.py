"""
API key validation and display helpers for market-data providers.

Format checks are heuristics only. A key can only be proven valid by calling the
provider with it.
"""

import re
from typing import Optional

from finboard.config import settings
from finboard.models.market_data_models import ApiKeyStatus

_KEY_PATTERNS = {
    "alpha-vantage": re.compile(r"^[A-Z0-9]{16,}$", re.IGNORECASE),
    "finnhub": re.compile(r"^[A-Z0-9]{20,}$", re.IGNORECASE),
}

DEMO_KEY_MESSAGE = "Using demo key. Configure an API key in the environment for live data."
INVALID_KEY_MESSAGE = "API key format appears invalid. Please check your configuration."


def is_demo_key(key: Optional[str]) -> bool:
    """Whether `key` is missing or a placeholder."""
    return not key or key == "your_key_here" or "demo" in key


def validate_api_key_format(key: Optional[str], provider: str) -> bool:
    """
    Basic format check of an API key.

    Args:
        key: The key to check.
        provider: Provider id; providers without a known pattern need 10+ characters.

    Returns:
        bool: `True` if the key looks plausible for the provider.
    """
    if not key or key == "demo" or len(key) < 10:
        return False
    pattern = _KEY_PATTERNS.get(provider)
    if pattern is None:
        return True
    return bool(pattern.match(key))


def get_api_key(provider: str) -> str:
    """Configured key for `provider`, `demo` when none applies."""
    if provider == "alpha-vantage":
        return settings.ALPHA_VANTAGE_API_KEY.get_secret_value()
    if provider == "finnhub":
        return settings.FINNHUB_API_KEY.get_secret_value()
    return "demo"


def get_api_key_status(provider: str, key: Optional[str] = None) -> ApiKeyStatus:
    """
    Status of a provider's key.

    Args:
        provider: Provider id.
        key: Key to inspect; defaults to the configured key.

    Returns:
        ApiKeyStatus: Demo/valid flags and a hint for the user when not usable.
    """
    if key is None:
        key = get_api_key(provider)
    demo = is_demo_key(key)
    valid = validate_api_key_format(key, provider)

    message = None
    if demo:
        message = DEMO_KEY_MESSAGE
    elif not valid:
        message = INVALID_KEY_MESSAGE

    return ApiKeyStatus(provider=provider, is_valid=valid and not demo, is_demo=demo, message=message)


def sanitize_api_key_for_display(key: Optional[str]) -> str:
    """Mask all but the first and last four characters of a key."""
    if not key or key == "demo":
        return "demo"
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"
