"""
# Logging Manager

Central logger factory for the Finboard service. Every module obtains its logger with
`get_logger()`, optionally passing a `prefix` that is prepended to each message so the
emitting component is obvious in mixed output.

## Usage Example

```python
from finboard.managers.logging_manager import get_logger

logger = get_logger(prefix="[PlacementPlanner]")
logger.warning("Scan cap exceeded, falling back to (0, 0)")
# 2026-01-01 12:00:00,000 WARNING finboard: [PlacementPlanner] Scan cap exceeded, ...
```

The `finboard` root logger is configured once, on first use, with a stream handler
and the level from `settings.LOG_LEVEL`. Child loggers (`name="finboard.xyz"`)
propagate to it.
"""

import logging
from typing import Any, MutableMapping, Tuple

from finboard.config import settings

ROOT_LOGGER_NAME = "finboard"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


class PrefixedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that prepends a fixed component prefix to every message."""

    def __init__(self, logger: logging.Logger, prefix: str = ""):
        super().__init__(logger, {})
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        if self.prefix:
            return f"{self.prefix} {msg}", kwargs
        return msg, kwargs


def _configure_root_logger() -> None:
    global _configured
    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(settings.LOG_LEVEL)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    _configured = True


def get_logger(name: str = ROOT_LOGGER_NAME, prefix: str = "") -> PrefixedLoggerAdapter:
    """
    Return a prefixed logger for a Finboard component.

    Args:
        name: Logger name; should be `finboard` or a `finboard.` child.
        prefix: Text prepended to every message, e.g. `"[OverlapResolver]"`.

    Returns:
        PrefixedLoggerAdapter: Adapter exposing the standard logging methods.
    """
    _configure_root_logger()
    return PrefixedLoggerAdapter(logging.getLogger(name), prefix=prefix)
