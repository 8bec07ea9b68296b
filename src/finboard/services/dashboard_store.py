"""
# Dashboard Store

JSON file persistence for one dashboard in the shape
`{"layouts": {"lg": [...], "md": [...], "sm": [...]}, "widgets": {...}, "theme": "dark"}`.

Reads never raise: a missing or corrupt file is logged and reported as `None`, and the
load pathway falls back to an empty dashboard. Writes go through a temporary file in the
same directory followed by `Path.replace`, so a crash never leaves a half-written file.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import DashboardState

logger = get_logger(prefix="[DashboardStore]")


class DashboardStore:
    """Reads and writes the persisted dashboard document."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read_raw(self) -> Optional[Any]:
        """
        Read the persisted document without validating it.

        Returns:
            Optional[Any]: Parsed JSON, or `None` if the file is absent or unreadable.
        """
        if not self.path.exists():
            logger.info(f"No saved dashboard at {self.path}")
            return None
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read saved dashboard {self.path}: {e}")
            return None

    def write(self, state: DashboardState):
        """Persist `state` atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{os.getpid()}.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(state.to_persisted(), handle, indent=2)
        tmp_path.replace(self.path)
        logger.debug(f"Saved dashboard with {len(state.widgets)} widgets to {self.path}")

    def clear(self):
        """Delete the persisted document if present."""
        if self.path.exists():
            self.path.unlink()
            logger.info(f"Removed saved dashboard {self.path}")
