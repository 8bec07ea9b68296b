"""
# Layout Metrics Service

This module provides **Prometheus metrics** for the grid engine.
The grid engine never fails a user action. Anomalies are recovered locally, so
counters are how they stay observable.

## Metrics

| Metric | Labels | Incremented when |
|--------|--------|------------------|
| `finboard_placement_scan_exhausted_total` | `breakpoint` | First-fit scan hit its row bound and fell back to `(0, 0)` |
| `finboard_layout_rectangles_relocated_total` | `breakpoint` | Overlap repair moved a rectangle off its stored position |
| `finboard_layout_entries_dropped_total` | `reason` | Loaded/imported data contained an unusable entry |
| `finboard_layout_events_suppressed_total` | `reason` | A grid-surface layout event was ignored by the event gate |

## Usage Example

```python
from finboard.services.layout_metrics import layout_metrics

layout_metrics.record_scan_exhausted("lg")
```
"""

from prometheus_client import Counter

from finboard.managers.logging_manager import get_logger

logger = get_logger(prefix="[LayoutMetrics]")


class LayoutMetrics:
    """
    Prometheus counters for soft anomalies in placement, repair and reconciliation.

    **Integration:** Exposed by the application at `/metrics`.
    """

    def __init__(self):
        """Initialize metrics."""
        self.scan_exhausted = Counter(
            "finboard_placement_scan_exhausted_total",
            "First-fit placement scans that exceeded the row bound",
            ["breakpoint"],
        )

        self.rectangles_relocated = Counter(
            "finboard_layout_rectangles_relocated_total",
            "Rectangles moved by overlap repair",
            ["breakpoint"],
        )

        self.entries_dropped = Counter(
            "finboard_layout_entries_dropped_total",
            "Malformed or orphaned entries dropped while loading a dashboard",
            ["reason"],
        )

        self.events_suppressed = Counter(
            "finboard_layout_events_suppressed_total",
            "Grid-surface layout events ignored by the event gate",
            ["reason"],
        )

        logger.debug("Layout metrics initialized")

    def record_scan_exhausted(self, breakpoint: str):
        """Record a placement scan that fell back to the default position."""
        self.scan_exhausted.labels(breakpoint=breakpoint).inc()

    def record_relocation(self, breakpoint: str):
        """Record a rectangle relocated by overlap repair."""
        self.rectangles_relocated.labels(breakpoint=breakpoint).inc()

    def record_dropped_entry(self, reason: str, count: int = 1):
        """Record entries dropped while loading a dashboard."""
        if count > 0:
            self.entries_dropped.labels(reason=reason).inc(count)

    def record_suppressed_event(self, reason: str):
        """Record a layout event ignored by the gate."""
        self.events_suppressed.labels(reason=reason).inc()


# Global metrics instance
layout_metrics = LayoutMetrics()
