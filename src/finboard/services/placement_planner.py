"""
# Placement Planner

Finds a free grid position for a newly created widget, independently for each breakpoint.

## Algorithm

Deterministic **first-fit** scan, top-to-bottom then left-to-right:

1. If the layout is empty, the answer is `(0, 0)`.
2. For `y = 0, 1, 2, ...` and, within a row, `x = 0 .. columns - w`, test the candidate
   `{x, y, w, h}` against every existing rectangle with `collides`. The first candidate
   with no collision wins. When a whole row is blocked the scan jumps to the first row
   where some blocking rectangle ends, so tall rectangles cost one step, not one per row.
3. The scan is capped at `settings.PLACEMENT_MAX_SCAN_ROWS` rows. Exceeding the cap is a
   soft anomaly: it is logged, counted, and answered with `(0, 0)`.
   `find_free_position_or_below` answers with `(0, bottom of the layout)` instead, which
   is always free.

The returned position always satisfies `x + w <= columns`. A width larger than the grid
is clamped to the column count first.

## Usage Example

```python
find_free_position([Rectangle(widget_id="a", x=0, y=0, w=4, h=4)], 12, 4, 4)
# GridPosition(x=4, y=0)
```
"""

from typing import Dict, Mapping, Optional, Sequence

from finboard.config import settings
from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import (
    BREAKPOINT_COLUMNS,
    BREAKPOINTS,
    Breakpoint,
    GridPosition,
    Rectangle,
    default_footprint,
)
from finboard.services.grid_collision import blocked_until
from finboard.services.layout_metrics import layout_metrics

logger = get_logger(prefix="[PlacementPlanner]")

_CANDIDATE_ID = "__candidate__"


def _first_fit(
    existing: Sequence[Rectangle],
    column_count: int,
    w: int,
    h: int,
    max_rows: int,
    widget_id: str,
) -> Optional[GridPosition]:
    y = 0
    while y <= max_rows:
        next_y: Optional[int] = None
        for x in range(column_count - w + 1):
            candidate = Rectangle.model_construct(widget_id=widget_id, x=x, y=y, w=w, h=h)
            free_from = blocked_until(candidate, existing)
            if free_from is None:
                return GridPosition(x=x, y=y)
            next_y = free_from if next_y is None else min(next_y, free_from)
        # Rows before next_y are blocked at every x.
        y = next_y
    return None


def find_free_position(
    existing: Sequence[Rectangle],
    column_count: int,
    w: int,
    h: int,
    max_rows: Optional[int] = None,
    widget_id: str = _CANDIDATE_ID,
    breakpoint: str = "unknown",
) -> GridPosition:
    """
    Find the first free top-left cell for a `w x h` rectangle.

    Args:
        existing: Rectangles already placed in this breakpoint.
        column_count: Number of grid columns in this breakpoint.
        w: Desired width in columns.
        h: Desired height in rows.
        max_rows: Row bound for the scan; defaults to `settings.PLACEMENT_MAX_SCAN_ROWS`.
        widget_id: Id of the widget being placed; its own rectangles are ignored.
        breakpoint: Breakpoint name, used for logging and metrics only.

    Returns:
        GridPosition: A position that overlaps no existing rectangle, or `(0, 0)` if the
        scan bound was exceeded.
    """
    if not existing:
        return GridPosition(x=0, y=0)

    if max_rows is None:
        max_rows = settings.PLACEMENT_MAX_SCAN_ROWS
    w = min(max(w, 1), column_count)
    h = max(h, 1)

    position = _first_fit(existing, column_count, w, h, max_rows, widget_id)
    if position is not None:
        return position

    logger.warning(
        f"No free {w}x{h} slot within {max_rows} rows at {breakpoint} "
        f"({len(existing)} rectangles), falling back to (0, 0)"
    )
    layout_metrics.record_scan_exhausted(breakpoint)
    return GridPosition(x=0, y=0)


def find_free_position_or_below(
    existing: Sequence[Rectangle],
    column_count: int,
    w: int,
    h: int,
    max_rows: Optional[int] = None,
    widget_id: str = _CANDIDATE_ID,
    breakpoint: str = "unknown",
) -> GridPosition:
    """
    Like `find_free_position`, but never answers with an occupied cell.

    When the scan bound is exceeded the rectangle goes to `x = 0` just below the lowest
    existing rectangle, a row nothing reaches. Repairing and healing layouts use this
    variant because their output must stay overlap-free.
    """
    if max_rows is None:
        max_rows = settings.PLACEMENT_MAX_SCAN_ROWS
    w = min(max(w, 1), column_count)
    h = max(h, 1)

    position = _first_fit(existing, column_count, w, h, max_rows, widget_id)
    if position is not None:
        return position

    bottom = max((other.bottom for other in existing if other.widget_id != widget_id), default=0)
    logger.warning(
        f"No free {w}x{h} slot within {max_rows} rows at {breakpoint} "
        f"({len(existing)} rectangles), placing below the layout at (0, {bottom})"
    )
    layout_metrics.record_scan_exhausted(breakpoint)
    return GridPosition(x=0, y=bottom)


def plan_widget_rectangles(
    layouts: Mapping[Breakpoint, Sequence[Rectangle]],
    widget_id: str,
) -> Dict[Breakpoint, Rectangle]:
    """
    Plan one rectangle per breakpoint for a new widget.

    Each breakpoint is planned independently with its own column count and the
    breakpoint's default footprint (narrower on `sm`).

    Args:
        layouts: Current canonical layouts by breakpoint.
        widget_id: Id of the widget being created.

    Returns:
        Dict[Breakpoint, Rectangle]: The planned rectangle for every breakpoint.
    """
    planned: Dict[Breakpoint, Rectangle] = {}
    for bp in BREAKPOINTS:
        w, h = default_footprint(bp)
        position = find_free_position(
            layouts.get(bp, []),
            BREAKPOINT_COLUMNS[bp],
            w,
            h,
            widget_id=widget_id,
            breakpoint=bp.value,
        )
        planned[bp] = Rectangle(widget_id=widget_id, x=position.x, y=position.y, w=w, h=h)
    return planned
