"""
# Overlap Resolver

Repairs layouts that come from outside the running session: storage, imported files or
templates. Such layouts may contain overlapping rectangles, missing sizes, rectangles
wider than the grid, orphaned entries or no entry at all for some widgets.

## Repair Algorithm (`repair`)

1. Coerce every raw item (missing or zero `w`/`h` take the breakpoint default, `w` is
   clamped to the column count). Items without an id and duplicate ids are dropped.
2. Process rectangles in `(y, x)` order, which follows the visual reading order.
3. A rectangle whose own position is in bounds and free with respect to the rectangles
   already processed is **kept unchanged**.
4. Otherwise it moves to the first free slot of the placement planner's row-major scan
   from `y = 0`. A slot always exists at `x = 0, y = maxY(placed)`, and that is where
   the rectangle goes when the scan passes `settings.PLACEMENT_MAX_SCAN_ROWS`.
5. The chosen rectangle joins the placed set before the next one is processed, so the
   result depends on processing order. This is deterministic and not globally optimal.

The output keeps the input order, so repairing an already valid layout returns it
unchanged and `repair(repair(L)) == repair(L)`.

## Load Pathway (`normalize_dashboard`)

Turns a raw, untrusted `{layouts, widgets, theme}` document into a `DashboardState`
that satisfies the core invariant: widgets are validated, rectangles referencing
unknown widgets are dropped, every breakpoint is repaired, and widgets without a
rectangle in a breakpoint are given a free default position.
Nothing in this pathway raises on bad data.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from finboard.config import settings
from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import (
    BREAKPOINT_COLUMNS,
    BREAKPOINTS,
    DashboardState,
    Rectangle,
    WidgetConfig,
    default_footprint,
)
from finboard.services.grid_collision import collides_with_any
from finboard.services.layout_metrics import layout_metrics
from finboard.services.placement_planner import find_free_position_or_below
from finboard.services.raw_layout import RawItem, raw_widget_id, rectangle_from_raw

logger = get_logger(prefix="[OverlapResolver]")


def repair(
    layout: Optional[Sequence[RawItem]],
    column_count: int,
    default_w: int = 4,
    default_h: int = 4,
    breakpoint: str = "unknown",
) -> List[Rectangle]:
    """
    Produce an overlap-free, in-bounds version of `layout`.

    Args:
        layout: Raw items or rectangles for one breakpoint.
        column_count: Columns of the breakpoint.
        default_w: Width for items whose width is missing or zero.
        default_h: Height for items whose height is missing or zero.
        breakpoint: Breakpoint name, used for logging and metrics only.

    Returns:
        List[Rectangle]: One rectangle per distinct widget id in the input, in input
        order, pairwise non-colliding and within `column_count`.
    """
    rects: List[Rectangle] = []
    seen = set()
    for item in layout or []:
        rect = rectangle_from_raw(item, column_count, default_w, default_h)
        if rect is None:
            logger.warning(f"Dropping {breakpoint} layout item without a widget id: {item!r}")
            layout_metrics.record_dropped_entry("missing_id")
            continue
        if rect.widget_id in seen:
            logger.warning(f"Dropping duplicate {breakpoint} rectangle for widget {rect.widget_id}")
            layout_metrics.record_dropped_entry("duplicate")
            continue
        seen.add(rect.widget_id)
        rects.append(rect)

    order = sorted(range(len(rects)), key=lambda index: (rects[index].y, rects[index].x))
    resolved: List[Optional[Rectangle]] = [None] * len(rects)
    placed: List[Rectangle] = []

    for index in order:
        rect = rects[index]
        if rect.right > column_count or collides_with_any(rect, placed):
            position = find_free_position_or_below(
                placed, column_count, rect.w, rect.h, widget_id=rect.widget_id, breakpoint=breakpoint
            )
            logger.info(
                f"Relocating widget {rect.widget_id} at {breakpoint} "
                f"from ({rect.x}, {rect.y}) to ({position.x}, {position.y})"
            )
            layout_metrics.record_relocation(breakpoint)
            rect = rect.moved_to(position.x, position.y)
        placed.append(rect)
        resolved[index] = rect

    return [rect for rect in resolved if rect is not None]


def _load_widgets(raw_widgets: Any) -> Dict[str, WidgetConfig]:
    if not isinstance(raw_widgets, Mapping):
        if raw_widgets is not None:
            logger.warning(f"Ignoring widgets of type {type(raw_widgets).__name__}, expected an object")
        return {}

    widgets: Dict[str, WidgetConfig] = {}
    for widget_id, raw_widget in raw_widgets.items():
        if not isinstance(widget_id, str) or not widget_id or not isinstance(raw_widget, Mapping):
            logger.warning(f"Dropping malformed widget entry {widget_id!r}")
            layout_metrics.record_dropped_entry("malformed_widget")
            continue
        try:
            # The mapping key is authoritative: layout items reference widgets by key.
            widgets[widget_id] = WidgetConfig.model_validate({**raw_widget, "id": widget_id})
        except ValidationError as exc:
            logger.warning(f"Dropping invalid widget {widget_id}: {exc.error_count()} validation error(s)")
            layout_metrics.record_dropped_entry("invalid_widget")
    return widgets


def normalize_dashboard(raw: Any) -> DashboardState:
    """
    Build a canonical `DashboardState` from an untrusted persisted or imported document.

    Args:
        raw: Parsed JSON with no structural guarantees.

    Returns:
        DashboardState: A state satisfying the core invariant, with every breakpoint
        repaired and every widget placed in every breakpoint.
    """
    if not isinstance(raw, Mapping):
        logger.warning(f"Ignoring dashboard document of type {type(raw).__name__}, expected an object")
        raw = {}

    widgets = _load_widgets(raw.get("widgets"))

    raw_layouts = raw.get("layouts")
    if not isinstance(raw_layouts, Mapping):
        raw_layouts = {}

    layouts: Dict[Any, List[Rectangle]] = {}
    for bp in BREAKPOINTS:
        columns = BREAKPOINT_COLUMNS[bp]
        w, h = default_footprint(bp)

        items = raw_layouts.get(bp.value)
        if not isinstance(items, (list, tuple)):
            if items is not None:
                logger.warning(f"Ignoring non-list {bp.value} layout")
            items = []

        known = [item for item in items if raw_widget_id(item) in widgets]
        orphaned = len(items) - len(known)
        if orphaned:
            logger.warning(f"Dropping {orphaned} {bp.value} layout item(s) without a matching widget")
            layout_metrics.record_dropped_entry("orphaned", orphaned)

        repaired = repair(known, columns, w, h, breakpoint=bp.value)

        present = {rect.widget_id for rect in repaired}
        for widget_id in widgets:
            if widget_id in present:
                continue
            position = find_free_position_or_below(
                repaired, columns, w, h, widget_id=widget_id, breakpoint=bp.value
            )
            logger.info(f"Placing widget {widget_id} without a {bp.value} rectangle at ({position.x}, {position.y})")
            repaired.append(Rectangle(widget_id=widget_id, x=position.x, y=position.y, w=w, h=h))

        layouts[bp] = repaired

    theme = raw.get("theme")
    if theme not in ("light", "dark"):
        theme = settings.DEFAULT_THEME

    return DashboardState(layouts=layouts, widgets=widgets, theme=theme)
