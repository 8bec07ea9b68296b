"""
# Raw Layout Coercion

Helpers that turn **untrusted** layout items into `Rectangle` models. Raw items come from
persisted JSON, imported files, templates, or the interactive grid surface. Any field
may be missing, `null`, a string, negative, or `NaN`.

Numeric coercion follows the grid surface's own semantics: a value that is missing,
non-numeric, non-finite or zero falls back to the default. `x`/`y` default to `0`
and are floored at `0`. `w`/`h` default to the breakpoint footprint and are floored at `1`.

Items without a usable widget id (`i`, `widgetId` or `widget_id`) cannot be coerced
and yield `None`.
"""

import math
from typing import Any, Mapping, Optional, Union

from finboard.models.dashboard_models import Rectangle

RawItem = Union[Rectangle, Mapping[str, Any]]

_ID_KEYS = ("i", "widgetId", "widget_id")
_BOUND_KEYS = (("min_w", "minW"), ("min_h", "minH"), ("max_w", "maxW"), ("max_h", "maxH"))


def coerce_number(value: Any, default: int) -> int:
    """Integer value of `value`, or `default` when it is missing, invalid or zero."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number == 0:
        return default
    return int(number)


def coerce_optional_bound(value: Any) -> Optional[int]:
    """Integer size bound, or `None` when absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def raw_widget_id(item: Any) -> Optional[str]:
    """Widget id of a raw item, or `None` if it has no usable id."""
    if isinstance(item, Rectangle):
        return item.widget_id
    if not isinstance(item, Mapping):
        return None
    for key in _ID_KEYS:
        value = item.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def rectangle_from_raw(
    item: Any,
    column_count: int,
    default_w: int,
    default_h: int,
    clamp_x: bool = False,
) -> Optional[Rectangle]:
    """
    Coerce a raw item into a `Rectangle`.

    Args:
        item: A `Rectangle` or a mapping in grid-surface shape.
        column_count: Columns of the target breakpoint; `w` is clamped to it.
        default_w: Width used when the raw width is missing or zero.
        default_h: Height used when the raw height is missing or zero.
        clamp_x: Also pull `x` left so that `x + w <= column_count`.

    Returns:
        Optional[Rectangle]: The coerced rectangle, or `None` if the item has no widget id.
    """
    widget_id = raw_widget_id(item)
    if widget_id is None:
        return None

    if isinstance(item, Rectangle):
        fields = item.model_dump()
    else:
        fields = {"x": item.get("x"), "y": item.get("y"), "w": item.get("w"), "h": item.get("h")}
        for name, alias in _BOUND_KEYS:
            fields[name] = coerce_optional_bound(item.get(alias, item.get(name)))

    x = max(0, coerce_number(fields["x"], 0))
    y = max(0, coerce_number(fields["y"], 0))
    w = min(max(1, coerce_number(fields["w"], default_w)), column_count)
    h = max(1, coerce_number(fields["h"], default_h))
    if clamp_x:
        x = min(x, column_count - w)

    return Rectangle(
        widget_id=widget_id,
        x=x,
        y=y,
        w=w,
        h=h,
        min_w=fields["min_w"],
        min_h=fields["min_h"],
        max_w=fields["max_w"],
        max_h=fields["max_h"],
    )
