"""
# Grid Collision Detection

Overlap test shared by the placement planner, the overlap resolver and the tests.

Two rectangles collide iff their half-open intervals overlap on both axes:

```
a.x < b.x + b.w  and  a.x + a.w > b.x  and  a.y < b.y + b.h  and  a.y + a.h > b.y
```

Edge-adjacent rectangles (e.g. `x=0,w=4` and `x=4,w=4`) do **not** collide.

A rectangle is never considered to collide with another rectangle of the same widget:
callers exclude same-`widget_id` comparisons, and `collides_with_any` does so for them.
"""

from typing import Iterable, Optional

from finboard.models.dashboard_models import Rectangle


def collides(a: Rectangle, b: Rectangle) -> bool:
    """Return `True` when `a` and `b` overlap on both axes."""
    return a.x < b.x + b.w and a.x + a.w > b.x and a.y < b.y + b.h and a.y + a.h > b.y


def collides_with_any(candidate: Rectangle, rectangles: Iterable[Rectangle]) -> bool:
    """Return `True` when `candidate` overlaps any rectangle of a different widget."""
    return any(
        collides(candidate, other) for other in rectangles if other.widget_id != candidate.widget_id
    )


def blocked_until(candidate: Rectangle, rectangles: Iterable[Rectangle]) -> Optional[int]:
    """
    Return the first row at which nothing that blocks `candidate` still covers its column span.

    Moving `candidate` down to any row before the returned one keeps it colliding with
    at least one of the same rectangles, so a scan can jump straight there.

    Returns:
        Optional[int]: The largest `bottom` of the rectangles `candidate` collides with,
        or `None` when it collides with none.
    """
    bottoms = [
        other.y + other.h
        for other in rectangles
        if other.widget_id != candidate.widget_id and collides(candidate, other)
    ]
    return max(bottoms) if bottoms else None
