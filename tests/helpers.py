"""Shared assertions and builders for the test suite."""

from itertools import combinations
from typing import Iterable, Optional

from prometheus_client import REGISTRY

from finboard.models.dashboard_models import Rectangle
from finboard.services.grid_collision import collides


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def rect(widget_id: str, x: int, y: int, w: int = 4, h: int = 4, **bounds) -> Rectangle:
    return Rectangle(widget_id=widget_id, x=x, y=y, w=w, h=h, **bounds)


def assert_valid_layout(rectangles: Iterable[Rectangle], column_count: int):
    rectangles = list(rectangles)
    for r in rectangles:
        assert r.x >= 0 and r.y >= 0, r
        assert r.x + r.w <= column_count, r
    for a, b in combinations(rectangles, 2):
        assert a.widget_id != b.widget_id
        assert not collides(a, b), (a, b)


def sample_value(name: str, labels: Optional[dict] = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0
