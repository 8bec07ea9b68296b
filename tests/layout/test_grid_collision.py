"""Tests for the half-open rectangle overlap test."""

import pytest

from finboard.services.grid_collision import collides, collides_with_any
from helpers import rect


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (rect("a", 0, 0), rect("b", 2, 2), True),
        (rect("a", 0, 0), rect("b", 4, 0), False),
        (rect("a", 0, 0), rect("b", 0, 4), False),
        (rect("a", 0, 0), rect("b", 4, 4), False),
        (rect("a", 0, 0, w=12, h=12), rect("b", 5, 5, w=1, h=1), True),
        (rect("a", 3, 0, w=1, h=1), rect("b", 0, 0, w=4, h=1), True),
    ],
)
def test_collides(a, b, expected):
    assert collides(a, b) is expected
    assert collides(b, a) is expected


def test_collides_with_any_ignores_same_widget():
    """A rectangle is never compared with another rectangle of its own widget."""
    candidate = rect("a", 0, 0)
    assert not collides_with_any(candidate, [rect("a", 0, 0), rect("b", 4, 0)])
    assert collides_with_any(candidate, [rect("a", 0, 0), rect("b", 3, 3)])


def test_collides_with_any_empty():
    assert not collides_with_any(rect("a", 0, 0), [])
