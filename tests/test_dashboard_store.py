"""Tests for JSON persistence of the dashboard."""

import json

import pytest

from finboard.models.dashboard_models import Breakpoint, DashboardState, WidgetConfig
from finboard.services.dashboard_store import DashboardStore
from finboard.services.overlap_resolver import normalize_dashboard
from helpers import rect


@pytest.fixture
def store(tmp_path):
    return DashboardStore(tmp_path / "nested" / "dashboard.json")


def test_missing_file_reads_as_none(store):
    assert store.read_raw() is None


def test_corrupt_file_reads_as_none(store, caplog):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json", encoding="utf-8")

    assert store.read_raw() is None
    assert "Failed to read saved dashboard" in caplog.text


def test_write_uses_grid_surface_shape(store):
    state = DashboardState(
        layouts={
            Breakpoint.LG: [rect("a", 0, 0, w=3, h=6, min_w=3, min_h=5)],
            Breakpoint.MD: [rect("a", 0, 0)],
            Breakpoint.SM: [rect("a", 0, 0, w=2)],
        },
        widgets={"a": WidgetConfig(id="a", type="card", title="A", data_map={"value": "c"})},
        theme="light",
    )
    store.write(state)

    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert saved["layouts"]["lg"] == [{"i": "a", "x": 0, "y": 0, "w": 3, "h": 6, "minW": 3, "minH": 5}]
    assert saved["widgets"]["a"]["dataMap"] == {"value": "c"}
    assert saved["theme"] == "light"
    assert not list(store.path.parent.glob("*.tmp"))


def test_round_trip_is_lossless(store):
    state = normalize_dashboard(
        {
            "layouts": {"lg": [{"i": "a", "x": 2, "y": 3, "w": 5, "h": 2, "maxW": 8, "maxH": 4}]},
            "widgets": {"a": {"id": "a", "type": "table", "title": "A"}},
            "theme": "dark",
        }
    )
    store.write(state)

    assert normalize_dashboard(store.read_raw()) == state


def test_clear_removes_file(store):
    store.write(DashboardState())
    store.clear()
    assert not store.path.exists()
