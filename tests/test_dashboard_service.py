"""Tests for the dashboard session: every public mutation keeps the core invariant."""

import json

import pytest

from finboard.config import settings
from finboard.models.dashboard_models import (
    BREAKPOINT_COLUMNS,
    BREAKPOINTS,
    ApiConfig,
    Breakpoint,
    WidgetDraft,
    WidgetType,
    WidgetUpdate,
)
from finboard.services.dashboard_service import DashboardSession, TemplateNotFoundError, WidgetNotFoundError
from finboard.services.dashboard_store import DashboardStore
from finboard.services.layout_reconciler import LayoutEventGate
from helpers import assert_valid_layout


@pytest.fixture
def session(clock):
    session = DashboardSession(gate=LayoutEventGate(clock=clock, insert_window_seconds=1.0))
    session.load({})
    # The grid surface's mount event after the load.
    session.apply_layout_change({})
    return session


def _assert_consistent(session):
    assert session.state.invariant_violations() == []
    for bp in BREAKPOINTS:
        assert_valid_layout(session.state.layout(bp), BREAKPOINT_COLUMNS[bp])


def _event(session):
    return {bp.value: [r.to_grid_item() for r in session.state.layout(bp)] for bp in BREAKPOINTS}


def test_add_widget_applies_type_defaults(session):
    widget, rectangles = session.add_widget(WidgetDraft(type=WidgetType.CHART))

    assert widget.title == "New Chart"
    assert widget.settings == {"chartType": "line", "chartInterval": "daily"}
    assert set(rectangles) == set(BREAKPOINTS)
    assert (rectangles[Breakpoint.SM].w, rectangles[Breakpoint.SM].h) == (2, 4)
    _assert_consistent(session)


def test_add_widget_keeps_given_fields(session):
    draft = WidgetDraft(
        type="card",
        title="Apple",
        api_config=ApiConfig(provider="finnhub", endpoint="quote", params={"symbol": "AAPL"}),
        settings={"cardType": "watchlist"},
        format="currency",
    )
    widget, _ = session.add_widget(draft)

    assert widget.title == "Apple"
    assert widget.settings == {"cardType": "watchlist"}
    assert widget.api_config.params == {"symbol": "AAPL"}


def test_widget_ids_are_unique(session):
    ids = {session.add_widget(WidgetDraft(type="table"))[0].id for _ in range(5)}
    assert len(ids) == 5


def test_many_widgets_never_overlap(session):
    for index in range(12):
        session.add_widget(WidgetDraft(type=["card", "table", "chart"][index % 3]))
    _assert_consistent(session)
    lg = session.state.layout(Breakpoint.LG)
    assert [(r.x, r.y) for r in lg[:4]] == [(0, 0), (4, 0), (8, 0), (0, 4)]


def test_event_inside_insert_window_is_ignored(session, clock):
    """A surface event right after an insertion must not clobber the planned position."""
    widget, rectangles = session.add_widget(WidgetDraft(type="card"))
    stale_event = {bp.value: [] for bp in BREAKPOINTS}

    clock.advance(0.3)
    assert session.apply_layout_change(stale_event) == {}
    assert session.state.layout(Breakpoint.LG) == [rectangles[Breakpoint.LG]]

    clock.advance(1.0)
    moved = _event(session)
    moved["lg"][0]["y"] = 3
    changed = session.apply_layout_change(moved)
    assert changed[Breakpoint.LG][0].y == 3


def test_first_event_after_load_is_ignored(session):
    session.add_widget(WidgetDraft(type="card"))
    session.gate.insert_window_seconds = 0
    session.gate.note_insert()
    session.load(session.export())

    moved = _event(session)
    moved["lg"][0]["x"] = 8
    assert session.apply_layout_change(moved) == {}
    assert session.apply_layout_change(moved)[Breakpoint.LG][0].x == 8


def test_layout_change_without_changes_commits_nothing(session, clock):
    session.add_widget(WidgetDraft(type="card"))
    clock.advance(2)
    assert session.apply_layout_change(_event(session)) == {}


def test_layout_change_heals_widgets_missing_from_event(session, clock):
    first, _ = session.add_widget(WidgetDraft(type="card"))
    second, _ = session.add_widget(WidgetDraft(type="card"))
    clock.advance(2)

    event = _event(session)
    event["lg"] = [{"i": second.id, "x": 0, "y": 0, "w": 4, "h": 4}]
    changed = session.apply_layout_change(event)

    assert {r.widget_id for r in changed[Breakpoint.LG]} == {first.id, second.id}
    _assert_consistent(session)


def test_healing_below_a_rectangle_taller_than_scan_bound(session):
    tall = settings.PLACEMENT_MAX_SCAN_ROWS + 1_000
    session.load(
        {
            "layouts": {"lg": [{"i": "a", "x": 0, "y": 0, "w": 12, "h": tall}, {"i": "b", "x": 0, "y": tall}]},
            "widgets": {
                "a": {"id": "a", "type": "chart", "title": "A"},
                "b": {"id": "b", "type": "card", "title": "B"},
            },
        }
    )
    session.apply_layout_change({})

    # The surface grows "a" over the slot of "b" and omits "b".
    changed = session.apply_layout_change({"lg": [{"i": "a", "x": 0, "y": 0, "w": 12, "h": tall + 2}]})

    healed = {r.widget_id: r for r in changed[Breakpoint.LG]}
    assert (healed["b"].x, healed["b"].y) == (0, tall + 2)
    _assert_consistent(session)


def test_layout_change_ignores_deleted_widgets(session, clock):
    widget, _ = session.add_widget(WidgetDraft(type="card"))
    clock.advance(2)
    event = _event(session)
    session.remove_widget(widget.id)

    assert session.apply_layout_change(event) == {}
    _assert_consistent(session)


def test_remove_widget_deletes_all_rectangles(session):
    keep, _ = session.add_widget(WidgetDraft(type="card"))
    drop, _ = session.add_widget(WidgetDraft(type="chart"))

    session.remove_widget(drop.id)

    assert set(session.state.widgets) == {keep.id}
    for bp in BREAKPOINTS:
        assert [r.widget_id for r in session.state.layout(bp)] == [keep.id]
    _assert_consistent(session)


def test_remove_unknown_widget_raises(session):
    with pytest.raises(WidgetNotFoundError):
        session.remove_widget("nope")
    with pytest.raises(KeyError):
        session.remove_widget("nope")


def test_update_widget_merges_and_keeps_id(session):
    widget, _ = session.add_widget(WidgetDraft(type="chart"))

    updated = session.update_widget(widget.id, WidgetUpdate(title="Trend", settings={"chartType": "candle"}))

    assert updated.id == widget.id
    assert updated.title == "Trend"
    assert updated.settings == {"chartType": "candle"}
    assert session.state.widgets[widget.id] == updated


def test_update_widget_ignores_null_title(session):
    widget, _ = session.add_widget(WidgetDraft(type="card", title="Keep"))
    assert session.update_widget(widget.id, WidgetUpdate(title=None)).title == "Keep"


def test_update_unknown_widget_raises(session):
    with pytest.raises(WidgetNotFoundError):
        session.update_widget("nope", WidgetUpdate(title="x"))


def test_set_theme(session):
    session.set_theme("light")
    assert session.export()["theme"] == "light"
    with pytest.raises(ValueError):
        session.set_theme("neon")


def test_load_template(session):
    state = session.load_template("crypto-tracker")
    assert "crypto-chart" in state.widgets
    _assert_consistent(session)


def test_unknown_template_raises(session):
    with pytest.raises(TemplateNotFoundError):
        session.load_template("missing")


def test_export_is_json_serialisable(session):
    session.add_widget(WidgetDraft(type="chart"))
    exported = json.loads(json.dumps(session.export()))
    assert set(exported) == {"layouts", "widgets", "theme"}
    assert set(exported["layouts"]) == {"lg", "md", "sm"}


def test_mutations_persist_and_restore(tmp_path, clock):
    store = DashboardStore(tmp_path / "dashboard.json")
    session = DashboardSession(store=store, gate=LayoutEventGate(clock=clock))
    session.restore()
    widget, _ = session.add_widget(WidgetDraft(type="card", title="Saved"))
    session.set_theme("light")

    restored = DashboardSession(store=store)
    restored.restore()

    assert restored.state == session.state
    assert restored.state.widgets[widget.id].title == "Saved"


def test_load_does_not_persist_unless_asked(tmp_path):
    store = DashboardStore(tmp_path / "dashboard.json")
    session = DashboardSession(store=store)

    session.load({"widgets": {"a": {"id": "a", "type": "card", "title": "A"}}})
    assert store.read_raw() is None

    session.load({"widgets": {"a": {"id": "a", "type": "card", "title": "A"}}}, persist=True)
    assert set(store.read_raw()["widgets"]) == {"a"}
