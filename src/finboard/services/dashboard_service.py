"""
# Dashboard Service

This module implements `DashboardSession`, the **only** code path that mutates a
dashboard. Every public method leaves the state satisfying the core invariant:
each rectangle references an existing widget and each widget has exactly one
rectangle per breakpoint.

## Domain Overview

| Operation | Engine component | Persists |
|-----------|------------------|----------|
| `load` / `restore` | Overlap resolver (`normalize_dashboard`) | Only when asked (`import`, templates) |
| `add_widget` | Placement planner, once per breakpoint | Yes |
| `remove_widget` | Widget and rectangles deleted together | Yes |
| `update_widget` | Shallow merge, id is immutable | Yes |
| `apply_layout_change` | Event gate, then reconciler | Only if a breakpoint changed |
| `set_theme` | None | Yes |

## Event Ordering

The host serialises calls per session. A load completes before any placement or
reconciliation, and `add_widget` inserts all three rectangles before opening the
insertion grace window of the `LayoutEventGate`.

## Usage Example

```python
session = DashboardSession(store=DashboardStore("dashboard.json"))
session.restore()
widget, rectangles = session.add_widget(WidgetDraft(type="chart"))
session.apply_layout_change({"lg": [...], "md": [...], "sm": [...]})
```
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple
import uuid

from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import (
    BREAKPOINT_COLUMNS,
    BREAKPOINTS,
    Breakpoint,
    DashboardState,
    Rectangle,
    Theme,
    WidgetConfig,
    WidgetDraft,
    WidgetType,
    WidgetUpdate,
)
from finboard.routes.dashboard.template_data import get_template
from finboard.services.dashboard_store import DashboardStore
from finboard.services.grid_collision import collides_with_any
from finboard.services.layout_reconciler import LayoutEventGate, reconcile
from finboard.services.overlap_resolver import normalize_dashboard
from finboard.services.placement_planner import find_free_position_or_below, plan_widget_rectangles

logger = get_logger(prefix="[DashboardService]")

DEFAULT_WIDGET_SETTINGS: Dict[WidgetType, Dict[str, Any]] = {
    WidgetType.CHART: {"chartType": "line", "chartInterval": "daily"},
    WidgetType.CARD: {"cardType": "single"},
    WidgetType.TABLE: {},
}


class WidgetNotFoundError(KeyError):
    """Raised when an operation references a widget id that is not on the dashboard."""


class TemplateNotFoundError(KeyError):
    """Raised when a template id is not one of the built-in templates."""


class DashboardSession:
    """
    Owns one dashboard state, its layout event gate and an optional store.

    Args:
        store: Where the dashboard is persisted. `None` keeps it in memory only.
        gate: Event gate for grid-surface events; a default gate is created if omitted.
    """

    def __init__(self, store: Optional[DashboardStore] = None, gate: Optional[LayoutEventGate] = None):
        self.store = store
        self.gate = gate or LayoutEventGate()
        self.state = DashboardState()

    @property
    def widget_count(self) -> int:
        return len(self.state.widgets)

    def _persist(self):
        if self.store is not None:
            self.store.write(self.state)

    def _require_widget(self, widget_id: str) -> WidgetConfig:
        widget = self.state.widgets.get(widget_id)
        if widget is None:
            raise WidgetNotFoundError(widget_id)
        return widget

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, raw: Any, persist: bool = False) -> DashboardState:
        """
        Replace the dashboard with an untrusted raw document.

        The document is normalised (orphans dropped, overlaps repaired, missing
        rectangles placed) and the initial-load suppression is re-armed.

        Args:
            raw: Parsed JSON from storage, an import or a template.
            persist: Write the normalised state back to the store.

        Returns:
            DashboardState: The new canonical state.
        """
        self.state = normalize_dashboard(raw)
        self.gate.mark_loaded()
        logger.info(f"Loaded dashboard with {self.widget_count} widgets (theme={self.state.theme})")
        if persist:
            self._persist()
        return self.state

    def restore(self) -> DashboardState:
        """Load the persisted dashboard, or an empty one if nothing usable is stored."""
        raw = self.store.read_raw() if self.store is not None else None
        return self.load(raw if raw is not None else {})

    def load_template(self, template_id: str) -> DashboardState:
        """
        Replace the dashboard with a built-in template.

        Raises:
            TemplateNotFoundError: If `template_id` is unknown.
        """
        template = get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        logger.info(f"Loading template {template_id}")
        return self.load(template, persist=True)

    def export(self) -> Dict[str, Any]:
        """JSON-serialisable `{layouts, widgets, theme}` document."""
        return self.state.to_persisted()

    # ------------------------------------------------------------------
    # Widgets
    # ------------------------------------------------------------------

    def add_widget(self, draft: WidgetDraft) -> Tuple[WidgetConfig, Dict[Breakpoint, Rectangle]]:
        """
        Create a widget and place it in every breakpoint.

        Args:
            draft: Widget type and optional display/config fields.

        Returns:
            Tuple[WidgetConfig, Dict[Breakpoint, Rectangle]]: The new widget and its
            planned rectangle per breakpoint.
        """
        widget_id = str(uuid.uuid4())
        widget_type = WidgetType(draft.type)
        settings = {**DEFAULT_WIDGET_SETTINGS.get(widget_type, {}), **draft.settings}

        widget = WidgetConfig(
            id=widget_id,
            type=widget_type,
            title=draft.title or f"New {widget_type.value.capitalize()}",
            description=draft.description,
            api_config=draft.api_config,
            data_map=draft.data_map,
            settings=settings,
            format=draft.format,
        )

        rectangles = plan_widget_rectangles(self.state.layouts, widget_id)
        self.state.widgets[widget_id] = widget
        for bp, rect in rectangles.items():
            self.state.layouts[bp] = [*self.state.layout(bp), rect]

        self.gate.note_insert()
        logger.info(
            f"Added {widget_type.value} widget {widget_id} at "
            + ", ".join(f"{bp.value}=({rect.x}, {rect.y})" for bp, rect in rectangles.items())
        )
        self._persist()
        return widget, rectangles

    def remove_widget(self, widget_id: str):
        """
        Delete a widget together with its rectangle in every breakpoint.

        Raises:
            WidgetNotFoundError: If the widget does not exist.
        """
        self._require_widget(widget_id)
        del self.state.widgets[widget_id]
        for bp in BREAKPOINTS:
            self.state.layouts[bp] = [rect for rect in self.state.layout(bp) if rect.widget_id != widget_id]
        logger.info(f"Removed widget {widget_id}")
        self._persist()

    def update_widget(self, widget_id: str, changes: WidgetUpdate) -> WidgetConfig:
        """
        Shallow-merge display/config changes into a widget. The id never changes.

        Raises:
            WidgetNotFoundError: If the widget does not exist.
        """
        widget = self._require_widget(widget_id)
        update = {name: getattr(changes, name) for name in changes.model_fields_set}
        if update.get("title") is None:
            update.pop("title", None)
        if update.get("settings") is None:
            update.pop("settings", None)

        updated = widget.model_copy(update=update)
        self.state.widgets[widget_id] = updated
        logger.info(f"Updated widget {widget_id}: {sorted(update)}")
        self._persist()
        return updated

    def set_theme(self, theme: Theme):
        if theme not in ("light", "dark"):
            raise ValueError(f"Unknown theme: {theme}")
        self.state.theme = theme
        self._persist()

    # ------------------------------------------------------------------
    # Grid surface events
    # ------------------------------------------------------------------

    def _heal_missing(self, breakpoint: Breakpoint, layout: List[Rectangle]) -> List[Rectangle]:
        """Keep the canonical rectangle of every widget the surface event left out."""
        present = {rect.widget_id for rect in layout}
        columns = BREAKPOINT_COLUMNS[breakpoint]
        canonical = {rect.widget_id: rect for rect in self.state.layout(breakpoint)}

        healed = list(layout)
        for widget_id in self.state.widgets:
            if widget_id in present:
                continue
            rect = canonical[widget_id]
            if rect.right > columns or collides_with_any(rect, healed):
                position = find_free_position_or_below(
                    healed, columns, rect.w, rect.h, widget_id=widget_id, breakpoint=breakpoint.value
                )
                rect = rect.moved_to(position.x, position.y)
            healed.append(rect)
        return healed

    def apply_layout_change(self, all_layouts: Mapping[Any, Any]) -> Dict[Breakpoint, List[Rectangle]]:
        """
        Commit a grid-surface layout event.

        Args:
            all_layouts: Raw item lists keyed by breakpoint name.

        Returns:
            Dict[Breakpoint, List[Rectangle]]: The breakpoints that changed. Empty when
            the event was suppressed or carried no change.
        """
        if self.gate.screen_event() is not None:
            return {}

        changed = reconcile(all_layouts, set(self.state.widgets), self.state.layouts)
        committed: Dict[Breakpoint, List[Rectangle]] = {}
        for bp, layout in changed.items():
            healed = self._heal_missing(bp, layout)
            if healed != self.state.layout(bp):
                committed[bp] = healed

        if committed:
            self.state.layouts.update(committed)
            logger.debug(f"Committed layout change for {[bp.value for bp in committed]}")
            self._persist()
        return committed
