"""
# Layout Reconciler

Folds drag/resize/mount events from the interactive grid surface back into the
canonical per-breakpoint layouts.

## Reconciliation (`reconcile`)

For every breakpoint the surface reports:

- Items whose widget id is unknown are dropped (stale surface state for a deleted widget).
- `x`/`y` are coerced to non-negative integers, `w`/`h` to integers of at least `1`
  (missing or zero values take the breakpoint's default footprint), `w` is clamped to
  the column count and `x` to `columns - w`.
- `minW`/`minH`/`maxW`/`maxH` are carried through.

The result for a breakpoint is compared with the canonical list using structural
equality of the whole ordered list. Only breakpoints that differ are returned, so an
empty result means "nothing to commit". Breakpoints the grid does not know about
(`xs`, `xxs`) are ignored.

## Event Gate (`LayoutEventGate`)

The surface emits events that must **not** be committed:

| Phase machine | States | Effect |
|---------------|--------|--------|
| Load | `IDLE -> JUST_LOADED -> NORMAL` | The first event after every load is swallowed. Events before any load are ignored. |
| Insert | `IDLE -> JUST_INSERTED(expiry) -> IDLE` | Events within `settings.INSERT_SUPPRESSION_SECONDS` of a programmatic insertion are ignored. |

The clock is injectable so both windows can be tested without sleeping.

## Usage Example

```python
gate = LayoutEventGate()
gate.mark_loaded()
gate.screen_event()  # "initial_load"
gate.screen_event()  # None -> reconcile
```
"""

from enum import Enum
import time
from typing import Any, Callable, Collection, Dict, List, Mapping, Optional, Sequence

from finboard.config import settings
from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import BREAKPOINT_COLUMNS, BREAKPOINTS, Breakpoint, Rectangle, default_footprint
from finboard.services.layout_metrics import layout_metrics
from finboard.services.raw_layout import RawItem, rectangle_from_raw

logger = get_logger(prefix="[LayoutReconciler]")

_BREAKPOINT_NAMES = {bp.value: bp for bp in BREAKPOINTS}


def _as_breakpoint(key: Any) -> Optional[Breakpoint]:
    if isinstance(key, Breakpoint):
        return key
    return _BREAKPOINT_NAMES.get(key)


def _reconcile_breakpoint(
    items: Sequence[RawItem],
    breakpoint: Breakpoint,
    known_widget_ids: Collection[str],
) -> List[Rectangle]:
    columns = BREAKPOINT_COLUMNS[breakpoint]
    w, h = default_footprint(breakpoint)

    result: List[Rectangle] = []
    seen = set()
    for item in items:
        rect = rectangle_from_raw(item, columns, w, h, clamp_x=True)
        if rect is None or rect.widget_id not in known_widget_ids or rect.widget_id in seen:
            continue
        seen.add(rect.widget_id)
        result.append(rect)
    return result


def reconcile(
    proposed: Mapping[Any, Any],
    known_widget_ids: Collection[str],
    canonical: Mapping[Breakpoint, Sequence[Rectangle]],
) -> Dict[Breakpoint, List[Rectangle]]:
    """
    Validate a surface event and return only the breakpoints that actually changed.

    Args:
        proposed: Raw item lists keyed by breakpoint name, as emitted by the surface.
        known_widget_ids: Ids of the widgets currently on the dashboard.
        canonical: Current canonical layouts by breakpoint.

    Returns:
        Dict[Breakpoint, List[Rectangle]]: Validated layouts of the changed breakpoints.
    """
    changed: Dict[Breakpoint, List[Rectangle]] = {}
    for key, items in proposed.items():
        bp = _as_breakpoint(key)
        if bp is None:
            continue
        if not isinstance(items, (list, tuple)):
            logger.warning(f"Ignoring non-list {bp.value} layout in surface event")
            continue

        reconciled = _reconcile_breakpoint(items, bp, known_widget_ids)
        if reconciled != list(canonical.get(bp, [])):
            changed[bp] = reconciled
    return changed


class LoadPhase(str, Enum):
    IDLE = "idle"
    JUST_LOADED = "just_loaded"
    NORMAL = "normal"


class InsertPhase(str, Enum):
    IDLE = "idle"
    JUST_INSERTED = "just_inserted"


class LayoutEventGate:
    """
    Decides whether a grid-surface layout event may be reconciled.

    One gate belongs to one dashboard session. Only a single insertion can be in
    flight, so the insert window is a single expiry rather than a queue.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        insert_window_seconds: Optional[float] = None,
    ):
        self._clock = clock
        self.insert_window_seconds = (
            settings.INSERT_SUPPRESSION_SECONDS if insert_window_seconds is None else insert_window_seconds
        )
        self.load_phase = LoadPhase.IDLE
        self.insert_phase = InsertPhase.IDLE
        self.insert_expires_at: Optional[float] = None

    def mark_loaded(self):
        """Arm the one-shot initial-load suppression. Called on every load."""
        self.load_phase = LoadPhase.JUST_LOADED

    def note_insert(self):
        """Open the grace window after rectangles were inserted programmatically."""
        self.insert_phase = InsertPhase.JUST_INSERTED
        self.insert_expires_at = self._clock() + self.insert_window_seconds

    def _refresh_insert_phase(self):
        if self.insert_phase is InsertPhase.JUST_INSERTED and self._clock() >= self.insert_expires_at:
            self.insert_phase = InsertPhase.IDLE
            self.insert_expires_at = None

    def screen_event(self) -> Optional[str]:
        """
        Screen one surface event, advancing the phase machines.

        Returns:
            Optional[str]: The suppression reason (`not_loaded`, `initial_load` or
            `recent_insert`), or `None` when the event should be reconciled.
        """
        reason: Optional[str] = None
        if self.load_phase is LoadPhase.IDLE:
            reason = "not_loaded"
        elif self.load_phase is LoadPhase.JUST_LOADED:
            self.load_phase = LoadPhase.NORMAL
            reason = "initial_load"
        else:
            self._refresh_insert_phase()
            if self.insert_phase is InsertPhase.JUST_INSERTED:
                reason = "recent_insert"

        if reason is not None:
            logger.debug(f"Suppressed layout event: {reason}")
            layout_metrics.record_suppressed_event(reason)
        return reason
