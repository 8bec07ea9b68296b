"""
# Dashboard Models

This module defines the **grid model** of the Finboard dashboard: breakpoints, widget
rectangles, widget configuration and the dashboard state that ties them together.
The models carry data only. Placement, repair and reconciliation live in
`finboard.services`.

## Domain Overview

The dashboard is a responsive grid rendered at three **breakpoints**, each with a fixed
column count:

| Breakpoint | Columns | Default widget footprint (w x h) |
|------------|---------|----------------------------------|
| `lg`       | 12      | 4 x 4                            |
| `md`       | 10      | 4 x 4                            |
| `sm`       | 6       | 2 x 4                            |

Every widget owns **one rectangle per breakpoint**. Rectangles are stored per
breakpoint as an ordered list (a *layout*).

## Key Models

### 1. Rectangle
- **Purpose**: A widget's position and size in one breakpoint.
- **Fields**: `widget_id` (serialised as `i`), `x`, `y`, `w`, `h`, optional
  `min_w`/`min_h`/`max_w`/`max_h` (serialised camelCase).
- **Invariants**: `x >= 0`, `y >= 0`, `w >= 1`, `h >= 1`. The column bound
  `x + w <= columns` depends on the breakpoint and is kept by the services.

### 2. WidgetConfig
- **Purpose**: Display and data configuration of a card, table or chart.
- **Fields**: `id`, `type`, `title`, optional `description`, `api_config`,
  `data_map`, `settings`, `format`. Unknown fields are kept so they round-trip.

### 3. DashboardState
- **Purpose**: `layouts` per breakpoint, `widgets` by id, and `theme`.
- **Invariant**: every rectangle references an existing widget and every widget has
  exactly one rectangle per breakpoint. `invariant_violations()` reports breaches.

## Usage Example

```python
rect = Rectangle(widget_id="w_123", x=0, y=0, w=4, h=4)
rect.to_grid_item()
# {'i': 'w_123', 'x': 0, 'y': 0, 'w': 4, 'h': 4}
```
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Theme = Literal["light", "dark"]


class Breakpoint(str, Enum):
    """Responsive layout context."""

    LG = "lg"
    MD = "md"
    SM = "sm"


BREAKPOINTS: Tuple[Breakpoint, ...] = (Breakpoint.LG, Breakpoint.MD, Breakpoint.SM)

BREAKPOINT_COLUMNS: Dict[Breakpoint, int] = {
    Breakpoint.LG: 12,
    Breakpoint.MD: 10,
    Breakpoint.SM: 6,
}

DEFAULT_FOOTPRINTS: Dict[Breakpoint, Tuple[int, int]] = {
    Breakpoint.LG: (4, 4),
    Breakpoint.MD: (4, 4),
    Breakpoint.SM: (2, 4),
}


def column_count(breakpoint: Breakpoint) -> int:
    """Number of grid columns at `breakpoint`."""
    return BREAKPOINT_COLUMNS[Breakpoint(breakpoint)]


def default_footprint(breakpoint: Breakpoint) -> Tuple[int, int]:
    """Default `(w, h)` of a new or malformed widget rectangle at `breakpoint`."""
    return DEFAULT_FOOTPRINTS[Breakpoint(breakpoint)]


class GridPosition(BaseModel):
    """Top-left cell of a rectangle."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0, description="Column index")
    y: int = Field(..., ge=0, description="Row index")


class Rectangle(BaseModel):
    """Widget position and size within one breakpoint's grid."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    widget_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("widget_id", "i", "widgetId"),
        serialization_alias="i",
        description="Owning widget id",
    )
    x: int = Field(..., ge=0, description="X position in grid")
    y: int = Field(..., ge=0, description="Y position in grid")
    w: int = Field(..., ge=1, description="Width in grid columns")
    h: int = Field(..., ge=1, description="Height in grid rows")
    min_w: Optional[int] = Field(
        None, validation_alias=AliasChoices("min_w", "minW"), serialization_alias="minW"
    )
    min_h: Optional[int] = Field(
        None, validation_alias=AliasChoices("min_h", "minH"), serialization_alias="minH"
    )
    max_w: Optional[int] = Field(
        None, validation_alias=AliasChoices("max_w", "maxW"), serialization_alias="maxW"
    )
    max_h: Optional[int] = Field(
        None, validation_alias=AliasChoices("max_h", "maxH"), serialization_alias="maxH"
    )

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    def moved_to(self, x: int, y: int) -> "Rectangle":
        """Copy of this rectangle at a new top-left cell."""
        return self.model_copy(update={"x": x, "y": y})

    def to_grid_item(self) -> Dict[str, Any]:
        """Serialise in the grid-surface shape (`i`, `minW`, ...), omitting absent bounds."""
        return self.model_dump(by_alias=True, exclude_none=True)


class WidgetType(str, Enum):
    """Kind of widget rendered on the dashboard."""

    CARD = "card"
    TABLE = "table"
    CHART = "chart"


class ApiConfig(BaseModel):
    """Market-data query backing a widget."""

    provider: str = Field(..., description="Adapter id, e.g. 'finnhub'")
    endpoint: str = Field(..., description="Provider endpoint, e.g. 'quote'")
    params: Dict[str, str] = Field(default_factory=dict, description="Query parameters")


class WidgetConfig(BaseModel):
    """Widget configuration. Unknown display fields are preserved."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str = Field(..., min_length=1, description="Unique widget id, never reused")
    type: WidgetType = Field(..., description="Widget kind")
    title: str = Field(..., description="Display title")
    description: Optional[str] = None
    api_config: Optional[ApiConfig] = None
    data_map: Optional[Dict[str, str]] = Field(None, description="Display key -> JSON path in the API response")
    settings: Dict[str, Any] = Field(default_factory=dict, description="Widget-specific settings")
    format: Optional[Literal["number", "currency", "percent", "none"]] = None

    def to_persisted(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WidgetDraft(BaseModel):
    """A widget as submitted for creation: no id and no position."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: WidgetType
    title: Optional[str] = None
    description: Optional[str] = None
    api_config: Optional[ApiConfig] = None
    data_map: Optional[Dict[str, str]] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    format: Optional[Literal["number", "currency", "percent", "none"]] = None


class WidgetUpdate(BaseModel):
    """Partial update of a widget's display and data configuration."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    api_config: Optional[ApiConfig] = None
    data_map: Optional[Dict[str, str]] = None
    settings: Optional[Dict[str, Any]] = None
    format: Optional[Literal["number", "currency", "percent", "none"]] = None


def empty_layouts() -> Dict[Breakpoint, List[Rectangle]]:
    return {bp: [] for bp in BREAKPOINTS}


class DashboardState(BaseModel):
    """
    Canonical dashboard: per-breakpoint layouts, widgets by id, and theme.

    **Core invariant:** every rectangle's `widget_id` refers to an existing widget, and
    every widget has exactly one rectangle per breakpoint, inside the column bound.
    """

    layouts: Dict[Breakpoint, List[Rectangle]] = Field(default_factory=empty_layouts)
    widgets: Dict[str, WidgetConfig] = Field(default_factory=dict)
    theme: Theme = "dark"

    def layout(self, breakpoint: Breakpoint) -> List[Rectangle]:
        return self.layouts.get(Breakpoint(breakpoint), [])

    def invariant_violations(self) -> List[str]:
        """
        List every breach of the core invariant.

        An empty list means the state is consistent. A non-empty list after a public
        mutation is a defect in the mutation, not a recoverable condition.
        """
        problems: List[str] = []
        for bp in BREAKPOINTS:
            columns = BREAKPOINT_COLUMNS[bp]
            seen = set()
            for rect in self.layout(bp):
                if rect.widget_id not in self.widgets:
                    problems.append(f"{bp.value}: rectangle references unknown widget {rect.widget_id}")
                if rect.widget_id in seen:
                    problems.append(f"{bp.value}: duplicate rectangle for widget {rect.widget_id}")
                seen.add(rect.widget_id)
                if rect.right > columns:
                    problems.append(
                        f"{bp.value}: widget {rect.widget_id} exceeds {columns} columns (x={rect.x}, w={rect.w})"
                    )
            for widget_id in self.widgets:
                if widget_id not in seen:
                    problems.append(f"{bp.value}: widget {widget_id} has no rectangle")
        return problems

    def to_persisted(self) -> Dict[str, Any]:
        """JSON-serialisable `{layouts: {lg, md, sm}, widgets, theme}` document."""
        return {
            "layouts": {bp.value: [rect.to_grid_item() for rect in self.layout(bp)] for bp in BREAKPOINTS},
            "widgets": {widget_id: widget.to_persisted() for widget_id, widget in self.widgets.items()},
            "theme": self.theme,
        }
