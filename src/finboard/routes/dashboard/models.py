"""
# Dashboard API Models

Request and response bodies of the `/dashboard` routes.

## Key Models

### 1. Layout Event
- **Purpose**: A grid-surface callback after a drag, resize or mount.
- **Fields**: `layouts`, raw item lists keyed by breakpoint name. Items are
  untrusted and are validated by the reconciler, so they stay plain dicts here.

### 2. Widget Response
- **Purpose**: A created widget together with its rectangle in every breakpoint.

## Usage Example

```python
event = LayoutEventRequest(layouts={"lg": [{"i": "w_123", "x": 0, "y": 0, "w": 6, "h": 4}]})
```
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from finboard.models.dashboard_models import Theme


class LayoutEventRequest(BaseModel):
    """Grid-surface layout event for all breakpoints."""

    layouts: Dict[str, Any] = Field(..., description="Raw layout items by breakpoint name; malformed entries are skipped")


class LayoutEventResponse(BaseModel):
    """Outcome of a layout event."""

    changed: List[str] = Field(default_factory=list, description="Breakpoints that were committed")
    layouts: Dict[str, List[Dict[str, Any]]] = Field(..., description="Canonical layouts after the event")


class ThemeRequest(BaseModel):
    theme: Theme


class WidgetResponse(BaseModel):
    """A widget and its rectangles."""

    widget: Dict[str, Any] = Field(..., description="Widget configuration")
    rectangles: Dict[str, Dict[str, Any]] = Field(..., description="Rectangle by breakpoint name")


class DashboardResponse(BaseModel):
    """Persisted dashboard shape."""

    layouts: Dict[str, List[Dict[str, Any]]]
    widgets: Dict[str, Dict[str, Any]]
    theme: Theme


class TemplateInfo(BaseModel):
    id: str
    name: str
    description: str
    category: str
