"""
# Dashboard Routes

HTTP surface of the dashboard session.

| Method | Path | Behaviour |
|--------|------|-----------|
| GET | `/dashboard` | Current state |
| POST | `/dashboard/widgets` | Create a widget and place it in every breakpoint |
| PATCH | `/dashboard/widgets/{widget_id}` | Update display/config fields |
| DELETE | `/dashboard/widgets/{widget_id}` | Remove a widget and its rectangles |
| POST | `/dashboard/layouts` | Grid-surface layout event |
| PUT | `/dashboard/theme` | Set the theme |
| POST | `/dashboard/import` | Load an untrusted dashboard document |
| GET | `/dashboard/export` | Export the dashboard document |
| GET | `/dashboard/templates` | List built-in templates |
| POST | `/dashboard/templates/{template_id}` | Load a built-in template |

Malformed dashboard documents never fail an import: they are repaired by the load
pathway. Unknown widget and template ids answer 404.
"""

from typing import Any, List

from fastapi import APIRouter, Body, Depends, HTTPException, status

from finboard.managers.logging_manager import get_logger
from finboard.models.dashboard_models import BREAKPOINTS, WidgetDraft, WidgetUpdate
from finboard.routes.dashboard.models import (
    DashboardResponse,
    LayoutEventRequest,
    LayoutEventResponse,
    TemplateInfo,
    ThemeRequest,
    WidgetResponse,
)
from finboard.routes.dashboard.template_data import get_template_infos
from finboard.routes.dependencies import get_dashboard_session
from finboard.services.dashboard_service import DashboardSession, TemplateNotFoundError, WidgetNotFoundError

logger = get_logger(prefix="[DashboardRoutes]")

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(session: DashboardSession = Depends(get_dashboard_session)):
    """Return the current dashboard in its persisted shape."""
    return session.export()


@router.post("/widgets", response_model=WidgetResponse, status_code=status.HTTP_201_CREATED)
async def create_widget(draft: WidgetDraft, session: DashboardSession = Depends(get_dashboard_session)):
    """
    Create a widget and place it at the first free slot of every breakpoint.

    Args:
        draft (WidgetDraft): Widget type and optional display/config fields.

    Returns:
        WidgetResponse: The new widget and its rectangle per breakpoint.
    """
    widget, rectangles = session.add_widget(draft)
    return WidgetResponse(
        widget=widget.to_persisted(),
        rectangles={bp.value: rect.to_grid_item() for bp, rect in rectangles.items()},
    )


@router.patch("/widgets/{widget_id}")
async def update_widget(
    widget_id: str,
    changes: WidgetUpdate,
    session: DashboardSession = Depends(get_dashboard_session),
):
    """
    Update a widget's display and data configuration.

    Raises:
        HTTPException(404): If the widget does not exist.
    """
    try:
        widget = session.update_widget(widget_id, changes)
    except WidgetNotFoundError:
        raise HTTPException(status_code=404, detail=f"Widget {widget_id} not found")
    return widget.to_persisted()


@router.delete("/widgets/{widget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_widget(widget_id: str, session: DashboardSession = Depends(get_dashboard_session)):
    """
    Remove a widget together with its rectangles.

    Raises:
        HTTPException(404): If the widget does not exist.
    """
    try:
        session.remove_widget(widget_id)
    except WidgetNotFoundError:
        raise HTTPException(status_code=404, detail=f"Widget {widget_id} not found")


@router.post("/layouts", response_model=LayoutEventResponse)
async def apply_layout_event(
    event: LayoutEventRequest,
    session: DashboardSession = Depends(get_dashboard_session),
):
    """
    Fold a grid-surface layout event into the canonical layouts.

    Events right after a load or a widget insertion are ignored. Otherwise only
    breakpoints whose validated layout differs from the canonical one are committed.

    Returns:
        LayoutEventResponse: Committed breakpoints and the resulting canonical layouts.
    """
    changed = session.apply_layout_change(event.layouts)
    return LayoutEventResponse(
        changed=[bp.value for bp in BREAKPOINTS if bp in changed],
        layouts=session.export()["layouts"],
    )


@router.put("/theme", response_model=DashboardResponse)
async def set_theme(request: ThemeRequest, session: DashboardSession = Depends(get_dashboard_session)):
    session.set_theme(request.theme)
    return session.export()


@router.post("/import", response_model=DashboardResponse)
async def import_dashboard(
    raw: Any = Body(..., description="Dashboard document; repaired if malformed"),
    session: DashboardSession = Depends(get_dashboard_session),
):
    """
    Replace the dashboard with an imported document.

    The document is untrusted: invalid widgets and orphaned rectangles are dropped,
    overlaps are repaired and missing rectangles are placed.
    """
    session.load(raw, persist=True)
    logger.info(f"Imported dashboard with {session.widget_count} widgets")
    return session.export()


@router.get("/export", response_model=DashboardResponse)
async def export_dashboard(session: DashboardSession = Depends(get_dashboard_session)):
    return session.export()


@router.get("/templates", response_model=List[TemplateInfo])
async def list_templates():
    return get_template_infos()


@router.post("/templates/{template_id}", response_model=DashboardResponse)
async def load_template(template_id: str, session: DashboardSession = Depends(get_dashboard_session)):
    """
    Replace the dashboard with a built-in template.

    Raises:
        HTTPException(404): If the template does not exist.
    """
    try:
        session.load_template(template_id)
    except TemplateNotFoundError:
        raise HTTPException(status_code=404, detail=f"Template {template_id} not found")
    return session.export()
