from __future__ import annotations

from pathlib import Path
from typing import Sequence

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.schemas import ChartPoint
from services.chart import format_fixed, format_sequence
from services.dashboard import DashboardService, build_default_dashboard
from services.state import Tab
from services.paginator import converge_page


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

CHART_WIDTH = 640
CHART_HEIGHT = 220


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


templates.env.filters["fixed"] = format_fixed
templates.env.filters["sequence"] = format_sequence


def chart_polyline(
    chart: Sequence[ChartPoint],
    width: int = CHART_WIDTH,
    height: int = CHART_HEIGHT,
) -> str:
    """Scale chart points into SVG ``points`` coordinates."""
    if not chart:
        return ""
    low = min(point.temperature for point in chart)
    high = max(point.temperature for point in chart)
    span = (high - low) or 1.0
    step = width / max(1, len(chart) - 1)
    coordinates = []
    for index, point in enumerate(chart):
        x = index * step
        y = height - (point.temperature - low) / span * height
        coordinates.append(f"{x:.1f},{y:.1f}")
    return " ".join(coordinates)


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_live", response_class=HTMLResponse)
async def ui_live(
    request: Request,
    dashboard: DashboardService = Depends(get_dashboard),
) -> HTMLResponse:
    dashboard.show_tab(Tab.live)
    view = dashboard.live_view()
    return templates.TemplateResponse(
        request,
        "ui/live.html",
        {
            "view": view,
            "status": view.status,
            "active_tab": "live",
            "polyline": chart_polyline(view.chart),
            "chart_width": CHART_WIDTH,
            "chart_height": CHART_HEIGHT,
        },
    )


@router.get("/ui/history", name="ui_history", response_class=HTMLResponse)
async def ui_history(
    request: Request,
    page: int = Query(1),
    dashboard: DashboardService = Depends(get_dashboard),
):
    view = dashboard.show_history(page)
    target = converge_page(page, view.total_pages)
    if target != page:
        url = request.url_for("ui_history").include_query_params(page=target)
        return RedirectResponse(url=str(url), status_code=303)

    return templates.TemplateResponse(
        request,
        "ui/history.html",
        {"view": view, "status": dashboard.status(), "active_tab": "history"},
    )
