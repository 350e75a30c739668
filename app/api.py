"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas import FeedStatus, HistoryPage, LiveView
from services.dashboard import DashboardService, build_default_dashboard

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


@router.get(
    "/api/status",
    response_model=FeedStatus,
    summary="Feed connectivity and point store size.",
)
async def feed_status(
    dashboard: DashboardService = Depends(get_dashboard),
) -> FeedStatus:
    return dashboard.status()


@router.get(
    "/api/live",
    response_model=LiveView,
    summary="Recent readings for the live chart and the latest value.",
)
async def live(
    dashboard: DashboardService = Depends(get_dashboard),
) -> LiveView:
    return dashboard.live_view()


@router.get(
    "/api/history",
    response_model=HistoryPage,
    summary="One page of per-bucket history, newest first.",
)
async def history(
    page: Optional[int] = Query(
        None, description="1-based page number; out-of-range values are clamped."
    ),
    dashboard: DashboardService = Depends(get_dashboard),
) -> HistoryPage:
    return dashboard.show_history(page)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard."}
