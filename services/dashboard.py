"""Wiring between the feed subscription, application state and derived views."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, Optional

from app.schemas import (
    ChartPoint,
    FeedStatus,
    HistoryPage,
    HistoryRow,
    LiveView,
    PointOut,
)
from feed.subscriber import FeedSubscriber
from models.records import Bucket, Point
from services.aggregator import Aggregator
from services.chart import format_date_time, project
from services.normalizer import Clock, now_ms
from services.paginator import paginate
from services.state import (
    DashboardState,
    Tab,
    apply_error,
    apply_snapshot,
    goto_page,
    select_tab,
)
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

MISSING_URL_MESSAGE = "Feed database URL is not configured (set FEED_DATABASE_URL)."


class DashboardService:
    """Holds the current :class:`DashboardState` and renders views from it."""

    def __init__(
        self,
        settings: Settings,
        subscriber: Optional[FeedSubscriber],
        aggregator: Aggregator,
        clock: Clock = now_ms,
    ) -> None:
        self.settings = settings
        self.subscriber = subscriber
        self.aggregator = aggregator
        self.clock = clock
        self.state = DashboardState()

    def handle_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self.state = apply_snapshot(
            self.state,
            snapshot,
            bucket_width_ms=self.settings.bucket_width_ms,
            page_size=self.settings.page_size,
            clock=self.clock,
        )
        point_count = len(self.state.points)
        logger.info(
            "Applied feed snapshot",
            extra={"point_count": point_count, "dropped_count": len(snapshot) - point_count},
        )

    def handle_error(self, message: str) -> None:
        self.state = apply_error(self.state, message)

    @asynccontextmanager
    async def running(self) -> AsyncIterator["DashboardService"]:
        """Keep the feed subscription open for the duration of the block."""
        if self.subscriber is None:
            self.handle_error(MISSING_URL_MESSAGE)
            logger.warning(MISSING_URL_MESSAGE)
            yield self
            return

        try:
            async with self.subscriber.subscribe(self.handle_snapshot, self.handle_error):
                yield self
        finally:
            await self.subscriber.aclose()

    def buckets(self) -> list[Bucket]:
        return self.aggregator.aggregate(self.state.points, self.settings.bucket_width_ms)

    def status(self) -> FeedStatus:
        return FeedStatus(
            connected=self.state.connected,
            error=self.state.error or None,
            point_count=len(self.state.points),
            bucket_count=len(self.buckets()),
        )

    def live_view(self) -> LiveView:
        points = self.state.points
        chart = project(points, self.settings.chart_max_points)
        current = self.state.current_point
        return LiveView(
            status=self.status(),
            chart=[
                ChartPoint(
                    timestamp=row.timestamp,
                    display_time=row.display_time,
                    temperature=row.temperature,
                )
                for row in chart
            ],
            current=_point_out(current) if current is not None else None,
            chart_limit=self.settings.chart_max_points,
            bucket_minutes=self.settings.bucket_minutes,
        )

    def show_tab(self, tab: Tab) -> None:
        self.state = select_tab(self.state, tab)

    def show_history(self, page: Optional[int] = None) -> HistoryPage:
        """Switch to the history tab, remember ``page`` if given, and render it.

        The stored page is clamped to the current bucket count and is pulled
        back again by later snapshots if the history shrinks.
        """
        self.show_tab(Tab.history)
        if page is not None:
            self.state = goto_page(
                self.state,
                page,
                bucket_width_ms=self.settings.bucket_width_ms,
                page_size=self.settings.page_size,
            )
        return self.history_view()

    def history_view(self, page: Optional[int] = None) -> HistoryPage:
        buckets = self.buckets()
        requested = self.state.page if page is None else page
        result = paginate(buckets, self.settings.page_size, requested)
        return HistoryPage(
            rows=[_history_row(bucket) for bucket in result.rows],
            current_page=result.current_page,
            total_pages=result.total_pages,
            total_buckets=len(buckets),
            page_size=self.settings.page_size,
            bucket_minutes=self.settings.bucket_minutes,
        )


def _point_out(point: Point) -> PointOut:
    return PointOut(
        id=point.id,
        timestamp=point.timestamp,
        temperature=point.temperature,
        humidity=point.humidity,
        sequence=point.sequence,
        time_text=point.raw_time_text or format_date_time(point.timestamp),
    )


def _history_row(bucket: Bucket) -> HistoryRow:
    point = bucket.point
    return HistoryRow(
        bucket_start=bucket.start,
        bucket_end=bucket.end,
        time_range=f"{format_date_time(bucket.start)} → {format_date_time(bucket.end)}",
        point=_point_out(point),
    )


@lru_cache
def build_default_dashboard() -> DashboardService:
    """Factory that wires the dashboard with a subscriber built from settings."""
    settings = get_settings()
    subscriber = None
    if settings.database_url:
        subscriber = FeedSubscriber(
            database_url=settings.database_url,
            path=settings.feed_path,
            limit=settings.feed_limit,
        )
    return DashboardService(settings=settings, subscriber=subscriber, aggregator=Aggregator())
