"""Application state and the transitions that produce new versions of it."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from models.records import Point
from services.aggregator import DEFAULT_BUCKET_WIDTH_MS, Aggregator
from services.normalizer import Clock, now_ms
from services.paginator import DEFAULT_PAGE_SIZE, converge_page, total_pages_for
from services.store import build_point_store


class Tab(str, Enum):
    live = "live"
    history = "history"


@dataclass(frozen=True)
class DashboardState:
    """Everything the presentation layer reads.

    Instances are never mutated; each transition returns a new state.
    """

    tab: Tab = Tab.live
    page: int = 1
    connected: bool = False
    error: str = ""
    points: Tuple[Point, ...] = ()

    @property
    def current_point(self) -> Optional[Point]:
        return self.points[-1] if self.points else None


def apply_snapshot(
    state: DashboardState,
    snapshot: Mapping[str, Any] | None,
    *,
    bucket_width_ms: int = DEFAULT_BUCKET_WIDTH_MS,
    page_size: int = DEFAULT_PAGE_SIZE,
    clock: Clock = now_ms,
) -> DashboardState:
    """Replace the point store with one rebuilt from ``snapshot``.

    Any snapshot, even an empty one, marks the feed as connected. The held
    page is pulled back if the new bucket list no longer reaches it.
    """
    points = tuple(build_point_store(snapshot, clock=clock))
    bucket_count = len(Aggregator().aggregate(points, bucket_width_ms))
    total_pages = total_pages_for(bucket_count, page_size)
    return replace(
        state,
        connected=True,
        points=points,
        page=converge_page(state.page, total_pages),
    )


def apply_error(state: DashboardState, message: str) -> DashboardState:
    """Mark the feed as disconnected, keeping the last known points."""
    return replace(state, connected=False, error=message)


def select_tab(state: DashboardState, tab: Tab) -> DashboardState:
    return replace(state, tab=tab)


def goto_page(
    state: DashboardState,
    page: int,
    *,
    bucket_width_ms: int = DEFAULT_BUCKET_WIDTH_MS,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> DashboardState:
    bucket_count = len(Aggregator().aggregate(state.points, bucket_width_ms))
    total_pages = total_pages_for(bucket_count, page_size)
    return replace(state, page=min(max(1, page), total_pages))
