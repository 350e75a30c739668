"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class FeedStatus(BaseModel):
    """Connectivity and size of the current point store."""

    connected: bool
    error: Optional[str] = Field(
        default=None, description="Last subscription failure, if any."
    )
    point_count: int = Field(..., ge=0)
    bucket_count: int = Field(..., ge=0)


class PointOut(BaseModel):
    id: str
    timestamp: int = Field(..., description="Milliseconds since the epoch.")
    temperature: float
    humidity: Optional[float] = None
    sequence: Optional[float] = None
    time_text: str = Field(
        ..., description="Raw Time field, or the formatted timestamp when absent."
    )


class ChartPoint(BaseModel):
    timestamp: int
    display_time: str
    temperature: float


class LiveView(BaseModel):
    """Recent-window chart plus the latest reading."""

    status: FeedStatus
    chart: List[ChartPoint] = Field(default_factory=list)
    current: Optional[PointOut] = None
    chart_limit: int = Field(..., ge=1)
    bucket_minutes: int = Field(..., ge=1)


class HistoryRow(BaseModel):
    bucket_start: int
    bucket_end: int
    time_range: str
    point: PointOut


class HistoryPage(BaseModel):
    """One page of the newest-first bucket list."""

    rows: List[HistoryRow] = Field(default_factory=list)
    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=1)
    total_buckets: int = Field(..., ge=0)
    page_size: int = Field(..., ge=1)
    bucket_minutes: int = Field(..., ge=1)
