"""Recent-window projection of the point store for the live chart."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from models.records import ChartRow, Point

DEFAULT_CHART_POINTS = 120


def format_clock_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M")


def format_date_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d/%m/%Y %H:%M:%S")


def format_fixed(value: Optional[float], unit: str, digits: int = 2) -> str:
    if value is None:
        return "--"
    return f"{value:.{digits}f}{unit}"


def format_sequence(value: Optional[float]) -> str:
    if value is None:
        return "--"
    return str(int(value)) if float(value).is_integer() else str(value)


def project(points: Sequence[Point], limit: int = DEFAULT_CHART_POINTS) -> list[ChartRow]:
    if limit <= 0:
        return []
    recent = points[max(0, len(points) - limit):]
    return [
        ChartRow(
            timestamp=point.timestamp,
            display_time=format_clock_time(point.timestamp),
            temperature=point.temperature,
        )
        for point in recent
    ]
