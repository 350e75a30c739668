"""Unit tests for the chart projection and bucket aggregation logic."""

from __future__ import annotations

import pytest

from models.records import Point
from services.aggregator import Aggregator, bucket_start
from services.chart import format_fixed, format_sequence, project

BASE_MS = 1_704_067_200_000  # a whole minute


def _point(point_id: str, timestamp: int, temperature: float = 20.0) -> Point:
    """Helper to build deterministic points."""

    return Point(id=point_id, timestamp=timestamp, temperature=temperature)


def test_project_keeps_the_last_window_in_order() -> None:
    points = [_point(f"p{index}", BASE_MS + index * 1000, float(index)) for index in range(500)]

    rows = project(points)

    assert len(rows) == 120
    assert [row.temperature for row in rows] == [float(index) for index in range(380, 500)]
    assert len(points) == 500


def test_project_short_store_and_display_time() -> None:
    points = [_point("a", BASE_MS, 21.5)]

    rows = project(points)

    assert len(rows) == 1
    assert rows[0].timestamp == BASE_MS
    assert len(rows[0].display_time) == 5
    assert rows[0].display_time[2] == ":"
    assert project([]) == []


def test_aggregate_keeps_latest_point_per_bucket() -> None:
    t1 = _point("t1", BASE_MS + 10_000)
    t2 = _point("t2", BASE_MS + 45_000)
    t3 = _point("t3", BASE_MS + 65_000)

    buckets = Aggregator().aggregate([t1, t2, t3], 60_000)

    assert [bucket.start for bucket in buckets] == [BASE_MS + 60_000, BASE_MS]
    assert [bucket.point.id for bucket in buckets] == ["t3", "t2"]
    assert buckets[1].end == BASE_MS + 59_999


def test_aggregate_tie_goes_to_the_last_point_seen() -> None:
    first = _point("first", BASE_MS + 5_000, 1.0)
    second = _point("second", BASE_MS + 5_000, 2.0)

    buckets = Aggregator().aggregate([first, second])

    assert len(buckets) == 1
    assert buckets[0].point.id == "second"


def test_aggregate_is_repeatable_and_handles_empty_input() -> None:
    aggregator = Aggregator()
    points = [_point(f"p{index}", BASE_MS + index * 20_000) for index in range(10)]

    assert aggregator.aggregate(points) == aggregator.aggregate(points)
    assert aggregator.aggregate([]) == []


def test_aggregate_rejects_non_positive_width() -> None:
    with pytest.raises(ValueError):
        Aggregator().aggregate([], 0)


def test_bucket_start_floors_before_epoch() -> None:
    assert bucket_start(-1, 60_000) == -60_000


def test_value_formatters() -> None:
    assert format_fixed(None, "%") == "--"
    assert format_fixed(61.256, "%") == "61.26%"
    assert format_fixed(26.54, " °C", 1) == "26.5 °C"
    assert format_sequence(None) == "--"
    assert format_sequence(7.0) == "7"
    assert format_sequence(7.5) == "7.5"
