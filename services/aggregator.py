"""Aggregation logic for sensor readings."""

from __future__ import annotations

from typing import Dict, Iterable

from models.records import Bucket, Point

DEFAULT_BUCKET_WIDTH_MS = 60 * 1000


def bucket_start(timestamp: int, width_ms: int) -> int:
    return (timestamp // width_ms) * width_ms


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self,
        points: Iterable[Point],
        bucket_width_ms: int = DEFAULT_BUCKET_WIDTH_MS,
    ) -> list[Bucket]:
        """Keep the latest point per time bucket, newest bucket first.

        A point whose timestamp equals the current representative's replaces
        it, so among exact ties the one iterated last wins. That ordering is
        incidental to iteration order and carries no meaning of its own.
        """
        if bucket_width_ms <= 0:
            raise ValueError("Bucket width must be a positive number of milliseconds.")

        latest: Dict[int, Point] = {}
        for point in points:
            key = bucket_start(point.timestamp, bucket_width_ms)
            current = latest.get(key)
            if current is None or point.timestamp >= current.timestamp:
                latest[key] = point

        return [
            Bucket(start=key, width=bucket_width_ms, point=latest[key])
            for key in sorted(latest, reverse=True)
        ]
