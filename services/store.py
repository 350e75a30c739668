"""Point Store construction from full feed snapshots."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from models.records import Point
from services.normalizer import Clock, normalize, now_ms

logger = logging.getLogger(__name__)


def build_point_store(
    snapshot: Mapping[str, Any] | None,
    clock: Clock = now_ms,
) -> list[Point]:
    """Normalize every record of ``snapshot`` and order the survivors by time.

    Equal timestamps keep their snapshot order; record ids carry no ordering.
    """
    points: list[Point] = []
    dropped = 0
    for record_id, raw in (snapshot or {}).items():
        point = normalize(str(record_id), raw, clock=clock)
        if point is None:
            dropped += 1
            continue
        points.append(point)

    points.sort(key=lambda point: point.timestamp)
    logger.debug(
        "Rebuilt point store",
        extra={"point_count": len(points), "dropped_count": dropped},
    )
    return points
