"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True, slots=True)
class Point:
    """A normalized sensor reading taken from one feed record."""

    id: str
    timestamp: int
    temperature: float
    humidity: Optional[float] = None
    sequence: Optional[float] = None
    raw_time_text: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ChartRow:
    timestamp: int
    display_time: str
    temperature: float


@dataclass(frozen=True, slots=True)
class Bucket:
    """A fixed-width time range represented by its latest reading."""

    start: int
    width: int
    point: Point

    @property
    def end(self) -> int:
        # Inclusive upper bound, in milliseconds.
        return self.start + self.width - 1


@dataclass(frozen=True, slots=True)
class Page:
    rows: List[Bucket] = field(default_factory=list)
    current_page: int = 1
    total_pages: int = 1
