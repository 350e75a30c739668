"""Conversion of loosely-typed feed records into validated points."""

from __future__ import annotations

import logging
import math
import re
import time
from datetime import datetime
from numbers import Real
from typing import Any, Callable, Mapping, Optional

from models.records import Point

logger = logging.getLogger(__name__)

Clock = Callable[[], int]

_TIME_PATTERN = re.compile(
    r"(\d{2})/(\d{2})/(\d{4}) (\d{2}):(\d{2}):(\d{2})",
    re.ASCII,
)
_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?",
    re.ASCII,
)


def now_ms() -> int:
    return int(time.time() * 1000)


def coerce_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not one.

    Real numbers pass through. Strings are stripped and must then be a plain
    ASCII decimal, optionally signed and with an exponent. Booleans, blank
    strings and every other type count as missing.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Real):
        try:
            candidate = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_PATTERN.fullmatch(text):
            return None
        candidate = float(text)
    else:
        return None
    return candidate if math.isfinite(candidate) else None


def parse_time_text(value: Any) -> Optional[int]:
    """Parse ``DD/MM/YYYY HH:MM:SS`` in local time into epoch milliseconds."""
    if not isinstance(value, str):
        return None
    match = _TIME_PATTERN.fullmatch(value)
    if match is None:
        return None
    day, month, year, hour, minute, second = (int(group) for group in match.groups())
    try:
        moment = datetime(year, month, day, hour, minute, second)
        # Naive datetimes resolve against the local time zone.
        return round(moment.timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        return None


def normalize(
    record_id: str,
    raw: Any,
    clock: Clock = now_ms,
) -> Optional[Point]:
    """Build a :class:`Point` from one raw record, or ``None`` to drop it."""
    fields: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    temperature = coerce_number(fields.get("Temp"))
    if temperature is None:
        logger.debug(
            "Dropping record without a usable temperature",
            extra={"record_id": record_id, "invalid_value": fields.get("Temp")},
        )
        return None

    time_text = fields.get("Time")
    if not isinstance(time_text, str):
        time_text = None

    timestamp = parse_time_text(time_text)
    if timestamp is None:
        timestamp = clock()

    return Point(
        id=record_id,
        timestamp=timestamp,
        temperature=temperature,
        humidity=coerce_number(fields.get("Hum")),
        sequence=coerce_number(fields.get("STT")),
        raw_time_text=time_text,
    )
