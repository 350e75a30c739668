from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_DATABASE_URL_ENV = "FEED_DATABASE_URL"
_FEED_PATH_ENV = "FEED_PATH"
_FEED_LIMIT_ENV = "FEED_LIMIT"
_CHART_POINTS_ENV = "CHART_MAX_POINTS"
_BUCKET_MINUTES_ENV = "BUCKET_MINUTES"
_PAGE_SIZE_ENV = "HISTORY_PAGE_SIZE"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    feed_path: str
    feed_limit: int
    chart_max_points: int
    bucket_minutes: int
    page_size: int
    log_level: str

    @property
    def bucket_width_ms(self) -> int:
        return self.bucket_minutes * 60 * 1000


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=_read_optional_env(_DATABASE_URL_ENV, None),
        feed_path=_read_str_env(_FEED_PATH_ENV, "sensor_data").strip("/"),
        feed_limit=_read_positive_int(_FEED_LIMIT_ENV, 1500),
        chart_max_points=_read_positive_int(_CHART_POINTS_ENV, 120),
        bucket_minutes=_read_positive_int(_BUCKET_MINUTES_ENV, 1),
        page_size=_read_positive_int(_PAGE_SIZE_ENV, 10),
        log_level=_read_log_level("INFO"),
    )
