from __future__ import annotations

import time
from datetime import datetime

import pytest

from services.normalizer import coerce_number, normalize, parse_time_text


def _fixed_clock() -> int:
    return 1_700_000_000_000


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"Temp": "bad"},
        {"Temp": None},
        {"Temp": ""},
        {"Temp": True},
        {"Temp": float("nan")},
        {"Temp": "2_6"},
        {"Temp": "٢٦"},
        {"Temp": "0x1A"},
        {"Temp": "nan"},
        "not-a-record",
        None,
    ],
)
def test_normalize_drops_records_without_usable_temperature(raw) -> None:
    assert normalize("-N1", raw) is None


def test_normalize_accepts_numeric_strings() -> None:
    point = normalize("-N1", {"Temp": " 26.5 ", "Hum": "60", "STT": "7"}, clock=_fixed_clock)

    assert point is not None
    assert point.temperature == 26.5
    assert point.humidity == 60.0
    assert point.sequence == 7.0


def test_normalize_leaves_malformed_optional_fields_absent() -> None:
    point = normalize("-N1", {"Temp": 20, "Hum": "wet", "STT": [1]}, clock=_fixed_clock)

    assert point is not None
    assert point.humidity is None
    assert point.sequence is None


def test_normalize_parses_time_in_local_calendar() -> None:
    point = normalize("-N1", {"Temp": 21.0, "Time": "31/01/2024 10:15:30"}, clock=_fixed_clock)

    assert point is not None
    expected = round(datetime(2024, 1, 31, 10, 15, 30).timestamp() * 1000)
    assert point.timestamp == expected
    moment = datetime.fromtimestamp(point.timestamp / 1000)
    assert (moment.year, moment.month, moment.day) == (2024, 1, 31)
    assert (moment.hour, moment.minute, moment.second) == (10, 15, 30)
    assert point.raw_time_text == "31/01/2024 10:15:30"


@pytest.mark.parametrize(
    "text",
    [
        "31-01-2024 10:00:00",
        "2024/01/31 10:00:00",
        "",
        "1/01/2024 10:00:00",
        "31/01/2024 10:00",
        "31/01/2024  10:00:00",
        "31/01/2024 10:00:00 extra",
        "31/02/2024 10:00:00",
    ],
)
def test_malformed_time_falls_back_to_now(text: str) -> None:
    before = int(time.time() * 1000)
    point = normalize("-N1", {"Temp": 21.0, "Time": text})
    after = int(time.time() * 1000)

    assert point is not None
    assert before <= point.timestamp <= after + 1
    assert point.raw_time_text == text


def test_non_text_time_is_ignored() -> None:
    point = normalize("-N1", {"Temp": 21.0, "Time": 1704067200}, clock=_fixed_clock)

    assert point is not None
    assert point.timestamp == _fixed_clock()
    assert point.raw_time_text is None


def test_parse_time_text_rejects_non_ascii_digits() -> None:
    assert parse_time_text("Ù£Ù¡/01/2024 10:00:00") is None


def test_coerce_number_rejects_infinite_and_overflowing_values() -> None:
    assert coerce_number("inf") is None
    assert coerce_number(10**400) is None
    assert coerce_number(3) == 3.0


@pytest.mark.parametrize("text, expected", [("-3.5e1", -35.0), (".5", 0.5), ("+12.", 12.0)])
def test_coerce_number_accepts_plain_decimal_forms(text: str, expected: float) -> None:
    assert coerce_number(text) == expected
