from __future__ import annotations

from datetime import date, datetime

import pytest

from fitness_tracker.timeparse import (
    format_date_for_api,
    format_date_for_display,
    format_time,
    parse_date_param,
    parse_local_instant,
    strip_utc_designator,
)


def test_parse_local_instant_ignores_utc_designator() -> None:
    got = parse_local_instant("2025-03-01T05:57:12.345Z")
    assert got == datetime(2025, 3, 1, 5, 57, 12, 345000)
    assert got.tzinfo is None


def test_parse_local_instant_with_and_without_z_match() -> None:
    assert parse_local_instant("2025-03-01T23:30:00Z") == parse_local_instant(
        "2025-03-01T23:30:00"
    )


def test_parse_local_instant_offset_suffix() -> None:
    assert parse_local_instant("2025-03-01 06:12:00+00:00") == datetime(
        2025, 3, 1, 6, 12
    )


def test_parse_local_instant_date_only_and_no_seconds() -> None:
    assert parse_local_instant("2025-03-01") == datetime(2025, 3, 1)
    assert parse_local_instant("2025-03-01T06:20") == datetime(2025, 3, 1, 6, 20)


def test_parse_local_instant_long_fraction_is_truncated() -> None:
    got = parse_local_instant("2025-03-01T06:20:00.1234567Z")
    assert got.microsecond == 123456


@pytest.mark.parametrize("bad", ["", "ayer", "2025/03/01 06:20", "2025-13-01T00:00"])
def test_parse_local_instant_invalid_raises(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_local_instant(bad)


def test_strip_utc_designator_keeps_plain_text() -> None:
    assert strip_utc_designator(" 2025-03-01T06:20 ") == "2025-03-01T06:20"


def test_format_date_for_api_pads() -> None:
    assert format_date_for_api(date(2025, 3, 1)) == "2025-03-01"


def test_parse_date_param_fallbacks() -> None:
    today = date(2026, 10, 18)
    assert parse_date_param("2025-02-28", today) == date(2025, 2, 28)
    assert parse_date_param(None, today) == today
    assert parse_date_param("2025-02-30", today) == today
    assert parse_date_param("hoy", today) == today


def test_format_date_for_display_spanish() -> None:
    assert format_date_for_display(date(2026, 10, 18)) == "domingo, 18 de octubre de 2026"


def test_format_time() -> None:
    assert format_time(datetime(2025, 3, 1, 5, 7, 59)) == "05:07"
