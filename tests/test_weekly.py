from __future__ import annotations

from datetime import date, datetime, timezone

from fitness_tracker.model import BodyStatRecord
from fitness_tracker.weekly import (
    build_weekly_grid,
    day_label,
    next_week,
    order_types,
    previous_week,
    record_day,
    week_days,
    weekday_label,
)


def _epoch(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> int:
    dt = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _rec(type_: str, value: str, epoch: int, comment: str = "") -> BodyStatRecord:
    return BodyStatRecord(type=type_, value=value, comment=comment, epoch=epoch)


START = date(2025, 3, 3)


def test_week_days_are_consecutive() -> None:
    days = week_days(START)
    assert days[0] == START
    assert days[-1] == date(2025, 3, 9)
    assert len(days) == 7


def test_record_day_uses_utc_calendar() -> None:
    assert record_day(_epoch(2025, 3, 3, 23, 59)) == date(2025, 3, 3)
    assert record_day(_epoch(2025, 3, 4, 0, 0)) == date(2025, 3, 4)


def test_grid_has_seven_cells_per_present_type() -> None:
    records = [
        _rec("Peso", "82.4", _epoch(2025, 3, 3), "en ayunas"),
        _rec("Peso", "82.0", _epoch(2025, 3, 5)),
        _rec("IMC", "24.1", _epoch(2025, 3, 9)),
    ]
    grid = build_weekly_grid(records, START)
    assert list(grid) == ["Peso", "IMC"]
    for cells in grid.values():
        assert len(cells) == 7
        assert [c.date for c in cells] == week_days(START)

    peso = grid["Peso"]
    assert peso[0].has_data and peso[0].value == "82.4" and peso[0].comment == "en ayunas"
    assert not peso[1].has_data and peso[1].value is None and peso[1].comment == ""
    assert peso[2].value == "82.0"
    assert grid["IMC"][6].value == "24.1"


def test_absent_types_produce_no_grid() -> None:
    grid = build_weekly_grid([_rec("Peso", "80", _epoch(2025, 3, 4))], START)
    assert "Grasa corporal" not in grid
    assert build_weekly_grid([], START) == {}


def test_records_outside_week_are_ignored() -> None:
    records = [
        _rec("Peso", "80", _epoch(2025, 3, 2)),
        _rec("Peso", "81", _epoch(2025, 3, 10)),
    ]
    grid = build_weekly_grid(records, START)
    assert len(grid["Peso"]) == 7
    assert not any(c.has_data for c in grid["Peso"])


def test_latest_record_of_a_day_wins() -> None:
    records = [
        _rec("Peso", "81.0", _epoch(2025, 3, 4, 20)),
        _rec("Peso", "80.5", _epoch(2025, 3, 4, 7)),
    ]
    grid = build_weekly_grid(records, START)
    assert grid["Peso"][1].value == "81.0"


def test_order_types_priority_then_alphabetical() -> None:
    types = ["Proteína", "IMC", "Agua corporal", "Edad metabólica", "Peso"]
    assert order_types(types) == [
        "Peso",
        "Agua corporal",
        "IMC",
        "Edad metabólica",
        "Proteína",
    ]


def test_week_navigation_and_labels() -> None:
    assert previous_week(START) == date(2025, 2, 24)
    assert next_week(START) == date(2025, 3, 10)
    assert day_label(START) == "lun 03/03"
    assert weekday_label(date(2025, 3, 9)) == "dom"
    assert day_label(date(2025, 3, 9)).startswith(weekday_label(date(2025, 3, 9)))
