from __future__ import annotations

from datetime import datetime

from fitness_tracker.correlate import (
    CHART_FLOOR,
    correlate_events,
    event_color,
    nearest_point,
    wrap_label,
)
from fitness_tracker.model import AggregatedPoint, Event, EventKind


def _at(hour: int, minute: int) -> datetime:
    return datetime(2025, 3, 1, hour, minute)


def _point(value: float, hour: int, minute: int) -> AggregatedPoint:
    return AggregatedPoint(value=value, at=_at(hour, minute))


def _food(hour: int, minute: int, text: str = "almuerzo") -> Event:
    return Event(kind=EventKind.FOOD, text=text, at=_at(hour, minute))


def test_tie_goes_to_earlier_point() -> None:
    points = [_point(100, 8, 0), _point(140, 8, 10)]
    markers = correlate_events([_food(8, 5)], points)
    assert markers[0].plotted_value == 100


def test_nearest_point_picks_closest() -> None:
    points = [_point(100, 8, 0), _point(140, 8, 10), _point(90, 9, 0)]
    assert nearest_point(points, _food(8, 6)) == points[1]
    assert nearest_point(points, _food(8, 40)) == points[2]


def test_events_outside_series_use_edges() -> None:
    points = [_point(100, 8, 0), _point(140, 9, 0)]
    markers = correlate_events([_food(6, 0), _food(23, 0)], points)
    assert [m.plotted_value for m in markers] == [100, 140]


def test_duplicate_instants_pick_first_in_sequence() -> None:
    points = [_point(100, 8, 0), _point(200, 8, 0), _point(50, 9, 0)]
    assert nearest_point(points, _food(8, 10)) is points[0]


def test_no_points_uses_chart_floor() -> None:
    markers = correlate_events([_food(8, 0)], [])
    assert markers[0].plotted_value == CHART_FLOOR


def test_glucose_events_are_not_markers_and_output_sorted() -> None:
    events = [
        _food(12, 0, "comida"),
        Event(EventKind.GLUCOSE_READING, "100", _at(8, 0)),
        Event(EventKind.GYM, "pesas", _at(7, 0)),
    ]
    markers = correlate_events(events, [_point(100, 8, 0)])
    assert [m.event.text for m in markers] == ["pesas", "comida"]


def test_end_to_end_marker_value() -> None:
    points = [_point(74, 5, 57)]
    markers = correlate_events([_food(6, 5, "lunch")], points)
    assert markers[0].plotted_value == 74
    assert markers[0].at == _at(6, 5)


def test_event_color_fallback() -> None:
    assert event_color(EventKind.FOOD) == "#ff9e64"
    assert event_color(EventKind.GLUCOSE_READING) == "#7aa2f7"


def test_wrap_label() -> None:
    assert wrap_label("food: pan") == ["food: pan"]
    text = "food: " + " ".join(["tostadas"] * 10)
    lines = wrap_label(text)
    assert len(lines) > 1
    assert all(len(line) <= 50 for line in lines)
    assert " ".join(lines) == text
