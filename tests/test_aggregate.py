from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from fitness_tracker.aggregate import (
    aggregate_samples,
    parse_glucose_value,
    samples_from_events,
)
from fitness_tracker.model import Event, EventKind, GlucoseSample


def _at(hour: int, minute: int) -> datetime:
    return datetime(2025, 3, 1, hour, minute)


def _sample(value: float, hour: int, minute: int) -> GlucoseSample:
    return GlucoseSample(value=value, at=_at(hour, minute))


def test_aggregate_empty() -> None:
    assert aggregate_samples([]) == []


def test_aggregate_end_to_end_scenario() -> None:
    samples = [_sample(70, 5, 57), _sample(77, 6, 12), _sample(75, 6, 20)]
    points = aggregate_samples(samples, timedelta(minutes=30))
    assert len(points) == 1
    assert points[0].value == pytest.approx(74.0)
    assert points[0].at == _at(5, 57)


def test_aggregate_anchors_on_first_sample_of_group() -> None:
    # Cada salto es de 20 min, pero el grupo no puede pasar de 30 min desde el primero.
    samples = [_sample(100, 8, 0), _sample(110, 8, 20), _sample(120, 8, 40), _sample(130, 9, 0)]
    points = aggregate_samples(samples, timedelta(minutes=30))
    assert [p.at for p in points] == [_at(8, 0), _at(8, 40)]
    assert [p.value for p in points] == [105.0, 125.0]


def test_aggregate_boundary_is_inclusive() -> None:
    samples = [_sample(100, 8, 0), _sample(120, 8, 30), _sample(90, 8, 31)]
    points = aggregate_samples(samples, timedelta(minutes=30))
    assert [p.value for p in points] == [110.0, 90.0]


def test_aggregate_threshold_zero_is_identity() -> None:
    samples = [_sample(100, 8, 0), _sample(101, 8, 1), _sample(102, 8, 2)]
    points = aggregate_samples(samples, timedelta(0))
    assert [(p.value, p.at) for p in points] == [(s.value, s.at) for s in samples]


def test_aggregate_threshold_zero_merges_identical_timestamps() -> None:
    samples = [_sample(100, 8, 0), _sample(110, 8, 0)]
    points = aggregate_samples(samples, timedelta(0))
    assert len(points) == 1
    assert points[0].value == 105.0


def test_aggregate_groups_respect_threshold() -> None:
    threshold = timedelta(minutes=60)
    samples = [_sample(100 + i, 6 + (i * 17) // 60, (i * 17) % 60) for i in range(20)]
    points = aggregate_samples(samples, threshold)
    starts = [p.at for p in points]
    # Puntos consecutivos siempre separados por más que el umbral.
    for earlier, later in zip(starts, starts[1:]):
        assert later - earlier > threshold
    assert len(points) < len(samples)


def test_aggregate_is_deterministic() -> None:
    samples = [_sample(90, 7, 0), _sample(95, 7, 10), _sample(140, 9, 0)]
    assert aggregate_samples(samples) == aggregate_samples(samples)


def test_aggregate_negative_threshold_raises() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        aggregate_samples([_sample(1, 1, 1)], timedelta(minutes=-1))


def test_parse_glucose_value() -> None:
    assert parse_glucose_value(" 98 ") == 98.0
    assert parse_glucose_value("98,5") == 98.5
    assert parse_glucose_value("alto") is None
    assert parse_glucose_value("nan") is None
    assert parse_glucose_value("inf") is None


def test_samples_from_events_sorts_and_skips_malformed(
    caplog: pytest.LogCaptureFixture,
) -> None:
    events = [
        Event(EventKind.GLUCOSE_READING, "120", _at(9, 0)),
        Event(EventKind.FOOD, "desayuno", _at(8, 30)),
        Event(EventKind.GLUCOSE_READING, "error", _at(8, 45)),
        Event(EventKind.GLUCOSE_READING, "95", _at(8, 0)),
    ]
    with caplog.at_level("WARNING"):
        samples = samples_from_events(events)
    assert [s.value for s in samples] == [95.0, 120.0]
    assert "malformed" in caplog.text
