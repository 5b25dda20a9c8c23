from __future__ import annotations

from datetime import datetime

import pytest

from fitness_tracker.model import GlucoseSample
from fitness_tracker.stats import (
    PERFECT_ZONE,
    SWEET_ZONE,
    Trend,
    classify_rate,
    estimate_trend,
    format_stat,
    glucose_summary,
    rate_per_minute,
    y_axis_max,
    zone_stats,
)


def _sample(value: float, hour: int, minute: int = 0) -> GlucoseSample:
    return GlucoseSample(value=value, at=datetime(2025, 3, 1, hour, minute))


@pytest.mark.parametrize(
    ("rate", "expected"),
    [
        (2.5, Trend.SHARPLY_RISING),
        (2.0, Trend.RISING),
        (1.5, Trend.RISING),
        (1.0, Trend.STABLE),
        (0.0, Trend.STABLE),
        (-1.0, Trend.STABLE),
        (-1.5, Trend.FALLING),
        (-2.0, Trend.FALLING),
        (-2.1, Trend.SHARPLY_FALLING),
    ],
)
def test_classify_rate_bands(rate: float, expected: Trend) -> None:
    assert classify_rate(rate) is expected


def test_trend_uses_first_and_last_sample() -> None:
    samples = [_sample(100, 8, 0), _sample(300, 8, 5), _sample(130, 8, 20)]
    assert rate_per_minute(samples) == pytest.approx(1.5)
    assert estimate_trend(samples) is Trend.RISING


def test_trend_needs_two_samples() -> None:
    assert estimate_trend([]) is None
    assert estimate_trend([_sample(100, 8)]) is None


def test_trend_same_timestamp_has_no_trend() -> None:
    assert estimate_trend([_sample(100, 8), _sample(140, 8)]) is None


def test_glucose_summary() -> None:
    summary = glucose_summary([_sample(70, 5, 57), _sample(77, 6, 12), _sample(75, 6, 20)])
    assert summary is not None
    assert summary.maximum == 77
    assert summary.minimum == 70
    assert summary.average == pytest.approx(74.0)
    assert summary.count == 3
    assert glucose_summary([]) is None


def test_zone_stats_inclusive_bounds() -> None:
    samples = [_sample(v, 8) for v in (59, 60, 120, 180, 181, 79, 80)]
    sweet = zone_stats(samples, SWEET_ZONE)
    assert (sweet.in_range, sweet.above, sweet.below, sweet.total) == (5, 1, 1, 7)
    perfect = zone_stats(samples, PERFECT_ZONE)
    assert (perfect.in_range, perfect.above, perfect.below) == (2, 2, 3)
    assert perfect.percentage(perfect.in_range) == 28.6
    assert zone_stats([], PERFECT_ZONE).percentage(0) == 0.0


def test_y_axis_max() -> None:
    assert y_axis_max([]) == 200
    assert y_axis_max([_sample(150, 8)]) == 200
    assert y_axis_max([_sample(245, 8)]) == 245


def test_format_stat() -> None:
    assert format_stat(None) == "-"
    assert format_stat(74.4) == "74"
    assert format_stat(74.6) == "75"
