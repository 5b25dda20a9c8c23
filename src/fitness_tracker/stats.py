"""Estadísticas del día: tendencia, resumen y zonas de referencia."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from fitness_tracker.model import GlucoseSample

Y_AXIS_MIN_TOP = 200.0


class Trend(Enum):
    """Rate-of-change bands in mg/dL per minute."""

    SHARPLY_RISING = "↑↑"
    RISING = "↑"
    STABLE = "→"
    FALLING = "↓"
    SHARPLY_FALLING = "↓↓"

    @property
    def label(self) -> str:
        return _TREND_LABELS[self]


_TREND_LABELS: dict[Trend, str] = {
    Trend.SHARPLY_RISING: "Subiendo rápido",
    Trend.RISING: "Subiendo",
    Trend.STABLE: "Estable",
    Trend.FALLING: "Bajando",
    Trend.SHARPLY_FALLING: "Bajando rápido",
}


@dataclass(frozen=True)
class Zone:
    """Reference band on the glucose axis (inclusive bounds)."""

    name: str
    low: float
    high: float


SWEET_ZONE = Zone(name="Sweet Spot", low=60, high=180)
PERFECT_ZONE = Zone(name="Perfect Spot", low=80, high=120)


@dataclass(frozen=True)
class ZoneStats:
    """Counts of readings inside, above and below a zone."""

    in_range: int
    above: int
    below: int
    total: int

    def percentage(self, count: int) -> float:
        if self.total == 0:
            return 0.0
        return round(count / self.total * 100, 1)


@dataclass(frozen=True)
class GlucoseSummary:
    """Max/min/mean of the day's raw readings."""

    maximum: float
    minimum: float
    average: float
    count: int


def rate_per_minute(samples: Sequence[GlucoseSample]) -> float | None:
    """Slope between the first and last sample of the day, in mg/dL/min."""
    if len(samples) < 2:
        return None
    first, last = samples[0], samples[-1]
    minutes = (last.at - first.at).total_seconds() / 60.0
    if minutes <= 0:
        return None
    return (last.value - first.value) / minutes


def classify_rate(rate: float) -> Trend:
    if rate > 2:
        return Trend.SHARPLY_RISING
    if rate > 1:
        return Trend.RISING
    if rate >= -1:
        return Trend.STABLE
    if rate >= -2:
        return Trend.FALLING
    return Trend.SHARPLY_FALLING


def estimate_trend(samples: Sequence[GlucoseSample]) -> Trend | None:
    """Trend of the whole day from the raw, chronologically sorted readings.

    Returns None with fewer than two readings or when they share a timestamp.
    """
    rate = rate_per_minute(samples)
    if rate is None:
        return None
    return classify_rate(rate)


def glucose_summary(samples: Sequence[GlucoseSample]) -> GlucoseSummary | None:
    """Max/min/mean over the readings; None when there are none."""
    if not samples:
        return None
    values = pd.Series([s.value for s in samples], dtype="float64")
    return GlucoseSummary(
        maximum=float(values.max()),
        minimum=float(values.min()),
        average=float(values.mean()),
        count=int(values.count()),
    )


def zone_stats(samples: Sequence[GlucoseSample], zone: Zone) -> ZoneStats:
    values = [s.value for s in samples]
    in_range = sum(1 for v in values if zone.low <= v <= zone.high)
    above = sum(1 for v in values if v > zone.high)
    below = sum(1 for v in values if v < zone.low)
    return ZoneStats(in_range=in_range, above=above, below=below, total=len(values))


def y_axis_max(samples: Sequence[GlucoseSample]) -> float:
    """Top of the y-axis: the highest reading or 200, whichever is greater."""
    if not samples:
        return Y_AXIS_MIN_TOP
    return max(max(s.value for s in samples), Y_AXIS_MIN_TOP)


def format_stat(value: float | None) -> str:
    """Round for display (no decimals); ``-`` when there is no data."""
    if value is None:
        return "-"
    return f"{value:.0f}"
