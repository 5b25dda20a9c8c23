"""Modelos tipados para eventos del día, series de glucosa y métricas corporales."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class EventKind(str, Enum):
    """Event kinds as sent by the events webhook."""

    GLUCOSE_READING = "glucose_reading"
    FOOD = "food"
    GYM = "gym"
    MEDICINE = "medicine"


@dataclass(frozen=True)
class Event:
    """One time-stamped event of the day (naive local wall-clock time)."""

    kind: EventKind
    text: str
    at: datetime


@dataclass(frozen=True)
class GlucoseSample:
    """One glucose measurement."""

    value: float
    at: datetime


@dataclass(frozen=True)
class AggregatedPoint:
    """Mean of one or more samples, stamped with the earliest sample time."""

    value: float
    at: datetime


@dataclass(frozen=True)
class AnnotatedMarker:
    """Non-glucose event paired with the y-value it is plotted at."""

    event: Event
    plotted_value: float

    @property
    def at(self) -> datetime:
        return self.event.at


@dataclass(frozen=True)
class TimeRange:
    """Closed interval of local instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"start must be <= end, got {self.start} > {self.end}")

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass(frozen=True)
class CatalogEntry:
    """Canonical body-metric type with its display unit."""

    canonical_name: str
    unit: str


@dataclass(frozen=True)
class ClassifiedEntry:
    """Text block resolved to a catalog entry."""

    type: CatalogEntry
    value: str
    comment: str


@dataclass(frozen=True)
class BodyStatRecord:
    """Body-composition record as returned by the API (epoch in ms, UTC)."""

    type: str
    value: str
    comment: str
    epoch: int


@dataclass(frozen=True)
class WeeklyGridCell:
    """One day of the weekly grid for a given type."""

    date: date
    value: str | None = None
    comment: str = ""
    has_data: bool = False
