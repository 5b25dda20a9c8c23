"""Controladores: estado de la vista del día, carga de texto y grilla semanal.

Los componentes del núcleo son funciones puras; acá vive el único estado
mutable (día actual, umbral, zoom, buffer de texto) y el pipeline
normalizar -> agrupar -> correlacionar -> ventana se invoca explícitamente
después de cada cambio.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Protocol

from fitness_tracker.aggregate import (
    DEFAULT_THRESHOLD,
    aggregate_samples,
    samples_from_events,
)
from fitness_tracker.catalog import CatalogClassifier, ClassificationResult, entry_to_text
from fitness_tracker.correlate import CHART_FLOOR, correlate_events
from fitness_tracker.model import (
    AggregatedPoint,
    AnnotatedMarker,
    BodyStatRecord,
    ClassifiedEntry,
    Event,
    EventKind,
    GlucoseSample,
    TimeRange,
    WeeklyGridCell,
)
from fitness_tracker.sources.base import ApiError
from fitness_tracker.stats import (
    PERFECT_ZONE,
    SWEET_ZONE,
    GlucoseSummary,
    Trend,
    ZoneStats,
    estimate_trend,
    glucose_summary,
    y_axis_max,
    zone_stats,
)
from fitness_tracker.weekly import WEEK_LENGTH, build_weekly_grid, next_week, previous_week
from fitness_tracker.window import (
    PanDirection,
    ZoomLength,
    ZoomState,
    clamp,
    filter_to_window,
    full_range,
    pan,
    padded_bounds,
    set_zoom,
    visible_range,
)

logger = logging.getLogger(__name__)


class EventFetcher(Protocol):
    def fetch_events(self, day: date) -> list[Event]: ...


class BodyStatsFetcher(Protocol):
    def fetch_body_stats(self, start: date) -> list[BodyStatRecord]: ...


class BodyStatsSink(Protocol):
    def submit_body_stats(self, entries: Sequence[ClassifiedEntry], day: date) -> None: ...


@dataclass
class DayState:
    """Mutable view state owned by the day controller."""

    current_day: date
    threshold: timedelta = DEFAULT_THRESHOLD
    zoom: ZoomState = field(default_factory=ZoomState)
    events: list[Event] = field(default_factory=list)
    loading: bool = False
    error: str | None = None


@dataclass(frozen=True)
class DayView:
    """Everything a renderer needs for one day."""

    day: date
    samples: list[GlucoseSample]
    points: list[AggregatedPoint]
    markers: list[AnnotatedMarker]
    window: TimeRange | None
    x_bounds: TimeRange | None
    y_min: float
    y_max: float
    summary: GlucoseSummary | None
    sweet: ZoneStats
    perfect: ZoneStats
    trend: Trend | None
    day_events: list[Event]
    zoom: ZoomLength

    @property
    def has_glucose(self) -> bool:
        return bool(self.samples)


class DayController:
    """Owns the day snapshot and recomputes the visible series on demand."""

    def __init__(
        self,
        fetcher: EventFetcher | None = None,
        *,
        threshold: timedelta = DEFAULT_THRESHOLD,
        zoom: ZoomLength = ZoomLength.ALL,
        today: date | None = None,
    ) -> None:
        self._fetcher = fetcher
        self.state = DayState(
            current_day=today or date.today(),
            threshold=threshold,
            zoom=ZoomState(length=zoom),
        )

    # -- carga ------------------------------------------------------------

    def begin_load(self, day: date) -> date:
        """Switch to ``day`` and drop the current series right away."""
        self.state.current_day = day
        self.state.events = []
        self.state.loading = True
        self.state.error = None
        return day

    def finish_load(self, day: date, events: Sequence[Event]) -> bool:
        """Apply a fetch result; results for a day no longer shown are ignored."""
        if day != self.state.current_day:
            logger.debug("Discarding stale events for %s (showing %s)", day, self.state.current_day)
            return False
        self.state.events = list(events)
        self.state.loading = False
        logger.debug("Loaded %d events for %s", len(self.state.events), day)
        return True

    def fail_load(self, day: date, exc: Exception) -> bool:
        """Record a fetch failure; the series stays empty."""
        if day != self.state.current_day:
            return False
        self.state.events = []
        self.state.loading = False
        self.state.error = str(exc)
        return True

    def load(self, day: date | None = None) -> DayView:
        """Fetch ``day`` (default: the current day) and return its view.

        Raises:
            ApiError: If the fetch fails; state is reset to an empty series.
        """
        if self._fetcher is None:
            raise RuntimeError("DayController has no fetcher")
        target = self.begin_load(day or self.state.current_day)
        try:
            events = self._fetcher.fetch_events(target)
        except ApiError as exc:
            self.fail_load(target, exc)
            raise
        self.finish_load(target, events)
        return self.view()

    # -- navegación -------------------------------------------------------

    def previous_day(self) -> date:
        return self.state.current_day - timedelta(days=1)

    def next_day(self) -> date:
        return self.state.current_day + timedelta(days=1)

    @staticmethod
    def today() -> date:
        return date.today()

    def set_threshold(self, minutes: int) -> None:
        if minutes < 0:
            raise ValueError(f"threshold must be non-negative, got {minutes}")
        self.state.threshold = timedelta(minutes=minutes)

    def set_zoom(self, length: ZoomLength) -> None:
        *_, full = self._series()
        self.state.zoom = set_zoom(full, length)

    def pan(self, direction: PanDirection) -> None:
        *_, full = self._series()
        self.state.zoom = pan(self.state.zoom, full, direction)

    # -- pipeline ---------------------------------------------------------

    def _series(
        self,
    ) -> tuple[
        list[GlucoseSample], list[AggregatedPoint], list[AnnotatedMarker], TimeRange | None
    ]:
        samples = samples_from_events(self.state.events)
        points = aggregate_samples(samples, self.state.threshold)
        markers = correlate_events(self.state.events, points)
        return samples, points, markers, full_range(points, markers)

    def view(self) -> DayView:
        """Recompute the series and return the currently visible slice."""
        samples, points, markers, full = self._series()
        self.state.zoom = clamp(self.state.zoom, full)
        window = visible_range(self.state.zoom, full)
        shown_points, shown_markers = filter_to_window(points, markers, window)

        day_events = sorted(
            (e for e in self.state.events if e.kind is not EventKind.GLUCOSE_READING),
            key=lambda e: e.at,
        )
        return DayView(
            day=self.state.current_day,
            samples=samples,
            points=shown_points,
            markers=shown_markers,
            window=window,
            x_bounds=padded_bounds(window) if window is not None else None,
            y_min=CHART_FLOOR,
            y_max=y_axis_max(samples),
            summary=glucose_summary(samples),
            sweet=zone_stats(samples, SWEET_ZONE),
            perfect=zone_stats(samples, PERFECT_ZONE),
            trend=estimate_trend(samples),
            day_events=day_events,
            zoom=self.state.zoom.length,
        )


class EntrySession:
    """Pending text buffer plus the entries classified so far."""

    def __init__(self, classifier: CatalogClassifier | None = None) -> None:
        self.classifier = classifier or CatalogClassifier()
        self.pending_text = ""
        self.classified: list[ClassifiedEntry] = []

    def classify(self, text: str | None = None) -> ClassificationResult:
        """Classify ``text`` (default: the pending buffer).

        Matched blocks move to ``classified``; the buffer keeps only the
        unmatched blocks.
        """
        source = self.pending_text if text is None else text
        result = self.classifier.classify(source)
        self.classified.extend(result.classified)
        self.pending_text = result.pending_text
        return result

    def edit(self, index: int) -> ClassifiedEntry:
        """Move a classified entry back into the pending buffer."""
        entry = self.classified.pop(index)
        block = entry_to_text(entry)
        self.pending_text = f"{self.pending_text}\n\n{block}" if self.pending_text else block
        return entry

    def submit(self, sink: BodyStatsSink, day: date) -> int:
        """Send classified entries and clear them; returns how many were sent."""
        count = len(self.classified)
        if count:
            sink.submit_body_stats(list(self.classified), day)
        self.classified.clear()
        return count

    def clear(self) -> None:
        self.pending_text = ""
        self.classified.clear()


class WeekController:
    """Start day and records of the weekly body-stats grid."""

    def __init__(self, fetcher: BodyStatsFetcher | None = None, today: date | None = None) -> None:
        self._fetcher = fetcher
        self.start = (today or date.today()) - timedelta(days=WEEK_LENGTH - 1)
        self.records: list[BodyStatRecord] = []
        self.error: str | None = None

    def load(self, start: date | None = None) -> dict[str, list[WeeklyGridCell]]:
        """Fetch the week starting at ``start`` and return its grid.

        Raises:
            ApiError: If the fetch fails; records are reset.
        """
        if self._fetcher is None:
            raise RuntimeError("WeekController has no fetcher")
        self.start = start or self.start
        self.records = []
        self.error = None
        try:
            self.records = self._fetcher.fetch_body_stats(self.start)
        except ApiError as exc:
            self.error = str(exc)
            raise
        return self.grid()

    def grid(self) -> dict[str, list[WeeklyGridCell]]:
        return build_weekly_grid(self.records, self.start)

    def previous_week(self) -> date:
        return previous_week(self.start)

    def next_week(self) -> date:
        return next_week(self.start)
