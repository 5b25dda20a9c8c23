"""Ventana de zoom desplazable sobre la serie del día."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from fitness_tracker.model import AggregatedPoint, AnnotatedMarker, TimeRange

DISPLAY_PADDING = timedelta(minutes=2)


class ZoomLength(Enum):
    """Zoom levels offered by the UIs."""

    FOUR_HOURS = "4h"
    TWELVE_HOURS = "12h"
    ALL = "all"

    @property
    def duration(self) -> timedelta | None:
        return _DURATIONS[self]


_DURATIONS: dict[ZoomLength, timedelta | None] = {
    ZoomLength.FOUR_HOURS: timedelta(hours=4),
    ZoomLength.TWELVE_HOURS: timedelta(hours=12),
    ZoomLength.ALL: None,
}


class PanDirection(Enum):
    LEFT = -1
    RIGHT = 1


@dataclass(frozen=True)
class ZoomState:
    """Zoom level plus the start of the visible window (None until resolved)."""

    length: ZoomLength = ZoomLength.ALL
    window_start: datetime | None = None


def full_range(
    points: Sequence[AggregatedPoint], markers: Sequence[AnnotatedMarker]
) -> TimeRange | None:
    """Min/max instant over points and markers; None when both are empty."""
    instants = [p.at for p in points] + [m.event.at for m in markers]
    if not instants:
        return None
    return TimeRange(start=min(instants), end=max(instants))


def _clamp_start(start: datetime, length: timedelta, full: TimeRange) -> datetime:
    latest = full.end - length
    return max(full.start, min(start, latest))


def _resolved_start(state: ZoomState, length: timedelta, full: TimeRange) -> datetime:
    if state.window_start is None:
        return _clamp_start(full.end - length, length, full)
    return _clamp_start(state.window_start, length, full)


def set_zoom(full: TimeRange | None, length: ZoomLength) -> ZoomState:
    """Select a zoom level, showing the most recent slice of the day.

    If the data span fits in the window, the window starts at the first
    instant so everything is visible.
    """
    duration = length.duration
    if duration is None or full is None:
        return ZoomState(length=length, window_start=None)
    return ZoomState(
        length=length, window_start=_clamp_start(full.end - duration, duration, full)
    )


def clamp(state: ZoomState, full: TimeRange | None) -> ZoomState:
    """Re-fit a zoom state to a (possibly new) full range."""
    duration = state.length.duration
    if duration is None or full is None:
        return replace(state, window_start=None)
    return replace(state, window_start=_resolved_start(state, duration, full))


def pan(state: ZoomState, full: TimeRange | None, direction: PanDirection) -> ZoomState:
    """Shift the window by half its length, never leaving the full range."""
    duration = state.length.duration
    if duration is None or full is None or full.start == full.end:
        return state
    moved = _resolved_start(state, duration, full) + (duration / 2) * direction.value
    return replace(state, window_start=_clamp_start(moved, duration, full))


def visible_range(state: ZoomState, full: TimeRange | None) -> TimeRange | None:
    """Resolve the window bounds, trimmed to the full range."""
    if full is None:
        return None
    duration = state.length.duration
    if duration is None:
        return full
    start = _resolved_start(state, duration, full)
    return TimeRange(start=start, end=min(start + duration, full.end))


def padded_bounds(window: TimeRange, padding: timedelta = DISPLAY_PADDING) -> TimeRange:
    """Bounds for the x-axis; padding is cosmetic only."""
    return TimeRange(start=window.start - padding, end=window.end + padding)


def filter_to_window(
    points: Sequence[AggregatedPoint],
    markers: Sequence[AnnotatedMarker],
    window: TimeRange | None,
) -> tuple[list[AggregatedPoint], list[AnnotatedMarker]]:
    """Keep points and markers inside the window (inclusive).

    When no point falls inside the window the whole series is returned.
    """
    if window is None:
        return list(points), list(markers)
    in_points = [p for p in points if window.contains(p.at)]
    if not in_points:
        return list(points), list(markers)
    in_markers = [m for m in markers if window.contains(m.event.at)]
    return in_points, in_markers
