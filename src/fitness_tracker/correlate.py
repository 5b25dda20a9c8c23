"""Asignación de un valor y a los eventos (comida, gym, medicina) del día."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Sequence

from fitness_tracker.model import AggregatedPoint, AnnotatedMarker, Event, EventKind

# Piso del eje y del gráfico; los eventos se dibujan ahí si no hay lecturas.
CHART_FLOOR = 40.0

EVENT_COLORS: dict[EventKind, str] = {
    EventKind.FOOD: "#ff9e64",
    EventKind.GYM: "#9ece6a",
    EventKind.MEDICINE: "#bb9af7",
}
DEFAULT_EVENT_COLOR = "#7aa2f7"


def event_color(kind: EventKind) -> str:
    return EVENT_COLORS.get(kind, DEFAULT_EVENT_COLOR)


def nearest_point(
    points: Sequence[AggregatedPoint], event: Event
) -> AggregatedPoint | None:
    """Return the point closest in time to the event.

    ``points`` must be sorted by ``at``. On a tie the earliest point wins.
    """
    if not points:
        return None
    times = [p.at for p in points]
    idx = bisect_left(times, event.at)
    if idx == 0:
        best = times[0]
    elif idx == len(times):
        best = times[-1]
    else:
        before, after = times[idx - 1], times[idx]
        best = before if event.at - before <= after - event.at else after
    # Con instantes repetidos, el primero de la secuencia.
    return points[bisect_left(times, best)]


def correlate_events(
    events: Iterable[Event],
    points: Sequence[AggregatedPoint],
    floor: float = CHART_FLOOR,
) -> list[AnnotatedMarker]:
    """Pair every non-glucose event with the nearest aggregated value.

    Args:
        events: All events of the day (glucose readings are ignored).
        points: Aggregated points sorted by time.
        floor: Value used when there are no points.

    Returns:
        Markers sorted by event time.
    """
    markers: list[AnnotatedMarker] = []
    for event in events:
        if event.kind is EventKind.GLUCOSE_READING:
            continue
        point = nearest_point(points, event)
        value = point.value if point is not None else floor
        markers.append(AnnotatedMarker(event=event, plotted_value=value))
    markers.sort(key=lambda m: m.event.at)
    return markers


def wrap_label(text: str, width: int = 50) -> list[str]:
    """Word-wrap a tooltip label into lines of at most ``width`` characters."""
    if len(text) <= width:
        return [text]
    lines: list[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= width:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines
