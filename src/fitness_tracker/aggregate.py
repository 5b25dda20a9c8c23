"""Agrupación temporal de lecturas de glucosa."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import timedelta

from fitness_tracker.model import AggregatedPoint, Event, EventKind, GlucoseSample

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = timedelta(minutes=30)
THRESHOLD_CHOICES: tuple[int, ...] = (0, 30, 60)


def parse_glucose_value(text: str) -> float | None:
    """Parse the reading text as a decimal; None if malformed or not finite."""
    try:
        value = float(text.strip().replace(",", "."))
    except (AttributeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def samples_from_events(events: Iterable[Event]) -> list[GlucoseSample]:
    """Extract glucose samples from the day's events, sorted by time.

    Readings whose text is not a number are skipped.
    """
    out: list[GlucoseSample] = []
    for event in events:
        if event.kind is not EventKind.GLUCOSE_READING:
            continue
        value = parse_glucose_value(event.text)
        if value is None:
            logger.warning("Skipping malformed glucose reading at %s: %r", event.at, event.text)
            continue
        out.append(GlucoseSample(value=value, at=event.at))
    out.sort(key=lambda s: s.at)
    return out


def _close_group(group: list[GlucoseSample]) -> AggregatedPoint:
    mean = sum(s.value for s in group) / len(group)
    return AggregatedPoint(value=mean, at=group[0].at)


def aggregate_samples(
    samples: Sequence[GlucoseSample],
    threshold: timedelta = DEFAULT_THRESHOLD,
) -> list[AggregatedPoint]:
    """Collapse chronologically sorted samples into representative points.

    Each group is anchored on its first sample: a sample joins the group while
    its distance to that first sample is at most ``threshold``. A threshold of
    zero only merges samples with identical timestamps.

    Args:
        samples: Samples sorted by ``at``.
        threshold: Maximum span of a group.

    Returns:
        One point per group (mean value, earliest instant).

    Raises:
        ValueError: If threshold is negative.
    """
    if threshold < timedelta(0):
        raise ValueError(f"threshold must be non-negative, got {threshold}")
    if not samples:
        return []

    points: list[AggregatedPoint] = []
    group = [samples[0]]
    for sample in samples[1:]:
        if sample.at - group[0].at <= threshold:
            group.append(sample)
        else:
            points.append(_close_group(group))
            group = [sample]
    points.append(_close_group(group))

    logger.debug(
        "Aggregated %d samples into %d points (threshold=%s)",
        len(samples),
        len(points),
        threshold,
    )
    return points
