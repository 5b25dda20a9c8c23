"""Grilla semanal (7 días x tipo) de métricas corporales.

Los epochs de los registros son absolutos, así que los días se calculan en
calendario UTC y no en hora local.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

import pandas as pd
from dateutil import tz

from fitness_tracker.model import BodyStatRecord, WeeklyGridCell

WEEK_LENGTH = 7

PRIORITY_TYPES: tuple[str, ...] = (
    "Peso",
    "Grasa corporal",
    "Masa muscular",
    "Agua corporal",
    "IMC",
    "Grasa visceral",
)

_DIA_CORTO: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")


def week_days(start: date) -> list[date]:
    """Seven consecutive calendar days starting at ``start``."""
    days = pd.date_range(start=start, periods=WEEK_LENGTH, freq="D")
    return list(days.date)


def record_day(epoch_ms: int) -> date:
    """UTC calendar day of an epoch in milliseconds."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=tz.UTC).date()


def weekday_label(day: date) -> str:
    return _DIA_CORTO[day.weekday()]


def day_label(day: date) -> str:
    """Etiqueta corta de columna, p. ej. ``lun 13/10``."""
    return f"{weekday_label(day)} {day.day:02d}/{day.month:02d}"


def order_types(types: Iterable[str]) -> list[str]:
    """Priority types first (in their fixed order), then the rest alphabetically."""
    unique = set(types)
    ordered = [name for name in PRIORITY_TYPES if name in unique]
    ordered.extend(sorted(name for name in unique if name not in PRIORITY_TYPES))
    return ordered


def records_to_frame(records: Sequence[BodyStatRecord]) -> pd.DataFrame:
    """Convert records to a DataFrame with a UTC ``date`` column."""
    rows = [
        {
            "type": r.type,
            "value": r.value,
            "comment": r.comment,
            "epoch": r.epoch,
            "date": record_day(r.epoch),
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=["type", "value", "comment", "epoch", "date"])
    if df.empty:
        return df
    return df.sort_values("epoch", kind="stable").reset_index(drop=True)


def build_weekly_grid(
    records: Sequence[BodyStatRecord], start: date
) -> dict[str, list[WeeklyGridCell]]:
    """Reshape records into one 7-cell row per type.

    Args:
        records: Records of any number of types.
        start: First UTC day of the week.

    Returns:
        Ordered mapping type -> 7 cells. Types without records are absent.
        If a type has several records on one day the latest epoch is kept.
    """
    days = week_days(start)
    df = records_to_frame(records)
    if df.empty:
        return {}

    in_week = df[df["date"].isin(days)]
    latest = in_week.drop_duplicates(subset=["type", "date"], keep="last")
    by_key = {
        (row["type"], row["date"]): row for row in latest.to_dict(orient="records")
    }

    grid: dict[str, list[WeeklyGridCell]] = {}
    for type_name in order_types(df["type"]):
        cells: list[WeeklyGridCell] = []
        for day in days:
            row = by_key.get((type_name, day))
            if row is None:
                cells.append(WeeklyGridCell(date=day))
                continue
            cells.append(
                WeeklyGridCell(
                    date=day,
                    value=str(row["value"]),
                    comment=str(row["comment"] or ""),
                    has_data=True,
                )
            )
        grid[type_name] = cells
    return grid


def previous_week(start: date) -> date:
    return start - timedelta(days=WEEK_LENGTH)


def next_week(start: date) -> date:
    return start + timedelta(days=WEEK_LENGTH)
