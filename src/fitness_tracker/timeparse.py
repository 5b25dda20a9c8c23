"""Normalización de timestamps del webhook y formatos de fecha compartidos.

El servidor envía los timestamps con sufijo ``Z`` pero el valor ya es hora
local de pared: el sufijo se descarta y la fecha se arma campo por campo, sin
aplicar ningún offset.
"""

from __future__ import annotations

import re
from datetime import date, datetime

_WIRE_RX = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d+))?)?)?$"
)
_UTC_SUFFIXES: tuple[str, ...] = ("Z", "z", "+00:00", "+0000")

_DIAS: tuple[str, ...] = (
    "lunes",
    "martes",
    "miércoles",
    "jueves",
    "viernes",
    "sábado",
    "domingo",
)
_MESES: tuple[str, ...] = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


def strip_utc_designator(wire: str) -> str:
    """Quita el designador UTC final (``Z`` o ``+00:00``) si existe."""
    text = wire.strip()
    for suffix in _UTC_SUFFIXES:
        if text.endswith(suffix):
            return text[: -len(suffix)]
    return text


def parse_local_instant(wire: str) -> datetime:
    """Parse a wire timestamp into a naive local datetime.

    Args:
        wire: Timestamp such as ``2025-03-01T05:57:00.000Z``.

    Returns:
        Naive datetime with the same wall-clock fields as the string.

    Raises:
        ValueError: If the string is not an ISO-like date/time.
    """
    text = strip_utc_designator(wire)
    match = _WIRE_RX.match(text)
    if match is None:
        raise ValueError(f"Invalid timestamp: {wire!r}")
    year, month, day, hour, minute, second, fraction = match.groups()
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hour or 0),
        int(minute or 0),
        int(second or 0),
        micro,
    )


def format_date_for_api(day: date) -> str:
    """Format a day as ``YYYY-MM-DD``."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date_param(text: str | None, today: date) -> date:
    """Parse a ``YYYY-MM-DD`` date parameter; invalid or empty falls back to today."""
    if not text:
        return today
    try:
        year, month, day = (int(part) for part in text.strip().split("-"))
        return date(year, month, day)
    except ValueError:
        return today


def format_date_for_display(day: date) -> str:
    """Fecha larga en castellano, p. ej. ``sábado, 18 de octubre de 2026``."""
    weekday = _DIAS[day.weekday()]
    month = _MESES[day.month - 1]
    return f"{weekday}, {day.day} de {month} de {day.year}"


def format_time(instant: datetime) -> str:
    return instant.strftime("%H:%M")
