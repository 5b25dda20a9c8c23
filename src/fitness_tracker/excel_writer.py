"""Exportación a Excel formateado (serie del día y grilla semanal)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.comments import Comment
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from fitness_tracker.catalog import find_entry
from fitness_tracker.controller import DayView
from fitness_tracker.model import WeeklyGridCell
from fitness_tracker.weekly import day_label, weekday_label

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "datetime": "Fecha / Hora",
    "glucose_mg_dl": "Glucosa (mg/dL)",
    "kind": "Tipo",
    "desc": "Descripción",
}

_NO_DATA_FILL = PatternFill(fill_type="solid", start_color="EEEEEE", end_color="EEEEEE")


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the exported sheets."""

    day_sheet_name: str = "Glucosa del día"
    week_sheet_name: str = "Resumen semanal"


def day_view_to_frame(view: DayView) -> pd.DataFrame:
    """One row per aggregated point and per marker, sorted by time."""
    rows: list[dict[str, object]] = [
        {
            "datetime": p.at,
            "glucose_mg_dl": round(p.value, 2),
            "kind": "glucosa",
            "desc": "",
        }
        for p in view.points
    ]
    rows.extend(
        {
            "datetime": m.event.at,
            "glucose_mg_dl": round(m.plotted_value, 2),
            "kind": m.event.kind.value,
            "desc": m.event.text,
        }
        for m in view.markers
    )
    df = pd.DataFrame(rows, columns=["datetime", "glucose_mg_dl", "kind", "desc"])
    if df.empty:
        return df
    return df.sort_values("datetime", kind="stable").reset_index(drop=True)


def write_day_xlsx(view: DayView, out_path: Path, layout: ExcelLayout) -> None:
    """Write the visible series of a day as a formatted sheet.

    Args:
        view: Day view as returned by the controller.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    export_df = day_view_to_frame(view)
    export_df.insert(0, "weekday", [weekday_label(view.day)] * len(export_df))
    export_df = export_df.rename(columns=_HEADER_MAP)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.day_sheet_name)
        ws = writer.book[layout.day_sheet_name]
        _format_sheet(ws)


def write_weekly_xlsx(
    grid: dict[str, list[WeeklyGridCell]], out_path: Path, layout: ExcelLayout
) -> None:
    """Write the weekly grid: one row per type, one column per day.

    Cell comments carry the record comment; days without data are shaded.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    days = next(iter(grid.values()), [])
    headers = ["Tipo", "Unidad"] + [day_label(cell.date) for cell in days]
    rows = []
    for type_name, cells in grid.items():
        entry = find_entry(type_name)
        unit = entry.unit if entry is not None else ""
        rows.append([type_name, unit] + [c.value if c.has_data else "" for c in cells])
    export_df = pd.DataFrame(rows, columns=headers)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.week_sheet_name)
        ws = writer.book[layout.week_sheet_name]
        _format_sheet(ws)
        for row_idx, cells in enumerate(grid.values(), start=2):
            for col_idx, cell in enumerate(cells, start=3):
                target = ws.cell(row=row_idx, column=col_idx)
                if not cell.has_data:
                    target.fill = _NO_DATA_FILL
                elif cell.comment:
                    target.comment = Comment(cell.comment, "fitness_tracker")


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    """Aplica alineación y borde a las filas de datos."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    """Establece anchos de columna para evitar ###."""
    widths = [
        ("Día", 6),
        ("Fecha / Hora", 18),
        ("Glucosa (mg/dL)", 14),
        ("Tipo", 18),
        ("Descripción", 40),
        ("Unidad", 8),
    ]
    for header, width in widths:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    """Aplica formatos numéricos por cabecera."""
    fmt_map: dict[str, str] = {
        "Fecha / Hora": "dd/mm/yyyy hh:mm",
        "Glucosa (mg/dL)": "0.0",
    }
    for row in ws.iter_rows(min_row=2):
        for header, fmt in fmt_map.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
