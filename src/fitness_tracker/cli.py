"""CLI: serie de glucosa del día, grilla semanal y carga de métricas corporales."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections.abc import Sequence
from datetime import date, timedelta
from pathlib import Path

from fitness_tracker.config import AppConfig, build_config
from fitness_tracker.controller import DayController, DayView, EntrySession, WeekController
from fitness_tracker.excel_writer import ExcelLayout, write_day_xlsx, write_weekly_xlsx
from fitness_tracker.model import WeeklyGridCell
from fitness_tracker.sources.api import FitnessApi
from fitness_tracker.sources.base import ApiError, ApiSettings
from fitness_tracker.stats import format_stat
from fitness_tracker.storage import TokenStore
from fitness_tracker.timeparse import (
    format_date_for_api,
    format_date_for_display,
    format_time,
    parse_date_param,
)
from fitness_tracker.weekly import day_label
from fitness_tracker.window import PanDirection, ZoomLength


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Fitness Tracker: glucosa del día y métricas corporales."
    )
    parser.add_argument("--api-url", help="URL base del webhook (o FITNESS_API_URL).")
    parser.add_argument("--db", help="Archivo SQLite donde se guarda el token.")
    parser.add_argument("--timeout", type=float, help="Timeout HTTP en segundos.")
    parser.add_argument("--export-dir", help="Directorio de salida de Excel.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log detallado.")
    sub = parser.add_subparsers(dest="command", required=True)

    day = sub.add_parser("day", help="Serie de glucosa y eventos de un día.")
    day.add_argument("--date", help="Fecha YYYY-MM-DD (default: hoy).")
    day.add_argument("--threshold", type=int, help="Umbral de agrupación en minutos (0 = sin agrupar).")
    day.add_argument("--zoom", choices=[z.value for z in ZoomLength], help="Ventana visible.")
    day.add_argument(
        "--pan",
        action="append",
        choices=[d.name.lower() for d in PanDirection],
        default=[],
        help="Desplazar la ventana media longitud (repetible).",
    )
    day.add_argument("--export", action="store_true", help="Exportar la serie a Excel.")

    week = sub.add_parser("week", help="Grilla semanal de métricas corporales.")
    week.add_argument("--start", help="Primer día YYYY-MM-DD (default: hace 6 días).")
    week.add_argument("--export", action="store_true", help="Exportar la grilla a Excel.")

    classify = sub.add_parser("classify", help="Clasificar bloques de texto libre.")
    classify.add_argument("file", help="Archivo de texto ('-' para stdin).")
    classify.add_argument(
        "--in-place",
        action="store_true",
        help="Reescribir el archivo dejando sólo los bloques sin clasificar.",
    )
    classify.add_argument("--submit", action="store_true", help="Enviar lo clasificado al API.")
    classify.add_argument("--date", help="Fecha de las métricas (default: hoy).")

    login = sub.add_parser("login", help="Obtener y guardar el token de acceso.")
    login.add_argument("--username", required=True)
    login.add_argument("--password", help="Se pide por consola si se omite.")

    sub.add_parser("logout", help="Borrar el token guardado.")
    return parser.parse_args(argv)


def _build_api(config: AppConfig, store: TokenStore) -> FitnessApi:
    api = FitnessApi(
        ApiSettings(base_url=config.api_url, timeout=config.timeout),
        token_provider=store.current_token,
    )
    api.validate()
    return api


def render_day(view: DayView) -> str:
    """Plain-text rendering of a day view."""
    lines = [format_date_for_display(view.day)]
    if not view.has_glucose:
        lines.append("No hay datos de glucosa para esta fecha")
        if view.day_events:
            lines.append(
                f"Se encontraron {len(view.day_events)} evento(s) pero sin lecturas de glucosa"
            )
    else:
        summary = view.summary
        lines.append(
            "Máximo {} | Mínimo {} | Promedio {}".format(
                format_stat(summary.maximum if summary else None),
                format_stat(summary.minimum if summary else None),
                format_stat(summary.average if summary else None),
            )
        )
        for label, zone in (("Sweet Spot", view.sweet), ("Perfect Spot", view.perfect)):
            lines.append(
                f"{label}: dentro {zone.in_range} ({zone.percentage(zone.in_range)}%), "
                f"arriba {zone.above}, abajo {zone.below}"
            )
        if view.trend is not None:
            lines.append(f"Tendencia: {view.trend.value} {view.trend.label}")
    if view.window is not None:
        lines.append(
            f"Ventana ({view.zoom.value}): "
            f"{format_time(view.window.start)} - {format_time(view.window.end)}"
        )
    for point in view.points:
        lines.append(f"  {format_time(point.at)}  {point.value:6.1f}")
    for marker in view.markers:
        lines.append(
            f"  {format_time(marker.at)}  {marker.plotted_value:6.1f}  "
            f"[{marker.event.kind.value}] {marker.event.text}"
        )
    return "\n".join(lines)


def render_grid(grid: dict[str, list[WeeklyGridCell]]) -> str:
    """Plain-text rendering of the weekly grid."""
    if not grid:
        return "Sin métricas para esta semana"
    days = next(iter(grid.values()))
    width = max(len(name) for name in grid)
    header = " " * width + " | " + " | ".join(f"{day_label(c.date):>9}" for c in days)
    rows = [header]
    for name, cells in grid.items():
        values = " | ".join(f"{(c.value if c.has_data else '-'):>9}" for c in cells)
        rows.append(f"{name:<{width}} | {values}")
    return "\n".join(rows)


def _run_day(ns: argparse.Namespace, config: AppConfig, api: FitnessApi) -> int:
    target = parse_date_param(ns.date, date.today())
    controller = DayController(
        api,
        threshold=timedelta(minutes=config.threshold_minutes),
        zoom=config.zoom,
        today=target,
    )
    controller.load(target)
    controller.set_zoom(config.zoom)
    for direction in ns.pan:
        controller.pan(PanDirection[direction.upper()])
    view = controller.view()
    print(render_day(view))
    if ns.export:
        out_path = config.export_dir / f"glucosa_{format_date_for_api(target)}.xlsx"
        write_day_xlsx(view, out_path, ExcelLayout())
        print(f"OK: Output: {out_path}")
    return 0


def _run_week(ns: argparse.Namespace, config: AppConfig, api: FitnessApi) -> int:
    controller = WeekController(api)
    if ns.start:
        controller.start = parse_date_param(ns.start, controller.start)
    grid = controller.load()
    print(render_grid(grid))
    if ns.export:
        out_path = config.export_dir / f"metricas_{format_date_for_api(controller.start)}.xlsx"
        write_weekly_xlsx(grid, out_path, ExcelLayout())
        print(f"OK: Output: {out_path}")
    return 0


def _run_classify(ns: argparse.Namespace, api: FitnessApi) -> int:
    source = Path(ns.file)
    text = sys.stdin.read() if ns.file == "-" else source.read_text(encoding="utf-8")
    session = EntrySession()
    result = session.classify(text)
    for entry in result.classified:
        unit = f" {entry.type.unit}" if entry.type.unit else ""
        comment = f"  ({entry.comment})" if entry.comment else ""
        print(f"OK: {entry.type.canonical_name}: {entry.value}{unit}{comment}")
    if result.unmatched:
        print(f"Sin clasificar: {len(result.unmatched)} bloque(s)")
        print(session.pending_text)
    if ns.in_place and ns.file != "-":
        source.write_text(session.pending_text, encoding="utf-8")
    if ns.submit:
        sent = session.submit(api, parse_date_param(ns.date, date.today()))
        print(f"OK: Enviadas {sent} métricas")
    return 0 if not result.unmatched else 2


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success, 1 on API or configuration errors, 2 if blocks
        stayed unmatched).
    """
    ns = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = build_config(ns)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    store = TokenStore(config.db_path)
    api = _build_api(config, store)

    try:
        if ns.command == "day":
            return _run_day(ns, config, api)
        if ns.command == "week":
            return _run_week(ns, config, api)
        if ns.command == "classify":
            return _run_classify(ns, api)
        if ns.command == "login":
            password = ns.password or getpass.getpass("Password: ")
            store.save_token(api.login(ns.username, password))
            print("OK: Token guardado")
            return 0
        if ns.command == "logout":
            store.clear_token()
            print("OK: Token borrado")
            return 0
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 1
