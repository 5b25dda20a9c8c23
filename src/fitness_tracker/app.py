"""App Kivy: glucosa del día con zoom, carga de métricas y grilla semanal."""

from __future__ import annotations

import threading
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from fitness_tracker.aggregate import THRESHOLD_CHOICES
from fitness_tracker.cli import render_day, render_grid
from fitness_tracker.config import AppConfig
from fitness_tracker.controller import DayController, EntrySession, WeekController
from fitness_tracker.excel_writer import ExcelLayout, write_weekly_xlsx
from fitness_tracker.sources.api import FitnessApi
from fitness_tracker.sources.base import ApiSettings
from fitness_tracker.storage import TokenStore
from fitness_tracker.timeparse import format_date_for_api
from fitness_tracker.window import PanDirection, ZoomLength

ZOOM_LABELS: dict[ZoomLength, str] = {
    ZoomLength.FOUR_HOURS: "4h",
    ZoomLength.TWELVE_HOURS: "12h",
    ZoomLength.ALL: "Todo",
}


@dataclass
class AppSession:
    """Collaborators shared by the three tabs."""

    store: TokenStore
    api: FitnessApi
    day: DayController
    week: WeekController
    entries: EntrySession


def build_session(config: AppConfig, api: FitnessApi | None = None) -> AppSession:
    """Wire the API client into the day and week controllers."""
    store = TokenStore(config.db_path)
    if api is None:
        api = FitnessApi(
            ApiSettings(base_url=config.api_url, timeout=config.timeout),
            token_provider=store.current_token,
        )
    return AppSession(
        store=store,
        api=api,
        day=DayController(
            api,
            threshold=timedelta(minutes=config.threshold_minutes),
            zoom=config.zoom,
        ),
        week=WeekController(api),
        entries=EntrySession(),
    )


def run_app(config: AppConfig | None = None) -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.clock import Clock
    from kivy.core.window import Window
    from kivy.resources import resource_find
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.label import Label
    from kivy.uix.tabbedpanel import TabbedPanel, TabbedPanelItem
    from kivy.uix.textinput import TextInput

    app_config = config or AppConfig()

    class FitnessTrackerApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            session = build_session(app_config)
            self.store = session.store
            self.api = session.api
            self.day = session.day
            self.week = session.week
            self.entries = session.entries
            self.status: Label | None = None
            self.preview: TextInput | None = None
            self.week_preview: TextInput | None = None
            self.entry_input: TextInput | None = None
            self.entry_list: TextInput | None = None
            self._preview_font = resource_find("data/fonts/RobotoMono-Regular.ttf")

        def build(self) -> BoxLayout:
            Window.bind(on_key_down=self._on_key_down)

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)
            root.add_widget(Label(text="Fitness Tracker", size_hint_y=None, height=36))
            self.status = Label(text="", size_hint_y=None, height=30)
            root.add_widget(self.status)

            panel = TabbedPanel(do_default_tab=False)
            panel.add_widget(self._build_day_tab())
            panel.add_widget(self._build_entry_tab())
            panel.add_widget(self._build_week_tab())
            root.add_widget(panel)

            self._load_day(self.day.state.current_day)
            return root

        def _button_row(self, buttons: list[tuple[str, Callable[..., Any]]]) -> BoxLayout:
            row = BoxLayout(orientation="horizontal", spacing=8, size_hint_y=None, height=40)
            for text, callback in buttons:
                btn = Button(text=text)
                btn.bind(on_press=callback)
                row.add_widget(btn)
            return row

        def _mono_input(self, readonly: bool) -> TextInput:
            inp = TextInput(readonly=readonly, text="", multiline=True, do_wrap=False)
            if self._preview_font:
                inp.font_name = self._preview_font
            return inp

        # -- pestaña glucosa ----------------------------------------------

        def _build_day_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Glucosa")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            box.add_widget(
                self._button_row(
                    [
                        ("← Anterior", lambda *_: self._load_day(self.day.previous_day())),
                        ("Hoy", lambda *_: self._load_day(self.day.today())),
                        ("Siguiente →", lambda *_: self._load_day(self.day.next_day())),
                    ]
                )
            )
            box.add_widget(
                self._button_row(
                    [
                        (f"{minutes} min", self._threshold_callback(minutes))
                        for minutes in THRESHOLD_CHOICES
                    ]
                )
            )
            zoom_buttons = [
                (label, self._zoom_callback(length)) for length, label in ZOOM_LABELS.items()
            ]
            zoom_buttons.insert(0, ("◀", lambda *_: self._pan(PanDirection.LEFT)))
            zoom_buttons.append(("▶", lambda *_: self._pan(PanDirection.RIGHT)))
            box.add_widget(self._button_row(zoom_buttons))
            self.preview = self._mono_input(readonly=True)
            box.add_widget(self.preview)
            tab.add_widget(box)
            return tab

        def _threshold_callback(self, minutes: int) -> Callable[..., None]:
            def apply(*_: object) -> None:
                self.day.set_threshold(minutes)
                self._refresh_day()

            return apply

        def _zoom_callback(self, length: ZoomLength) -> Callable[..., None]:
            def apply(*_: object) -> None:
                self.day.set_zoom(length)
                self._refresh_day()

            return apply

        def _pan(self, direction: PanDirection) -> None:
            self.day.pan(direction)
            self._refresh_day()

        def _load_day(self, day: date) -> None:
            self.day.begin_load(day)
            self._refresh_day()
            self._set_status("Cargando datos...")

            def worker() -> None:
                try:
                    events = self.api.fetch_events(day)
                except Exception as exc:
                    error = exc
                    Clock.schedule_once(lambda _dt: self._on_day_failed(day, error))
                    return
                Clock.schedule_once(lambda _dt: self._on_day_loaded(day, events))

            threading.Thread(target=worker, daemon=True).start()

        def _on_day_loaded(self, day: date, events: list[Any]) -> None:
            if self.day.finish_load(day, events):
                self._set_status(f"{len(events)} evento(s) del {format_date_for_api(day)}")
                self._refresh_day()

        def _on_day_failed(self, day: date, exc: Exception) -> None:
            if self.day.fail_load(day, exc):
                self._show_error("cargar el día", exc)
                self._refresh_day()

        def _refresh_day(self) -> None:
            if self.preview is None:
                return
            if self.day.state.loading:
                self.preview.text = ""
                return
            self.preview.text = render_day(self.day.view())

        # -- pestaña carga de métricas ------------------------------------

        def _build_entry_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Cargar")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            self.entry_input = TextInput(text="", multiline=True)
            box.add_widget(self.entry_input)
            box.add_widget(
                self._button_row(
                    [
                        ("Clasificar", self._on_classify),
                        ("Editar último", self._on_edit_last),
                        ("Enviar", self._on_submit),
                    ]
                )
            )
            self.entry_list = self._mono_input(readonly=True)
            box.add_widget(self.entry_list)
            tab.add_widget(box)
            return tab

        def _on_classify(self, _: object) -> None:
            if self.entry_input is None:
                return
            result = self.entries.classify(self.entry_input.text)
            self.entry_input.text = self.entries.pending_text
            self._refresh_entries()
            if result.unmatched:
                self._set_status(f"Sin clasificar: {len(result.unmatched)} bloque(s)")
            else:
                self._set_status(f"Clasificadas: {len(result.classified)}")

        def _on_edit_last(self, _: object) -> None:
            if not self.entries.classified or self.entry_input is None:
                return
            self.entries.pending_text = self.entry_input.text.strip()
            self.entries.edit(len(self.entries.classified) - 1)
            self.entry_input.text = self.entries.pending_text
            self._refresh_entries()

        def _on_submit(self, _: object) -> None:
            try:
                sent = self.entries.submit(self.api, date.today())
            except Exception as exc:
                self._show_error("enviar", exc)
                return
            self._refresh_entries()
            self._set_status(f"OK. {sent} métrica(s) enviadas.")

        def _refresh_entries(self) -> None:
            if self.entry_list is None:
                return
            self.entry_list.text = "\n".join(
                f"{e.type.canonical_name}: {e.value} {e.type.unit} {e.comment}".rstrip()
                for e in self.entries.classified
            )

        # -- pestaña semana -----------------------------------------------

        def _build_week_tab(self) -> TabbedPanelItem:
            tab = TabbedPanelItem(text="Semana")
            box = BoxLayout(orientation="vertical", spacing=8, padding=8)
            box.add_widget(
                self._button_row(
                    [
                        ("← Semana", lambda *_: self._load_week(self.week.previous_week())),
                        ("Actualizar", lambda *_: self._load_week(self.week.start)),
                        ("Semana →", lambda *_: self._load_week(self.week.next_week())),
                        ("Exportar Excel", self._on_export_week),
                    ]
                )
            )
            self.week_preview = self._mono_input(readonly=True)
            box.add_widget(self.week_preview)
            tab.add_widget(box)
            return tab

        def _load_week(self, start: date) -> None:
            try:
                grid = self.week.load(start)
            except Exception as exc:
                self._show_error("cargar la semana", exc)
                return
            if self.week_preview is not None:
                self.week_preview.text = render_grid(grid)
            self._set_status(f"Semana desde {format_date_for_api(start)}")

        def _on_export_week(self, _: object) -> None:
            out_path = (
                app_config.export_dir
                / f"metricas_{format_date_for_api(self.week.start)}.xlsx"
            )
            try:
                write_weekly_xlsx(self.week.grid(), out_path, ExcelLayout())
            except Exception as exc:
                self._show_error("exportar", exc)
                return
            self._set_status(f"Excel generado: {out_path}")

        # -- comunes ------------------------------------------------------

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _set_status(self, text: str) -> None:
            if self.status is not None:
                self.status.text = text

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            self._set_status(f"Error al {action} ({error_type}): {exc}")
            if self.preview is not None and self.day.state.error:
                self.preview.text = traceback.format_exception_only(type(exc), exc)[-1]

    FitnessTrackerApp().run()
    return 0
