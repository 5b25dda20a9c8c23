"""Configuración de la app (URL del API, umbral de agrupación, zoom, rutas)."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path

from fitness_tracker.window import ZoomLength

DEFAULT_API_URL = "https://n8n.floresbenavides.com/webhook"
API_URL_ENV = "FITNESS_API_URL"


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration shared by the CLI and the GUI."""

    api_url: str = DEFAULT_API_URL
    db_path: Path = Path.home() / ".fitness_tracker" / "token.sqlite3"
    export_dir: Path = Path.cwd() / "salidas"
    threshold_minutes: int = 30
    zoom: ZoomLength = ZoomLength.ALL
    timeout: float = 10.0


def build_config(ns: argparse.Namespace) -> AppConfig:
    """Build an AppConfig from parsed args and the environment.

    ``FITNESS_API_URL`` is used when ``--api-url`` is not given.

    Raises:
        ValueError: If threshold, zoom or timeout are invalid.
    """
    defaults = AppConfig()
    api_url = getattr(ns, "api_url", None) or os.environ.get(API_URL_ENV) or defaults.api_url
    threshold = getattr(ns, "threshold", None)
    threshold = defaults.threshold_minutes if threshold is None else int(threshold)
    zoom_raw = getattr(ns, "zoom", None) or defaults.zoom.value
    timeout = getattr(ns, "timeout", None)
    timeout = defaults.timeout if timeout is None else float(timeout)

    if threshold < 0:
        raise ValueError(f"threshold must be non-negative, got {threshold}")
    try:
        zoom = ZoomLength(zoom_raw)
    except ValueError:
        choices = ", ".join(z.value for z in ZoomLength)
        raise ValueError(f"zoom must be one of {choices}, got {zoom_raw!r}") from None
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    db_path = getattr(ns, "db", None)
    export_dir = getattr(ns, "export_dir", None)
    return AppConfig(
        api_url=api_url.rstrip("/"),
        db_path=Path(db_path).expanduser() if db_path else defaults.db_path,
        export_dir=Path(export_dir).expanduser() if export_dir else defaults.export_dir,
        threshold_minutes=threshold,
        zoom=zoom,
        timeout=timeout,
    )
