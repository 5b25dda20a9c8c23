"""Persistencia SQLite del token de acceso (lo único que se guarda localmente)."""

from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS auth (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_TOKEN_KEY = "bearer_token"


class TokenStore:
    """Repositorio SQLite para el bearer token."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def current_token(self) -> str | None:
        """Devuelve el token guardado o None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM auth WHERE key = ?", (_TOKEN_KEY,)
            ).fetchone()
        if row is None:
            return None
        return str(row["value"]) or None

    def save_token(self, token: str) -> None:
        """Guarda (o reemplaza) el token."""
        if not token:
            raise ValueError("token must not be empty")
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO auth(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (_TOKEN_KEY, token),
            )
            conn.commit()

    def clear_token(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM auth WHERE key = ?", (_TOKEN_KEY,))
            conn.commit()
