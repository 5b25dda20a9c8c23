from __future__ import annotations

from pathlib import Path

import pytest

from fitness_tracker.storage import TokenStore


def test_token_round_trip(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "nested" / "token.sqlite3")
    assert store.current_token() is None

    store.save_token("abc")
    assert store.current_token() == "abc"

    store.save_token("def")
    assert TokenStore(tmp_path / "nested" / "token.sqlite3").current_token() == "def"

    store.clear_token()
    assert store.current_token() is None


def test_empty_token_rejected(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "token.sqlite3")
    with pytest.raises(ValueError):
        store.save_token("")
