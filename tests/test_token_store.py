"""Persisted token store and static provider."""

from __future__ import annotations

from pathlib import Path

import pytest

from market_admin.exceptions import TokenStoreError
from market_admin.token_store import FileTokenStore, StaticTokenProvider


def test_missing_file_yields_no_token(tmp_path: Path) -> None:
    store = FileTokenStore(tmp_path / "session.json")
    assert store.get_token() is None


def test_set_get_clear_round(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "session.json"
    store = FileTokenStore(path)
    store.set_token("abc.def")
    assert path.exists()
    assert store.get_token() == "abc.def"
    assert store.clear_token() is True
    assert store.get_token() is None
    assert store.clear_token() is False


def test_token_read_at_call_time(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    store = FileTokenStore(path)
    path.write_text('{"token": "first"}', encoding="utf-8")
    assert store.get_token() == "first"
    path.write_text('{"token": "second", "theme": "dark"}', encoding="utf-8")
    assert store.get_token() == "second"


def test_other_keys_survive_writes(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text('{"theme": "dark"}', encoding="utf-8")
    store = FileTokenStore(path, key="adminToken")
    store.set_token("xyz")
    assert '"theme": "dark"' in path.read_text(encoding="utf-8")
    assert store.get_token() == "xyz"


def test_corrupt_store_raises(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(TokenStoreError):
        FileTokenStore(path).get_token()


def test_blank_token_treated_as_missing(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text('{"token": "   "}', encoding="utf-8")
    assert FileTokenStore(path).get_token() is None


def test_static_provider() -> None:
    assert StaticTokenProvider("t").get_token() == "t"
    assert StaticTokenProvider(None).get_token() is None
