"""Bearer token providers backed by a persisted key-value store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from .exceptions import TokenStoreError


class TokenProvider(Protocol):
    """Supplies the bearer token for an authenticated request."""

    def get_token(self) -> str | None: ...


class StaticTokenProvider:
    """Token fixed at construction, e.g. from ``MARKET_AUTH_TOKEN``."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        return self._token


class FileTokenStore:
    """JSON key-value file holding the session token.

    The file is re-read on every ``get_token`` call so a token written by
    another process is picked up without restarting.
    """

    def __init__(self, path: Path, key: str = "token") -> None:
        self.path = path
        self.key = key

    def get_token(self) -> str | None:
        value = self._read().get(self.key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def set_token(self, token: str) -> None:
        data = self._read()
        data[self.key] = token
        self._write(data)

    def clear_token(self) -> bool:
        """Remove the token; return whether one was stored."""
        data = self._read()
        if self.key not in data:
            return False
        del data[self.key]
        self._write(data)
        return True

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            raise TokenStoreError(f"Failed reading token store {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise TokenStoreError(f"Token store {self.path} must contain a JSON object.")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise TokenStoreError(f"Failed writing token store {self.path}: {exc}") from exc
