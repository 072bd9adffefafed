"""Append-only JSONL audit trail of operator actions."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from .exceptions import JournalError
from .redaction import sanitize_for_logging


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        value = value if value.tzinfo else value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JournalWriter:
    """Writes one record per operator action into a daily ``.jsonl`` file."""

    def __init__(self, journal_dir: Path, session_id: str) -> None:
        self.journal_dir = journal_dir
        self.session_id = session_id
        try:
            self.journal_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise JournalError(f"Failed creating journal dir {journal_dir}: {exc}") from exc
        self.events_path = self.journal_dir / f"{datetime.now(UTC):%Y%m%d}.jsonl"

    def write_event(
        self,
        event_type: str,
        payload: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "event_type": event_type,
            "session_id": self.session_id,
            "payload": sanitize_for_logging(payload),
            "metadata": sanitize_for_logging(metadata or {}),
        }
        try:
            with self.events_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record, default=_json_default))
                fh.write("\n")
        except (OSError, TypeError, ValueError) as exc:
            raise JournalError(f"Failed writing event journal: {exc}") from exc
