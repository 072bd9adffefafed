"""View state and notice models shared by the console views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

Severity = Literal["INFO", "WARN", "ERROR"]


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(slots=True)
class Notice:
    """One transient operator-visible message (the console's alert box)."""

    severity: Severity
    message: str
    ts: datetime = field(default_factory=lambda: datetime.now(UTC))
    count: int = 1

    def __post_init__(self) -> None:
        if self.ts.tzinfo is None:
            self.ts = self.ts.replace(tzinfo=UTC)
        else:
            self.ts = self.ts.astimezone(UTC)
