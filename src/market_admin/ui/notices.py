"""Bounded notice feed for view alerts."""

from __future__ import annotations

from datetime import UTC, datetime

from .models import Notice, Severity


class NoticeFeed:
    """Keep recent notices; an error repeated back-to-back bumps a counter instead."""

    def __init__(self, *, max_notices: int = 50) -> None:
        self.max_notices = max_notices
        self._notices: list[Notice] = []

    def add(self, severity: Severity, message: str, *, ts: datetime | None = None) -> Notice:
        now = ts or datetime.now(UTC)
        last = self._notices[-1] if self._notices else None
        if (
            last is not None
            and severity == "ERROR"
            and last.severity == severity
            and last.message == message
        ):
            last.count += 1
            last.ts = now.replace(tzinfo=UTC) if now.tzinfo is None else now.astimezone(UTC)
            return last

        notice = Notice(severity=severity, message=message, ts=now)
        self._notices.append(notice)
        del self._notices[: max(0, len(self._notices) - self.max_notices)]
        return notice

    def info(self, message: str) -> Notice:
        return self.add("INFO", message)

    def warn(self, message: str) -> Notice:
        return self.add("WARN", message)

    def error(self, message: str) -> Notice:
        return self.add("ERROR", message)

    @property
    def latest(self) -> Notice | None:
        return self._notices[-1] if self._notices else None

    def snapshot(self, *, newest_first: bool = False) -> list[Notice]:
        items = list(self._notices)
        if newest_first:
            items.reverse()
        return items

    def count(self, severity: Severity | None = None) -> int:
        """Count notices, weighted by repeat counts."""
        return sum(
            notice.count
            for notice in self._notices
            if severity is None or notice.severity == severity
        )
