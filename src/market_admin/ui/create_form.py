"""Add-market form: collects fields, normalizes times, assigns a provisional id."""

from __future__ import annotations

import logging
import re
import secrets
import string
from collections.abc import Callable

from ..exceptions import FormValidationError, MarketAPIError
from ..models import MarketDraft

MARKET_ID_PREFIX = "MKT-"
MARKET_ID_LENGTH = 9
_MARKET_ID_ALPHABET = string.ascii_uppercase + string.digits
# Browser time inputs may carry seconds; they are ignored.
_TIME_24H_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def to_twelve_hour(value: str) -> str:
    """Convert ``HH:MM`` (24-hour) to ``h:mm AM|PM``. ``00:30`` -> ``12:30 AM``."""
    match = _TIME_24H_RE.match(value)
    if not match:
        raise FormValidationError(f"Time must be in HH:MM format, got {value!r}.")
    hour = int(match.group(1))
    minute = match.group(2)
    if hour > 23 or int(minute) > 59:
        raise FormValidationError(f"Time out of range: {value!r}.")
    period = "PM" if hour >= 12 else "AM"
    display_hour = (hour + 11) % 12 + 1
    return f"{display_hour}:{minute} {period}"


def generate_market_id() -> str:
    """Provisional client-side id, e.g. ``MKT-4G7QZ2K9A``."""
    suffix = "".join(secrets.choice(_MARKET_ID_ALPHABET) for _ in range(MARKET_ID_LENGTH))
    return f"{MARKET_ID_PREFIX}{suffix}"


class MarketCreateForm:
    """Modal form state. It closes only after a successful save."""

    def __init__(
        self,
        *,
        name: str = "",
        open_time: str = "",
        close_time: str = "",
        is_betting_open: bool = False,
        logger: logging.Logger | None = None,
        id_factory: Callable[[], str] = generate_market_id,
    ) -> None:
        self.name = name
        self.open_time = open_time
        self.close_time = close_time
        self.is_betting_open = is_betting_open
        self.logger = logger or logging.getLogger("market_admin")
        self.id_factory = id_factory
        self.is_open = True
        self.error: str | None = None
        self.submitted: MarketDraft | None = None

    def build_payload(self) -> MarketDraft:
        name = self.name.strip()
        if not name:
            raise FormValidationError("Market name is required.")
        if not self.open_time.strip() or not self.close_time.strip():
            raise FormValidationError("Open time and close time are required.")
        return MarketDraft(
            name=name,
            open_time=to_twelve_hour(self.open_time),
            close_time=to_twelve_hour(self.close_time),
            is_betting_open=self.is_betting_open,
            market_id=self.id_factory(),
        )

    def submit(self, on_save: Callable[[MarketDraft], None]) -> bool:
        """Build the payload and hand it to ``on_save``.

        ``on_save`` signals failure by raising ``MarketAPIError``. On failure the
        form stays open and keeps the message in ``error`` for inline display.
        """
        if not self.is_open:
            raise FormValidationError("Form is already closed.")
        self.error = None
        try:
            payload = self.build_payload()
            on_save(payload)
        except FormValidationError as exc:
            self.error = str(exc)
            return False
        except MarketAPIError as exc:
            self.error = f"Failed to add market: {exc.message}"
            self.logger.warning("Add market failed; form left open: %s", exc.message)
            return False
        self.submitted = payload
        self.is_open = False
        return True

    def cancel(self) -> None:
        self.is_open = False
