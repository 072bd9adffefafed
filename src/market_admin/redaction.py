"""Helpers for keeping bearer tokens out of logs and journal payloads."""

from __future__ import annotations

import re
from typing import Any

REDACTED = "[REDACTED]"

_SENSITIVE_KEY_RE = re.compile(r"(authorization|token|secret|password)", re.IGNORECASE)
_BEARER_INLINE_RE = re.compile(r"(?i)\b(bearer)\s+[A-Za-z0-9\-._~+/]+=*")
_KEY_VALUE_SECRET_RE = re.compile(
    r"(?i)\b(authorization|token|secret|password)\s*[:=]\s*([^\s,;]+)"
)


def sanitize_text(text: str) -> str:
    """Redact tokens embedded in plain text."""
    sanitized = _BEARER_INLINE_RE.sub(r"\1 " + REDACTED, text)
    return _KEY_VALUE_SECRET_RE.sub(lambda m: f"{m.group(1)}={REDACTED}", sanitized)


def sanitize_for_logging(value: Any) -> Any:
    """Recursively redact sensitive values in nested structures."""
    if isinstance(value, dict):
        return {
            key: REDACTED if _SENSITIVE_KEY_RE.search(str(key)) else sanitize_for_logging(child)
            for key, child in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(sanitize_for_logging(item) for item in value)
    if isinstance(value, str):
        return sanitize_text(value)
    return value
