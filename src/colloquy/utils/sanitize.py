"""Error message sanitization to prevent credential leakage."""

from __future__ import annotations

import re
from typing import Iterable

_KEY_PATTERNS = (
    (re.compile(r"sk-[a-zA-Z0-9_-]{20,}"), "[REDACTED_KEY]"),
    (re.compile(r"Bearer\s+\S+"), "Bearer [REDACTED]"),
    (re.compile(r"Authorization:\s*\S+", re.IGNORECASE), "Authorization: [REDACTED]"),
)


def sanitize_error(message: str, secrets: Iterable[str] = ()) -> str:
    """Redact API keys and bearer tokens from an upstream error message.

    ``secrets`` are literal values (e.g. the configured API key) that must never
    appear in surfaced text, whatever their shape.
    """
    if not message:
        return message

    sanitized = message
    for secret in secrets:
        if secret and len(secret) >= 4:
            sanitized = sanitized.replace(secret, "[REDACTED_KEY]")
    for pattern, replacement in _KEY_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized
