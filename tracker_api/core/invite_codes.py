"""Invite code generation, normalization and display helpers.

Codes are 10 characters from an alphabet without look-alike characters
(no 0/O, 1/I/L), shown to people as ``XXXX-XXXX-XX``.
"""

import secrets
from datetime import UTC, datetime

CODE_ALPHABET = "23456789ABCDEFGHJKMNPQRSTUVWXYZ"
CODE_LENGTH = 10
PREFIX_LENGTH = 4
CODE_GROUPS = (4, 4, 2)
SEPARATOR = "-"

_ALPHABET_SET = frozenset(CODE_ALPHABET)


def generate_code() -> str:
    """Generate a new formatted invite code.

    Uses the ``secrets`` CSPRNG; if the OS random source is unavailable the
    error propagates.
    """
    raw = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
    return format_code(raw)


def format_code(value: str) -> str:
    """Format a normalized code into 4-4-2 groups."""
    normalized = normalize_code(value)
    groups = []
    start = 0
    for size in CODE_GROUPS:
        groups.append(normalized[start : start + size])
        start += size
    return SEPARATOR.join(group for group in groups if group)


def normalize_code(value: str) -> str:
    """Uppercase and strip separators and whitespace."""
    return "".join(
        ch for ch in value.upper() if ch != SEPARATOR and not ch.isspace()
    )


def code_prefix(value: str) -> str:
    """First four normalized characters, safe to show in listings."""
    return normalize_code(value)[:PREFIX_LENGTH]


def mask_code(prefix: str) -> str:
    """Display form of a stored prefix, e.g. ``A7K9-****-**``."""
    return f"{prefix}-****-**"


def is_valid_code_format(value: str) -> bool:
    """Check length and alphabet after normalization."""
    normalized = normalize_code(value)
    if len(normalized) != CODE_LENGTH:
        return False
    return all(ch in _ALPHABET_SET for ch in normalized)


def format_expires_in(expires_at: datetime, now: datetime | None = None) -> str:
    """Time remaining until ``expires_at`` as ``"5h 12m"``, ``"40m"`` or ``"expired"``."""
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)

    remaining = (expires_at - now).total_seconds()
    if remaining <= 0:
        return "expired"

    hours = int(remaining // 3600)
    minutes = int(remaining // 60) % 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
