"""Parsers for human-readable configuration values (byte sizes, durations)."""

import re
from datetime import timedelta

_SIZE_PATTERN = re.compile(r"^(\d+)\s*(mb|gb)$", re.IGNORECASE)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_PERIOD_PATTERN = re.compile(r"^(\d+)([dhm])$")

MB = 1024 * 1024
GB = 1024 * 1024 * 1024

DEFAULT_INACTIVITY_PERIOD = timedelta(days=30)


def parse_size(value: str | int | None) -> int:
    """Parse a quota size such as "100MB", "1gb" or "500" into bytes.

    Units are binary (1 MB = 1024**2). Anything else falls back to the
    leading integer, or 0 when there is none.
    """
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return 0
    text = value.strip()
    match = _SIZE_PATTERN.match(text)
    if match:
        amount = int(match.group(1))
        return amount * (GB if match.group(2).lower() == "gb" else MB)
    fallback = _LEADING_INT.match(text)
    return int(fallback.group(1)) if fallback else 0


def parse_inactivity_period(period: str | None) -> timedelta:
    """Parse "<int>d", "<int>h" or "<int>m" into a timedelta.

    Missing or unrecognized values default to 30 days.
    """
    if not period:
        return DEFAULT_INACTIVITY_PERIOD
    match = _PERIOD_PATTERN.match(period.strip())
    if not match:
        return DEFAULT_INACTIVITY_PERIOD
    amount = int(match.group(1))
    unit = match.group(2)
    if unit == "d":
        return timedelta(days=amount)
    if unit == "h":
        return timedelta(hours=amount)
    return timedelta(minutes=amount)
