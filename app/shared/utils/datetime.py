"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def utc_date_key(now: datetime | None = None) -> str:
    """
    Return the UTC calendar date as YYYY-MM-DD.

    Daily quota buckets roll over at UTC midnight, so this is the date
    component of every counter key.

    Args:
        now: Moment to format; defaults to utc_now()

    Returns:
        ISO calendar date string
    """
    moment = now or utc_now()
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.date().isoformat()
