"""Quota counter key builders. Single place for key format (DRY).

Key components (client_id) must not contain QUOTA_KEY_SEP to avoid
ambiguous or colliding keys; IPv6 addresses are normalized.
"""

from datetime import datetime

from app.core.constants import (
    QUOTA_DIRECTION_DOWNLOAD,
    QUOTA_DIRECTION_UPLOAD,
    QUOTA_KEY_SEP,
)
from app.shared.utils.datetime import utc_date_key

_DIRECTIONS = frozenset({QUOTA_DIRECTION_UPLOAD, QUOTA_DIRECTION_DOWNLOAD})


def _normalize_client_id(client_id: str) -> str:
    """Make client_id safe as a key component (IPv6 colons become dashes)."""
    if not client_id:
        raise ValueError("Quota key component 'client_id' must not be empty")
    return client_id.replace(QUOTA_KEY_SEP, "-")


def quota_key(direction: str, client_id: str, now: datetime | None = None) -> str:
    """Daily counter key: <direction>:<client_id>:<YYYY-MM-DD UTC>."""
    if direction not in _DIRECTIONS:
        raise ValueError(f"Unknown quota direction: {direction!r}")
    return QUOTA_KEY_SEP.join(
        [direction, _normalize_client_id(client_id), utc_date_key(now)]
    )


def upload_quota_key(client_id: str, now: datetime | None = None) -> str:
    """Counter key for today's upload bytes."""
    return quota_key(QUOTA_DIRECTION_UPLOAD, client_id, now)


def download_quota_key(client_id: str, now: datetime | None = None) -> str:
    """Counter key for today's download bytes."""
    return quota_key(QUOTA_DIRECTION_DOWNLOAD, client_id, now)
