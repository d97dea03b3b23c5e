"""Stored object metadata entity.

One metadata record exists per stored payload, keyed by the public key and
persisted beside it as a JSON document (`<public_key>.meta`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from app.core.constants import PRIVATE_KEY_PATTERN
from app.domain.exceptions import ValidationException
from app.shared.utils.datetime import utc_now


_PRIVATE_KEY_RE = re.compile(PRIVATE_KEY_PATTERN)


def _parse_private_key(value: Any) -> str:
    if not isinstance(value, str) or not _PRIVATE_KEY_RE.fullmatch(value):
        raise ValueError("Metadata field 'privateKey' must be 64 lowercase hex chars")
    return value


def _parse_timestamp(value: Any, field: str) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValueError(f"Metadata field {field!r} must be an ISO-8601 string")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


@dataclass
class ObjectMetadata:
    """Metadata record for one stored payload.

    `size` is authoritative for quota accounting. `last_accessed` starts at
    upload time, is touched on every download and never moves backward.
    """

    private_key: str
    original_name: str
    mime_type: str
    size: int
    uploaded_at: datetime
    last_accessed: datetime

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValidationException if the record breaks its invariants."""
        if not isinstance(self.original_name, str) or not self.original_name:
            raise ValidationException("Invalid original filename", field="originalName")
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size < 0:
            raise ValidationException("Size must be a non-negative integer", field="size")

    @classmethod
    def new(
        cls,
        private_key: str,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> ObjectMetadata:
        """Build the record for a fresh upload (uploaded_at == last_accessed == now)."""
        now = utc_now()
        return cls(
            private_key=private_key,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            uploaded_at=now,
            last_accessed=now,
        )

    def touch(self, when: datetime | None = None) -> None:
        """Record an access. Earlier timestamps are ignored."""
        when = when or utc_now()
        if when > self.last_accessed:
            self.last_accessed = when

    def is_inactive_since(self, cutoff: datetime) -> bool:
        """True when the last access is strictly earlier than cutoff."""
        return self.last_accessed < cutoff

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted key/value document (camelCase, ISO timestamps)."""
        return {
            "privateKey": self.private_key,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "size": self.size,
            "uploadedAt": self.uploaded_at.isoformat(),
            "lastAccessed": self.last_accessed.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> ObjectMetadata:
        """Parse a persisted document.

        Raises:
            ValueError: Document is not an object or has missing/invalid fields.
        """
        if not isinstance(data, dict):
            raise ValueError("Metadata document must be a JSON object")
        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError) as e:
            raise ValueError("Metadata field 'size' must be an integer") from e
        try:
            return cls(
                private_key=_parse_private_key(data.get("privateKey")),
                original_name=data.get("originalName"),
                mime_type=str(data.get("mimeType") or "application/octet-stream"),
                size=size,
                uploaded_at=_parse_timestamp(data.get("uploadedAt"), "uploadedAt"),
                last_accessed=_parse_timestamp(data.get("lastAccessed"), "lastAccessed"),
            )
        except ValidationException as e:
            raise ValueError(e.message) from e
