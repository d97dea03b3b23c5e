"""DTOs for storage operations (upload keys, download handle, sweep summary)."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class UploadResult:
    """Access keys issued for a newly stored object."""

    public_key: str
    """Retrieval key (32 hex chars)."""

    private_key: str
    """Deletion capability (64 hex chars); returned only here."""


@dataclass
class DownloadResult:
    """Open download: payload stream plus the metadata the transport needs for headers."""

    stream: AsyncIterator[bytes]
    mime_type: str
    original_name: str
    size: int


@dataclass(frozen=True)
class CleanupError:
    """One object the sweep could not process."""

    file: str
    """Identifying key (metadata name) of the failed object."""

    error: str
    """Error description."""


@dataclass
class CleanupResult:
    """Summary of one eviction sweep."""

    deleted_count: int = 0
    errors: list[CleanupError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        """Number of objects that failed during the sweep."""
        return len(self.errors)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and JSON output."""
        return {
            "deletedCount": self.deleted_count,
            "errorCount": self.error_count,
            "errors": [{"file": e.file, "error": e.error} for e in self.errors],
        }
