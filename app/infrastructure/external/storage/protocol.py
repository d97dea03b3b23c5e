"""Storage backend protocol (DIP). Implementations: LocalStorageBackend, S3StorageBackend."""

from collections.abc import AsyncIterable
from typing import Protocol

from app.application.dtos.storage import CleanupResult, DownloadResult, UploadResult


class StorageProtocol(Protocol):
    """Contract shared by every storage backend.

    Each object is a payload plus a metadata record, both addressed by the
    public key. Backends must behave identically for all four operations.
    """

    async def upload(
        self,
        payload: AsyncIterable[bytes] | bytes,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> UploadResult:
        """Persist metadata then payload; remove both if either write fails."""
        ...

    async def download(self, public_key: str) -> DownloadResult:
        """Open payload stream and touch lastAccessed. StorageNotFoundError if missing."""
        ...

    async def delete(self, private_key: str) -> dict[str, bool]:
        """Delete the object owning private_key. InvalidPrivateKeyError if none."""
        ...

    async def cleanup_inactive_files(self, inactivity_period: str) -> CleanupResult:
        """Delete objects whose lastAccessed is older than the period. Never aborts early."""
        ...
