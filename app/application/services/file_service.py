"""File service: single entry point over the configured storage backend.

Forwards upload, download, delete and cleanup verbatim to the backend
chosen at startup, logging each outcome with key and duration.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterable
from typing import TYPE_CHECKING

from app.application.dtos.storage import CleanupResult, DownloadResult, UploadResult

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.infrastructure.external.storage.protocol import StorageProtocol

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class FileService:
    """Storage facade. Holds exactly one backend, read-only after construction."""

    def __init__(self, storage: "StorageProtocol", inactivity_period: str = "30d") -> None:
        self.storage = storage
        self.inactivity_period = inactivity_period

    @classmethod
    def from_settings(cls, settings: "Settings") -> FileService:
        """Select and initialize the backend from settings.

        Backend initialization errors propagate (no fallback).
        """
        from app.infrastructure.external.storage.factory import StorageFactory

        try:
            storage = StorageFactory.create_storage_backend(settings)
        except Exception:
            logger.exception("Storage initialization error")
            raise
        return cls(storage, inactivity_period=settings.inactivity_period)

    async def upload_file(
        self,
        payload: AsyncIterable[bytes] | bytes,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> UploadResult:
        """Store a payload; returns its key pair."""
        started = time.perf_counter()
        try:
            result = await self.storage.upload(payload, original_name, mime_type, size)
        except Exception as e:
            logger.error("Error in upload_file (%s ms): %s", _elapsed_ms(started), e)
            raise
        logger.info(
            "File uploaded successfully: %s (%s bytes, %s ms)",
            result.public_key,
            size,
            _elapsed_ms(started),
        )
        return result

    async def download_file(self, public_key: str) -> DownloadResult:
        """Open a stored payload for streaming."""
        started = time.perf_counter()
        try:
            result = await self.storage.download(public_key)
        except Exception as e:
            logger.error(
                "Error in download_file for %s (%s ms): %s", public_key, _elapsed_ms(started), e
            )
            raise
        logger.info("File downloaded successfully: %s (%s ms)", public_key, _elapsed_ms(started))
        return result

    async def delete_file(self, private_key: str) -> dict[str, bool]:
        """Delete the object owning private_key.

        Only a short prefix of the private key is logged.
        """
        key_hint = f"{private_key[:8]}..."
        started = time.perf_counter()
        try:
            result = await self.storage.delete(private_key)
        except Exception as e:
            logger.error(
                "Error in delete_file for %s (%s ms): %s", key_hint, _elapsed_ms(started), e
            )
            raise
        logger.info("File deleted successfully: %s (%s ms)", key_hint, _elapsed_ms(started))
        return result

    async def cleanup_inactive_files(self, inactivity_period: str | None = None) -> CleanupResult:
        """Run one eviction sweep with the given (or configured) inactivity period."""
        period = inactivity_period or self.inactivity_period
        started = time.perf_counter()
        try:
            result = await self.storage.cleanup_inactive_files(period)
        except Exception as e:
            logger.error("Error in cleanup_inactive_files (%s ms): %s", _elapsed_ms(started), e)
            raise
        logger.info(
            "Cleanup completed. Files deleted: %s, errors: %s (%s ms)",
            result.deleted_count,
            result.error_count,
            _elapsed_ms(started),
        )
        return result
