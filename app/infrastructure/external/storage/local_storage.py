"""Local filesystem storage: <public_key> payload files with <public_key>.meta JSON sidecars."""

from __future__ import annotations

import json
import logging
import os
import secrets
import tempfile
from collections.abc import AsyncIterable, AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from app.application.dtos.storage import (
    CleanupError,
    CleanupResult,
    DownloadResult,
    UploadResult,
)
from app.core.constants import METADATA_SUFFIX, STREAM_CHUNK_SIZE
from app.domain.entities.stored_object import ObjectMetadata
from app.infrastructure.exceptions import (
    InvalidPrivateKeyError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_keys
from app.shared.utils.parsing import parse_inactivity_period

logger = logging.getLogger(__name__)


async def _iter_payload(payload: AsyncIterable[bytes] | bytes) -> AsyncIterator[bytes]:
    """Yield payload chunks whether given raw bytes or an async byte stream."""
    if isinstance(payload, (bytes, bytearray, memoryview)):
        yield bytes(payload)
        return
    async for chunk in payload:
        yield chunk


class LocalStorageBackend:
    """Local filesystem storage with atomic writes.

    Layout under storage_root: one file named exactly as the public key and
    one sibling `<public_key>.meta` JSON document. Writes go to a temp file
    in the same directory and are renamed into place.
    """

    CHUNK_SIZE = STREAM_CHUNK_SIZE

    def __init__(self, storage_root: str) -> None:
        """Initialize local storage, creating storage_root recursively if absent.

        Args:
            storage_root: Base directory for all payload and metadata files.
        """
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _payload_path(self, public_key: str) -> Path:
        return self.storage_root / public_key

    def _meta_path(self, public_key: str) -> Path:
        return self.storage_root / f"{public_key}{METADATA_SUFFIX}"

    async def _atomic_write(self, target: Path, chunks: AsyncIterable[bytes]) -> int:
        """Write chunks to a temp file then rename onto target. Returns bytes written."""
        temp_fd, temp_path = tempfile.mkstemp(dir=self.storage_root, prefix=".tmp_")
        os.close(temp_fd)
        written = 0
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in chunks:
                    await f.write(chunk)
                    written += len(chunk)
            os.chmod(temp_path, 0o640)
            await aiofiles.os.replace(temp_path, target)
        finally:
            if await aiofiles.os.path.exists(temp_path):
                await aiofiles.os.remove(temp_path)
        return written

    async def _write_metadata(self, public_key: str, metadata: ObjectMetadata) -> None:
        """Write JSON sidecar."""
        document = json.dumps(metadata.to_dict()).encode("utf-8")
        await self._atomic_write(self._meta_path(public_key), _iter_payload(document))

    async def _read_metadata_file(self, meta_path: Path) -> ObjectMetadata:
        """Read and parse a sidecar. FileNotFoundError if absent, ValueError if corrupt."""
        async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
            content = await f.read()
        return ObjectMetadata.from_dict(json.loads(content))

    async def _list_metadata_files(self) -> list[str]:
        """Names of all sidecar files in storage_root (linear scan, sorted)."""
        names = await aiofiles.os.listdir(self.storage_root)
        return sorted(
            n for n in names if n.endswith(METADATA_SUFFIX) and not n.startswith(".")
        )

    async def _remove_quietly(self, path: Path) -> None:
        """Remove path; log instead of raising (used on rollback paths)."""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Cleanup failed for %s: %s", path.name, e)

    async def _cleanup_failed_upload(self, public_key: str) -> None:
        """Best-effort removal of both artifacts of a half-written object."""
        await self._remove_quietly(self._payload_path(public_key))
        await self._remove_quietly(self._meta_path(public_key))

    async def upload(
        self,
        payload: AsyncIterable[bytes] | bytes,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> UploadResult:
        """Persist metadata then payload. On failure both files are removed before raising."""
        public_key, private_key = generate_keys()
        # Validates original_name and size before touching the filesystem.
        metadata = ObjectMetadata.new(private_key, original_name, mime_type, size)
        try:
            await self._write_metadata(public_key, metadata)
            written = await self._atomic_write(
                self._payload_path(public_key), _iter_payload(payload)
            )
            if written != size:
                raise ValueError(f"Declared size {size} does not match payload length {written}")
        except Exception as e:
            logger.error("Upload failed for %s: %s", public_key, e)
            await self._cleanup_failed_upload(public_key)
            raise StorageUploadError(public_key, str(e)) from e
        return UploadResult(public_key=public_key, private_key=private_key)

    async def _stream_payload(self, payload_path: Path) -> AsyncIterator[bytes]:
        """Stream file content."""
        async with aiofiles.open(payload_path, "rb") as f:
            while True:
                chunk = await f.read(self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    async def download(self, public_key: str) -> DownloadResult:
        """Return payload stream and metadata; touches lastAccessed (failure only logged)."""
        meta_path = self._meta_path(public_key)
        payload_path = self._payload_path(public_key)
        try:
            metadata = await self._read_metadata_file(meta_path)
            if not await aiofiles.os.path.isfile(payload_path):
                raise FileNotFoundError(payload_path)
        except FileNotFoundError as e:
            raise StorageNotFoundError(public_key) from e
        except (OSError, ValueError) as e:
            raise StorageDownloadError(public_key, str(e)) from e

        metadata.touch()
        try:
            await self._write_metadata(public_key, metadata)
        except OSError as e:
            logger.warning("Failed to update lastAccessed for %s: %s", public_key, e)

        return DownloadResult(
            stream=self._stream_payload(payload_path),
            mime_type=metadata.mime_type,
            original_name=metadata.original_name,
            size=metadata.size,
        )

    async def _find_public_key(self, private_key: str) -> str | None:
        """Linear scan of all sidecars for the one holding private_key."""
        try:
            names = await self._list_metadata_files()
        except OSError as e:
            logger.error("Listing metadata failed: %s", e)
            raise StorageDeleteError(None, str(e)) from e
        for name in names:
            try:
                metadata = await self._read_metadata_file(self.storage_root / name)
            except FileNotFoundError:
                continue
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable metadata %s: %s", name, e)
                continue
            if secrets.compare_digest(metadata.private_key.encode(), private_key.encode()):
                return name[: -len(METADATA_SUFFIX)]
        return None

    async def delete(self, private_key: str) -> dict[str, bool]:
        """Delete the object owning private_key.

        Payload removal is authoritative: its failure fails the call. A
        metadata removal failure is logged as a warning only.
        """
        public_key = await self._find_public_key(private_key)
        if public_key is None:
            raise InvalidPrivateKeyError()

        payload_error: OSError | None = None
        try:
            await aiofiles.os.remove(self._payload_path(public_key))
        except FileNotFoundError:
            logger.warning("Payload already absent for %s", public_key)
        except OSError as e:
            payload_error = e
        try:
            await aiofiles.os.remove(self._meta_path(public_key))
        except OSError as e:
            logger.warning("Failed to remove metadata for %s: %s", public_key, e)

        if payload_error is not None:
            logger.error("Delete failed for %s: %s", public_key, payload_error)
            raise StorageDeleteError(public_key, str(payload_error)) from payload_error
        return {"success": True}

    async def _delete_object(self, public_key: str) -> None:
        """Remove payload and metadata; missing files are ignored, other errors raised."""
        for path in (self._payload_path(public_key), self._meta_path(public_key)):
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                pass

    async def cleanup_inactive_files(self, inactivity_period: str) -> CleanupResult:
        """Delete objects not accessed within inactivity_period. Per-object errors are collected."""
        cutoff = utc_now() - parse_inactivity_period(inactivity_period)
        result = CleanupResult()

        for name in await self._list_metadata_files():
            try:
                metadata = await self._read_metadata_file(self.storage_root / name)
                if metadata.is_inactive_since(cutoff):
                    public_key = name[: -len(METADATA_SUFFIX)]
                    await self._delete_object(public_key)
                    result.deleted_count += 1
                    logger.debug("Deleted inactive file: %s", public_key)
            except Exception as e:
                result.errors.append(CleanupError(file=name, error=str(e)))
                logger.error("Error processing %s: %s", name, e)

        if result.errors:
            logger.warning("Cleanup completed with %s errors", result.error_count)
        return result
