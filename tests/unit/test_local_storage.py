"""Tests for LocalStorageBackend (layout, streaming, delete, eviction sweep)."""

import json
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import aiofiles.os
import pytest

from app.infrastructure.exceptions import (
    InvalidPrivateKeyError,
    StorageDeleteError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.infrastructure.external.storage.local_storage import LocalStorageBackend
from app.shared.utils.datetime import utc_now


async def _read_all(stream) -> bytes:
    return b"".join([chunk async for chunk in stream])


async def _chunks(*parts: bytes):
    for part in parts:
        yield part


def _age(backend: LocalStorageBackend, public_key: str, delta: timedelta) -> None:
    """Rewrite a sidecar so the object was last accessed delta ago."""
    meta_path = backend.storage_root / f"{public_key}.meta"
    data = json.loads(meta_path.read_text())
    data["lastAccessed"] = (utc_now() - delta).isoformat()
    meta_path.write_text(json.dumps(data))


def test_creates_storage_root(tmp_path) -> None:
    root = tmp_path / "a" / "b"
    LocalStorageBackend(str(root))
    assert root.is_dir()


async def test_upload_writes_payload_and_sidecar(local_backend) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    root = local_backend.storage_root
    assert (root / result.public_key).read_bytes() == b"hello"
    meta = json.loads((root / f"{result.public_key}.meta").read_text())
    assert meta["privateKey"] == result.private_key
    assert meta["originalName"] == "a.txt"
    assert meta["mimeType"] == "text/plain"
    assert meta["size"] == 5
    assert meta["uploadedAt"] == meta["lastAccessed"]
    assert not [p for p in root.iterdir() if p.name.startswith(".tmp_")]


async def test_upload_accepts_async_stream(local_backend) -> None:
    result = await local_backend.upload(_chunks(b"he", b"llo"), "a.txt", "text/plain", 5)
    download = await local_backend.download(result.public_key)
    assert await _read_all(download.stream) == b"hello"


async def test_upload_size_mismatch_rolls_back(local_backend) -> None:
    with pytest.raises(StorageUploadError):
        await local_backend.upload(b"hello", "a.txt", "text/plain", 99)
    assert list(local_backend.storage_root.iterdir()) == []


async def test_upload_payload_write_failure_rolls_back(local_backend, monkeypatch) -> None:
    original = local_backend._atomic_write

    async def atomic_write(target, chunks):
        if not target.name.endswith(".meta"):
            raise OSError(28, "No space left on device")
        return await original(target, chunks)

    monkeypatch.setattr(local_backend, "_atomic_write", atomic_write)
    with pytest.raises(StorageUploadError):
        await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    assert list(local_backend.storage_root.iterdir()) == []


async def test_download_returns_metadata_and_touches(local_backend) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    _age(local_backend, result.public_key, timedelta(days=3))

    download = await local_backend.download(result.public_key)
    assert download.mime_type == "text/plain"
    assert download.original_name == "a.txt"
    assert download.size == 5
    assert await _read_all(download.stream) == b"hello"

    meta_path = local_backend.storage_root / f"{result.public_key}.meta"
    meta = json.loads(meta_path.read_text())
    last_accessed = datetime.fromisoformat(meta["lastAccessed"])
    assert last_accessed >= datetime.fromisoformat(meta["uploadedAt"])


async def test_download_touch_failure_is_not_fatal(local_backend, monkeypatch) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    meta_path = local_backend.storage_root / f"{result.public_key}.meta"
    before = meta_path.read_text()
    monkeypatch.setattr(
        local_backend, "_write_metadata", AsyncMock(side_effect=OSError("read-only filesystem"))
    )

    download = await local_backend.download(result.public_key)
    assert await _read_all(download.stream) == b"hello"
    assert meta_path.read_text() == before


async def test_download_streams_in_chunks(local_backend) -> None:
    payload = b"x" * (LocalStorageBackend.CHUNK_SIZE * 2 + 10)
    result = await local_backend.upload(payload, "big.bin", "application/octet-stream", len(payload))
    download = await local_backend.download(result.public_key)
    chunks = [chunk async for chunk in download.stream]
    assert [len(c) for c in chunks] == [LocalStorageBackend.CHUNK_SIZE] * 2 + [10]


async def test_download_unknown_key(local_backend) -> None:
    with pytest.raises(StorageNotFoundError):
        await local_backend.download("0" * 32)


async def test_download_missing_payload_is_not_found(local_backend) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    (local_backend.storage_root / result.public_key).unlink()
    with pytest.raises(StorageNotFoundError):
        await local_backend.download(result.public_key)


async def test_delete_removes_both_files(local_backend) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    assert await local_backend.delete(result.private_key) == {"success": True}
    assert list(local_backend.storage_root.iterdir()) == []
    with pytest.raises(StorageNotFoundError):
        await local_backend.download(result.public_key)


async def test_delete_unknown_private_key(local_backend) -> None:
    await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    with pytest.raises(InvalidPrivateKeyError):
        await local_backend.delete("f" * 64)


async def test_delete_with_payload_already_gone(local_backend) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    (local_backend.storage_root / result.public_key).unlink()
    assert await local_backend.delete(result.private_key) == {"success": True}
    assert list(local_backend.storage_root.iterdir()) == []


async def test_delete_skips_unreadable_sidecars(local_backend) -> None:
    (local_backend.storage_root / "broken.meta").write_text("{not json")
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    assert await local_backend.delete(result.private_key) == {"success": True}


async def test_delete_skips_metadata_with_non_ascii_private_key(local_backend) -> None:
    doc = {
        "privateKey": "é",
        "originalName": "x.txt",
        "size": 1,
        "uploadedAt": "2024-01-01T00:00:00+00:00",
        "lastAccessed": "2024-01-01T00:00:00+00:00",
    }
    (local_backend.storage_root / "0000.meta").write_text(json.dumps(doc), encoding="utf-8")
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    with pytest.raises(InvalidPrivateKeyError):
        await local_backend.delete("f" * 64)
    assert await local_backend.delete(result.private_key) == {"success": True}


async def test_delete_listing_failure_raises_delete_error(local_backend, monkeypatch) -> None:
    monkeypatch.setattr(
        local_backend, "_list_metadata_files", AsyncMock(side_effect=PermissionError("denied"))
    )
    with pytest.raises(StorageDeleteError):
        await local_backend.delete("f" * 64)


def _fail_remove_for(monkeypatch, predicate) -> None:
    """Make aiofiles.os.remove raise PermissionError for paths matching predicate."""
    original = aiofiles.os.remove

    async def remove(path, *args, **kwargs):
        if predicate(Path(path)):
            raise PermissionError(13, "Permission denied", str(path))
        return await original(path, *args, **kwargs)

    monkeypatch.setattr(aiofiles.os, "remove", remove)


async def test_delete_metadata_removal_failure_is_warning_only(local_backend, monkeypatch) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    _fail_remove_for(monkeypatch, lambda p: p.name.endswith(".meta"))

    assert await local_backend.delete(result.private_key) == {"success": True}
    root = local_backend.storage_root
    assert not (root / result.public_key).exists()
    assert (root / f"{result.public_key}.meta").exists()


async def test_delete_payload_removal_failure_fails_call(local_backend, monkeypatch) -> None:
    result = await local_backend.upload(b"hello", "a.txt", "text/plain", 5)
    _fail_remove_for(monkeypatch, lambda p: p.name == result.public_key)

    with pytest.raises(StorageDeleteError) as exc_info:
        await local_backend.delete(result.private_key)
    assert exc_info.value.details["public_key"] == result.public_key
    root = local_backend.storage_root
    assert (root / result.public_key).exists()
    assert not (root / f"{result.public_key}.meta").exists()


async def test_cleanup_deletes_only_inactive(local_backend) -> None:
    stale = await local_backend.upload(b"old", "old.txt", "text/plain", 3)
    fresh = await local_backend.upload(b"new", "new.txt", "text/plain", 3)
    _age(local_backend, stale.public_key, timedelta(minutes=11))
    _age(local_backend, fresh.public_key, timedelta(minutes=9))

    result = await local_backend.cleanup_inactive_files("10m")

    assert result.deleted_count == 1
    assert result.error_count == 0
    names = {p.name for p in local_backend.storage_root.iterdir()}
    assert names == {fresh.public_key, f"{fresh.public_key}.meta"}


async def test_cleanup_isolates_per_object_errors(local_backend) -> None:
    (local_backend.storage_root / "broken.meta").write_text("{not json")
    stale = await local_backend.upload(b"old", "old.txt", "text/plain", 3)
    _age(local_backend, stale.public_key, timedelta(days=2))

    result = await local_backend.cleanup_inactive_files("1d")

    assert result.deleted_count == 1
    assert result.error_count == 1
    assert result.errors[0].file == "broken.meta"
    assert result.to_dict()["errorCount"] == 1


async def test_cleanup_on_empty_root(local_backend) -> None:
    result = await local_backend.cleanup_inactive_files("30d")
    assert result.deleted_count == 0
    assert result.errors == []
