"""Unit tests for FileService (forwarding to the backend, error propagation)."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.storage import CleanupResult, UploadResult
from app.application.services.file_service import FileService
from app.core.config import Settings
from app.infrastructure.exceptions import StorageConfigurationError, StorageNotFoundError
from app.infrastructure.external.storage.local_storage import LocalStorageBackend


@pytest.fixture
def storage() -> MagicMock:
    backend = MagicMock()
    backend.upload = AsyncMock(return_value=UploadResult(public_key="a" * 32, private_key="b" * 64))
    backend.download = AsyncMock()
    backend.delete = AsyncMock(return_value={"success": True})
    backend.cleanup_inactive_files = AsyncMock(return_value=CleanupResult(deleted_count=2))
    return backend


async def test_upload_forwards_arguments(storage) -> None:
    service = FileService(storage)
    result = await service.upload_file(b"hello", "a.txt", "text/plain", 5)
    assert result.public_key == "a" * 32
    storage.upload.assert_awaited_once_with(b"hello", "a.txt", "text/plain", 5)


async def test_backend_errors_propagate_unchanged(storage) -> None:
    storage.download.side_effect = StorageNotFoundError("c" * 32)
    service = FileService(storage)
    with pytest.raises(StorageNotFoundError):
        await service.download_file("c" * 32)


async def test_delete_forwards(storage) -> None:
    service = FileService(storage)
    assert await service.delete_file("b" * 64) == {"success": True}
    storage.delete.assert_awaited_once_with("b" * 64)


async def test_cleanup_uses_configured_period_by_default(storage) -> None:
    service = FileService(storage, inactivity_period="7d")
    result = await service.cleanup_inactive_files()
    assert result.deleted_count == 2
    storage.cleanup_inactive_files.assert_awaited_once_with("7d")


async def test_cleanup_explicit_period(storage) -> None:
    service = FileService(storage, inactivity_period="7d")
    await service.cleanup_inactive_files("1h")
    storage.cleanup_inactive_files.assert_awaited_once_with("1h")


def test_from_settings_builds_local_backend(tmp_path) -> None:
    settings = Settings(_env_file=None, storage_provider="local", storage_root=str(tmp_path), inactivity_period="2d")
    service = FileService.from_settings(settings)
    assert isinstance(service.storage, LocalStorageBackend)
    assert service.inactivity_period == "2d"


def test_from_settings_propagates_backend_errors() -> None:
    settings = Settings(_env_file=None, storage_provider="s3")
    with pytest.raises(StorageConfigurationError):
        FileService.from_settings(settings)
