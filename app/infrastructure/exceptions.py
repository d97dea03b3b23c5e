"""Infrastructure exceptions for storage and external operations.

Storage errors extend FileStashException so presentation can map them
to HTTP responses consistently.
"""

from app.domain.exceptions import FileStashException


class StorageException(FileStashException):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageException):
    """No stored object (payload or metadata) for the given public key."""

    def __init__(self, public_key: str) -> None:
        super().__init__(
            f"File not found: {public_key}",
            "STORAGE_NOT_FOUND",
            {"public_key": public_key},
        )


class InvalidPrivateKeyError(StorageException):
    """No metadata record carries the given private key."""

    def __init__(self) -> None:
        super().__init__(
            "Invalid private key",
            "INVALID_PRIVATE_KEY",
            {"reason": "No file matches the provided key"},
        )


class StorageUploadError(StorageException):
    """Payload or metadata could not be persisted."""

    def __init__(self, public_key: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload file: {public_key}",
            "STORAGE_UPLOAD_ERROR",
            {"public_key": public_key, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """Payload or metadata could not be read."""

    def __init__(self, public_key: str, reason: str) -> None:
        super().__init__(
            f"Failed to download file: {public_key}",
            "STORAGE_DOWNLOAD_ERROR",
            {"public_key": public_key, "reason": reason},
        )


class StorageDeleteError(StorageException):
    """Payload removal or the owner lookup failed."""

    def __init__(self, public_key: str | None, reason: str) -> None:
        super().__init__(
            f"Failed to delete file: {public_key}" if public_key else "Failed to delete file",
            "STORAGE_DELETE_ERROR",
            {"public_key": public_key, "reason": reason},
        )


class StorageConfigurationError(StorageException):
    """Backend cannot be initialized from the given configuration."""

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(
            f"Invalid {backend} storage configuration - {reason}",
            "STORAGE_CONFIGURATION_ERROR",
            {"backend": backend, "reason": reason},
        )
