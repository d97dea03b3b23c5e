"""Tests for domain and storage exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    FileStashException,
    QuotaExceededError,
    QuotaServiceUnavailableError,
    ValidationException,
)
from app.infrastructure.exceptions import (
    InvalidPrivateKeyError,
    StorageConfigurationError,
    StorageNotFoundError,
    StorageUploadError,
)


def test_filestash_exception_default_error_code() -> None:
    """Base FileStashException uses class name as error_code when not provided."""
    exc = FileStashException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "FileStashException"
    assert exc.details == {}


def test_to_dict_shape() -> None:
    exc = FileStashException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid format", field="publicKey")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "publicKey"}
    assert ValidationException("Bad").details == {}


def test_quota_exceeded_details() -> None:
    exc = QuotaExceededError("upload", current_usage=900, limit=1000)
    assert exc.error_code == "QUOTA_EXCEEDED"
    assert exc.message == "Daily upload limit exceeded"
    assert exc.details == {
        "direction": "upload",
        "currentUsage": 900,
        "limit": 1000,
        "remaining": 100,
    }


def test_quota_exceeded_remaining_never_negative() -> None:
    exc = QuotaExceededError("download", current_usage=1500, limit=1000)
    assert exc.details["remaining"] == 0


def test_quota_unavailable_keeps_reason_out_of_response() -> None:
    """The low-level reason is kept for logs only."""
    exc = QuotaServiceUnavailableError("Connection refused by 10.0.0.5:6379")
    assert exc.error_code == "SERVICE_UNAVAILABLE"
    assert exc.reason == "Connection refused by 10.0.0.5:6379"
    assert "10.0.0.5" not in str(exc.to_dict())


def test_storage_errors_are_filestash_exceptions() -> None:
    assert isinstance(StorageNotFoundError("abc"), FileStashException)
    assert StorageNotFoundError("abc").error_code == "STORAGE_NOT_FOUND"
    assert InvalidPrivateKeyError().error_code == "INVALID_PRIVATE_KEY"
    assert StorageUploadError("abc", "disk full").details["reason"] == "disk full"
    assert StorageConfigurationError("s3", "missing").error_code == "STORAGE_CONFIGURATION_ERROR"
