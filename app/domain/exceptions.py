"""Domain exceptions for the filestash service.

Defines domain-level exceptions that represent business rule violations
(validation, quota). These exceptions are independent of infrastructure
concerns. Presentation layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class FileStashException(Exception):
    """Base exception for all filestash errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, usage figures).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(FileStashException):
    """Raised when input validation fails (e.g. missing filename, bad key format)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class QuotaExceededError(FileStashException):
    """Raised when a client's daily upload or download budget is exhausted."""

    def __init__(
        self,
        direction: str,
        current_usage: int,
        limit: int,
    ) -> None:
        """Initialize with the usage figures the caller needs to decide when to retry.

        Args:
            direction: 'upload' or 'download'.
            current_usage: Bytes already counted today.
            limit: Daily limit in bytes.
        """
        super().__init__(
            f"Daily {direction} limit exceeded",
            "QUOTA_EXCEEDED",
            {
                "direction": direction,
                "currentUsage": current_usage,
                "limit": limit,
                "remaining": max(0, limit - current_usage),
            },
        )


class QuotaServiceUnavailableError(FileStashException):
    """Raised when the quota counter store cannot be reached (fail closed)."""

    def __init__(self, reason: str | None = None) -> None:
        """Initialize with optional low-level reason (logged, not sent to clients)."""
        self.reason = reason
        super().__init__("Rate limit service unavailable", "SERVICE_UNAVAILABLE")
