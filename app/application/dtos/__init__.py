"""Application DTOs: plain data passed between services and the API layer."""

from app.application.dtos.quota import (
    REASON_LIMIT_EXCEEDED,
    REASON_SERVICE_UNAVAILABLE,
    QuotaDecision,
)
from app.application.dtos.storage import (
    CleanupError,
    CleanupResult,
    DownloadResult,
    UploadResult,
)

__all__ = [
    "REASON_LIMIT_EXCEEDED",
    "REASON_SERVICE_UNAVAILABLE",
    "CleanupError",
    "CleanupResult",
    "DownloadResult",
    "QuotaDecision",
    "UploadResult",
]
