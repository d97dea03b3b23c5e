"""Application services: storage facade and daily quotas."""

from app.application.services.file_service import FileService
from app.application.services.quota_service import QuotaService

__all__ = [
    "FileService",
    "QuotaService",
]
