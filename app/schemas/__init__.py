"""Pydantic request/response schemas for the API."""

from app.schemas.file import ErrorResponse, FileDeleteResponse, FileUploadResponse
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

__all__ = [
    "ErrorResponse",
    "FileDeleteResponse",
    "FileUploadResponse",
    "HealthResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
]
