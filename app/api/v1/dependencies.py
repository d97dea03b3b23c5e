"""Presentation-layer dependency injection.

Services are built once in app.core.lifespan and stored on app.state;
routes depend only on these accessors, never on infrastructure directly.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from app.application.services.file_service import FileService
from app.application.services.quota_service import QuotaService

UNKNOWN_CLIENT = "unknown"


def get_file_service(request: Request) -> FileService:
    """File facade from app state; 503 if startup did not complete."""
    service = getattr(request.app.state, "file_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="File service not initialized")
    return service


def get_quota_service(request: Request) -> QuotaService:
    """Quota service from app state; 503 if startup did not complete."""
    service = getattr(request.app.state, "quota_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Quota service not initialized")
    return service


def get_client_id(request: Request) -> str:
    """Quota identity of the caller: the connecting client's host address."""
    if request.client is None or not request.client.host:
        return UNKNOWN_CLIENT
    return request.client.host
