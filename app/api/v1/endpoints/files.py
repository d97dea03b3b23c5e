"""File API: thin routes delegating to FileService and QuotaService."""

import logging
import re
from collections.abc import AsyncIterator
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from app.api.v1.dependencies import get_client_id, get_file_service, get_quota_service
from app.application.services.file_service import FileService
from app.application.services.quota_service import QuotaService
from app.core.constants import PRIVATE_KEY_PATTERN, PUBLIC_KEY_PATTERN, STREAM_CHUNK_SIZE
from app.domain.exceptions import QuotaServiceUnavailableError, ValidationException
from app.schemas.file import ErrorResponse, FileDeleteResponse, FileUploadResponse

logger = logging.getLogger(__name__)

router = APIRouter()

_PUBLIC_KEY_RE = re.compile(PUBLIC_KEY_PATTERN)
_PRIVATE_KEY_RE = re.compile(PRIVATE_KEY_PATTERN)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


async def _read_upload(file: UploadFile) -> AsyncIterator[bytes]:
    while True:
        chunk = await file.read(STREAM_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


async def _upload_size(file: UploadFile) -> int:
    """Byte length of the spooled upload (seeks to the end and back)."""
    if file.size is not None:
        return file.size
    size = file.file.seek(0, 2)
    await file.seek(0)
    return size


def content_disposition(filename: str) -> str:
    """RFC 6266 attachment header carrying the UTF-8 original name."""
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"


async def _track_download(quota: QuotaService, client_id: str, size: int) -> None:
    """Count a served download; failures are logged, the response is already sent."""
    try:
        await quota.track_download(client_id, size)
    except QuotaServiceUnavailableError as e:
        logger.error("Failed to track download for %s: %s", client_id, e.reason)


@router.post(
    "",
    response_model=FileUploadResponse,
    status_code=201,
    responses=_ERROR_RESPONSES,
)
async def upload_file(
    client_id: Annotated[str, Depends(get_client_id)],
    file: UploadFile | None = File(None),
    file_service: FileService = Depends(get_file_service),
    quota: QuotaService = Depends(get_quota_service),
):
    """Store one file; returns its public (download) and private (delete) keys."""
    if file is None:
        raise ValidationException("No file uploaded", field="file")
    if not file.filename:
        raise ValidationException("Filename required", field="file")
    size = await _upload_size(file)
    await quota.check_upload_or_raise(client_id, size)
    result = await file_service.upload_file(
        _read_upload(file),
        original_name=file.filename,
        mime_type=file.content_type or "application/octet-stream",
        size=size,
    )
    return FileUploadResponse(public_key=result.public_key, private_key=result.private_key)


@router.get(
    "/{public_key}",
    response_class=StreamingResponse,
    responses=_ERROR_RESPONSES,
)
async def download_file(
    public_key: str,
    client_id: Annotated[str, Depends(get_client_id)],
    file_service: FileService = Depends(get_file_service),
    quota: QuotaService = Depends(get_quota_service),
):
    """Stream the stored payload as an attachment under its original name."""
    if not _PUBLIC_KEY_RE.match(public_key):
        raise ValidationException("Invalid public key format", field="publicKey")
    await quota.check_download_admission(client_id)
    result = await file_service.download_file(public_key)
    return StreamingResponse(
        result.stream,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": content_disposition(result.original_name),
            "Content-Length": str(result.size),
        },
        background=BackgroundTask(_track_download, quota, client_id, result.size),
    )


@router.delete(
    "/{private_key}",
    response_model=FileDeleteResponse,
    responses=_ERROR_RESPONSES,
)
async def delete_file(
    private_key: str,
    file_service: FileService = Depends(get_file_service),
):
    """Delete the object owned by private_key (payload and metadata)."""
    if not _PRIVATE_KEY_RE.match(private_key):
        raise ValidationException("Invalid private key format", field="privateKey")
    result = await file_service.delete_file(private_key)
    return FileDeleteResponse(success=result.get("success", False))
