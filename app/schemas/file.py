"""File API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FileUploadResponse(BaseModel):
    """Response for POST /files (object stored)."""

    model_config = ConfigDict(populate_by_name=True)

    public_key: str = Field(..., alias="publicKey", description="Key for downloads")
    private_key: str = Field(..., alias="privateKey", description="Key for deletion")


class FileDeleteResponse(BaseModel):
    """Response for DELETE /files/{private_key}."""

    success: bool = True


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    error: str
    message: str
    details: dict[str, Any] | list[Any] | None = None
