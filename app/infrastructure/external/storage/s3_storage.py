"""S3-compatible object storage (AWS S3, MinIO, etc.): <public_key> and <public_key>.meta objects."""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.application.dtos.storage import (
    CleanupError,
    CleanupResult,
    DownloadResult,
    UploadResult,
)
from app.core.constants import METADATA_SUFFIX, STREAM_CHUNK_SIZE
from app.domain.entities.stored_object import ObjectMetadata
from app.infrastructure.exceptions import (
    InvalidPrivateKeyError,
    StorageConfigurationError,
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_keys
from app.shared.utils.parsing import parse_inactivity_period

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3StorageBackend:
    """S3-compatible storage with the same object layout as the local backend.

    Uses boto3 (sync) via asyncio.to_thread for async API. Every request is
    pinned to the configured account through ExpectedBucketOwner. Compatible
    with AWS S3, MinIO, DigitalOcean Spaces.
    """

    CHUNK_SIZE = STREAM_CHUNK_SIZE

    def __init__(
        self,
        bucket: str | None,
        account_id: str | None,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name (required).
            account_id: Owning account identifier (required).
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Pre-built boto3 S3 client (testing/DI).

        Raises:
            StorageConfigurationError: bucket or account_id missing.
        """
        if not account_id or not bucket:
            raise StorageConfigurationError("s3", "missing account_id or bucket_name")
        self.bucket = bucket
        self.account_id = account_id
        self.region = region
        self.endpoint_url = endpoint_url
        if client is not None:
            self._client = client
        else:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            self._client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )

    def _params(self, key: str) -> dict[str, str]:
        return {"Bucket": self.bucket, "Key": key, "ExpectedBucketOwner": self.account_id}

    @staticmethod
    def _meta_key(public_key: str) -> str:
        return f"{public_key}{METADATA_SUFFIX}"

    def _put_metadata_sync(self, public_key: str, metadata: ObjectMetadata) -> None:
        self._client.put_object(
            Body=json.dumps(metadata.to_dict()).encode("utf-8"),
            ContentType="application/json",
            **self._params(self._meta_key(public_key)),
        )

    def _get_metadata_sync(self, meta_key: str) -> ObjectMetadata:
        """Fetch and parse a metadata object. ClientError if missing, ValueError if corrupt."""
        resp = self._client.get_object(**self._params(meta_key))
        body = resp["Body"]
        try:
            content = body.read()
        finally:
            body.close()
        return ObjectMetadata.from_dict(json.loads(content))

    def _list_metadata_keys_sync(self) -> list[str]:
        """All metadata object keys in the bucket (linear scan)."""
        paginator = self._client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(
            Bucket=self.bucket, ExpectedBucketOwner=self.account_id
        ):
            for item in page.get("Contents", []):
                if item["Key"].endswith(METADATA_SUFFIX):
                    keys.append(item["Key"])
        return keys

    def _delete_key_sync(self, key: str) -> None:
        self._client.delete_object(**self._params(key))

    async def _cleanup_failed_upload(self, public_key: str) -> None:
        """Best-effort removal of both objects of a half-written upload."""
        for key in (public_key, self._meta_key(public_key)):
            try:
                await asyncio.to_thread(self._delete_key_sync, key)
            except (ClientError, BotoCoreError) as e:
                logger.error("Cleanup failed for %s: %s", key, e)

    async def upload(
        self,
        payload: AsyncIterable[bytes] | bytes,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> UploadResult:
        """Put metadata object then payload object; delete both if either put fails."""
        public_key, private_key = generate_keys()
        metadata = ObjectMetadata.new(private_key, original_name, mime_type, size)
        try:
            await asyncio.to_thread(self._put_metadata_sync, public_key, metadata)
            if isinstance(payload, (bytes, bytearray, memoryview)):
                body = bytes(payload)
            else:
                body = b"".join([chunk async for chunk in payload])
            if len(body) != size:
                raise ValueError(
                    f"Declared size {size} does not match payload length {len(body)}"
                )
            await asyncio.to_thread(
                self._client.put_object,
                Body=body,
                ContentType=mime_type,
                **self._params(public_key),
            )
        except Exception as e:
            logger.error("Upload failed for %s: %s", public_key, e)
            await self._cleanup_failed_upload(public_key)
            raise StorageUploadError(public_key, str(e)) from e
        return UploadResult(public_key=public_key, private_key=private_key)

    async def _stream_body(self, body: Any) -> AsyncIterator[bytes]:
        """Stream object body in chunks, reading off the event loop."""
        try:
            while True:
                chunk = await asyncio.to_thread(body.read, self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    async def download(self, public_key: str) -> DownloadResult:
        """Return object stream and metadata; touches lastAccessed (failure only logged)."""
        try:
            metadata = await asyncio.to_thread(
                self._get_metadata_sync, self._meta_key(public_key)
            )
            resp = await asyncio.to_thread(
                self._client.get_object, **self._params(public_key)
            )
        except ClientError as e:
            if _is_not_found(e):
                raise StorageNotFoundError(public_key) from e
            raise StorageDownloadError(public_key, str(e)) from e
        except (BotoCoreError, ValueError) as e:
            raise StorageDownloadError(public_key, str(e)) from e

        metadata.touch()
        try:
            await asyncio.to_thread(self._put_metadata_sync, public_key, metadata)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to update lastAccessed for %s: %s", public_key, e)

        return DownloadResult(
            stream=self._stream_body(resp["Body"]),
            mime_type=metadata.mime_type,
            original_name=metadata.original_name,
            size=metadata.size,
        )

    async def _find_public_key(self, private_key: str) -> str | None:
        """Linear scan of all metadata objects for the one holding private_key.

        A record that cannot be fetched or parsed is skipped. A listing
        failure raises StorageDeleteError.
        """
        try:
            meta_keys = await asyncio.to_thread(self._list_metadata_keys_sync)
        except (ClientError, BotoCoreError) as e:
            logger.error("Listing metadata failed: %s", e)
            raise StorageDeleteError(None, str(e)) from e
        for meta_key in meta_keys:
            try:
                metadata = await asyncio.to_thread(self._get_metadata_sync, meta_key)
            except ClientError as e:
                if not _is_not_found(e):
                    logger.warning("Skipping unreadable metadata %s: %s", meta_key, e)
                continue
            except (BotoCoreError, ValueError) as e:
                logger.warning("Skipping unreadable metadata %s: %s", meta_key, e)
                continue
            if secrets.compare_digest(metadata.private_key.encode(), private_key.encode()):
                return meta_key[: -len(METADATA_SUFFIX)]
        return None

    async def delete(self, private_key: str) -> dict[str, bool]:
        """Delete the object owning private_key.

        Payload removal is authoritative: its failure fails the call. A
        metadata removal failure is logged as a warning only.
        """
        public_key = await self._find_public_key(private_key)
        if public_key is None:
            raise InvalidPrivateKeyError()

        payload_error: Exception | None = None
        try:
            await asyncio.to_thread(self._delete_key_sync, public_key)
        except (ClientError, BotoCoreError) as e:
            payload_error = e
        try:
            await asyncio.to_thread(self._delete_key_sync, self._meta_key(public_key))
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to remove metadata for %s: %s", public_key, e)

        if payload_error is not None:
            logger.error("Delete failed for %s: %s", public_key, payload_error)
            raise StorageDeleteError(public_key, str(payload_error)) from payload_error
        return {"success": True}

    async def cleanup_inactive_files(self, inactivity_period: str) -> CleanupResult:
        """Delete objects not accessed within inactivity_period. Per-object errors are collected."""
        cutoff = utc_now() - parse_inactivity_period(inactivity_period)
        result = CleanupResult()

        for meta_key in await asyncio.to_thread(self._list_metadata_keys_sync):
            try:
                metadata = await asyncio.to_thread(self._get_metadata_sync, meta_key)
                if metadata.is_inactive_since(cutoff):
                    public_key = meta_key[: -len(METADATA_SUFFIX)]
                    await asyncio.to_thread(self._delete_key_sync, public_key)
                    await asyncio.to_thread(self._delete_key_sync, meta_key)
                    result.deleted_count += 1
                    logger.debug("Deleted inactive S3 object: %s", public_key)
            except Exception as e:
                result.errors.append(CleanupError(file=meta_key, error=str(e)))
                logger.error("Error processing S3 object %s: %s", meta_key, e)

        if result.errors:
            logger.warning("S3 cleanup completed with %s errors", result.error_count)
        return result
