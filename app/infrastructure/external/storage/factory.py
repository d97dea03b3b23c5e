"""Storage backend factory: creates local or S3 backend from settings."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from app.infrastructure.exceptions import StorageConfigurationError
from app.infrastructure.external.storage.protocol import StorageProtocol

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def _load_s3_config_file(config_path: str) -> dict[str, Any]:
    """Load the JSON credentials/bucket document referenced by CONFIG."""
    resolved = Path(config_path).expanduser().resolve()
    logger.info("Loading S3 config from: %s", resolved)
    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise StorageConfigurationError("s3", f"failed to load config file: {e}") from e
    if not isinstance(data, dict):
        raise StorageConfigurationError("s3", "config file must contain a JSON object")
    return data


class StorageFactory:
    """Factory for storage backend instances based on configuration."""

    @staticmethod
    def create_storage_backend(settings: "Settings | None" = None) -> StorageProtocol:
        """Create storage backend from settings.

        Provider 's3' builds S3StorageBackend (from CONFIG file when set,
        otherwise from S3_* settings). Any other provider, including
        unknown names, falls back to LocalStorageBackend.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            LocalStorageBackend or S3StorageBackend.

        Raises:
            StorageConfigurationError: S3 selected with missing account/bucket or unreadable config file.
        """
        from app.core.config import get_settings

        s = settings or get_settings()
        provider = (s.storage_provider or "local").strip().lower()

        if provider == "s3":
            from app.infrastructure.external.storage.s3_storage import S3StorageBackend

            logger.info("Initializing S3 storage")
            secret = s.s3_secret_key.get_secret_value() if s.s3_secret_key else None
            options: dict[str, Any] = {
                "bucket": s.s3_bucket,
                "account_id": s.s3_account_id,
                "region": s.s3_region,
                "endpoint_url": s.s3_endpoint_url,
                "access_key": s.s3_access_key,
                "secret_key": secret,
            }
            if s.s3_config_path:
                file_config = _load_s3_config_file(s.s3_config_path)
                options.update(
                    {
                        "bucket": file_config.get("bucket_name"),
                        "account_id": file_config.get("account_id")
                        or file_config.get("project_id"),
                        "region": file_config.get("region", s.s3_region),
                        "endpoint_url": file_config.get("endpoint_url", s.s3_endpoint_url),
                        "access_key": file_config.get("access_key", s.s3_access_key),
                        "secret_key": file_config.get("secret_key", secret),
                    }
                )
            return S3StorageBackend(**options)

        from app.infrastructure.external.storage.local_storage import LocalStorageBackend

        if provider != "local":
            logger.warning("Unknown storage provider %r; using local storage", provider)
        logger.info("Initializing Local Storage")
        return LocalStorageBackend(storage_root=s.storage_root)
