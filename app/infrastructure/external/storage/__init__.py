"""Storage: local filesystem and S3-compatible backends.

Factory creates backend from app.core.config. Implementations are loaded
lazily inside StorageFactory.create_storage_backend() so that boto3 is only
imported when the S3 backend is selected.

Implementations implement StorageProtocol (upload, download, delete,
cleanup_inactive_files).
"""

from app.infrastructure.external.storage.factory import StorageFactory
from app.infrastructure.external.storage.protocol import StorageProtocol

__all__ = [
    "StorageFactory",
    "StorageProtocol",
]
