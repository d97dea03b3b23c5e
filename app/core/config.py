"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Environment variable names follow the deployment
conventions of the service (PROVIDER, FOLDER, CONFIG, DAILY_UPLOAD_LIMIT...).
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; validate_intervals rejects non-positive
    scheduling values. Provider-specific requirements (S3 account and
    bucket) are checked by the storage factory at startup so that an
    unknown provider can still fall back to local storage.
    """

    # App
    app_name: str = "filestash"
    app_version: str = "1.0.0"
    # Non-production mode: error responses include stack and exception type.
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # Storage
    storage_provider: str = Field(
        default="local",
        validation_alias=AliasChoices("storage_provider", "provider"),
    )
    storage_root: str = Field(
        default="./uploads",
        validation_alias=AliasChoices("storage_root", "folder"),
    )
    # JSON file with account_id, bucket_name and optional region/endpoint_url/access_key/secret_key.
    s3_config_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("s3_config_path", "config"),
    )
    s3_account_id: str | None = None
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    max_upload_size: int = 100 * 1024 * 1024  # 100MB

    # Eviction
    cleanup_enabled: bool = True
    cleanup_interval_ms: int = Field(
        default=60_000,
        validation_alias=AliasChoices(
            "cleanup_interval_ms", "time_to_clean_up_process_in_ms"
        ),
    )
    # Overrides cleanup_interval_ms when set; otherwise derived from it.
    cleanup_interval_seconds: float | None = None
    inactivity_period: str = "30d"

    # Quotas (human-readable: "100MB", "1GB", or bytes)
    daily_upload_limit: str = "100MB"
    daily_download_limit: str = "1GB"

    # Redis counter store
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_socket_timeout: float = 5.0

    # Request / middleware
    request_id_header: str = "X-Request-ID"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def validate_intervals(self) -> "Settings":
        """Reject scheduling values the eviction timer cannot use."""
        if self.cleanup_interval_ms <= 0:
            raise ValueError(
                "TIME_TO_CLEAN_UP_PROCESS_IN_MS must be a positive number of milliseconds"
            )
        if self.cleanup_interval_seconds is None:
            self.cleanup_interval_seconds = self.cleanup_interval_ms / 1000
        elif self.cleanup_interval_seconds <= 0:
            raise ValueError("CLEANUP_INTERVAL_SECONDS must be positive")
        if self.max_upload_size <= 0:
            raise ValueError("MAX_UPLOAD_SIZE must be positive")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
