"""Cache: Redis counter store and quota key utilities.

Used by the quota service for per-client daily byte counters.
RedisCounterStore uses app.core.config; key format is in keys.py (DRY).
"""

from app.infrastructure.cache.keys import (
    download_quota_key,
    quota_key,
    upload_quota_key,
)
from app.infrastructure.cache.redis_counter import (
    CounterStoreUnavailableError,
    RedisCounterStore,
)

__all__ = [
    "CounterStoreUnavailableError",
    "RedisCounterStore",
    "download_quota_key",
    "quota_key",
    "upload_quota_key",
]
