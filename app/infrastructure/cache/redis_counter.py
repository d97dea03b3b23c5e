"""Redis-backed counter store for daily quota buckets.

Thin async wrapper over GET / INCRBY / EXPIRE / TTL. Unlike a read-through cache,
errors are raised to the caller: the quota service decides to fail closed.
"""

from __future__ import annotations

import logging

import redis.asyncio as redis

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class CounterStoreUnavailableError(Exception):
    """Counter store is not connected or a command failed."""


class RedisCounterStore:
    """Async Redis counter store.

    Uses app.core.config for connection settings. Call connect() at startup
    and disconnect() at shutdown. A client can be injected for tests.
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize counter store.

        Args:
            redis_client: Optional Redis client for testing or DI.
        """
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    def _build_client(self) -> redis.Redis:
        s = self.settings
        return redis.Redis(
            host=s.redis_host,
            port=s.redis_port,
            db=s.redis_db,
            password=s.redis_password.get_secret_value() if s.redis_password else None,
            decode_responses=True,
            socket_connect_timeout=s.redis_socket_timeout,
            socket_timeout=s.redis_socket_timeout,
            socket_keepalive=True,
        )

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup.

        A failed connection is logged, not raised: quota checks then fail
        closed until a later command reconnects.
        """
        if self._connected:
            return
        if self.redis is None:
            self.redis = self._build_client()
        try:
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis connected: %s:%s/%s",
                self.settings.redis_host,
                self.settings.redis_port,
                self.settings.redis_db,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error("Redis connection error: %s", e)
            self._connected = False

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise CounterStoreUnavailableError("Redis client not initialized")
        return self.redis

    async def ping(self) -> bool:
        """Return True if Redis answers PING."""
        try:
            return bool(await self._client().ping())
        except (redis.RedisError, CounterStoreUnavailableError):
            return False

    async def get(self, key: str) -> str | None:
        """Return raw counter value or None when absent/expired."""
        try:
            value = await self._client().get(key)
        except redis.RedisError as e:
            logger.error("Redis error on GET %s: %s", key, e)
            raise CounterStoreUnavailableError(str(e)) from e
        return value

    async def incrby(self, key: str, amount: int) -> int:
        """Atomically add amount to key; returns the new value."""
        try:
            value = await self._client().incrby(key, amount)
        except redis.RedisError as e:
            logger.error("Redis error on INCRBY %s: %s", key, e)
            raise CounterStoreUnavailableError(str(e)) from e
        return int(value)

    async def expire(self, key: str, seconds: int) -> bool:
        """Set key TTL; returns True if the key exists."""
        try:
            return bool(await self._client().expire(key, seconds))
        except redis.RedisError as e:
            logger.error("Redis error on EXPIRE %s: %s", key, e)
            raise CounterStoreUnavailableError(str(e)) from e

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -1 without expiry, -2 when absent."""
        try:
            return int(await self._client().ttl(key))
        except redis.RedisError as e:
            logger.error("Redis error on TTL %s: %s", key, e)
            raise CounterStoreUnavailableError(str(e)) from e
