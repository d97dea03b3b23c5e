"""Daily byte quotas per client for uploads and downloads.

Counters live in a shared counter store (Redis) under
<direction>:<client_id>:<YYYY-MM-DD>, with a 24h TTL set on the first
increment and restored by a later one if that EXPIRE failed. Every
counter store failure denies the operation (fail closed).

Upload admission reads then increments in two calls, so concurrent
uploads from one client can jointly overshoot the limit (soft limit).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.application.dtos.quota import (
    REASON_LIMIT_EXCEEDED,
    REASON_SERVICE_UNAVAILABLE,
    QuotaDecision,
)
from app.core.constants import (
    QUOTA_COUNTER_TTL_SECONDS,
    QUOTA_DIRECTION_DOWNLOAD,
    QUOTA_DIRECTION_UPLOAD,
)
from app.domain.exceptions import QuotaExceededError, QuotaServiceUnavailableError
from app.infrastructure.cache.keys import download_quota_key, upload_quota_key
from app.shared.utils.parsing import parse_size

if TYPE_CHECKING:
    from app.application.interfaces.services import ICounterStore
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def _to_int(value: Any) -> int:
    """Counter/byte value as int; absent or non-numeric -> 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0


class QuotaService:
    """Admission control and usage tracking against daily byte limits."""

    def __init__(
        self,
        counter_store: "ICounterStore",
        daily_upload_limit: int,
        daily_download_limit: int,
    ) -> None:
        self.counter_store = counter_store
        self.daily_upload_limit = daily_upload_limit
        self.daily_download_limit = daily_download_limit

    @classmethod
    def from_settings(cls, counter_store: "ICounterStore", settings: "Settings") -> QuotaService:
        """Build with limits parsed from DAILY_UPLOAD_LIMIT / DAILY_DOWNLOAD_LIMIT."""
        return cls(
            counter_store,
            daily_upload_limit=parse_size(settings.daily_upload_limit),
            daily_download_limit=parse_size(settings.daily_download_limit),
        )

    async def _current(self, key: str) -> int:
        return _to_int(await self.counter_store.get(key))

    async def _ensure_ttl(self, key: str, fresh: bool) -> None:
        """Set the bucket TTL on a fresh counter, or restore one a failed EXPIRE left unset."""
        if not fresh and await self.counter_store.ttl(key) != -1:
            return
        try:
            await self.counter_store.expire(key, QUOTA_COUNTER_TTL_SECONDS)
        except Exception:
            logger.error("Counter %s incremented without TTL; retried on next increment", key)
            raise

    async def check_upload_admission(self, client_id: str, candidate_bytes: int) -> QuotaDecision:
        """Admit an upload of candidate_bytes if it fits today's budget, and count it.

        Allowed iff current + candidate_bytes <= limit. The TTL is set when
        the counter was empty going in, or restored when it has none.

        Returns:
            QuotaDecision; denied with reason limit_exceeded (usage figures
            attached) or service_unavailable (counter store error).
        """
        limit = self.daily_upload_limit
        key = upload_quota_key(client_id)
        try:
            current = await self._current(key)
            if current + candidate_bytes > limit:
                logger.warning(
                    "Upload limit exceeded for %s: %s + %s > %s",
                    client_id,
                    current,
                    candidate_bytes,
                    limit,
                )
                return QuotaDecision(
                    allowed=False,
                    current_usage=current,
                    limit=limit,
                    remaining=max(0, limit - current),
                    reason=REASON_LIMIT_EXCEEDED,
                )
            updated = await self.counter_store.incrby(key, candidate_bytes)
            await self._ensure_ttl(key, fresh=current == 0)
        except Exception as e:
            logger.error("Upload limit check error for %s: %s", client_id, e)
            return QuotaDecision(allowed=False, reason=REASON_SERVICE_UNAVAILABLE)

        return QuotaDecision(
            allowed=True,
            current_usage=updated,
            limit=limit,
            remaining=max(0, limit - updated),
        )

    async def check_download_admission(self, client_id: str) -> None:
        """Pass if today's download counter is below the limit. Does not increment.

        Raises:
            QuotaExceededError: current >= limit.
            QuotaServiceUnavailableError: counter store error.
        """
        limit = self.daily_download_limit
        try:
            current = await self._current(download_quota_key(client_id))
        except Exception as e:
            logger.error("Download limit check error for %s: %s", client_id, e)
            raise QuotaServiceUnavailableError(str(e)) from e
        if current >= limit:
            logger.warning("Download limit exceeded for %s: %s >= %s", client_id, current, limit)
            raise QuotaExceededError(QUOTA_DIRECTION_DOWNLOAD, current, limit)

    async def track_download(self, client_id: str, bytes_transferred: Any) -> None:
        """Add bytes_transferred to today's download counter.

        Non-numeric or missing sizes count as 0. Sets the TTL when this
        increment brought the counter up from zero, or when it has none.

        Raises:
            QuotaServiceUnavailableError: counter store error.
        """
        amount = _to_int(bytes_transferred)
        if isinstance(bytes_transferred, bool) or not isinstance(bytes_transferred, int):
            logger.warning(
                "Invalid download size %r for %s; counting %s", bytes_transferred, client_id, amount
            )
        key = download_quota_key(client_id)
        try:
            updated = await self.counter_store.incrby(key, amount)
            await self._ensure_ttl(key, fresh=updated == amount)
        except Exception as e:
            logger.error("Download tracking error for %s: %s", client_id, e)
            raise QuotaServiceUnavailableError(str(e)) from e

    async def check_upload_or_raise(self, client_id: str, candidate_bytes: int) -> QuotaDecision:
        """check_upload_admission, raising the matching exception when denied."""
        decision = await self.check_upload_admission(client_id, candidate_bytes)
        if decision.allowed:
            return decision
        if decision.service_unavailable:
            raise QuotaServiceUnavailableError()
        raise QuotaExceededError(
            QUOTA_DIRECTION_UPLOAD,
            decision.current_usage or 0,
            decision.limit or 0,
        )
