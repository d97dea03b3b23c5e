"""DTOs for quota admission decisions."""

from dataclasses import dataclass
from typing import Any

REASON_LIMIT_EXCEEDED = "limit_exceeded"
REASON_SERVICE_UNAVAILABLE = "service_unavailable"


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of an upload admission check.

    Usage figures are None when the counter store could not be read
    (reason == service_unavailable).
    """

    allowed: bool
    current_usage: int | None = None
    limit: int | None = None
    remaining: int | None = None
    reason: str | None = None

    @property
    def service_unavailable(self) -> bool:
        """True when denial was caused by the counter store, not by the budget."""
        return self.reason == REASON_SERVICE_UNAVAILABLE

    def usage_details(self) -> dict[str, Any]:
        """Caller-facing usage figures (camelCase, as returned to HTTP clients)."""
        return {
            "currentUsage": self.current_usage,
            "limit": self.limit,
            "remaining": self.remaining,
        }
