"""Application service interfaces.

Protocols define contracts for collaborators of application services (DIP).
Implementations live in the infrastructure layer.
"""

from typing import Protocol


class ICounterStore(Protocol):
    """Shared counter store used for daily quota buckets (e.g. Redis).

    Implementations raise on connectivity or protocol errors; the quota
    service decides how to degrade.
    """

    async def get(self, key: str) -> str | None:
        """Return the raw counter value or None when absent/expired."""
        ...

    async def incrby(self, key: str, amount: int) -> int:
        """Atomically add amount to key and return the new value."""
        ...

    async def expire(self, key: str, seconds: int) -> bool:
        """Set key TTL in seconds. Returns True if the key exists."""
        ...

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -1 if the key has none, -2 if it is absent."""
        ...
