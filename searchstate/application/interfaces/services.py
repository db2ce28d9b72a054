"""Service interfaces (ports) consumed by the application layer."""

from __future__ import annotations

from typing import Any, Protocol


class ICacheService(Protocol):
    """TTL cache used by the parameter store (DIP).

    Implementations raise CacheUnavailableException when the backend cannot
    be reached; a miss is None, never an error.
    """

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store value with TTL in seconds."""

    async def delete(self, key: str) -> None:
        """Delete key (no error when absent)."""
