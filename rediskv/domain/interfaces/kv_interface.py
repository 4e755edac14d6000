"""
Key/value store interface for rediskv.

``IKeyValueStore`` is the single operation set callers program against.
``RedisClient`` is the production implementation; tests and alternative
backends can implement it without depending on ``redis-py``.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from pydantic import BaseModel

RedisValue = str | bytes | int
TTL = timedelta | int | float


class IKeyValueStore(ABC):
    """
    Interface for key/value, list, TTL and JSON operations.

    Every method is a coroutine and accepts a keyword-only ``timeout`` in
    seconds. Cancelling the awaiting task cancels the operation.
    """

    @abstractmethod
    async def set(self, key: str, value: RedisValue, *, timeout: float | None = None) -> None:
        """Store a value with no expiration."""

    @abstractmethod
    async def set_with_expiration(
        self, key: str, value: RedisValue, ttl: TTL, *, timeout: float | None = None
    ) -> None:
        """Store a value expiring after ``ttl`` (no expiration when ``ttl <= 0``)."""

    @abstractmethod
    async def get(self, key: str, *, timeout: float | None = None) -> str:
        """
        Get the value of a key.

        Raises:
            KeyNotFoundError: If the key does not exist
        """

    @abstractmethod
    async def set_nx(
        self, key: str, value: RedisValue, ttl: TTL, *, timeout: float | None = None
    ) -> bool:
        """Set only if absent; True when the value was stored."""

    @abstractmethod
    async def increment(self, key: str, *, timeout: float | None = None) -> int:
        """Atomically increment an integer key by one."""

    @abstractmethod
    async def delete(self, *keys: str, timeout: float | None = None) -> int:
        """Delete keys, absent ones included."""

    @abstractmethod
    async def exists(self, *keys: str, timeout: float | None = None) -> bool:
        """True if at least one key exists."""

    @abstractmethod
    async def expire(self, key: str, ttl: TTL, *, timeout: float | None = None) -> bool:
        """Set a TTL on an existing key; False if it does not exist."""

    @abstractmethod
    async def ttl(self, key: str, *, timeout: float | None = None) -> timedelta:
        """Remaining lifetime, or the NO_EXPIRY / KEY_MISSING sentinels."""

    @abstractmethod
    async def set_list(
        self, key: str, values: Sequence[str], *, timeout: float | None = None
    ) -> None:
        """Push values onto the head of a list."""

    @abstractmethod
    async def get_list(
        self, key: str, start: int = 0, stop: int = -1, *, timeout: float | None = None
    ) -> list[str]:
        """Inclusive range of list elements."""

    @abstractmethod
    async def lpop(self, key: str, *, timeout: float | None = None) -> str:
        """Remove and return the head element."""

    @abstractmethod
    async def set_json(
        self, key: str, value: Any, ttl: TTL = 0, *, timeout: float | None = None
    ) -> None:
        """Store a JSON-serialized value."""

    @abstractmethod
    async def get_json(
        self,
        key: str,
        model: type[BaseModel] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Fetch and decode a JSON value."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""
