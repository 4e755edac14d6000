# rediskv/persistence/redis/redis_client.py

"""
Asyncio-native facade over a single ``redis.asyncio.Redis`` handle.

Each method forwards exactly one command and adapts the reply:

- missing keys become ``KeyNotFoundError`` instead of ``None``
- ``redis-py`` failures become ``TransportError`` / ``CommandError``
- TTLs are accepted as ``timedelta`` or seconds and sent in milliseconds

Cancellation is plain asyncio: cancelling the awaiting task aborts the command
and ``CancelledError`` propagates. A per-call ``timeout`` (or the client's
``default_timeout``) bounds each command with ``asyncio.timeout``.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import timedelta
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError, ResponseError

from ...core.config.settings import RedisConfig
from ...core.errors import (
    ClientClosedError,
    CommandError,
    KeyNotFoundError,
    OperationTimeoutError,
    SerializationError,
    StoreConnectionError,
    TransportError,
)
from ...core.logging.logger import get_logger
from ...domain.interfaces.kv_interface import TTL, IKeyValueStore, RedisValue
from .serde import dumps, loads

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Sentinels returned by RedisClient.ttl()
NO_EXPIRY = timedelta(seconds=-1)
KEY_MISSING = timedelta(seconds=-2)


class ClientState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CLOSED = "closed"


def _seconds(ttl: TTL) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    if isinstance(ttl, int | float) and not isinstance(ttl, bool):
        return float(ttl)
    raise TypeError(f"TTL must be a timedelta or a number of seconds, got {type(ttl).__name__}")


def _to_milliseconds(ttl: TTL) -> int:
    """Convert a TTL to whole milliseconds, rounding positive sub-millisecond values up to 1."""
    seconds = _seconds(ttl)
    if seconds <= 0:
        return 0
    return max(1, math.ceil(seconds * 1000))


def _check_value(key: str, value: Any) -> RedisValue:
    if isinstance(value, bool) or not isinstance(value, str | bytes | int):
        raise TypeError(
            f"Value for key '{key}' must be str, bytes or int, got {type(value).__name__}; "
            "use set_json() for structured data"
        )
    if isinstance(value, bytes):
        try:
            value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TypeError(
                f"Bytes for key '{key}' must be valid UTF-8, values are read back as str"
            ) from e
    return value


async def _release(redis: Redis, address: str) -> None:
    """Close a handle that failed to connect, keeping the connect error as the one raised."""
    try:
        await redis.aclose()
    except (RedisError, OSError) as e:
        logger.warning(f"Closing failed Redis handle for {address} also failed: {e}")


class RedisClient(IKeyValueStore):
    """
    Thin, typed facade over a connected ``redis.asyncio.Redis``.

    Build it with :meth:`connect`, which pings the store and fails fast when it
    is unreachable::

        config = load_redis_config()
        async with await RedisClient.connect(config) as kv:
            await kv.set("user:123", "John Doe")
            name = await kv.get("user:123")

    The instance holds no state beyond the handle. It is safe to share between
    tasks as far as ``redis-py`` is; ``close()`` must not race in-flight calls.

    Known limitation: ``close()`` is not idempotent. A second call raises
    ``ClientClosedError`` rather than being ignored.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        address: str = "",
        default_timeout: float | None = None,
    ):
        self._redis = redis
        self._address = address
        self._default_timeout = default_timeout
        self._state = ClientState.DISCONNECTED

    # ---------- life-cycle --------------------------------------------------

    @classmethod
    async def connect(
        cls,
        config: RedisConfig,
        *,
        redis: Redis | None = None,
        default_timeout: float | None = None,
    ) -> RedisClient:
        """
        Create the underlying client from ``config`` and verify it with PING.

        Args:
            config: Connection parameters (see ``load_redis_config``)
            redis: Pre-built handle to wrap instead of creating one from ``config``
            default_timeout: Deadline in seconds applied to calls that pass no ``timeout``

        Raises:
            StoreConnectionError: If the PING round-trip fails.
        """
        if redis is None:
            redis = Redis(
                host=config.host,
                port=int(config.port),
                password=config.password or None,
                db=config.db,
                encoding="utf-8",
                decode_responses=True,
                max_connections=config.max_connections,
                socket_connect_timeout=config.connection_timeout,
            )

        client = cls(redis, address=config.address, default_timeout=default_timeout)
        try:
            async with asyncio.timeout(config.connection_timeout):
                await redis.ping()
        except (RedisError, OSError, TimeoutError) as e:
            logger.error(f"❌ Redis connection to {config.address} (db{config.db}) failed: {e}")
            await _release(redis, config.address)
            raise StoreConnectionError(
                f"Could not connect to Redis at {config.address}: {e}"
            ) from e
        except BaseException:
            # cancelled or interrupted mid-PING: the handle never reaches the caller
            await _release(redis, config.address)
            raise

        client._state = ClientState.CONNECTED
        logger.info(f"✅ Redis connected to {config.address} (db{config.db})")
        return client

    async def close(self) -> None:
        """
        Release the connection handle.

        Raises:
            ClientClosedError: If the client was already closed.
            TransportError: If the underlying client fails while closing.
        """
        if self._state is ClientState.CLOSED:
            raise ClientClosedError("close() called on an already closed RedisClient")
        try:
            await self._redis.aclose()
        except RedisError as e:
            logger.error(f"Error while closing Redis connection to {self._address}: {e}")
            raise TransportError(f"Redis close failed: {e}") from e
        finally:
            self._state = ClientState.CLOSED
        logger.info(f"Redis connection to {self._address} closed")

    async def __aenter__(self) -> RedisClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._state is not ClientState.CLOSED:
            await self.close()

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def address(self) -> str:
        return self._address

    # ---------- command plumbing -------------------------------------------

    def _require_connection(self, command: str) -> Redis:
        if self._state is ClientState.CLOSED:
            raise ClientClosedError(f"Cannot run {command}: RedisClient is closed")
        if self._state is ClientState.DISCONNECTED:
            raise StoreConnectionError(
                f"Cannot run {command}: RedisClient is not connected, use RedisClient.connect()"
            )
        return self._redis

    @asynccontextmanager
    async def _command(
        self, command: str, key: str, timeout: float | None
    ) -> AsyncIterator[Redis]:
        """
        Run one store command with deadline and error translation.

        Usage::

            async with self._command("GET", key, timeout) as redis:
                value = await redis.get(key)
        """
        redis = self._require_connection(command)
        deadline = self._default_timeout if timeout is None else timeout
        logger.debug(f"Redis {command} '{key}'")
        try:
            async with asyncio.timeout(deadline):
                yield redis
        except TimeoutError as e:
            logger.error(f"Redis {command} timed out for key '{key}' after {deadline}s")
            raise OperationTimeoutError(
                f"Redis {command} for key '{key}' exceeded {deadline}s"
            ) from e
        except UnicodeDecodeError as e:
            logger.error(f"Redis {command} reply for key '{key}' is not valid UTF-8: {e}")
            raise SerializationError(
                f"Redis {command} reply for key '{key}' is not valid UTF-8"
            ) from e
        except ResponseError as e:
            logger.error(f"Redis {command} rejected for key '{key}': {e}")
            raise CommandError(f"Redis {command} rejected for key '{key}': {e}") from e
        except RedisError as e:
            logger.error(f"Redis {command} error for key '{key}': {e}", exc_info=True)
            raise TransportError(f"Redis {command} failed for key '{key}': {e}") from e

    # ---------- key/value ---------------------------------------------------

    async def set(
        self, key: str, value: RedisValue, *, timeout: float | None = None
    ) -> None:
        """Store ``value`` under ``key`` with no expiration."""
        value = _check_value(key, value)
        async with self._command("SET", key, timeout) as redis:
            await redis.set(key, value)

    async def set_with_expiration(
        self,
        key: str,
        value: RedisValue,
        ttl: TTL,
        *,
        timeout: float | None = None,
    ) -> None:
        """
        Store ``value`` under ``key`` expiring after ``ttl``.

        A ``ttl`` of zero or less means no expiration, same as :meth:`set`.
        """
        value = _check_value(key, value)
        px = _to_milliseconds(ttl) or None
        async with self._command("SET", key, timeout) as redis:
            await redis.set(key, value, px=px)

    async def get(self, key: str, *, timeout: float | None = None) -> str:
        """
        Return the string value of ``key``.

        Raises:
            KeyNotFoundError: If the key is absent or expired.
        """
        async with self._command("GET", key, timeout) as redis:
            value = await redis.get(key)
        if value is None:
            raise KeyNotFoundError(key)
        return value

    async def set_nx(
        self,
        key: str,
        value: RedisValue,
        ttl: TTL,
        *,
        timeout: float | None = None,
    ) -> bool:
        """
        Set ``key`` only if it does not exist yet.

        Returns True when the value was stored. Usable as an advisory lock
        (``set_nx("lock:job1", "worker-a", 10)``), but there is no fencing token
        and no lease renewal, so it gives no guarantee under network partitions.
        A ``ttl`` of zero or less stores the key without expiration.
        """
        value = _check_value(key, value)
        px = _to_milliseconds(ttl) or None
        async with self._command("SET NX", key, timeout) as redis:
            result = await redis.set(key, value, px=px, nx=True)
        return bool(result)

    async def increment(self, key: str, *, timeout: float | None = None) -> int:
        """
        Atomically add 1 to the integer stored at ``key``; an absent key becomes 1.

        Raises:
            CommandError: If the stored value is not an integer.
        """
        async with self._command("INCR", key, timeout) as redis:
            return await redis.incr(key)

    async def delete(self, *keys: str, timeout: float | None = None) -> int:
        """Delete keys; absent keys are not an error. Returns how many were removed."""
        if not keys:
            self._require_connection("DEL")
            return 0
        async with self._command("DEL", keys[0], timeout) as redis:
            return await redis.delete(*keys)

    async def exists(self, *keys: str, timeout: float | None = None) -> bool:
        """Return True if at least one of ``keys`` exists."""
        if not keys:
            self._require_connection("EXISTS")
            return False
        async with self._command("EXISTS", keys[0], timeout) as redis:
            count = await redis.exists(*keys)
        return count > 0

    # ---------- TTL management ----------------------------------------------

    async def expire(
        self, key: str, ttl: TTL, *, timeout: float | None = None
    ) -> bool:
        """
        Set a timeout on an existing key.

        Returns False when the key does not exist. A non-positive ``ttl`` is
        sent as-is, and the store then deletes the key immediately.
        """
        ms = math.ceil(_seconds(ttl) * 1000)
        async with self._command("PEXPIRE", key, timeout) as redis:
            result = await redis.pexpire(key, ms)
        return bool(result)

    async def ttl(self, key: str, *, timeout: float | None = None) -> timedelta:
        """
        Return the remaining time to live of ``key``.

        Returns:
            - a positive ``timedelta`` when the key expires
            - ``NO_EXPIRY`` (-1s) when the key exists without expiration
            - ``KEY_MISSING`` (-2s) when the key does not exist
        """
        async with self._command("PTTL", key, timeout) as redis:
            ms = await redis.pttl(key)
        if ms == -1:
            return NO_EXPIRY
        if ms == -2:
            return KEY_MISSING
        return timedelta(milliseconds=ms)

    # ---------- lists -------------------------------------------------------

    async def set_list(
        self, key: str, values: Sequence[str], *, timeout: float | None = None
    ) -> None:
        """
        Push ``values`` onto the head of the list at ``key`` (LPUSH).

        Each value is pushed in turn, so ``["a", "b", "c"]`` reads back as
        ``["c", "b", "a"]``. An empty sequence is a no-op and sends nothing.
        """
        if not values:
            self._require_connection("LPUSH")
            return
        async with self._command("LPUSH", key, timeout) as redis:
            await redis.lpush(key, *values)

    async def get_list(
        self,
        key: str,
        start: int = 0,
        stop: int = -1,
        *,
        timeout: float | None = None,
    ) -> list[str]:
        """Return list elements ``start`` to ``stop`` inclusive; ``stop=-1`` reads to the end."""
        async with self._command("LRANGE", key, timeout) as redis:
            return await redis.lrange(key, start, stop)

    async def lpop(self, key: str, *, timeout: float | None = None) -> str:
        """
        Remove and return the head of the list at ``key``.

        Raises:
            KeyNotFoundError: If the list is empty or absent.
        """
        async with self._command("LPOP", key, timeout) as redis:
            value = await redis.lpop(key)
        if value is None:
            raise KeyNotFoundError(key)
        return value

    # ---------- JSON --------------------------------------------------------

    async def set_json(
        self,
        key: str,
        value: Any,
        ttl: TTL = 0,
        *,
        timeout: float | None = None,
    ) -> None:
        """
        Serialize ``value`` to JSON and store it, expiring after ``ttl`` if positive.

        Raises:
            SerializationError: If ``value`` cannot be encoded. Nothing is stored.
        """
        payload = dumps(value)
        px = _to_milliseconds(ttl) or None
        async with self._command("SET", key, timeout) as redis:
            await redis.set(key, payload, px=px)

    async def get_json(
        self,
        key: str,
        model: type[ModelT] | None = None,
        *,
        timeout: float | None = None,
    ) -> ModelT | Any:
        """
        Fetch ``key`` and decode it from JSON.

        Args:
            key: Redis key written by :meth:`set_json`
            model: Optional pydantic model to validate the payload into

        Raises:
            KeyNotFoundError: If the key is absent.
            TransportError: If the fetch fails.
            SerializationError: If the stored text is not valid JSON for ``model``.
        """
        raw = await self.get(key, timeout=timeout)
        return loads(raw, model)

    # ---------- health ------------------------------------------------------

    async def ping(self, *, timeout: float | None = None) -> bool:
        async with self._command("PING", "-", timeout) as redis:
            return bool(await redis.ping())

    async def health_status(self) -> dict[str, Any]:
        """
        Report connection health for monitoring endpoints.

        Store failures are reported in the result, not raised.
        """
        status: dict[str, Any] = {
            "state": self._state.value,
            "address": self._address,
            "healthy": False,
            "error": None,
        }
        if self._state is not ClientState.CONNECTED:
            status["error"] = f"client is {self._state.value}"
            return status
        try:
            status["healthy"] = await self.ping()
        except (TransportError, OperationTimeoutError) as e:
            status["error"] = str(e)
        return status
