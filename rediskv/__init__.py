"""
rediskv - a thin asyncio facade over redis-py

Typed key/value, list, TTL and JSON helpers with per-call timeouts and
request-context aware logging.
"""

from .core.config.settings import RedisConfig, load_redis_config, settings
from .core.errors import (
    ClientClosedError,
    CommandError,
    ConfigurationError,
    KeyNotFoundError,
    OperationTimeoutError,
    RedisKVError,
    SerializationError,
    StoreConnectionError,
    TransportError,
)
from .core.logging.context import request_context
from .domain.interfaces.kv_interface import IKeyValueStore
from .persistence.redis.redis_client import (
    KEY_MISSING,
    NO_EXPIRY,
    ClientState,
    RedisClient,
)

__version__ = settings.version

__all__ = [
    # Facade
    "RedisClient",
    "IKeyValueStore",
    "ClientState",
    "NO_EXPIRY",
    "KEY_MISSING",
    # Configuration
    "RedisConfig",
    "load_redis_config",
    "request_context",
    # Errors
    "RedisKVError",
    "ConfigurationError",
    "StoreConnectionError",
    "TransportError",
    "CommandError",
    "KeyNotFoundError",
    "SerializationError",
    "ClientClosedError",
    "OperationTimeoutError",
]
