"""
Redis Module

Provides the Redis-backed key/value facade and its JSON serde.
"""

from . import serde
from .redis_client import KEY_MISSING, NO_EXPIRY, ClientState, RedisClient

__all__ = ["RedisClient", "ClientState", "NO_EXPIRY", "KEY_MISSING", "serde"]
