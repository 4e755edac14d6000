"""
Error hierarchy for the rediskv facade.

Every failure raised by ``RedisClient`` derives from ``RedisKVError`` so callers
can catch the whole family, while each subclass keeps the failure kind
distinguishable (a missing key is never confused with a broken socket).
"""


class RedisKVError(Exception):
    """Base class for all rediskv errors."""


class ConfigurationError(RedisKVError, ValueError):
    """Raised when connection parameters cannot be parsed."""


class StoreConnectionError(RedisKVError, ConnectionError):
    """Raised when the store is unreachable at connect time or was never connected."""


class TransportError(RedisKVError):
    """Raised when an in-flight command fails."""


class CommandError(TransportError):
    """Raised when the server rejects a command (wrong type, non-numeric INCR...)."""


class KeyNotFoundError(RedisKVError, KeyError):
    """Raised when a key or list element is absent."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key '{self.key}' not found"


class SerializationError(RedisKVError):
    """Raised when a value cannot be encoded to or decoded from JSON."""


class ClientClosedError(RedisKVError):
    """Raised when the client is used after ``close()``."""


class OperationTimeoutError(RedisKVError, TimeoutError):
    """Raised when a per-call deadline expires before the store answers."""
