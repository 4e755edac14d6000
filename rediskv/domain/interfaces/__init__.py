"""
Domain interfaces.

Defines the contracts that infrastructure layer must implement.
"""

from .kv_interface import IKeyValueStore

__all__ = ["IKeyValueStore"]
