"""
Lightweight in-memory session storage slot for local development and tests.

Implements the same string-keyed, string-valued interface as
formflow.database.redis_real so that the draft store runs without a real
Redis instance.
"""

from __future__ import annotations

from typing import Dict, Optional


class RedisCache:
    def __init__(self) -> None:
        # Simple in-memory store: key -> serialized value
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        # TTL is ignored in this in-memory implementation.
        if not isinstance(value, str):
            raise TypeError("session storage values must be strings")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def ping(self) -> bool:
        """Health check; always True in local/dev mode."""
        return True
