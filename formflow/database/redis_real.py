"""
Real Redis-backed session storage slot, used when REDIS_URL is set.
Implements the same interface as formflow.database.redis (in-memory stub).

Entries expire after `default_ttl` seconds so drafts behave like
browser-session storage rather than a system of record.
"""

from __future__ import annotations

from typing import Optional

import redis


class RedisCache:
    """
    Redis-backed session storage slot. Use when REDIS_URL is set in production.
    """

    def __init__(self, url: str, default_ttl: int = 1800, client: Optional[redis.Redis] = None) -> None:
        self._client = client or redis.from_url(url, decode_responses=True)
        self._default_ttl = default_ttl

    def get_item(self, key: str) -> Optional[str]:
        raw = self._client.get(key)
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self._client.setex(key, ttl or self._default_ttl, value)

    def remove_item(self, key: str) -> None:
        self._client.delete(key)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False
