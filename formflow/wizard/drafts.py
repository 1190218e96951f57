"""Draft Store: debounced persistence of in-progress form drafts.

Drafts are JSON documents kept in a string-keyed, string-valued session
storage slot (`formflow.database.redis.RedisCache` in memory, or
`formflow.database.redis_real.RedisCache` on Redis). Bursts of edits are
coalesced: the first `save` of a burst starts a short timer, later saves only
replace the pending draft, and the latest draft is written when the timer
fires. Continuous editing is therefore written once per interval rather than
only after the user pauses.

Failures never interrupt the user. A draft that cannot be written is logged and
dropped; a stored draft that cannot be read or parsed is treated as absent.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from formflow.error_handler import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class DraftStore:
    def __init__(self, storage, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS, ttl: Optional[int] = None):
        self.storage = storage
        self.debounce_seconds = debounce_seconds
        self.ttl = ttl
        # key -> serialized draft waiting for its timer
        self._pending: Dict[str, str] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def save(self, session_key: str, draft: Dict[str, Any]) -> None:
        """Schedule a write of `draft`; replaces the draft still waiting for the same key."""
        try:
            payload = json.dumps(draft, default=str)
        except (TypeError, ValueError) as exc:
            logger.warning("Draft for %s is not serializable, skipping save: %s", session_key, exc)
            return

        self._pending[session_key] = payload
        if session_key in self._timers:
            return

        if self.debounce_seconds <= 0:
            self._flush_key(session_key)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop to debounce on: write through.
            self._flush_key(session_key)
            return
        self._timers[session_key] = loop.call_later(self.debounce_seconds, self._flush_key, session_key)

    def flush(self, session_key: Optional[str] = None) -> None:
        """Write pending drafts now (one key, or all of them)."""
        keys = [session_key] if session_key is not None else list(self._pending)
        for key in keys:
            timer = self._timers.pop(key, None)
            if timer is not None:
                timer.cancel()
            self._flush_key(key)

    def has_pending(self, session_key: str) -> bool:
        return session_key in self._pending

    def load(self, session_key: str) -> Optional[Dict[str, Any]]:
        """Most recent draft for the key, or None if absent or unreadable."""
        raw = self._pending.get(session_key)
        if raw is None:
            try:
                raw = self._read(session_key)
            except PersistenceError as exc:
                logger.warning("Draft read failed, starting fresh: %s", exc)
                return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            data = None
        if not isinstance(data, dict):
            logger.warning("Discarding corrupt draft stored under %s", session_key)
            self._remove(session_key)
            return None
        return data

    def clear(self, session_key: str) -> None:
        timer = self._timers.pop(session_key, None)
        if timer is not None:
            timer.cancel()
        self._pending.pop(session_key, None)
        self._remove(session_key)

    # --- internals -----------------------------------------------------------

    def _flush_key(self, session_key: str) -> None:
        self._timers.pop(session_key, None)
        payload = self._pending.pop(session_key, None)
        if payload is None:
            return
        try:
            self._write(session_key, payload)
        except PersistenceError as exc:
            logger.warning("Draft write failed, resume will not be available: %s", exc)

    def _read(self, session_key: str) -> Optional[str]:
        try:
            return self.storage.get_item(session_key)
        except Exception as exc:
            raise PersistenceError(session_key, f"read failed: {exc}") from exc

    def _write(self, session_key: str, payload: str) -> None:
        try:
            self.storage.set_item(session_key, payload, ttl=self.ttl)
        except Exception as exc:
            raise PersistenceError(session_key, f"write failed: {exc}") from exc
        logger.debug("Draft saved under %s", session_key)

    def _remove(self, session_key: str) -> None:
        try:
            self.storage.remove_item(session_key)
        except Exception as exc:
            logger.warning("Draft delete failed: %s", PersistenceError(session_key, str(exc)))
