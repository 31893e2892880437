"""
Short-lived guard against duplicate submissions of the same request.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Callable, Dict, Mapping


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [_canonical(v) for v in value]
        return sorted(items, key=lambda v: json.dumps(v, sort_keys=True, default=str))
    return value


def request_key(params: Mapping[str, Any]) -> str:
    """SHA-256 of the parameters as canonical JSON (sorted keys, sorted list values)."""
    payload = json.dumps(_canonical(params), sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class RequestDeduplicator:
    """
    TTL map of recently seen request keys.

    ``check_and_record`` rejects a request whose key was recorded less than
    ``window_s`` seconds ago. Entries older than ``max_age_s`` are dropped by
    ``evict_expired``, which the host calls; nothing runs in the background.
    """

    def __init__(
        self,
        window_s: float = 5.0,
        max_age_s: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_age_s < window_s:
            raise ValueError("max_age_s must be >= window_s")
        self.window_s = window_s
        self.max_age_s = max_age_s
        self._clock = clock
        self._seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def check_and_record(self, params: Mapping[str, Any]) -> bool:
        """Return True if the request may proceed (and record it), False if it is a duplicate."""
        key = request_key(params)
        now = self._clock()
        with self._lock:
            last = self._seen.get(key)
            if last is not None and now - last < self.window_s:
                return False
            self._seen[key] = now
            return True

    def evict_expired(self) -> int:
        """Drop entries older than max_age_s; returns how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [k for k, ts in self._seen.items() if now - ts > self.max_age_s]
            for k in stale:
                del self._seen[k]
        return len(stale)

    def __len__(self) -> int:
        return len(self._seen)
