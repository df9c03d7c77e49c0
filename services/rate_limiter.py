"""
Rolling-window rate limiting for buyer mutations.

Callers only see ``RateLimiter.consume(key)``. Hit timestamps live in a
backend: ``MemoryBackend`` keeps them in this process, ``CacheBackend`` keeps
them in the Django cache so several server instances share one window.
"""
import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from django.conf import settings
from django.core.cache import caches

from services.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)


class MemoryBackend:
    """Per-process hit log, one deque of timestamps per key"""

    def __init__(self):
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def try_hit(self, key: str, now: float, points: int, duration: float) -> Optional[float]:
        """
        Record a hit if ``key`` has fewer than ``points`` hits in the window.

        Returns None when the hit was recorded, otherwise the seconds until the
        oldest hit leaves the window.
        """
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - duration:
                hits.popleft()
            if len(hits) >= points:
                return hits[0] + duration - now
            hits.append(now)
            return None

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)


class CacheBackend:
    """
    Hit log stored in a Django cache so several server instances see the same window.

    The read-modify-write of a key's log is serialized only within this
    process. Concurrent hits for the same key from different processes can
    each read the log before the other writes it, so under that contention
    a key may briefly exceed ``points``.
    """

    def __init__(self, alias: str = "default", prefix: str = "ratelimit"):
        self.cache = caches[alias]
        self.prefix = prefix
        self._lock = threading.Lock()

    def _cache_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    @property
    def _index_key(self) -> str:
        # Keys this limiter has written, so reset() never touches other cache entries
        return f"{self.prefix}:__keys__"

    def try_hit(self, key: str, now: float, points: int, duration: float) -> Optional[float]:
        cache_key = self._cache_key(key)
        with self._lock:
            hits: List[float] = [
                hit for hit in self.cache.get(cache_key, []) if hit > now - duration
            ]
            if len(hits) >= points:
                return hits[0] + duration - now
            hits.append(now)
            self.cache.set(cache_key, hits, timeout=int(duration) + 1)
            known = self.cache.get(self._index_key, set())
            if cache_key not in known:
                self.cache.set(self._index_key, known | {cache_key}, timeout=None)
            return None

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                known = self.cache.get(self._index_key, set())
                self.cache.delete_many(list(known) + [self._index_key])
            else:
                self.cache.delete(self._cache_key(key))


class RateLimiter:
    """Allow at most ``points`` operations per key within any ``duration`` seconds"""

    def __init__(
        self,
        points: int,
        duration: float,
        backend=None,
        clock: Callable[[], float] = time.time,
        message: str = "Rate limit exceeded for update",
    ):
        self.points = points
        self.duration = duration
        self.backend = backend or MemoryBackend()
        self.clock = clock
        self.message = message

    def consume(self, key) -> None:
        """
        Count one operation for ``key``.

        Raises:
            RateLimitExceeded: the key already used all its points in the
                current window; nothing is recorded
        """
        retry_after = self.backend.try_hit(str(key), self.clock(), self.points, self.duration)
        if retry_after is not None:
            logger.warning(f"Rate limit exceeded for key {key}, retry in {retry_after:.1f}s")
            raise RateLimitExceeded(self.message, retry_after=retry_after)

    def reset(self, key=None) -> None:
        self.backend.reset(None if key is None else str(key))


BACKENDS = {
    "memory": MemoryBackend,
    "cache": CacheBackend,
}

# Global instance
_update_limiter_instance: Optional[RateLimiter] = None


def get_update_rate_limiter() -> RateLimiter:
    """Get or create the process-wide limiter for buyer updates"""
    global _update_limiter_instance
    if _update_limiter_instance is None:
        config = settings.BUYER_UPDATE_RATE_LIMIT
        backend_name = config.get("BACKEND", "memory")
        if backend_name not in BACKENDS:
            raise ValueError(f"Unknown rate limit backend: {backend_name}")
        _update_limiter_instance = RateLimiter(
            points=config.get("POINTS", 5),
            duration=config.get("DURATION", 60),
            backend=BACKENDS[backend_name](),
        )
    return _update_limiter_instance
