from typing import Any, Callable, Optional, Tuple
import threading
import time


class ResponseCache:
    """
    Single-slot, time-bounded cache for one entity's list response.

    The entry is an immutable ``(stamped_at, payload)`` pair swapped under a
    lock, so readers never observe a timestamp from one write and a payload
    from another. Every write bumps a generation counter; a list query that
    started before an invalidation cannot repopulate the cache with rows the
    write has already superseded.
    """

    def __init__(self, ttl_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: Optional[Tuple[float, Any]] = None
        self._generation = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self) -> Optional[Any]:
        """Return the cached payload, or None when empty or expired."""
        with self._lock:
            entry = self._entry
        if entry is None:
            return None
        stamped_at, payload = entry
        if self._clock() - stamped_at >= self.ttl_seconds:
            return None
        return payload

    def set(self, payload: Any, generation: Optional[int] = None) -> bool:
        """Store a payload. Returns False when an invalidation happened since `generation` was read."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._entry = (self._clock(), payload)
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None
            self._generation += 1
