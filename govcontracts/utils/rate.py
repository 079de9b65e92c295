"""Simple rate-limiting primitives."""
from __future__ import annotations

import collections
import threading
import time

POLL_INTERVAL_SECONDS = 0.5


class RateGate:
    """Sliding-window gate admitting ``occurrences`` requests per ``window_seconds``.

    ``acquire`` never rejects a caller, it only delays it until another
    request fits inside the window. Safe to share between threads.
    """

    def __init__(self, occurrences: int = 5, window_seconds: float = 10.0) -> None:
        self.occurrences = max(1, int(occurrences or 1))
        self.window_seconds = float(window_seconds)
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._timestamps: collections.deque[float] = collections.deque()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _expire(self, now: float) -> None:
        horizon = now - self.window_seconds
        while self._timestamps and self._timestamps[0] <= horizon:
            self._timestamps.popleft()

    def _try_admit(self) -> float:
        """Record a request and return 0, or return the seconds until a slot frees up."""

        with self._lock:
            if self._closed:
                raise RuntimeError("RateGate is closed")
            now = time.monotonic()
            self._expire(now)
            if len(self._timestamps) >= self.occurrences:
                return max(self._timestamps[0] + self.window_seconds - now, 0.01)
            self._timestamps.append(now)
            return 0.0

    def acquire(self) -> None:
        wait = self._try_admit()
        while wait > 0:
            # close() is observed between polls
            time.sleep(min(wait, POLL_INTERVAL_SECONDS))
            wait = self._try_admit()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._timestamps.clear()

    def __enter__(self) -> "RateGate":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["RateGate"]
