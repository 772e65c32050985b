# games/dungeon/ratelimit.py
import threading
import time
from typing import Callable, Dict, Optional


class RateLimiter:
    """Allows one call per key per ``interval`` seconds."""

    def __init__(self, interval: float, clock: Optional[Callable[[], float]] = None) -> None:
        self.interval = float(interval)
        self.clock = clock or time.monotonic
        self._last: Dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self.clock()
        with self._lock:
            last = self._last.get(key)
            if last is not None and now - last < self.interval:
                return False
            self._last[key] = now
            return True

    def forget(self, key: str) -> None:
        with self._lock:
            self._last.pop(key, None)
