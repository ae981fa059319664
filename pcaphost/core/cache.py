import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple


class DedupCache:
    """
    Bounded address -> host map whose entries expire `ttl` seconds after
    their last write.

    - Overflow evicts the least recently used entry.
    - `timer` returns seconds; tests pass a fake clock.
    - All access goes through an internal lock.

    Lookups are advisory: an evicted or expired address simply shows up
    again, and the repository drops the duplicate write.
    """

    def __init__(
        self,
        maxsize: int = 10_000,
        ttl: float = 300.0,
        *,
        timer: Callable[[], float] = time.monotonic,
    ):
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        self.maxsize = maxsize
        self.ttl = ttl
        self._timer = timer
        self._lock = threading.Lock()
        # key -> (value, expires_at); order is least -> most recently used
        self._entries: "OrderedDict[str, Tuple[str, float]]" = OrderedDict()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if self._timer() >= expires_at:
                del self._entries[key]
                return default
            self._entries.move_to_end(key)
            return value

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._entries[key] = (value, self._timer() + self.ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def expire(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            now = self._timer()
            stale = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
            for k in stale:
                del self._entries[k]
            return len(stale)

    def __len__(self) -> int:
        self.expire()
        with self._lock:
            return len(self._entries)
