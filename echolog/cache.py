"""In-process TTL cache for generated annotations."""

import threading
import time
from dataclasses import dataclass
from hashlib import sha256
from typing import Any, Callable

from loguru import logger


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Key-value cache whose entries expire after a per-entry time to live.

    Expired entries are dropped lazily on read and in bulk by ``sweep``. The sweep
    only runs periodically if ``start_sweeper`` was called.
    """

    def __init__(
        self, default_ttl_seconds: float = 3600, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: threading.Thread | None = None
        self._stop_sweeping = threading.Event()

    @staticmethod
    def make_key(prefix: str, content: str) -> str:
        """Build a cache key from a prefix and the hash of the content."""
        return f"{prefix}:{sha256(content.encode()).hexdigest()}"

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def sweep(self) -> int:
        """Drop every expired entry. Returns the number of entries removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def start_sweeper(self, interval_seconds: float) -> None:
        """Sweep expired entries every ``interval_seconds`` on a background thread."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return
        self._stop_sweeping.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop, args=(interval_seconds,), name="cache-sweeper", daemon=True
        )
        self._sweeper.start()

    def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._stop_sweeping.set()
        self._sweeper.join()
        self._sweeper = None

    def _sweep_loop(self, interval_seconds: float) -> None:
        while not self._stop_sweeping.wait(interval_seconds):
            self.sweep()
