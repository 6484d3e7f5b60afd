import threading
import time
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass
class _CacheEntry:
    value: Any
    stored_at: float


@dataclass
class _KeySlot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class QueryCache:
    """In-process result cache with a fixed freshness window.

    Each key has its own lock, held while the loader runs, so there is at most
    one in-flight remote call per key. Failed loads are not cached.

    Stale entries are swept at most once per freshness window. A key's lock is
    dropped together with its entry once no caller holds or waits on it.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, _CacheEntry] = {}
        self._slots: dict[Hashable, _KeySlot] = {}
        self._table_lock = threading.Lock()
        self._last_sweep = clock()

    @contextmanager
    def _holding(self, key: Hashable) -> Iterator[None]:
        with self._table_lock:
            slot = self._slots.get(key)
            if slot is None:
                slot = _KeySlot()
                self._slots[key] = slot
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._table_lock:
                slot.users -= 1
                if slot.users == 0 and key not in self._entries:
                    self._slots.pop(key, None)

    def _fresh(self, entry: _CacheEntry | None) -> bool:
        return entry is not None and (self._clock() - entry.stored_at) < self.ttl_seconds

    def _sweep(self) -> None:
        now = self._clock()
        with self._table_lock:
            if now - self._last_sweep < self.ttl_seconds:
                return
            self._last_sweep = now
            stale = [key for key, entry in self._entries.items() if now - entry.stored_at >= self.ttl_seconds]
            for key in stale:
                del self._entries[key]
                slot = self._slots.get(key)
                if slot is not None and slot.users == 0:
                    del self._slots[key]
        if stale:
            logger.debug(f"query_cache: swept {len(stale)} stale entries")

    def get(self, key: Hashable) -> Any | None:
        entry = self._entries.get(key)
        return entry.value if self._fresh(entry) else None

    def get_or_call(self, key: Hashable, loader: Callable[[], T]) -> T:
        """Return the cached value for key, or run loader and cache its result.

        Args:
            key: Hashable cache key, normally (operation, *params)
            loader: Zero-argument callable performing the remote call

        Returns:
            Cached or freshly loaded value
        """
        self._sweep()
        with self._holding(key):
            entry = self._entries.get(key)
            if self._fresh(entry):
                logger.debug(f"query_cache: hit key={key}")
                return entry.value

            logger.debug(f"query_cache: miss key={key}")
            value = loader()
            with self._table_lock:
                self._entries[key] = _CacheEntry(value=value, stored_at=self._clock())
            return value

    def invalidate(self, key: Hashable) -> None:
        with self._holding(key):
            with self._table_lock:
                self._entries.pop(key, None)

    def clear(self) -> None:
        with self._table_lock:
            self._entries.clear()
            for key in [key for key, slot in self._slots.items() if slot.users == 0]:
                del self._slots[key]
        logger.debug("query_cache: cleared")

    def __len__(self) -> int:
        return len(self._entries)
