"""Bounded memoisation of decoded mask strings."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional

from .decode import mstring, widen
from .table import EncodedTable

LOGGER = logging.getLogger(__name__)

CACHE_CAPACITY = 256

Decoder = Callable[[EncodedTable, int], str]


class ReadWriteLock:
    """Lock allowing many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class BoundedCache:
    """Mask to string memo that is emptied whenever it reaches ``capacity``.

    There is no per-entry eviction: once full, the next insertion starts over
    from an empty mapping.  Concurrent misses for the same key may both compute
    and store; the last write wins.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("cache capacity must be positive")
        self.capacity = capacity
        self._entries: Dict[int, str] = {}
        self._lock = ReadWriteLock()
        self.flushes = 0

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock.read_locked():
            return key in self._entries

    def lookup(self, key: int) -> Optional[str]:
        with self._lock.read_locked():
            return self._entries.get(key)

    def store(self, key: int, value: str) -> None:
        with self._lock.write_locked():
            if len(self._entries) >= self.capacity:
                LOGGER.debug("flushing mask cache at %d entries", len(self._entries))
                self._entries = {}
                self.flushes += 1
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock.write_locked():
            self._entries = {}


def cached_mstring(
    cache: BoundedCache,
    table: EncodedTable,
    mask: int,
    decode: Decoder = mstring,
) -> str:
    """Return ``decode(table, mask)`` memoised in ``cache``."""

    mask = widen(mask)
    if mask == 0:
        return table.zero_name
    value = cache.lookup(mask)
    if value is not None:
        return value
    value = decode(table, mask)
    cache.store(mask, value)
    return value


__all__ = ["CACHE_CAPACITY", "BoundedCache", "ReadWriteLock", "cached_mstring"]
