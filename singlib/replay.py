"""Replay filters that reject salts seen within a time window."""

from __future__ import annotations

import abc
import threading
import time
from typing import Callable, Dict

__all__ = ["Filter", "SimpleFilter"]


class Filter(abc.ABC):
    """Decides whether a salt is fresh."""

    @abc.abstractmethod
    def check(self, salt: bytes) -> bool:
        """Record ``salt``; return ``True`` if it has not been seen recently."""


class SimpleFilter(Filter):
    """A dictionary of salts that expire after ``timeout`` seconds.

    Expired entries are purged at most once per ``timeout``.
    """

    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._timeout = timeout
        self._clock = clock
        self._last_clean = clock()
        self._pool: Dict[bytes, float] = {}
        self._lock = threading.Lock()

    def check(self, salt: bytes) -> bool:
        now = self._clock()
        key = bytes(salt)
        with self._lock:
            if now - self._last_clean > self._timeout:
                self._pool = {
                    seen: added
                    for seen, added in self._pool.items()
                    if now - added <= self._timeout
                }
                exists = key in self._pool
                self._last_clean = now
            else:
                added = self._pool.get(key)
                exists = added is not None and now - added <= self._timeout
            if not exists:
                self._pool[key] = now
            return not exists