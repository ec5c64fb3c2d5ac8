"""Random number sources backed by a byte stream."""

from __future__ import annotations

import os
import threading
from typing import Any, Optional

from singlib.rw import read_bytes

__all__ = ["RNG_MAX", "RNG_MASK", "Source", "SyncReader"]

RNG_MAX = 1 << 63
RNG_MASK = RNG_MAX - 1

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class Source:
    """Draws integers from a reader, or from ``os.urandom`` when none is given."""

    def __init__(self, reader: Optional[Any] = None) -> None:
        self._reader = reader

    def _read8(self) -> bytes:
        if self._reader is None:
            return os.urandom(8)
        return read_bytes(self._reader, 8)

    def int63(self) -> int:
        """A non-negative integer below 2**63."""
        return self.int64() & RNG_MASK

    def int64(self) -> int:
        """A signed 64-bit integer read big-endian."""
        return int.from_bytes(self._read8(), "big", signed=True)

    def uint64(self) -> int:
        """An unsigned 64-bit integer read big-endian."""
        return int.from_bytes(self._read8(), "big", signed=False)

    def seed(self, value: int) -> None:
        """Accept a 64-bit seed; the stream-backed output does not depend on it.

        Raises TypeError for a non-integer and OverflowError for a value
        outside the signed 64-bit range.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"seed must be an integer, not {type(value).__name__}")
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise OverflowError(f"seed {value} is outside the signed 64-bit range")


class SyncReader:
    """Serialises reads from a shared reader."""

    def __init__(self, reader: Any) -> None:
        self._reader = reader
        self._lock = threading.Lock()

    def read(self, size: int = -1) -> bytes:
        with self._lock:
            return self._reader.read(size)