"""Byte-level reading and writing helpers, varints and small file utilities."""

from __future__ import annotations

import json
import os
import shutil
import threading
from typing import Any, Optional, Protocol, runtime_checkable

from singlib.common import cast

__all__ = [
    "ZERO_BYTES",
    "MAX_UVARINT",
    "ReadCloser",
    "WriteCloser",
    "ReadCounter",
    "skip",
    "skip_n",
    "read_byte",
    "read_bytes",
    "read_string",
    "write_byte",
    "write_bytes",
    "write_zero",
    "write_zero_n",
    "write_string",
    "read_uvarint",
    "uvarint_len",
    "write_uvarint",
    "write_vstring",
    "read_vstring",
    "file_exists",
    "copy_file",
    "write_file",
    "read_json",
    "write_json",
    "close_read",
    "close_write",
]

ZERO_BYTES = bytes(1024)
MAX_UVARINT = (1 << 64) - 1
_MAX_VARINT_LEN = 10
_SKIP_CHUNK = 32 * 1024


@runtime_checkable
class ReadCloser(Protocol):
    """An object whose read half can be shut down separately."""

    def close_read(self) -> Any: ...


@runtime_checkable
class WriteCloser(Protocol):
    """An object whose write half can be shut down separately."""

    def close_write(self) -> Any: ...


def _read_full(reader: Any, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = reader.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def skip(reader: Any) -> None:
    """Discard one byte from ``reader``."""
    skip_n(reader, 1)


def skip_n(reader: Any, size: int) -> None:
    """Discard exactly ``size`` bytes; ``EOFError`` if the stream ends first."""
    remaining = size
    while remaining > 0:
        chunk = reader.read(min(remaining, _SKIP_CHUNK))
        if not chunk:
            raise EOFError(f"skipped {size - remaining} of {size} bytes")
        remaining -= len(chunk)


def read_byte(reader: Any) -> int:
    """Read a single byte; ``EOFError`` at end of stream."""
    data = reader.read(1)
    if not data:
        raise EOFError("EOF")
    return data[0]


def read_bytes(reader: Any, size: int) -> bytes:
    """Read exactly ``size`` bytes; ``EOFError`` if fewer are available."""
    if size < 0:
        raise ValueError("negative size")
    data = _read_full(reader, size)
    if len(data) < size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def read_string(reader: Any, size: int) -> str:
    """Read exactly ``size`` bytes and decode them as UTF-8."""
    return read_bytes(reader, size).decode("utf-8")


def write_byte(writer: Any, b: int) -> None:
    writer.write(bytes((b,)))


def write_bytes(writer: Any, b: bytes) -> None:
    writer.write(b)


def write_zero(writer: Any) -> None:
    write_byte(writer, 0)


def write_zero_n(writer: Any, size: int) -> None:
    """Write ``size`` zero bytes in chunks of at most 1024."""
    index = 0
    while index < size:
        step = min(len(ZERO_BYTES), size - index)
        writer.write(ZERO_BYTES[:step])
        index += step


def write_string(writer: Any, value: str) -> None:
    write_bytes(writer, value.encode("utf-8"))


def read_uvarint(reader: Any) -> int:
    """Read an unsigned LEB128 varint of at most 64 bits."""
    value = 0
    shift = 0
    for i in range(_MAX_VARINT_LEN):
        try:
            b = read_byte(reader)
        except EOFError:
            if i == 0:
                raise
            raise EOFError("unexpected EOF") from None
        if b < 0x80:
            if i == _MAX_VARINT_LEN - 1 and b > 1:
                raise ValueError("varint overflows a 64-bit integer")
            return value | (b << shift)
        value |= (b & 0x7F) << shift
        shift += 7
    raise ValueError("varint overflows a 64-bit integer")


def uvarint_len(value: int) -> int:
    """Number of bytes the varint encoding of ``value`` takes."""
    length = 1
    while value >= 0x80:
        value >>= 7
        length += 1
    return length


def _encode_uvarint(value: int) -> bytes:
    if value < 0 or value > MAX_UVARINT:
        raise ValueError(f"value out of range for uvarint: {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def write_uvarint(writer: Any, value: int) -> None:
    writer.write(_encode_uvarint(value))


def write_vstring(writer: Any, value: str) -> None:
    """Write a varint byte length followed by the UTF-8 text."""
    data = value.encode("utf-8")
    write_uvarint(writer, len(data))
    write_bytes(writer, data)


def read_vstring(reader: Any) -> str:
    length = read_uvarint(reader)
    return read_bytes(reader, length).decode("utf-8")


def file_exists(path: "os.PathLike[str] | str") -> bool:
    try:
        os.stat(path)
    except OSError:
        return False
    return True


def _ensure_parent(path: "os.PathLike[str] | str") -> None:
    parent = os.path.dirname(os.fspath(path))
    if parent and not file_exists(parent):
        os.makedirs(parent, mode=0o755, exist_ok=True)


def copy_file(src_path: "os.PathLike[str] | str", dst_path: "os.PathLike[str] | str") -> None:
    """Copy a file, creating the destination's directories when missing."""
    with open(src_path, "rb") as src:
        _ensure_parent(dst_path)
        with open(dst_path, "wb") as dst:
            shutil.copyfileobj(src, dst)


def write_file(path: "os.PathLike[str] | str", content: bytes) -> None:
    """Write ``content`` to ``path``, creating parent directories as needed."""
    _ensure_parent(path)
    with open(path, "wb") as file:
        file.write(content)


def read_json(path: "os.PathLike[str] | str") -> Any:
    with open(path, "rb") as file:
        return json.loads(file.read())


_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def write_json(path: "os.PathLike[str] | str", data: Any) -> None:
    """Write ``data`` as compact, HTML-safe JSON."""
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    write_file(path, text.encode("utf-8"))


class ReadCounter:
    """Wraps a reader and counts the bytes read through it."""

    def __init__(self, reader: Any) -> None:
        self._reader = reader
        self._count = 0
        self._lock = threading.Lock()

    def read(self, size: int = -1) -> bytes:
        data = self._reader.read(size)
        if data:
            with self._lock:
                self._count += len(data)
        return data

    def count(self) -> int:
        with self._lock:
            return self._count

    def reset(self) -> None:
        with self._lock:
            self._count = 0


def close_read(reader: Any) -> Optional[Any]:
    """Close the read half of the first object in the chain that supports it."""
    closer = cast(reader, ReadCloser)
    if closer is not None:
        return closer.close_read()
    return None


def close_write(writer: Any) -> Optional[Any]:
    """Close the write half of the first object in the chain that supports it."""
    closer = cast(writer, WriteCloser)
    if closer is not None:
        return closer.close_write()
    return None