"""Network names, wrapper unwrapping, headroom and MTU discovery, local addresses."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any, List, Optional, Protocol, Union, runtime_checkable

import psutil

from singlib.common import WithUpstream, cast

__all__ = [
    "NETWORK_IP",
    "NETWORK_TCP",
    "NETWORK_UDP",
    "NETWORK_ICMPV4",
    "NETWORK_ICMPV6",
    "DEFAULT_HEADROOM",
    "UnknownNetworkError",
    "Reader",
    "Writer",
    "PacketReader",
    "PacketWriter",
    "WithUpstreamReader",
    "WithUpstreamWriter",
    "ReaderWithUpstream",
    "WriterWithUpstream",
    "ThreadUnsafeWriter",
    "ThreadSafeReader",
    "ThreadSafePacketReader",
    "FrontHeadroom",
    "RearHeadroom",
    "LazyHeadroom",
    "ReaderWithMTU",
    "WriterWithMTU",
    "network_name",
    "unwrap_reader",
    "unwrap_packet_reader",
    "unwrap_writer",
    "unwrap_packet_writer",
    "is_unsafe_writer",
    "is_safe_reader",
    "is_safe_packet_reader",
    "calculate_front_headroom",
    "calculate_rear_headroom",
    "calculate_mtu",
    "local_addrs",
    "is_public_addr",
    "is_virtual",
    "local_public_addrs",
]

NETWORK_IP = "ip"
NETWORK_TCP = "tcp"
NETWORK_UDP = "udp"
NETWORK_ICMPV4 = "icmpv4"
NETWORK_ICMPV6 = "icmpv6"

DEFAULT_HEADROOM = 1024

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class UnknownNetworkError(ValueError):
    """The network name is not one that is supported."""


@runtime_checkable
class Reader(Protocol):
    def read(self, size: int = -1) -> bytes: ...


@runtime_checkable
class Writer(Protocol):
    def write(self, data: bytes) -> Any: ...


@runtime_checkable
class PacketReader(Protocol):
    def read_packet(self, buffer: Any) -> Any: ...


@runtime_checkable
class PacketWriter(Protocol):
    def write_packet(self, buffer: Any, destination: Any) -> Any: ...


@runtime_checkable
class WithUpstreamReader(Protocol):
    def upstream_reader(self) -> Any: ...


@runtime_checkable
class WithUpstreamWriter(Protocol):
    def upstream_writer(self) -> Any: ...


@runtime_checkable
class ReaderWithUpstream(Protocol):
    def reader_replaceable(self) -> bool: ...


@runtime_checkable
class WriterWithUpstream(Protocol):
    def writer_replaceable(self) -> bool: ...


@runtime_checkable
class ThreadUnsafeWriter(Protocol):
    def write_is_thread_unsafe(self) -> Any: ...


@runtime_checkable
class ThreadSafeReader(Protocol):
    def read_buffer_thread_safe(self) -> Any: ...


@runtime_checkable
class ThreadSafePacketReader(Protocol):
    def read_packet_thread_safe(self) -> Any: ...


@runtime_checkable
class FrontHeadroom(Protocol):
    def front_headroom(self) -> int: ...


@runtime_checkable
class RearHeadroom(Protocol):
    def rear_headroom(self) -> int: ...


@runtime_checkable
class LazyHeadroom(Protocol):
    def lazy_headroom(self) -> bool: ...


@runtime_checkable
class ReaderWithMTU(Protocol):
    def reader_mtu(self) -> int: ...


@runtime_checkable
class WriterWithMTU(Protocol):
    def writer_mtu(self) -> int: ...


def network_name(network: str) -> str:
    """Reduce names such as ``tcp4`` or ``udp6`` to their base network."""
    for base in (NETWORK_TCP, NETWORK_UDP, NETWORK_IP):
        if network.startswith(base):
            return base
    return network


def _require(obj: Any, kind: type, what: str) -> Any:
    if not isinstance(obj, kind):
        raise TypeError(f"upstream {type(obj).__name__} is not a {what}")
    return obj


def _unwrap_read_side(reader: Any, kind: type, what: str) -> Any:
    current = reader
    while True:
        if not isinstance(current, ReaderWithUpstream) or not current.reader_replaceable():
            return current
        if isinstance(current, WithUpstreamReader):
            current = _require(current.upstream_reader(), kind, what)
        elif isinstance(current, WithUpstream):
            current = _require(current.upstream(), kind, what)
        else:
            raise ValueError("bad reader")


def _unwrap_write_side(writer: Any, kind: type, what: str) -> Any:
    current = writer
    while True:
        if not isinstance(current, WriterWithUpstream) or not current.writer_replaceable():
            return current
        if isinstance(current, WithUpstreamWriter):
            current = _require(current.upstream_writer(), kind, what)
        elif isinstance(current, WithUpstream):
            current = _require(current.upstream(), kind, what)
        else:
            raise ValueError("bad writer")


def unwrap_reader(reader: Any) -> Any:
    """Follow replaceable wrappers down to the innermost stream reader."""
    return _unwrap_read_side(reader, Reader, "reader")


def unwrap_packet_reader(reader: Any) -> Any:
    """Follow replaceable wrappers down to the innermost packet reader."""
    return _unwrap_read_side(reader, PacketReader, "packet reader")


def unwrap_writer(writer: Any) -> Any:
    """Follow replaceable wrappers down to the innermost stream writer."""
    return _unwrap_write_side(writer, Writer, "writer")


def unwrap_packet_writer(writer: Any) -> Any:
    """Follow replaceable wrappers down to the innermost packet writer."""
    return _unwrap_write_side(writer, PacketWriter, "packet writer")


def is_unsafe_writer(writer: Any) -> bool:
    """Whether any object along the upstream chain is marked thread-unsafe."""
    return cast(writer, ThreadUnsafeWriter) is not None


def _find_safe(reader: Any, kind: type) -> Optional[Any]:
    current = reader
    while True:
        if isinstance(current, kind):
            return current
        if not isinstance(current, ReaderWithUpstream) or not current.reader_replaceable():
            return None
        if isinstance(current, WithUpstream):
            current = current.upstream()
        elif isinstance(current, WithUpstreamReader):
            current = current.upstream_reader()
        else:
            return None


def is_safe_reader(reader: Any) -> Optional[Any]:
    """The thread-safe reader reachable through replaceable wrappers, if any."""
    return _find_safe(reader, ThreadSafeReader)


def is_safe_packet_reader(reader: Any) -> Optional[Any]:
    """The thread-safe packet reader reachable through replaceable wrappers, if any."""
    return _find_safe(reader, ThreadSafePacketReader)


def _next_writer(writer: Any) -> Any:
    if isinstance(writer, WithUpstreamWriter):
        return writer.upstream_writer()
    if isinstance(writer, WithUpstream):
        return writer.upstream()
    return None


def _next_reader(reader: Any) -> Any:
    if isinstance(reader, WithUpstreamReader):
        return reader.upstream_reader()
    if isinstance(reader, WithUpstream):
        return reader.upstream()
    return None


def _calculate_headroom(writer: Any, kind: type, attribute: str) -> int:
    headroom = 0
    while writer is not None:
        if isinstance(writer, LazyHeadroom) and writer.lazy_headroom():
            return DEFAULT_HEADROOM
        if isinstance(writer, kind):
            headroom += getattr(writer, attribute)()
        writer = _next_writer(writer)
    return headroom


def calculate_front_headroom(writer: Any) -> int:
    """Sum of front headroom required along the writer chain."""
    return _calculate_headroom(writer, FrontHeadroom, "front_headroom")


def calculate_rear_headroom(writer: Any) -> int:
    """Sum of rear headroom required along the writer chain."""
    return _calculate_headroom(writer, RearHeadroom, "rear_headroom")


def _calculate_reader_mtu(reader: Any) -> int:
    mtu = 0
    while reader is not None:
        if isinstance(reader, LazyHeadroom) and reader.lazy_headroom():
            return 0
        if isinstance(reader, ReaderWithMTU):
            mtu = max(mtu, reader.reader_mtu())
        reader = _next_reader(reader)
    return mtu


def _calculate_writer_mtu(writer: Any) -> int:
    mtu = 0
    while writer is not None:
        if isinstance(writer, LazyHeadroom) and writer.lazy_headroom():
            return 0
        if isinstance(writer, WriterWithMTU):
            upstream_mtu = writer.writer_mtu()
            if mtu == 0 or 0 < upstream_mtu < mtu:
                mtu = upstream_mtu
        writer = _next_writer(writer)
    return mtu


def calculate_mtu(reader: Any, writer: Any, buffer_size: int) -> int:
    """The MTU to use between ``reader`` and ``writer``; 0 means no limit applies."""
    reader_mtu = _calculate_reader_mtu(reader)
    writer_mtu = _calculate_writer_mtu(writer)
    if reader_mtu > writer_mtu:
        return reader_mtu
    if writer_mtu > buffer_size:
        return 0
    return writer_mtu


def local_addrs() -> List[IPAddress]:
    """IP addresses assigned to this machine's interfaces."""
    result: List[IPAddress] = []
    for entries in psutil.net_if_addrs().values():
        for entry in entries:
            if entry.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            text = entry.address.split("%", 1)[0]
            try:
                result.append(ipaddress.ip_address(text))
            except ValueError:
                continue
    return result


_PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("fc00::/7"),
)


def _to_addr(addr: Any) -> IPAddress:
    if isinstance(addr, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return addr
    return ipaddress.ip_address(addr)


def _is_private(addr: IPAddress) -> bool:
    return any(addr.version == net.version and addr in net for net in _PRIVATE_NETWORKS)


def _is_interface_local_multicast(addr: IPAddress) -> bool:
    return addr.version == 6 and (int(addr) >> 112) & 0xFF0F == 0xFF01


def is_public_addr(addr: Any) -> bool:
    """Whether ``addr`` is none of private, loopback, multicast, link-local or unspecified."""
    ip = _to_addr(addr)
    return not (
        _is_private(ip)
        or ip.is_loopback
        or ip.is_multicast
        or ip.is_link_local
        or _is_interface_local_multicast(ip)
        or ip.is_unspecified
    )


def is_virtual(addr: Any) -> bool:
    """Whether ``addr`` is loopback or multicast."""
    ip = _to_addr(addr)
    return ip.is_loopback or ip.is_multicast or _is_interface_local_multicast(ip)


def local_public_addrs() -> List[IPAddress]:
    """The local interface addresses that are public."""
    return [addr for addr in local_addrs() if is_public_addr(addr)]