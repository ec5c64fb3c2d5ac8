"""SOCKS4 and SOCKS4a wire format, plus the address type shared by the SOCKS modules."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from singlib.rw import read_byte, read_bytes, write_bytes

__all__ = [
    "VERSION",
    "COMMAND_CONNECT",
    "COMMAND_BIND",
    "REPLY_CODE_GRANTED",
    "REPLY_CODE_REJECTED_OR_FAILED",
    "REPLY_CODE_CANNOT_CONNECT_TO_IDENTD",
    "REPLY_CODE_IDENTD_REPORT_DIFFERENT_USER_ID",
    "SocksProtocolError",
    "Socksaddr",
    "Request",
    "Response",
    "read_request",
    "read_request0",
    "write_request",
    "read_response",
    "write_response",
]

VERSION = 4

COMMAND_CONNECT = 1
COMMAND_BIND = 2

REPLY_CODE_GRANTED = 90
REPLY_CODE_REJECTED_OR_FAILED = 91
REPLY_CODE_CANNOT_CONNECT_TO_IDENTD = 92
REPLY_CODE_IDENTD_REPORT_DIFFERENT_USER_ID = 93

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_PORT = struct.Struct(">H")


class SocksProtocolError(Exception):
    """A SOCKS message is malformed or carries an unexpected version."""


@dataclass(frozen=True)
class Socksaddr:
    """A destination given either as an IP address or as a domain name, with a port."""

    addr: Optional[IPAddress] = None
    fqdn: str = ""
    port: int = 0

    def __post_init__(self) -> None:
        if self.addr is not None and not isinstance(
            self.addr, (ipaddress.IPv4Address, ipaddress.IPv6Address)
        ):
            object.__setattr__(self, "addr", ipaddress.ip_address(self.addr))
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    @classmethod
    def from_host_port(cls, host: str, port: int) -> "Socksaddr":
        """An IP address if ``host`` parses as one, a domain name otherwise."""
        try:
            return cls(addr=ipaddress.ip_address(host), port=port)
        except ValueError:
            return cls(fqdn=host, port=port)

    def is_ipv4(self) -> bool:
        return isinstance(self.addr, ipaddress.IPv4Address)

    def is_ipv6(self) -> bool:
        return isinstance(self.addr, ipaddress.IPv6Address)

    def is_fqdn(self) -> bool:
        return self.addr is None and self.fqdn != ""

    def is_valid(self) -> bool:
        return self.addr is not None or self.fqdn != ""

    def addr_string(self) -> str:
        """The host part: the domain name or the textual IP address."""
        if self.is_fqdn():
            return self.fqdn
        return "" if self.addr is None else str(self.addr)

    def __str__(self) -> str:
        host = self.addr_string()
        if self.is_ipv6():
            host = f"[{host}]"
        return f"{host}:{self.port}"


@dataclass
class Request:
    command: int
    destination: Socksaddr = field(default_factory=Socksaddr)
    username: str = ""


@dataclass
class Response:
    reply_code: int
    destination: Socksaddr = field(default_factory=Socksaddr)


def _encode(text: str) -> bytes:
    return text.encode("utf-8", errors="surrogateescape")


def _read_cstring(reader: Any) -> str:
    data = bytearray()
    while True:
        b = read_byte(reader)
        if b == 0:
            return data.decode("utf-8", errors="surrogateescape")
        data.append(b)


def read_request(reader: Any) -> Request:
    """Read a full request, starting with the version byte."""
    version = read_byte(reader)
    if version != VERSION:
        raise SocksProtocolError(f"excepted socks version 4, got {version}")
    return read_request0(reader)


def read_request0(reader: Any) -> Request:
    """Read a request whose version byte has already been consumed."""
    command = read_byte(reader)
    (port,) = _PORT.unpack(read_bytes(reader, 2))
    dst_ip = read_bytes(reader, 4)
    read_host_name = dst_ip[:3] == b"\x00\x00\x00" and dst_ip[3] != 0
    username = _read_cstring(reader)
    if read_host_name:
        destination = Socksaddr.from_host_port(_read_cstring(reader), port)
    else:
        destination = Socksaddr(addr=ipaddress.IPv4Address(dst_ip), port=port)
    return Request(command=command, destination=destination, username=username)


def write_request(writer: Any, request: Request) -> None:
    """Write a request; non-IPv4 destinations use the SOCKS4a host-name form."""
    destination = request.destination
    out = bytearray((VERSION, request.command))
    out += _PORT.pack(destination.port)
    if destination.is_ipv4():
        out += destination.addr.packed
    else:
        out += b"\x00\x00\x00\x01"
    out += _encode(request.username)
    out.append(0)
    if not destination.is_ipv4():
        out += _encode(destination.addr_string())
        out.append(0)
    write_bytes(writer, bytes(out))


def read_response(reader: Any) -> Response:
    version = read_byte(reader)
    if version != 0:
        raise SocksProtocolError(f"excepted socks4 response version 0, got {version}")
    reply_code = read_byte(reader)
    (port,) = _PORT.unpack(read_bytes(reader, 2))
    dst_ip = read_bytes(reader, 4)
    return Response(
        reply_code=reply_code,
        destination=Socksaddr(addr=ipaddress.IPv4Address(dst_ip), port=port),
    )


def write_response(writer: Any, response: Response) -> None:
    destination = response.destination
    out = bytearray((0, response.reply_code))
    out += _PORT.pack(destination.port)
    if destination.addr is not None:
        out += destination.addr.packed
    write_bytes(writer, bytes(out))