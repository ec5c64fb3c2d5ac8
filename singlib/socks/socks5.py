"""SOCKS5 wire format: method negotiation, password authentication, requests and replies."""

from __future__ import annotations

import ipaddress
import struct
from dataclasses import dataclass, field
from typing import Any

from singlib.rw import read_byte, read_bytes, skip, write_bytes
from singlib.socks.socks4 import SocksProtocolError, Socksaddr

__all__ = [
    "VERSION",
    "AUTH_TYPE_NOT_REQUIRED",
    "AUTH_TYPE_GSSAPI",
    "AUTH_TYPE_USERNAME_PASSWORD",
    "AUTH_TYPE_NO_ACCEPTED_METHODS",
    "USERNAME_PASSWORD_STATUS_SUCCESS",
    "USERNAME_PASSWORD_STATUS_FAILURE",
    "COMMAND_CONNECT",
    "COMMAND_BIND",
    "COMMAND_UDP_ASSOCIATE",
    "REPLY_CODE_SUCCESS",
    "REPLY_CODE_FAILURE",
    "REPLY_CODE_NOT_ALLOWED",
    "REPLY_CODE_NETWORK_UNREACHABLE",
    "REPLY_CODE_HOST_UNREACHABLE",
    "REPLY_CODE_CONNECTION_REFUSED",
    "REPLY_CODE_TTL_EXPIRED",
    "REPLY_CODE_UNSUPPORTED",
    "REPLY_CODE_ADDRESS_TYPE_UNSUPPORTED",
    "ADDRESS_TYPE_IPV4",
    "ADDRESS_TYPE_FQDN",
    "ADDRESS_TYPE_IPV6",
    "AuthRequest",
    "AuthResponse",
    "UsernamePasswordAuthRequest",
    "UsernamePasswordAuthResponse",
    "Request",
    "Response",
    "read_address",
    "write_address",
    "write_auth_request",
    "read_auth_request",
    "read_auth_request0",
    "write_auth_response",
    "read_auth_response",
    "write_username_password_auth_request",
    "read_username_password_auth_request",
    "write_username_password_auth_response",
    "read_username_password_auth_response",
    "write_request",
    "read_request",
    "write_response",
    "read_response",
]

VERSION = 5

AUTH_TYPE_NOT_REQUIRED = 0x00
AUTH_TYPE_GSSAPI = 0x01
AUTH_TYPE_USERNAME_PASSWORD = 0x02
AUTH_TYPE_NO_ACCEPTED_METHODS = 0xFF

USERNAME_PASSWORD_STATUS_SUCCESS = 0x00
USERNAME_PASSWORD_STATUS_FAILURE = 0x01

COMMAND_CONNECT = 0x01
COMMAND_BIND = 0x02
COMMAND_UDP_ASSOCIATE = 0x03

REPLY_CODE_SUCCESS = 0
REPLY_CODE_FAILURE = 1
REPLY_CODE_NOT_ALLOWED = 2
REPLY_CODE_NETWORK_UNREACHABLE = 3
REPLY_CODE_HOST_UNREACHABLE = 4
REPLY_CODE_CONNECTION_REFUSED = 5
REPLY_CODE_TTL_EXPIRED = 6
REPLY_CODE_UNSUPPORTED = 7
REPLY_CODE_ADDRESS_TYPE_UNSUPPORTED = 8

ADDRESS_TYPE_IPV4 = 0x01
ADDRESS_TYPE_FQDN = 0x03
ADDRESS_TYPE_IPV6 = 0x04

_PASSWORD_AUTH_VERSION = 1
_PORT = struct.Struct(">H")


def _encode(text: str) -> bytes:
    return text.encode("utf-8", errors="surrogateescape")


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="surrogateescape")


def _socks_string(text: str) -> bytes:
    data = _encode(text)
    if len(data) > 255:
        raise ValueError(f"string too long for SOCKS: {len(data)} bytes")
    return bytes((len(data),)) + data


def _read_socks_string(reader: Any) -> str:
    length = read_byte(reader)
    return _decode(read_bytes(reader, length))


def _encode_address(address: Socksaddr) -> bytes:
    if address.is_ipv4():
        head = bytes((ADDRESS_TYPE_IPV4,)) + address.addr.packed
    elif address.is_ipv6():
        head = bytes((ADDRESS_TYPE_IPV6,)) + address.addr.packed
    elif address.is_fqdn():
        head = bytes((ADDRESS_TYPE_FQDN,)) + _socks_string(address.fqdn)
    else:
        raise ValueError("invalid socks address")
    return head + _PORT.pack(address.port)


def _expect_version(reader: Any) -> None:
    version = read_byte(reader)
    if version != VERSION:
        raise SocksProtocolError(f"expected socks version 5, got {version}")


def _expect_password_version(reader: Any) -> None:
    version = read_byte(reader)
    if version != _PASSWORD_AUTH_VERSION:
        raise SocksProtocolError(f"excepted password request version 1, got {version}")


def read_address(reader: Any) -> Socksaddr:
    """Read ATYP, address and port."""
    address_type = read_byte(reader)
    if address_type == ADDRESS_TYPE_IPV4:
        addr = ipaddress.IPv4Address(read_bytes(reader, 4))
        (port,) = _PORT.unpack(read_bytes(reader, 2))
        return Socksaddr(addr=addr, port=port)
    if address_type == ADDRESS_TYPE_IPV6:
        addr6 = ipaddress.IPv6Address(read_bytes(reader, 16))
        (port,) = _PORT.unpack(read_bytes(reader, 2))
        return Socksaddr(addr=addr6, port=port)
    if address_type == ADDRESS_TYPE_FQDN:
        host = _read_socks_string(reader)
        (port,) = _PORT.unpack(read_bytes(reader, 2))
        return Socksaddr.from_host_port(host, port)
    raise SocksProtocolError(f"unknown address type: {address_type}")


def write_address(writer: Any, address: Socksaddr) -> None:
    """Write ATYP, address and port."""
    write_bytes(writer, _encode_address(address))


@dataclass
class AuthRequest:
    methods: bytes = b""


@dataclass
class AuthResponse:
    method: int


@dataclass
class UsernamePasswordAuthRequest:
    username: str
    password: str


@dataclass
class UsernamePasswordAuthResponse:
    status: int


@dataclass
class Request:
    command: int
    destination: Socksaddr = field(default_factory=Socksaddr)


@dataclass
class Response:
    reply_code: int
    bind: Socksaddr = field(default_factory=Socksaddr)


def write_auth_request(writer: Any, request: AuthRequest) -> None:
    methods = bytes(request.methods)
    if len(methods) > 255:
        raise ValueError("too many authentication methods")
    write_bytes(writer, bytes((VERSION, len(methods))) + methods)


def read_auth_request(reader: Any) -> AuthRequest:
    _expect_version(reader)
    return read_auth_request0(reader)


def read_auth_request0(reader: Any) -> AuthRequest:
    """Read a method negotiation whose version byte has already been consumed."""
    count = read_byte(reader)
    return AuthRequest(methods=read_bytes(reader, count))


def write_auth_response(writer: Any, response: AuthResponse) -> None:
    write_bytes(writer, bytes((VERSION, response.method)))


def read_auth_response(reader: Any) -> AuthResponse:
    _expect_version(reader)
    return AuthResponse(method=read_byte(reader))


def write_username_password_auth_request(writer: Any, request: UsernamePasswordAuthRequest) -> None:
    data = (
        bytes((_PASSWORD_AUTH_VERSION,))
        + _socks_string(request.username)
        + _socks_string(request.password)
    )
    write_bytes(writer, data)


def read_username_password_auth_request(reader: Any) -> UsernamePasswordAuthRequest:
    _expect_password_version(reader)
    username = _read_socks_string(reader)
    secret = _read_socks_string(reader)
    return UsernamePasswordAuthRequest(username=username, password=secret)


def write_username_password_auth_response(writer: Any, response: UsernamePasswordAuthResponse) -> None:
    write_bytes(writer, bytes((_PASSWORD_AUTH_VERSION, response.status)))


def read_username_password_auth_response(reader: Any) -> UsernamePasswordAuthResponse:
    _expect_password_version(reader)
    return UsernamePasswordAuthResponse(status=read_byte(reader))


def write_request(writer: Any, request: Request) -> None:
    data = bytes((VERSION, request.command, 0)) + _encode_address(request.destination)
    write_bytes(writer, data)


def read_request(reader: Any) -> Request:
    _expect_version(reader)
    command = read_byte(reader)
    skip(reader)
    return Request(command=command, destination=read_address(reader))


def write_response(writer: Any, response: Response) -> None:
    """Write a reply; an unset bind address is sent as ``0.0.0.0:0``."""
    bind = response.bind if response.bind.is_valid() else Socksaddr(addr=ipaddress.IPv4Address(0))
    data = bytes((VERSION, response.reply_code, 0)) + _encode_address(bind)
    write_bytes(writer, data)


def read_response(reader: Any) -> Response:
    _expect_version(reader)
    reply_code = read_byte(reader)
    skip(reader)
    return Response(reply_code=reply_code, bind=read_address(reader))