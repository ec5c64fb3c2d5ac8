"""Client-side SOCKS4/4a and SOCKS5 handshakes and protocol version names."""

from __future__ import annotations

import enum
from typing import Any, Optional

from singlib.socks import socks4, socks5
from singlib.socks.socks4 import Socksaddr

__all__ = [
    "Version",
    "parse_version",
    "HandshakeError",
    "client_handshake4",
    "client_handshake5",
]


class Version(enum.IntEnum):
    """SOCKS protocol versions a client can speak."""

    V4 = 0
    V4A = 1
    V5 = 2

    def __str__(self) -> str:
        return _VERSION_NAMES[self]


_VERSION_NAMES = {Version.V4: "4", Version.V4A: "4a", Version.V5: "5"}
_VERSIONS_BY_NAME = {name: version for version, name in _VERSION_NAMES.items()}


def parse_version(version: str) -> Version:
    """Parse ``"4"``, ``"4a"`` or ``"5"``; ``ValueError`` for anything else."""
    try:
        return _VERSIONS_BY_NAME[version]
    except KeyError:
        raise ValueError(f"unknown socks version: {version}") from None


class HandshakeError(Exception):
    """The server refused the handshake.

    ``response`` holds the server's reply when one was received.
    """

    def __init__(self, message: str, response: Optional[Any] = None) -> None:
        super().__init__(message)
        self.response = response


def client_handshake4(
    conn: Any, command: int, destination: Socksaddr, username: str = ""
) -> socks4.Response:
    """Send a SOCKS4 request over ``conn`` and return the granted reply."""
    socks4.write_request(
        conn,
        socks4.Request(command=command, destination=destination, username=username),
    )
    response = socks4.read_response(conn)
    if response.reply_code != socks4.REPLY_CODE_GRANTED:
        raise HandshakeError(
            f"socks4: request rejected, code= {response.reply_code}", response
        )
    return response


def client_handshake5(
    conn: Any,
    command: int,
    destination: Socksaddr,
    username: str = "",
    password: str = "",
) -> socks5.Response:
    """Negotiate, authenticate if asked, send a SOCKS5 request and return the reply."""
    method = (
        socks5.AUTH_TYPE_NOT_REQUIRED
        if username == ""
        else socks5.AUTH_TYPE_USERNAME_PASSWORD
    )
    socks5.write_auth_request(conn, socks5.AuthRequest(methods=bytes((method,))))
    auth_response = socks5.read_auth_response(conn)
    if auth_response.method == socks5.AUTH_TYPE_USERNAME_PASSWORD:
        socks5.write_username_password_auth_request(
            conn,
            socks5.UsernamePasswordAuthRequest(username=username, password=password),
        )
        status = socks5.read_username_password_auth_response(conn)
        if status.status != socks5.USERNAME_PASSWORD_STATUS_SUCCESS:
            raise HandshakeError("socks5: incorrect user name or password")
    elif auth_response.method != socks5.AUTH_TYPE_NOT_REQUIRED:
        raise HandshakeError(
            f"socks5: unsupported auth method: {auth_response.method}"
        )
    socks5.write_request(conn, socks5.Request(command=command, destination=destination))
    response = socks5.read_response(conn)
    if response.reply_code != socks5.REPLY_CODE_SUCCESS:
        raise HandshakeError(
            f"socks5: request rejected, code={response.reply_code}", response
        )
    return response