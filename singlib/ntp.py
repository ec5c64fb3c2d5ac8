"""A simple SNTP client: packet layout, timestamp conversion and response checks."""

from __future__ import annotations

import enum
import os
import socket
import struct
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

__all__ = [
    "NtpError",
    "LeapIndicator",
    "Mode",
    "SECOND",
    "NTP_EPOCH",
    "NTP_PORT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_NTP_VERSION",
    "MAX_STRATUM",
    "MAX_POLL_INTERVAL",
    "MAX_DISPERSION",
    "ntp_duration",
    "ntp_time",
    "to_ntp_time",
    "ntp_short_duration",
    "Message",
    "Response",
    "parse_time",
    "exchange",
]

SECOND = 1_000_000_000
"""One second in nanoseconds; every duration in this module is in nanoseconds."""

NTP_EPOCH = datetime(1900, 1, 1, tzinfo=timezone.utc)
NTP_PORT = 123
DEFAULT_TIMEOUT = 5.0
DEFAULT_NTP_VERSION = 4
MAX_STRATUM = 16
MAX_POLL_INTERVAL = (1 << 17) * SECOND
MAX_DISPERSION = 16 * SECOND

_MASK64 = (1 << 64) - 1
_MAX_INT64 = (1 << 63) - 1
_PACKET = struct.Struct(">BBbbIIIQQQQ")
_MICROSECOND = timedelta(microseconds=1)
_UNIX_OFFSET_NS = (datetime(1970, 1, 1, tzinfo=timezone.utc) - NTP_EPOCH) // _MICROSECOND * 1000


class NtpError(Exception):
    """An NTP packet is malformed or a response is unfit for synchronisation."""


class LeapIndicator(enum.IntEnum):
    """Warns of a leap second in the last minute of the current month."""

    NO_WARNING = 0
    ADD_SECOND = 1
    DEL_SECOND = 2
    NOT_IN_SYNC = 3


class Mode(enum.IntEnum):
    """NTP association modes; a client only ever sends ``CLIENT``."""

    RESERVED = 0
    SYMMETRIC_ACTIVE = 1
    SYMMETRIC_PASSIVE = 2
    CLIENT = 3
    SERVER = 4
    BROADCAST = 5
    CONTROL_MESSAGE = 6
    RESERVED_PRIVATE = 7


def _to_int64(value: int) -> int:
    value &= _MASK64
    return value - (1 << 64) if value > _MAX_INT64 else value


def _half(value: int) -> int:
    """Integer halving that truncates toward zero."""
    return -((-value) // 2) if value < 0 else value // 2


def ntp_duration(value: int) -> int:
    """Nanoseconds represented by a Q32.32 fixed-point NTP timestamp."""
    value &= _MASK64
    sec = (value >> 32) * SECOND
    frac = (value & 0xFFFFFFFF) * SECOND
    nsec = frac >> 32
    if frac & 0xFFFFFFFF >= 0x80000000:
        nsec += 1
    return sec + nsec


def ntp_time(value: int) -> datetime:
    """The UTC moment a Q32.32 NTP timestamp denotes, to the microsecond."""
    return NTP_EPOCH + timedelta(microseconds=ntp_duration(value) // 1000)


def _ntp_from_nanos(nsec: int) -> int:
    sec = nsec // SECOND
    remainder = (nsec - sec * SECOND) << 32
    frac = remainder // SECOND
    if remainder % SECOND >= SECOND // 2:
        frac += 1
    return ((sec << 32) | frac) & _MASK64


def _ntp_from_unix_ns(unix_ns: int) -> int:
    return _ntp_from_nanos(unix_ns + _UNIX_OFFSET_NS)


def to_ntp_time(moment: datetime) -> int:
    """Convert ``moment`` to a Q32.32 NTP timestamp; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    nsec = (moment - NTP_EPOCH) // _MICROSECOND * 1000
    if nsec < 0:
        raise ValueError("moment precedes the NTP epoch")
    return _ntp_from_nanos(min(nsec, _MAX_INT64))


def ntp_short_duration(value: int) -> int:
    """Nanoseconds represented by a Q16.16 fixed-point NTP short value."""
    value &= 0xFFFFFFFF
    sec = (value >> 16) * SECOND
    frac = (value & 0xFFFF) * SECOND
    nsec = frac >> 16
    if frac & 0xFFFF >= 0x8000:
        nsec += 1
    return sec + nsec


@dataclass
class Message:
    """The 48-byte NTP packet."""

    li_vn_mode: int = 0
    stratum: int = 0
    poll: int = 0
    precision: int = 0
    root_delay: int = 0
    root_dispersion: int = 0
    reference_id: int = 0
    reference_time: int = 0
    origin_time: int = 0
    receive_time: int = 0
    transmit_time: int = 0

    def set_version(self, version: int) -> None:
        self.li_vn_mode = ((self.li_vn_mode & 0xC7) | (version << 3)) & 0xFF

    def set_mode(self, mode: Mode) -> None:
        self.li_vn_mode = ((self.li_vn_mode & 0xF8) | int(mode)) & 0xFF

    def set_leap(self, leap: LeapIndicator) -> None:
        self.li_vn_mode = ((self.li_vn_mode & 0x3F) | (int(leap) << 6)) & 0xFF

    def version(self) -> int:
        return (self.li_vn_mode >> 3) & 0x07

    def mode(self) -> Mode:
        return Mode(self.li_vn_mode & 0x07)

    def leap(self) -> LeapIndicator:
        return LeapIndicator((self.li_vn_mode >> 6) & 0x03)

    def pack(self) -> bytes:
        """Encode the packet in network byte order."""
        try:
            return _PACKET.pack(
                self.li_vn_mode,
                self.stratum,
                self.poll,
                self.precision,
                self.root_delay,
                self.root_dispersion,
                self.reference_id,
                self.reference_time,
                self.origin_time,
                self.receive_time,
                self.transmit_time,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "Message":
        """Decode the first 48 bytes of ``data``; ``NtpError`` if it is shorter."""
        if len(data) < _PACKET.size:
            raise NtpError(f"short NTP packet: {len(data)} bytes")
        return cls(*_PACKET.unpack_from(data))


@dataclass
class Response:
    """Time data from a server plus values derived by the client.

    Durations are integer nanoseconds.
    """

    time: datetime
    clock_offset: int
    rtt: int
    precision: int
    stratum: int
    reference_id: int
    reference_time: datetime
    root_delay: int
    root_dispersion: int
    root_distance: int
    leap: LeapIndicator
    min_error: int
    poll: int
    kiss_code: str = ""

    def validate(self) -> None:
        """Raise ``NtpError`` if the response is unfit for synchronisation."""
        if self.stratum == 0:
            raise NtpError(f"kiss of death received: {self.kiss_code}")
        if self.stratum >= MAX_STRATUM:
            raise NtpError("invalid stratum in response")
        if self.leap == LeapIndicator.NOT_IN_SYNC:
            raise NtpError("invalid leap second")
        freshness = self.time - self.reference_time
        if freshness > timedelta(microseconds=MAX_POLL_INTERVAL // 1000):
            raise NtpError("server clock not fresh")
        if _half(self.root_delay) + self.root_dispersion > MAX_DISPERSION:
            raise NtpError("invalid dispersion")
        if self.time < self.reference_time:
            raise NtpError("invalid time reported")


def _diff(a: int, b: int) -> int:
    return ntp_duration(a) - ntp_duration(b)


def _rtt(org: int, rec: int, xmt: int, dst: int) -> int:
    return max(_diff(dst, org) - _diff(xmt, rec), 0)


def _offset(org: int, rec: int, xmt: int, dst: int) -> int:
    return _half(_diff(rec, org) + _diff(xmt, dst))


def _min_error(org: int, rec: int, xmt: int, dst: int) -> int:
    error0 = org - rec if org >= rec else 0
    error1 = xmt - dst if xmt >= dst else 0
    return ntp_duration(max(error0, error1))


def _to_interval(exponent: int) -> int:
    if exponent > 0:
        return _to_int64(SECOND << exponent) if exponent < 64 else 0
    if exponent < 0:
        return SECOND >> -exponent
    return SECOND


def _kiss_code(reference_id: int) -> str:
    raw = (reference_id & 0xFFFFFFFF).to_bytes(4, "big")
    if all(32 <= ch <= 126 for ch in raw):
        return raw.decode("ascii")
    return ""


def parse_time(message: Message, recv_time: int) -> Response:
    """Build a :class:`Response` from a server packet and the local receive time."""
    org, rec, xmt = message.origin_time, message.receive_time, message.transmit_time
    rtt = _rtt(org, rec, xmt, recv_time)
    root_delay = ntp_short_duration(message.root_delay)
    root_dispersion = ntp_short_duration(message.root_dispersion)
    return Response(
        time=ntp_time(xmt),
        clock_offset=_offset(org, rec, xmt, recv_time),
        rtt=rtt,
        precision=_to_interval(message.precision),
        stratum=message.stratum,
        reference_id=message.reference_id,
        reference_time=ntp_time(message.reference_time),
        root_delay=root_delay,
        root_dispersion=root_dispersion,
        root_distance=_half(rtt + root_delay) + root_dispersion,
        leap=message.leap(),
        min_error=_min_error(org, rec, xmt, recv_time),
        poll=_to_interval(message.poll),
        kiss_code=_kiss_code(message.reference_id) if message.stratum == 0 else "",
    )


def exchange(host: str, port: int = NTP_PORT, timeout: Optional[float] = DEFAULT_TIMEOUT) -> Response:
    """Query an NTP server once over UDP and return the parsed response."""
    family, sock_type, proto, _, address = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
    request = Message()
    request.set_mode(Mode.CLIENT)
    request.set_version(DEFAULT_NTP_VERSION)
    request.set_leap(LeapIndicator.NOT_IN_SYNC)
    # A random transmit time keeps the client clock private; the real one is kept locally.
    request.transmit_time = int.from_bytes(os.urandom(8), "big")

    with socket.socket(family, sock_type, proto) as sock:
        sock.settimeout(timeout)
        sock.connect(address)
        xmit_ns = time.time_ns()
        started = time.perf_counter_ns()
        sock.send(request.pack())
        data = sock.recv(1024)
        elapsed = time.perf_counter_ns() - started

    response = Message.unpack(data)
    recv_time = _ntp_from_unix_ns(xmit_ns + elapsed)
    response.origin_time = _ntp_from_unix_ns(xmit_ns)
    return parse_time(response, recv_time)