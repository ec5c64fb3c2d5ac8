import ipaddress
import socket
from collections import namedtuple
from unittest import mock

import pytest

from singlib import network
from singlib.network import (
    DEFAULT_HEADROOM,
    calculate_front_headroom,
    calculate_mtu,
    calculate_rear_headroom,
    is_public_addr,
    is_safe_packet_reader,
    is_safe_reader,
    is_unsafe_writer,
    is_virtual,
    local_addrs,
    local_public_addrs,
    network_name,
    unwrap_packet_reader,
    unwrap_packet_writer,
    unwrap_reader,
    unwrap_writer,
)

FakeAddr = namedtuple("FakeAddr", "family address netmask broadcast ptp")


class PlainReader:
    def read(self, size=-1):
        return b""


class PlainWriter:
    def write(self, data):
        return len(data)


class PlainPacketReader:
    def read_packet(self, buffer):
        return None


class PlainPacketWriter:
    def write_packet(self, buffer, destination):
        return None


class Wrapper:
    def __init__(self, inner, replaceable=True):
        self.inner = inner
        self.replaceable = replaceable

    def read(self, size=-1):
        return b""

    def write(self, data):
        return len(data)

    def read_packet(self, buffer):
        return None

    def write_packet(self, buffer, destination):
        return None

    def reader_replaceable(self):
        return self.replaceable

    def writer_replaceable(self):
        return self.replaceable

    def upstream(self):
        return self.inner


class ReplaceableNoUpstream:
    def read(self, size=-1):
        return b""

    def write(self, data):
        return len(data)

    def reader_replaceable(self):
        return True

    def writer_replaceable(self):
        return True


class SafeReader:
    def read_buffer_thread_safe(self):
        return b""


class SafePacketReader:
    def read_packet_thread_safe(self):
        return None


class UnsafeWriter:
    def write_is_thread_unsafe(self):
        pass


class Headroom:
    def __init__(self, front, rear, inner=None):
        self.front = front
        self.rear = rear
        self.inner = inner

    def front_headroom(self):
        return self.front

    def rear_headroom(self):
        return self.rear

    def upstream_writer(self):
        return self.inner


class Lazy:
    def __init__(self, inner=None):
        self.inner = inner

    def lazy_headroom(self):
        return True

    def upstream(self):
        return self.inner


class MTUReader:
    def __init__(self, mtu, inner=None):
        self.mtu = mtu
        self.inner = inner

    def reader_mtu(self):
        return self.mtu

    def upstream_reader(self):
        return self.inner


class MTUWriter:
    def __init__(self, mtu, inner=None):
        self.mtu = mtu
        self.inner = inner

    def writer_mtu(self):
        return self.mtu

    def upstream(self):
        return self.inner


@pytest.mark.parametrize(
    "name,expected",
    [
        ("tcp", "tcp"),
        ("tcp4", "tcp"),
        ("tcp6", "tcp"),
        ("udp", "udp"),
        ("udp6", "udp"),
        ("ip4", "ip"),
        ("icmpv4", "icmpv4"),
        ("unix", "unix"),
    ],
)
def test_network_name(name, expected):
    assert network_name(name) == expected


def test_unwrap_reader_follows_replaceable_chain():
    inner = PlainReader()
    outer = Wrapper(Wrapper(inner))
    assert unwrap_reader(outer) is inner


def test_unwrap_reader_stops_at_non_replaceable():
    middle = Wrapper(PlainReader(), replaceable=False)
    assert unwrap_reader(Wrapper(middle)) is middle


def test_unwrap_reader_without_upstream_raises():
    with pytest.raises(ValueError):
        unwrap_reader(ReplaceableNoUpstream())


def test_unwrap_writer_follows_chain():
    inner = PlainWriter()
    assert unwrap_writer(Wrapper(inner)) is inner


def test_unwrap_writer_without_upstream_raises():
    with pytest.raises(ValueError):
        unwrap_writer(ReplaceableNoUpstream())


def test_unwrap_packet_reader_and_writer():
    packet_reader = PlainPacketReader()
    packet_writer = PlainPacketWriter()
    assert unwrap_packet_reader(Wrapper(packet_reader)) is packet_reader
    assert unwrap_packet_writer(Wrapper(packet_writer)) is packet_writer


def test_unwrap_packet_reader_rejects_wrong_upstream():
    with pytest.raises(TypeError):
        unwrap_packet_reader(Wrapper(PlainWriter()))


def test_is_unsafe_writer():
    assert is_unsafe_writer(Wrapper(UnsafeWriter())) is True
    assert is_unsafe_writer(Wrapper(PlainWriter())) is False


def test_is_safe_reader():
    safe = SafeReader()
    assert is_safe_reader(Wrapper(safe)) is safe
    assert is_safe_reader(Wrapper(safe, replaceable=False)) is None
    assert is_safe_reader(PlainReader()) is None


def test_is_safe_packet_reader():
    safe = SafePacketReader()
    assert is_safe_packet_reader(safe) is safe
    assert is_safe_packet_reader(Wrapper(Wrapper(safe))) is safe
    assert is_safe_packet_reader(Wrapper(PlainPacketReader())) is None


def test_headroom_sums_chain():
    front_a, front_b, rear_a, rear_b = 10, 20, 3, 4
    chain = Headroom(front_a, rear_a, Headroom(front_b, rear_b))
    assert calculate_front_headroom(chain) == front_a + front_b
    assert calculate_rear_headroom(chain) == rear_a + rear_b


def test_headroom_none_is_zero():
    assert calculate_front_headroom(None) == 0
    assert calculate_rear_headroom(PlainWriter()) == 0


def test_lazy_headroom_returns_default():
    chain = Headroom(5, 5, Lazy())
    assert calculate_front_headroom(chain) == DEFAULT_HEADROOM
    assert calculate_rear_headroom(chain) == DEFAULT_HEADROOM


def test_mtu_reader_larger_wins():
    assert calculate_mtu(MTUReader(1500), MTUWriter(1400), 65535) == 1500


def test_mtu_writer_takes_smallest_positive():
    writer = MTUWriter(1500, MTUWriter(1400, MTUWriter(0)))
    assert calculate_mtu(None, writer, 65535) == 1400


def test_mtu_reader_takes_largest():
    reader = MTUReader(1400, MTUReader(1500))
    assert calculate_mtu(reader, None, 65535) == 1500


def test_mtu_writer_over_buffer_size_is_zero():
    assert calculate_mtu(None, MTUWriter(9000), 4096) == 0


def test_mtu_lazy_is_zero():
    assert calculate_mtu(Lazy(MTUReader(1500)), Lazy(MTUWriter(1400)), 65535) == 0


@pytest.mark.parametrize(
    "addr,expected",
    [
        ("8.8.8.8", True),
        ("100.64.0.1", True),
        ("172.32.0.1", True),
        ("2001:db8::1", True),
        ("10.0.0.1", False),
        ("172.16.5.4", False),
        ("192.168.1.1", False),
        ("127.0.0.1", False),
        ("::1", False),
        ("fe80::1", False),
        ("169.254.1.1", False),
        ("224.0.0.1", False),
        ("ff02::1", False),
        ("fd00::1", False),
        ("0.0.0.0", False),
        ("::", False),
    ],
)
def test_is_public_addr(addr, expected):
    assert is_public_addr(addr) is expected
    assert is_public_addr(ipaddress.ip_address(addr)) is expected


@pytest.mark.parametrize(
    "addr,expected",
    [
        ("127.0.0.1", True),
        ("::1", True),
        ("224.0.0.1", True),
        ("ff01::1", True),
        ("10.0.0.1", False),
        ("8.8.8.8", False),
    ],
)
def test_is_virtual(addr, expected):
    assert is_virtual(addr) is expected


def test_is_public_addr_rejects_garbage():
    with pytest.raises(ValueError):
        is_public_addr("not-an-address")


_FAKE_INTERFACES = {
    "lo": [
        FakeAddr(socket.AF_INET, "127.0.0.1", None, None, None),
        FakeAddr(socket.AF_INET6, "::1", None, None, None),
    ],
    "eth0": [
        FakeAddr(socket.AF_INET, "203.0.113.7", None, None, None),
        FakeAddr(socket.AF_INET6, "fe80::1%eth0", None, None, None),
        FakeAddr(-1, "00:00:00:00:00:00", None, None, None),
    ],
}


@mock.patch("psutil.net_if_addrs", return_value=_FAKE_INTERFACES)
def test_local_addrs(_patched):
    addrs = local_addrs()
    assert set(addrs) == {
        ipaddress.ip_address("127.0.0.1"),
        ipaddress.ip_address("::1"),
        ipaddress.ip_address("203.0.113.7"),
        ipaddress.ip_address("fe80::1"),
    }


@mock.patch("psutil.net_if_addrs", return_value=_FAKE_INTERFACES)
def test_local_public_addrs(_patched):
    assert local_public_addrs() == [ipaddress.ip_address("203.0.113.7")]


def test_network_constants_match_names():
    assert network_name(network.NETWORK_TCP + "4") == network.NETWORK_TCP
    assert network_name(network.NETWORK_UDP + "6") == network.NETWORK_UDP