import pytest

from singlib.replay import Filter, SimpleFilter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_filter_is_abstract():
    with pytest.raises(TypeError):
        Filter()


def test_repeated_salt_rejected():
    clock = FakeClock()
    replay_filter = SimpleFilter(10, clock=clock)
    assert replay_filter.check(b"a") is True
    assert replay_filter.check(b"a") is False
    assert replay_filter.check(b"b") is True
    clock.now = 5
    assert replay_filter.check(b"a") is False


def test_salt_accepted_after_cleanup():
    clock = FakeClock()
    replay_filter = SimpleFilter(10, clock=clock)
    assert replay_filter.check(b"a") is True
    clock.now = 11
    assert replay_filter.check(b"a") is True
    assert replay_filter.check(b"a") is False


def test_expired_entry_without_cleanup():
    clock = FakeClock()
    replay_filter = SimpleFilter(10, clock=clock)
    clock.now = 5
    assert replay_filter.check(b"x") is True
    clock.now = 11
    assert replay_filter.check(b"y") is True
    clock.now = 16
    assert replay_filter.check(b"x") is True
    assert replay_filter.check(b"x") is False


def test_accepts_bytearray():
    replay_filter = SimpleFilter(10, clock=FakeClock())
    assert replay_filter.check(bytearray(b"salt")) is True
    assert replay_filter.check(b"salt") is False