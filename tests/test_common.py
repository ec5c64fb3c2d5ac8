import pytest

from singlib.common import (
    cast,
    must_cast,
    substring_after,
    substring_after_last,
    substring_before,
    substring_before_last,
    substring_between,
)


class Inner:
    pass


class Other:
    pass


class Wrapper:
    def __init__(self, inner):
        self._inner = inner

    def upstream(self):
        return self._inner


def test_first_separator_split_reassembles():
    s = "a=b=c"
    before = substring_before(s, "=")
    after = substring_after(s, "=")
    assert before + "=" + after == s
    assert "=" not in before


def test_last_separator_split_reassembles():
    s = "a=b=c"
    before = substring_before_last(s, "=")
    after = substring_after_last(s, "=")
    assert before + "=" + after == s
    assert "=" not in after


def test_first_and_last_differ_when_separator_repeats():
    s = "x/y/z"
    assert len(substring_after(s, "/")) > len(substring_after_last(s, "/"))
    assert len(substring_before(s, "/")) < len(substring_before_last(s, "/"))


@pytest.mark.parametrize(
    "func",
    [substring_after, substring_after_last, substring_before, substring_before_last],
)
def test_missing_separator_returns_input(func):
    assert func("no separator here", "#") == "no separator here"


def test_empty_separator():
    assert substring_after("abc", "") == "abc"
    assert substring_before("abc", "") == ""


def test_substring_between():
    assert substring_between("key=[value]", "[", "]") == "value"


def test_substring_between_missing_markers():
    assert substring_between("plain", "<", ">") == "plain"


def test_cast_direct_match():
    obj = Inner()
    assert cast(obj, Inner) is obj


def test_cast_follows_upstream_chain():
    inner = Inner()
    wrapped = Wrapper(Wrapper(inner))
    assert cast(wrapped, Inner) is inner


def test_cast_prefers_outermost_match():
    outer = Wrapper(Wrapper(Inner()))
    assert cast(outer, Wrapper) is outer


def test_cast_no_match_returns_none():
    assert cast(Wrapper(Inner()), Other) is None


def test_must_cast_returns_match():
    inner = Inner()
    assert must_cast(Wrapper(inner), Inner) is inner


def test_must_cast_raises():
    with pytest.raises(TypeError):
        must_cast(Inner(), Other)