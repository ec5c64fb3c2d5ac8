import pytest

from singlib.ranges import Range, exclude, merge, revert


def R(*pairs):
    return [Range(a, b) for a, b in pairs]


@pytest.mark.parametrize(
    "start,end,ranges,expected",
    [
        (0, 10, R((0, 1)), R((2, 10))),
        (0, 10, R((9, 10)), R((0, 8))),
        (0, 10, R((0, 1), (9, 10)), R((2, 8))),
        (0, 10, R((2, 4), (6, 8)), R((0, 1), (5, 5), (9, 10))),
        (0, 10, R((2, 4), (8, 9)), R((0, 1), (5, 7), (10, 10))),
    ],
)
def test_revert_ranges(start, end, ranges, expected):
    assert revert(start, end, ranges) == expected


def test_revert_empty_input():
    assert revert(0, 10, []) == []


@pytest.mark.parametrize(
    "ranges,expected",
    [
        (R((0, 1), (1, 2)), R((0, 2))),
        (R((0, 3), (5, 7), (8, 9), (10, 10)), R((0, 3), (5, 10))),
        (R((1, 3), (2, 6), (8, 10), (15, 18)), R((1, 6), (8, 10), (15, 18))),
        (R((1, 3), (2, 7), (2, 6)), R((1, 7))),
        (R((1, 3), (2, 6), (2, 7)), R((1, 7))),
    ],
)
def test_merge_ranges(ranges, expected):
    assert merge(ranges) == expected


def test_merge_empty():
    assert merge([]) == []


def test_merge_does_not_modify_input():
    ranges = R((5, 7), (0, 3))
    merge(ranges)
    assert ranges == R((5, 7), (0, 3))


@pytest.mark.parametrize(
    "ranges,excluded,expected",
    [
        (
            R((0, 100)),
            R((0, 10), (20, 30), (55, 55)),
            R((11, 19), (31, 54), (56, 100)),
        ),
        (
            R((0, 100), (200, 300)),
            R((0, 10), (20, 30), (55, 55), (250, 250), (299, 299)),
            R((11, 19), (31, 54), (56, 100), (200, 249), (251, 298), (300, 300)),
        ),
    ],
)
def test_exclude_ranges(ranges, excluded, expected):
    assert exclude(ranges, excluded) == expected


def test_exclude_nothing_returns_merged_input():
    assert exclude(R((0, 3), (2, 6)), []) == merge(R((0, 3), (2, 6)))


def test_exclude_from_empty():
    assert exclude([], R((0, 1))) == []


def test_exclude_result_is_disjoint_from_targets():
    ranges = R((0, 50), (60, 80))
    targets = R((5, 55), (70, 90))
    result = exclude(ranges, targets)
    kept = {v for r in result for v in range(r.start, r.end + 1)}
    removed = {v for r in targets for v in range(r.start, r.end + 1)}
    original = {v for r in ranges for v in range(r.start, r.end + 1)}
    assert kept == original - removed


def test_single():
    assert Range.single(7) == Range(7, 7)