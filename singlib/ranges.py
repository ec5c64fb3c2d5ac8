"""Inclusive integer ranges: merging, complementing and excluding."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, List

__all__ = ["Range", "merge", "revert", "exclude"]


@dataclass(frozen=True)
class Range:
    """An inclusive range ``[start, end]``."""

    start: int
    end: int

    @classmethod
    def single(cls, index: int) -> "Range":
        """A range holding exactly one value."""
        return cls(index, index)


def merge(ranges: Iterable[Range]) -> List[Range]:
    """Sort ranges by start and join those that overlap or touch."""
    ordered = sorted(ranges, key=lambda r: r.start)
    if not ordered:
        return []
    merged = [ordered[0]]
    for r in ordered[1:]:
        last = merged[-1]
        if r.start > last.end + 1:
            merged.append(r)
        elif r.end > last.end:
            merged[-1] = Range(last.start, r.end)
    return merged


def revert(start: int, end: int, ranges: Iterable[Range]) -> List[Range]:
    """Return the parts of ``[start, end]`` not covered by ``ranges``.

    An empty ``ranges`` yields an empty result.
    """
    merged = merge(ranges)
    if not merged:
        return []
    reverted: List[Range] = []
    if merged[0].start > start:
        reverted.append(Range(start, merged[0].start - 1))
    range_end = merged[0].end
    for r in merged[1:]:
        if r.start > range_end + 1:
            reverted.append(Range(range_end + 1, r.start - 1))
        range_end = r.end
    if end > range_end:
        reverted.append(Range(range_end + 1, end))
    return reverted


def exclude(ranges: Iterable[Range], target_ranges: Iterable[Range]) -> List[Range]:
    """Remove every value covered by ``target_ranges`` from ``ranges``."""
    remaining = deque(merge(ranges))
    if not remaining:
        return []
    targets = deque(merge(target_ranges))
    if not targets:
        return list(remaining)

    result: List[Range] = []
    current = remaining.popleft()
    range_end = current.end
    index = current.start
    target = targets.popleft()

    while True:
        if target.start > range_end:
            if index <= range_end:
                result.append(Range(index, range_end))
            if not remaining:
                break
            current = remaining.popleft()
            range_end = current.end
            index = current.start
            continue
        if target.start > index:
            result.append(Range(index, target.start - 1))
            index = target.start + 1
        if target.end <= range_end:
            index = max(index, target.end + 1)
            if not targets:
                break
            target = targets.popleft()
        else:
            # The target swallows the rest of this range; move on to the next.
            index = range_end + 1
            if not remaining:
                break
            current = remaining.popleft()
            range_end = current.end
            index = current.start

    if index <= range_end:
        result.append(Range(index, range_end))
    result.extend(remaining)
    return merge(result)