"""Sibling index ranges.

A range list is the compact form of a set of sibling indices under a single
parent: sorted, non-overlapping closed intervals where adjacent intervals are
always merged. The module-level functions operate on such lists in place;
``IndexRanges`` groups them per parent path.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterator
from dataclasses import dataclass

from .index_path import IndexPath


@dataclass(frozen=True)
class IndexRange:
    begin: int
    end: int

    def __post_init__(self):
        if self.begin < 0 or self.end < self.begin:
            raise ValueError(f"Invalid index range [{self.begin}, {self.end}]")

    @classmethod
    def single(cls, index: int) -> IndexRange:
        return cls(index, index)

    @property
    def count(self) -> int:
        return self.end - self.begin + 1

    def __contains__(self, index: int) -> bool:
        return self.begin <= index <= self.end


def _begin(r: IndexRange) -> int:
    return r.begin


def _end(r: IndexRange) -> int:
    return r.end


def contains(ranges: list[IndexRange] | None, index: int) -> bool:
    if not ranges:
        return False
    i = bisect_right(ranges, index, key=_begin) - 1
    return i >= 0 and ranges[i].end >= index


def add(ranges: list[IndexRange], rng: IndexRange, added: list[IndexRange] | None = None) -> int:
    """Merge ``rng`` into ``ranges``; return how many indexes were not already present."""
    lo = bisect_left(ranges, rng.begin - 1, key=_end)
    hi = bisect_right(ranges, rng.end + 1, key=_begin)
    touched = ranges[lo:hi]

    result = 0
    pos = rng.begin
    for r in touched:
        if r.begin > pos and pos <= rng.end:
            gap_end = min(r.begin - 1, rng.end)
            result += gap_end - pos + 1
            if added is not None:
                added.append(IndexRange(pos, gap_end))
        pos = max(pos, r.end + 1)
    if pos <= rng.end:
        result += rng.end - pos + 1
        if added is not None:
            added.append(IndexRange(pos, rng.end))

    begin = min(rng.begin, touched[0].begin) if touched else rng.begin
    end = max(rng.end, touched[-1].end) if touched else rng.end
    ranges[lo:hi] = [IndexRange(begin, end)]
    return result


def remove(ranges: list[IndexRange], rng: IndexRange, removed: list[IndexRange] | None = None) -> int:
    """Remove ``rng`` from ``ranges``, splitting as needed; return how many indexes were removed."""
    lo = bisect_left(ranges, rng.begin, key=_end)
    hi = bisect_right(ranges, rng.end, key=_begin)

    result = 0
    replacement: list[IndexRange] = []
    for r in ranges[lo:hi]:
        overlap_begin = max(r.begin, rng.begin)
        overlap_end = min(r.end, rng.end)
        result += overlap_end - overlap_begin + 1
        if removed is not None:
            removed.append(IndexRange(overlap_begin, overlap_end))
        if r.begin < rng.begin:
            replacement.append(IndexRange(r.begin, rng.begin - 1))
        if r.end > rng.end:
            replacement.append(IndexRange(rng.end + 1, r.end))
    ranges[lo:hi] = replacement
    return result


def get_count(ranges: list[IndexRange] | None) -> int:
    if not ranges:
        return 0
    return sum(r.count for r in ranges)


def get_at(ranges: list[IndexRange], n: int) -> int:
    """Map the ``n``-th selected ordinal back to its sibling index."""
    if n >= 0:
        for r in ranges:
            if n < r.count:
                return r.begin + n
            n -= r.count
    raise IndexError("Range ordinal out of range")


def iter_indexes(ranges: list[IndexRange] | None) -> Iterator[int]:
    for r in ranges or ():
        yield from range(r.begin, r.end + 1)


def intersect(ranges: list[IndexRange] | None, rng: IndexRange) -> list[IndexRange]:
    if not ranges:
        return []
    lo = bisect_left(ranges, rng.begin, key=_end)
    hi = bisect_right(ranges, rng.end, key=_begin)
    return [IndexRange(max(r.begin, rng.begin), min(r.end, rng.end)) for r in ranges[lo:hi]]


def shift(ranges: list[IndexRange], from_index: int, delta: int) -> list[IndexRange]:
    """Return ``ranges`` with every index >= ``from_index`` moved by ``delta``.

    A positive delta models an insertion at ``from_index`` and splits a range
    straddling it. A negative delta models removal of the window
    ``[from_index, from_index - delta - 1]``; indexes inside it are dropped.
    """
    if delta == 0:
        return list(ranges)
    remaining = list(ranges)
    if delta < 0:
        remove(remaining, IndexRange(from_index, from_index - delta - 1))

    result: list[IndexRange] = []
    for r in remaining:
        if r.end < from_index:
            add(result, r)
        elif r.begin >= from_index:
            add(result, IndexRange(r.begin + delta, r.end + delta))
        else:
            add(result, IndexRange(r.begin, from_index - 1))
            add(result, IndexRange(from_index + delta, r.end + delta))
    return result


class IndexRanges:
    """Selected or deselected leaves grouped by parent path."""

    def __init__(self):
        self._ranges: dict[IndexPath, list[IndexRange]] = {}

    def add(self, path: IndexPath) -> int:
        if not path:
            raise ValueError("Cannot add the root path to index ranges")
        return self.add_range(path.parent, IndexRange.single(path.leaf))

    def add_range(self, parent: IndexPath, rng: IndexRange) -> int:
        return add(self._ranges.setdefault(parent, []), rng)

    def remove(self, path: IndexPath) -> int:
        if not path:
            return 0
        return self.remove_range(path.parent, IndexRange.single(path.leaf))

    def remove_range(self, parent: IndexPath, rng: IndexRange) -> int:
        ranges = self._ranges.get(parent)
        if not ranges:
            return 0
        result = remove(ranges, rng)
        if not ranges:
            del self._ranges[parent]
        return result

    def contains(self, path: IndexPath) -> bool:
        if not path:
            return False
        return contains(self._ranges.get(path.parent), path.leaf)

    __contains__ = contains

    def get_ranges(self, parent: IndexPath) -> tuple[IndexRange, ...]:
        return tuple(self._ranges.get(parent, ()))

    def items(self) -> list[tuple[IndexPath, list[IndexRange]]]:
        return sorted(self._ranges.items(), key=lambda kv: kv[0])

    def __len__(self) -> int:
        return sum(get_count(r) for r in self._ranges.values())

    def __bool__(self) -> bool:
        return bool(self._ranges)

    def __iter__(self) -> Iterator[IndexPath]:
        for parent, ranges in self.items():
            for i in iter_indexes(ranges):
                yield parent.clone_with_child_index(i)

    def get_path_at(self, n: int) -> IndexPath:
        if n >= 0:
            for parent, ranges in self.items():
                count = get_count(ranges)
                if n < count:
                    return parent.clone_with_child_index(get_at(ranges, n))
                n -= count
        raise IndexError("Index ranges ordinal out of range")

    def shift(self, parent: IndexPath, from_index: int, delta: int) -> None:
        """Re-key leaves under ``parent`` and every descendant parent key."""
        if delta == 0:
            return
        depth = len(parent)
        rekeyed: dict[IndexPath, list[IndexRange]] = {}
        for key, ranges in self._ranges.items():
            if key == parent:
                ranges = shift(ranges, from_index, delta)
            elif parent.is_ancestor_of(key) and key[depth] >= from_index:
                if delta < 0 and key[depth] < from_index - delta:
                    continue
                key = key.shift(depth, delta)
            if ranges:
                rekeyed[key] = ranges
        self._ranges = rekeyed

    def discard_window(self, parent: IndexPath, window: IndexRange) -> None:
        """Drop leaves in ``window`` under ``parent`` together with their descendants."""
        self.remove_range(parent, window)
        depth = len(parent)
        for key in [k for k in self._ranges if parent.is_ancestor_of(k) and k[depth] in window]:
            del self._ranges[key]

    def __repr__(self) -> str:
        body = ", ".join(
            f"{parent!r}: [{', '.join(f'{r.begin}-{r.end}' for r in ranges)}]" for parent, ranges in self.items()
        )
        return f"IndexRanges({{{body}}})"
