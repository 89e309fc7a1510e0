"""Payloads carried by TreeSelectionModel signals."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .index_path import IndexPath
from .index_range import IndexRanges


class ChangedItems(Sequence):
    """Items of a set of changed paths, resolved on access.

    Paths are resolved against the model's current source, so the sequence
    should be read while handling the notification. Items that can no longer
    be reached by path (explicitly removed ones) are appended after them.
    """

    def __init__(self, model, ranges: IndexRanges | None, removed_items=()):
        self._model = model
        self._ranges = ranges if ranges is not None else IndexRanges()
        self._removed = list(removed_items)

    def __len__(self) -> int:
        return len(self._ranges) + len(self._removed)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        size = len(self)
        if index < 0:
            index += size
        if index < 0 or index >= size:
            raise IndexError("Changed item index out of range")
        count = len(self._ranges)
        if index < count:
            return self._resolve(self._ranges.get_path_at(index))
        return self._removed[index - count]

    def __iter__(self) -> Iterator:
        for path in self._ranges:
            yield self._resolve(path)
        yield from self._removed

    def __repr__(self) -> str:
        return f"ChangedItems({list(self)!r})"

    def _resolve(self, path: IndexPath):
        _, item = self._model.try_get_item_at(path)
        return item


@dataclass(frozen=True)
class SelectionChangedEventArgs:
    deselected_indexes: IndexRanges = field(default_factory=IndexRanges)
    selected_indexes: IndexRanges = field(default_factory=IndexRanges)
    deselected_items: Sequence = ()
    selected_items: Sequence = ()


@dataclass(frozen=True)
class IndexesChangedEventArgs:
    parent_index: IndexPath
    shift_index: int
    shift_delta: int
