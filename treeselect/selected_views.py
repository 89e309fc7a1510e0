"""Live read-only views of a model's current selection."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from itertools import islice


class _SelectionSequence(Sequence):
    def __init__(self, model):
        self._model = model

    def _iter(self) -> Iterator:
        raise NotImplementedError

    def __len__(self) -> int:
        return self._model.count

    def __iter__(self) -> Iterator:
        return self._iter()

    def __getitem__(self, index):
        if isinstance(index, slice):
            return list(self)[index]
        if index < 0:
            index += len(self)
        if index >= 0:
            for value in islice(self._iter(), index, None):
                return value
        raise IndexError("Selection index out of range")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


class SelectedIndexes(_SelectionSequence):
    """Selected paths in document order."""

    def _iter(self) -> Iterator:
        return self._model.root.iter_selected()


class SelectedItems(_SelectionSequence):
    """Items at the selected paths, in the same order as SelectedIndexes."""

    def _iter(self) -> Iterator:
        return self._model.root.iter_selected_items()
