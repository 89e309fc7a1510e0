"""Hierarchical index paths.

An IndexPath locates a node from the (synthetic) tree root as a sequence of
sibling indices. The empty path is the root and doubles as the "unset" value
used by the selection model, so it is falsy.
"""

from __future__ import annotations

from collections.abc import Iterator


class IndexPath:
    __slots__ = ("_indexes",)

    def __init__(self, *indexes: int):
        for i in indexes:
            if not isinstance(i, int) or isinstance(i, bool) or i < 0:
                raise ValueError(f"Index path components must be non-negative ints, got {i!r}")
        self._indexes: tuple[int, ...] = tuple(indexes)

    @classmethod
    def from_sequence(cls, indexes) -> IndexPath:
        return cls(*indexes)

    def __len__(self) -> int:
        return len(self._indexes)

    def __getitem__(self, depth: int) -> int:
        try:
            return self._indexes[depth]
        except IndexError:
            raise IndexError(f"Depth {depth} is out of range for {self!r}") from None

    def __iter__(self) -> Iterator[int]:
        return iter(self._indexes)

    def __eq__(self, other) -> bool:
        if isinstance(other, IndexPath):
            return self._indexes == other._indexes
        return NotImplemented

    def __lt__(self, other: IndexPath) -> bool:
        # tuple order is depth-first pre-order: a parent sorts before its children
        return self._indexes < other._indexes

    def __le__(self, other: IndexPath) -> bool:
        return self._indexes <= other._indexes

    def __hash__(self) -> int:
        return hash(self._indexes)

    def __repr__(self) -> str:
        return f"IndexPath({', '.join(str(i) for i in self._indexes)})"

    @property
    def indexes(self) -> tuple[int, ...]:
        return self._indexes

    @property
    def parent(self) -> IndexPath:
        if not self._indexes:
            return self
        return IndexPath(*self._indexes[:-1])

    @property
    def leaf(self) -> int | None:
        return self._indexes[-1] if self._indexes else None

    def is_ancestor_of(self, other: IndexPath) -> bool:
        """True if this path is a strict prefix of ``other``."""
        n = len(self._indexes)
        return len(other._indexes) > n and other._indexes[:n] == self._indexes

    def clone_with_child_index(self, index: int) -> IndexPath:
        return IndexPath(*self._indexes, index)

    def shift(self, depth: int, delta: int) -> IndexPath:
        """Return a copy with the component at ``depth`` moved by ``delta``."""
        indexes = list(self._indexes)
        indexes[depth] += delta
        return IndexPath(*indexes)


DEFAULT_PATH = IndexPath()
