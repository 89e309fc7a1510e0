"""Observable indexable view over an item collection.

Selection nodes listen to ``collectionChanged`` to keep selected sibling
indexes in step with insertions, removals and resets of the items they mirror.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal

ADD = "add"
REMOVE = "remove"
REPLACE = "replace"
RESET = "reset"


@dataclass(frozen=True)
class CollectionChange:
    action: str
    index: int = 0
    new_items: tuple = ()
    old_items: tuple = ()


class ItemsView(QObject):
    collectionChanged = Signal(object)  # CollectionChange

    def __init__(self, items: Iterable | None = None, parent=None):
        super().__init__(parent)
        if items is None:
            items = []
        # lists are wrapped in place so existing references stay live
        self._items: list = items if isinstance(items, list) else list(items)

    @classmethod
    def get_or_create(cls, source) -> ItemsView | None:
        if source is None or isinstance(source, ItemsView):
            return source
        return cls(source)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int):
        return self._items[index]

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ItemsView({self._items!r})"

    @property
    def count(self) -> int:
        return len(self._items)

    def index_of(self, item) -> int:
        try:
            return self._items.index(item)
        except ValueError:
            return -1

    def insert(self, index: int, *items) -> None:
        if not items:
            return
        if index < 0 or index > len(self._items):
            raise IndexError(f"Insert index {index} out of range")
        self._items[index:index] = items
        self._emit(CollectionChange(ADD, index, new_items=tuple(items)))

    def append(self, item) -> None:
        self.insert(len(self._items), item)

    def extend(self, items: Sequence) -> None:
        self.insert(len(self._items), *items)

    def remove_at(self, index: int, count: int = 1) -> None:
        if count <= 0:
            return
        if index < 0 or index + count > len(self._items):
            raise IndexError(f"Remove range [{index}, {index + count}) out of range")
        old = tuple(self._items[index : index + count])
        del self._items[index : index + count]
        self._emit(CollectionChange(REMOVE, index, old_items=old))

    def remove(self, item) -> None:
        index = self.index_of(item)
        if index < 0:
            raise ValueError(f"{item!r} not in view")
        self.remove_at(index)

    def replace(self, index: int, item) -> None:
        old = self._items[index]
        self._items[index] = item
        self._emit(CollectionChange(REPLACE, index, new_items=(item,), old_items=(old,)))

    def reset(self, items: Iterable) -> None:
        old = tuple(self._items)
        self._items[:] = list(items)
        self._emit(CollectionChange(RESET, 0, new_items=tuple(self._items), old_items=old))

    def _emit(self, change: CollectionChange) -> None:
        logging.debug(
            "[items_view] %s at %d (+%d/-%d)",
            change.action,
            change.index,
            len(change.new_items),
            len(change.old_items),
        )
        self.collectionChanged.emit(change)


def resolve_path(items, path, children) -> tuple[bool, object]:
    """Walk ``path`` from ``items`` using the ``children`` accessor.

    Returns ``(True, item)`` when every component is in range, ``(False, None)``
    as soon as an index is out of range or a level has no children.
    """
    depth = len(path)
    if depth == 0:
        return False, None
    for level, i in enumerate(path):
        if items is None or i >= len(items):
            return False, None
        if level == depth - 1:
            return True, items[i]
        items = children(items[i])
    return False, None
