"""Sparse mirror of the item tree holding selection state.

Nodes exist only where a selected leaf or a materialized descendant needs
them. Each node owns the selected sibling ranges of its children collection
and listens to that collection's ItemsView for structural changes.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Iterator

from . import index_range
from .index_path import IndexPath
from .index_range import IndexRange
from .items_view import ADD, REMOVE, REPLACE, RESET, CollectionChange, ItemsView


class SelectionNode:
    def __init__(self, owner, parent: SelectionNode | None, path: IndexPath, source=None):
        self._owner = owner
        self._parent = parent
        self.path = path
        self.ranges: list[IndexRange] = []
        self._children: list[SelectionNode | None] | None = None
        self._items_view: ItemsView | None = None
        self.source = source

    @property
    def parent(self) -> SelectionNode | None:
        return self._parent

    @property
    def source(self) -> ItemsView | None:
        return self._items_view

    @source.setter
    def source(self, value):
        view = ItemsView.get_or_create(value)
        if view is self._items_view:
            return
        self._disconnect()
        self._items_view = view
        if view is not None:
            view.collectionChanged.connect(self._on_collection_changed)

    @property
    def children(self) -> tuple[SelectionNode | None, ...]:
        return tuple(self._children or ())

    def get_child(self, index: int) -> SelectionNode | None:
        if self._children is None or index >= len(self._children):
            return None
        return self._children[index]

    def get_or_create_child(self, index: int) -> SelectionNode | None:
        view = self._items_view
        if view is None or index < 0 or index >= len(view):
            return None
        if self._children is None:
            self._children = []
        if index >= len(self._children):
            self._children.extend([None] * (index + 1 - len(self._children)))
        child = self._children[index]
        if child is None:
            child = SelectionNode(
                self._owner,
                self,
                self.path.clone_with_child_index(index),
                self._owner.get_children(view[index]),
            )
            self._children[index] = child
        return child

    def remove_child(self, index: int) -> None:
        child = self.get_child(index)
        if child is None:
            return
        self._children[index] = None
        child.dispose()
        self._trim_children()

    def is_empty(self) -> bool:
        return not self.ranges and not any(c is not None for c in self._children or ())

    def selected_count(self) -> int:
        result = index_range.get_count(self.ranges)
        for child in self._children or ():
            if child is not None:
                result += child.selected_count()
        return result

    def commit_select(self, rng: IndexRange) -> int:
        view = self._items_view
        if view is None or rng.begin >= len(view):
            return 0
        if rng.end >= len(view):
            rng = IndexRange(rng.begin, len(view) - 1)
        return index_range.add(self.ranges, rng)

    def commit_deselect(self, rng: IndexRange) -> int:
        return index_range.remove(self.ranges, rng)

    def drop_range(self, rng: IndexRange) -> int:
        """Forget selected leaves whose items no longer exist."""
        return index_range.remove(self.ranges, rng)

    def collect_selected(self, window: IndexRange) -> tuple[int, list]:
        """Count and items of the selection held inside ``window``, descendants included."""
        view = self._items_view
        count = 0
        items = []
        for rng in index_range.intersect(self.ranges, window):
            count += rng.count
            if view is not None:
                items.extend(view[i] for i in range(rng.begin, min(rng.end + 1, len(view))))
        for i, child in enumerate(self._children or ()):
            if child is not None and i in window:
                count += child.selected_count()
                items.extend(child.iter_selected_items())
        return count, items

    def clear(self, operation) -> None:
        """Record every selected leaf of this subtree as pending deselection."""
        if self.ranges:
            deselected = operation.ensure_deselected_ranges()
            for rng in self.ranges:
                deselected.add_range(self.path, rng)
        for child in self._children or ():
            if child is not None:
                child.clear(operation)

    def reset(self) -> None:
        self.ranges = []
        self._release_children()

    def shift_indexes(self, from_index: int, delta: int) -> None:
        if delta == 0:
            return
        self.ranges = index_range.shift(self.ranges, from_index, delta)
        children = self._children
        if not children or from_index >= len(children):
            return
        if delta > 0:
            children[from_index:from_index] = [None] * delta
        else:
            removed = children[from_index : from_index - delta]
            del children[from_index : from_index - delta]
            for child in removed:
                if child is not None:
                    child.dispose()
        for i in range(from_index, len(children)):
            child = children[i]
            if child is not None:
                child._set_path(self.path.clone_with_child_index(i))
        self._trim_children()

    def iter_selected(self) -> Iterator[IndexPath]:
        """Selected paths of this subtree in document order."""
        for node, i in self._walk():
            yield node.path.clone_with_child_index(i)

    def iter_selected_items(self) -> Iterator:
        for node, i in self._walk():
            view = node._items_view
            if view is not None and i < len(view):
                yield view[i]

    def dispose(self) -> None:
        self._disconnect()
        self._items_view = None
        self._release_children()

    def _walk(self) -> Iterator[tuple[SelectionNode, int]]:
        children = self._children or []
        leaves = ((i, 0) for i in index_range.iter_indexes(self.ranges))
        subtrees = ((i, 1) for i, child in enumerate(children) if child is not None)
        # a leaf sorts before its own descendants
        for i, kind in heapq.merge(leaves, subtrees):
            if kind == 0:
                yield self, i
            else:
                yield from children[i]._walk()

    def _set_path(self, path: IndexPath) -> None:
        self.path = path
        for i, child in enumerate(self._children or ()):
            if child is not None:
                child._set_path(path.clone_with_child_index(i))

    def _release_children(self, window: IndexRange | None = None) -> None:
        if not self._children:
            self._children = None
            return
        for i, child in enumerate(self._children):
            if child is not None and (window is None or i in window):
                self._children[i] = None
                child.dispose()
        self._trim_children()

    def _trim_children(self) -> None:
        children = self._children
        if children is None:
            return
        while children and children[-1] is None:
            children.pop()
        if not children:
            self._children = None

    def _disconnect(self) -> None:
        if self._items_view is not None:
            self._items_view.collectionChanged.disconnect(self._on_collection_changed)

    def _collect_removed(self, start: int, old_items: tuple) -> list:
        removed = []
        for offset, item in enumerate(old_items):
            i = start + offset
            if index_range.contains(self.ranges, i):
                removed.append(item)
            child = self.get_child(i)
            if child is not None:
                removed.extend(child.iter_selected_items())
        return removed

    def _on_collection_changed(self, change: CollectionChange) -> None:
        owner = self._owner
        logging.debug("[selection_node] %s under %r at %d", change.action, self.path, change.index)

        if change.action == ADD:
            owner.on_indexes_changed(self.path, change.index, len(change.new_items))
        elif change.action == REMOVE:
            count = len(change.old_items)
            removed = self._collect_removed(change.index, change.old_items)
            with owner.batch_update():
                if removed:
                    owner.on_selection_removed(self.path, change.index, count, removed)
                owner.on_indexes_changed(self.path, change.index, -count)
        elif change.action == REPLACE:
            count = len(change.old_items)
            removed = self._collect_removed(change.index, change.old_items)
            with owner.batch_update():
                self._release_children(IndexRange(change.index, change.index + count - 1))
                if removed:
                    owner.on_selection_removed(self.path, change.index, count, removed)
        elif change.action == RESET:
            removed = self._collect_removed(0, change.old_items)
            with owner.batch_update():
                self._release_children()
                owner.on_selection_removed(self.path, 0, len(change.old_items), removed)
                self.ranges = []
